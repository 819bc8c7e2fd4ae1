# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
gokrazy update protocol definitions and decoding.

This module defines the feature names, upload destinations and device
metadata exchanged with the update handlers of a gokrazy device, and the
decoders for the bodies the device sends back.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from .errors import DecodeError

# Request header naming the upload checksum algorithm
UPDATE_HASH_HEADER = "X-Gokrazy-Update-Hash"

JSON_MIME = "application/json"
TEXT_PLAIN_MIME = "text/plain"

# Devices without a handler for a destination reply with their HTML UI
HTML_DOCTYPE = b"<!DOCTYPE html>"


class ProtocolFeature(str, Enum):
    """
    Optional update protocol features.

    Older gokrazy installations may lack any of these.
    """
    # cmdline.txt uses PARTUUID= instead of device paths, so the device is
    # ready to accept a root image that uses PARTUUID too
    PARTUUID = "partuuid"
    # X-Gokrazy-Update-Hash is understood, at least with the crc32 value
    UPDATE_HASH = "updatehash"

    def __str__(self) -> str:
        return self.value


class Destination(str, Enum):
    """Upload destinations below update/."""
    # Directly onto the root block device
    MBR = "mbr"
    # The currently inactive root partition
    ROOT = "root"
    # The boot partition
    BOOT = "boot"
    # The boot partition, keeping the currently active root active
    BOOTONLY = "bootonly"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class EEPROMVersion:
    """
    Signatures of the Raspberry Pi EEPROM files (pieeprom.sig, vl805.sig).

    The signatures are hexadecimal sha256 sums, but treat them as opaque
    strings and only compare them.
    """
    pieeprom_sha256: str = ""
    vl805_sha256: str = ""

    @property
    def is_zero(self) -> bool:
        return not self.pieeprom_sha256 and not self.vl805_sha256

    @classmethod
    def from_json(cls, obj: Optional[dict]) -> "EEPROMVersion":
        """
        Build from the EEPROM object of a device response.

        Raises:
            DecodeError: If the object or its fields have the wrong type
        """
        if obj is None:
            return cls()
        if not isinstance(obj, dict):
            raise DecodeError(f"EEPROM: expected object, got {type(obj).__name__}")
        pieeprom = _field(obj, "PieepromSHA256")
        vl805 = _field(obj, "VL805SHA256")
        return cls(pieeprom_sha256=pieeprom, vl805_sha256=vl805)


def _lookup(obj: dict, name: str):
    # Keys match case-insensitively, as the device's encoder does; an exact
    # match wins over a differently cased one
    if name in obj:
        return obj[name]
    for key, value in obj.items():
        if key.lower() == name.lower():
            return value
    return None


def _field(obj: dict, name: str) -> str:
    value = _lookup(obj, name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"EEPROM.{name}: expected string, got {type(value).__name__}")
    return value


def parse_features(text: str) -> FrozenSet[str]:
    """
    Parse a comma-separated feature list.

    Entries are stripped of surrounding whitespace; order, duplicates and
    empty entries are dropped.
    """
    return frozenset(f.strip() for f in text.split(",") if f.strip())


def _decode_object(body: bytes, what: str) -> dict:
    try:
        obj = json.loads(body)
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(f"decoding {what}: {e}") from e
    if not isinstance(obj, dict):
        raise DecodeError(f"decoding {what}: expected object, got {type(obj).__name__}")
    return obj


def decode_features_response(body: bytes) -> Tuple[FrozenSet[str], EEPROMVersion]:
    """
    Decode the JSON reply of update/features.

    Args:
        body: {"features": "<comma-separated>", "EEPROM": {...}}

    Returns:
        (features, eeprom)

    Raises:
        DecodeError: If the body is malformed
    """
    obj = _decode_object(body, "features response")
    features = _lookup(obj, "features") or ""
    if not isinstance(features, str):
        raise DecodeError(f"features: expected string, got {type(features).__name__}")
    return parse_features(features), EEPROMVersion.from_json(_lookup(obj, "EEPROM"))


def decode_status_response(body: bytes) -> EEPROMVersion:
    """
    Decode the EEPROM version from the JSON status page.

    Raises:
        DecodeError: If the body is malformed
    """
    obj = _decode_object(body, "status response")
    return EEPROMVersion.from_json(_lookup(obj, "EEPROM"))
