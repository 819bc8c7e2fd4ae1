# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Update protocol feature negotiation.

Three generations of devices are in the field and none of them announces a
protocol version, so the reply to update/features is classified by status
code and content type:

    status  content type   device generation
    ------  -------------  ------------------------------------------
    404     (any)          predates negotiation: no features
    200     text/plain     feature list only, EEPROM via the status page
    200     anything else  JSON with features and EEPROM version
    other   (any)          error
"""

import logging
from typing import FrozenSet, Tuple

from .context import Context
from .errors import Cancelled, DecodeError, UnexpectedStatusError, UpdaterError
from .protocol import (
    JSON_MIME,
    TEXT_PLAIN_MIME,
    EEPROMVersion,
    decode_features_response,
    decode_status_response,
    parse_features,
)
from .transport import HTTPDoer, Request

logger = logging.getLogger(__name__)

HTTP_OK = 200
HTTP_NOT_FOUND = 404


def negotiate(
    ctx: Context, base_url: str, doer: HTTPDoer
) -> Tuple[FrozenSet[str], EEPROMVersion]:
    """
    Query the device for its supported update protocol features.

    Args:
        ctx: Cancellation context
        base_url: Device base URL, ending in a slash
        doer: Transport to send requests with

    Returns:
        (features, eeprom); the EEPROM version is zero-valued when unknown

    Raises:
        UnexpectedStatusError: On a status other than 200 or 404
        DecodeError: If the JSON reply is malformed
        TransportError: If the request fails
    """
    resp = doer.do(ctx, Request("GET", base_url + "update/features"))

    if resp.status == HTTP_NOT_FOUND:
        logger.debug("update/features not found, assuming no features")
        return frozenset(), EEPROMVersion()

    if resp.status != HTTP_OK:
        raise UnexpectedStatusError(resp.status, HTTP_OK, resp.text, resp.reason)

    if resp.content_type.startswith(TEXT_PLAIN_MIME):
        features = parse_features(resp.text)
        try:
            eeprom = fetch_eeprom_from_status(ctx, base_url, doer)
        except Cancelled:
            raise
        except UpdaterError as e:
            logger.warning("could not get EEPROM version: %s", e)
            eeprom = EEPROMVersion()
    else:
        features, eeprom = decode_features_response(resp.body)

    logger.debug("device features: %s, EEPROM: %s", sorted(features), eeprom)
    return features, eeprom


def fetch_eeprom_from_status(
    ctx: Context, base_url: str, doer: HTTPDoer
) -> EEPROMVersion:
    """
    Fetch the EEPROM version from the JSON variant of the status page.

    Devices that reply to update/features with text/plain do not include
    the EEPROM version there.

    Raises:
        UnexpectedStatusError: On a status other than 200
        DecodeError: If the reply is not application/json or is malformed
        TransportError: If the request fails
    """
    # Older devices select the JSON status page by Content-Type, newer ones
    # by Accept.
    headers = {"Content-Type": JSON_MIME, "Accept": JSON_MIME}
    resp = doer.do(ctx, Request("GET", base_url, headers=headers))
    if resp.status != HTTP_OK:
        raise UnexpectedStatusError(resp.status, HTTP_OK, resp.text.strip(), resp.reason)
    if resp.content_type != JSON_MIME:
        raise DecodeError(
            f"unexpected Content-Type: got {resp.content_type!r}, want {JSON_MIME!r}"
        )
    return decode_status_response(resp.body)
