# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Checksums for update uploads.

Devices that support the updatehash feature verify uploads with CRC-32
(IEEE 802.3), which is much faster than the SHA-256 default understood by
every device. Both are exposed through the hashlib object interface so the
uploader does not care which one it feeds.
"""

import hashlib
import zlib
from typing import BinaryIO, Callable, Iterator, Optional

from .context import Context

# Value of the X-Gokrazy-Update-Hash header selecting CRC-32
CRC32 = "crc32"
SHA256 = "sha256"

DEFAULT_CHUNK_SIZE = 64 * 1024


class Crc32Hash:
    """
    Incremental CRC-32 with a hashlib-style interface.

    digest() is the 32-bit value in big-endian byte order, which is what
    the device hex-encodes in its reply.
    """

    def __init__(self, data: bytes = b""):
        self._crc = zlib.crc32(data)

    def update(self, data: bytes) -> None:
        self._crc = zlib.crc32(data, self._crc)

    @property
    def value(self) -> int:
        """Return the 32-bit unsigned CRC."""
        return self._crc & 0xFFFFFFFF

    def digest(self) -> bytes:
        return self.value.to_bytes(4, "big")


def new_hash(algorithm: str):
    """
    Return a fresh hash object for the given algorithm name.

    Raises:
        ValueError: If the algorithm is unknown
    """
    if algorithm == CRC32:
        return Crc32Hash()
    if algorithm == SHA256:
        return hashlib.sha256()
    raise ValueError(f"Unknown hash algorithm: {algorithm}")


class HashingReader:
    """
    Reader that feeds every byte it returns into a hash.

    Used as the request body of an upload, so the hash covers exactly the
    bytes handed to the transport. The context is checked before every
    read; a cancelled context aborts the upload from inside the transport.
    """

    def __init__(
        self,
        reader: BinaryIO,
        hasher,
        ctx: Optional[Context] = None,
        progress_callback: Optional[Callable[[int], None]] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self._reader = reader
        self._hasher = hasher
        self._ctx = ctx
        self._progress = progress_callback
        self._chunk_size = chunk_size
        self.bytes_read = 0

    @property
    def hasher(self):
        return self._hasher

    def read(self, size: int = -1) -> bytes:
        if self._ctx is not None:
            self._ctx.raise_if_done()
        data = self._reader.read(-1 if size is None else size)
        if data:
            self._hasher.update(data)
            self.bytes_read += len(data)
            if self._progress:
                self._progress(self.bytes_read)
        return data

    def __iter__(self) -> Iterator[bytes]:
        while True:
            chunk = self.read(self._chunk_size)
            if not chunk:
                return
            yield chunk
