# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Exceptions raised by the gokrazy updater.

All of them derive from UpdaterError, so callers can catch the whole family
at once or branch on the concrete class.
"""


class UpdaterError(Exception):
    """Base exception for updater errors."""
    pass


class TransportError(UpdaterError):
    """Sending the request or reading the response failed."""
    pass


class Cancelled(TransportError):
    """The context was cancelled while the request was in flight."""
    pass


class DeadlineExceeded(Cancelled):
    """The context deadline passed while the request was in flight."""
    pass


class UnexpectedStatusError(UpdaterError):
    """The device replied with a status code other than the expected one."""

    def __init__(self, status: int, want: int, body: str, reason: str = ""):
        self.status = status
        self.want = want
        self.body = body
        self.reason = reason
        got = f"{status} {reason}".strip()
        super().__init__(
            f"unexpected HTTP status code: got {got}, want {want} (body {body!r})"
        )


class HandlerNotFoundError(UnexpectedStatusError):
    """The temporary upload handler does not exist on the device."""

    def __str__(self) -> str:
        return "/uploadtemp/ handler not found, is your gokrazy installation too old?"


class UpdateHandlerNotImplemented(UpdaterError):
    """
    The requested update destination is not implemented on the device.

    Older devices answer unknown destinations (e.g. mbr) with an HTML page.
    Callers can catch this to print a message and proceed with the update.
    """

    def __init__(self, destination: str = ""):
        self.destination = destination
        msg = "update handler not implemented"
        if destination:
            msg += f": {destination}"
        super().__init__(msg)


class ChecksumMismatchError(UpdaterError):
    """The digest reported by the device differs from the local one."""

    def __init__(self, got: str, want: str):
        self.got = got
        self.want = want
        super().__init__(f"unexpected checksum: got {got}, want {want}")


class DecodeError(UpdaterError):
    """The device sent a body that could not be decoded."""
    pass


class UpgradeRequiredError(UpdaterError):
    """The device firmware is too old for the requested operation."""
    pass
