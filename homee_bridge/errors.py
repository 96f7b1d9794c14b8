"""Exceptions raised by the homee bridge."""

from __future__ import annotations


class HomeeBridgeError(Exception):
    """Base class for bridge errors."""


class InvalidHostIdError(HomeeBridgeError, ValueError):
    """A host state id does not follow the ``dev-N.attr-M`` grammar."""


class UnsupportedWriteError(HomeeBridgeError):
    """The attribute's value type cannot be written to the hub."""


class HistoryTimeoutError(HomeeBridgeError):
    """The hub did not answer a history request in time."""


class HandshakeError(HomeeBridgeError):
    """Raised when the websocket connection to the hub cannot be opened."""

    def __init__(self, status: int, url: str, detail: str) -> None:
        super().__init__(f"handshake failed: status={status}, detail={detail}")
        self.status = status
        self.url = url
        self.detail = detail
