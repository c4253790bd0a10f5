"""Exception taxonomy for failures that never reached a usable server answer."""

from __future__ import annotations

from typing import Any


class MakabaError(Exception):
    """Base class for every error raised by the client."""


class MakabaTransportError(MakabaError):
    """The request did not complete (DNS, connect, timeout, ...)."""


class MakabaHTTPError(MakabaTransportError):
    """A GET endpoint answered with a non-2xx status."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"HTTP {status_code} for {url}")
        self.url = url
        self.status_code = status_code


class MakabaDecodeError(MakabaError):
    """The response body was not JSON, or not the JSON shape we expect."""

    def __init__(self, message: str, body: str = "") -> None:
        super().__init__(message)
        self.body = body


class MakabaAuthError(MakabaError):
    """The passcode was rejected by the server."""

    def __init__(self, payload: dict[str, Any] | None) -> None:
        super().__init__(f"Passcode auth failed: {payload}")
        self.payload = payload
