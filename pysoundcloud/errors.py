"""Exceptions raised by pysoundcloud."""

from __future__ import annotations

from typing import Optional


class SoundCloudError(Exception):
    """Base class for every pysoundcloud error."""


class AuthenticationNotReadyError(SoundCloudError):
    """The browser-tab session was used before the service reported readiness."""


class ServiceNotBoundError(SoundCloudError):
    """Unbind was requested for a connection that is not bound."""


class AuthenticationError(SoundCloudError):
    """The OAuth redirect carried an error or no authorization code."""


class TokenExchangeError(SoundCloudError):
    """The token endpoint was unreachable, rejected the request or returned no token."""


class ApiError(SoundCloudError):
    """A failed SoundCloud REST API request.

    *status* is the HTTP status, or ``None`` when no response arrived.
    """

    def __init__(self, status: Optional[int], message: str) -> None:
        super().__init__(f"HTTP {status}: {message}" if status is not None else message)
        self.status = status
        self.message = message
