"""Error taxonomy shared by the store, auth facade and realtime proxy.

Provider exceptions are wrapped with ``raise ... from exc`` so the original
cause stays on ``__cause__``. Nothing here is retried.
"""

from __future__ import annotations


class VoicelogError(Exception):
    """Base class for every error raised by this service."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(VoicelogError):
    """A required secret or setting is missing."""


class UpstreamError(VoicelogError):
    """The realtime voice API rejected the call or returned an unusable payload."""


class PersistenceError(VoicelogError):
    """The database rejected an operation."""


class NotFoundError(PersistenceError):
    """No conversation matches the requested id."""

    status_code = 404


class AuthError(VoicelogError):
    """The auth provider rejected an operation."""

    status_code = 401
