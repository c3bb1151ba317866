"""Custom exception hierarchy for pyloctrack."""

from __future__ import annotations


class TrackerError(Exception):
    """Base exception for all pyloctrack errors."""


class TrackerConfigError(TrackerError):
    """Invalid or missing configuration."""


class TrackerTransportError(TrackerError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class TrackerApiError(TrackerError):
    """Service returned a non-zero code or an unusable payload."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class TrackerUserNotFoundError(TrackerApiError):
    """The requested identifier is unknown to the service.

    Raised for codes ``404`` and ``USER_NOT_FOUND``.  Callers should not
    retry the same identifier.
    """
