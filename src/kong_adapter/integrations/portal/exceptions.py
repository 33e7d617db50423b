"""Portal API exceptions."""

from __future__ import annotations

from typing import Any


class PortalAPIError(Exception):
    """Base exception for portal API errors.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code from the portal (if applicable).
        response_body: Raw response body (if available).
        endpoint: The portal endpoint that was called.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: dict[str, Any] | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.endpoint = endpoint

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code:
            parts.append(f"(status: {self.status_code})")
        if self.endpoint:
            parts.append(f"[endpoint: {self.endpoint}]")
        return " ".join(parts)


class PortalConnectionError(PortalAPIError):
    """Connection to the portal failed or timed out."""

    def __init__(
        self,
        message: str = "Failed to connect to portal API",
        endpoint: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message=message, endpoint=endpoint)
        self.original_error = original_error


class PortalAuthError(PortalAPIError):
    """The portal rejected the adapter's token (401/403)."""


class PortalNotFoundError(PortalAPIError):
    """The requested portal endpoint does not exist (404)."""


class PortalDataError(PortalAPIError):
    """The portal answered, but with definitions the adapter cannot use."""
