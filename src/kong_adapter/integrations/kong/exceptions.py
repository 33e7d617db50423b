"""Kong Admin API exceptions."""

from __future__ import annotations

from typing import Any


class KongAPIError(Exception):
    """Base exception for Kong Admin API errors.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code from Kong (if applicable).
        response_body: Raw response body from Kong (if available).
        endpoint: The Admin API endpoint that was called.
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


class KongConnectionError(KongAPIError):
    """Connection to the Kong Admin API failed.

    Covers network errors, timeouts and DNS failures. This is the only Kong
    error the client retries.
    """

    def __init__(
        self,
        message: str = "Failed to connect to Kong Admin API",
        endpoint: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message=message, endpoint=endpoint)
        self.original_error = original_error


class KongAuthError(KongAPIError):
    """Kong rejected the admin credentials (401/403)."""

    def __init__(
        self,
        message: str = "Authentication to Kong Admin API failed",
        status_code: int | None = 401,
        response_body: dict[str, Any] | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            response_body=response_body,
            endpoint=endpoint,
        )


class KongNotFoundError(KongAPIError):
    """A Kong entity does not exist (404)."""

    def __init__(
        self,
        message: str = "Kong resource not found",
        resource_type: str | None = None,
        resource_id: str | None = None,
        response_body: dict[str, Any] | None = None,
        endpoint: str | None = None,
    ) -> None:
        if resource_type and resource_id:
            message = f"{resource_type} '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=404,
            response_body=response_body,
            endpoint=endpoint,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class KongValidationError(KongAPIError):
    """Kong rejected the request payload (400).

    Attributes:
        validation_errors: Per-field errors reported by Kong's schema check.
    """

    def __init__(
        self,
        message: str = "Invalid request data",
        validation_errors: dict[str, Any] | None = None,
        response_body: dict[str, Any] | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=400,
            response_body=response_body,
            endpoint=endpoint,
        )
        self.validation_errors = validation_errors or {}
