"""Portal API connection settings."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, SecretStr, field_validator


class PortalConnectionConfig(BaseModel):
    """Portal API connection configuration.

    Attributes:
        base_url: Portal API root, e.g. http://portal-api:3001.
        token: Optional bearer token sent with every request.
        timeout: Request timeout in seconds.
        verify_ssl: Verify the portal's TLS certificate.
        retries: Attempts made for connection failures.
    """

    model_config = ConfigDict(extra="forbid")

    base_url: str = "http://localhost:3001"
    token: SecretStr | None = None
    timeout: int = 30
    verify_ssl: bool = True
    retries: int = 3

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate base URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        """Validate retries is non-negative."""
        if v < 0:
            raise ValueError("retries must be non-negative")
        return v
