"""Kong Admin API connection and authentication settings."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator


class KongConnectionConfig(BaseModel):
    """Kong Admin API connection configuration."""

    model_config = ConfigDict(extra="forbid")

    base_url: str = "http://localhost:8001"
    timeout: int = 30
    verify_ssl: bool = True
    retries: int = 3
    page_size: int = 1000

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

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        """Kong accepts page sizes between 1 and 1000."""
        if not 1 <= v <= 1000:
            raise ValueError("page_size must be between 1 and 1000")
        return v


class KongAuthConfig(BaseModel):
    """Kong Admin API authentication configuration."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["none", "api_key", "mtls"] = "none"
    api_key: str | None = None
    header_name: str = "Kong-Admin-Token"
    cert_path: str | None = None
    key_path: str | None = None
    ca_path: str | None = None
