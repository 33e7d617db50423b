"""Unit tests for Kong configuration models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from kong_adapter.integrations.kong.config import KongAuthConfig, KongConnectionConfig


class TestKongConnectionConfig:
    """Tests for KongConnectionConfig model."""

    @pytest.mark.unit
    def test_connection_config_defaults(self) -> None:
        """Config should have sensible defaults."""
        config = KongConnectionConfig()

        assert config.base_url == "http://localhost:8001"
        assert config.timeout == 30
        assert config.verify_ssl is True
        assert config.retries == 3
        assert config.page_size == 1000

    @pytest.mark.unit
    def test_connection_config_base_url_strips_trailing_slash(self) -> None:
        """Config should strip trailing slashes from base_url."""
        config = KongConnectionConfig(base_url="https://kong.local:8444/")

        assert config.base_url == "https://kong.local:8444"

    @pytest.mark.unit
    def test_connection_config_base_url_invalid_scheme_raises(self) -> None:
        """Config should reject URLs without http/https scheme."""
        with pytest.raises(ValidationError) as exc_info:
            KongConnectionConfig(base_url="ftp://kong.local")

        assert "base_url must start with http:// or https://" in str(exc_info.value)

    @pytest.mark.unit
    @pytest.mark.parametrize("timeout", [0, -5])
    def test_connection_config_timeout_must_be_positive(self, timeout: int) -> None:
        """Config should reject non-positive timeouts."""
        with pytest.raises(ValidationError) as exc_info:
            KongConnectionConfig(timeout=timeout)

        assert "timeout must be positive" in str(exc_info.value)

    @pytest.mark.unit
    def test_connection_config_retries_non_negative(self) -> None:
        """Zero retries is allowed, negative is not."""
        assert KongConnectionConfig(retries=0).retries == 0

        with pytest.raises(ValidationError) as exc_info:
            KongConnectionConfig(retries=-1)

        assert "retries must be non-negative" in str(exc_info.value)

    @pytest.mark.unit
    @pytest.mark.parametrize("page_size", [0, 1001])
    def test_connection_config_page_size_bounds(self, page_size: int) -> None:
        """Kong only accepts page sizes from 1 to 1000."""
        with pytest.raises(ValidationError):
            KongConnectionConfig(page_size=page_size)

    @pytest.mark.unit
    def test_connection_config_rejects_unknown_fields(self) -> None:
        """Typos in config files should not be silently ignored."""
        with pytest.raises(ValidationError):
            KongConnectionConfig(base_ur="http://kong:8001")  # type: ignore[call-arg]


class TestKongAuthConfig:
    """Tests for KongAuthConfig model."""

    @pytest.mark.unit
    def test_auth_config_defaults(self) -> None:
        """Auth should default to none with the standard header name."""
        config = KongAuthConfig()

        assert config.type == "none"
        assert config.api_key is None
        assert config.header_name == "Kong-Admin-Token"

    @pytest.mark.unit
    def test_auth_config_rejects_unknown_type(self) -> None:
        """Only none, api_key and mtls are supported."""
        with pytest.raises(ValidationError):
            KongAuthConfig(type="oauth2")  # type: ignore[arg-type]
