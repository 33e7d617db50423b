"""Adapter configuration: YAML file plus environment overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from kong_adapter.integrations.kong.config import KongAuthConfig, KongConnectionConfig
from kong_adapter.integrations.portal.config import PortalConnectionConfig

# XDG-compliant config location
CONFIG_DIR = Path.home() / ".config" / "kong-adapter"
CONFIG_FILE = CONFIG_DIR / "config.yaml"


class ConfigError(Exception):
    """The configuration file could not be read or is invalid."""


class AdapterConfig(BaseModel):
    """Complete adapter configuration.

    Attributes:
        portal: Connection settings for the portal (desired state).
        kong: Connection settings for the Kong Admin API (actual state).
        kong_auth: Authentication for the Kong Admin API.
        scope: Restrict reconciliation to one portal scope / Kong tag.
        interval: Seconds between cycles when syncing in a loop.
    """

    model_config = ConfigDict(extra="forbid")

    portal: PortalConnectionConfig = Field(default_factory=PortalConnectionConfig)
    kong: KongConnectionConfig = Field(default_factory=KongConnectionConfig)
    kong_auth: KongAuthConfig = Field(default_factory=KongAuthConfig)
    scope: str | None = None
    interval: float = 10.0

    @field_validator("interval")
    @classmethod
    def validate_interval(cls, v: float) -> float:
        """Validate interval is positive."""
        if v <= 0:
            raise ValueError("interval must be positive")
        return v

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> AdapterConfig:
        """Create configuration with environment variable overrides.

        Environment variables take precedence over base_config values.

        Supported environment variables:
            KONG_ADAPTER_KONG_URL: Kong Admin API base URL
            KONG_ADAPTER_KONG_API_KEY: Admin API key (switches auth to api_key)
            KONG_ADAPTER_KONG_AUTH_TYPE: Kong auth type (none, api_key, mtls)
            KONG_ADAPTER_PORTAL_URL: Portal API base URL
            KONG_ADAPTER_PORTAL_TOKEN: Bearer token for the portal
            KONG_ADAPTER_SCOPE: Scope to reconcile
            KONG_ADAPTER_INTERVAL: Seconds between loop cycles
        """
        config_dict = base_config.copy() if base_config else {}

        # Ensure nested dicts exist
        for section in ("portal", "kong", "kong_auth"):
            config_dict[section] = dict(config_dict.get(section) or {})

        if kong_url := os.environ.get("KONG_ADAPTER_KONG_URL"):
            config_dict["kong"]["base_url"] = kong_url

        if api_key := os.environ.get("KONG_ADAPTER_KONG_API_KEY"):
            config_dict["kong_auth"]["api_key"] = api_key
            if config_dict["kong_auth"].get("type", "none") == "none":
                config_dict["kong_auth"]["type"] = "api_key"

        if auth_type := os.environ.get("KONG_ADAPTER_KONG_AUTH_TYPE"):
            config_dict["kong_auth"]["type"] = auth_type

        if portal_url := os.environ.get("KONG_ADAPTER_PORTAL_URL"):
            config_dict["portal"]["base_url"] = portal_url

        if portal_token := os.environ.get("KONG_ADAPTER_PORTAL_TOKEN"):
            config_dict["portal"]["token"] = portal_token

        if scope := os.environ.get("KONG_ADAPTER_SCOPE"):
            config_dict["scope"] = scope

        if interval := os.environ.get("KONG_ADAPTER_INTERVAL"):
            config_dict["interval"] = interval

        return cls.model_validate(config_dict)


def load_config(path: Path | None = None) -> AdapterConfig:
    """Load configuration from a YAML file and the environment.

    Args:
        path: Config file; defaults to ~/.config/kong-adapter/config.yaml.
            A missing default file is not an error, a missing explicit one is.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    config_path = path or CONFIG_FILE
    base_config: dict[str, Any] = {}

    if config_path.exists():
        try:
            data = yaml.safe_load(config_path.read_text())
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
        base_config = data or {}
    elif path is not None:
        raise ConfigError(f"Config file not found: {config_path}")

    return AdapterConfig.from_env(base_config)
