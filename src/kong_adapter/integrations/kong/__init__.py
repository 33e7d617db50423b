"""Kong Gateway integration - Admin API client, settings and errors."""

from kong_adapter.integrations.kong.client import KongAdminClient
from kong_adapter.integrations.kong.config import KongAuthConfig, KongConnectionConfig
from kong_adapter.integrations.kong.exceptions import (
    KongAPIError,
    KongAuthError,
    KongConnectionError,
    KongNotFoundError,
    KongValidationError,
)

__all__ = [
    "KongAPIError",
    "KongAdminClient",
    "KongAuthConfig",
    "KongAuthError",
    "KongConnectionConfig",
    "KongConnectionError",
    "KongNotFoundError",
    "KongValidationError",
]
