"""Portal integration - the source of desired gateway state."""

from kong_adapter.integrations.portal.client import PortalClient
from kong_adapter.integrations.portal.config import PortalConnectionConfig
from kong_adapter.integrations.portal.exceptions import (
    PortalAPIError,
    PortalAuthError,
    PortalConnectionError,
    PortalDataError,
    PortalNotFoundError,
)

__all__ = [
    "PortalAPIError",
    "PortalAuthError",
    "PortalClient",
    "PortalConnectionConfig",
    "PortalConnectionError",
    "PortalDataError",
    "PortalNotFoundError",
]
