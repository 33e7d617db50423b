"""Portal-backed services."""

from kong_adapter.services.portal.state_provider import PortalStateProvider

__all__ = ["PortalStateProvider"]
