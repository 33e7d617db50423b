"""Service manager for Kong Services.

A Kong service is the gateway-side record of a portal API.
"""

from __future__ import annotations

from kong_adapter.services.kong.base import BaseEntityManager


class ServiceManager(BaseEntityManager):
    """Manager for Kong Service entities.

    Example:
        >>> manager = ServiceManager(client)
        >>> created = manager.create({"name": "petstore", "url": "http://petstore:8080"})
        >>> manager.update(created["id"], {"read_timeout": 5000})
    """

    _endpoint = "services"
    _entity_name = "service"

    def names_by_id(self) -> dict[str, str]:
        """Map every named service's id to its name."""
        return {
            service["id"]: service["name"]
            for service in self.list_all()
            if service.get("id") and service.get("name")
        }
