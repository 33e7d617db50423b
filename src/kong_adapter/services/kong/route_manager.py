"""Route manager for Kong Routes."""

from __future__ import annotations

from collections import defaultdict
from typing import Any

from kong_adapter.services.kong.base import BaseEntityManager, to_payload


class RouteManager(BaseEntityManager):
    """Manager for Kong Route entities.

    Routes always belong to a service; they are created through the
    service's nested collection so Kong links them up.
    """

    _endpoint = "routes"
    _entity_name = "route"

    def list_grouped_by_service(self) -> dict[str, list[dict[str, Any]]]:
        """List every route, grouped by the id of the owning service.

        Routes without a service are left out.
        """
        grouped: dict[str, list[dict[str, Any]]] = defaultdict(list)
        for route in self.list_all():
            service = route.get("service") or {}
            if service.get("id"):
                grouped[service["id"]].append(route)
        return dict(grouped)

    def create_for_service(self, service_id: str, route: dict[str, Any]) -> dict[str, Any]:
        """Create a route attached to a service.

        Args:
            service_id: Owning service id.
            route: Route attributes (paths, hosts, methods, ...).

        Returns:
            The created route.
        """
        payload = to_payload(route)
        payload.pop("service", None)
        self._log.info("creating_route", service=service_id, name=payload.get("name"))
        created = self._client.post(f"services/{service_id}/routes", json=payload)
        self._log.info("created_route", id=created.get("id"))
        return created
