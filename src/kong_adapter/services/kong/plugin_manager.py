"""Plugin manager for Kong Plugins.

Plugins are listed once per cycle from the global collection and then
split by scope, which is far cheaper than one listing per service and
per consumer.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any

from kong_adapter.services.kong.base import BaseEntityManager, to_payload


def _ref_id(plugin: dict[str, Any], key: str) -> str | None:
    ref = plugin.get(key)
    if isinstance(ref, dict):
        return ref.get("id")
    return None


class KongPluginManager(BaseEntityManager):
    """Manager for Kong Plugin entities.

    Example:
        >>> manager = KongPluginManager(client)
        >>> manager.enable({"name": "rate-limiting", "config": {"minute": 100}}, service="svc-id")
    """

    _endpoint = "plugins"
    _entity_name = "plugin"

    def list_grouped(
        self,
    ) -> tuple[dict[str, list[dict[str, Any]]], dict[str, list[dict[str, Any]]]]:
        """List every plugin and split it by scope.

        Returns:
            Tuple of (service plugins keyed by service id, consumer plugins
            keyed by consumer id). Service plugins exclude consumer- and
            route-scoped ones; plugins with neither service nor consumer
            (global plugins) appear in neither mapping.
        """
        by_service: dict[str, list[dict[str, Any]]] = defaultdict(list)
        by_consumer: dict[str, list[dict[str, Any]]] = defaultdict(list)

        for plugin in self.list_all():
            consumer_id = _ref_id(plugin, "consumer")
            service_id = _ref_id(plugin, "service")
            if consumer_id:
                by_consumer[consumer_id].append(plugin)
            elif service_id and not _ref_id(plugin, "route"):
                by_service[service_id].append(plugin)

        self._log.debug(
            "grouped_plugins",
            services=len(by_service),
            consumers=len(by_consumer),
        )
        return dict(by_service), dict(by_consumer)

    def enable(
        self,
        plugin: dict[str, Any],
        *,
        service: dict[str, Any] | None = None,
        consumer: str | None = None,
    ) -> dict[str, Any]:
        """Enable a plugin with the specified scope and configuration.

        Args:
            plugin: Plugin definition (name, config, enabled, protocols, ...).
            service: Service reference ({"id": ...} or {"name": ...}).
            consumer: Consumer id to scope to.

        Returns:
            The created plugin.
        """
        payload = to_payload(plugin)
        if service is not None:
            payload["service"] = service
        if consumer is not None:
            payload["consumer"] = {"id": consumer}

        self._log.info(
            "enabling_plugin",
            name=payload.get("name"),
            service=service,
            consumer=consumer,
        )
        created = self._client.post(self._endpoint, json=payload)
        self._log.info("enabled_plugin", id=created.get("id"), name=payload.get("name"))
        return created
