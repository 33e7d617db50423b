"""Kong implementation of the gateway state provider.

Mapping between the reconciled models and Kong entities:

- An API is a Kong service named after the API. ``ApiDefinition.config``
  holds the service attributes plus an optional ``routes`` list; routes
  are reconciled by name as part of the API's own update.
- An API plugin is a plugin scoped to the service only (no consumer or
  route scope).
- A consumer plugin binding is a plugin scoped to the consumer, usually
  together with the service of the API it applies to. Fetched bindings
  carry the service reference as ``{"id": ..., "name": ...}`` so portal
  declarations written against the API name match them.
- A scope is a Kong tag: listings are filtered by it and created services
  and consumers carry it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

import structlog

from kong_adapter.models.entities import ApiDefinition, ConsumerDefinition
from kong_adapter.services.kong.base import SERVER_FIELDS, to_payload
from kong_adapter.services.kong.consumer_manager import ConsumerManager
from kong_adapter.services.kong.plugin_manager import KongPluginManager
from kong_adapter.services.kong.route_manager import RouteManager
from kong_adapter.services.kong.service_manager import ServiceManager
from kong_adapter.sync.matching import matches

if TYPE_CHECKING:
    from kong_adapter.integrations.kong.client import KongAdminClient

logger = structlog.get_logger()

DEFAULT_PORTS = {"http": 80, "https": 443, "grpc": 80, "grpcs": 443}


def _scope_tags(tags: list[str] | None, scope: str | None) -> list[str] | None:
    """Return ``tags`` with the scope tag appended when missing."""
    if scope is None:
        return tags
    merged = list(tags or [])
    if scope not in merged:
        merged.append(scope)
    return merged


def _expand_url(attributes: dict[str, Any]) -> dict[str, Any]:
    """Replace Kong's ``url`` shorthand by the fields Kong stores."""
    if "url" not in attributes:
        return attributes
    expanded = {k: v for k, v in attributes.items() if k != "url"}
    parts = urlsplit(str(attributes["url"]))
    expanded["protocol"] = parts.scheme
    expanded["host"] = parts.hostname
    expanded["port"] = parts.port or DEFAULT_PORTS.get(parts.scheme, 80)
    expanded["path"] = parts.path or None
    return expanded


def _drift_payload(desired: dict[str, Any], actual: dict[str, Any]) -> dict[str, Any]:
    """Compute the PATCH payload that brings ``actual`` in line with ``desired``.

    Tags are additive: tags Kong already carries (such as the scope tag)
    are kept, missing desired tags are appended.

    Returns:
        Empty dict when nothing drifted.
    """
    desired = dict(desired)
    actual = dict(actual)
    desired_tags = desired.pop("tags", None) or []
    actual_tags = actual.pop("tags", None) or []

    payload = {} if matches(desired, actual) else to_payload(desired, keep_none=True)
    missing = [tag for tag in desired_tags if tag not in actual_tags]
    if missing:
        payload["tags"] = [*actual_tags, *missing]
    return payload


def _route_key(route: dict[str, Any]) -> str:
    return str(route.get("name") or route.get("id"))


class KongGateway:
    """Reads and mutates the actual state of a Kong gateway.

    Example:
        >>> with KongAdminClient(KongConnectionConfig()) as client:
        ...     gateway = KongGateway(client)
        ...     apis = gateway.fetch_actual_apis(scope="wicked")
    """

    def __init__(self, client: KongAdminClient) -> None:
        """Initialize the gateway.

        Args:
            client: Kong Admin API client instance.
        """
        self._client = client
        self._services = ServiceManager(client)
        self._routes = RouteManager(client)
        self._plugins = KongPluginManager(client)
        self._consumers = ConsumerManager(client)
        self._log = logger.bind(service="kong_gateway")

    # =========================================================================
    # APIs
    # =========================================================================

    def fetch_actual_apis(self, scope: str | None = None) -> list[ApiDefinition]:
        """List every API (Kong service) in scope with its routes and plugins."""
        services = self._services.list_all(tags=[scope] if scope else None)
        routes_by_service = self._routes.list_grouped_by_service()
        plugins_by_service, _ = self._plugins.list_grouped()

        apis: list[ApiDefinition] = []
        for service in services:
            if not service.get("name"):
                self._log.debug("skipping_unnamed_service", id=service.get("id"))
                continue
            apis.append(
                ApiDefinition(
                    name=service["name"],
                    id=service["id"],
                    config=self._api_config(service, routes_by_service.get(service["id"], [])),
                    plugins=plugins_by_service.get(service["id"], []),
                )
            )

        self._log.debug("fetched_actual_apis", scope=scope, count=len(apis))
        return apis

    def create_api(self, api: ApiDefinition, scope: str | None = None) -> ApiDefinition:
        """Create the service (and its routes) for an API.

        Returns:
            The API as Kong now stores it, without plugins.
        """
        attributes, routes = self._split_api_config(api.config)
        attributes = _expand_url(attributes)
        attributes["name"] = api.name
        attributes["tags"] = _scope_tags(attributes.get("tags"), scope)

        service = self._services.create(attributes)
        created_routes = [
            self._routes.create_for_service(
                service["id"],
                {**route, "tags": _scope_tags(route.get("tags"), scope)},
            )
            for route in self._named_routes(api.name, routes or [])
        ]
        return ApiDefinition(
            name=api.name,
            id=service["id"],
            config=self._api_config(service, created_routes),
        )

    def update_api(
        self,
        desired: ApiDefinition,
        actual: ApiDefinition,
        scope: str | None = None,
    ) -> bool:
        """Patch the service attributes and reconcile the routes of an API.

        Routes are only reconciled when the desired API declares a
        ``routes`` list; otherwise existing routes are left alone. Routes
        created here carry the scope tag, like those of ``create_api``.

        Returns:
            True if anything was changed in Kong.
        """
        desired_attributes, desired_routes = self._split_api_config(desired.config)
        actual_attributes, actual_routes = self._split_api_config(actual.config)
        service_ref = actual.id or actual.name

        changed = False
        payload = _drift_payload(_expand_url(desired_attributes), actual_attributes)
        if payload:
            self._services.update(service_ref, payload)
            changed = True

        if desired_routes is not None:
            routes_changed = self._sync_routes(
                service_ref,
                self._named_routes(desired.name, desired_routes),
                actual_routes or [],
                scope,
            )
            changed = changed or routes_changed

        self._log.debug("api_updated", api=desired.name, changed=changed)
        return changed

    def delete_api(self, api: ApiDefinition) -> None:
        """Delete the routes of an API, then its service (plugins cascade)."""
        _, routes = self._split_api_config(api.config)
        for route in routes or []:
            self._routes.delete(route.get("id") or _route_key(route))
        self._services.delete(api.id or api.name)

    # =========================================================================
    # API plugins
    # =========================================================================

    def create_plugin(self, api: ApiDefinition, plugin: dict[str, Any]) -> dict[str, Any]:
        """Enable a plugin on the service of an API."""
        return self._plugins.enable(plugin, service=self._service_ref(api))

    def update_plugin(
        self,
        api: ApiDefinition,
        desired: dict[str, Any],
        actual: dict[str, Any],
    ) -> dict[str, Any]:
        """Overwrite a service plugin with its desired definition."""
        payload = to_payload(desired, keep_none=True)
        payload["service"] = self._service_ref(api)
        return self._client.patch(f"plugins/{actual['id']}", json=payload)

    def delete_plugin(self, api: ApiDefinition, plugin: dict[str, Any]) -> None:
        """Remove a plugin from the service of an API."""
        self._plugins.delete(plugin["id"])

    # =========================================================================
    # Consumers
    # =========================================================================

    def fetch_actual_consumers(self, scope: str | None = None) -> list[ConsumerDefinition]:
        """List every consumer in scope with its plugin bindings."""
        consumers = self._consumers.list_all(tags=[scope] if scope else None)
        _, plugins_by_consumer = self._plugins.list_grouped()
        service_names = self._services.names_by_id()

        result: list[ConsumerDefinition] = []
        for consumer in consumers:
            if not consumer.get("username"):
                self._log.debug("skipping_consumer_without_username", id=consumer.get("id"))
                continue
            bindings = [
                self._resolve_service_name(plugin, service_names)
                for plugin in plugins_by_consumer.get(consumer["id"], [])
            ]
            result.append(
                ConsumerDefinition(
                    username=consumer["username"],
                    id=consumer["id"],
                    custom_id=consumer.get("custom_id"),
                    api_plugins=bindings,
                )
            )

        self._log.debug("fetched_actual_consumers", scope=scope, count=len(result))
        return result

    def create_consumer(
        self,
        consumer: ConsumerDefinition,
        scope: str | None = None,
    ) -> ConsumerDefinition:
        """Create a consumer; returns it as Kong now stores it, without bindings."""
        payload = consumer.attributes()
        tags = _scope_tags(None, scope)
        if tags:
            payload["tags"] = tags
        created = self._consumers.create(payload)
        return ConsumerDefinition(
            username=created["username"],
            id=created["id"],
            custom_id=created.get("custom_id"),
        )

    def update_consumer(self, desired: ConsumerDefinition, actual: ConsumerDefinition) -> bool:
        """Patch username and custom_id of a consumer if they drifted."""
        payload = _drift_payload(desired.attributes(), actual.attributes())
        if not payload:
            return False
        self._consumers.update(actual.id or actual.username, payload)
        return True

    def delete_consumer(self, consumer: ConsumerDefinition) -> None:
        """Delete a consumer (its plugin bindings cascade)."""
        self._consumers.delete(consumer.id or consumer.username)

    # =========================================================================
    # Consumer plugin bindings
    # =========================================================================

    def create_consumer_plugin(
        self,
        consumer: ConsumerDefinition,
        plugin: dict[str, Any],
    ) -> dict[str, Any]:
        """Enable a plugin for a consumer, on the API the binding names."""
        return self._plugins.enable(
            plugin,
            service=self._binding_service_ref(plugin),
            consumer=consumer.id or consumer.username,
        )

    def patch_consumer_plugin(
        self,
        consumer: ConsumerDefinition,
        desired: dict[str, Any],
        actual: dict[str, Any],
    ) -> dict[str, Any]:
        """Partially update a consumer plugin binding."""
        payload = to_payload(desired, keep_none=True)
        payload.pop("service", None)
        service = self._binding_service_ref(desired)
        if service is not None:
            payload["service"] = service
        payload["consumer"] = {"id": consumer.id or consumer.username}
        return self._client.patch(f"plugins/{actual['id']}", json=payload)

    def delete_consumer_plugin(
        self,
        consumer: ConsumerDefinition,
        plugin: dict[str, Any],
    ) -> None:
        """Remove a plugin binding from a consumer."""
        self._plugins.delete(plugin["id"])

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _split_api_config(
        config: dict[str, Any],
    ) -> tuple[dict[str, Any], list[dict[str, Any]] | None]:
        """Split API config into service attributes and the routes list."""
        attributes = {k: v for k, v in config.items() if k != "routes"}
        return attributes, config.get("routes")

    @staticmethod
    def _api_config(service: dict[str, Any], routes: list[dict[str, Any]]) -> dict[str, Any]:
        config = {k: v for k, v in service.items() if k not in SERVER_FIELDS and k != "name"}
        config["routes"] = routes
        return config

    @staticmethod
    def _named_routes(api_name: str, routes: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Give unnamed routes a stable name derived from their position."""
        return [
            route if route.get("name") else {**route, "name": f"{api_name}-{index}"}
            for index, route in enumerate(routes)
        ]

    def _sync_routes(
        self,
        service_ref: str,
        desired_routes: list[dict[str, Any]],
        actual_routes: list[dict[str, Any]],
        scope: str | None = None,
    ) -> bool:
        """Reconcile the routes of one service by route name."""
        actual_by_name = {_route_key(route): route for route in actual_routes}
        changed = False

        for desired in desired_routes:
            actual = actual_by_name.pop(desired["name"], None)
            if actual is None:
                self._routes.create_for_service(
                    service_ref,
                    {**desired, "tags": _scope_tags(desired.get("tags"), scope)},
                )
                changed = True
                continue
            payload = _drift_payload(desired, actual)
            if payload:
                self._routes.update(actual.get("id") or desired["name"], payload)
                changed = True

        for leftover in actual_by_name.values():
            self._routes.delete(leftover.get("id") or _route_key(leftover))
            changed = True

        return changed

    @staticmethod
    def _service_ref(api: ApiDefinition) -> dict[str, str]:
        return {"id": api.id} if api.id else {"name": api.name}

    @staticmethod
    def _binding_service_ref(plugin: dict[str, Any]) -> dict[str, str] | None:
        """Reduce a binding's service reference to what Kong accepts."""
        service = plugin.get("service")
        if not isinstance(service, dict):
            return None
        if service.get("id"):
            return {"id": service["id"]}
        if service.get("name"):
            return {"name": service["name"]}
        return None

    @staticmethod
    def _resolve_service_name(
        plugin: dict[str, Any],
        service_names: dict[str, str],
    ) -> dict[str, Any]:
        service = plugin.get("service")
        if not isinstance(service, dict) or service.get("id") not in service_names:
            return plugin
        return {**plugin, "service": {**service, "name": service_names[service["id"]]}}
