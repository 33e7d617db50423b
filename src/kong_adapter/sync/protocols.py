"""Collaborator contracts the reconciliation engine depends on."""

from __future__ import annotations

from typing import Any, Protocol

from kong_adapter.models.entities import ApiDefinition, ConsumerDefinition


class DesiredStateProvider(Protocol):
    """Source of the authoritative desired state (the portal)."""

    def fetch_desired_apis(self, scope: str | None = None) -> list[ApiDefinition]: ...

    def fetch_desired_consumers(self, scope: str | None = None) -> list[ConsumerDefinition]: ...


class GatewayStateProvider(Protocol):
    """Reads and mutates the actual state of the gateway.

    Every mutating call applies a single element and either succeeds or
    raises. How a change is carried out is up to the implementation.
    """

    def fetch_actual_apis(self, scope: str | None = None) -> list[ApiDefinition]: ...

    def create_api(self, api: ApiDefinition, scope: str | None = None) -> ApiDefinition:
        """Create an API and return it as the gateway now sees it (no plugins)."""
        ...

    def update_api(
        self,
        desired: ApiDefinition,
        actual: ApiDefinition,
        scope: str | None = None,
    ) -> bool:
        """Bring an API's own attributes in line; return True if anything changed."""
        ...

    def delete_api(self, api: ApiDefinition) -> None: ...

    def create_plugin(self, api: ApiDefinition, plugin: dict[str, Any]) -> dict[str, Any]: ...

    def update_plugin(
        self,
        api: ApiDefinition,
        desired: dict[str, Any],
        actual: dict[str, Any],
    ) -> dict[str, Any]: ...

    def delete_plugin(self, api: ApiDefinition, plugin: dict[str, Any]) -> None: ...

    def fetch_actual_consumers(self, scope: str | None = None) -> list[ConsumerDefinition]: ...

    def create_consumer(
        self,
        consumer: ConsumerDefinition,
        scope: str | None = None,
    ) -> ConsumerDefinition:
        """Create a consumer and return it as the gateway now sees it (no bindings)."""
        ...

    def update_consumer(self, desired: ConsumerDefinition, actual: ConsumerDefinition) -> bool:
        """Bring a consumer's own attributes in line; return True if anything changed."""
        ...

    def delete_consumer(self, consumer: ConsumerDefinition) -> None: ...

    def create_consumer_plugin(
        self,
        consumer: ConsumerDefinition,
        plugin: dict[str, Any],
    ) -> dict[str, Any]: ...

    def patch_consumer_plugin(
        self,
        consumer: ConsumerDefinition,
        desired: dict[str, Any],
        actual: dict[str, Any],
    ) -> dict[str, Any]: ...

    def delete_consumer_plugin(
        self,
        consumer: ConsumerDefinition,
        plugin: dict[str, Any],
    ) -> None: ...
