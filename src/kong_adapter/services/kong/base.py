"""Base entity manager for Kong Admin API collections.

Implements the repository pattern over one Admin API endpoint. Entities
are handled as plain dictionaries: the adapter forwards whatever the
portal declares and reads back whatever Kong stores.
"""

from __future__ import annotations

from abc import ABC
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from kong_adapter.integrations.kong.client import KongAdminClient

logger = structlog.get_logger()

# Fields Kong assigns itself; never sent back in create/update payloads
SERVER_FIELDS = frozenset({"id", "created_at", "updated_at"})


def to_payload(entity: dict[str, Any], *, keep_none: bool = False) -> dict[str, Any]:
    """Strip server-assigned fields and None values from an entity.

    Args:
        entity: Entity as declared or as read back from Kong.
        keep_none: Keep None values; a PATCH sends them as null to reset a field.
    """
    return {
        k: v
        for k, v in entity.items()
        if k not in SERVER_FIELDS and (keep_none or v is not None)
    }


class BaseEntityManager(ABC):
    """Abstract base class for Kong entity managers.

    Class Attributes:
        _endpoint: Admin API collection path (e.g. "services").
        _entity_name: Human-readable entity name for logging.
    """

    _endpoint: str = ""
    _entity_name: str = ""

    def __init__(self, client: KongAdminClient) -> None:
        """Initialize the entity manager.

        Args:
            client: Kong Admin API client instance.
        """
        self._client = client
        self._log = logger.bind(entity=self._entity_name)

    @property
    def endpoint(self) -> str:
        """Return the API endpoint for this entity type."""
        return self._endpoint

    def list_all(self, *, tags: list[str] | None = None) -> list[dict[str, Any]]:
        """List every entity, following pagination.

        Args:
            tags: Only list entities carrying all of these tags.
        """
        self._log.debug("listing_entities", tags=tags)
        entities = self._client.list_all(self._endpoint, tags=tags)
        self._log.debug("listed_entities", count=len(entities))
        return entities

    def create(self, entity: dict[str, Any]) -> dict[str, Any]:
        """Create an entity and return it with server-assigned fields.

        Raises:
            KongValidationError: If Kong rejects the payload.
        """
        payload = to_payload(entity)
        self._log.info("creating_entity", name=self._display_name(payload))
        created = self._client.post(self._endpoint, json=payload)
        self._log.info("created_entity", id=created.get("id"))
        return created

    def update(self, id_or_name: str, entity: dict[str, Any]) -> dict[str, Any]:
        """Partially update an entity (PATCH semantics).

        None values are sent as null, resetting the field to its default.

        Raises:
            KongNotFoundError: If the entity does not exist.
            KongValidationError: If Kong rejects the payload.
        """
        payload = to_payload(entity, keep_none=True)
        self._log.info("updating_entity", id_or_name=id_or_name, fields=sorted(payload))
        updated = self._client.patch(f"{self._endpoint}/{id_or_name}", json=payload)
        self._log.info("updated_entity", id=updated.get("id"))
        return updated

    def delete(self, id_or_name: str) -> None:
        """Delete an entity.

        Raises:
            KongNotFoundError: If the entity does not exist.
        """
        self._log.info("deleting_entity", id_or_name=id_or_name)
        self._client.delete(f"{self._endpoint}/{id_or_name}")
        self._log.info("deleted_entity", id_or_name=id_or_name)

    @staticmethod
    def _display_name(entity: dict[str, Any]) -> str | None:
        return entity.get("name") or entity.get("username")
