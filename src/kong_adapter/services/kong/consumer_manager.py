"""Consumer manager for Kong Consumers."""

from __future__ import annotations

from kong_adapter.services.kong.base import BaseEntityManager


class ConsumerManager(BaseEntityManager):
    """Manager for Kong Consumer entities.

    Example:
        >>> manager = ConsumerManager(client)
        >>> created = manager.create({"username": "alice", "custom_id": "u-1"})
        >>> manager.delete(created["id"])
    """

    _endpoint = "consumers"
    _entity_name = "consumer"
