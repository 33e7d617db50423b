"""Desired-state provider backed by the portal API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from kong_adapter.integrations.portal.exceptions import PortalDataError
from kong_adapter.models.entities import ApiDefinition, ConsumerDefinition

if TYPE_CHECKING:
    from kong_adapter.integrations.portal.client import PortalClient

logger = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)


class PortalStateProvider:
    """Reads the API and consumer definitions the gateway should converge to.

    Example:
        >>> with PortalClient(PortalConnectionConfig(base_url="http://portal:3001")) as client:
        ...     apis = PortalStateProvider(client).fetch_desired_apis(scope="wicked")
    """

    def __init__(self, client: PortalClient) -> None:
        self._client = client
        self._log = logger.bind(service="portal_state_provider")

    def fetch_desired_apis(self, scope: str | None = None) -> list[ApiDefinition]:
        """Fetch the desired APIs, with their plugins.

        Raises:
            PortalAPIError: If the portal request fails.
            PortalDataError: If the portal returns malformed definitions.
        """
        items = self._fetch_collection("apis", scope)
        apis = self._validate_all(ApiDefinition, items, "apis")
        self._log.debug("fetched_desired_apis", scope=scope, count=len(apis))
        return apis

    def fetch_desired_consumers(self, scope: str | None = None) -> list[ConsumerDefinition]:
        """Fetch the desired consumers, with their per-API plugin bindings.

        Raises:
            PortalAPIError: If the portal request fails.
            PortalDataError: If the portal returns malformed definitions.
        """
        items = self._fetch_collection("consumers", scope)
        consumers = self._validate_all(ConsumerDefinition, items, "consumers")
        self._log.debug("fetched_desired_consumers", scope=scope, count=len(consumers))
        return consumers

    def _fetch_collection(self, collection: str, scope: str | None) -> list[Any]:
        """Return the items of a collection, wrapped (``{"apis": [...]}``) or bare."""
        params = {"scope": scope} if scope else None
        body = self._client.get(collection, params=params)
        if isinstance(body, list):
            return body

        items = body.get(collection) if isinstance(body, dict) else None
        if not isinstance(items, list):
            raise PortalDataError(
                f"Portal response has no '{collection}' list",
                response_body=body if isinstance(body, dict) else {"raw": body},
                endpoint=collection,
            )
        return items

    @staticmethod
    def _validate_all(
        model: type[M],
        items: list[Any],
        collection: str,
    ) -> list[M]:
        try:
            return [model.model_validate(item) for item in items]
        except ValidationError as e:
            raise PortalDataError(
                f"Invalid {collection} definition from portal: {e}",
                endpoint=collection,
            ) from e
