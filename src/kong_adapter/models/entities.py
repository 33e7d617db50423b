"""Pydantic models for the resources the adapter reconciles.

The same models describe both sides of a reconciliation: the desired state
read from the portal and the actual state read from Kong. Extra fields are
kept because gateway records carry server-generated metadata that the
comparator must be able to see (and ignore).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _validate_plugin_names(plugins: list[dict[str, Any]]) -> list[dict[str, Any]]:
    for index, plugin in enumerate(plugins):
        name = plugin.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError(f"plugin at index {index} has no name")
    return plugins


class ApiDefinition(BaseModel):
    """An API and the plugins configured on it.

    Attributes:
        name: API name; the identity used for matching.
        id: Gateway-assigned id (actual state only).
        config: Gateway-facing API attributes (upstream url, timeouts, ...).
        plugins: Ordered plugin configurations, identified by plugin name.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(min_length=1, description="API name (identity)")
    id: str | None = Field(default=None, description="Gateway-assigned id")
    config: dict[str, Any] = Field(default_factory=dict, description="API attributes")
    plugins: list[dict[str, Any]] = Field(default_factory=list, description="API plugins")

    @field_validator("plugins")
    @classmethod
    def validate_plugins(cls, v: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Every plugin needs a name to be matched by."""
        return _validate_plugin_names(v)


class ConsumerDefinition(BaseModel):
    """A consumer and its per-API plugin bindings.

    Attributes:
        username: Consumer username; the identity used for matching.
        id: Gateway-assigned id (actual state only).
        custom_id: Optional external identifier kept in sync with the portal.
        api_plugins: Ordered plugin bindings, at most one per plugin name.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    username: str = Field(min_length=1, description="Consumer username (identity)")
    id: str | None = Field(default=None, description="Gateway-assigned id")
    custom_id: str | None = Field(default=None, description="External identifier")
    api_plugins: list[dict[str, Any]] = Field(
        default_factory=list,
        alias="apiPlugins",
        description="Per-API plugin bindings",
    )

    @field_validator("api_plugins")
    @classmethod
    def validate_api_plugins(cls, v: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Every binding needs a name to be matched by."""
        return _validate_plugin_names(v)

    def attributes(self) -> dict[str, Any]:
        """Consumer fields that are reconciled on the gateway record."""
        attributes: dict[str, Any] = {"username": self.username}
        if self.custom_id is not None:
            attributes["custom_id"] = self.custom_id
        return attributes
