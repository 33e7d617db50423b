"""Todo lists produced by the diff engine.

A todo list is a transient value built fresh for every reconciliation
cycle. Add entries are desired elements, delete entries are actual
elements, and update/patch entries pair the desired element with its
actual counterpart. Plugin-level lists also carry the owning API or
consumer pair the plugins belong to.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from kong_adapter.models.entities import ApiDefinition, ConsumerDefinition


class ApiPair(BaseModel):
    """An API present in both the portal and the gateway."""

    model_config = ConfigDict(extra="forbid")

    desired: ApiDefinition
    actual: ApiDefinition


class ConsumerPair(BaseModel):
    """A consumer present in both the portal and the gateway."""

    model_config = ConfigDict(extra="forbid")

    desired: ConsumerDefinition
    actual: ConsumerDefinition


class PluginPair(BaseModel):
    """A plugin (or consumer plugin binding) present on both sides."""

    model_config = ConfigDict(extra="forbid")

    desired: dict[str, Any]
    actual: dict[str, Any]

    @property
    def name(self) -> str:
        return str(self.desired["name"])


class ApiTodoList(BaseModel):
    """APIs to add, update (and sync plugins of) and delete."""

    add_list: list[ApiDefinition] = Field(default_factory=list)
    update_list: list[ApiPair] = Field(default_factory=list)
    delete_list: list[ApiDefinition] = Field(default_factory=list)

    def summary(self) -> dict[str, int]:
        """Entry counts per bucket, for logging."""
        return {
            "add": len(self.add_list),
            "update": len(self.update_list),
            "delete": len(self.delete_list),
        }


class PluginTodoList(BaseModel):
    """Plugins of one API to add, update and delete.

    Attributes:
        desired_api: The owning API as declared by the portal.
        actual_api: The owning API as it exists in the gateway.
    """

    desired_api: ApiDefinition
    actual_api: ApiDefinition
    add_list: list[dict[str, Any]] = Field(default_factory=list)
    update_list: list[PluginPair] = Field(default_factory=list)
    delete_list: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.add_list or self.update_list or self.delete_list)

    def summary(self) -> dict[str, int]:
        """Entry counts per bucket, for logging."""
        return {
            "add": len(self.add_list),
            "update": len(self.update_list),
            "delete": len(self.delete_list),
        }


class ConsumerTodoList(BaseModel):
    """Consumers to add, update (and sync bindings of) and delete."""

    add_list: list[ConsumerDefinition] = Field(default_factory=list)
    update_list: list[ConsumerPair] = Field(default_factory=list)
    delete_list: list[ConsumerDefinition] = Field(default_factory=list)

    def summary(self) -> dict[str, int]:
        """Entry counts per bucket, for logging."""
        return {
            "add": len(self.add_list),
            "update": len(self.update_list),
            "delete": len(self.delete_list),
        }


class ConsumerPluginTodoList(BaseModel):
    """Per-API plugin bindings of one consumer to add, patch and delete.

    Attributes:
        desired_consumer: The owning consumer as declared by the portal.
        actual_consumer: The owning consumer as it exists in the gateway.
    """

    desired_consumer: ConsumerDefinition
    actual_consumer: ConsumerDefinition
    add_list: list[dict[str, Any]] = Field(default_factory=list)
    patch_list: list[PluginPair] = Field(default_factory=list)
    delete_list: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.add_list or self.patch_list or self.delete_list)

    def summary(self) -> dict[str, int]:
        """Entry counts per bucket, for logging."""
        return {
            "add": len(self.add_list),
            "patch": len(self.patch_list),
            "delete": len(self.delete_list),
        }


class ApiSyncPlan(BaseModel):
    """Dry-run result of an API sync.

    Attributes:
        todo: Top-level API changes.
        plugins: Plugin changes keyed by API name, for every added or
            matched API whose plugins are out of sync.
    """

    todo: ApiTodoList
    plugins: dict[str, PluginTodoList] = Field(default_factory=dict)


class ConsumerSyncPlan(BaseModel):
    """Dry-run result of a consumer sync.

    Attributes:
        todo: Top-level consumer changes.
        api_plugins: Binding changes keyed by username, for every added or
            matched consumer whose bindings are out of sync.
    """

    todo: ConsumerTodoList
    api_plugins: dict[str, ConsumerPluginTodoList] = Field(default_factory=dict)
