"""Data models for desired/actual state, todo lists and sync reports."""

from kong_adapter.models.entities import ApiDefinition, ConsumerDefinition
from kong_adapter.models.report import SyncOperation, SyncReport
from kong_adapter.models.todo import (
    ApiPair,
    ApiSyncPlan,
    ApiTodoList,
    ConsumerPair,
    ConsumerPluginTodoList,
    ConsumerSyncPlan,
    ConsumerTodoList,
    PluginPair,
    PluginTodoList,
)

__all__ = [
    "ApiDefinition",
    "ApiPair",
    "ApiSyncPlan",
    "ApiTodoList",
    "ConsumerDefinition",
    "ConsumerPair",
    "ConsumerPluginTodoList",
    "ConsumerSyncPlan",
    "ConsumerTodoList",
    "PluginPair",
    "PluginTodoList",
    "SyncOperation",
    "SyncReport",
]
