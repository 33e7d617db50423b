"""Reconciliation engine: comparator, diff and orchestrator."""

from kong_adapter.sync.diff import (
    assemble_api_todo_lists,
    assemble_consumer_plugin_todo_lists,
    assemble_consumer_todo_lists,
    assemble_plugin_todo_lists,
)
from kong_adapter.sync.exceptions import DuplicateIdentityError, SyncAbortedError, SyncError
from kong_adapter.sync.matching import matches
from kong_adapter.sync.orchestrator import SyncOrchestrator
from kong_adapter.sync.protocols import DesiredStateProvider, GatewayStateProvider

__all__ = [
    "DesiredStateProvider",
    "DuplicateIdentityError",
    "GatewayStateProvider",
    "SyncAbortedError",
    "SyncError",
    "SyncOrchestrator",
    "assemble_api_todo_lists",
    "assemble_consumer_plugin_todo_lists",
    "assemble_consumer_todo_lists",
    "assemble_plugin_todo_lists",
    "matches",
]
