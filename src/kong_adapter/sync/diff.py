"""Diff engine: classify desired vs actual collections into todo lists.

All four functions run the same two passes:

1. Desired-driven: every desired element without an actual counterpart is
   an add; every element found on both sides is marked handled and, for
   APIs and consumers, always becomes an update (the nested child sync
   decides whether anything really changes). Plugins and consumer plugin
   bindings only become updates/patches when the comparator says they
   drifted.
2. Mop-up: every actual element not handled in pass 1 is a delete.

Adds and updates keep the desired order; deletes keep the actual order.
The functions are pure and never touch the network.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

import structlog

from kong_adapter.models.entities import ApiDefinition, ConsumerDefinition
from kong_adapter.models.todo import (
    ApiPair,
    ApiTodoList,
    ConsumerPair,
    ConsumerPluginTodoList,
    ConsumerTodoList,
    PluginPair,
    PluginTodoList,
)
from kong_adapter.sync.exceptions import DuplicateIdentityError
from kong_adapter.sync.matching import matches

logger = structlog.get_logger()

T = TypeVar("T")


def _index(
    items: Iterable[T],
    identity: Callable[[T], str],
    kind: str,
    side: str,
) -> dict[str, T]:
    """Map identity to element, refusing duplicate identities."""
    indexed: dict[str, T] = {}
    for item in items:
        key = identity(item)
        if key in indexed:
            raise DuplicateIdentityError(kind, key, side)
        indexed[key] = item
    return indexed


def _plugin_name(plugin: dict[str, Any]) -> str:
    return str(plugin["name"])


def _classify_plugins(
    desired_plugins: list[dict[str, Any]],
    actual_plugins: list[dict[str, Any]],
    kind: str,
) -> tuple[list[dict[str, Any]], list[PluginPair], list[dict[str, Any]]]:
    """Two-pass classification shared by API plugins and consumer bindings.

    Returns:
        Tuple of (adds, drifted pairs, deletes). Pairs that already match
        appear in none of the three.
    """
    _index(desired_plugins, _plugin_name, kind, "desired")
    actual_by_name = _index(actual_plugins, _plugin_name, kind, "actual")

    adds: list[dict[str, Any]] = []
    drifted: list[PluginPair] = []
    handled: set[str] = set()

    for desired in desired_plugins:
        name = _plugin_name(desired)
        actual = actual_by_name.get(name)
        if actual is None:
            adds.append(desired)
            continue
        if not matches(desired, actual):
            drifted.append(PluginPair(desired=desired, actual=actual))
        handled.add(name)

    deletes = [actual for actual in actual_plugins if _plugin_name(actual) not in handled]
    return adds, drifted, deletes


def assemble_api_todo_lists(
    desired_apis: list[ApiDefinition],
    actual_apis: list[ApiDefinition],
) -> ApiTodoList:
    """Classify APIs by name into add, update and delete lists.

    Args:
        desired_apis: APIs declared by the portal.
        actual_apis: APIs present in the gateway.

    Returns:
        ApiTodoList where every matched pair is in ``update_list``.

    Raises:
        DuplicateIdentityError: If a name occurs twice on one side.
    """
    _index(desired_apis, lambda api: api.name, "api", "desired")
    actual_by_name = _index(actual_apis, lambda api: api.name, "api", "actual")

    todo = ApiTodoList()
    handled: set[str] = set()

    for desired in desired_apis:
        actual = actual_by_name.get(desired.name)
        if actual is None:
            todo.add_list.append(desired)
            continue
        todo.update_list.append(ApiPair(desired=desired, actual=actual))
        handled.add(actual.name)

    for actual in actual_apis:
        if actual.name not in handled:
            todo.delete_list.append(actual)

    logger.debug("api_todo_lists_assembled", **todo.summary())
    return todo


def assemble_plugin_todo_lists(
    desired_api: ApiDefinition,
    actual_api: ApiDefinition,
) -> PluginTodoList:
    """Classify the plugins of one API by plugin name.

    Plugins present on both sides are only scheduled for update when the
    actual plugin does not satisfy the desired one.

    Raises:
        DuplicateIdentityError: If a plugin name occurs twice on one side.
    """
    adds, drifted, deletes = _classify_plugins(desired_api.plugins, actual_api.plugins, "plugin")
    todo = PluginTodoList(
        desired_api=desired_api,
        actual_api=actual_api,
        add_list=adds,
        update_list=drifted,
        delete_list=deletes,
    )
    logger.debug("plugin_todo_lists_assembled", api=desired_api.name, **todo.summary())
    return todo


def assemble_consumer_todo_lists(
    desired_consumers: list[ConsumerDefinition],
    actual_consumers: list[ConsumerDefinition],
) -> ConsumerTodoList:
    """Classify consumers by username into add, update and delete lists.

    Consumers missing from the portal are deleted: the adapter owns every
    consumer in its scope.

    Raises:
        DuplicateIdentityError: If a username occurs twice on one side.
    """
    _index(desired_consumers, lambda c: c.username, "consumer", "desired")
    actual_by_username = _index(actual_consumers, lambda c: c.username, "consumer", "actual")

    todo = ConsumerTodoList()
    handled: set[str] = set()

    for desired in desired_consumers:
        actual = actual_by_username.get(desired.username)
        if actual is None:
            logger.debug("consumer_missing_in_gateway", username=desired.username)
            todo.add_list.append(desired)
            continue
        todo.update_list.append(ConsumerPair(desired=desired, actual=actual))
        handled.add(actual.username)

    for actual in actual_consumers:
        if actual.username not in handled:
            logger.debug("consumer_missing_in_portal", username=actual.username)
            todo.delete_list.append(actual)

    logger.debug("consumer_todo_lists_assembled", **todo.summary())
    return todo


def assemble_consumer_plugin_todo_lists(
    desired_consumer: ConsumerDefinition,
    actual_consumer: ConsumerDefinition,
) -> ConsumerPluginTodoList:
    """Classify the per-API plugin bindings of one consumer.

    Drifted bindings go to ``patch_list``: they are corrected with a
    partial update rather than replaced.

    Raises:
        DuplicateIdentityError: If a plugin name occurs twice on one side.
    """
    adds, drifted, deletes = _classify_plugins(
        desired_consumer.api_plugins,
        actual_consumer.api_plugins,
        "consumer_plugin",
    )
    todo = ConsumerPluginTodoList(
        desired_consumer=desired_consumer,
        actual_consumer=actual_consumer,
        add_list=adds,
        patch_list=drifted,
        delete_list=deletes,
    )
    logger.debug(
        "consumer_plugin_todo_lists_assembled",
        username=desired_consumer.username,
        **todo.summary(),
    )
    return todo
