"""Plan command: show what a sync would change, without changing it."""

from __future__ import annotations

import typer
from rich.table import Table

from kong_adapter.cli.commands.base import (
    ScopeOption,
    Target,
    TargetArgument,
    console,
    get_config,
    handle_kong_error,
    handle_portal_error,
    handle_sync_error,
    open_orchestrator,
)
from kong_adapter.integrations.kong.exceptions import KongAPIError
from kong_adapter.integrations.portal.exceptions import PortalAPIError
from kong_adapter.models.todo import ApiSyncPlan, ConsumerSyncPlan
from kong_adapter.sync.exceptions import SyncError


def _format_counts(counts: dict[str, int]) -> str:
    return ", ".join(f"{count} to {action}" for action, count in counts.items() if count) or "-"


def print_api_plan(plan: ApiSyncPlan) -> None:
    """Print planned API and plugin changes."""
    table = Table(title="Planned API Changes")
    table.add_column("API", style="cyan", no_wrap=True)
    table.add_column("Action", style="green")
    table.add_column("Plugins")

    for api in plan.todo.add_list:
        plugins = plan.plugins.get(api.name)
        table.add_row(api.name, "create", _format_counts(plugins.summary()) if plugins else "-")
    for pair in plan.todo.update_list:
        plugins = plan.plugins.get(pair.desired.name)
        table.add_row(
            pair.desired.name,
            "update",
            _format_counts(plugins.summary()) if plugins else "-",
        )
    for api in plan.todo.delete_list:
        table.add_row(api.name, "[red]delete[/red]", "-")

    console.print(table)


def print_consumer_plan(plan: ConsumerSyncPlan) -> None:
    """Print planned consumer and plugin binding changes."""
    table = Table(title="Planned Consumer Changes")
    table.add_column("Consumer", style="cyan", no_wrap=True)
    table.add_column("Action", style="green")
    table.add_column("Plugin bindings")

    for consumer in plan.todo.add_list:
        bindings = plan.api_plugins.get(consumer.username)
        table.add_row(
            consumer.username,
            "create",
            _format_counts(bindings.summary()) if bindings else "-",
        )
    for pair in plan.todo.update_list:
        bindings = plan.api_plugins.get(pair.desired.username)
        table.add_row(
            pair.desired.username,
            "update",
            _format_counts(bindings.summary()) if bindings else "-",
        )
    for consumer in plan.todo.delete_list:
        table.add_row(consumer.username, "[red]delete[/red]", "-")

    console.print(table)


def plan(
    ctx: typer.Context,
    target: TargetArgument = Target.ALL,
    scope: ScopeOption = None,
) -> None:
    """Show the changes a sync would apply.

    Matched APIs and consumers are always listed as "update"; the sync
    only touches them if their attributes or plugins drifted.

    Examples:
        kong-adapter plan
        kong-adapter plan consumers --scope wicked
    """
    config = get_config(ctx)
    scope = scope or config.scope

    try:
        with open_orchestrator(config) as orchestrator:
            if target in (Target.APIS, Target.ALL):
                print_api_plan(orchestrator.plan_apis(scope))
            if target in (Target.CONSUMERS, Target.ALL):
                print_consumer_plan(orchestrator.plan_consumers(scope))
    except KongAPIError as e:
        handle_kong_error(e)
    except PortalAPIError as e:
        handle_portal_error(e)
    except SyncError as e:
        handle_sync_error(e)
