"""Sync command: reconcile the gateway against the portal."""

from __future__ import annotations

import time
from typing import Annotated

import structlog
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
from kong_adapter.config import AdapterConfig
from kong_adapter.integrations.kong.exceptions import KongAPIError
from kong_adapter.integrations.portal.exceptions import PortalAPIError
from kong_adapter.models.report import SyncReport
from kong_adapter.sync.exceptions import SyncError

logger = structlog.get_logger()


def run_cycle(config: AdapterConfig, target: Target, scope: str | None) -> SyncReport:
    """Run one reconciliation cycle for the given target."""
    with open_orchestrator(config) as orchestrator:
        if target is Target.APIS:
            return orchestrator.sync_apis(scope)
        if target is Target.CONSUMERS:
            return orchestrator.sync_consumers(scope)
        return orchestrator.sync_all(scope)


def print_report(report: SyncReport) -> None:
    """Print the operations a cycle applied."""
    if not report.operations:
        console.print("[green]Gateway is in sync.[/green] No changes applied.")
        return

    table = Table(title="Applied Changes")
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Action", style="green")
    table.add_column("Name")
    table.add_column("Owner", style="dim")
    for op in report.operations:
        table.add_row(op.kind, op.action, op.identity, op.parent or "")
    console.print(table)
    console.print(f"\n[green]Applied {report.total} change(s).[/green]")


def sync(
    ctx: typer.Context,
    target: TargetArgument = Target.ALL,
    scope: ScopeOption = None,
    loop: Annotated[
        bool,
        typer.Option("--loop", help="Keep syncing every configured interval"),
    ] = False,
    interval: Annotated[
        float | None,
        typer.Option("--interval", "-i", help="Seconds between cycles (implies --loop)", min=0.1),
    ] = None,
) -> None:
    """Reconcile the gateway against the portal.

    Examples:
        kong-adapter sync
        kong-adapter sync apis --scope wicked
        kong-adapter sync all --interval 30
    """
    config = get_config(ctx)
    scope = scope or config.scope

    if loop or interval is not None:
        _sync_forever(config, target, scope, interval or config.interval)
        return

    try:
        report = run_cycle(config, target, scope)
    except KongAPIError as e:
        handle_kong_error(e)
    except PortalAPIError as e:
        handle_portal_error(e)
    except SyncError as e:
        handle_sync_error(e)
    else:
        print_report(report)


def _sync_forever(
    config: AdapterConfig,
    target: Target,
    scope: str | None,
    interval: float,
) -> None:
    """Run cycles until interrupted; a failed cycle is logged and retried."""
    log = logger.bind(target=target.value, scope=scope, interval=interval)
    log.info("sync_loop_started")
    console.print(f"Syncing {target.value} every {interval:g}s. Press Ctrl+C to stop.")

    cycle = 0
    try:
        while True:
            cycle += 1
            try:
                report = run_cycle(config, target, scope)
            except (KongAPIError, PortalAPIError, SyncError) as e:
                log.error("sync_cycle_failed", cycle=cycle, error=str(e))
            else:
                log.info("sync_cycle_completed", cycle=cycle, operations=report.total)
            time.sleep(interval)
    except KeyboardInterrupt:
        log.info("sync_loop_stopped", cycles=cycle)
        console.print("\n[yellow]Stopped.[/yellow]")
