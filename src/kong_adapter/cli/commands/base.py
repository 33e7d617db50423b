"""Base utilities for adapter CLI commands.

This module provides common Typer options, error handling utilities,
and the wiring that builds a sync orchestrator from the configuration.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console

from kong_adapter.config import AdapterConfig, ConfigError, load_config
from kong_adapter.integrations.kong.client import KongAdminClient
from kong_adapter.integrations.kong.exceptions import (
    KongAPIError,
    KongAuthError,
    KongConnectionError,
    KongNotFoundError,
    KongValidationError,
)
from kong_adapter.integrations.portal.client import PortalClient
from kong_adapter.integrations.portal.exceptions import (
    PortalAPIError,
    PortalAuthError,
    PortalConnectionError,
)
from kong_adapter.services.kong.gateway import KongGateway
from kong_adapter.services.portal.state_provider import PortalStateProvider
from kong_adapter.sync.exceptions import SyncAbortedError, SyncError
from kong_adapter.sync.orchestrator import SyncOrchestrator

# Shared console instance for all commands
console = Console()


class Target(StrEnum):
    """What a sync or plan covers."""

    APIS = "apis"
    CONSUMERS = "consumers"
    ALL = "all"


# =============================================================================
# Common Typer Option Annotations
# =============================================================================

ScopeOption = Annotated[
    str | None,
    typer.Option(
        "--scope",
        "-s",
        help="Only reconcile resources in this scope (portal scope / Kong tag)",
    ),
]

TargetArgument = Annotated[
    Target,
    typer.Argument(help="Resources to reconcile: apis, consumers or all", case_sensitive=False),
]


# =============================================================================
# Wiring
# =============================================================================


def get_config(ctx: typer.Context) -> AdapterConfig:
    """Load the configuration selected by the global --config option."""
    config_path: Path | None = (ctx.obj or {}).get("config_path")
    try:
        return load_config(config_path)
    except (ConfigError, ValidationError) as e:
        console.print("[red]Error:[/red] Invalid configuration")
        console.print(f"  {e}")
        raise typer.Exit(1) from e


@contextmanager
def open_orchestrator(config: AdapterConfig) -> Iterator[SyncOrchestrator]:
    """Build an orchestrator on freshly opened portal and Kong clients."""
    with (
        PortalClient(config.portal) as portal,
        KongAdminClient(config.kong, config.kong_auth) as kong,
    ):
        yield SyncOrchestrator(PortalStateProvider(portal), KongGateway(kong))


# =============================================================================
# Error Handling
# =============================================================================


def handle_kong_error(error: KongAPIError) -> None:
    """Handle Kong API errors with user-friendly output.

    Raises:
        typer.Exit: Always exits with code 1.
    """
    if isinstance(error, KongConnectionError):
        console.print("[red]Error:[/red] Cannot connect to Kong Admin API")
        console.print(f"  {error.message}")
        if error.original_error:
            console.print(f"  Cause: {error.original_error}")
        console.print("\n[dim]Hint: Check that Kong is running and the URL is correct.[/dim]")

    elif isinstance(error, KongAuthError):
        console.print("[red]Error:[/red] Kong authentication failed")
        console.print(f"  {error.message}")
        console.print("\n[dim]Hint: Check your API key or certificate configuration.[/dim]")

    elif isinstance(error, KongNotFoundError):
        console.print(f"[red]Error:[/red] {error.resource_type or 'Kong resource'} not found")
        console.print(f"  {error.message}")

    elif isinstance(error, KongValidationError):
        console.print("[red]Error:[/red] Kong rejected the request")
        console.print(f"  {error.message}")
        if error.validation_errors:
            console.print("\n  Field errors:")
            for field, err in error.validation_errors.items():
                console.print(f"    - {field}: {err}")

    else:
        console.print(f"[red]Error:[/red] {error.message}")
        if error.status_code:
            console.print(f"  HTTP Status: {error.status_code}")
        if error.endpoint:
            console.print(f"  Endpoint: {error.endpoint}")

    raise typer.Exit(1)


def handle_portal_error(error: PortalAPIError) -> None:
    """Handle portal API errors with user-friendly output.

    Raises:
        typer.Exit: Always exits with code 1.
    """
    if isinstance(error, PortalConnectionError):
        console.print("[red]Error:[/red] Cannot connect to the portal")
        console.print(f"  {error.message}")
        console.print("\n[dim]Hint: Check that the portal is running and the URL is correct.[/dim]")
    elif isinstance(error, PortalAuthError):
        console.print("[red]Error:[/red] Portal authentication failed")
        console.print(f"  {error.message}")
        console.print("\n[dim]Hint: Check the portal token.[/dim]")
    else:
        console.print(f"[red]Error:[/red] {error}")

    raise typer.Exit(1)


def handle_sync_error(error: SyncError) -> None:
    """Handle reconciliation errors with user-friendly output.

    Raises:
        typer.Exit: Always exits with code 1.
    """
    console.print(f"[red]Error:[/red] Sync aborted: {error}")
    if isinstance(error, SyncAbortedError):
        console.print(f"  Operations applied before the failure: {error.report.total}")
        console.print("\n[dim]Applied changes are kept; the next cycle continues from there.[/dim]")
    raise typer.Exit(1)
