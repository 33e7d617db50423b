"""Check command: verify the adapter can reach both ends."""

from __future__ import annotations

import structlog
import typer
from rich.table import Table

from kong_adapter.cli.commands.base import console, get_config
from kong_adapter.integrations.kong.client import KongAdminClient
from kong_adapter.integrations.portal.client import PortalClient

logger = structlog.get_logger()


def check(ctx: typer.Context) -> None:
    """Check connectivity to the Kong Admin API and the portal."""
    config = get_config(ctx)
    logger.info("checking_connectivity")

    with KongAdminClient(config.kong, config.kong_auth) as kong:
        kong_ok = kong.check_connection()
    with PortalClient(config.portal) as portal:
        portal_ok = portal.ping()

    table = Table(title="Adapter Connectivity")
    table.add_column("Component", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("URL", style="dim")
    table.add_row(
        "Kong Admin API",
        "[green]reachable[/green]" if kong_ok else "[red]unreachable[/red]",
        config.kong.base_url,
    )
    table.add_row(
        "Portal",
        "[green]reachable[/green]" if portal_ok else "[red]unreachable[/red]",
        config.portal.base_url,
    )
    console.print(table)

    logger.info("connectivity_checked", kong=kong_ok, portal=portal_ok)
    if not (kong_ok and portal_ok):
        raise typer.Exit(1)
