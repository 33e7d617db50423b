"""Main CLI entry point using Typer."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from kong_adapter import __version__
from kong_adapter.cli.commands import check, plan, sync
from kong_adapter.logging.config import configure_logging

app = typer.Typer(
    name="kong-adapter",
    help="Keep a Kong gateway in sync with the API portal.",
    add_completion=True,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"kong-adapter version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Write console logs as JSON lines.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the adapter config file.",
        envvar="KONG_ADAPTER_CONFIG",
    ),
) -> None:
    """Kong adapter - reconcile Kong APIs, plugins and consumers with the portal."""
    configure_logging(verbose=verbose, debug=debug, json_output=json_logs)
    ctx.obj = {"config_path": config}


# Register subcommands
app.command()(sync.sync)
app.command()(plan.plan)
app.command()(check.check)


if __name__ == "__main__":
    app()
