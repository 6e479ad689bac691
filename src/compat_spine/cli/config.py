"""
CLI: ``compat-spine config``: configuration inspection.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from compat_spine.cli.utils import CONFIG_OPTION_HELP, console, load_cli_settings

app = typer.Typer(no_args_is_help=True)

_SECRET_FIELDS = {"webhook_url", "escalation_url"}


@app.command("show")
def show_config(
    config: Path | None = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),  # noqa: UP007
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, json"),
) -> None:
    """Show the resolved configuration."""
    settings = load_cli_settings(config)

    if format == "json":
        console.print_json(settings.model_dump_json())
        return

    if format != "table":
        console.print(f"[red]Unknown format:[/red] {format}")
        raise typer.Exit(code=1)

    table = Table(title="compat-spine settings")
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in settings.model_dump().items():
        if key in _SECRET_FIELDS and value:
            value = "***"
        table.add_row(key, str(value))
    console.print(table)
