"""
CLI: ``compat-spine serve``: run both polling loops until interrupted.
"""

from __future__ import annotations

from pathlib import Path

import typer

from compat_spine.cli.utils import CONFIG_OPTION_HELP, console, fail, load_cli_settings
from compat_spine.core.errors import CompatError
from compat_spine.pipelines.service import CompatService


def serve(
    config: Path | None = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),  # noqa: UP007
) -> None:
    """Fetch and report compiler support changes until Ctrl-C."""
    settings = load_cli_settings(config)

    try:
        service = CompatService.from_settings(settings)
    except CompatError as e:
        fail(e)

    mode = "dry run" if settings.dry_reporting else "live"
    if settings.suppress_reporting:
        mode = "suppressed"
    console.print(
        f"[bold green]compat-spine[/bold green] watching {settings.source} "
        f"(fetch every {settings.fetch_interval_seconds:g}s, "
        f"report every {settings.report_interval_seconds:g}s, {mode})"
    )
    service.run_forever()
