"""
CLI utility helpers: settings loading, store access and output formatting.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from rich.text import Text

from compat_spine.core.errors import CompatError
from compat_spine.core.logging import configure_logging
from compat_spine.core.settings import CompatSettings, load_settings
from compat_spine.domain.history import HistoryStore
from compat_spine.pipelines.service import create_store

console = Console()
err_console = Console(stderr=True)

CONFIG_OPTION_HELP = "TOML config file (default: ./compat-spine.toml when present)"


# ── Settings / store helpers ─────────────────────────────────────────────


def load_cli_settings(config: Path | None = None) -> CompatSettings:
    """Load settings and configure logging, exiting with code 1 on bad config."""
    try:
        settings = load_settings(config)
    except CompatError as e:
        err_console.print(f"[bold red]Configuration error[/bold red]: {e.message}")
        raise typer.Exit(code=1) from e
    except ValidationError as e:
        err_console.print(f"[bold red]Invalid configuration[/bold red]:\n{e}")
        raise typer.Exit(code=1) from e

    configure_logging(level=settings.log_level, json_format=settings.log_format == "json")
    return settings


@contextmanager
def open_store(settings: CompatSettings) -> Iterator[HistoryStore]:
    """Open the configured history store and close it afterwards."""
    try:
        store = create_store(settings)
    except CompatError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.category.value}): {e.message}")
        raise typer.Exit(code=1) from e
    try:
        yield store
    finally:
        store.close()


def fail(error: CompatError) -> None:
    """Print a CompatError and exit with code 1."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    raise typer.Exit(code=1) from error


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert dataclass / pydantic model / dict to plain dict."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def print_table(items: list[Any], *, title: str = "") -> None:
    """Render a list of dataclasses/dicts as a Rich table."""
    if not items:
        console.print("[dim]No items.[/dim]")
        return
    first = _to_dict(items[0])
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in first:
        table.add_column(col, overflow="fold")
    for item in items:
        d = _to_dict(item)
        table.add_row(*(Text(str(v)) for v in d.values()))
    console.print(table)


def print_dict(data: Any, *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in _to_dict(data).items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
