"""
CLI: ``compat-spine history``: show the stored snapshots of one feature.
"""

from __future__ import annotations

from pathlib import Path

import typer

from compat_spine.cli.utils import (
    CONFIG_OPTION_HELP,
    console,
    fail,
    load_cli_settings,
    open_store,
    print_json,
    print_table,
)
from compat_spine.core.errors import CompatError
from compat_spine.core.timestamps import to_iso8601
from compat_spine.domain.snapshot import Snapshot


def _row(snapshot: Snapshot) -> dict[str, str]:
    row = {
        "observed_at": to_iso8601(snapshot.observed_at),
        "standard": f"C++{snapshot.spec_version}",
    }
    for vendor, record in snapshot.vendor_records():
        text = f" {record.version_text}" if record.version_text else ""
        row[vendor.display_name] = f"[{record.support.label}]{text}"
    row["delivery"] = snapshot.delivery_state.value
    return row


def _json(snapshot: Snapshot) -> dict:
    return {
        "name": snapshot.name,
        "observed_at": to_iso8601(snapshot.observed_at),
        "spec_version": snapshot.spec_version,
        "paper": {"name": snapshot.paper.name, "link": snapshot.paper.link} if snapshot.paper else None,
        "compilers": {
            vendor.id: {
                "support": record.support.label,
                "display_text": record.display_text,
                "extra_text": record.extra_text,
            }
            for vendor, record in snapshot.vendor_records()
        },
        "delivery_state": snapshot.delivery_state.value,
    }


def history(
    name: str = typer.Argument(..., help="Feature name, exactly as listed"),
    config: Path | None = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),  # noqa: UP007
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show every stored snapshot of a feature, oldest first."""
    settings = load_cli_settings(config)

    with open_store(settings) as store:
        try:
            snapshots = store.history(name)
        except CompatError as e:
            fail(e)

    if as_json:
        print_json([_json(snapshot) for snapshot in snapshots])
        return

    if not snapshots:
        console.print(f"[dim]No snapshots for {name!r}.[/dim]")
        raise typer.Exit(code=1)
    print_table([_row(snapshot) for snapshot in snapshots], title=name)
