"""
CLI: ``compat-spine tick``: run a single loop iteration by hand.
"""

from __future__ import annotations

from pathlib import Path

import typer

from compat_spine.cli.utils import (
    CONFIG_OPTION_HELP,
    fail,
    load_cli_settings,
    open_store,
    print_dict,
    print_json,
)
from compat_spine.core.errors import CompatError
from compat_spine.framework.delivery import create_sink
from compat_spine.framework.sources import create_source
from compat_spine.pipelines.ingestion import IngestionLoop
from compat_spine.pipelines.notification import NotificationLoop, NotificationPolicy

app = typer.Typer(no_args_is_help=True)


@app.command("ingest")
def tick_ingest(
    config: Path | None = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),  # noqa: UP007
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Fetch once and persist changed features."""
    settings = load_cli_settings(config)
    try:
        source = create_source(settings)
    except CompatError as e:
        fail(e)

    with open_store(settings) as store:
        summary = IngestionLoop(source, store).tick()

    if as_json:
        print_json(summary.to_dict())
    else:
        print_dict(summary, title="Ingestion tick")
    if summary.failed and not summary.fetched:
        raise typer.Exit(code=1)


@app.command("notify")
def tick_notify(
    config: Path | None = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),  # noqa: UP007
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Report pending changes once."""
    settings = load_cli_settings(config)
    try:
        sink = create_sink(settings)
    except CompatError as e:
        fail(e)

    with open_store(settings) as store:
        loop = NotificationLoop(store, sink, NotificationPolicy.from_settings(settings))
        summary = loop.tick()

    if as_json:
        print_json(summary.to_dict())
    else:
        print_dict(summary, title="Notification tick")
