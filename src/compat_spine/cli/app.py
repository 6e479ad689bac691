"""
Root Typer application for the compat-spine CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

app = Typer(
    name="compat-spine",
    help="compat-spine: watch the C++ compiler support matrix and report changes.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        from compat_spine import __version__

        try:
            v = pkg_version("compat-spine")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"compat-spine {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """compat-spine CLI: run the watcher, tick loops by hand, inspect history."""


# ── Sub-command registration ─────────────────────────────────────────────

from compat_spine.cli.config import app as config_app  # noqa: E402
from compat_spine.cli.history import history  # noqa: E402
from compat_spine.cli.samples import samples  # noqa: E402
from compat_spine.cli.serve import serve  # noqa: E402
from compat_spine.cli.tick import app as tick_app  # noqa: E402

app.command("serve")(serve)
app.command("samples")(samples)
app.command("history")(history)
app.add_typer(tick_app, name="tick", help="Run one ingestion or notification tick.")
app.add_typer(config_app, name="config", help="Configuration inspection.")
