"""compat-spine command line interface (typer)."""

from compat_spine.cli.app import app

__all__ = ["app"]
