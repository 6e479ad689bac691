"""
CLI: ``compat-spine samples``: preview the report for each kind of change.
"""

from __future__ import annotations

import typer
from rich.panel import Panel
from rich.text import Text

from compat_spine.cli.utils import console
from compat_spine.core.errors import ReportError
from compat_spine.domain.report import ReportOptions, synthesize
from compat_spine.domain.samples import sample_scenarios


def samples(
    no_text_changes: bool = typer.Option(
        False, "--no-text-changes", help="Render as if text changes were not narrated"
    ),
) -> None:
    """Render the built-in sample changes."""
    options = ReportOptions(narrate_text_changes=not no_text_changes)

    for scenario in sample_scenarios():
        try:
            report = synthesize(scenario.previous, scenario.next, options)
        except ReportError as e:
            console.print(Panel(f"[red]{e.message}[/red]", title=scenario.title, expand=False))
            continue

        body = Text(report.text) if not report.is_empty else "[dim](not narrated)[/dim]"
        subtitle = f"{report.classification.category.value}, {len(report.text)} chars"
        console.print(Panel(body, title=scenario.title, subtitle=subtitle, expand=False))
