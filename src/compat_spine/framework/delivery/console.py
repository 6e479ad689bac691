"""Console delivery sink for development and dry runs."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from compat_spine.framework.delivery.base import BaseSink
from compat_spine.framework.delivery.protocol import DeliveryResult, SinkType


class ConsoleSink(BaseSink):
    """
    Console output sink.

    Prints reports and escalations as rich panels.
    """

    def __init__(
        self,
        name: str = "console",
        *,
        console: Console | None = None,
        **kwargs: Any,
    ):
        super().__init__(name, SinkType.CONSOLE, **kwargs)
        self._console = console or Console()

    def _deliver(self, text: str) -> DeliveryResult:
        self._console.print(Panel(Text(text), title="report", border_style="green", expand=False))
        return DeliveryResult.ok(self._name)

    def _escalate(self, message: str) -> DeliveryResult:
        recipient = self._operator_id or "operator"
        self._console.print(
            Panel(Text(message), title=f"escalation to {recipient}", border_style="red", expand=False)
        )
        return DeliveryResult.ok(self._name)
