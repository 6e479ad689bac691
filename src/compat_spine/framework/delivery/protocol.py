"""
Delivery sink protocol and result type.

A sink has two outlets:

- ``deliver(text)`` publishes a rendered report.
- ``escalate(message)`` privately notifies the operator (unclassifiable
  changes, safe-mode halts).

Sinks report failure through :class:`DeliveryResult` instead of raising, so
the notification loop can decide per record whether to mark it delivered.

Design Principles:
- Protocol over Inheritance: protocol.py has contracts, sinks live beside it
- Failures are values: a sink never raises out of ``deliver``/``escalate``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from compat_spine.core.timestamps import utc_now


class SinkType(str, Enum):
    """Delivery sink types."""

    CONSOLE = "console"
    WEBHOOK = "webhook"


@dataclass
class DeliveryResult:
    """Result of one delivery or escalation attempt."""

    sink_name: str
    success: bool
    message: str | None = None
    response: dict[str, Any] | None = None
    error: Exception | None = None
    delivered_at: datetime = field(default_factory=utc_now)

    @classmethod
    def ok(cls, sink_name: str, message: str | None = None, **kwargs: Any) -> DeliveryResult:
        return cls(sink_name=sink_name, success=True, message=message, **kwargs)

    @classmethod
    def fail(cls, sink_name: str, error: Exception) -> DeliveryResult:
        return cls(
            sink_name=sink_name,
            success=False,
            error=error,
            message=str(error),
        )


@runtime_checkable
class DeliverySink(Protocol):
    """
    Protocol for delivery sinks.

    Implementations must provide:
    - name: Sink identifier used in logs
    - deliver(): Publish a rendered report
    - escalate(): Send a private message to the operator
    """

    @property
    def name(self) -> str:
        ...

    def deliver(self, text: str) -> DeliveryResult:
        """Publish report text."""
        ...

    def escalate(self, message: str) -> DeliveryResult:
        """Send a private message to the configured operator."""
        ...


__all__ = [
    "DeliveryResult",
    "DeliverySink",
    "SinkType",
]
