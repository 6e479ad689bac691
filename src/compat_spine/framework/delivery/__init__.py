"""
Delivery sink package.

Sinks publish rendered reports and privately escalate problems to the
operator.
"""

from compat_spine.framework.delivery.base import BaseSink
from compat_spine.framework.delivery.console import ConsoleSink
from compat_spine.framework.delivery.factory import create_sink
from compat_spine.framework.delivery.protocol import DeliveryResult, DeliverySink, SinkType
from compat_spine.framework.delivery.webhook import WebhookSink

__all__ = [
    # Types
    "DeliveryResult",
    "SinkType",
    # Protocol / base
    "DeliverySink",
    "BaseSink",
    # Sinks
    "ConsoleSink",
    "WebhookSink",
    # Factory
    "create_sink",
]
