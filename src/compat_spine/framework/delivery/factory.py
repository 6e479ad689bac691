"""Build the configured delivery sink from settings."""

from __future__ import annotations

from compat_spine.core.errors import InvalidConfigError
from compat_spine.core.settings import CompatSettings
from compat_spine.framework.delivery.console import ConsoleSink
from compat_spine.framework.delivery.protocol import DeliverySink
from compat_spine.framework.delivery.webhook import WebhookSink


def create_sink(settings: CompatSettings) -> DeliverySink:
    """Create the sink selected by ``settings.sink``.

    Raises:
        InvalidConfigError: webhook sink selected without ``webhook_url``.
    """
    if settings.sink == "webhook":
        if not settings.webhook_url:
            raise InvalidConfigError("webhook sink requires webhook_url", key="webhook_url")
        return WebhookSink(
            settings.webhook_url,
            escalation_url=settings.escalation_url,
            operator_id=settings.operator_id,
            timeout=settings.http_timeout_seconds,
        )
    return ConsoleSink(operator_id=settings.operator_id)


__all__ = ["create_sink"]
