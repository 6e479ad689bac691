"""Webhook delivery sink.

Manifesto:
    Any HTTP endpoint should be a valid report target. Reports are POSTed
    as JSON to one URL; escalations go to a separate URL when configured
    (a private channel), otherwise to the same URL tagged with the
    operator as recipient.

Payloads:
    ::

        {"type": "report", "text": "..."}
        {"type": "escalation", "recipient": "<operator_id>", "text": "..."}

Tags:
    compat-spine, framework, delivery, webhook, HTTP-POST

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any

import httpx

from compat_spine.core.errors import TransientError
from compat_spine.framework.delivery.base import BaseSink
from compat_spine.framework.delivery.protocol import DeliveryResult, SinkType


class WebhookSink(BaseSink):
    """
    Generic webhook sink.

    POSTs report and escalation payloads to a URL.
    """

    def __init__(
        self,
        url: str,
        *,
        escalation_url: str | None = None,
        operator_id: str = "",
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
        name: str = "webhook",
        **kwargs: Any,
    ):
        super().__init__(name, SinkType.WEBHOOK, operator_id=operator_id, **kwargs)
        self._url = url
        self._escalation_url = escalation_url or url
        self._timeout = timeout
        self._headers = headers or {}
        self._client = client

    @property
    def url(self) -> str:
        return self._url

    @property
    def escalation_url(self) -> str:
        return self._escalation_url

    def _deliver(self, text: str) -> DeliveryResult:
        return self._post(self._url, {"type": "report", "text": text})

    def _escalate(self, message: str) -> DeliveryResult:
        payload = {"type": "escalation", "recipient": self._operator_id, "text": message}
        return self._post(self._escalation_url, payload)

    def _post(self, url: str, payload: dict[str, Any]) -> DeliveryResult:
        headers = {"Content-Type": "application/json"}
        headers.update(self._headers)

        try:
            if self._client is not None:
                response = self._client.post(url, json=payload, headers=headers, timeout=self._timeout)
            else:
                with httpx.Client(timeout=self._timeout) as client:
                    response = client.post(url, json=payload, headers=headers)
            response.raise_for_status()
            return DeliveryResult.ok(self._name, response={"status": response.status_code})

        except httpx.HTTPStatusError as e:
            error = TransientError(str(e), cause=e).with_context(
                url=url, http_status=e.response.status_code
            )
            return DeliveryResult.fail(self._name, error)
        except httpx.HTTPError as e:
            return DeliveryResult.fail(self._name, TransientError(str(e), cause=e).with_context(url=url))
        except Exception as e:
            return DeliveryResult.fail(self._name, e)
