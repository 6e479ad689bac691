"""
Delivery sink base class.

Holds the identity shared by all sinks: name, type, the operator that
receives escalations, and an enable switch.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from compat_spine.framework.delivery.protocol import DeliveryResult, SinkType


class BaseSink(ABC):
    """
    Base class for delivery sink implementations.

    A disabled sink accepts every call and reports success without sending.
    """

    def __init__(
        self,
        name: str,
        sink_type: SinkType,
        *,
        operator_id: str = "",
        enabled: bool = True,
    ):
        self._name = name
        self._sink_type = sink_type
        self._operator_id = operator_id
        self._enabled = enabled

    @property
    def name(self) -> str:
        return self._name

    @property
    def sink_type(self) -> SinkType:
        return self._sink_type

    @property
    def operator_id(self) -> str:
        return self._operator_id

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        """Enable the sink."""
        self._enabled = True

    def disable(self) -> None:
        """Disable the sink."""
        self._enabled = False

    def deliver(self, text: str) -> DeliveryResult:
        if not self._enabled:
            return DeliveryResult.ok(self._name, message="sink disabled")
        return self._deliver(text)

    def escalate(self, message: str) -> DeliveryResult:
        if not self._enabled:
            return DeliveryResult.ok(self._name, message="sink disabled")
        return self._escalate(message)

    @abstractmethod
    def _deliver(self, text: str) -> DeliveryResult:
        ...

    @abstractmethod
    def _escalate(self, message: str) -> DeliveryResult:
        ...
