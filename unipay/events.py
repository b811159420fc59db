"""
Canonical Payment Events
Provider-agnostic payment state changes and the emitter that publishes them
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Optional

from blinker import Namespace

from unipay.types import PaymentMethod


class PaymentEventType(str, Enum):
    PAYMENT_INITIATED = "PAYMENT_INITIATED"
    PAYMENT_SUCCESSFUL = "PAYMENT_SUCCESSFUL"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    PAYMENT_CANCELLED = "PAYMENT_CANCELLED"


@dataclass
class PaymentEvent:
    """Fields shared by every canonical event."""
    type: ClassVar[PaymentEventType]

    transaction_id: str
    transaction_reference: str
    transaction_amount: float
    transaction_currency: str
    payment_method: Optional[PaymentMethod]
    payment_provider: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "type": self.type.value,
            "transactionId": self.transaction_id,
            "transactionReference": self.transaction_reference,
            "transactionAmount": self.transaction_amount,
            "transactionCurrency": self.transaction_currency,
            "paymentMethod": self.payment_method.value if self.payment_method else None,
            "paymentProvider": self.payment_provider,
            "metadata": self.metadata,
        }
        return data


@dataclass
class PaymentInitiatedEvent(PaymentEvent):
    type: ClassVar[PaymentEventType] = PaymentEventType.PAYMENT_INITIATED

    redirect_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["redirectUrl"] = self.redirect_url
        return data


@dataclass
class PaymentSuccessfulEvent(PaymentEvent):
    type: ClassVar[PaymentEventType] = PaymentEventType.PAYMENT_SUCCESSFUL


@dataclass
class PaymentFailedEvent(PaymentEvent):
    type: ClassVar[PaymentEventType] = PaymentEventType.PAYMENT_FAILED

    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["reason"] = self.reason
        return data


@dataclass
class PaymentCancelledEvent(PaymentEvent):
    type: ClassVar[PaymentEventType] = PaymentEventType.PAYMENT_CANCELLED

    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["reason"] = self.reason
        return data


EVENT_CLASSES = {
    PaymentEventType.PAYMENT_INITIATED: PaymentInitiatedEvent,
    PaymentEventType.PAYMENT_SUCCESSFUL: PaymentSuccessfulEvent,
    PaymentEventType.PAYMENT_FAILED: PaymentFailedEvent,
    PaymentEventType.PAYMENT_CANCELLED: PaymentCancelledEvent,
}


class PaymentEventEmitter:
    """
    Publish point for canonical payment events.

    One instance is created by the host application and handed to every
    provider (see PaymentProvider.use_event_emitter). Delivery is synchronous
    and best-effort: subscribers registered at emit time are called in turn,
    nothing is queued or retried, and emitting with no subscribers is a no-op.

    Subscribers receive ``(sender, event)`` where sender is the emitter.
    """

    def __init__(self):
        self._signals = Namespace()

    def signal(self, event_type):
        return self._signals.signal(PaymentEventType(event_type).value)

    def on(self, event_type, receiver: Optional[Callable] = None):
        """
        Subscribe to one event type.

        Can be used directly or as a decorator:

            @emitter.on(PaymentEventType.PAYMENT_SUCCESSFUL)
            def mark_paid(sender, event):
                ...
        """
        if receiver is None:
            def decorator(fn):
                self.signal(event_type).connect(fn, weak=False)
                return fn
            return decorator

        self.signal(event_type).connect(receiver, weak=False)
        return receiver

    def disconnect(self, event_type, receiver: Callable):
        self.signal(event_type).disconnect(receiver)

    def has_subscribers(self, event_type) -> bool:
        return bool(self.signal(event_type).receivers)

    def emit(self, event_type, event: PaymentEvent):
        self.signal(event_type).send(self, event=event)
