"""
Event Normalization
Maps decoded provider state onto canonical payment events.

Each normalizer is a pure function returning the events to publish in
causal order. An empty list means the webhook does not correspond to a
canonical state change.
"""

import logging
from typing import List, Optional

from unipay.events import (
    EVENT_CLASSES,
    PaymentEvent,
    PaymentEventType,
)
from unipay.webhooks.decoding import (
    DecodedWebhook,
    PaydunyaNotification,
    StripeCheckoutSession,
)

logger = logging.getLogger(__name__)


# Stripe checkout session event types
STRIPE_SESSION_COMPLETED = "checkout.session.completed"
STRIPE_SESSION_EXPIRED = "checkout.session.expired"
STRIPE_ASYNC_SUCCEEDED = "checkout.session.async_payment_succeeded"
STRIPE_ASYNC_FAILED = "checkout.session.async_payment_failed"

STRIPE_HANDLED_EVENTS = frozenset({
    STRIPE_SESSION_COMPLETED,
    STRIPE_SESSION_EXPIRED,
    STRIPE_ASYNC_SUCCEEDED,
    STRIPE_ASYNC_FAILED,
})

# Paydunya invoice statuses
PAYDUNYA_HANDLED_STATUSES = frozenset({"completed", "pending", "cancelled", "failed"})
PAYDUNYA_SUCCESS_CODE = "00"


def build_event(
    event_type: PaymentEventType,
    decoded: DecodedWebhook,
    provider_name: str,
    reason: Optional[str] = None,
) -> PaymentEvent:
    event_class = EVENT_CLASSES[event_type]
    kwargs = dict(
        transaction_id=decoded.transaction_id,
        transaction_reference=decoded.transaction_reference,
        transaction_amount=decoded.amount,
        transaction_currency=decoded.currency,
        payment_method=decoded.payment_method,
        payment_provider=provider_name,
        metadata=decoded.metadata,
    )
    if event_type in (PaymentEventType.PAYMENT_FAILED, PaymentEventType.PAYMENT_CANCELLED):
        kwargs["reason"] = reason or ""
    return event_class(**kwargs)


def normalize_stripe_event(
    event_type: str,
    session: StripeCheckoutSession,
    provider_name: str = "stripe",
) -> List[PaymentEvent]:
    if event_type == STRIPE_SESSION_COMPLETED:
        events = [build_event(PaymentEventType.PAYMENT_INITIATED, session, provider_name)]
        # Captured synchronously: initiation bookkeeping first, then success
        if session.payment_status == "paid":
            events.append(build_event(PaymentEventType.PAYMENT_SUCCESSFUL, session, provider_name))
        return events

    if event_type == STRIPE_ASYNC_SUCCEEDED:
        return [build_event(PaymentEventType.PAYMENT_SUCCESSFUL, session, provider_name)]

    if event_type == STRIPE_ASYNC_FAILED:
        return [build_event(PaymentEventType.PAYMENT_FAILED, session, provider_name, "Payment failed")]

    if event_type == STRIPE_SESSION_EXPIRED:
        return [
            build_event(PaymentEventType.PAYMENT_CANCELLED, session, provider_name, "Checkout session expired")
        ]

    logger.info("No canonical event for Stripe event type %r (transaction %s)",
                event_type, session.transaction_id)
    return []


def normalize_paydunya_notification(
    status: Optional[str],
    notification: PaydunyaNotification,
    provider_name: str = "paydunya",
) -> List[PaymentEvent]:
    status = (status or "").lower()

    if status == "completed":
        if notification.response_code == PAYDUNYA_SUCCESS_CODE:
            return [build_event(PaymentEventType.PAYMENT_SUCCESSFUL, notification, provider_name)]
        logger.info("Paydunya invoice %s completed with response_code %r; no event emitted",
                    notification.transaction_reference, notification.response_code)
        return []

    if status == "pending":
        return [build_event(PaymentEventType.PAYMENT_INITIATED, notification, provider_name)]

    if status == "cancelled":
        return [build_event(PaymentEventType.PAYMENT_CANCELLED, notification, provider_name,
                            notification.response_text)]

    if status == "failed":
        return [build_event(PaymentEventType.PAYMENT_FAILED, notification, provider_name,
                            notification.fail_reason or notification.response_text)]

    logger.info("No canonical event for Paydunya status %r (invoice %s)",
                status, notification.transaction_reference)
    return []
