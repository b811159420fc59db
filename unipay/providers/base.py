import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Union

from unipay.errors import UnsupportedOperationError
from unipay.events import PaymentEvent, PaymentEventEmitter
from unipay.types import (
    CheckoutResult,
    CreditCardCheckoutOptions,
    MobileMoneyCheckoutOptions,
    MobileMoneyPayoutOptions,
    PayoutResult,
    RedirectCheckoutOptions,
    RefundOptions,
    RefundResult,
)
from unipay.webhooks.decoding import DecodeError, DecodedWebhook
from unipay.webhooks.verification import WebhookVerificationError

logger = logging.getLogger(__name__)

RawBody = Union[bytes, str, Mapping[str, Any]]


class Capability:
    CHECKOUT_MOBILE_MONEY = "checkout_mobile_money"
    CHECKOUT_CREDIT_CARD = "checkout_credit_card"
    CHECKOUT_REDIRECT = "checkout_redirect"
    REFUND = "refund"
    PAYOUT_MOBILE_MONEY = "payout_mobile_money"
    WEBHOOKS = "webhooks"

    ALL = (
        CHECKOUT_MOBILE_MONEY,
        CHECKOUT_CREDIT_CARD,
        CHECKOUT_REDIRECT,
        REFUND,
        PAYOUT_MOBILE_MONEY,
        WEBHOOKS,
    )


class PaymentProvider(ABC):
    """Abstract base class for payment providers"""

    # Operations this provider actually performs; the rest raise
    # UnsupportedOperationError.
    capabilities: FrozenSet[str] = frozenset()

    # Provider event names or statuses the normalizer knows about
    handled_webhook_kinds: FrozenSet[str] = frozenset()

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize provider with configuration

        Args:
            config: Provider-specific configuration
        """
        self.config = config
        self.provider_name = self.__class__.__name__.replace('Provider', '').lower()
        self.event_emitter: Optional[PaymentEventEmitter] = None

    def use_event_emitter(self, event_emitter: PaymentEventEmitter):
        """Attach the emitter canonical events are published to"""
        self.event_emitter = event_emitter

    def get_provider_name(self) -> str:
        """Get provider name"""
        return self.provider_name

    def supports(self, capability: str) -> bool:
        return capability in self.capabilities

    def _unsupported(self, what: str) -> UnsupportedOperationError:
        return UnsupportedOperationError(f"{self.__class__.__name__} does not support {what}")

    # Checkout / refund / payout

    @abstractmethod
    def checkout_mobile_money(self, options: MobileMoneyCheckoutOptions) -> CheckoutResult:
        """
        Start a mobile-money payment (push to the customer's wallet)

        Raises:
            UnsupportedOperationError: If the provider has no mobile-money rail
            PaymentError: On invalid customer data
            ProviderError: If the gateway rejects the request
        """
        pass

    @abstractmethod
    def checkout_credit_card(self, options: CreditCardCheckoutOptions) -> CheckoutResult:
        """Charge raw card details directly"""
        pass

    @abstractmethod
    def checkout_redirect(self, options: RedirectCheckoutOptions) -> CheckoutResult:
        """
        Create a hosted checkout page

        Returns:
            CheckoutResult whose redirect_url the customer must be sent to
        """
        pass

    @abstractmethod
    def refund(self, options: RefundOptions) -> RefundResult:
        """Refund all or part of a previously captured payment"""
        pass

    @abstractmethod
    def payout_mobile_money(self, options: MobileMoneyPayoutOptions) -> PayoutResult:
        """Send money to a mobile-money wallet"""
        pass

    # Webhooks

    @abstractmethod
    def verify_webhook(self, raw_body: RawBody, headers: Mapping[str, str]) -> Dict[str, Any]:
        """
        Authenticate an inbound webhook and return its parsed payload

        Raises:
            WebhookVerificationError: If the webhook cannot be authenticated
        """
        pass

    @abstractmethod
    def webhook_event_kind(self, payload: Mapping[str, Any]) -> Optional[str]:
        """Provider event name or status the normalizer dispatches on"""
        pass

    @abstractmethod
    def decode_webhook(self, payload: Mapping[str, Any]) -> DecodedWebhook:
        """
        Decode a verified payload into typed fields

        Raises:
            DecodeError: If the payload cannot be correlated to a transaction
        """
        pass

    @abstractmethod
    def normalize_webhook(self, kind: str, decoded: DecodedWebhook) -> List[PaymentEvent]:
        """Map decoded state to canonical events, in causal order"""
        pass

    def handle_webhook(
        self,
        raw_body: RawBody,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Optional[PaymentEvent]:
        """
        Process an inbound webhook end to end.

        Verifies, decodes and normalizes the webhook, emits the resulting
        events in order and returns the last one. Every failure is logged
        and yields None so an HTTP handler can always answer.

        Args:
            raw_body: Request body exactly as received (or already parsed,
                for providers that sign inside the body)
            headers: Request headers

        Returns:
            The last canonical event produced, or None
        """
        try:
            headers = _lower_keys(headers or {})
            payload = self.verify_webhook(raw_body, headers)
        except WebhookVerificationError as exc:
            logger.warning("%s webhook rejected: verification failed (%s)", self.provider_name, exc)
            return None
        except Exception:
            logger.exception("%s webhook rejected: unexpected error during verification", self.provider_name)
            return None

        try:
            kind = self.webhook_event_kind(payload)
            if kind not in self.handled_webhook_kinds:
                logger.info("%s webhook ignored: unhandled event kind %r", self.provider_name, kind)
                return None

            decoded = self.decode_webhook(payload)
            events = self.normalize_webhook(kind, decoded)
        except DecodeError as exc:
            logger.warning("%s webhook dropped: cannot correlate to a transaction (%s)", self.provider_name, exc)
            return None
        except Exception:
            logger.exception("%s webhook dropped: unexpected error while decoding", self.provider_name)
            return None

        return self._publish(events)

    def _publish(self, events: List[PaymentEvent]) -> Optional[PaymentEvent]:
        for event in events:
            self._emit(event)
        return events[-1] if events else None

    def _emit(self, event: PaymentEvent):
        if self.event_emitter is None or not self.event_emitter.has_subscribers(event.type):
            logger.debug("%s %s for %s has no subscribers", self.provider_name,
                         event.type.value, event.transaction_id)
            return
        self.event_emitter.emit(event.type, event)


def _lower_keys(headers: Mapping[str, str]) -> Dict[str, str]:
    return {str(key).lower(): value for key, value in headers.items()}
