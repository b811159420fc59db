"""
Stripe Payment Provider
Hosted Checkout Sessions through the official ``stripe`` SDK.

Supported flows
---------------
Redirect checkout   – Checkout Session (card), customer is sent to session.url
Refund              – refund of the session's PaymentIntent

Webhook
    Stripe POSTs events signed with the ``Stripe-Signature`` header
    (timestamped HMAC-SHA256 over the raw body). The session metadata carries
    the caller's ``transactionId`` plus JSON-encoded caller metadata.

Required config keys
--------------------
    private_key     – Secret API key (sk_test_... / sk_live_...)

Optional config keys
--------------------
    webhook_secret  – Endpoint signing secret (whsec_...)
    webhook_url     – Public URL of our webhook endpoint; when set and no
                      endpoint exists yet for it, one is registered on init
                      and its signing secret adopted
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import stripe

from unipay.errors import ProviderError
from unipay.events import PaymentEvent
from unipay.providers.base import Capability, PaymentProvider, RawBody
from unipay.types import (
    CheckoutResult,
    CreditCardCheckoutOptions,
    MobileMoneyCheckoutOptions,
    MobileMoneyPayoutOptions,
    PaymentMethod,
    PayoutResult,
    RedirectCheckoutOptions,
    RefundOptions,
    RefundResult,
    TransactionStatus,
)
from unipay.webhooks.decoding import (
    DecodedWebhook,
    StripeCheckoutSession,
    decode_stripe_event,
    serialize_metadata,
)
from unipay.webhooks.normalizer import STRIPE_HANDLED_EVENTS, normalize_stripe_event
from unipay.webhooks.verification import verify_stripe_webhook

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "stripe-signature"


class StripeProvider(PaymentProvider):
    """Stripe (Checkout Sessions) payment provider adapter."""

    capabilities = frozenset({
        Capability.CHECKOUT_REDIRECT,
        Capability.REFUND,
        Capability.WEBHOOKS,
    })
    handled_webhook_kinds = STRIPE_HANDLED_EVENTS

    def __init__(self, config: Dict[str, Any], client: Optional[stripe.StripeClient] = None):
        super().__init__(config)

        self.private_key    = config.get("private_key", "")
        self.webhook_secret = config.get("webhook_secret") or None
        self.webhook_url    = config.get("webhook_url") or None

        if not self.private_key:
            raise ValueError("StripeProvider: 'private_key' is required in config")

        self._client = client or stripe.StripeClient(self.private_key)

        if self.webhook_url:
            self.ensure_webhook_endpoint()

    def ensure_webhook_endpoint(self) -> None:
        """
        Register our webhook endpoint with Stripe if it is not there yet.

        Stripe only reveals an endpoint's signing secret at creation time, so
        an already-registered endpoint keeps using the configured secret.
        Failures are logged; the provider stays usable for checkout.
        """
        try:
            existing = self._client.webhook_endpoints.list()
            if any(endpoint.url == self.webhook_url for endpoint in existing.data):
                return

            endpoint = self._client.webhook_endpoints.create(params={
                "enabled_events": sorted(STRIPE_HANDLED_EVENTS),
                "url": self.webhook_url,
            })
            self.webhook_secret = endpoint.secret
            logger.info("Registered Stripe webhook endpoint %s", self.webhook_url)
        except stripe.StripeError as exc:
            logger.error("StripeProvider: could not register webhook endpoint %s: %s",
                         self.webhook_url, exc)

    # Checkout

    def checkout_mobile_money(self, options: MobileMoneyCheckoutOptions) -> CheckoutResult:
        raise self._unsupported("mobile money payments")

    def checkout_credit_card(self, options: CreditCardCheckoutOptions) -> CheckoutResult:
        raise self._unsupported("raw credit card payments; use checkout_redirect instead")

    def checkout_redirect(self, options: RedirectCheckoutOptions) -> CheckoutResult:
        params: Dict[str, Any] = {
            "line_items": [{
                "price_data": {
                    "currency": options.currency.value.lower(),
                    "product_data": {"name": options.description},
                    "unit_amount": options.amount,
                },
                "quantity": 1,
            }],
            "mode": "payment",
            "metadata": {
                **serialize_metadata(options.metadata),
                "transactionId": options.transaction_id,
            },
        }
        if options.customer.email:
            params["customer_email"] = options.customer.email
        if options.payment_method == PaymentMethod.CREDIT_CARD:
            params["payment_method_types"] = ["card"]
        if options.success_redirect_url:
            params["success_url"] = options.success_redirect_url
        if options.failure_redirect_url:
            params["cancel_url"] = options.failure_redirect_url

        try:
            session = self._client.checkout.sessions.create(params=params)
        except stripe.StripeError as exc:
            raise self._provider_error("checkout_redirect", exc) from exc

        if not session.url:
            raise ProviderError("Stripe did not return a checkout URL", raw_response=session.id)

        return CheckoutResult(
            transaction_id=options.transaction_id,
            transaction_reference=session.id,
            transaction_status=TransactionStatus.PENDING,
            transaction_amount=options.amount,
            transaction_currency=options.currency.value,
            redirect_url=session.url,
        )

    # Refund / payout

    def refund(self, options: RefundOptions) -> RefundResult:
        reference = options.refunded_transaction_reference

        try:
            session = self._client.checkout.sessions.retrieve(reference)
        except stripe.StripeError as exc:
            raise self._provider_error("refund", exc) from exc

        payment_intent = session.payment_intent
        if not payment_intent:
            raise ProviderError(f"No payment intent found for checkout session {reference}")
        if not isinstance(payment_intent, str):
            payment_intent = payment_intent.id

        params: Dict[str, Any] = {
            "payment_intent": payment_intent,
            "reason": "requested_by_customer",
        }
        if options.refunded_amount is not None:
            params["amount"] = options.refunded_amount

        try:
            refund = self._client.refunds.create(params=params)
        except stripe.StripeError as exc:
            raise self._provider_error("refund", exc) from exc

        return RefundResult(
            transaction_id=options.transaction_id,
            transaction_reference=refund.id,
            transaction_status=TransactionStatus.SUCCESS,
            transaction_amount=refund.amount,
            transaction_currency=str(refund.currency).upper(),
        )

    def payout_mobile_money(self, options: MobileMoneyPayoutOptions) -> PayoutResult:
        raise self._unsupported("mobile money payouts")

    # Webhook pipeline

    def verify_webhook(self, raw_body: RawBody, headers: Mapping[str, str]) -> Dict[str, Any]:
        return verify_stripe_webhook(raw_body, headers.get(SIGNATURE_HEADER), self.webhook_secret)

    def webhook_event_kind(self, payload: Mapping[str, Any]) -> Optional[str]:
        return payload.get("type")

    def decode_webhook(self, payload: Mapping[str, Any]) -> StripeCheckoutSession:
        return decode_stripe_event(payload)

    def normalize_webhook(self, kind: str, decoded: DecodedWebhook) -> List[PaymentEvent]:
        return normalize_stripe_event(kind, decoded, self.provider_name)

    # Private helpers

    @staticmethod
    def _provider_error(context: str, exc: stripe.StripeError) -> ProviderError:
        message = exc.user_message or str(exc)
        return ProviderError(f"StripeProvider [{context}] {message}", raw_response=exc.http_body)
