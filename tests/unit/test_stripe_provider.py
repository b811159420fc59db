"""
Unit Tests for the Stripe Provider

The SDK client is replaced with a Mock passed to the constructor; webhook
tests sign real payloads with the test secret.
"""

import json
from unittest.mock import Mock

import pytest
import stripe

from tests.helpers import flip_signature_digit, stripe_session_event, stripe_signature
from unipay.errors import PaymentErrorType, ProviderError, UnsupportedOperationError
from unipay.events import PaymentEventEmitter, PaymentEventType
from unipay.providers.base import Capability
from unipay.providers.stripe_provider import StripeProvider
from unipay.types import (
    CreditCardCheckoutOptions,
    Currency,
    Customer,
    MobileMoneyCheckoutOptions,
    MobileMoneyPayoutOptions,
    PaymentMethod,
    RedirectCheckoutOptions,
    RefundOptions,
    TransactionStatus,
)

SECRET = 'whsec_unit'


def _customer(**overrides):
    fields = dict(first_name='Jane', last_name='Doe', phone_number='+221771234567',
                  email='jane@example.com')
    fields.update(overrides)
    return Customer(**fields)


def _redirect_options(**overrides):
    fields = dict(
        amount=5000,
        description='Order ORD-7',
        currency=Currency.EUR,
        transaction_id='tx-42',
        customer=_customer(),
        metadata={'orderId': 'ORD-7', 'items': ['sku-1']},
        success_redirect_url='https://shop.example.com/success',
        failure_redirect_url='https://shop.example.com/cancel',
    )
    fields.update(overrides)
    return RedirectCheckoutOptions(**fields)


class TestStripeProvider:

    # ── fixtures ──────────────────────────────────────────────────────────

    @pytest.fixture
    def client(self):
        return Mock()

    @pytest.fixture
    def provider(self, client):
        return StripeProvider({'private_key': 'sk_test_x', 'webhook_secret': SECRET}, client=client)

    @pytest.fixture
    def emitter(self, provider):
        emitter = PaymentEventEmitter()
        provider.use_event_emitter(emitter)
        return emitter

    # ── initialisation ────────────────────────────────────────────────────

    def test_initialization(self, provider):
        assert provider.get_provider_name() == 'stripe'
        assert provider.webhook_secret == SECRET
        assert provider.supports(Capability.CHECKOUT_REDIRECT)
        assert provider.supports(Capability.REFUND)
        assert not provider.supports(Capability.CHECKOUT_MOBILE_MONEY)

    def test_missing_private_key_raises(self):
        with pytest.raises(ValueError, match='private_key'):
            StripeProvider({'webhook_secret': SECRET}, client=Mock())

    def test_registers_missing_webhook_endpoint(self, client):
        client.webhook_endpoints.list.return_value = Mock(data=[Mock(url='https://other.example.com/hook')])
        client.webhook_endpoints.create.return_value = Mock(secret='whsec_created')

        provider = StripeProvider({
            'private_key': 'sk_test_x',
            'webhook_url': 'https://api.example.com/api/v1/webhooks/stripe',
        }, client=client)

        params = client.webhook_endpoints.create.call_args.kwargs['params']
        assert params['url'] == 'https://api.example.com/api/v1/webhooks/stripe'
        assert 'checkout.session.completed' in params['enabled_events']
        assert provider.webhook_secret == 'whsec_created'

    def test_existing_webhook_endpoint_is_kept(self, client):
        url = 'https://api.example.com/api/v1/webhooks/stripe'
        client.webhook_endpoints.list.return_value = Mock(data=[Mock(url=url)])

        provider = StripeProvider({'private_key': 'sk_test_x', 'webhook_secret': SECRET,
                                   'webhook_url': url}, client=client)

        client.webhook_endpoints.create.assert_not_called()
        assert provider.webhook_secret == SECRET

    def test_webhook_registration_failure_is_not_fatal(self, client):
        client.webhook_endpoints.list.side_effect = stripe.APIConnectionError('network down')

        provider = StripeProvider({'private_key': 'sk_test_x', 'webhook_secret': SECRET,
                                   'webhook_url': 'https://api.example.com/hook'}, client=client)

        assert provider.webhook_secret == SECRET

    # ── checkout ──────────────────────────────────────────────────────────

    def test_checkout_redirect(self, provider, client):
        client.checkout.sessions.create.return_value = Mock(
            id='cs_test_1', url='https://checkout.stripe.com/c/pay/cs_test_1'
        )

        result = provider.checkout_redirect(_redirect_options())

        assert result.transaction_id == 'tx-42'
        assert result.transaction_reference == 'cs_test_1'
        assert result.transaction_status == TransactionStatus.PENDING
        assert result.transaction_amount == 5000
        assert result.transaction_currency == 'EUR'
        assert result.redirect_url == 'https://checkout.stripe.com/c/pay/cs_test_1'

        params = client.checkout.sessions.create.call_args.kwargs['params']
        assert params['mode'] == 'payment'
        assert params['line_items'][0]['price_data'] == {
            'currency': 'eur',
            'product_data': {'name': 'Order ORD-7'},
            'unit_amount': 5000,
        }
        assert params['metadata'] == {
            'orderId': '"ORD-7"',
            'items': '["sku-1"]',
            'transactionId': 'tx-42',
        }
        assert params['customer_email'] == 'jane@example.com'
        assert params['success_url'] == 'https://shop.example.com/success'
        assert params['cancel_url'] == 'https://shop.example.com/cancel'
        assert 'payment_method_types' not in params

    def test_checkout_redirect_card_only(self, provider, client):
        client.checkout.sessions.create.return_value = Mock(id='cs_1', url='https://checkout.stripe.com/x')

        provider.checkout_redirect(_redirect_options(payment_method=PaymentMethod.CREDIT_CARD,
                                                     customer=_customer(email=None)))

        params = client.checkout.sessions.create.call_args.kwargs['params']
        assert params['payment_method_types'] == ['card']
        assert 'customer_email' not in params

    def test_checkout_redirect_without_url(self, provider, client):
        client.checkout.sessions.create.return_value = Mock(id='cs_1', url=None)

        with pytest.raises(ProviderError, match='checkout URL'):
            provider.checkout_redirect(_redirect_options())

    def test_checkout_redirect_stripe_error(self, provider, client):
        client.checkout.sessions.create.side_effect = stripe.InvalidRequestError(
            'Invalid currency: abc', param='currency'
        )

        with pytest.raises(ProviderError, match='Invalid currency') as exc_info:
            provider.checkout_redirect(_redirect_options())

        assert exc_info.value.status_code == 502
        assert exc_info.value.error_type == PaymentErrorType.PROVIDER_ERROR

    def test_mobile_money_is_unsupported(self, provider):
        options = MobileMoneyCheckoutOptions(
            amount=5000, description='x', currency=Currency.XOF, transaction_id='tx-1',
            customer=_customer(),
        )
        with pytest.raises(UnsupportedOperationError) as exc_info:
            provider.checkout_mobile_money(options)
        assert exc_info.value.error_type == PaymentErrorType.UNSUPPORTED_PAYMENT_METHOD

    def test_credit_card_is_unsupported(self, provider):
        options = CreditCardCheckoutOptions(
            amount=5000, description='x', currency=Currency.EUR, transaction_id='tx-1',
            customer=_customer(), card_number='4242424242424242',
        )
        with pytest.raises(UnsupportedOperationError):
            provider.checkout_credit_card(options)

    def test_payout_is_unsupported(self, provider):
        options = MobileMoneyPayoutOptions(
            transaction_id='po-1', amount=5000, currency=Currency.XOF, recipient=_customer(),
        )
        with pytest.raises(UnsupportedOperationError):
            provider.payout_mobile_money(options)

    # ── refund ────────────────────────────────────────────────────────────

    def test_full_refund(self, provider, client):
        client.checkout.sessions.retrieve.return_value = Mock(payment_intent='pi_123')
        client.refunds.create.return_value = Mock(id='re_1', amount=5000, currency='eur')

        result = provider.refund(RefundOptions(
            transaction_id='rf-1', refunded_transaction_reference='cs_test_1',
        ))

        client.checkout.sessions.retrieve.assert_called_once_with('cs_test_1')
        params = client.refunds.create.call_args.kwargs['params']
        assert params == {'payment_intent': 'pi_123', 'reason': 'requested_by_customer'}
        assert result.transaction_id == 'rf-1'
        assert result.transaction_reference == 're_1'
        assert result.transaction_status == TransactionStatus.SUCCESS
        assert result.transaction_amount == 5000
        assert result.transaction_currency == 'EUR'

    def test_partial_refund_with_expanded_intent(self, provider, client):
        client.checkout.sessions.retrieve.return_value = Mock(payment_intent=Mock(id='pi_456'))
        client.refunds.create.return_value = Mock(id='re_2', amount=1000, currency='eur')

        provider.refund(RefundOptions(
            transaction_id='rf-2', refunded_transaction_reference='cs_test_1', refunded_amount=1000,
        ))

        params = client.refunds.create.call_args.kwargs['params']
        assert params['payment_intent'] == 'pi_456'
        assert params['amount'] == 1000

    def test_refund_without_payment_intent(self, provider, client):
        client.checkout.sessions.retrieve.return_value = Mock(payment_intent=None)

        with pytest.raises(ProviderError, match='No payment intent'):
            provider.refund(RefundOptions(transaction_id='rf-1', refunded_transaction_reference='cs_1'))

        client.refunds.create.assert_not_called()

    def test_refund_unknown_session(self, provider, client):
        client.checkout.sessions.retrieve.side_effect = stripe.InvalidRequestError(
            'No such checkout.session: cs_missing', param='id'
        )

        with pytest.raises(ProviderError, match='No such checkout.session'):
            provider.refund(RefundOptions(transaction_id='rf-1', refunded_transaction_reference='cs_missing'))

    # ── webhooks ──────────────────────────────────────────────────────────

    def _signed(self, event):
        body = json.dumps(event)
        return body, {'Stripe-Signature': stripe_signature(body, SECRET)}

    def test_paid_session_emits_initiated_then_successful(self, provider, emitter):
        received = []
        for event_type in PaymentEventType:
            emitter.on(event_type, lambda sender, event: received.append(event.type))

        body, headers = self._signed(stripe_session_event())
        event = provider.handle_webhook(body, headers)

        assert received == [PaymentEventType.PAYMENT_INITIATED, PaymentEventType.PAYMENT_SUCCESSFUL]
        assert event.type == PaymentEventType.PAYMENT_SUCCESSFUL
        assert event.transaction_id == 'tx-42'
        assert event.payment_method == PaymentMethod.CREDIT_CARD
        assert event.metadata['items'] == ['sku-1', 'sku-2']

    def test_header_lookup_is_case_insensitive(self, provider, emitter):
        body, headers = self._signed(stripe_session_event())
        event = provider.handle_webhook(body, {'STRIPE-SIGNATURE': headers['Stripe-Signature']})
        assert event is not None

    def test_bad_signature_returns_none(self, provider, emitter):
        receiver = Mock()
        emitter.on(PaymentEventType.PAYMENT_INITIATED, receiver)

        body, _ = self._signed(stripe_session_event())
        event = provider.handle_webhook(body, {'Stripe-Signature': stripe_signature(body, 'whsec_wrong')})

        assert event is None
        receiver.assert_not_called()

    def test_mutated_signature_returns_none(self, provider, emitter):
        receivers = {event_type: Mock() for event_type in PaymentEventType}
        for event_type, receiver in receivers.items():
            emitter.on(event_type, receiver)

        body, headers = self._signed(stripe_session_event())
        event = provider.handle_webhook(body, {'Stripe-Signature': flip_signature_digit(headers['Stripe-Signature'])})

        assert event is None
        for receiver in receivers.values():
            receiver.assert_not_called()

    def test_non_mapping_headers_return_none(self, provider, emitter):
        receiver = Mock()
        emitter.on(PaymentEventType.PAYMENT_INITIATED, receiver)

        body, headers = self._signed(stripe_session_event())
        event = provider.handle_webhook(body, list(headers.items()))

        assert event is None
        receiver.assert_not_called()

    def test_missing_secret_returns_none(self, client):
        provider = StripeProvider({'private_key': 'sk_test_x'}, client=client)
        body, headers = self._signed(stripe_session_event())

        assert provider.handle_webhook(body, headers) is None

    def test_unhandled_event_type_returns_none(self, provider, emitter):
        body, headers = self._signed(stripe_session_event('payment_intent.created'))
        assert provider.handle_webhook(body, headers) is None

    def test_uncorrelated_session_returns_none(self, provider, emitter):
        receiver = Mock()
        emitter.on(PaymentEventType.PAYMENT_INITIATED, receiver)

        body, headers = self._signed(stripe_session_event(metadata={}))

        assert provider.handle_webhook(body, headers) is None
        receiver.assert_not_called()

    def test_works_without_emitter(self, provider):
        body, headers = self._signed(stripe_session_event('checkout.session.expired', payment_status='unpaid'))

        event = provider.handle_webhook(body, headers)

        assert event.type == PaymentEventType.PAYMENT_CANCELLED
