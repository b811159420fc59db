"""
Integration Tests for Webhook Processing
"""

import json
from urllib.parse import urlencode

from tests.helpers import paydunya_notification, stripe_session_event, stripe_signature
from unipay import create_app
from unipay.events import PaymentEventEmitter, PaymentEventType
from unipay.extensions import socketio
from unipay.webhooks.decoding import serialize_metadata


class TestStripeWebhooks:
    """Stripe checkout session webhooks through the HTTP endpoint"""

    def test_paid_session(self, client, captured_events, signed_stripe_body):
        body, headers = signed_stripe_body(stripe_session_event(payment_status='paid'))

        response = client.post('/api/v1/webhooks/stripe', data=body, headers=headers,
                               content_type='application/json')

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['success'] is True
        assert data['event']['type'] == 'PAYMENT_SUCCESSFUL'
        assert data['event']['transactionId'] == 'tx-42'
        assert data['event']['transactionReference'] == 'cs_test_a1b2c3'
        assert data['event']['transactionAmount'] == 5000
        assert data['event']['transactionCurrency'] == 'XOF'
        assert data['event']['paymentMethod'] == 'CREDIT_CARD'
        assert data['event']['paymentProvider'] == 'stripe'
        assert data['event']['metadata']['orderId'] == 'ORD-7'

        assert [e.type for e in captured_events] == [
            PaymentEventType.PAYMENT_INITIATED,
            PaymentEventType.PAYMENT_SUCCESSFUL,
        ]

    def test_unpaid_session_is_only_initiated(self, client, captured_events, signed_stripe_body):
        body, headers = signed_stripe_body(stripe_session_event(payment_status='unpaid'))

        response = client.post('/api/v1/webhooks/stripe', data=body, headers=headers,
                               content_type='application/json')

        data = json.loads(response.data)
        assert data['event']['type'] == 'PAYMENT_INITIATED'
        assert [e.type for e in captured_events] == [PaymentEventType.PAYMENT_INITIATED]

    def test_async_failure(self, client, captured_events, signed_stripe_body):
        body, headers = signed_stripe_body(
            stripe_session_event('checkout.session.async_payment_failed', payment_status='unpaid')
        )

        response = client.post('/api/v1/webhooks/stripe', data=body, headers=headers,
                               content_type='application/json')

        data = json.loads(response.data)
        assert data['event']['type'] == 'PAYMENT_FAILED'
        assert data['event']['reason'] == 'Payment failed'

    def test_tampered_body_is_rejected(self, client, captured_events):
        body = json.dumps(stripe_session_event())
        headers = {'Stripe-Signature': stripe_signature(body)}
        tampered = body.replace('"amount_total": 5000', '"amount_total": 5001')

        response = client.post('/api/v1/webhooks/stripe', data=tampered, headers=headers,
                               content_type='application/json')

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data == {'success': False, 'event': None}
        assert captured_events == []

    def test_missing_signature_is_rejected(self, client, captured_events):
        response = client.post('/api/v1/webhooks/stripe', data=json.dumps(stripe_session_event()),
                               content_type='application/json')

        assert json.loads(response.data)['event'] is None
        assert captured_events == []

    def test_retries_are_emitted_again(self, client, captured_events, signed_stripe_body):
        body, headers = signed_stripe_body(stripe_session_event(payment_status='unpaid'))

        client.post('/api/v1/webhooks/stripe', data=body, headers=headers, content_type='application/json')
        client.post('/api/v1/webhooks/stripe', data=body, headers=headers, content_type='application/json')

        assert len(captured_events) == 2


class TestPaydunyaWebhooks:
    """Paydunya IPN through the HTTP endpoint"""

    def test_completed_json_notification(self, client, captured_events):
        response = client.post('/api/v1/webhooks/paydunya', data=json.dumps(paydunya_notification()),
                               content_type='application/json')

        data = json.loads(response.data)
        assert data['success'] is True
        assert data['event']['type'] == 'PAYMENT_SUCCESSFUL'
        assert data['event']['transactionId'] == 'tx-77'
        assert data['event']['transactionAmount'] == 5000
        assert data['event']['paymentMethod'] == 'WAVE'
        assert [e.type for e in captured_events] == [PaymentEventType.PAYMENT_SUCCESSFUL]

    def test_completed_form_notification(self, client, captured_events):
        body = paydunya_notification()
        form = urlencode({
            'data[hash]': body['hash'],
            'data[status]': 'completed',
            'data[response_code]': '00',
            'data[invoice][token]': 'test_form_tok',
            'data[invoice][total_amount]': '1500.00',
            'data[custom_data][transaction_id]': 'tx-form',
            'data[customer][payment_method]': 'orange_money_senegal',
        })

        response = client.post('/api/v1/webhooks/paydunya', data=form,
                               content_type='application/x-www-form-urlencoded')

        data = json.loads(response.data)
        assert data['event']['transactionId'] == 'tx-form'
        assert data['event']['transactionReference'] == 'test_form_tok'
        assert data['event']['transactionAmount'] == 1500
        assert data['event']['paymentMethod'] == 'ORANGE_MONEY'

    def test_bad_hash_is_rejected(self, client, captured_events):
        response = client.post('/api/v1/webhooks/paydunya',
                               data=json.dumps(paydunya_notification(hash='f' * 128)),
                               content_type='application/json')

        assert response.status_code == 200
        assert json.loads(response.data) == {'success': False, 'event': None}
        assert captured_events == []

    def test_failed_notification(self, client, captured_events):
        response = client.post(
            '/api/v1/webhooks/paydunya',
            data=json.dumps(paydunya_notification('failed', fail_reason='Solde insuffisant')),
            content_type='application/json'
        )

        data = json.loads(response.data)
        assert data['event']['type'] == 'PAYMENT_FAILED'
        assert data['event']['reason'] == 'Solde insuffisant'

    def test_metadata_strings_come_back_unchanged(self, client, captured_events):
        custom_data = {'transaction_id': 'tx-1', **serialize_metadata({'ref': '42', 'flag': 'true', 'note': 'NaN'})}
        response = client.post('/api/v1/webhooks/paydunya',
                               data=json.dumps(paydunya_notification(custom_data=custom_data)),
                               content_type='application/json')

        data = json.loads(response.data)
        assert data['event']['metadata'] == {'transaction_id': 'tx-1', 'ref': '42', 'flag': 'true', 'note': 'NaN'}


class TestWebhookRouting:

    def test_unknown_provider(self, client):
        response = client.post('/api/v1/webhooks/mpesa', data='{}', content_type='application/json')

        assert response.status_code == 404
        data = json.loads(response.data)
        assert data['success'] is False
        assert 'mpesa' in data['message']

    def test_events_reach_websocket_subscribers(self, app, client, signed_stripe_body):
        ws_client = socketio.test_client(app)
        ws_client.emit('subscribe_transaction', {'transaction_id': 'tx-42'})
        ws_client.get_received()

        body, headers = signed_stripe_body(stripe_session_event(payment_status='paid'))
        client.post('/api/v1/webhooks/stripe', data=body, headers=headers, content_type='application/json')

        pushed = [packet['args'][0] for packet in ws_client.get_received() if packet['name'] == 'payment_event']
        assert [payload['type'] for payload in pushed] == ['PAYMENT_INITIATED', 'PAYMENT_SUCCESSFUL']
        ws_client.disconnect()

    def test_every_app_gets_socket_handlers(self, app):
        second_app = create_app('testing', event_emitter=PaymentEventEmitter())

        ws_client = socketio.test_client(second_app)
        ws_client.emit('subscribe_transaction', {'transaction_id': 'tx-42'})

        names = [packet['name'] for packet in ws_client.get_received()]
        assert names == ['connected', 'subscribed']
        ws_client.disconnect()
