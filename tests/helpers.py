"""
Webhook payload builders shared by the test suites
"""
import hashlib
import hmac
import time

STRIPE_WEBHOOK_SECRET = 'whsec_test_unipay'
PAYDUNYA_MASTER_KEY = 'test-master-key'


def stripe_signature(payload: str, secret: str = STRIPE_WEBHOOK_SECRET, timestamp: int = None) -> str:
    """Build a Stripe-Signature header value for payload"""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f'{timestamp}.{payload}'.encode('utf-8')
    digest = hmac.new(secret.encode('utf-8'), signed, hashlib.sha256).hexdigest()
    return f't={timestamp},v1={digest}'


def stripe_session_event(event_type='checkout.session.completed', **session_overrides) -> dict:
    """A checkout.session.* event as Stripe sends it"""
    session = {
        'id': 'cs_test_a1b2c3',
        'object': 'checkout.session',
        'amount_total': 5000,
        'currency': 'xof',
        'payment_status': 'paid',
        'payment_method_types': ['card'],
        'metadata': {
            'transactionId': 'tx-42',
            'orderId': '"ORD-7"',
            'items': '["sku-1", "sku-2"]',
        },
    }
    session.update(session_overrides)
    return {
        'id': 'evt_test_1',
        'object': 'event',
        'type': event_type,
        'data': {'object': session},
    }


def paydunya_notification(status='completed', **overrides) -> dict:
    """A Paydunya IPN body signed with the test master key"""
    body = {
        'response_code': '00',
        'response_text': 'Transaction Found',
        'hash': hashlib.sha512(PAYDUNYA_MASTER_KEY.encode('utf-8')).hexdigest(),
        'invoice': {
            'token': 'test_Vb7Fz3Xy',
            'total_amount': '5000.00',
            'description': 'Order ORD-7',
        },
        'custom_data': {
            'transaction_id': 'tx-77',
            'order_id': '"ORD-7"',
        },
        'customer': {
            'name': 'Awa Diop',
            'phone': '771234567',
            'payment_method': 'wave_senegal',
        },
        'status': status,
        'fail_reason': '',
    }
    body.update(overrides)
    return body


def flip_signature_digit(header: str) -> str:
    """Change the last hex digit of a Stripe-Signature v1 value"""
    return header[:-1] + ('1' if header[-1] == '0' else '0')
