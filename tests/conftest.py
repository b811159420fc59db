"""
Pytest Configuration and Fixtures
"""
import json

import pytest

from tests.helpers import STRIPE_WEBHOOK_SECRET, stripe_signature
from unipay import create_app
from unipay.events import PaymentEventEmitter, PaymentEventType
from unipay.providers import get_provider


@pytest.fixture
def event_emitter():
    return PaymentEventEmitter()


@pytest.fixture
def app(event_emitter):
    """Create application for testing"""
    app = create_app('testing', event_emitter=event_emitter)

    ctx = app.app_context()
    ctx.push()

    yield app

    ctx.pop()


@pytest.fixture
def client(app):
    """Create a test client"""
    return app.test_client()


@pytest.fixture
def captured_events(event_emitter):
    """Every event published on the app's emitter, in order"""
    captured = []

    def capture(sender, event):
        captured.append(event)

    for event_type in PaymentEventType:
        event_emitter.on(event_type, capture)

    return captured


@pytest.fixture
def stripe_provider(app):
    return get_provider('stripe')


@pytest.fixture
def paydunya_provider(app):
    return get_provider('paydunya')


@pytest.fixture
def signed_stripe_body():
    """Serialize a Stripe event and sign it; returns (body, headers)"""
    def _sign(event: dict, secret: str = STRIPE_WEBHOOK_SECRET):
        body = json.dumps(event)
        return body, {'Stripe-Signature': stripe_signature(body, secret)}
    return _sign
