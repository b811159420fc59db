"""
Webhook API Endpoints
Handles incoming webhooks from payment providers
"""

from flask import Blueprint, request, jsonify

from unipay.schemas.webhook_schema import WebhookResponseSchema
from unipay.services.webhook_service import WebhookService
from unipay.utils.logger import get_logger

webhooks_bp = Blueprint('webhooks', __name__)
logger = get_logger(__name__)

response_schema = WebhookResponseSchema()


@webhooks_bp.route('/<provider>', methods=['POST'])
def receive_webhook(provider):
    """
    Receive webhook from payment provider

    Path Parameters:
        provider: Payment provider name (stripe, paydunya)

    Headers:
        - Stripe-Signature (for Stripe)
        - Paydunya signs inside the body with the master key hash

    Body:
        Provider-specific webhook payload, read as raw bytes

    The provider is always answered with 200 once it is known, so rejected
    or unrecognized notifications are not retried; `event` is null for them.
    """
    # Signature verification needs the exact bytes
    raw_body = request.get_data(cache=True)

    event = WebhookService.receive_webhook(
        provider=provider,
        raw_body=raw_body,
        headers=dict(request.headers)
    )

    return jsonify(response_schema.dump({
        'success': event is not None,
        'event': event
    })), 200
