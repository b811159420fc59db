from flask import Blueprint, request, jsonify
from marshmallow import ValidationError

from unipay.errors import BadRequest
from unipay.schemas.payment_schema import (
    CreditCardCheckoutSchema,
    MobileMoneyCheckoutSchema,
    MobileMoneyPayoutSchema,
    RedirectCheckoutSchema,
    RefundSchema,
)
from unipay.services.payment_service import PaymentService

payments_bp = Blueprint('payments', __name__)

mobile_money_schema = MobileMoneyCheckoutSchema()
credit_card_schema = CreditCardCheckoutSchema()
redirect_schema = RedirectCheckoutSchema()
refund_schema = RefundSchema()
payout_schema = MobileMoneyPayoutSchema()


def _json_body():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise BadRequest('Request body must be a JSON object')
    return body


def _validation_error(e: ValidationError):
    return jsonify({
        'success': False,
        'error': 'Validation error',
        'details': e.messages
    }), 400


@payments_bp.route('/<provider>/checkout/mobile-money', methods=['POST'])
def checkout_mobile_money(provider):
    """
    Start a mobile money checkout

    Body:
        {
            "amount": 5000,
            "currency": "XOF",
            "description": "Order ORD-12345",
            "transactionId": "ORD-12345",
            "paymentMethod": "WAVE",
            "customer": {
                "firstName": "Awa",
                "lastName": "Diop",
                "phoneNumber": "+221771234567",
                "email": "awa@example.com"
            },
            "metadata": {"cart": ["sku-1"]}
        }
    """
    try:
        options = mobile_money_schema.load(_json_body())
    except ValidationError as e:
        return _validation_error(e)

    result = PaymentService.checkout_mobile_money(provider, options)
    return jsonify({'success': True, 'data': result.to_dict()}), 201


@payments_bp.route('/<provider>/checkout/credit-card', methods=['POST'])
def checkout_credit_card(provider):
    """Charge a card directly"""
    try:
        options = credit_card_schema.load(_json_body())
    except ValidationError as e:
        return _validation_error(e)

    result = PaymentService.checkout_credit_card(provider, options)
    return jsonify({'success': True, 'data': result.to_dict()}), 201


@payments_bp.route('/<provider>/checkout/redirect', methods=['POST'])
def checkout_redirect(provider):
    """
    Create a hosted checkout page

    The response carries `redirectUrl`; the final outcome arrives later
    through the provider's webhook.
    """
    try:
        options = redirect_schema.load(_json_body())
    except ValidationError as e:
        return _validation_error(e)

    result = PaymentService.checkout_redirect(provider, options)
    return jsonify({'success': True, 'data': result.to_dict()}), 201


@payments_bp.route('/<provider>/refund', methods=['POST'])
def refund_payment(provider):
    """
    Refund a payment

    Body:
        {
            "transactionId": "REF-1",
            "refundedTransactionReference": "cs_test_123",
            "refundedAmount": 1000  # Optional, full refund when omitted
        }
    """
    try:
        options = refund_schema.load(_json_body())
    except ValidationError as e:
        return _validation_error(e)

    result = PaymentService.refund(provider, options)
    return jsonify({'success': True, 'data': result.to_dict()}), 200


@payments_bp.route('/<provider>/payout/mobile-money', methods=['POST'])
def payout_mobile_money(provider):
    """Send money to a mobile money wallet"""
    try:
        options = payout_schema.load(_json_body())
    except ValidationError as e:
        return _validation_error(e)

    result = PaymentService.payout_mobile_money(provider, options)
    return jsonify({'success': True, 'data': result.to_dict()}), 201
