"""
Webhook Response Schemas
"""

from marshmallow import Schema, fields


class PaymentEventSchema(Schema):
    """Canonical payment event as returned by the webhook endpoint"""
    type = fields.Function(lambda event: event.type.value)
    transaction_id = fields.Str(data_key='transactionId')
    transaction_reference = fields.Str(data_key='transactionReference')
    transaction_amount = fields.Raw(data_key='transactionAmount')
    transaction_currency = fields.Str(data_key='transactionCurrency')
    payment_method = fields.Function(
        lambda event: event.payment_method.value if event.payment_method else None,
        data_key='paymentMethod'
    )
    payment_provider = fields.Str(data_key='paymentProvider')
    metadata = fields.Dict()
    redirect_url = fields.Str(data_key='redirectUrl')
    reason = fields.Str()


class WebhookResponseSchema(Schema):
    """Body of every webhook endpoint response"""
    success = fields.Bool(required=True)
    event = fields.Nested(PaymentEventSchema, allow_none=True)
