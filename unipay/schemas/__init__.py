"""
Schemas Package
Marshmallow schemas for request/response validation
"""

from unipay.schemas.payment_schema import (
    BasicCheckoutSchema,
    CreditCardCheckoutSchema,
    CustomerSchema,
    MobileMoneyCheckoutSchema,
    MobileMoneyPayoutSchema,
    RedirectCheckoutSchema,
    RefundSchema,
)
from unipay.schemas.webhook_schema import (
    PaymentEventSchema,
    WebhookResponseSchema,
)

__all__ = [
    'BasicCheckoutSchema',
    'CreditCardCheckoutSchema',
    'CustomerSchema',
    'MobileMoneyCheckoutSchema',
    'MobileMoneyPayoutSchema',
    'RedirectCheckoutSchema',
    'RefundSchema',
    'PaymentEventSchema',
    'WebhookResponseSchema',
]
