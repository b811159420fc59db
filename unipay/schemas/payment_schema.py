from marshmallow import Schema, fields, post_load, validates, validates_schema, ValidationError

from unipay.types import (
    CreditCardCheckoutOptions,
    Currency,
    Customer,
    MobileMoneyCheckoutOptions,
    MobileMoneyPayoutOptions,
    PaymentMethod,
    RedirectCheckoutOptions,
    RefundOptions,
)
from unipay.utils.validators import validate_amount, validate_metadata


def _check_amount(value):
    is_valid, message = validate_amount(value)
    if not is_valid:
        raise ValidationError(message)


class CustomerSchema(Schema):
    """Customer data schema"""
    first_name = fields.Str(required=True, data_key='firstName')
    last_name = fields.Str(required=True, data_key='lastName')
    phone_number = fields.Str(required=True, data_key='phoneNumber')
    email = fields.Email(required=False, load_default=None, allow_none=True)

    @post_load
    def make_customer(self, data, **kwargs):
        return Customer(**data)


class BasicCheckoutSchema(Schema):
    """Fields shared by every checkout request"""
    options_class = None

    amount = fields.Int(required=True, strict=True)
    description = fields.Str(required=True)
    currency = fields.Enum(Currency, required=True)
    transaction_id = fields.Str(required=True, data_key='transactionId')
    customer = fields.Nested(CustomerSchema, required=True)
    metadata = fields.Dict(required=False, load_default=dict)
    success_redirect_url = fields.Url(required=False, load_default=None, data_key='successRedirectUrl')
    failure_redirect_url = fields.Url(required=False, load_default=None, data_key='failureRedirectUrl')

    @validates('amount')
    def check_amount(self, value, **kwargs):
        _check_amount(value)

    @validates('transaction_id')
    def check_transaction_id(self, value, **kwargs):
        if not value.strip():
            raise ValidationError('Transaction id must not be empty')

    @validates('metadata')
    def check_metadata(self, value, **kwargs):
        is_valid, message = validate_metadata(value)
        if not is_valid:
            raise ValidationError(message)

    @post_load
    def make_options(self, data, **kwargs):
        return self.options_class(**data)


class MobileMoneyCheckoutSchema(BasicCheckoutSchema):
    """Mobile money checkout (Wave, Orange Money)"""
    options_class = MobileMoneyCheckoutOptions

    payment_method = fields.Enum(PaymentMethod, required=True, data_key='paymentMethod')
    authorization_code = fields.Str(required=False, load_default=None, data_key='authorizationCode')


class CreditCardCheckoutSchema(BasicCheckoutSchema):
    """Direct card checkout"""
    options_class = CreditCardCheckoutOptions

    card_number = fields.Str(required=True, data_key='cardNumber')
    card_expiration_month = fields.Str(required=True, data_key='cardExpirationMonth')
    card_expiration_year = fields.Str(required=True, data_key='cardExpirationYear')
    card_cvv = fields.Str(required=True, data_key='cardCvv')


class RedirectCheckoutSchema(BasicCheckoutSchema):
    """Hosted checkout page"""
    options_class = RedirectCheckoutOptions

    payment_method = fields.Enum(PaymentMethod, required=False, load_default=None, data_key='paymentMethod')


class RefundSchema(Schema):
    """Refund payment schema"""
    transaction_id = fields.Str(required=True, data_key='transactionId')
    refunded_transaction_reference = fields.Str(required=True, data_key='refundedTransactionReference')
    refunded_amount = fields.Int(required=False, strict=True, load_default=None, data_key='refundedAmount')

    @validates('refunded_amount')
    def check_amount(self, value, **kwargs):
        if value is not None:
            _check_amount(value)

    @post_load
    def make_options(self, data, **kwargs):
        return RefundOptions(**data)


class MobileMoneyPayoutSchema(Schema):
    """Payout to a mobile money wallet"""
    transaction_id = fields.Str(required=True, data_key='transactionId')
    amount = fields.Int(required=True, strict=True)
    currency = fields.Enum(Currency, required=True)
    recipient = fields.Nested(CustomerSchema, required=True)
    payment_method = fields.Enum(PaymentMethod, required=True, data_key='paymentMethod')
    callback_url = fields.Url(required=False, load_default=None, data_key='callbackUrl')

    @validates('amount')
    def check_amount(self, value, **kwargs):
        _check_amount(value)

    @validates_schema
    def check_payment_method(self, data, **kwargs):
        if data.get('payment_method') == PaymentMethod.CREDIT_CARD:
            raise ValidationError('Payouts go to mobile money wallets only', 'paymentMethod')

    @post_load
    def make_options(self, data, **kwargs):
        return MobileMoneyPayoutOptions(**data)
