"""
Paydunya Payment Provider
Mobile money for Senegal through the Paydunya API v1.

API Base: https://app.paydunya.com/api/v1/ (live)
          https://app.sandbox.paydunya.com/api/v1/ (test)

Authentication: PAYDUNYA-MASTER-KEY / PRIVATE-KEY / PUBLIC-KEY / TOKEN headers

Payment Flows:
  - Invoice:        POST checkout-invoice/create (returns token + hosted checkout URL)
  - Wave:           POST softpay/wave-senegal          (returns Wave redirect URL)
  - Orange Money:   POST softpay/orange-money-senegal  (needs customer OTP)
  - Disbursement:   POST disburse/get-invoice → POST disburse/submit-invoice

Webhook (IPN): Paydunya POSTs the invoice state to the store callback URL.
The body carries ``hash`` = SHA-512(master key) instead of a signature header.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

import requests

from unipay.errors import PaymentError, PaymentErrorType, ProviderError
from unipay.events import PaymentEvent, PaymentInitiatedEvent
from unipay.providers.base import Capability, PaymentProvider, RawBody
from unipay.types import (
    BasicCheckoutOptions,
    CheckoutResult,
    CreditCardCheckoutOptions,
    Currency,
    MobileMoneyCheckoutOptions,
    MobileMoneyPayoutOptions,
    PaymentMethod,
    PayoutResult,
    RedirectCheckoutOptions,
    RefundOptions,
    RefundResult,
    TransactionStatus,
)
from unipay.utils.validators import sanitize_phone_number, validate_currency, validate_phone_number
from unipay.webhooks.decoding import (
    DecodedWebhook,
    PaydunyaNotification,
    decode_paydunya_notification,
    load_notification_body,
    serialize_metadata,
)
from unipay.webhooks.normalizer import PAYDUNYA_HANDLED_STATUSES, normalize_paydunya_notification
from unipay.webhooks.verification import sha512_hex, verify_shared_hash

logger = logging.getLogger(__name__)

_BASE_URLS = {
    "test": "https://app.sandbox.paydunya.com/api/v1",
    "live": "https://app.paydunya.com/api/v1",
}

SUCCESS_CODE = "00"
INVALID_OTP_MESSAGE = "Invalid or expired OTP code!"

# Payment method → disbursement withdraw_mode
_WITHDRAW_MODES = {
    PaymentMethod.WAVE: "wave-senegal",
    PaymentMethod.ORANGE_MONEY: "orange-money-senegal",
}


# Decoded API responses. Paydunya answers success and error with different
# shapes on the same endpoint, so each response is decoded into one of these
# variants and callers branch on the type.

@dataclass
class InvoiceCreated:
    token: str
    checkout_url: Optional[str]
    description: str = ""


@dataclass
class SoftpayAccepted:
    message: str
    redirect_url: Optional[str] = None


@dataclass
class DisburseInvoiceCreated:
    token: str


@dataclass
class DisburseSubmitted:
    message: str
    reference: Optional[str] = None


@dataclass
class ProviderFailure:
    message: str
    response_code: Optional[str] = None


def _decode_invoice_response(data: Dict[str, Any]) -> Union[InvoiceCreated, ProviderFailure]:
    response_code = str(data.get("response_code", ""))
    response_text = str(data.get("response_text") or "")

    if response_code != SUCCESS_CODE:
        return ProviderFailure(response_text or "invoice creation refused", response_code)
    if not data.get("token"):
        return ProviderFailure(f"missing invoice token: {response_text}", response_code)

    # On success response_text holds the hosted checkout URL
    checkout_url = response_text if response_text.startswith("http") else None
    return InvoiceCreated(token=data["token"], checkout_url=checkout_url,
                          description=str(data.get("description") or ""))


def _decode_softpay_response(data: Dict[str, Any]) -> Union[SoftpayAccepted, ProviderFailure]:
    message = str(data.get("message") or "")
    if data.get("success") is not True:
        return ProviderFailure(message or "payment refused")
    return SoftpayAccepted(message=message, redirect_url=data.get("url"))


def _decode_disburse_invoice(data: Dict[str, Any]) -> Union[DisburseInvoiceCreated, ProviderFailure]:
    response_code = str(data.get("response_code", ""))
    if response_code != SUCCESS_CODE or not data.get("disburse_token"):
        return ProviderFailure(str(data.get("response_text") or "disbursement refused"), response_code)
    return DisburseInvoiceCreated(token=data["disburse_token"])


def _decode_disburse_submit(data: Dict[str, Any]) -> Union[DisburseSubmitted, ProviderFailure]:
    response_code = str(data.get("response_code", ""))
    message = str(data.get("response_text") or data.get("description") or "")
    if response_code != SUCCESS_CODE:
        return ProviderFailure(message or "disbursement refused", response_code)
    return DisburseSubmitted(message=message, reference=data.get("transaction_id"))


class PaydunyaProvider(PaymentProvider):
    """
    Paydunya payment provider adapter.

    Required config keys:
        master_key   – PAYDUNYA-MASTER-KEY; also the webhook shared secret
        private_key  – PAYDUNYA-PRIVATE-KEY
        public_key   – PAYDUNYA-PUBLIC-KEY
        token        – PAYDUNYA-TOKEN

    Optional config keys:
        mode         – "test" (default) | "live"
        store_name   – Store name shown on the invoice
        callback_url – IPN URL sent with each invoice
        timeout      – HTTP timeout in seconds (default 30)
    """

    capabilities = frozenset({
        Capability.CHECKOUT_MOBILE_MONEY,
        Capability.CHECKOUT_REDIRECT,
        Capability.PAYOUT_MOBILE_MONEY,
        Capability.WEBHOOKS,
    })
    handled_webhook_kinds = PAYDUNYA_HANDLED_STATUSES

    _EP_INVOICE_CREATE   = "/checkout-invoice/create"
    _EP_WAVE             = "/softpay/wave-senegal"
    _EP_ORANGE_MONEY     = "/softpay/orange-money-senegal"
    _EP_DISBURSE_INVOICE = "/disburse/get-invoice"
    _EP_DISBURSE_SUBMIT  = "/disburse/submit-invoice"

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)

        self.master_key   = config.get("master_key", "")
        self.private_key  = config.get("private_key", "")
        self.public_key   = config.get("public_key", "")
        self.token        = config.get("token", "")
        self.mode         = (config.get("mode") or "test").lower()
        self.store_name   = config.get("store_name") or "Store"
        self.callback_url = config.get("callback_url") or None
        self.timeout      = config.get("timeout", 30)

        for key in ("master_key", "private_key", "public_key", "token"):
            if not getattr(self, key):
                raise ValueError(f"PaydunyaProvider: '{key}' is required in config")
        if self.mode not in _BASE_URLS:
            raise ValueError(f"PaydunyaProvider: mode must be 'test' or 'live', got '{self.mode}'")

        self.base_url = _BASE_URLS[self.mode]

        # Computed once; read-only afterwards
        self._master_key_hash = sha512_hex(self.master_key)

        self._session = requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json",
            "PAYDUNYA-MASTER-KEY": self.master_key,
            "PAYDUNYA-PRIVATE-KEY": self.private_key,
            "PAYDUNYA-PUBLIC-KEY": self.public_key,
            "PAYDUNYA-TOKEN": self.token,
        })

    # Checkout

    def checkout_mobile_money(self, options: MobileMoneyCheckoutOptions) -> CheckoutResult:
        """
        Create an invoice and pay it from the customer's wallet.

        Wave returns a URL the customer must open to approve; Orange Money
        debits directly using the OTP in options.authorization_code.
        """
        if options.payment_method not in (PaymentMethod.WAVE, PaymentMethod.ORANGE_MONEY):
            raise self._unsupported(f"the payment method {options.payment_method.value}")

        self._check_currency(options.currency)
        phone = self._national_phone(options.customer.phone_number)

        invoice = self._create_invoice(options)

        if options.payment_method == PaymentMethod.WAVE:
            response = self._post(self._EP_WAVE, {
                "wave_senegal_fullName": options.customer.full_name,
                "wave_senegal_email": self._customer_email(options),
                "wave_senegal_phone": phone,
                "wave_senegal_payment_token": invoice.token,
            }, "checkout_mobile_money[wave]")
        else:
            if not options.authorization_code:
                raise PaymentError(
                    "Orange Money payments require an authorization_code",
                    PaymentErrorType.INVALID_AUTHORIZATION_CODE,
                )
            response = self._post(self._EP_ORANGE_MONEY, {
                "customer_name": options.customer.full_name,
                "customer_email": self._customer_email(options),
                "phone_number": phone,
                "authorization_code": options.authorization_code,
                "invoice_token": invoice.token,
            }, "checkout_mobile_money[orange_money]")

        payment = _decode_softpay_response(response)
        if isinstance(payment, ProviderFailure):
            raise ProviderError(f"Paydunya error: {payment.message}", raw_response=response)

        if options.payment_method == PaymentMethod.WAVE and not payment.redirect_url:
            raise ProviderError(f"Missing wave payment url in Paydunya response: {payment.message}",
                                raw_response=response)

        result = CheckoutResult(
            transaction_id=options.transaction_id,
            transaction_reference=invoice.token,
            transaction_status=TransactionStatus.PENDING,
            transaction_amount=options.amount,
            transaction_currency=options.currency.value,
            redirect_url=payment.redirect_url,
            message=payment.message,
        )

        self._emit(PaymentInitiatedEvent(
            transaction_id=options.transaction_id,
            transaction_reference=invoice.token,
            transaction_amount=options.amount,
            transaction_currency=options.currency.value,
            payment_method=options.payment_method,
            payment_provider=self.provider_name,
            metadata=dict(options.metadata),
            redirect_url=payment.redirect_url,
        ))

        return result

    def checkout_credit_card(self, options: CreditCardCheckoutOptions) -> CheckoutResult:
        raise self._unsupported("credit card payments")

    def checkout_redirect(self, options: RedirectCheckoutOptions) -> CheckoutResult:
        """Create an invoice and hand back Paydunya's hosted checkout page."""
        self._check_currency(options.currency)

        invoice = self._create_invoice(options)
        if not invoice.checkout_url:
            raise ProviderError("Paydunya did not return a checkout URL", raw_response=invoice.token)

        return CheckoutResult(
            transaction_id=options.transaction_id,
            transaction_reference=invoice.token,
            transaction_status=TransactionStatus.PENDING,
            transaction_amount=options.amount,
            transaction_currency=options.currency.value,
            redirect_url=invoice.checkout_url,
            message=invoice.description or None,
        )

    # Refund / payout

    def refund(self, options: RefundOptions) -> RefundResult:
        raise self._unsupported("refunds")

    def payout_mobile_money(self, options: MobileMoneyPayoutOptions) -> PayoutResult:
        withdraw_mode = _WITHDRAW_MODES.get(options.payment_method)
        if not withdraw_mode:
            raise self._unsupported(f"payouts to {options.payment_method.value}")

        self._check_currency(options.currency)
        phone = self._national_phone(options.recipient.phone_number)

        payload: Dict[str, Any] = {
            "account_alias": phone,
            "amount": options.amount,
            "withdraw_mode": withdraw_mode,
        }
        callback_url = options.callback_url or self.callback_url
        if callback_url:
            payload["callback_url"] = callback_url

        response = self._post(self._EP_DISBURSE_INVOICE, payload, "payout_mobile_money[invoice]")
        disburse_invoice = _decode_disburse_invoice(response)
        if isinstance(disburse_invoice, ProviderFailure):
            raise ProviderError(f"Paydunya error: {disburse_invoice.message}", raw_response=response)

        response = self._post(self._EP_DISBURSE_SUBMIT, {
            "disburse_invoice": disburse_invoice.token,
            "disburse_id": options.transaction_id,
        }, "payout_mobile_money[submit]")
        submitted = _decode_disburse_submit(response)
        if isinstance(submitted, ProviderFailure):
            raise ProviderError(f"Paydunya error: {submitted.message}", raw_response=response)

        return PayoutResult(
            transaction_id=options.transaction_id,
            transaction_reference=submitted.reference or disburse_invoice.token,
            transaction_status=TransactionStatus.PENDING,
            transaction_amount=options.amount,
            transaction_currency=options.currency.value,
            message=submitted.message or None,
        )

    # Webhook pipeline

    def verify_webhook(self, raw_body: RawBody, headers: Mapping[str, str]) -> Dict[str, Any]:
        body = load_notification_body(raw_body)
        verify_shared_hash(body.get("hash"), self._master_key_hash)
        return body

    def webhook_event_kind(self, payload: Mapping[str, Any]) -> Optional[str]:
        status = payload.get("status")
        return status.lower() if isinstance(status, str) else None

    def decode_webhook(self, payload: Mapping[str, Any]) -> PaydunyaNotification:
        return decode_paydunya_notification(payload)

    def normalize_webhook(self, kind: str, decoded: DecodedWebhook) -> List[PaymentEvent]:
        return normalize_paydunya_notification(kind, decoded, self.provider_name)

    # Private helpers

    def _create_invoice(self, options: BasicCheckoutOptions) -> InvoiceCreated:
        payload: Dict[str, Any] = {
            "invoice": {
                "total_amount": options.amount,
                "description": options.description,
            },
            "store": {"name": self.store_name},
            "custom_data": {
                **serialize_metadata(options.metadata),
                "transaction_id": options.transaction_id,
            },
        }
        actions = {}
        if self.callback_url:
            actions["callback_url"] = self.callback_url
        if options.success_redirect_url:
            actions["return_url"] = options.success_redirect_url
        if options.failure_redirect_url:
            actions["cancel_url"] = options.failure_redirect_url
        if actions:
            payload["actions"] = actions

        response = self._post(self._EP_INVOICE_CREATE, payload, "create_invoice")
        invoice = _decode_invoice_response(response)
        if isinstance(invoice, ProviderFailure):
            raise ProviderError(f"Paydunya error: {invoice.message}", raw_response=response)
        return invoice

    def _post(self, path: str, payload: Dict[str, Any], context: str) -> Dict[str, Any]:
        try:
            resp = self._session.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ProviderError(f"PaydunyaProvider: network error during {context} – {exc}") from exc

        return self._handle_response(resp, path, context)

    def _handle_response(self, resp: requests.Response, path: str, context: str) -> Dict[str, Any]:
        """
        Parse a Paydunya HTTP response, raising on errors.

        Error bodies carry either ``message`` (softpay endpoints) or
        ``response_text`` (invoice / disburse endpoints).
        """
        try:
            data = resp.json()
        except ValueError:
            data = None

        logger.debug("Paydunya [%s] HTTP %s", context, resp.status_code)

        if (
            path == self._EP_ORANGE_MONEY
            and resp.status_code == 422
            and isinstance(data, dict)
            and data.get("message") == INVALID_OTP_MESSAGE
        ):
            raise PaymentError(data["message"], PaymentErrorType.INVALID_AUTHORIZATION_CODE, status_code=422)

        if not resp.ok:
            default_message = (
                f"Paydunya error: HTTP {resp.status_code} during {context}. Data: {resp.text[:300]}"
            )
            message = default_message
            if isinstance(data, dict):
                message = data.get("message") or data.get("response_text") or default_message
            raise ProviderError(message, raw_response=resp.text)

        if not isinstance(data, dict):
            raise ProviderError(f"Paydunya error: malformed response during {context}",
                                raw_response=resp.text)
        return data

    @staticmethod
    def _check_currency(currency: Currency):
        is_valid, error = validate_currency(currency.value, [Currency.XOF.value])
        if not is_valid:
            raise PaymentError(
                f"Paydunya does not support the currency: {currency.value} ({error})",
                PaymentErrorType.UNSUPPORTED_PAYMENT_METHOD,
            )

    @staticmethod
    def _national_phone(phone_number: str) -> str:
        is_valid, error = validate_phone_number(phone_number, 'SN')
        if not is_valid:
            raise PaymentError(f"Invalid phone number: {phone_number} ({error})",
                               PaymentErrorType.INVALID_PHONE_NUMBER)
        return sanitize_phone_number(phone_number, 'SN')

    @staticmethod
    def _customer_email(options: BasicCheckoutOptions) -> str:
        return options.customer.email or f"{options.customer.phone_number}@yopmail.com"
