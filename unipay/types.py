"""
Provider-agnostic request and result types shared by every PaymentProvider.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class PaymentMethod(str, Enum):
    WAVE = "WAVE"
    ORANGE_MONEY = "ORANGE_MONEY"
    CREDIT_CARD = "CREDIT_CARD"


class Currency(str, Enum):
    XOF = "XOF"
    EUR = "EUR"
    USD = "USD"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


@dataclass
class Customer:
    first_name: str
    last_name: str
    phone_number: str
    email: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


@dataclass
class BasicCheckoutOptions:
    """
    Fields common to every checkout variant.

    transaction_id is the caller's own correlation key. It is threaded
    through the provider request and echoed back in webhooks unchanged.
    """
    amount: int
    description: str
    currency: Currency
    transaction_id: str
    customer: Customer
    metadata: Dict[str, Any] = field(default_factory=dict)
    success_redirect_url: Optional[str] = None
    failure_redirect_url: Optional[str] = None


@dataclass
class MobileMoneyCheckoutOptions(BasicCheckoutOptions):
    payment_method: PaymentMethod = PaymentMethod.WAVE
    # Orange Money only: OTP the customer generated on their phone
    authorization_code: Optional[str] = None


@dataclass
class CreditCardCheckoutOptions(BasicCheckoutOptions):
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD
    card_number: str = ""
    card_expiration_month: str = ""
    card_expiration_year: str = ""
    card_cvv: str = ""


@dataclass
class RedirectCheckoutOptions(BasicCheckoutOptions):
    payment_method: Optional[PaymentMethod] = None


@dataclass
class CheckoutResult:
    transaction_id: str
    transaction_reference: str
    transaction_status: TransactionStatus
    transaction_amount: int
    transaction_currency: str
    redirect_url: Optional[str] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transactionId": self.transaction_id,
            "transactionReference": self.transaction_reference,
            "transactionStatus": self.transaction_status.value,
            "transactionAmount": self.transaction_amount,
            "transactionCurrency": self.transaction_currency,
            "redirectUrl": self.redirect_url,
            "message": self.message,
        }


@dataclass
class RefundOptions:
    transaction_id: str
    refunded_transaction_reference: str
    refunded_amount: Optional[int] = None


@dataclass
class RefundResult:
    transaction_id: str
    transaction_reference: str
    transaction_status: TransactionStatus
    transaction_amount: int
    transaction_currency: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transactionId": self.transaction_id,
            "transactionReference": self.transaction_reference,
            "transactionStatus": self.transaction_status.value,
            "transactionAmount": self.transaction_amount,
            "transactionCurrency": self.transaction_currency,
        }


@dataclass
class MobileMoneyPayoutOptions:
    transaction_id: str
    amount: int
    currency: Currency
    recipient: Customer
    payment_method: PaymentMethod = PaymentMethod.WAVE
    callback_url: Optional[str] = None


@dataclass
class PayoutResult:
    transaction_id: str
    transaction_reference: str
    transaction_status: TransactionStatus
    transaction_amount: int
    transaction_currency: str
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transactionId": self.transaction_id,
            "transactionReference": self.transaction_reference,
            "transactionStatus": self.transaction_status.value,
            "transactionAmount": self.transaction_amount,
            "transactionCurrency": self.transaction_currency,
            "message": self.message,
        }
