"""
Webhook Payload Decoding
Turns verified provider payloads into typed fields, tolerating the optional
and loosely-typed parts of each provider's webhook shape.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Mapping, Optional, Union
from urllib.parse import parse_qsl

from unipay.types import PaymentMethod

logger = logging.getLogger(__name__)


class DecodeError(Exception):
    """Verified payload cannot be correlated to a transaction"""
    pass


@dataclass
class DecodedWebhook:
    transaction_id: str
    transaction_reference: str
    amount: Union[int, float]
    currency: str
    payment_method: Optional[PaymentMethod] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class StripeCheckoutSession(DecodedWebhook):
    event_type: str = ""
    payment_status: Optional[str] = None


@dataclass
class PaydunyaNotification(DecodedWebhook):
    status: Optional[str] = None
    response_code: str = ""
    response_text: str = ""
    fail_reason: str = ""


STRIPE_PAYMENT_METHODS: Dict[str, PaymentMethod] = {
    "card": PaymentMethod.CREDIT_CARD,
}

PAYDUNYA_PAYMENT_METHODS: Dict[str, PaymentMethod] = {
    "wave_senegal": PaymentMethod.WAVE,
    "orange_money_senegal": PaymentMethod.ORANGE_MONEY,
}

PAYDUNYA_CURRENCY = "XOF"

# Webhook amounts at or above 10**15 are rejected before int conversion
MAX_AMOUNT_EXPONENT = 15


# Field helpers

def serialize_metadata(metadata: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """JSON-encode every value for providers whose metadata is string-only."""
    return {key: json.dumps(value) for key, value in (metadata or {}).items()}


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def parse_metadata(metadata: Optional[Mapping[str, Any]], raw_keys: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Reverse serialize_metadata: decode each string value as JSON when it is
    JSON, otherwise keep the raw string. Non-string values pass through.

    Keys in ``raw_keys`` were sent unencoded (correlation ids) and are kept
    as-is. NaN and Infinity are not JSON and stay plain text.
    """
    raw_keys = frozenset(raw_keys)
    parsed: Dict[str, Any] = {}
    for key, value in (metadata or {}).items():
        if isinstance(value, str) and key not in raw_keys:
            try:
                parsed[key] = json.loads(value, parse_constant=_reject_constant)
            except ValueError:
                parsed[key] = value
        else:
            parsed[key] = value
    return parsed


def coerce_amount(value: Any) -> Union[int, float]:
    """
    Normalise a numeric or decimal-string amount to a number.

    Integral values come back as int ("5000.00" -> 5000).

    Raises:
        DecodeError: If the amount is missing, not a finite number or
            implausibly large
    """
    if value is None or isinstance(value, bool):
        raise DecodeError(f"missing or invalid amount: {value!r}")

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise DecodeError(f"amount is not numeric: {value!r}") from exc

    if not amount.is_finite():
        raise DecodeError(f"amount is not finite: {value!r}")

    if amount.adjusted() >= MAX_AMOUNT_EXPONENT:
        raise DecodeError(f"amount out of range: {value!r}")

    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def map_payment_method(raw: Any, table: Mapping[str, PaymentMethod]) -> Optional[PaymentMethod]:
    if not isinstance(raw, str):
        return None
    return table.get(raw.lower())


def _correlation_id(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    value = str(value).strip()
    return value or None


# Body loading

_FORM_KEY = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")


def parse_form_body(raw: Union[bytes, str]) -> Dict[str, Any]:
    """
    Expand an x-www-form-urlencoded body with bracketed keys into nested
    dicts, e.g. ``data[invoice][token]=abc`` -> ``{"invoice": {"token": "abc"}}``.
    A top-level ``data`` wrapper is removed.
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")

    result: Dict[str, Any] = {}
    for key, value in parse_qsl(raw, keep_blank_values=True):
        match = _FORM_KEY.match(key)
        if not match:
            continue
        path = [match.group(1)] + re.findall(r"\[([^\[\]]*)\]", match.group(2))

        node = result
        for part in path[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[path[-1]] = value

    data = result.get("data")
    if isinstance(data, dict):
        return data
    return result


def load_notification_body(raw_body: Union[bytes, str, Mapping[str, Any], None]) -> Dict[str, Any]:
    """
    Accept a Paydunya notification as an already-parsed mapping, a JSON
    document or a form-encoded body. Unparsable input yields an empty dict.
    """
    if raw_body is None:
        return {}

    if isinstance(raw_body, Mapping):
        body = dict(raw_body)
    else:
        text = raw_body.decode("utf-8", errors="replace") if isinstance(raw_body, bytes) else raw_body
        try:
            body = json.loads(text)
        except ValueError:
            body = parse_form_body(text)

    if not isinstance(body, dict):
        logger.debug("Paydunya notification body is not an object")
        return {}

    data = body.get("data")
    if "hash" not in body and isinstance(data, dict):
        return data
    return body


# Provider decoders

def decode_stripe_event(event: Mapping[str, Any]) -> StripeCheckoutSession:
    """
    Decode a verified ``checkout.session.*`` event.

    Raises:
        DecodeError: If the session cannot be tied to a caller transaction
    """
    session = (event.get("data") or {}).get("object")
    if not isinstance(session, dict):
        raise DecodeError("event carries no checkout session object")

    raw_metadata = session.get("metadata") or {}
    transaction_id = _correlation_id(raw_metadata.get("transactionId"))
    if not transaction_id:
        raise DecodeError("no transactionId in checkout session metadata")

    reference = _correlation_id(session.get("id"))
    if not reference:
        raise DecodeError("checkout session has no id")

    # Dynamic payment methods list every type offered, e.g. ["link", "card"]
    method_types = session.get("payment_method_types") or []
    mapped = (map_payment_method(raw, STRIPE_PAYMENT_METHODS) for raw in method_types)
    payment_method = next((method for method in mapped if method), None)

    return StripeCheckoutSession(
        transaction_id=transaction_id,
        transaction_reference=reference,
        amount=coerce_amount(session.get("amount_total")),
        currency=str(session.get("currency") or "").upper(),
        payment_method=payment_method,
        metadata=parse_metadata(raw_metadata, raw_keys=("transactionId",)),
        event_type=event.get("type") or "",
        payment_status=session.get("payment_status"),
    )


def decode_paydunya_notification(body: Mapping[str, Any]) -> PaydunyaNotification:
    """
    Decode a verified Paydunya IPN body.

    Raises:
        DecodeError: If the invoice cannot be tied to a caller transaction
    """
    custom_data = body.get("custom_data")
    if not isinstance(custom_data, dict):
        # Paydunya serialises an empty custom_data as a list
        custom_data = {}

    transaction_id = _correlation_id(custom_data.get("transaction_id"))
    if not transaction_id:
        raise DecodeError("no transaction_id in invoice custom_data")

    invoice = body.get("invoice")
    if not isinstance(invoice, dict):
        raise DecodeError("notification carries no invoice")

    reference = _correlation_id(invoice.get("token"))
    if not reference:
        raise DecodeError("invoice has no token")

    customer = body.get("customer")
    if not isinstance(customer, dict):
        customer = {}

    return PaydunyaNotification(
        transaction_id=transaction_id,
        transaction_reference=reference,
        amount=coerce_amount(invoice.get("total_amount")),
        currency=PAYDUNYA_CURRENCY,
        payment_method=map_payment_method(customer.get("payment_method"), PAYDUNYA_PAYMENT_METHODS),
        metadata=parse_metadata(custom_data, raw_keys=("transaction_id",)),
        status=body.get("status"),
        response_code=str(body.get("response_code") or ""),
        response_text=str(body.get("response_text") or ""),
        fail_reason=str(body.get("fail_reason") or ""),
    )
