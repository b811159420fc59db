"""
Webhook Signature Verification

Two schemes are supported:
  - header-signed (Stripe): ``Stripe-Signature: t=<ts>,v1=<hmac>`` where the
    HMAC-SHA256 covers ``<ts>.<raw body>``. Verification must run over the
    exact bytes received, so the verified bytes are also the ones parsed.
  - shared-secret hash (Paydunya): the body carries ``hash``, the SHA-512 of
    the merchant master key.
"""

import hashlib
import hmac
import json
from typing import Any, Dict, Optional, Union

import stripe

DEFAULT_TOLERANCE = 300


class WebhookVerificationError(Exception):
    """Raised when an inbound webhook cannot be authenticated"""
    pass


def verify_stripe_webhook(
    raw_body: Union[bytes, str],
    signature_header: Optional[str],
    secret: Optional[str],
    tolerance: int = DEFAULT_TOLERANCE,
) -> Dict[str, Any]:
    """
    Verify a Stripe-signed webhook and parse it.

    Args:
        raw_body: Request body exactly as received
        signature_header: Value of the Stripe-Signature header
        secret: Endpoint signing secret (whsec_...)
        tolerance: Maximum accepted age of the signed timestamp, in seconds

    Returns:
        The parsed event mapping

    Raises:
        WebhookVerificationError: On any missing, malformed or mismatching input
    """
    if not signature_header:
        raise WebhookVerificationError("missing Stripe-Signature header")
    if not secret:
        raise WebhookVerificationError("no webhook signing secret configured")

    if isinstance(raw_body, bytes):
        try:
            raw_body = raw_body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise WebhookVerificationError("body is not valid UTF-8") from exc

    try:
        stripe.WebhookSignature.verify_header(raw_body, signature_header, secret, tolerance)
    except stripe.SignatureVerificationError as exc:
        raise WebhookVerificationError(f"signature mismatch: {exc.user_message or exc}") from exc

    try:
        event = json.loads(raw_body)
    except ValueError as exc:
        raise WebhookVerificationError("signed body is not valid JSON") from exc

    if not isinstance(event, dict):
        raise WebhookVerificationError("signed body is not a JSON object")

    return event


def sha512_hex(value: str) -> str:
    return hashlib.sha512(value.encode("utf-8")).hexdigest()


def verify_shared_hash(received_hash: Optional[str], expected_hash: str) -> None:
    """
    Compare the hash carried in a webhook body with the cached expected one.

    Raises:
        WebhookVerificationError: If the hash is missing or differs
    """
    if not received_hash or not isinstance(received_hash, str):
        raise WebhookVerificationError("missing hash in webhook body")

    received = received_hash.lower().encode("utf-8")
    if not hmac.compare_digest(received, expected_hash.lower().encode("utf-8")):
        raise WebhookVerificationError("hash does not match the configured master key")
