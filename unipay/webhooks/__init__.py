"""
Webhook pipeline: signature verification, payload decoding and
normalization onto canonical payment events.
"""

from unipay.webhooks.decoding import DecodeError, DecodedWebhook
from unipay.webhooks.verification import WebhookVerificationError

__all__ = ['DecodeError', 'DecodedWebhook', 'WebhookVerificationError']
