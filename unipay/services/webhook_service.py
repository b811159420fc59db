"""
Webhook Service
Hands raw provider notifications to the provider's webhook pipeline
"""

from typing import Mapping, Optional, Union

from unipay.events import PaymentEvent
from unipay.services.payment_service import PaymentService
from unipay.utils.logger import get_logger

logger = get_logger(__name__)


class WebhookService:
    """Service for handling provider webhooks"""

    @staticmethod
    def receive_webhook(
            provider: str,
            raw_body: Union[bytes, str],
            headers: Optional[Mapping[str, str]] = None
    ) -> Optional[PaymentEvent]:
        """
        Run a webhook through verification, decoding and normalization

        Args:
            provider: Payment provider name
            raw_body: Body bytes exactly as received
            headers: Request headers

        Returns:
            The last canonical event emitted, or None when the webhook was
            rejected, unrecognized or could not be correlated

        Raises:
            NotFound: If the provider is unknown or not enabled
        """
        provider_instance = PaymentService.resolve_provider(provider)
        logger.info(f'Received webhook from {provider} ({len(raw_body or b"")} bytes)')

        event = provider_instance.handle_webhook(raw_body, headers)

        if event is not None:
            logger.info(f'Webhook from {provider} produced {event.type.value} for {event.transaction_id}')
        return event
