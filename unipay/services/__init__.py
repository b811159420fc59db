from unipay.services.payment_service import PaymentService
from unipay.services.webhook_service import WebhookService

__all__ = ['PaymentService', 'WebhookService']
