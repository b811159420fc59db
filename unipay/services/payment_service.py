from unipay.errors import NotFound
from unipay.providers import PaymentProvider, get_provider
from unipay.types import (
    CheckoutResult,
    CreditCardCheckoutOptions,
    MobileMoneyCheckoutOptions,
    MobileMoneyPayoutOptions,
    PayoutResult,
    RedirectCheckoutOptions,
    RefundOptions,
    RefundResult,
)
from unipay.utils.logger import get_logger

logger = get_logger(__name__)


class PaymentService:
    """Dispatches payment operations to the configured provider"""

    @staticmethod
    def resolve_provider(provider: str) -> PaymentProvider:
        """
        Look up an enabled provider

        Raises:
            NotFound: If the provider is unknown or not enabled
        """
        try:
            return get_provider(provider)
        except ValueError as e:
            raise NotFound(str(e))

    @staticmethod
    def checkout_mobile_money(provider: str, options: MobileMoneyCheckoutOptions) -> CheckoutResult:
        provider_instance = PaymentService.resolve_provider(provider)
        logger.info(
            f'Mobile money checkout {options.transaction_id} via {provider} '
            f'({options.payment_method.value})'
        )
        return provider_instance.checkout_mobile_money(options)

    @staticmethod
    def checkout_credit_card(provider: str, options: CreditCardCheckoutOptions) -> CheckoutResult:
        provider_instance = PaymentService.resolve_provider(provider)
        logger.info(f'Card checkout {options.transaction_id} via {provider}')
        return provider_instance.checkout_credit_card(options)

    @staticmethod
    def checkout_redirect(provider: str, options: RedirectCheckoutOptions) -> CheckoutResult:
        provider_instance = PaymentService.resolve_provider(provider)
        logger.info(f'Redirect checkout {options.transaction_id} via {provider}')
        return provider_instance.checkout_redirect(options)

    @staticmethod
    def refund(provider: str, options: RefundOptions) -> RefundResult:
        """
        Refund a settled transaction

        Args:
            provider: Provider name
            options: Refund options; refunded_amount None means a full refund

        Returns:
            RefundResult
        """
        provider_instance = PaymentService.resolve_provider(provider)
        logger.info(
            f'Refund {options.transaction_id} of {options.refunded_transaction_reference} via {provider}'
        )
        return provider_instance.refund(options)

    @staticmethod
    def payout_mobile_money(provider: str, options: MobileMoneyPayoutOptions) -> PayoutResult:
        provider_instance = PaymentService.resolve_provider(provider)
        logger.info(
            f'Payout {options.transaction_id} via {provider} ({options.payment_method.value})'
        )
        return provider_instance.payout_mobile_money(options)
