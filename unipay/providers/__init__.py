import logging
from typing import Dict, List, Optional, Type

from unipay.events import PaymentEventEmitter
from unipay.providers.base import Capability, PaymentProvider
from unipay.providers.paydunya_provider import PaydunyaProvider
from unipay.providers.stripe_provider import StripeProvider

logger = logging.getLogger(__name__)

# Provider registry
PROVIDERS: Dict[str, Type[PaymentProvider]] = {
    'stripe':   StripeProvider,
    'paydunya': PaydunyaProvider,
}


class ProviderRegistry:
    """
    Holds one configured instance per enabled provider.

    Instances are built once in init_app and never reconfigured; every
    provider shares the application's event emitter.
    """

    def __init__(self, app=None, event_emitter: Optional[PaymentEventEmitter] = None):
        self._providers: Dict[str, PaymentProvider] = {}
        if app is not None:
            self.init_app(app, event_emitter)

    def init_app(self, app, event_emitter: Optional[PaymentEventEmitter] = None):
        self._providers = {}
        enabled = app.config.get('PAYMENT_PROVIDERS') or list(PROVIDERS.keys())

        for name in enabled:
            name = name.strip().lower()
            if not name:
                continue
            if name not in PROVIDERS:
                raise ValueError(f'Unknown provider: {name}')

            provider = PROVIDERS[name](_get_provider_config(app.config, name))
            if event_emitter is not None:
                provider.use_event_emitter(event_emitter)
            self._providers[name] = provider
            logger.info('Payment provider %s enabled', name)

        app.extensions['unipay_providers'] = self

    def get(self, provider_name: str) -> PaymentProvider:
        provider = self._providers.get((provider_name or '').lower())
        if provider is None:
            raise ValueError(f'Unknown provider: {provider_name}')
        return provider

    def names(self) -> List[str]:
        return list(self._providers.keys())


registry = ProviderRegistry()


def get_provider(provider_name: str) -> PaymentProvider:
    """
    Get the configured provider instance by name.

    Args:
        provider_name: Name of the provider ('stripe', 'paydunya')

    Returns:
        Initialized provider instance

    Raises:
        ValueError: If provider not found or not enabled
    """
    return registry.get(provider_name)


def _get_provider_config(app_config, provider_name: str) -> dict:
    """Get provider configuration from Flask app config."""

    if provider_name == 'stripe':
        return {
            'private_key':    app_config.get('STRIPE_PRIVATE_KEY'),
            'webhook_secret': app_config.get('STRIPE_WEBHOOK_SECRET'),
            'webhook_url':    app_config.get('STRIPE_WEBHOOK_URL'),
        }

    elif provider_name == 'paydunya':
        return {
            # Required
            'master_key':   app_config.get('PAYDUNYA_MASTER_KEY'),
            'private_key':  app_config.get('PAYDUNYA_PRIVATE_KEY'),
            'public_key':   app_config.get('PAYDUNYA_PUBLIC_KEY'),
            'token':        app_config.get('PAYDUNYA_TOKEN'),
            # Optional
            'mode':         app_config.get('PAYDUNYA_MODE', 'test'),
            'store_name':   app_config.get('PAYDUNYA_STORE_NAME'),
            'callback_url': app_config.get('PAYDUNYA_CALLBACK_URL'),
        }

    return {}


def list_available_providers():
    """List all enabled providers."""
    return registry.names()


__all__ = [
    'Capability',
    'PaymentProvider',
    'PaydunyaProvider',
    'ProviderRegistry',
    'StripeProvider',
    'PROVIDERS',
    'get_provider',
    'list_available_providers',
    'registry',
]
