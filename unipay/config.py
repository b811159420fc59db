import os
from dotenv import load_dotenv

load_dotenv()


def _split(value):
    return [item.strip() for item in (value or '').split(',') if item.strip()]


class Config:
    """Base configuration"""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key')

    # Enabled providers, e.g. "stripe,paydunya" (empty = all)
    PAYMENT_PROVIDERS = _split(os.getenv('PAYMENT_PROVIDERS'))

    # Stripe Configuration
    STRIPE_PRIVATE_KEY = os.getenv('STRIPE_PRIVATE_KEY')
    STRIPE_WEBHOOK_SECRET = os.getenv('STRIPE_WEBHOOK_SECRET')
    STRIPE_WEBHOOK_URL = os.getenv('STRIPE_WEBHOOK_URL')

    # Paydunya Configuration
    PAYDUNYA_MASTER_KEY = os.getenv('PAYDUNYA_MASTER_KEY')
    PAYDUNYA_PRIVATE_KEY = os.getenv('PAYDUNYA_PRIVATE_KEY')
    PAYDUNYA_PUBLIC_KEY = os.getenv('PAYDUNYA_PUBLIC_KEY')
    PAYDUNYA_TOKEN = os.getenv('PAYDUNYA_TOKEN')
    PAYDUNYA_MODE = os.getenv('PAYDUNYA_MODE', 'test')
    PAYDUNYA_STORE_NAME = os.getenv('PAYDUNYA_STORE_NAME', 'Store')
    PAYDUNYA_CALLBACK_URL = os.getenv('PAYDUNYA_CALLBACK_URL')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False
    PAYDUNYA_MODE = os.getenv('PAYDUNYA_MODE', 'live')


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    PAYMENT_PROVIDERS = ['stripe', 'paydunya']

    STRIPE_PRIVATE_KEY = 'sk_test_unipay'
    STRIPE_WEBHOOK_SECRET = 'whsec_test_unipay'
    STRIPE_WEBHOOK_URL = None

    PAYDUNYA_MASTER_KEY = 'test-master-key'
    PAYDUNYA_PRIVATE_KEY = 'test_private_key'
    PAYDUNYA_PUBLIC_KEY = 'test_public_key'
    PAYDUNYA_TOKEN = 'test_token'
    PAYDUNYA_MODE = 'test'
    PAYDUNYA_STORE_NAME = 'Test Store'
    PAYDUNYA_CALLBACK_URL = None


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
