"""
Utils Package
Utility functions and helpers
"""

from unipay.utils.logger import get_logger, configure_app_logging, RequestLogger
from unipay.utils.validators import (
    sanitize_phone_number,
    validate_amount,
    validate_currency,
    validate_metadata,
    validate_phone_number,
)

__all__ = [
    'get_logger',
    'configure_app_logging',
    'RequestLogger',
    'sanitize_phone_number',
    'validate_amount',
    'validate_currency',
    'validate_metadata',
    'validate_phone_number',
]
