from unipay.errors.exceptions import (
    AppError,
    BadRequest,
    NotFound,
    PaymentError,
    PaymentErrorType,
    ProviderError,
    UnsupportedOperationError,
)

__all__ = [
    'AppError',
    'BadRequest',
    'NotFound',
    'PaymentError',
    'PaymentErrorType',
    'ProviderError',
    'UnsupportedOperationError',
]
