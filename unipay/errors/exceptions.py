from enum import Enum


class AppError(Exception):
    status_code = 500
    error = "Application error"

    def __init__(self, message, status_code=None):
        super().__init__(message)
        if status_code:
            self.status_code = status_code
        self.message = message


class BadRequest(AppError):
    status_code = 400
    error = "Bad request"


class PaymentErrorType(str, Enum):
    UNSUPPORTED_PAYMENT_METHOD = "UNSUPPORTED_PAYMENT_METHOD"
    INVALID_PHONE_NUMBER = "INVALID_PHONE_NUMBER"
    INVALID_AUTHORIZATION_CODE = "INVALID_AUTHORIZATION_CODE"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class PaymentError(AppError):
    status_code = 400
    error = "Payment error"

    def __init__(self, message, error_type=PaymentErrorType.UNKNOWN_ERROR, status_code=None):
        super().__init__(message, status_code)
        self.error_type = PaymentErrorType(error_type)


class UnsupportedOperationError(PaymentError):
    """A provider was asked for something it structurally cannot do."""
    error = "Unsupported operation"

    def __init__(self, message):
        super().__init__(message, PaymentErrorType.UNSUPPORTED_PAYMENT_METHOD)


class ProviderError(PaymentError):
    """Upstream gateway answered with a non-2xx or malformed response."""
    status_code = 502
    error = "Provider error"

    def __init__(self, message, raw_response=None, error_type=PaymentErrorType.PROVIDER_ERROR):
        super().__init__(message, error_type)
        self.raw_response = raw_response


class NotFound(AppError):
    status_code = 404
    error = "Not found"
