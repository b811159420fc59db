"""
Custom Validators
Validation functions for common data types
"""

import json
import re
from typing import Optional

# Senegal: +221 followed by a 9-digit national number
# (mobile 70/75/76/77/78, fixed line 33)
SN_COUNTRY_PREFIX = '221'
SN_NATIONAL_PATTERN = re.compile(r'^(7[05678]|33)\d{7}$')

RESERVED_METADATA_KEYS = ('transactionId', 'transaction_id')


def validate_phone_number(phone: str, country_code: Optional[str] = None) -> tuple[bool, Optional[str]]:
    """
    Validate phone number format

    Args:
        phone: Phone number to validate
        country_code: Optional country code (e.g., 'SN' for Senegal)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not phone:
        return False, "Phone number is required"

    # Remove spaces and special characters
    phone_clean = re.sub(r'[\s\-\(\)\.]', '', phone)

    # Check if phone contains only digits and optional leading +
    if not re.match(r'^\+?\d+$', phone_clean):
        return False, "Phone number must contain only digits and optional leading +"

    # Remove leading +
    phone_digits = phone_clean.lstrip('+')

    if country_code == 'SN':  # Senegal
        if phone_digits.startswith('00' + SN_COUNTRY_PREFIX):
            phone_digits = phone_digits[5:]
        elif phone_digits.startswith(SN_COUNTRY_PREFIX) and len(phone_digits) == 12:
            phone_digits = phone_digits[3:]

        if len(phone_digits) != 9:
            return False, "Senegalese phone number should have 9 digits after +221"
        if not SN_NATIONAL_PATTERN.match(phone_digits):
            return False, "Senegalese phone number should start with 70, 75, 76, 77, 78 or 33"

    else:
        # Generic validation: between 7 and 15 digits
        if len(phone_digits) < 7 or len(phone_digits) > 15:
            return False, "Phone number should be between 7 and 15 digits"

    return True, None


def sanitize_phone_number(phone: str, country_code: Optional[str] = None) -> str:
    """
    Sanitize and format phone number

    Args:
        phone: Phone number to sanitize
        country_code: Optional country code for formatting

    Returns:
        Sanitized phone number; for 'SN' the 9-digit national number
    """
    # Remove all non-digit characters except +
    phone_clean = re.sub(r'[^\d+]', '', phone or '')

    if country_code == 'SN':
        digits = phone_clean.lstrip('+')
        if digits.startswith('00' + SN_COUNTRY_PREFIX):
            digits = digits[5:]
        elif digits.startswith(SN_COUNTRY_PREFIX) and len(digits) == 12:
            digits = digits[3:]
        return digits

    return phone_clean


def validate_amount(amount: any, min_amount: int = 1, max_amount: int = 100_000_000) -> tuple[bool, Optional[str]]:
    """
    Validate payment amount in minor currency units

    Args:
        amount: Amount to validate
        min_amount: Minimum allowed amount
        max_amount: Maximum allowed amount

    Returns:
        Tuple of (is_valid, error_message)
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        return False, f"Amount must be an integer in minor units, got {type(amount).__name__}"

    if amount <= 0:
        return False, "Amount must be greater than 0"

    if amount < min_amount:
        return False, f"Amount must be at least {min_amount}"

    if amount > max_amount:
        return False, f"Amount must not exceed {max_amount}"

    return True, None


def validate_currency(currency: str, allowed_currencies: Optional[list] = None) -> tuple[bool, Optional[str]]:
    """
    Validate currency code

    Args:
        currency: Currency code to validate (e.g., 'XOF', 'EUR')
        allowed_currencies: List of allowed currency codes

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not currency:
        return False, "Currency is required"

    # Check format (3 uppercase letters)
    if not re.match(r'^[A-Z]{3}$', currency):
        return False, "Currency must be a 3-letter uppercase code (e.g., XOF, EUR, USD)"

    # Check against allowed currencies if provided
    if allowed_currencies:
        if currency not in allowed_currencies:
            return False, f"Currency must be one of: {', '.join(allowed_currencies)}"

    return True, None


def validate_metadata(metadata: dict, max_size: int = 10240) -> tuple[bool, Optional[str]]:
    """
    Validate caller metadata before it is embedded in a provider request

    Args:
        metadata: Metadata dictionary to validate
        max_size: Maximum size in bytes (default 10KB)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if metadata is None:
        return True, None

    if not isinstance(metadata, dict):
        return False, "Metadata must be a dictionary"

    # Check size
    try:
        metadata_json = json.dumps(metadata)
        if len(metadata_json.encode('utf-8')) > max_size:
            return False, f"Metadata exceeds maximum size of {max_size} bytes"
    except (TypeError, ValueError) as e:
        return False, f"Metadata must be JSON serializable: {str(e)}"

    # The correlation id travels in the same channel
    for key in metadata.keys():
        if key in RESERVED_METADATA_KEYS:
            return False, f"Metadata key is reserved: {key}"

    return True, None
