"""
Phone number validation utilities
"""
from nxtbeings.core.config import settings


def validate_phone(phone: str) -> tuple[bool, str]:
    """
    Validate a KYC phone number

    Returns: (is_valid, cleaned_number)
    Only surrounding whitespace is stripped; the number is otherwise kept as given.
    """
    if phone is None:
        return False, ""

    # Clean phone number
    phone = phone.strip()

    # Check length
    if len(phone) < settings.PHONE_MIN_LENGTH:
        return False, ""

    return True, phone


def is_valid_phone(phone: str) -> bool:
    """Quick validation check"""
    is_valid, _ = validate_phone(phone)
    return is_valid


def mask_phone(phone: str) -> str:
    """Hide all but the last 4 characters for logging"""
    if not phone:
        return "****"
    return "****" + phone[-4:] if len(phone) > 4 else "****"
