"""
Utility Functions
"""
from .phone_validator import validate_phone
from .otp import generate_otp, get_otp_expiry, is_otp_expired

__all__ = ["validate_phone", "generate_otp", "get_otp_expiry", "is_otp_expired"]
