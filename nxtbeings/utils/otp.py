"""
OTP generation and expiry utilities
"""
import secrets
from datetime import datetime, timedelta
from typing import Optional
from nxtbeings.core.config import settings
from nxtbeings.utils.datetime_utils import utcnow

OTP_MIN = 100000
OTP_MAX = 999999


def generate_otp() -> str:
    """
    Generate random OTP code

    Returns: 6-digit code (string) in [100000, 999999], never with a leading zero
    """
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def get_otp_expiry(now: Optional[datetime] = None, seconds: Optional[int] = None) -> datetime:
    """Get expiry datetime for OTP"""
    if now is None:
        now = utcnow()
    if seconds is None:
        seconds = settings.OTP_EXPIRY
    return now + timedelta(seconds=seconds)


def is_otp_expired(expires_at: datetime, now: Optional[datetime] = None) -> bool:
    """Check if OTP is expired (strictly after expires_at)"""
    if now is None:
        now = utcnow()
    return now > expires_at
