"""
Services
"""
from .otp_store import OtpKey, OtpRecord, OtpStore, UserRole
from .otp_service import OtpDeliveryError, OtpService, RejectReason, VerificationResult

__all__ = [
    "OtpKey",
    "OtpRecord",
    "OtpStore",
    "UserRole",
    "OtpDeliveryError",
    "OtpService",
    "RejectReason",
    "VerificationResult",
]
