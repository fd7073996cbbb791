"""
OTP lifecycle: issue, deliver, verify and expire KYC codes.

Every pending code lives in an OtpStore under its (phone, role) key. Calls
for the same key are serialized with a KeyedLock; calls for different keys
run independently. The SMS gateway is awaited outside the lock, after the
record is stored, so a slow or failing gateway never blocks verification.
"""
import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel

from nxtbeings.services.otp_store import OtpKey, OtpRecord, OtpStore, UserRole
from nxtbeings.utils.datetime_utils import utcnow
from nxtbeings.utils.locks import KeyedLock
from nxtbeings.utils.otp import generate_otp, get_otp_expiry, is_otp_expired
from nxtbeings.utils.phone_validator import mask_phone
from nxtbeings.utils.sms import SmsGateway

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_SECONDS = 300
DEFAULT_MAX_ATTEMPTS = 3


class OtpDeliveryError(Exception):
    """The gateway could not deliver a code that has already been stored"""


class RejectReason(str, Enum):
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    TOO_MANY_ATTEMPTS = "too_many_attempts"
    INVALID_CODE = "invalid_code"


REJECT_MESSAGES = {
    RejectReason.NOT_FOUND: "OTP not found or expired",
    RejectReason.EXPIRED: "OTP has expired",
    RejectReason.TOO_MANY_ATTEMPTS: "Too many attempts. Please request a new OTP",
    RejectReason.INVALID_CODE: "Invalid OTP",
}


class VerificationResult(BaseModel):
    accepted: bool
    reason: Optional[RejectReason] = None

    @classmethod
    def accept(cls) -> "VerificationResult":
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: RejectReason) -> "VerificationResult":
        return cls(accepted=False, reason=reason)

    @property
    def message(self) -> str:
        if self.accepted:
            return "OTP verified successfully"
        return REJECT_MESSAGES[self.reason]


class DeliveryReceipt(BaseModel):
    phone: str
    role: UserRole
    expires_at: datetime
    message_id: Optional[str] = None


class OtpService:
    def __init__(
        self,
        store: OtpStore,
        gateway: SmsGateway,
        clock: Callable[[], datetime] = utcnow,
        expiry_seconds: int = DEFAULT_EXPIRY_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        send_timeout: Optional[float] = None,
        code_factory: Callable[[], str] = generate_otp,
    ):
        self.store = store
        self.gateway = gateway
        self.clock = clock
        self.expiry_seconds = expiry_seconds
        self.max_attempts = max_attempts
        self.send_timeout = send_timeout
        self.code_factory = code_factory
        self._locks = KeyedLock()

    async def send_code(self, phone: str, role) -> DeliveryReceipt:
        """
        Issue a fresh code for (phone, role) and hand it to the gateway.

        Any pending code for the key is replaced. Raises OtpDeliveryError if
        the gateway fails or times out; the new code remains verifiable.
        """
        key = OtpKey(phone, UserRole(role))
        masked = mask_phone(phone)
        code = self.code_factory()

        async with self._locks.hold(key):
            expires_at = get_otp_expiry(self.clock(), self.expiry_seconds)
            self.store.put(key, OtpRecord(code=code, expires_at=expires_at))
        logger.info("OTP issued for %s (%s), expires at %s", masked, key.role.value, expires_at.isoformat())

        try:
            result = await asyncio.wait_for(
                self.gateway.send(phone, f"Your NxtBeings verification code is {code}"),
                timeout=self.send_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning("OTP delivery to %s timed out after %ss", masked, self.send_timeout)
            raise OtpDeliveryError("SMS gateway timed out") from e
        except Exception as e:
            logger.warning("OTP delivery to %s failed: %s", masked, e)
            raise OtpDeliveryError(str(e)) from e

        if not result.get("success"):
            error = result.get("error") or "unknown error"
            logger.warning("OTP delivery to %s failed: %s", masked, error)
            raise OtpDeliveryError(error)

        return DeliveryReceipt(
            phone=phone,
            role=key.role,
            expires_at=expires_at,
            message_id=result.get("message_id"),
        )

    async def verify_code(self, phone: str, role, code: str) -> VerificationResult:
        """
        Check `code` against the pending record for (phone, role).

        Checks run in a fixed order: missing, expired, exhausted, then the
        code itself. Each call against a live record uses up one attempt.
        """
        key = OtpKey(phone, UserRole(role))
        masked = mask_phone(phone)

        async with self._locks.hold(key):
            record = self.store.get(key)
            if record is None:
                return VerificationResult.reject(RejectReason.NOT_FOUND)

            if is_otp_expired(record.expires_at, self.clock()):
                self.store.remove(key)
                logger.info("Expired OTP presented for %s (%s)", masked, key.role.value)
                return VerificationResult.reject(RejectReason.EXPIRED)

            if record.attempts >= self.max_attempts:
                self.store.remove(key)
                return VerificationResult.reject(RejectReason.TOO_MANY_ATTEMPTS)

            record.attempts += 1
            self.store.put(key, record)

            if code == record.code:
                self.store.remove(key)
                logger.info("OTP verified for %s (%s)", masked, key.role.value)
                return VerificationResult.accept()

            if record.attempts >= self.max_attempts:
                # Last allowed attempt used up
                self.store.remove(key)
                logger.info("OTP attempts exhausted for %s (%s)", masked, key.role.value)
                return VerificationResult.reject(RejectReason.TOO_MANY_ATTEMPTS)

            return VerificationResult.reject(RejectReason.INVALID_CODE)

    def sweep_expired(self) -> int:
        """Drop every record past its expiry; returns how many were removed"""
        now = self.clock()
        removed = 0
        for key, record in self.store.scan():
            if is_otp_expired(record.expires_at, now) and self.store.remove_if_expired(key, now):
                removed += 1
        if removed:
            logger.info("Swept %d expired OTP record(s)", removed)
        return removed

    def pending(self, phone: str, role) -> bool:
        return OtpKey(phone, UserRole(role)) in self.store
