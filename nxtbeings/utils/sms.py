"""
SMS utilities for sending messages
"""
import asyncio
import logging
from abc import ABC, abstractmethod

import requests
from nxtbeings.core.config import settings
from nxtbeings.utils.phone_validator import mask_phone

logger = logging.getLogger(__name__)


class SmsGateway(ABC):
    """
    Delivery capability used by the OTP service.

    send() returns: {'success': bool, 'message_id': str, 'error': str}
    """

    name = "base"

    @abstractmethod
    async def send(self, phone: str, message: str) -> dict:
        raise NotImplementedError


class ConsoleSmsGateway(SmsGateway):
    """
    Development gateway: logs the message instead of sending it
    """

    name = "console"

    def __init__(self, delay: float = 0.0):
        self.delay = delay

    async def send(self, phone: str, message: str) -> dict:
        logger.info("SMS to %s: %s", mask_phone(phone), message)
        if self.delay:
            # Simulate provider latency
            await asyncio.sleep(self.delay)
        return {"success": True, "message_id": "console"}


class KavenegarSmsGateway(SmsGateway):
    """
    Send SMS via Kavenegar API
    """

    name = "kavenegar"

    def __init__(self, api_key: str, api_url: str, sender: str = "", timeout: float = 10.0):
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.sender = sender
        self.timeout = timeout

    async def send(self, phone: str, message: str) -> dict:
        if not self.api_key:
            return {"success": False, "error": "SMS API key not configured"}
        # requests is blocking; keep it off the event loop
        return await asyncio.to_thread(self._post, phone, message)

    def _post(self, phone: str, message: str) -> dict:
        url = f"{self.api_url}/{self.api_key}/sms/send.json"
        payload = {"receptor": phone, "message": message}
        if self.sender:
            payload["sender"] = self.sender

        try:
            response = requests.post(url, data=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Kavenegar send to %s failed: %s", mask_phone(phone), e)
            return {"success": False, "error": str(e)}

        entries = data.get("entries") or [{}]
        return {
            "success": True,
            "message_id": str(entries[0].get("messageid", "")),
        }


def get_sms_gateway(name: str = None) -> SmsGateway:
    """Build the gateway named by SMS_GATEWAY_DEFAULT (or `name`)"""
    name = (name or settings.SMS_GATEWAY_DEFAULT).lower()
    if name == "console":
        return ConsoleSmsGateway(delay=settings.SMS_MOCK_DELAY)
    if name == "kavenegar":
        return KavenegarSmsGateway(
            api_key=settings.SMS_API_KEY,
            api_url=settings.SMS_API_URL,
            sender=settings.SMS_SENDER,
            timeout=settings.SMS_TIMEOUT,
        )
    raise ValueError(f"Unknown SMS gateway: {name}")
