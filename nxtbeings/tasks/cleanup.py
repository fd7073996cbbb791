"""
Cleanup tasks for expired OTP records
"""
import asyncio
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from nxtbeings.services.otp_service import OtpService

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "sweep_expired_otps"


class OtpSweeper:
    """
    Periodically purge expired OTP records that nobody came back to verify
    """

    def __init__(self, service: OtpService, interval: float = 300):
        self.service = service
        self.interval = interval
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def run_once(self) -> int:
        return self.service.sweep_expired()

    async def _sweep(self) -> None:
        # Coroutine job: runs on the event loop, never in the executor's threads
        self.run_once()

    def start(self) -> None:
        """Schedule the sweep on the running event loop"""
        if self.running:
            return
        scheduler = AsyncIOScheduler(event_loop=asyncio.get_running_loop(), timezone="UTC")
        scheduler.add_job(
            self._sweep,
            "interval",
            seconds=self.interval,
            id=SWEEP_JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("[CLEANUP] OTP sweeper started (every %ss)", self.interval)

    async def stop(self) -> None:
        if self._scheduler is None:
            return
        scheduler, self._scheduler = self._scheduler, None
        if scheduler.running:
            scheduler.shutdown(wait=False)
        logger.info("[CLEANUP] OTP sweeper stopped")
