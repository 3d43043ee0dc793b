"""
Expiry Sweeper
==============
Periodic background removal of expired OTP sessions.

Sweeping is cleanup only: verify and resend check expiry themselves, so
correctness never depends on the sweeper having run.
"""

import asyncio
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class ExpirySweeper:
    """
    Runs ``OTPManager.sweep_expired`` every ``interval_seconds``,
    defaulting to the manager's ``sweep_interval_seconds`` setting.

    Owned by the host's lifecycle: call ``start()`` on startup and
    ``stop()`` on shutdown. Tests drive ``run_once()`` directly.
    """

    def __init__(self, manager, interval_seconds: Optional[float] = None):
        if interval_seconds is None:
            interval_seconds = manager.config.sweep_interval_seconds
        if interval_seconds <= 0:
            raise ValueError("Sweep interval must be positive")
        self.manager = manager
        self.interval_seconds = interval_seconds
        self.running = False
        self.task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        """Start the sweep loop."""
        if self.running:
            logger.warning("Expiry sweeper is already running")
            return

        self.running = True
        self.task = asyncio.create_task(self._run())
        logger.info("Expiry sweeper started", interval=self.interval_seconds)

    async def stop(self) -> None:
        """Stop the sweep loop and wait for it to finish."""
        if not self.running:
            return

        self.running = False
        if self.task:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
            self.task = None
        logger.info("Expiry sweeper stopped")

    async def run_once(self) -> int:
        """Run a single sweep. Returns the number of sessions removed."""
        return await self.manager.sweep_expired()

    async def _run(self) -> None:
        while self.running:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run_once()
            except Exception:
                logger.exception("Expiry sweep failed")
