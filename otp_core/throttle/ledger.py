"""
Throttle Ledger
===============
Fixed-window issuance counter keyed by contact identifier.

Independent of HTTP rate limiting, which throttles by network address
rather than by the identity being proven.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Dict, Optional

import structlog

from otp_core.clock import Clock, SystemClock
from .models import ThrottleDecision, ThrottleEntry

logger = structlog.get_logger(__name__)


class ThrottleLedger:
    """
    Per-identifier fixed-window request ledger.

    A window starts with the first request for an identifier and lasts
    ``window_seconds``; once it lapses the count starts again from zero.
    """

    def __init__(
        self,
        window_seconds: int = 300,
        max_requests: int = 3,
        clock: Optional[Clock] = None,
    ):
        """
        Args:
            window_seconds: Window size in seconds
            max_requests: Issuances allowed per identifier per window
            clock: Time source
        """
        self.window = timedelta(seconds=window_seconds)
        self.max_requests = max_requests
        self.clock = clock if clock is not None else SystemClock()
        self._entries: Dict[str, ThrottleEntry] = {}
        self._lock = asyncio.Lock()

    def _live_entry(self, identifier: str, now: datetime) -> Optional[ThrottleEntry]:
        entry = self._entries.get(identifier)
        if entry is not None and now >= entry.window_start + self.window:
            del self._entries[identifier]
            return None
        return entry

    async def increment(self, identifier: str) -> int:
        """Count one issuance unconditionally and return the new count."""
        async with self._lock:
            now = self.clock.now()
            entry = self._live_entry(identifier, now)
            if entry is None:
                entry = ThrottleEntry(identifier=identifier, count=0, window_start=now)
                self._entries[identifier] = entry
            entry.count += 1
            return entry.count

    async def acquire(self, identifier: str) -> ThrottleDecision:
        """
        Check the threshold and count one issuance in a single step.

        Nothing is counted when the identifier is already at the limit.
        """
        async with self._lock:
            now = self.clock.now()
            entry = self._live_entry(identifier, now)
            if entry is None:
                entry = ThrottleEntry(identifier=identifier, count=0, window_start=now)
                self._entries[identifier] = entry

            reset_at = entry.window_start + self.window

            if entry.count >= self.max_requests:
                return ThrottleDecision(
                    allowed=False,
                    count=entry.count,
                    limit=self.max_requests,
                    reset_at=reset_at,
                    retry_after=(reset_at - now).total_seconds(),
                )

            entry.count += 1
            return ThrottleDecision(
                allowed=True,
                count=entry.count,
                limit=self.max_requests,
                reset_at=reset_at,
            )

    async def release(self, identifier: str) -> int:
        """Undo one counted issuance. Returns the remaining count."""
        async with self._lock:
            entry = self._live_entry(identifier, self.clock.now())
            if entry is None:
                return 0
            entry.count -= 1
            if entry.count <= 0:
                del self._entries[identifier]
                return 0
            return entry.count

    async def reset(self, identifier: str) -> None:
        """Forget all issuances for an identifier."""
        async with self._lock:
            self._entries.pop(identifier, None)

    async def count(self, identifier: str) -> int:
        """Issuances counted in the identifier's current window."""
        async with self._lock:
            entry = self._live_entry(identifier, self.clock.now())
            return entry.count if entry else 0

    async def prune(self, now: Optional[datetime] = None) -> int:
        """Drop entries whose window has lapsed. Returns the number removed."""
        async with self._lock:
            now = now or self.clock.now()
            lapsed = [
                identifier for identifier, entry in self._entries.items()
                if now >= entry.window_start + self.window
            ]
            for identifier in lapsed:
                del self._entries[identifier]

        if lapsed:
            logger.debug("Throttle windows pruned", count=len(lapsed))
        return len(lapsed)
