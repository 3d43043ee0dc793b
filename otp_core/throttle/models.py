"""
Throttle Models
===============
Data models for per-identifier issuance throttling.
"""

from datetime import datetime
from dataclasses import dataclass
from typing import Optional


@dataclass
class ThrottleEntry:
    """Request count for one identifier within a fixed window."""
    identifier: str
    count: int
    window_start: datetime


@dataclass
class ThrottleDecision:
    """Result of an acquire attempt."""
    allowed: bool
    count: int
    limit: int
    reset_at: datetime
    retry_after: Optional[float] = None  # Seconds until the window resets

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.count)
