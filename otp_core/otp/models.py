"""
OTP Models
==========
Data models and enums for OTP sessions and operation results.
"""

from datetime import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import List


class Channel(str, Enum):
    """OTP delivery channels."""
    EMAIL = "email"
    SMS = "sms"


@dataclass(frozen=True)
class OTPSession:
    """
    Server-side record of one outstanding verification.

    Records are never mutated in place; the store swaps whole records
    so hash, timestamps and attempt count always change together.
    """
    session_id: str
    identifier: str
    channel: Channel
    credential_hash: str
    created_at: datetime
    expires_at: datetime
    max_attempts: int
    attempt_count: int = 0
    resend_count: int = 0

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    @property
    def is_exhausted(self) -> bool:
        return self.attempt_count >= self.max_attempts

    @property
    def remaining_attempts(self) -> int:
        return max(0, self.max_attempts - self.attempt_count)


@dataclass
class OTPRequestResult:
    """Returned by a successful request."""
    session_id: str
    expires_at: datetime
    resend_allowed_at: datetime


@dataclass
class OTPVerifyResult:
    """Returned by a successful verification."""
    channel: Channel
    identifier: str
    verified_at: datetime


@dataclass
class OTPResendResult:
    """Returned by a successful resend."""
    expires_at: datetime
    resend_allowed_at: datetime


@dataclass
class OTPCapabilities:
    """Public description of what this deployment can issue."""
    channels: List[Channel] = field(default_factory=list)
    otp_length: int = 6
    expiry_minutes: int = 5
    max_attempts: int = 3
    resend_cooldown_seconds: int = 60

    @property
    def email_enabled(self) -> bool:
        return Channel.EMAIL in self.channels

    @property
    def sms_enabled(self) -> bool:
        return Channel.SMS in self.channels
