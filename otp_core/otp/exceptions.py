"""
OTP Exceptions
==============
Typed failures raised by the OTP manager.

Every ``OTPError`` is an expected, caller-recoverable condition. Messages
are safe to show to end users: they never contain the code, its hash, or
the full identifier.
"""

import math
from typing import Any, Dict, Optional


class ConfigurationError(Exception):
    """Raised at startup when required collaborators or settings are missing."""
    pass


class OTPError(Exception):
    """Base class for OTP operation failures."""

    code: str = "OTP_ERROR"
    default_message: str = "OTP operation failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Transport-neutral payload for the request layer."""
        return {"error": self.message, "code": self.code}


class ChannelUnavailable(OTPError):
    code = "CHANNEL_UNAVAILABLE"
    default_message = "Delivery channel is not configured"

    def __init__(self, channel: str):
        self.channel = channel
        super().__init__(f"{channel} delivery is not configured")

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["channel"] = self.channel
        return payload


class RateLimited(OTPError):
    code = "RATE_LIMITED"
    default_message = "Too many OTP requests, please wait before requesting again"

    def __init__(self, retry_after: float):
        self.retry_after = max(0, math.ceil(retry_after))
        super().__init__()

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["retry_after"] = self.retry_after
        return payload


class DeliveryFailed(OTPError):
    code = "DELIVERY_FAILED"
    default_message = "Failed to send OTP, please try again later"


class SessionNotFound(OTPError):
    code = "SESSION_NOT_FOUND"
    default_message = "Invalid or expired session"


class Expired(OTPError):
    code = "OTP_EXPIRED"
    default_message = "OTP has expired"


class AttemptsExhausted(OTPError):
    code = "MAX_ATTEMPTS_EXCEEDED"
    default_message = "Maximum verification attempts exceeded"


class IdentifierMismatch(OTPError):
    code = "IDENTIFIER_MISMATCH"
    default_message = "Identifier mismatch"


class InvalidCode(OTPError):
    code = "INVALID_OTP"
    default_message = "Invalid OTP"

    def __init__(self, remaining_attempts: int):
        self.remaining_attempts = remaining_attempts
        super().__init__(f"Invalid OTP. {remaining_attempts} attempts remaining")

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["remaining_attempts"] = self.remaining_attempts
        return payload


class TooSoon(OTPError):
    code = "RESEND_TOO_SOON"
    default_message = "Please wait before requesting another OTP"

    def __init__(self, remaining_seconds: float):
        self.remaining_seconds = max(0, math.ceil(remaining_seconds))
        super().__init__()

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["wait_time"] = self.remaining_seconds
        return payload


class OTPInternalError(OTPError):
    code = "INTERNAL_ERROR"
    default_message = "Something went wrong, please try again later"
