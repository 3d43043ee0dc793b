"""
OTP Generator
=============
Numeric passcode generation from the OS CSPRNG.
"""

import secrets
import uuid
from typing import Optional


def generate_otp(length: int = 6) -> str:
    """
    Generate a secure random numeric OTP.

    Each digit is drawn independently from ``secrets`` so no digit
    position is biased and outputs are not predictable from earlier ones.

    Args:
        length: Number of digits

    Returns:
        OTP string of exactly ``length`` digits

    Raises:
        ValueError: If length is not positive
    """
    if length <= 0:
        raise ValueError("OTP length must be positive")
    return ''.join(str(secrets.randbelow(10)) for _ in range(length))


def generate_session_id() -> str:
    """Generate an opaque 128-bit session identifier."""
    return uuid.UUID(bytes=secrets.token_bytes(16)).hex


class OTPGenerator:
    """Generates codes with a configured default length."""

    def __init__(self, length: int = 6):
        if length <= 0:
            raise ValueError("OTP length must be positive")
        self.length = length

    def generate(self, length: Optional[int] = None) -> str:
        return generate_otp(self.length if length is None else length)

    def new_session_id(self) -> str:
        return generate_session_id()
