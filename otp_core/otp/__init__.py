"""
OTP Primitives
==============
Code generation, credential hashing, session models and error types.
"""

# Re-export all public APIs
from .models import (
    Channel,
    OTPSession,
    OTPRequestResult,
    OTPVerifyResult,
    OTPResendResult,
    OTPCapabilities,
)
from .exceptions import (
    ConfigurationError,
    OTPError,
    ChannelUnavailable,
    RateLimited,
    DeliveryFailed,
    SessionNotFound,
    Expired,
    AttemptsExhausted,
    IdentifierMismatch,
    InvalidCode,
    TooSoon,
    OTPInternalError,
)
from .generator import OTPGenerator, generate_otp, generate_session_id
from .hashing import (
    CredentialHasher,
    Argon2CredentialHasher,
    BcryptCredentialHasher,
    get_hasher,
)

__all__ = [
    # Models
    "Channel",
    "OTPSession",
    "OTPRequestResult",
    "OTPVerifyResult",
    "OTPResendResult",
    "OTPCapabilities",
    # Exceptions
    "ConfigurationError",
    "OTPError",
    "ChannelUnavailable",
    "RateLimited",
    "DeliveryFailed",
    "SessionNotFound",
    "Expired",
    "AttemptsExhausted",
    "IdentifierMismatch",
    "InvalidCode",
    "TooSoon",
    "OTPInternalError",
    # Generator
    "OTPGenerator",
    "generate_otp",
    "generate_session_id",
    # Hashing
    "CredentialHasher",
    "Argon2CredentialHasher",
    "BcryptCredentialHasher",
    "get_hasher",
]
