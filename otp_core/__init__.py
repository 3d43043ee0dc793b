"""
OTP Core Library
================
One-time passcode issuance and verification with attempt limits, resend
cooldowns, per-identifier throttling and expiry sweeping.
"""

__version__ = "0.1.0"

# Clock
from otp_core.clock import Clock, SystemClock

# Configuration
from otp_core.config import OTPConfig, SMTPConfig, TwilioConfig

# OTP primitives
from otp_core.otp import (
    Channel,
    OTPSession,
    OTPRequestResult,
    OTPVerifyResult,
    OTPResendResult,
    OTPCapabilities,
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
    OTPGenerator,
    generate_otp,
    CredentialHasher,
    Argon2CredentialHasher,
    BcryptCredentialHasher,
    get_hasher,
)

# Identifiers
from otp_core.identifiers import normalize_identifier, normalize_phone, mask_identifier

# Storage
from otp_core.store import SessionStore, InMemorySessionStore

# Throttling
from otp_core.throttle import ThrottleLedger, ThrottleDecision

# Delivery
from otp_core.notifiers import (
    DeliveryError,
    Notifier,
    SMTPEmailNotifier,
    TwilioSMSNotifier,
    build_notifiers,
)

# Lifecycle
from otp_core.manager import OTPManager
from otp_core.sweeper import ExpirySweeper

# Logging
from otp_core.log_config import configure_logging

__all__ = [
    # Clock
    "Clock",
    "SystemClock",
    # Configuration
    "OTPConfig",
    "SMTPConfig",
    "TwilioConfig",
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
    # Generation and hashing
    "OTPGenerator",
    "generate_otp",
    "CredentialHasher",
    "Argon2CredentialHasher",
    "BcryptCredentialHasher",
    "get_hasher",
    # Identifiers
    "normalize_identifier",
    "normalize_phone",
    "mask_identifier",
    # Storage
    "SessionStore",
    "InMemorySessionStore",
    # Throttling
    "ThrottleLedger",
    "ThrottleDecision",
    # Delivery
    "DeliveryError",
    "Notifier",
    "SMTPEmailNotifier",
    "TwilioSMSNotifier",
    "build_notifiers",
    # Lifecycle
    "OTPManager",
    "ExpirySweeper",
    # Logging
    "configure_logging",
]
