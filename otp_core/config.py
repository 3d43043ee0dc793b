"""
Configuration
=============
Settings for the OTP core and its delivery transports, read from the
environment with production defaults.
"""

import os
from dataclasses import dataclass, field, fields

from otp_core.identifiers import DEFAULT_COUNTRY_CODE
from otp_core.otp.exceptions import ConfigurationError


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class OTPConfig:
    """Read-only settings for the OTP manager."""
    otp_length: int = 6
    otp_expiry_minutes: int = 5
    max_attempts: int = 3
    resend_cooldown_seconds: int = 60
    request_throttle_window_seconds: int = 300  # 5 minutes
    request_throttle_max: int = 3
    hash_algorithm: str = "argon2id"
    hash_work_factor: int = 3  # argon2 time_cost, or bcrypt rounds
    hash_memory_cost: int = 65536  # KiB, argon2 only
    hash_parallelism: int = 4  # argon2 only
    notify_timeout_seconds: float = 15.0
    sweep_interval_seconds: float = 60.0
    default_country_code: str = DEFAULT_COUNTRY_CODE  # prefixed to 10-digit national numbers

    @classmethod
    def from_env(cls) -> "OTPConfig":
        config = cls(
            otp_length=_env_int("OTP_LENGTH", 6),
            otp_expiry_minutes=_env_int("OTP_EXPIRY_MINUTES", 5),
            max_attempts=_env_int("MAX_OTP_ATTEMPTS", 3),
            resend_cooldown_seconds=_env_int("OTP_RESEND_COOLDOWN_SECONDS", 60),
            request_throttle_window_seconds=_env_int("OTP_THROTTLE_WINDOW_SECONDS", 300),
            request_throttle_max=_env_int("OTP_THROTTLE_MAX", 3),
            hash_algorithm=os.environ.get("OTP_HASH_ALGORITHM", "argon2id"),
            hash_work_factor=_env_int("OTP_HASH_WORK_FACTOR", 3),
            hash_memory_cost=_env_int("OTP_HASH_MEMORY_COST", 65536),
            hash_parallelism=_env_int("OTP_HASH_PARALLELISM", 4),
            notify_timeout_seconds=_env_float("OTP_NOTIFY_TIMEOUT_SECONDS", 15.0),
            sweep_interval_seconds=_env_float("OTP_SWEEP_INTERVAL_SECONDS", 60.0),
            default_country_code=os.environ.get("OTP_DEFAULT_COUNTRY_CODE", DEFAULT_COUNTRY_CODE),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Raise ConfigurationError for any non-positive numeric setting."""
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (int, float)) and not isinstance(value, bool) and value <= 0:
                raise ConfigurationError(f"{f.name} must be positive, got {value}")
        if not self.hash_algorithm:
            raise ConfigurationError("hash_algorithm must be set")
        code = self.default_country_code
        if not (code.isdigit() and 1 <= len(code) <= 3):
            raise ConfigurationError(
                f"default_country_code must be 1-3 digits without +, got {code!r}"
            )


@dataclass
class SMTPConfig:
    """SMTP settings for email delivery."""
    host: str = field(default_factory=lambda: os.environ.get("SMTP_HOST", "smtp.gmail.com"))
    port: int = field(default_factory=lambda: _env_int("SMTP_PORT", 587))
    username: str = field(default_factory=lambda: os.environ.get("SMTP_USERNAME", ""))
    password: str = field(default_factory=lambda: os.environ.get("SMTP_PASSWORD", ""))
    start_tls: bool = field(default_factory=lambda: _env_bool("SMTP_START_TLS", True))
    from_address: str = field(default_factory=lambda: os.environ.get("EMAIL_FROM_ADDRESS", ""))
    from_name: str = field(default_factory=lambda: os.environ.get("EMAIL_FROM_NAME", "Verification"))

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.username and self.password)


@dataclass
class TwilioConfig:
    """Twilio settings for SMS delivery."""
    account_sid: str = field(default_factory=lambda: os.environ.get("TWILIO_ACCOUNT_SID", ""))
    auth_token: str = field(default_factory=lambda: os.environ.get("TWILIO_AUTH_TOKEN", ""))
    from_number: str = field(default_factory=lambda: os.environ.get("TWILIO_PHONE_NUMBER", ""))
    base_url: str = "https://api.twilio.com/2010-04-01"
    brand_name: str = field(default_factory=lambda: os.environ.get("OTP_BRAND_NAME", "Verification"))

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)
