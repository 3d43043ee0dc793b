"""
Unit Tests for Configuration and Identifiers
============================================
"""

import pytest

from otp_core.config import OTPConfig, SMTPConfig, TwilioConfig
from otp_core.otp import Channel, ConfigurationError


class TestOTPConfig:
    """Tests for OTP settings."""

    def test_defaults(self):
        config = OTPConfig()

        assert config.otp_length == 6
        assert config.otp_expiry_minutes == 5
        assert config.max_attempts == 3
        assert config.resend_cooldown_seconds == 60
        assert config.request_throttle_max == 3
        assert config.hash_algorithm == "argon2id"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("OTP_LENGTH", "8")
        monkeypatch.setenv("OTP_EXPIRY_MINUTES", "10")
        monkeypatch.setenv("MAX_OTP_ATTEMPTS", "5")
        monkeypatch.setenv("OTP_THROTTLE_MAX", "4")
        monkeypatch.setenv("OTP_HASH_ALGORITHM", "bcrypt")
        monkeypatch.setenv("OTP_HASH_WORK_FACTOR", "12")

        config = OTPConfig.from_env()

        assert config.otp_length == 8
        assert config.otp_expiry_minutes == 10
        assert config.max_attempts == 5
        assert config.request_throttle_max == 4
        assert config.hash_algorithm == "bcrypt"
        assert config.hash_work_factor == 12

    def test_from_env_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("MAX_OTP_ATTEMPTS", "three")

        with pytest.raises(ConfigurationError):
            OTPConfig.from_env()

    def test_default_country_code(self, monkeypatch):
        monkeypatch.delenv("OTP_DEFAULT_COUNTRY_CODE", raising=False)
        assert OTPConfig.from_env().default_country_code == "91"

        monkeypatch.setenv("OTP_DEFAULT_COUNTRY_CODE", "44")
        assert OTPConfig.from_env().default_country_code == "44"

    @pytest.mark.parametrize("code", ["+91", "", "1234", "uk"])
    def test_validate_rejects_bad_country_code(self, code):
        with pytest.raises(ConfigurationError):
            OTPConfig(default_country_code=code).validate()

    def test_fractional_seconds_from_env(self, monkeypatch):
        monkeypatch.setenv("OTP_NOTIFY_TIMEOUT_SECONDS", "7.5")
        monkeypatch.setenv("OTP_SWEEP_INTERVAL_SECONDS", "0.5")

        config = OTPConfig.from_env()

        assert config.notify_timeout_seconds == 7.5
        assert config.sweep_interval_seconds == 0.5

    def test_non_numeric_timeout_rejected(self, monkeypatch):
        monkeypatch.setenv("OTP_NOTIFY_TIMEOUT_SECONDS", "soon")

        with pytest.raises(ConfigurationError):
            OTPConfig.from_env()

    @pytest.mark.parametrize("field", ["otp_length", "max_attempts", "otp_expiry_minutes"])
    def test_validate_rejects_non_positive(self, field):
        with pytest.raises(ConfigurationError):
            OTPConfig(**{field: 0}).validate()


class TestTransportConfig:
    """Tests for transport settings."""

    def test_twilio_from_env(self, monkeypatch):
        monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC1")
        monkeypatch.setenv("TWILIO_AUTH_TOKEN", "tok")
        monkeypatch.setenv("TWILIO_PHONE_NUMBER", "+15550001111")

        assert TwilioConfig().is_configured is True

    def test_twilio_unconfigured(self, monkeypatch):
        monkeypatch.delenv("TWILIO_ACCOUNT_SID", raising=False)

        assert TwilioConfig().is_configured is False

    def test_smtp_from_env(self, monkeypatch):
        monkeypatch.setenv("SMTP_HOST", "smtp.example.com")
        monkeypatch.setenv("SMTP_PORT", "2525")
        monkeypatch.setenv("SMTP_USERNAME", "mailer")
        monkeypatch.setenv("SMTP_PASSWORD", "pw")
        monkeypatch.setenv("SMTP_START_TLS", "false")

        config = SMTPConfig()

        assert config.port == 2525
        assert config.start_tls is False
        assert config.is_configured is True


class TestIdentifiers:
    """Tests for identifier normalization and masking."""

    @pytest.mark.parametrize("raw", [
        "+14155551234",
        "(415) 555-1234",
        "415.555.1234",
        " +1 415 555 1234 ",
    ])
    def test_normalize_phone(self, raw):
        from otp_core.identifiers import normalize_phone

        assert normalize_phone(raw, default_country="1") == "+14155551234"

    def test_normalize_phone_default_country(self):
        from otp_core.identifiers import normalize_phone

        assert normalize_phone("9876543210") == "+919876543210"
        assert normalize_phone("919876543210") == "+919876543210"
        assert normalize_phone("+91 98765 43210") == "+919876543210"

    def test_normalize_identifier_by_channel(self):
        from otp_core.identifiers import normalize_identifier

        assert normalize_identifier(" x@d.com ", Channel.EMAIL) == "x@d.com"
        assert normalize_identifier("9876543210", Channel.SMS) == "+919876543210"
        assert normalize_identifier("4155551234", Channel.SMS, "1") == "+14155551234"

    def test_mask_identifier(self):
        from otp_core.identifiers import mask_identifier

        assert mask_identifier("student@example.com") == "stu***com"
        assert mask_identifier("+14155551234") == "+14***234"
        assert mask_identifier("abc") == "***"
        assert mask_identifier("") == ""
