"""
Unit Tests for Delivery Transports
==================================
"""

from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs

import aiosmtplib
import httpx
import pytest

from otp_core.config import SMTPConfig, TwilioConfig
from otp_core.notifiers import (
    DeliveryError,
    SMTPEmailNotifier,
    TwilioSMSNotifier,
    build_notifiers,
)
from otp_core.notifiers.templates import render_email, render_sms
from otp_core.otp import Channel


@pytest.fixture
def twilio_config():
    return TwilioConfig(
        account_sid="AC123",
        auth_token="secret-token",
        from_number="+15550001111",
        brand_name="Acme",
    )


@pytest.fixture
def smtp_config():
    return SMTPConfig(
        host="smtp.example.com",
        port=587,
        username="mailer",
        password="hunter2",
        start_tls=True,
        from_address="no-reply@example.com",
        from_name="Acme",
    )


def twilio_with(handler, config):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TwilioSMSNotifier(config, client=client)


class TestTwilioSMSNotifier:
    """Tests for the Twilio SMS transport."""

    @pytest.mark.asyncio
    async def test_send_posts_message(self, twilio_config):
        captured = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(201, json={"sid": "SM1"})

        notifier = twilio_with(handler, twilio_config)
        await notifier.send(Channel.SMS, "+14155551234", "482910", 5)

        request = captured[0]
        form = parse_qs(request.content.decode())
        assert request.url.path == "/2010-04-01/Accounts/AC123/Messages.json"
        assert request.headers["Authorization"].startswith("Basic ")
        assert form["To"] == ["+14155551234"]
        assert form["From"] == ["+15550001111"]
        assert "482910" in form["Body"][0]
        assert "5 minutes" in form["Body"][0]

    @pytest.mark.asyncio
    async def test_accepted_without_json_body(self, twilio_config):
        """A 2xx with a non-JSON body is still a successful send."""

        def handler(request):
            return httpx.Response(201, text="Queued")

        notifier = twilio_with(handler, twilio_config)

        await notifier.send(Channel.SMS, "+14155551234", "482910", 5)

    @pytest.mark.asyncio
    async def test_rejected_message_raises(self, twilio_config):
        def handler(request):
            return httpx.Response(400, json={"code": 21211, "message": "Invalid 'To'"})

        notifier = twilio_with(handler, twilio_config)

        with pytest.raises(DeliveryError) as exc_info:
            await notifier.send(Channel.SMS, "+14155551234", "482910", 5)
        assert exc_info.value.provider == "twilio"

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, twilio_config):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        notifier = twilio_with(handler, twilio_config)

        with pytest.raises(DeliveryError):
            await notifier.send(Channel.SMS, "+14155551234", "482910", 5)

    @pytest.mark.asyncio
    async def test_send_requires_initialize(self, twilio_config):
        notifier = TwilioSMSNotifier(twilio_config)

        with pytest.raises(RuntimeError):
            await notifier.send(Channel.SMS, "+14155551234", "482910", 5)

        await notifier.initialize()
        assert notifier._client is not None
        await notifier.close()
        assert notifier._client is None


class TestSMTPEmailNotifier:
    """Tests for the SMTP email transport."""

    def test_build_message(self, smtp_config):
        notifier = SMTPEmailNotifier(smtp_config)

        msg = notifier.build_message("x@d.com", "482910", 5)

        assert msg["To"] == "x@d.com"
        assert "no-reply@example.com" in msg["From"]
        assert msg["Subject"] == "Acme - Email Verification Code"
        assert msg.is_multipart()
        assert "482910" in msg.get_body(preferencelist=("plain",)).get_content()
        assert "482910" in msg.get_body(preferencelist=("html",)).get_content()

    @pytest.mark.asyncio
    async def test_send_uses_configured_relay(self, smtp_config):
        notifier = SMTPEmailNotifier(smtp_config)

        with patch("otp_core.notifiers.smtp.aiosmtplib.send", new_callable=AsyncMock) as send:
            await notifier.send(Channel.EMAIL, "x@d.com", "482910", 5, resent=True)

        send.assert_awaited_once()
        kwargs = send.await_args.kwargs
        assert kwargs["hostname"] == "smtp.example.com"
        assert kwargs["port"] == 587
        assert kwargs["start_tls"] is True
        assert "(Resent)" in send.await_args.args[0]["Subject"]

    @pytest.mark.asyncio
    async def test_smtp_failure_raises(self, smtp_config):
        notifier = SMTPEmailNotifier(smtp_config)

        with patch(
            "otp_core.notifiers.smtp.aiosmtplib.send",
            new_callable=AsyncMock,
            side_effect=aiosmtplib.SMTPException("relay refused"),
        ):
            with pytest.raises(DeliveryError) as exc_info:
                await notifier.send(Channel.EMAIL, "x@d.com", "482910", 5)

        assert exc_info.value.provider == "smtp"


class TestBuildNotifiers:
    """Tests for notifier wiring."""

    def test_only_configured_channels(self, smtp_config):
        notifiers = build_notifiers(smtp=smtp_config, twilio=TwilioConfig(account_sid=""))

        assert set(notifiers) == {Channel.EMAIL}
        assert isinstance(notifiers[Channel.EMAIL], SMTPEmailNotifier)

    def test_both_channels(self, smtp_config, twilio_config):
        notifiers = build_notifiers(smtp=smtp_config, twilio=twilio_config)

        assert set(notifiers) == {Channel.EMAIL, Channel.SMS}
        assert isinstance(notifiers[Channel.SMS], TwilioSMSNotifier)


class TestTemplates:
    """Tests for message bodies."""

    def test_sms_body(self):
        body = render_sms("Acme", "123456", 5)

        assert body.startswith("Acme verification code: 123456.")
        assert "expires in 5 minutes" in body

    def test_resent_sms_body(self):
        assert "(resent)" in render_sms("Acme", "123456", 5, resent=True)

    def test_email_content(self):
        content = render_email("Acme", "123456", 10)

        assert content.subject == "Acme - Email Verification Code"
        assert "10 minutes" in content.text
        assert "123456" in content.html
