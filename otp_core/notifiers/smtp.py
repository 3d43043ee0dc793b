"""
SMTP Email Notifier
===================
Delivers OTP codes as multipart email via aiosmtplib.
"""

from email.message import EmailMessage

import aiosmtplib
import structlog

from otp_core.config import SMTPConfig
from otp_core.identifiers import mask_identifier
from otp_core.otp.models import Channel
from .base import DeliveryError, Notifier
from .templates import render_email

logger = structlog.get_logger(__name__)


class SMTPEmailNotifier(Notifier):
    """Email notifier sending through an SMTP relay with STARTTLS."""

    name = "smtp"
    channel = Channel.EMAIL

    def __init__(self, config: SMTPConfig, timeout: float = 15.0):
        self.config = config
        self.timeout = timeout

    def build_message(
        self,
        identifier: str,
        code: str,
        expiry_minutes: int,
        resent: bool = False,
    ) -> EmailMessage:
        content = render_email(self.config.from_name, code, expiry_minutes, resent=resent)

        msg = EmailMessage()
        msg["From"] = f'"{self.config.from_name}" <{self.config.from_address}>'
        msg["To"] = identifier
        msg["Subject"] = content.subject
        msg.set_content(content.text)
        msg.add_alternative(content.html, subtype="html")
        return msg

    async def send(
        self,
        channel: Channel,
        identifier: str,
        code: str,
        expiry_minutes: int,
        resent: bool = False,
    ) -> None:
        msg = self.build_message(identifier, code, expiry_minutes, resent=resent)

        try:
            await aiosmtplib.send(
                msg,
                hostname=self.config.host,
                port=self.config.port,
                username=self.config.username,
                password=self.config.password,
                start_tls=self.config.start_tls,
                timeout=self.timeout,
            )
        except aiosmtplib.SMTPException as e:
            logger.error(
                "SMTP delivery failed",
                host=self.config.host,
                to=mask_identifier(identifier),
                error=type(e).__name__,
            )
            raise DeliveryError("Email transport error", provider=self.name) from e

        logger.info("Email dispatched", to=mask_identifier(identifier))
