"""
Twilio SMS Notifier
===================
Delivers OTP codes through the Twilio Messages API.
"""

from base64 import b64encode
from typing import Optional

import httpx
import structlog

from otp_core.config import TwilioConfig
from otp_core.identifiers import mask_identifier
from otp_core.otp.models import Channel
from .base import DeliveryError, Notifier
from .templates import render_sms

logger = structlog.get_logger(__name__)


class TwilioSMSNotifier(Notifier):
    """SMS notifier backed by Twilio."""

    name = "twilio"
    channel = Channel.SMS

    def __init__(
        self,
        config: TwilioConfig,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.config = config
        self.timeout = timeout
        self.messages_url = (
            f"{config.base_url}/Accounts/{config.account_sid}/Messages.json"
        )
        self._client = client
        self._owns_client = client is None

    def _auth_header(self) -> str:
        auth = b64encode(
            f"{self.config.account_sid}:{self.config.auth_token}".encode()
        ).decode()
        return f"Basic {auth}"

    async def initialize(self) -> None:
        """Create HTTP client with auth."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        await super().initialize()

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
        await super().close()

    async def send(
        self,
        channel: Channel,
        identifier: str,
        code: str,
        expiry_minutes: int,
        resent: bool = False,
    ) -> None:
        if self._client is None:
            raise RuntimeError("Notifier not initialized")

        payload = {
            "To": identifier,
            "From": self.config.from_number,
            "Body": render_sms(self.config.brand_name, code, expiry_minutes, resent=resent),
        }

        try:
            response = await self._client.post(
                self.messages_url,
                data=payload,
                headers={"Authorization": self._auth_header()},
            )
        except httpx.HTTPError as e:
            logger.error(
                "Twilio request failed",
                to=mask_identifier(identifier),
                error=type(e).__name__,
            )
            raise DeliveryError("SMS transport error", provider=self.name) from e

        if response.status_code not in (200, 201):
            try:
                error_code = response.json().get("code")
            except ValueError:
                error_code = None
            logger.error(
                "Twilio rejected message",
                to=mask_identifier(identifier),
                status_code=response.status_code,
                error_code=error_code,
            )
            raise DeliveryError(
                f"SMS rejected with status {response.status_code}",
                provider=self.name,
            )

        # Accepted; the body is informational only
        try:
            message_sid = response.json().get("sid")
        except (ValueError, AttributeError):
            message_sid = None
        logger.info(
            "SMS dispatched",
            to=mask_identifier(identifier),
            provider_message_id=message_sid,
        )
