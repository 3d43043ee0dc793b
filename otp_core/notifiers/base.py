"""
Notifier Interface
==================
Capability interface for delivering a plaintext code to an identifier.

Implementations must not log or persist the code beyond the call.
"""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from otp_core.otp.models import Channel

logger = structlog.get_logger(__name__)


class DeliveryError(Exception):
    """Raised by a notifier when a code could not be handed to the transport."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class Notifier(ABC):
    """Delivers OTP codes over one channel."""

    name: str = "base"
    channel: Channel

    async def initialize(self) -> None:
        """Acquire transport resources (e.g. HTTP clients)."""
        logger.info("Notifier initialized", notifier=self.name)

    async def close(self) -> None:
        """Release transport resources."""
        logger.info("Notifier closed", notifier=self.name)

    @abstractmethod
    async def send(
        self,
        channel: Channel,
        identifier: str,
        code: str,
        expiry_minutes: int,
        resent: bool = False,
    ) -> None:
        """
        Deliver a code.

        Args:
            channel: Channel the session was created for
            identifier: Normalized recipient
            code: Plaintext OTP
            expiry_minutes: Validity shown to the recipient
            resent: Whether this code replaces an earlier one

        Raises:
            DeliveryError: If the transport rejected or failed the send
        """
