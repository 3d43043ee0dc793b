"""
OTP Notifiers
=============
Delivery transports for OTP codes.
"""

from typing import Dict, Optional

from otp_core.config import SMTPConfig, TwilioConfig
from otp_core.otp.models import Channel
from .base import DeliveryError, Notifier
from .smtp import SMTPEmailNotifier
from .twilio import TwilioSMSNotifier


def build_notifiers(
    smtp: Optional[SMTPConfig] = None,
    twilio: Optional[TwilioConfig] = None,
) -> Dict[Channel, Notifier]:
    """
    Build a notifier for every configured transport.

    Unconfigured transports are left out, so the manager reports their
    channel as unavailable.
    """
    smtp = smtp if smtp is not None else SMTPConfig()
    twilio = twilio if twilio is not None else TwilioConfig()

    notifiers: Dict[Channel, Notifier] = {}
    if smtp.is_configured:
        notifiers[Channel.EMAIL] = SMTPEmailNotifier(smtp)
    if twilio.is_configured:
        notifiers[Channel.SMS] = TwilioSMSNotifier(twilio)
    return notifiers


__all__ = [
    "DeliveryError",
    "Notifier",
    "SMTPEmailNotifier",
    "TwilioSMSNotifier",
    "build_notifiers",
]
