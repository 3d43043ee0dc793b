"""
Identifier Utilities
====================
Canonical forms of contact identifiers and masking for logs.

Format validation happens before the core is called; these helpers only
put already-valid input into the form sessions are keyed on.
"""

import re

from otp_core.otp.models import Channel

DEFAULT_COUNTRY_CODE = "91"


def normalize_phone(phone: str, default_country: str = DEFAULT_COUNTRY_CODE) -> str:
    """
    Normalize a phone number to E.164 format.

    Args:
        phone: Raw phone number
        default_country: Country code (without +) for 10-digit national numbers

    Returns:
        E.164 formatted number
    """
    digits = re.sub(r'\D', '', phone)

    if phone.strip().startswith('+'):
        return f"+{digits}"

    if len(digits) == 10:
        return f"+{default_country}{digits}"

    return f"+{digits}"


def normalize_email(email: str) -> str:
    return email.strip()


def normalize_identifier(
    identifier: str,
    channel: Channel,
    default_country: str = DEFAULT_COUNTRY_CODE,
) -> str:
    """Canonical identifier for a channel."""
    if channel == Channel.SMS:
        return normalize_phone(identifier, default_country)
    return normalize_email(identifier)


def mask_identifier(value: str) -> str:
    """
    Mask an identifier for display in logs.

    Keeps the first and last three characters; short values are fully masked.
    """
    if not value:
        return ""
    if len(value) <= 6:
        return "*" * len(value)
    return f"{value[:3]}***{value[-3:]}"
