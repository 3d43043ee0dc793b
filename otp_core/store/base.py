"""
Session Store Interface
=======================
Lifecycle-scoped storage for OTP session records.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, List, Optional

from otp_core.otp.models import OTPSession

# Receives the current record; returns its replacement, or None to delete it.
Mutator = Callable[[OTPSession], Optional[OTPSession]]


class SessionStore(ABC):
    """
    Abstract session store.

    Implementations must make ``update`` atomic with respect to concurrent
    ``update``/``delete`` on the same key.
    """

    @abstractmethod
    async def put(self, session: OTPSession) -> None:
        """Insert a new record. Raises ValueError if the id is already live."""

    @abstractmethod
    async def get(self, session_id: str) -> OTPSession:
        """Return the record or raise SessionNotFound."""

    @abstractmethod
    async def update(self, session_id: str, mutator: Mutator) -> Optional[OTPSession]:
        """
        Atomically read-modify-write a record.

        Exceptions raised by ``mutator`` abort the update and leave the
        record untouched.

        Returns:
            The stored replacement, or None if the mutator deleted the record

        Raises:
            SessionNotFound: If no record exists for ``session_id``
        """

    @abstractmethod
    async def delete(self, session_id: str) -> Optional[OTPSession]:
        """Remove a record, returning it if it existed."""

    @abstractmethod
    async def sweep_expired(self, now: datetime) -> List[OTPSession]:
        """Remove every record with ``expires_at < now`` and return them."""

    @abstractmethod
    async def has_identifier(self, identifier: str, now: datetime) -> bool:
        """Whether a non-expired record exists for ``identifier``."""
