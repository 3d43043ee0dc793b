"""
In-Memory Session Store
=======================
Single-process session store guarded by an asyncio lock.
"""

import asyncio
from datetime import datetime
from typing import Dict, List, Optional

import structlog

from otp_core.otp.exceptions import SessionNotFound
from otp_core.otp.models import OTPSession
from .base import Mutator, SessionStore

logger = structlog.get_logger(__name__)


class InMemorySessionStore(SessionStore):
    """
    In-memory session store.

    Every critical section is synchronous apart from acquiring the lock,
    so no I/O ever happens while it is held. Not shared across processes.
    """

    def __init__(self):
        self._sessions: Dict[str, OTPSession] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    async def put(self, session: OTPSession) -> None:
        async with self._lock:
            if session.session_id in self._sessions:
                raise ValueError("Session id already in use")
            self._sessions[session.session_id] = session

    async def get(self, session_id: str) -> OTPSession:
        async with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound()
        return session

    async def update(self, session_id: str, mutator: Mutator) -> Optional[OTPSession]:
        async with self._lock:
            current = self._sessions.get(session_id)
            if current is None:
                raise SessionNotFound()

            replacement = mutator(current)

            if replacement is None:
                del self._sessions[session_id]
                return None

            if replacement.session_id != session_id:
                raise ValueError("Mutator must not change the session id")
            self._sessions[session_id] = replacement
            return replacement

    async def delete(self, session_id: str) -> Optional[OTPSession]:
        async with self._lock:
            return self._sessions.pop(session_id, None)

    async def sweep_expired(self, now: datetime) -> List[OTPSession]:
        async with self._lock:
            expired = [
                session for session in self._sessions.values()
                if session.expires_at < now
            ]
            for session in expired:
                del self._sessions[session.session_id]

        if expired:
            logger.debug("Expired sessions swept", count=len(expired))
        return expired

    async def has_identifier(self, identifier: str, now: datetime) -> bool:
        async with self._lock:
            return any(
                session.identifier == identifier and not session.is_expired(now)
                for session in self._sessions.values()
            )
