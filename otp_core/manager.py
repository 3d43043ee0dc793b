"""
OTP Manager
===========
Session lifecycle for one-time passcodes: request, verify, resend and
expiry cleanup.

The manager is the only component that mutates the session store and
the throttle ledger. Every state transition on a session goes through a
single ``SessionStore.update`` call, so concurrent operations on the same
session serialise and no attempt increment is lost. Hashing and delivery
always happen outside the store's critical section.

Session states:
    Active -> Verified | Expired | Exhausted   (record deleted)
    Active -> Superseded -> Active              (resend, same session id)
"""

import asyncio
from collections import Counter
from dataclasses import replace
from datetime import timedelta
from enum import Enum
from functools import wraps
from typing import Dict, Mapping, Optional, Union

import structlog

from otp_core.clock import Clock, SystemClock
from otp_core.config import OTPConfig
from otp_core.identifiers import mask_identifier, normalize_identifier
from otp_core.metrics import record_request, record_resend, record_swept, record_verification
from otp_core.notifiers.base import Notifier
from otp_core.otp.exceptions import (
    AttemptsExhausted,
    ChannelUnavailable,
    ConfigurationError,
    DeliveryFailed,
    Expired,
    IdentifierMismatch,
    InvalidCode,
    OTPError,
    OTPInternalError,
    RateLimited,
    SessionNotFound,
    TooSoon,
)
from otp_core.otp.generator import OTPGenerator
from otp_core.otp.hashing import CredentialHasher, get_hasher
from otp_core.otp.models import (
    Channel,
    OTPCapabilities,
    OTPRequestResult,
    OTPResendResult,
    OTPSession,
    OTPVerifyResult,
)
from otp_core.store import InMemorySessionStore, SessionStore
from otp_core.throttle import ThrottleLedger

logger = structlog.get_logger(__name__)


class _Outcome(str, Enum):
    VERIFIED = "verified"
    INVALID = "invalid_code"
    EXHAUSTED = "attempts_exhausted"
    EXPIRED = "expired"
    REISSUED = "reissued"
    TOO_SOON = "too_soon"


class _Superseded(Exception):
    """A resend replaced the code between hashing and the store update."""

    def __init__(self, session: OTPSession):
        self.session = session


def _internal_faults(operation: str):
    """Turn anything outside the OTPError taxonomy into OTPInternalError."""
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except OTPError:
                raise
            except Exception as e:
                logger.exception("OTP operation failed unexpectedly", operation=operation)
                raise OTPInternalError() from e
        return wrapper
    return decorator


class OTPManager:
    """
    Issues and verifies OTP sessions.

    Example:
        manager = OTPManager(OTPConfig.from_env(), build_notifiers())

        issued = await manager.request("x@d.com", Channel.EMAIL)
        try:
            result = await manager.verify(issued.session_id, "x@d.com", code)
        except InvalidCode as e:
            print(e.remaining_attempts)
    """

    def __init__(
        self,
        config: OTPConfig,
        notifiers: Mapping[Channel, Notifier],
        store: Optional[SessionStore] = None,
        ledger: Optional[ThrottleLedger] = None,
        hasher: Optional[CredentialHasher] = None,
        clock: Optional[Clock] = None,
        generator: Optional[OTPGenerator] = None,
    ):
        config.validate()
        if not notifiers:
            raise ConfigurationError("At least one notifier must be configured")

        self.config = config
        self.notifiers: Dict[Channel, Notifier] = dict(notifiers)
        self.clock = clock if clock is not None else SystemClock()
        self.store = store if store is not None else InMemorySessionStore()
        self.ledger = ledger if ledger is not None else ThrottleLedger(
            window_seconds=config.request_throttle_window_seconds,
            max_requests=config.request_throttle_max,
            clock=self.clock,
        )
        self.hasher = hasher if hasher is not None else get_hasher(config)
        self.generator = generator if generator is not None else OTPGenerator(config.otp_length)

        self.expiry_window = timedelta(minutes=config.otp_expiry_minutes)
        self.resend_cooldown = timedelta(seconds=config.resend_cooldown_seconds)

        # Requests holding a throttle slot whose session may not be stored yet
        self._inflight: Counter = Counter()

    def describe(self) -> OTPCapabilities:
        """What this deployment can issue, safe to expose publicly."""
        return OTPCapabilities(
            channels=sorted(self.notifiers, key=lambda c: c.value),
            otp_length=self.config.otp_length,
            expiry_minutes=self.config.otp_expiry_minutes,
            max_attempts=self.config.max_attempts,
            resend_cooldown_seconds=self.config.resend_cooldown_seconds,
        )

    # ------------------------------------------------------------------
    # Request
    # ------------------------------------------------------------------

    @_internal_faults("request")
    async def request(self, identifier: str, channel: Union[Channel, str]) -> OTPRequestResult:
        """
        Issue a new code to ``identifier`` over ``channel``.

        A session is only left behind when delivery succeeded; any failure
        or cancellation removes it and gives back the throttle slot.

        Raises:
            ChannelUnavailable, RateLimited, DeliveryFailed, OTPInternalError
        """
        try:
            channel = Channel(channel)
        except ValueError:
            raise ChannelUnavailable(str(channel))

        notifier = self.notifiers.get(channel)
        if notifier is None:
            record_request(channel.value, "channel_unavailable")
            raise ChannelUnavailable(channel.value)

        identifier = normalize_identifier(identifier, channel, self.config.default_country_code)

        self._inflight[identifier] += 1
        try:
            return await self._issue(notifier, channel, identifier)
        finally:
            self._inflight[identifier] -= 1
            if not self._inflight[identifier]:
                del self._inflight[identifier]

    async def _issue(self, notifier: Notifier, channel: Channel, identifier: str) -> OTPRequestResult:
        masked = mask_identifier(identifier)

        decision = await self.ledger.acquire(identifier)
        if not decision.allowed:
            logger.warning(
                "OTP request throttled",
                identifier=masked,
                channel=channel.value,
                retry_after=decision.retry_after,
            )
            record_request(channel.value, "rate_limited")
            raise RateLimited(decision.retry_after)

        session: Optional[OTPSession] = None
        try:
            code = self.generator.generate()
            credential_hash = await self.hasher.hash(code)

            now = self.clock.now()
            candidate = OTPSession(
                session_id=self.generator.new_session_id(),
                identifier=identifier,
                channel=channel,
                credential_hash=credential_hash,
                created_at=now,
                expires_at=now + self.expiry_window,
                max_attempts=self.config.max_attempts,
            )
            await self.store.put(candidate)
            session = candidate

            await self._deliver(notifier, session, code)
        except OTPError:
            await self._rollback_request(identifier, session)
            record_request(channel.value, "delivery_failed")
            raise
        except asyncio.CancelledError:
            await self._rollback_request(identifier, session)
            logger.warning("OTP request cancelled", identifier=masked, channel=channel.value)
            raise
        except Exception as e:
            await self._rollback_request(identifier, session)
            logger.exception("OTP request failed unexpectedly", identifier=masked)
            record_request(channel.value, "internal_error")
            raise OTPInternalError() from e

        logger.info(
            "OTP session created",
            session_id=session.session_id,
            identifier=masked,
            channel=channel.value,
            expires_at=session.expires_at.isoformat(),
        )
        record_request(channel.value, "sent")

        return OTPRequestResult(
            session_id=session.session_id,
            expires_at=session.expires_at,
            resend_allowed_at=session.created_at + self.resend_cooldown,
        )

    async def _rollback_request(self, identifier: str, session: Optional[OTPSession]) -> None:
        if session is not None:
            await self.store.delete(session.session_id)
        await self.ledger.release(identifier)
        logger.info(
            "OTP request rolled back",
            session_id=session.session_id if session else None,
            identifier=mask_identifier(identifier),
        )

    async def _deliver(
        self,
        notifier: Notifier,
        session: OTPSession,
        code: str,
        resent: bool = False,
    ) -> None:
        """Send a code under the configured timeout. Any failure is DeliveryFailed."""
        try:
            await asyncio.wait_for(
                notifier.send(
                    session.channel,
                    session.identifier,
                    code,
                    self.config.otp_expiry_minutes,
                    resent=resent,
                ),
                timeout=self.config.notify_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.error(
                "OTP delivery timed out",
                session_id=session.session_id,
                channel=session.channel.value,
                timeout=self.config.notify_timeout_seconds,
            )
            raise DeliveryFailed() from e
        except Exception as e:
            logger.error(
                "OTP delivery failed",
                session_id=session.session_id,
                channel=session.channel.value,
                error=type(e).__name__,
            )
            raise DeliveryFailed() from e

    # ------------------------------------------------------------------
    # Verify
    # ------------------------------------------------------------------

    @_internal_faults("verify")
    async def verify(self, session_id: str, identifier: str, code: str) -> OTPVerifyResult:
        """
        Check a candidate code for a session.

        Raises:
            SessionNotFound, Expired, AttemptsExhausted, IdentifierMismatch,
            InvalidCode, OTPInternalError
        """
        try:
            session = await self.store.get(session_id)
        except SessionNotFound:
            record_verification("session_not_found")
            raise

        now = self.clock.now()
        if session.is_expired(now):
            await self._discard(session, _Outcome.EXPIRED)
            record_verification(_Outcome.EXPIRED.value)
            raise Expired()

        if session.is_exhausted:
            await self._discard(session, _Outcome.EXHAUSTED)
            record_verification(_Outcome.EXHAUSTED.value)
            raise AttemptsExhausted()

        candidate = normalize_identifier(identifier, session.channel, self.config.default_country_code)
        if candidate != session.identifier:
            logger.warning("OTP identifier mismatch", session_id=session_id)
            record_verification("identifier_mismatch")
            raise IdentifierMismatch()

        while True:
            matched = await self.hasher.verify(code, session.credential_hash)
            try:
                outcome, updated = await self._record_attempt(session, matched)
            except _Superseded as e:
                session = e.session
                continue
            break

        record_verification(outcome.value)

        if outcome == _Outcome.VERIFIED:
            await self.ledger.reset(session.identifier)
            verified_at = self.clock.now()
            logger.info(
                "OTP verified successfully",
                session_id=session_id,
                channel=session.channel.value,
            )
            return OTPVerifyResult(
                channel=session.channel,
                identifier=session.identifier,
                verified_at=verified_at,
            )

        if outcome == _Outcome.EXPIRED:
            logger.info("OTP expired", session_id=session_id)
            raise Expired()

        if outcome == _Outcome.EXHAUSTED:
            logger.warning("OTP attempts exhausted", session_id=session_id)
            raise AttemptsExhausted()

        logger.warning(
            "Invalid OTP attempt",
            session_id=session_id,
            attempt=updated.attempt_count,
            remaining=updated.remaining_attempts,
        )
        raise InvalidCode(updated.remaining_attempts)

    async def _record_attempt(self, snapshot: OTPSession, matched: bool):
        """
        Count one verification attempt and apply its transition atomically.

        ``matched`` was computed against ``snapshot``'s hash; if the stored
        hash changed in the meantime the attempt is not counted and
        ``_Superseded`` carries the new record.
        """
        outcome = None

        def apply(current: OTPSession) -> Optional[OTPSession]:
            nonlocal outcome
            if current.credential_hash != snapshot.credential_hash:
                raise _Superseded(current)

            if current.is_expired(self.clock.now()):
                outcome = _Outcome.EXPIRED
                return None
            if current.is_exhausted:
                outcome = _Outcome.EXHAUSTED
                return None

            attempted = replace(current, attempt_count=current.attempt_count + 1)
            if matched:
                outcome = _Outcome.VERIFIED
                return None
            if attempted.is_exhausted:
                outcome = _Outcome.EXHAUSTED
                return None
            outcome = _Outcome.INVALID
            return attempted

        updated = await self.store.update(snapshot.session_id, apply)
        return outcome, updated

    async def _discard(self, session: OTPSession, reason: _Outcome) -> None:
        """Delete a dead session unless a concurrent resend revived it."""
        now = self.clock.now()

        def apply(current: OTPSession) -> Optional[OTPSession]:
            if current.is_expired(now) or current.is_exhausted:
                return None
            return current

        try:
            await self.store.update(session.session_id, apply)
        except SessionNotFound:
            return
        logger.info("OTP session discarded", session_id=session.session_id, reason=reason.value)

    # ------------------------------------------------------------------
    # Resend
    # ------------------------------------------------------------------

    @_internal_faults("resend")
    async def resend(self, session_id: str) -> OTPResendResult:
        """
        Replace a session's code and deliver the new one.

        The previous code stops working as soon as the new record is
        stored; a failed delivery does not restore it.

        Raises:
            SessionNotFound, Expired, TooSoon, ChannelUnavailable,
            DeliveryFailed, OTPInternalError
        """
        try:
            session = await self.store.get(session_id)
        except SessionNotFound:
            record_resend("session_not_found")
            raise

        now = self.clock.now()
        if session.is_expired(now):
            await self._discard(session, _Outcome.EXPIRED)
            record_resend(_Outcome.EXPIRED.value)
            raise Expired()

        try:
            self._check_cooldown(session, now)
        except TooSoon:
            record_resend(_Outcome.TOO_SOON.value)
            raise

        notifier = self.notifiers.get(session.channel)
        if notifier is None:
            record_resend("channel_unavailable")
            raise ChannelUnavailable(session.channel.value)

        code = self.generator.generate()
        credential_hash = await self.hasher.hash(code)

        expired = False

        def reissue(current: OTPSession) -> Optional[OTPSession]:
            nonlocal expired
            issued_at = self.clock.now()
            if current.is_expired(issued_at):
                expired = True
                return None
            self._check_cooldown(current, issued_at)
            return replace(
                current,
                credential_hash=credential_hash,
                created_at=issued_at,
                expires_at=issued_at + self.expiry_window,
                attempt_count=0,
                resend_count=current.resend_count + 1,
            )

        try:
            reissued = await self.store.update(session_id, reissue)
        except (SessionNotFound, TooSoon) as e:
            record_resend(_Outcome.TOO_SOON.value if isinstance(e, TooSoon) else "session_not_found")
            raise

        if expired:
            record_resend(_Outcome.EXPIRED.value)
            raise Expired()

        logger.info(
            "OTP code reissued",
            session_id=session_id,
            channel=reissued.channel.value,
            resend_count=reissued.resend_count,
        )

        try:
            await self._deliver(notifier, reissued, code, resent=True)
        except DeliveryFailed:
            record_resend("delivery_failed")
            raise

        record_resend(_Outcome.REISSUED.value)
        return OTPResendResult(
            expires_at=reissued.expires_at,
            resend_allowed_at=reissued.created_at + self.resend_cooldown,
        )

    def _check_cooldown(self, session: OTPSession, now) -> None:
        elapsed = now - session.created_at
        if elapsed < self.resend_cooldown:
            raise TooSoon((self.resend_cooldown - elapsed).total_seconds())

    # ------------------------------------------------------------------
    # Expiry
    # ------------------------------------------------------------------

    async def sweep_expired(self) -> int:
        """
        Remove expired sessions and the throttle state they leave behind.

        Returns:
            Number of sessions removed
        """
        now = self.clock.now()
        swept = await self.store.sweep_expired(now)

        for identifier in {session.identifier for session in swept}:
            if await self.store.has_identifier(identifier, now):
                continue
            # No await between this check and reset(); a request starting
            # later queues its acquire() behind the reset.
            if self._inflight[identifier]:
                continue
            await self.ledger.reset(identifier)

        await self.ledger.prune(now)
        record_swept(len(swept))

        if swept:
            logger.info("Expired OTP sessions swept", count=len(swept))
        return len(swept)
