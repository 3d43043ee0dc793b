"""
Shared fixtures for otp-core tests.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from otp_core.config import OTPConfig
from otp_core.manager import OTPManager
from otp_core.notifiers.base import DeliveryError, Notifier
from otp_core.otp.hashing import Argon2CredentialHasher
from otp_core.otp.models import Channel
from otp_core.store import InMemorySessionStore
from otp_core.throttle import ThrottleLedger


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = None):
        self.current = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float = 0, minutes: float = 0) -> None:
        self.current += timedelta(seconds=seconds, minutes=minutes)


@dataclass
class SentCode:
    channel: Channel
    identifier: str
    code: str
    expiry_minutes: int
    resent: bool


class RecordingNotifier(Notifier):
    """Keeps delivered codes in memory; can be told to fail or stall."""

    name = "recording"

    def __init__(self, channel: Channel, fail: bool = False, delay: float = 0.0):
        self.channel = channel
        self.fail = fail
        self.delay = delay
        self.started = asyncio.Event()
        self.sent: List[SentCode] = []

    async def send(self, channel, identifier, code, expiry_minutes, resent=False):
        self.started.set()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise DeliveryError("transport down", provider=self.name)
        self.sent.append(SentCode(channel, identifier, code, expiry_minutes, resent))

    @property
    def last_code(self) -> str:
        return self.sent[-1].code


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def config():
    return OTPConfig(
        otp_length=6,
        otp_expiry_minutes=5,
        max_attempts=3,
        resend_cooldown_seconds=60,
        request_throttle_window_seconds=300,
        request_throttle_max=3,
        hash_work_factor=1,
        hash_memory_cost=1024,
        hash_parallelism=1,
        notify_timeout_seconds=1.0,
        default_country_code="1",
    )


@pytest.fixture
def hasher():
    return Argon2CredentialHasher(time_cost=1, memory_cost=1024, parallelism=1)


@pytest.fixture
def email_notifier():
    return RecordingNotifier(Channel.EMAIL)


@pytest.fixture
def sms_notifier():
    return RecordingNotifier(Channel.SMS)


@pytest.fixture
def store():
    return InMemorySessionStore()


@pytest.fixture
def ledger(config, clock):
    return ThrottleLedger(
        window_seconds=config.request_throttle_window_seconds,
        max_requests=config.request_throttle_max,
        clock=clock,
    )


@pytest.fixture
def manager(config, clock, hasher, store, ledger, email_notifier, sms_notifier):
    return OTPManager(
        config,
        {Channel.EMAIL: email_notifier, Channel.SMS: sms_notifier},
        store=store,
        ledger=ledger,
        hasher=hasher,
        clock=clock,
    )
