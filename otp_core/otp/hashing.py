"""
OTP Credential Hashing
======================
Slow, salted one-way hashing for OTP codes at rest.

Argon2id is the default; bcrypt is available for deployments with
existing bcrypt hashes. Both run in the default thread pool executor
and compare in constant time.
"""

import asyncio
from abc import ABC, abstractmethod
from functools import partial

import bcrypt
from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from .exceptions import ConfigurationError

ARGON2_PREFIX = "$argon2"
BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


class CredentialHasher(ABC):
    """Hashes plaintext codes and checks candidates against stored hashes."""

    name: str = "base"

    @abstractmethod
    def hash_sync(self, plaintext: str) -> str:
        ...

    @abstractmethod
    def verify_sync(self, plaintext: str, hashed: str) -> bool:
        ...

    async def hash(self, plaintext: str) -> str:
        """Hash a plaintext code off the event loop."""
        if not plaintext:
            raise ValueError("Plaintext cannot be empty")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.hash_sync, plaintext)

    async def verify(self, plaintext: str, hashed: str) -> bool:
        """Check a candidate code against a stored hash off the event loop."""
        if not plaintext or not hashed:
            return False
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(self.verify_sync, plaintext, hashed))


class Argon2CredentialHasher(CredentialHasher):
    """
    Argon2id hasher.

    ``time_cost`` is the configurable work factor. The hash string
    carries its own salt and parameters.
    """

    name = "argon2id"

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
        hash_len: int = 32,
        salt_len: int = 16,
    ):
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=hash_len,
            salt_len=salt_len,
            type=Type.ID,
        )

    def hash_sync(self, plaintext: str) -> str:
        return self._hasher.hash(plaintext)

    def verify_sync(self, plaintext: str, hashed: str) -> bool:
        if not hashed.startswith(ARGON2_PREFIX):
            return False
        try:
            return self._hasher.verify(hashed, plaintext)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            return False


class BcryptCredentialHasher(CredentialHasher):
    """bcrypt hasher; ``rounds`` is the log2 work factor."""

    name = "bcrypt"

    def __init__(self, rounds: int = 12):
        if not 4 <= rounds <= 31:
            raise ConfigurationError("bcrypt rounds must be between 4 and 31")
        self.rounds = rounds

    def hash_sync(self, plaintext: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")

    def verify_sync(self, plaintext: str, hashed: str) -> bool:
        if not hashed.startswith(BCRYPT_PREFIXES):
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            return False


def get_hasher(config) -> CredentialHasher:
    """
    Build the hasher selected by ``config.hash_algorithm``.

    Args:
        config: OTPConfig

    Raises:
        ConfigurationError: For an unknown algorithm name
    """
    algorithm = config.hash_algorithm.lower()
    if algorithm == Argon2CredentialHasher.name:
        return Argon2CredentialHasher(
            time_cost=config.hash_work_factor,
            memory_cost=config.hash_memory_cost,
            parallelism=config.hash_parallelism,
        )
    if algorithm == BcryptCredentialHasher.name:
        return BcryptCredentialHasher(rounds=config.hash_work_factor)
    raise ConfigurationError(f"Unknown hash algorithm: {config.hash_algorithm}")
