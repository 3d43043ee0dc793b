"""
Session Storage
===============
Store interface and the in-memory backend.
"""

from .base import Mutator, SessionStore
from .in_memory import InMemorySessionStore

__all__ = [
    "Mutator",
    "SessionStore",
    "InMemorySessionStore",
]
