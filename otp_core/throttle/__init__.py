"""
Issuance Throttling
===================
Per-identifier limits on how often OTPs may be issued.
"""

from .models import ThrottleEntry, ThrottleDecision
from .ledger import ThrottleLedger

__all__ = [
    "ThrottleEntry",
    "ThrottleDecision",
    "ThrottleLedger",
]
