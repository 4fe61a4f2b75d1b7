"""
Professional matching and offer dispatch service.

This module handles:
    - Selecting the nearest unoffered professional for a request
    - Dispatching offers to professionals (daisy-chain pattern)
    - Expiring overdue offers and moving to the next professional
"""

from .exceptions import MatchingConflictError
from .offer_builder import offered_professional_ids, select_next_candidate
from .offer_dispatch import (
    ALREADY_RESOLVED,
    NO_MORE_CANDIDATES,
    OFFERED,
    AdvanceResult,
    advance,
)
from .offer_expiry import SweepResult, sweep_expired

__all__ = [
    "offered_professional_ids",
    "select_next_candidate",
    "advance",
    "AdvanceResult",
    "OFFERED",
    "NO_MORE_CANDIDATES",
    "ALREADY_RESOLVED",
    "sweep_expired",
    "SweepResult",
    "MatchingConflictError",
]
