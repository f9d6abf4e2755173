"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId and TrackId wrap UUIDs: services and core take these, not bare UUID
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to String columns without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
TrackId = NewType("TrackId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class CreditPreference(str, Enum):
    """Which credit pool a boost draws from first."""
    PREMIUM_FIRST = "premium_first"
    STANDARD_FIRST = "standard_first"


class BoostStacking(str, Enum):
    """How a new boost treats an expiry that is still in the future."""
    EXTEND = "extend"      # max(existing, now) + duration
    REPLACE = "replace"    # now + duration


class ArchiveAction(str, Enum):
    """Archive log action types read or written by this service."""
    FEEDBACK_GIVEN = "feedback_given"
    BOOST_APPLIED = "boost_applied"
    VOTE_CAST = "vote_cast"


DEFAULT_VOTE_TYPE = "leaderboard"
