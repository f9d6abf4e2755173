"""Boundary Protocols — structural contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Core functions accept any object satisfying these Protocols (ORM rows,
      dataclasses, test doubles)

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Read-only attributes only: core never mutates what it is given
"""

from datetime import datetime
from typing import Protocol

from app.core.domain_types import TrackId, UserId


class BoostedTrack(Protocol):
    """What weighted selection needs to know about a candidate."""
    boost_pool: int
    total_listens: int
    boost_expires: datetime | None


class CatalogTrack(BoostedTrack, Protocol):
    """What the eligibility filter needs to know about a track."""
    id: TrackId
    artist_id: UserId
    is_active: bool
    genres: list | None
    motifs: list | None


class ListenerProfile(Protocol):
    """Listener preferences consulted by the eligibility filter."""
    id: UserId
    detested_genres: list | None
    detested_motifs: list | None
