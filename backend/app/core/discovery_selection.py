"""Weighted Discovery Selection — pure choice of the next track to present.

Invariants:
    - weight = 1 + boost_pool / max(total_listens, 1); never below 1 (fairness floor)
    - select_weighted_track is PURE: no IO, no mutation, randomness injectable
    - Empty candidate list returns None — exhaustion is a signal, not an error
    - Float rounding can never skip the tail: the walk falls back to the last candidate

Design Decisions:
    - Roulette-wheel walk over bisect on cumulative sums: candidate pools are
      small (one listener's unseen tracks) and the walk needs no extra list
    - Boost pool decay is a flag passed in by the caller, not baked into the weight
    - `now` is always supplied by the caller: core never reads the clock
    - Eligibility filter lives here (not in SQL): genre/motif lists are JSON
      columns and the filter must be unit-testable without a database
"""

import random
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import TypeVar

from app.core.credit_ledger import is_boost_active
from app.core.domain_types import TrackId
from app.core.repository_protocols import (
    BoostedTrack, CatalogTrack, ListenerProfile,
)

T = TypeVar("T")


def effective_boost_pool(
    track: BoostedTrack,
    now: datetime,
    decay_expired: bool = False,
) -> int:
    """Credits currently counting toward the track's weight."""
    pool = max(track.boost_pool or 0, 0)
    if not decay_expired or pool == 0:
        return pool
    return pool if is_boost_active(track.boost_expires, now) else 0


def track_weight(
    track: BoostedTrack,
    now: datetime,
    decay_expired: bool = False,
) -> float:
    """Selection weight: 1 + boost_pool / max(total_listens, 1)."""
    listens = max(track.total_listens or 0, 1)
    return 1.0 + effective_boost_pool(track, now, decay_expired) / listens


def select_weighted_track(
    candidates: Sequence[T],
    weight_of: Callable[[T], float],
    rng: random.Random | None = None,
) -> T | None:
    """Pick one candidate with probability proportional to its weight."""
    if not candidates:
        return None

    weights = [weight_of(c) for c in candidates]
    draw = (rng or random).random() * sum(weights)

    running = 0.0
    for candidate, weight in zip(candidates, weights):
        running += weight
        if running > draw:
            return candidate
    return candidates[-1]


def is_track_eligible(
    track: CatalogTrack,
    listener: ListenerProfile,
    excluded_ids: set[TrackId],
) -> bool:
    """Active, not the listener's own, unseen, and free of detested tags."""
    if not track.is_active:
        return False
    if track.artist_id == listener.id:
        return False
    if track.id in excluded_ids:
        return False
    if set(listener.detested_genres or ()) & set(track.genres or ()):
        return False
    if set(listener.detested_motifs or ()) & set(track.motifs or ()):
        return False
    return True


def filter_eligible_tracks(
    tracks: Iterable[CatalogTrack],
    listener: ListenerProfile,
    excluded_ids: Iterable[TrackId] = (),
) -> list:
    """Keep only tracks the listener may be offered next. Order preserved."""
    excluded = set(excluded_ids)
    return [t for t in tracks if is_track_eligible(t, listener, excluded)]
