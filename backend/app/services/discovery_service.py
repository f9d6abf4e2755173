"""Discovery Service — eligible-track listing, weighted next-track pick, play counters.

Invariants:
    - Read path takes no locks: selection runs over a snapshot and tolerates staleness
    - Eligible = active, not own, not seen this session, not already reviewed,
      no detested genre/motif (core/discovery_selection.is_track_eligible)
    - next_track returns None when nothing is eligible (caller resets its seen set)
    - Listen/skip counters use atomic SQL increments

Design Decisions:
    - Selection relocated from the client into the service: one tested
      implementation regardless of pagination or caching in the UI
    - Rng injectable through the constructor for deterministic tests
"""

import logging
import random
from collections.abc import Iterable

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core.clock import utc_now
from app.core.discovery_selection import (
    filter_eligible_tracks, select_weighted_track, track_weight,
)
from app.core.domain_types import ArchiveAction, TrackId, UserId
from app.models.archive_log import ArchiveLog
from app.models.track import Track
from app.services.aggregate_loaders import load_track, load_user

logger = logging.getLogger(__name__)


class DiscoveryService:
    """Discovery reads and play counters."""

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.rng = rng

    async def get_eligible_tracks(
        self, user_id: UserId, seen_track_ids: Iterable[TrackId] = (),
    ) -> list[Track]:
        listener = await load_user(self.db, user_id)
        reviewed = await self._reviewed_track_ids(user_id)

        result = await self.db.execute(
            select(Track)
            .where(Track.is_active.is_(True))
            .where(Track.artist_id != user_id)
            .order_by(Track.created_at.asc()),
        )
        return filter_eligible_tracks(
            result.scalars().all(), listener, reviewed | set(seen_track_ids),
        )

    async def next_track(
        self, user_id: UserId, seen_track_ids: Iterable[TrackId] = (),
    ) -> Track | None:
        eligible = await self.get_eligible_tracks(user_id, seen_track_ids)
        now = utc_now()
        decay = self.settings.boost_pool_decay
        chosen = select_weighted_track(
            eligible,
            lambda t: track_weight(t, now, decay),
            self.rng,
        )
        if chosen is None:
            logger.info(
                "Discovery pool exhausted", extra={"user_id": user_id},
            )
        return chosen

    async def record_listen(self, track_id: TrackId) -> int:
        return await self._increment(track_id, "total_listens")

    async def record_skip(self, track_id: TrackId) -> int:
        return await self._increment(track_id, "total_skips")

    async def _increment(self, track_id: TrackId, column: str) -> int:
        await load_track(self.db, track_id)
        counter = getattr(Track, column)
        await self.db.execute(
            update(Track)
            .where(Track.id == track_id)
            .values({column: counter + 1})
            .execution_options(synchronize_session=False),
        )
        value = (await self.db.execute(
            select(counter).where(Track.id == track_id),
        )).scalar_one()
        await self.db.commit()
        return value

    async def _reviewed_track_ids(self, user_id: UserId) -> set[TrackId]:
        result = await self.db.execute(
            select(ArchiveLog.target_id)
            .where(ArchiveLog.user_id == user_id)
            .where(ArchiveLog.action_type == ArchiveAction.FEEDBACK_GIVEN.value)
            .where(ArchiveLog.target_id.is_not(None)),
        )
        return set(result.scalars().all())
