"""Boost Service — spends credits and attaches a time-boxed boost to a track.

Invariants:
    - Balance deduction, track boost fields, Boost row and archive entry commit
      in ONE transaction or not at all
    - Credits are checked against the locked user row, never a cached copy
    - Only the track's artist may boost it
    - Boost rows are append-only

Design Decisions:
    - Pricing, split and expiry are pure core functions; this class only loads,
      locks, applies and commits (ADR: impureim sandwich)
    - Per-user aggregate_lock plus FOR UPDATE: two boosts by the same user
      cannot both pass the balance check
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core.clock import utc_now
from app.core.credit_ledger import (
    BoostPlan, CreditSplit, compute_boost_expiry, split_boost_cost,
)
from app.core.discovery_selection import effective_boost_pool
from app.core.domain_types import (
    ArchiveAction, CreditPreference, TrackId, UserId,
)
from app.core.errors import ErrorContext, TrackOwnershipError
from app.models.boost import Boost
from app.models.track import Track
from app.services.aggregate_loaders import load_track, load_user, record_archive
from app.services.transactions import aggregate_lock, run_with_conflict_retry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoostOutcome:
    """What a successful boost changed."""
    boost: Boost
    split: CreditSplit
    premium_credits: int
    standard_credits: int
    boost_pool: int


class BoostService:
    """Applies boosts and maintains boost pools."""

    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()

    async def apply_boost(
        self,
        track_id: TrackId,
        user_id: UserId,
        plan: BoostPlan,
        preference: CreditPreference = CreditPreference.PREMIUM_FIRST,
    ) -> BoostOutcome:
        """Deduct plan cost and boost the track, atomically."""
        context = ErrorContext(user_id=str(user_id), track_id=str(track_id))
        async with aggregate_lock("user", user_id):
            outcome = await run_with_conflict_retry(
                self.db,
                lambda: self._apply_boost_once(
                    track_id, user_id, plan, preference, context,
                ),
                operation="apply_boost",
                retries=self.settings.conflict_retry_attempts,
                context=context,
            )
        logger.info(
            f"Boost {plan.plan_id} applied: {plan.credits_required} credits "
            f"(premium {outcome.split.premium_used}, "
            f"standard {outcome.split.standard_used})",
            extra={"user_id": user_id, "track_id": track_id},
        )
        return outcome

    async def _apply_boost_once(
        self,
        track_id: TrackId,
        user_id: UserId,
        plan: BoostPlan,
        preference: CreditPreference,
        context: ErrorContext,
    ) -> BoostOutcome:
        user = await load_user(self.db, user_id, for_update=True)
        track = await load_track(self.db, track_id, for_update=True)
        if track.artist_id != user.id:
            raise TrackOwnershipError(str(track_id), context)

        split = split_boost_cost(
            user.premium_credits, user.standard_credits,
            plan.credits_required, preference, context,
        )

        now = utc_now()
        starting_pool = effective_boost_pool(
            track, now, self.settings.boost_pool_decay,
        )
        expires_at = compute_boost_expiry(
            track.boost_expires, now, plan.duration_hours,
            self.settings.boost_stacking,
        )

        user.premium_credits -= split.premium_used
        user.standard_credits -= split.standard_used
        track.boost_pool = starting_pool + plan.credits_required
        track.boost_expires = expires_at

        boost = Boost(
            track_id=track.id,
            artist_id=user.id,
            plan_id=plan.plan_id,
            credits_spent=plan.credits_required,
            premium_credits_spent=split.premium_used,
            standard_credits_spent=split.standard_used,
            boost_duration_hours=plan.duration_hours,
            boost_multiplier=plan.multiplier,
            expires_at=expires_at,
            created_at=now,
        )
        self.db.add(boost)
        record_archive(
            self.db, user.id, ArchiveAction.BOOST_APPLIED, track.id, "boost",
            {
                "track_title": track.title,
                "plan_id": plan.plan_id,
                "credits_spent": plan.credits_required,
                "duration_hours": plan.duration_hours,
                "multiplier": plan.multiplier,
            },
        )
        await self.db.commit()

        return BoostOutcome(
            boost=boost,
            split=split,
            premium_credits=user.premium_credits,
            standard_credits=user.standard_credits,
            boost_pool=track.boost_pool,
        )

    async def list_boosts(self, track_id: TrackId) -> list[Boost]:
        await load_track(self.db, track_id)
        result = await self.db.execute(
            select(Boost)
            .where(Boost.track_id == track_id)
            .order_by(Boost.created_at.desc()),
        )
        return list(result.scalars().all())

    async def expire_stale_boosts(self) -> int:
        """Zero the pools of expired boosts. No-op unless pool decay is on."""
        if not self.settings.boost_pool_decay:
            return 0
        now = utc_now()
        result = await self.db.execute(
            update(Track)
            .where(Track.boost_pool > 0)
            .where(Track.boost_expires.is_not(None))
            .where(Track.boost_expires <= now)
            .values(boost_pool=0)
            .execution_options(synchronize_session=False),
        )
        await self.db.commit()
        expired = result.rowcount or 0
        if expired:
            logger.info(f"Expired boost pools on {expired} track(s)")
        return expired
