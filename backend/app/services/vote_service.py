"""Vote Service — casts and corrects a voter's allocation to a track.

Invariants:
    - Exactly one Vote row per (track, voter): unique constraint + locked read
    - total_votes delta, vote row and voter allowance commit together
    - Rejected requests (InsufficientVotes, NotFound) write nothing
    - Monthly allowance reset applied inside the same transaction as the vote
    - Lowering a vote refunds only what was spent from the current allowance

Design Decisions:
    - Voter row locked first (FOR UPDATE) and per-voter aggregate_lock held:
      two concurrent requests from one voter serialize, so the second sees the
      first's vote and applies only its own delta
    - total_votes updated by SQL expression: votes from DIFFERENT voters on
      the same track never contend on a read-modify-write
    - A racing insert that still slips through (unique violation) is retried
      once, and the retry takes the update path
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core.clock import utc_now
from app.core.domain_types import (
    ArchiveAction, DEFAULT_VOTE_TYPE, TrackId, UserId,
)
from app.core.errors import ErrorContext
from app.core.vote_accounting import (
    AllowanceState, VoteAllocation, apply_monthly_reset, plan_vote_allocation,
    spent_in_current_period,
)
from app.models.track import Track
from app.models.user import User
from app.models.vote import Vote
from app.services.aggregate_loaders import load_track, load_user, record_archive
from app.services.transactions import aggregate_lock, run_with_conflict_retry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoteOutcome:
    """What a successful vote changed."""
    vote: Vote
    allocation: VoteAllocation
    votes_remaining: int
    track_total_votes: int


class VoteService:
    """Vote casting, listing and leaderboard reads."""

    def __init__(self, db: AsyncSession, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()

    async def cast_vote(
        self,
        track_id: TrackId,
        voter_id: UserId,
        vote_count: int,
        vote_type: str = DEFAULT_VOTE_TYPE,
    ) -> VoteOutcome:
        """Create or overwrite the voter's allocation on a track."""
        context = ErrorContext(user_id=str(voter_id), track_id=str(track_id))
        async with aggregate_lock("user", voter_id):
            outcome = await run_with_conflict_retry(
                self.db,
                lambda: self._cast_vote_once(
                    track_id, voter_id, vote_count, vote_type, context,
                ),
                operation="cast_vote",
                retries=self.settings.conflict_retry_attempts,
                context=context,
            )
        logger.info(
            f"Vote cast: {vote_count} (delta {outcome.allocation.total_votes_delta:+d}), "
            f"{outcome.votes_remaining} remaining",
            extra={"user_id": voter_id, "track_id": track_id},
        )
        return outcome

    async def _cast_vote_once(
        self,
        track_id: TrackId,
        voter_id: UserId,
        vote_count: int,
        vote_type: str,
        context: ErrorContext,
    ) -> VoteOutcome:
        voter = await load_user(self.db, voter_id, for_update=True)
        track = await load_track(self.db, track_id)

        now = utc_now()
        allowance = self._refresh_allowance(voter, now)

        existing = (await self.db.execute(
            select(Vote)
            .where(Vote.track_id == track_id, Vote.voter_id == voter_id)
            .with_for_update()
            .execution_options(populate_existing=True),
        )).scalar_one_or_none()

        previous_in_period = existing is not None and spent_in_current_period(
            existing.updated_at, now, allowance,
        )
        allocation = plan_vote_allocation(
            vote_count,
            existing.vote_count if existing else None,
            allowance.remaining,
            context,
            previous_in_period=previous_in_period,
        )

        if existing is None:
            vote = Vote(
                track_id=track_id,
                voter_id=voter_id,
                vote_count=allocation.new_count,
                vote_type=vote_type,
                voted_at=now,
                updated_at=now,
            )
            self.db.add(vote)
            await self.db.flush()
        else:
            vote = existing
            vote.vote_count = allocation.new_count
            vote.vote_type = vote_type
            vote.updated_at = now

        if allocation.total_votes_delta:
            await self.db.execute(
                update(Track)
                .where(Track.id == track_id)
                .values(total_votes=Track.total_votes + allocation.total_votes_delta)
                .execution_options(synchronize_session=False),
            )
        voter.monthly_votes_remaining = allowance.remaining - allocation.votes_consumed

        record_archive(
            self.db, voter.id, ArchiveAction.VOTE_CAST, track_id, "track",
            {
                "track_title": track.title,
                "votes_allocated": allocation.new_count,
                "previous_votes": allocation.previous_count,
                "vote_type": vote_type,
            },
        )
        total_votes = (await self.db.execute(
            select(Track.total_votes).where(Track.id == track_id),
        )).scalar_one()
        await self.db.commit()

        return VoteOutcome(
            vote=vote,
            allocation=allocation,
            votes_remaining=voter.monthly_votes_remaining,
            track_total_votes=total_votes,
        )

    def _refresh_allowance(self, voter: User, now) -> AllowanceState:
        """Apply a due monthly reset to the (locked) voter row."""
        allowance = apply_monthly_reset(
            voter.monthly_votes_remaining,
            voter.votes_reset_date,
            now,
            self.settings.monthly_vote_allowance,
        )
        if allowance.was_reset:
            voter.monthly_votes_remaining = allowance.remaining
            voter.votes_reset_date = allowance.reset_date
        return allowance

    async def wallet(self, user_id: UserId) -> tuple[User, AllowanceState]:
        """Balances plus the allowance as it stands now. Read-only."""
        user = await load_user(self.db, user_id)
        allowance = apply_monthly_reset(
            user.monthly_votes_remaining,
            user.votes_reset_date,
            utc_now(),
            self.settings.monthly_vote_allowance,
        )
        return user, allowance

    async def list_votes(
        self,
        track_id: TrackId | None = None,
        voter_id: UserId | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Vote]:
        query = select(Vote).order_by(Vote.updated_at.desc())
        if track_id:
            query = query.where(Vote.track_id == track_id)
        if voter_id:
            query = query.where(Vote.voter_id == voter_id)
        result = await self.db.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all())

    async def leaderboard(self, limit: int = 50) -> list[Track]:
        result = await self.db.execute(
            select(Track)
            .where(Track.is_active.is_(True))
            .order_by(Track.total_votes.desc(), Track.created_at.asc())
            .limit(limit),
        )
        return list(result.scalars().all())
