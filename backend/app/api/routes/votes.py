"""Vote Routes — cast vote, list votes, leaderboard, wallet.

Invariants:
    - POST /votes is create-or-correct: same (track, voter) overwrites
    - Over-allowance → 400 INSUFFICIENT_VOTES with nothing written
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_current_user_id, get_vote_service
from app.core.domain_types import TrackId, UserId
from app.schemas.track import TrackResponse
from app.schemas.vote import (
    VoteRecordResponse, VoteRequest, VoteResponse, WalletResponse,
)
from app.services.vote_service import VoteService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["votes"])


@router.post("/votes", response_model=VoteResponse)
async def cast_vote(
    body: VoteRequest,
    user_id: UserId = Depends(get_current_user_id),
    service: VoteService = Depends(get_vote_service),
):
    outcome = await service.cast_vote(
        TrackId(body.track_id), user_id, body.vote_count, body.vote_type,
    )
    return VoteResponse(
        vote=VoteRecordResponse.model_validate(outcome.vote),
        previous_count=outcome.allocation.previous_count,
        total_votes_delta=outcome.allocation.total_votes_delta,
        votes_remaining=outcome.votes_remaining,
        track_total_votes=outcome.track_total_votes,
    )


@router.get("/votes", response_model=list[VoteRecordResponse])
async def list_votes(
    track_id: UUID | None = Query(None),
    voter_id: UUID | None = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: VoteService = Depends(get_vote_service),
):
    votes = await service.list_votes(
        TrackId(track_id) if track_id else None,
        UserId(voter_id) if voter_id else None,
        limit, offset,
    )
    return [VoteRecordResponse.model_validate(v) for v in votes]


@router.get("/votes/leaderboard", response_model=list[TrackResponse])
async def leaderboard(
    limit: int = Query(50, ge=1, le=200),
    service: VoteService = Depends(get_vote_service),
):
    tracks = await service.leaderboard(limit)
    return [TrackResponse.model_validate(t) for t in tracks]


@router.get("/wallet", response_model=WalletResponse)
async def wallet(
    user_id: UserId = Depends(get_current_user_id),
    service: VoteService = Depends(get_vote_service),
):
    """Credit balances and this month's remaining votes."""
    user, allowance = await service.wallet(user_id)
    return WalletResponse(
        user_id=user.id,
        standard_credits=user.standard_credits,
        premium_credits=user.premium_credits,
        monthly_votes_remaining=allowance.remaining,
        votes_reset_date=allowance.reset_date,
    )
