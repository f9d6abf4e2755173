"""Boost Routes — plan catalog, apply boost, boost log, expiry sweep.

Invariants:
    - Unknown plan → 400 UNKNOWN_BOOST_PLAN; not owner → 403; short → 400
    - A successful boost returns 201 with the post-boost balances
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.deps import get_boost_service, get_current_user_id
from app.core.credit_ledger import BOOST_PLANS, get_boost_plan
from app.core.domain_types import TrackId, UserId
from app.schemas.boost import (
    BoostPlanResponse, BoostRecordResponse, BoostRequest, BoostResponse,
    ExpireBoostsResponse,
)
from app.services.boost_service import BoostService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["boosts"])


@router.get("/boosts/plans", response_model=list[BoostPlanResponse])
async def list_boost_plans():
    return [BoostPlanResponse.model_validate(p) for p in BOOST_PLANS.values()]


@router.post(
    "/tracks/{track_id}/boosts",
    response_model=BoostResponse,
    status_code=status.HTTP_201_CREATED,
)
async def apply_boost(
    track_id: UUID,
    body: BoostRequest,
    user_id: UserId = Depends(get_current_user_id),
    service: BoostService = Depends(get_boost_service),
):
    """Spend credits to boost one of the requester's tracks."""
    plan = get_boost_plan(body.plan_id)
    outcome = await service.apply_boost(
        TrackId(track_id), user_id, plan, body.credit_preference,
    )
    return BoostResponse(
        boost=BoostRecordResponse.model_validate(outcome.boost),
        premium_credits=outcome.premium_credits,
        standard_credits=outcome.standard_credits,
        boost_pool=outcome.boost_pool,
    )


@router.get(
    "/tracks/{track_id}/boosts", response_model=list[BoostRecordResponse],
)
async def list_track_boosts(
    track_id: UUID,
    service: BoostService = Depends(get_boost_service),
):
    boosts = await service.list_boosts(TrackId(track_id))
    return [BoostRecordResponse.model_validate(b) for b in boosts]


@router.post("/boosts/expire", response_model=ExpireBoostsResponse)
async def expire_stale_boosts(
    service: BoostService = Depends(get_boost_service),
):
    """Maintenance: zero expired boost pools (only when pool decay is enabled)."""
    return ExpireBoostsResponse(expired=await service.expire_stale_boosts())
