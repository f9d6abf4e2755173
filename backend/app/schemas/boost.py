"""Boost Schemas — plan catalog, boost request and receipt."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.domain_types import CreditPreference


class BoostPlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    plan_id: str
    label: str
    credits_required: int
    duration_hours: int
    multiplier: float


class BoostRequest(BaseModel):
    """Boost purchase — plan id and which credit pool to drain first."""
    plan_id: str = Field(min_length=1, max_length=50)
    credit_preference: CreditPreference = CreditPreference.PREMIUM_FIRST


class BoostRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    track_id: UUID
    artist_id: UUID
    plan_id: str
    credits_spent: int
    premium_credits_spent: int
    standard_credits_spent: int
    boost_duration_hours: int
    boost_multiplier: float
    expires_at: datetime
    created_at: datetime


class BoostResponse(BaseModel):
    """Receipt: the boost record plus post-boost balances."""
    boost: BoostRecordResponse
    premium_credits: int
    standard_credits: int
    boost_pool: int


class ExpireBoostsResponse(BaseModel):
    expired: int
