"""Vote Schemas — vote request, receipt, listing and wallet."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.domain_types import DEFAULT_VOTE_TYPE


class VoteRequest(BaseModel):
    """Vote allocation — count >= 1; re-voting the same track overwrites."""
    track_id: UUID
    vote_count: int = Field(ge=1)
    vote_type: str = Field(DEFAULT_VOTE_TYPE, max_length=50)

    @field_validator("vote_type")
    @classmethod
    def strip_vote_type(cls, v: str) -> str:
        v = v.strip()
        return v or DEFAULT_VOTE_TYPE


class VoteRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    track_id: UUID
    voter_id: UUID
    vote_count: int
    vote_type: str
    voted_at: datetime
    updated_at: datetime


class VoteResponse(BaseModel):
    vote: VoteRecordResponse
    previous_count: int | None
    total_votes_delta: int
    votes_remaining: int
    track_total_votes: int


class WalletResponse(BaseModel):
    user_id: UUID
    standard_credits: int
    premium_credits: int
    monthly_votes_remaining: int
    votes_reset_date: datetime
