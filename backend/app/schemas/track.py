"""Track Schemas — discovery and leaderboard payloads."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class TrackResponse(BaseModel):
    """Public track fields relevant to discovery, boosting and voting."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    artist_id: UUID
    title: str
    genres: list[str] = []
    motifs: list[str] = []
    total_listens: int
    total_skips: int
    total_votes: int
    boost_pool: int
    boost_expires: datetime | None = None
    is_active: bool


class EligibleTracksResponse(BaseModel):
    tracks: list[TrackResponse]
    count: int


class NextTrackResponse(BaseModel):
    """`track` is None when the pool is exhausted; the client resets its seen set."""
    track: TrackResponse | None
    exhausted: bool


class CounterResponse(BaseModel):
    track_id: UUID
    value: int
