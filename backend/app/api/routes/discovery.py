"""Discovery Routes — eligible tracks, weighted next track, listen/skip counters.

Invariants:
    - `seen` carries the client's per-session seen set; reviewed tracks are
      excluded server-side from archive logs
    - Exhaustion is a 200 with exhausted=true, not an error
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_current_user_id, get_discovery_service
from app.core.domain_types import TrackId, UserId
from app.schemas.track import (
    CounterResponse, EligibleTracksResponse, NextTrackResponse, TrackResponse,
)
from app.services.discovery_service import DiscoveryService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["discovery"])


@router.get("/discover/eligible", response_model=EligibleTracksResponse)
async def list_eligible_tracks(
    seen: list[UUID] = Query(default=[]),
    user_id: UserId = Depends(get_current_user_id),
    service: DiscoveryService = Depends(get_discovery_service),
):
    """Tracks the requester may be offered next."""
    seen_ids = [TrackId(s) for s in seen]
    tracks = await service.get_eligible_tracks(user_id, seen_ids)
    return EligibleTracksResponse(
        tracks=[TrackResponse.model_validate(t) for t in tracks],
        count=len(tracks),
    )


@router.get("/discover/next", response_model=NextTrackResponse)
async def next_track(
    seen: list[UUID] = Query(default=[]),
    user_id: UserId = Depends(get_current_user_id),
    service: DiscoveryService = Depends(get_discovery_service),
):
    """Weighted-random pick among eligible tracks."""
    seen_ids = [TrackId(s) for s in seen]
    track = await service.next_track(user_id, seen_ids)
    if track is None:
        return NextTrackResponse(track=None, exhausted=True)
    return NextTrackResponse(
        track=TrackResponse.model_validate(track), exhausted=False,
    )


@router.post("/tracks/{track_id}/listen", response_model=CounterResponse)
async def record_listen(
    track_id: UUID,
    service: DiscoveryService = Depends(get_discovery_service),
):
    value = await service.record_listen(TrackId(track_id))
    return CounterResponse(track_id=track_id, value=value)


@router.post("/tracks/{track_id}/skip", response_model=CounterResponse)
async def record_skip(
    track_id: UUID,
    service: DiscoveryService = Depends(get_discovery_service),
):
    value = await service.record_skip(TrackId(track_id))
    return CounterResponse(track_id=track_id, value=value)
