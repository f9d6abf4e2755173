"""Aggregate Loaders — locked reads of User/Track rows and archive appends.

Invariants:
    - load_user / load_track raise ResourceNotFoundError, never return None
    - for_update=True issues SELECT ... FOR UPDATE and refreshes identity-map
      copies (populate_existing) so a retry never sees pre-rollback values
    - Lock order inside one transaction is always user, then track
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import ArchiveAction, TrackId, UserId
from app.core.errors import ErrorContext, ResourceNotFoundError
from app.models.archive_log import ArchiveLog
from app.models.track import Track
from app.models.user import User


async def load_user(
    db: AsyncSession, user_id: UserId, for_update: bool = False,
) -> User:
    query = select(User).where(User.id == user_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    user = (await db.execute(query)).scalar_one_or_none()
    if user is None:
        raise ResourceNotFoundError(
            "User", str(user_id), ErrorContext(user_id=str(user_id)),
        )
    return user


async def load_track(
    db: AsyncSession, track_id: TrackId, for_update: bool = False,
) -> Track:
    query = select(Track).where(Track.id == track_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    track = (await db.execute(query)).scalar_one_or_none()
    if track is None:
        raise ResourceNotFoundError(
            "Track", str(track_id), ErrorContext(track_id=str(track_id)),
        )
    return track


def record_archive(
    db: AsyncSession,
    user_id: UserId,
    action: ArchiveAction,
    target_id: UUID,
    target_type: str,
    details: dict,
) -> ArchiveLog:
    """Stage an archive entry in the caller's transaction (no flush)."""
    entry = ArchiveLog(
        user_id=user_id,
        action_type=action.value,
        target_id=target_id,
        target_type=target_type,
        details=details,
    )
    db.add(entry)
    return entry
