"""Vote ORM — one voter's allocation to one track.

Invariants:
    - UNIQUE (track_id, voter_id): exactly one row per voter per track
    - vote_count >= 1; lowering an allocation overwrites, never deletes

Design Decisions:
    - Surrogate UUID key plus unique constraint (not composite PK): vote ids
      are exposed by the API
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint, DateTime, ForeignKey, Integer, String, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.core.domain_types import DEFAULT_VOTE_TYPE
from app.db.base import Base


class Vote(Base):
    """Vote entity — allocation of monthly votes to a track."""
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("track_id", "voter_id", name="uq_votes_track_voter"),
        CheckConstraint("vote_count >= 1", name="ck_votes_vote_count"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    track_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("tracks.id", ondelete="CASCADE"),
        nullable=False,
    )
    voter_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    vote_count: Mapped[int] = mapped_column(Integer, nullable=False)
    vote_type: Mapped[str] = mapped_column(
        String(50), nullable=False, default=DEFAULT_VOTE_TYPE,
    )
    voted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    track: Mapped["Track"] = relationship("Track", back_populates="votes")
