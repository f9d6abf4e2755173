"""Track ORM — uploaded track with the counters discovery and voting mutate.

Invariants:
    - boost_pool only grows, except when boost pool decay zeroes an expired boost
    - boost is active iff now < boost_expires
    - total_listens / total_skips / total_votes updated by atomic SQL expressions

Design Decisions:
    - genres/motifs as JSON lists: filtered in core, not in SQL
    - is_active soft-removal: hidden from discovery and leaderboard, rows kept
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, JSON, String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Track(Base):
    """Track aggregate — owns its votes and boost log."""
    __tablename__ = "tracks"
    __table_args__ = (
        CheckConstraint("boost_pool >= 0", name="ck_tracks_boost_pool"),
        Index("ix_tracks_active_votes", "is_active", "total_votes"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    artist_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    genres: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    motifs: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    total_listens: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_skips: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    boost_pool: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    boost_expires: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    artist: Mapped["User"] = relationship("User", back_populates="tracks")
    votes: Mapped[list["Vote"]] = relationship(
        "Vote", back_populates="track", cascade="all, delete-orphan",
        passive_deletes=True,
    )
    boosts: Mapped[list["Boost"]] = relationship(
        "Boost", back_populates="track", cascade="all, delete-orphan",
        passive_deletes=True,
    )
