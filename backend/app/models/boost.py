"""Boost ORM — append-only log of boost purchases.

Invariants:
    - Never updated after insert
    - credits_spent == premium_credits_spent + standard_credits_spent
    - Written in the same transaction as the balance and track mutation it records
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Boost(Base):
    """Boost purchase record."""
    __tablename__ = "boosts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    track_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("tracks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    artist_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False,
    )
    plan_id: Mapped[str] = mapped_column(String(50), nullable=False)
    credits_spent: Mapped[int] = mapped_column(Integer, nullable=False)
    premium_credits_spent: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    standard_credits_spent: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    boost_duration_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    boost_multiplier: Mapped[float] = mapped_column(Float, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    track: Mapped["Track"] = relationship("Track", back_populates="boosts")
