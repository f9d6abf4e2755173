"""User ORM — the credit and vote balances this service mutates.

Invariants:
    - standard_credits, premium_credits, monthly_votes_remaining never negative
      (CHECK constraints back the application-level pre-checks)
    - detested_genres / detested_motifs are JSON string lists (may be empty)

Design Decisions:
    - Only the fields the discovery/boost/vote core needs: profile, auth and
      payment fields belong to the excluded CRUD layer
    - votes_reset_date nullable: NULL means "never reset" and triggers a refill
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, String, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class User(Base):
    """Platform member — artist, listener, or both."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("standard_credits >= 0", name="ck_users_standard_credits"),
        CheckConstraint("premium_credits >= 0", name="ck_users_premium_credits"),
        CheckConstraint(
            "monthly_votes_remaining >= 0", name="ck_users_votes_remaining",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str | None] = mapped_column(
        String(320), nullable=True, unique=True,
    )
    display_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    standard_credits: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    premium_credits: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    monthly_votes_remaining: Mapped[int] = mapped_column(
        Integer, nullable=False, default=10,
    )
    votes_reset_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    detested_genres: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    detested_motifs: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    tracks: Mapped[list["Track"]] = relationship(
        "Track", back_populates="artist", cascade="all, delete-orphan",
    )
