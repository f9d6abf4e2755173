"""Initial schema — users, tracks, votes, boosts, archive_logs.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), nullable=True, unique=True),
        sa.Column("display_name", sa.String(120), nullable=True),
        sa.Column("standard_credits", sa.Integer, nullable=False, server_default="0"),
        sa.Column("premium_credits", sa.Integer, nullable=False, server_default="0"),
        sa.Column("monthly_votes_remaining", sa.Integer, nullable=False, server_default="10"),
        sa.Column("votes_reset_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("detested_genres", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("detested_motifs", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("standard_credits >= 0", name="ck_users_standard_credits"),
        sa.CheckConstraint("premium_credits >= 0", name="ck_users_premium_credits"),
        sa.CheckConstraint("monthly_votes_remaining >= 0", name="ck_users_votes_remaining"),
    )

    op.create_table(
        "tracks",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("artist_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("genres", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("motifs", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("total_listens", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_skips", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_votes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("boost_pool", sa.Integer, nullable=False, server_default="0"),
        sa.Column("boost_expires", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("boost_pool >= 0", name="ck_tracks_boost_pool"),
    )
    op.create_index("ix_tracks_artist_id", "tracks", ["artist_id"])
    op.create_index("ix_tracks_active_votes", "tracks", ["is_active", "total_votes"])

    op.create_table(
        "votes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("track_id", UUID(as_uuid=True), sa.ForeignKey("tracks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("voter_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("vote_count", sa.Integer, nullable=False),
        sa.Column("vote_type", sa.String(50), nullable=False, server_default="leaderboard"),
        sa.Column("voted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("track_id", "voter_id", name="uq_votes_track_voter"),
        sa.CheckConstraint("vote_count >= 1", name="ck_votes_vote_count"),
    )
    op.create_index("ix_votes_voter_id", "votes", ["voter_id"])

    op.create_table(
        "boosts",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("track_id", UUID(as_uuid=True), sa.ForeignKey("tracks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("artist_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("plan_id", sa.String(50), nullable=False),
        sa.Column("credits_spent", sa.Integer, nullable=False),
        sa.Column("premium_credits_spent", sa.Integer, nullable=False, server_default="0"),
        sa.Column("standard_credits_spent", sa.Integer, nullable=False, server_default="0"),
        sa.Column("boost_duration_hours", sa.Integer, nullable=False),
        sa.Column("boost_multiplier", sa.Float, nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_boosts_track_id", "boosts", ["track_id"])

    op.create_table(
        "archive_logs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("action_type", sa.String(50), nullable=False),
        sa.Column("target_id", UUID(as_uuid=True), nullable=True),
        sa.Column("target_type", sa.String(50), nullable=True),
        sa.Column("details", sa.JSON, nullable=False, server_default="{}"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_archive_logs_user_action", "archive_logs", ["user_id", "action_type"])


def downgrade() -> None:
    op.drop_table("archive_logs")
    op.drop_table("boosts")
    op.drop_table("votes")
    op.drop_table("tracks")
    op.drop_table("users")
