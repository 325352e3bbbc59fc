# pylint: skip-file
# ruff: noqa
"""Initial schema - create all tables

Revision ID: 001
Revises:
Create Date: 2024-12-11 00:00:00

This migration creates all database tables for SafeTunes.

Tables created:
- kid_profiles: Children under a parent account
- push_tokens: Expo device tokens (parent and kid devices)
- song_requests / album_requests: Kid requests, one pending per (kid, target)
- approved_songs: Kid-scoped song unlocks
- approved_albums: Account-scoped album unlocks
- album_tracks: Stored track lists of approved albums
- content_review_cache: AI reviews and lyrics-only entries
- album_overview_cache: Coarse album recommendations
- ai_search_cache / ai_recommendation_cache: Discovery results
- email_notification_batches: Batched new-request emails

Statuses are stored as strings; the partial unique indexes on the request
tables depend on the literal 'pending'.
"""

from typing import List, Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True)


def _uuid(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), nullable=nullable, index=True)


def _timestamps() -> List[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def _reuse_counter() -> List[sa.Column]:
    return [
        sa.Column("times_reused", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column(
            "last_accessed_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def _request_columns() -> List[sa.Column]:
    return [
        _id(),
        _uuid("owner_id"),
        _uuid("kid_profile_id"),
        sa.Column("artist_name", sa.Text(), nullable=False),
        sa.Column("artwork_url", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.String(32),
            nullable=False,
            server_default="pending",
            index=True,
        ),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("kid_note", sa.Text(), nullable=True),
        sa.Column("denial_reason", sa.Text(), nullable=True),
        sa.Column("partial_approval_note", sa.Text(), nullable=True),
        sa.Column("viewed_by_kid", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    ]


def upgrade() -> None:
    """Upgrade database schema."""
    # Profiles & devices
    op.create_table(
        "kid_profiles",
        _id(),
        _uuid("owner_id"),
        sa.Column("name", sa.String(100), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "push_tokens",
        _id(),
        _uuid("owner_id"),
        _uuid("kid_profile_id", nullable=True),
        sa.Column("token", sa.Text(), nullable=False, unique=True),
        sa.Column("platform", sa.String(16), nullable=False),
        *_timestamps(),
    )

    # Requests
    op.create_table(
        "song_requests",
        *_request_columns(),
        sa.Column("apple_song_id", sa.String(64), nullable=True, index=True),
        sa.Column("song_name", sa.Text(), nullable=False),
        sa.Column("album_name", sa.Text(), nullable=True),
    )
    # At most one pending request per kid and song
    op.create_index(
        "uq_song_requests_pending_target",
        "song_requests",
        ["kid_profile_id", "apple_song_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        "album_requests",
        *_request_columns(),
        sa.Column("apple_album_id", sa.String(64), nullable=True, index=True),
        sa.Column("album_name", sa.Text(), nullable=False),
    )
    op.create_index(
        "uq_album_requests_pending_target",
        "album_requests",
        ["kid_profile_id", "apple_album_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )

    # Approved library
    op.create_table(
        "approved_songs",
        _id(),
        _uuid("owner_id"),
        _uuid("kid_profile_id"),
        sa.Column("apple_song_id", sa.String(64), nullable=False),
        sa.Column("song_name", sa.Text(), nullable=False),
        sa.Column("artist_name", sa.Text(), nullable=False),
        sa.Column("apple_album_id", sa.String(64), nullable=True),
        sa.Column("album_name", sa.Text(), nullable=True),
        sa.Column("artwork_url", sa.Text(), nullable=True),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.Column("is_explicit", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("hide_artwork", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "owner_id", "kid_profile_id", "apple_song_id", name="uq_approved_songs_owner_kid_song"
        ),
    )

    op.create_table(
        "approved_albums",
        _id(),
        _uuid("owner_id"),
        sa.Column("apple_album_id", sa.String(64), nullable=False),
        sa.Column("album_name", sa.Text(), nullable=False),
        sa.Column("artist_name", sa.Text(), nullable=False),
        sa.Column("artwork_url", sa.Text(), nullable=True),
        sa.Column("hide_artwork", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("owner_id", "apple_album_id", name="uq_approved_albums_owner_album"),
    )

    op.create_table(
        "album_tracks",
        _id(),
        _uuid("owner_id"),
        sa.Column("apple_album_id", sa.String(64), nullable=False, index=True),
        sa.Column("apple_song_id", sa.String(64), nullable=False),
        sa.Column("song_name", sa.Text(), nullable=False),
        sa.Column("artist_name", sa.Text(), nullable=False),
        sa.Column("track_number", sa.Integer(), nullable=True),
        sa.Column("duration_ms", sa.Integer(), nullable=True),
        sa.Column("is_explicit", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint(
            "owner_id", "apple_album_id", "apple_song_id", name="uq_album_tracks_owner_album_song"
        ),
    )

    # Moderation caches
    op.create_table(
        "content_review_cache",
        _id(),
        sa.Column("entry_kind", sa.String(16), nullable=False, index=True),
        sa.Column("review_type", sa.String(16), nullable=True),
        sa.Column("apple_track_id", sa.String(64), nullable=True, index=True),
        sa.Column("apple_album_id", sa.String(64), nullable=True, index=True),
        sa.Column("track_name", sa.Text(), nullable=True),
        sa.Column("artist_name", sa.Text(), nullable=False),
        sa.Column("album_name", sa.Text(), nullable=True),
        sa.Column("normalized_track", sa.Text(), nullable=False),
        sa.Column("normalized_artist", sa.Text(), nullable=False),
        sa.Column("lyrics", sa.Text(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("positive_aspects", postgresql.JSONB(), nullable=True),
        sa.Column("inappropriate_content", postgresql.JSONB(), nullable=True),
        sa.Column("overall_rating", sa.String(32), nullable=True),
        sa.Column("age_recommendation", sa.Text(), nullable=True),
        sa.Column("model", sa.String(64), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        *_reuse_counter(),
        *_timestamps(),
    )
    op.create_index(
        "ix_content_review_cache_normalized_names",
        "content_review_cache",
        ["normalized_track", "normalized_artist"],
    )
    # One review row per track id / album id
    op.create_index(
        "uq_content_review_cache_song_review",
        "content_review_cache",
        ["apple_track_id"],
        unique=True,
        postgresql_where=sa.text("entry_kind = 'review' AND review_type = 'song'"),
    )
    op.create_index(
        "uq_content_review_cache_album_review",
        "content_review_cache",
        ["apple_album_id"],
        unique=True,
        postgresql_where=sa.text("entry_kind = 'review' AND review_type = 'album'"),
    )

    op.create_table(
        "album_overview_cache",
        _id(),
        sa.Column("apple_album_id", sa.String(64), nullable=False, unique=True),
        sa.Column("album_name", sa.Text(), nullable=False),
        sa.Column("artist_name", sa.Text(), nullable=False),
        sa.Column("overall_impression", sa.Text(), nullable=False),
        sa.Column("artist_profile", sa.Text(), nullable=True),
        sa.Column("track_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("recommendation", sa.String(32), nullable=False),
        sa.Column("suggested_action", sa.Text(), nullable=True),
        sa.Column("model", sa.String(64), nullable=True),
        *_reuse_counter(),
        *_timestamps(),
    )

    # Discovery caches
    op.create_table(
        "ai_search_cache",
        _id(),
        sa.Column("query_hash", sa.String(64), nullable=False, unique=True),
        sa.Column("original_query", sa.Text(), nullable=False),
        sa.Column("suggestions", postgresql.JSONB(), nullable=False),
        sa.Column("search_terms", postgresql.JSONB(), nullable=False),
        sa.Column("age_range", sa.String(32), nullable=True),
        sa.Column("genres", postgresql.JSONB(), nullable=True),
        sa.Column("model", sa.String(64), nullable=True),
        *_reuse_counter(),
        *_timestamps(),
    )

    op.create_table(
        "ai_recommendation_cache",
        _id(),
        sa.Column("query_hash", sa.String(64), nullable=False, unique=True),
        sa.Column("kid_age", sa.Integer(), nullable=True),
        sa.Column("music_preferences", sa.Text(), nullable=False),
        sa.Column("target_genres", postgresql.JSONB(), nullable=True),
        sa.Column("restrictions", sa.Text(), nullable=True),
        sa.Column("recommendations", postgresql.JSONB(), nullable=False),
        sa.Column("model", sa.String(64), nullable=True),
        *_reuse_counter(),
        *_timestamps(),
    )

    # Notifications
    op.create_table(
        "email_notification_batches",
        _id(),
        _uuid("owner_id"),
        sa.Column("batch_type", sa.String(32), nullable=False, server_default="new_requests"),
        sa.Column("pending_items", postgresql.JSONB(), nullable=False),
        sa.Column("first_request_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("should_send_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("email_notification_batches")
    op.drop_table("ai_recommendation_cache")
    op.drop_table("ai_search_cache")
    op.drop_table("album_overview_cache")
    op.drop_index("uq_content_review_cache_album_review", table_name="content_review_cache")
    op.drop_index("uq_content_review_cache_song_review", table_name="content_review_cache")
    op.drop_index("ix_content_review_cache_normalized_names", table_name="content_review_cache")
    op.drop_table("content_review_cache")
    op.drop_table("album_tracks")
    op.drop_table("approved_albums")
    op.drop_table("approved_songs")
    op.drop_index("uq_album_requests_pending_target", table_name="album_requests")
    op.drop_table("album_requests")
    op.drop_index("uq_song_requests_pending_target", table_name="song_requests")
    op.drop_table("song_requests")
    op.drop_table("push_tokens")
    op.drop_table("kid_profiles")
