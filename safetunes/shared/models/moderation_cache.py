"""
Moderation Cache Models

AI content reviews are expensive, so every verdict is stored and reused.

ContentReviewCache holds two kinds of rows, told apart by ``entry_kind``:

    ┌──────────────┬───────────────────────────────┬──────────────────────────┐
    │ entry_kind   │ populated                     │ looked up by             │
    ├──────────────┼───────────────────────────────┼──────────────────────────┤
    │ review       │ verdict fields (+ lyrics)     │ apple_track_id /         │
    │              │                               │ apple_album_id           │
    │ lyrics_only  │ lyrics                        │ normalized (track,artist)│
    └──────────────┴───────────────────────────────┴──────────────────────────┘

Lyric lookups go through the composite index on
(normalized_track, normalized_artist) and accept either kind; review lookups
only ever accept ``review`` rows.

Partial unique indexes allow one review row per track id (songs) and per
album id (albums), so concurrent misses store a single verdict.

AlbumOverviewCache holds the coarse album recommendation, keyed by album id.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from safetunes.shared.models.base import Base, ReuseCounterMixin, TimestampMixin
from safetunes.shared.models.enums import CacheEntryKind

# One verdict per catalog id; song reviews may also carry their album id
SONG_REVIEWS = text("entry_kind = 'review' AND review_type = 'song'")
ALBUM_REVIEWS = text("entry_kind = 'review' AND review_type = 'album'")


class ContentReviewCache(Base, TimestampMixin, ReuseCounterMixin):
    """
    A cached song/album review or a lyrics-only entry.

    Attributes:
        entry_kind: review | lyrics_only
        review_type: song | album (review rows only)
        apple_track_id / apple_album_id: catalog ids the review is keyed by
        normalized_track / normalized_artist: lyric cache key; album rows
            key the album title in normalized_track
        inappropriate_content: list of {category, severity, quote, context}
        overall_rating: appropriate | use-caution | inappropriate
    """

    __tablename__ = "content_review_cache"
    __table_args__ = (
        Index(
            "ix_content_review_cache_normalized_names",
            "normalized_track",
            "normalized_artist",
        ),
        Index(
            "uq_content_review_cache_song_review",
            "apple_track_id",
            unique=True,
            postgresql_where=SONG_REVIEWS,
            sqlite_where=SONG_REVIEWS,
        ),
        Index(
            "uq_content_review_cache_album_review",
            "apple_album_id",
            unique=True,
            postgresql_where=ALBUM_REVIEWS,
            sqlite_where=ALBUM_REVIEWS,
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    entry_kind: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=CacheEntryKind.REVIEW.value,
        index=True,
    )
    review_type: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)

    # ═══════════════════════════════════════════════════════════════════════════
    # IDENTITY
    # ═══════════════════════════════════════════════════════════════════════════

    apple_track_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    apple_album_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    track_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    artist_name: Mapped[str] = mapped_column(Text, nullable=False)
    album_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    normalized_track: Mapped[str] = mapped_column(Text, nullable=False)
    normalized_artist: Mapped[str] = mapped_column(Text, nullable=False)

    lyrics: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ═══════════════════════════════════════════════════════════════════════════
    # VERDICT (review rows only)
    # ═══════════════════════════════════════════════════════════════════════════

    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    positive_aspects: Mapped[Optional[list[Any]]] = mapped_column(nullable=True)
    inappropriate_content: Mapped[Optional[list[Any]]] = mapped_column(nullable=True)
    overall_rating: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    age_recommendation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    model: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_review(self) -> bool:
        """True only for rows carrying a completed safety verdict."""
        return self.entry_kind == CacheEntryKind.REVIEW.value

    def __repr__(self) -> str:
        return (
            f"<ContentReviewCache(id={self.id}, kind={self.entry_kind}, "
            f"track={self.track_name}, artist={self.artist_name})>"
        )


class AlbumOverviewCache(Base, TimestampMixin, ReuseCounterMixin):
    """Cached album-level recommendation, one row per album id."""

    __tablename__ = "album_overview_cache"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    apple_album_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    album_name: Mapped[str] = mapped_column(Text, nullable=False)
    artist_name: Mapped[str] = mapped_column(Text, nullable=False)

    overall_impression: Mapped[str] = mapped_column(Text, nullable=False)
    artist_profile: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    track_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    recommendation: Mapped[str] = mapped_column(String(32), nullable=False)
    suggested_action: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    model: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
