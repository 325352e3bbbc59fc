"""
Request Entity Models

Song and album requests submitted by a kid and resolved by the parent.
Both variants share one shape (``RequestMixin``) and differ only in the
catalog id column and display fields.

SAMPLE SONG_REQUEST RECORD:
┌──────────────────────────────────────────────────────────────────────────────┐
│ id               │ 550e8400-e29b-41d4-a716-446655440000                      │
│ kid_profile_id   │ 7c9e6679-7425-40de-944b-e07fc1f90ae7                      │
│ apple_song_id    │ "1441133180"                                              │
│ song_name        │ "Let It Be"                                               │
│ artist_name      │ "The Beatles"                                             │
│ status           │ pending                                                   │
│ requested_at     │ 2024-01-15T10:30:00Z                                      │
│ reviewed_at      │ NULL                                                      │
└──────────────────────────────────────────────────────────────────────────────┘

Pending Uniqueness:
===================
A partial unique index on (kid_profile_id, catalog id) WHERE status = 'pending'
guarantees at most one open request per kid and target, even when two create
calls race. Resolved requests are not covered, so a kid can ask again after a
denial.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from safetunes.shared.models.base import Base, TimestampMixin, utcnow
from safetunes.shared.models.enums import RequestKind, RequestStatus


PENDING_ONLY = text("status = 'pending'")


class RequestMixin(TimestampMixin):
    """Columns common to song and album requests."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # OWNERSHIP
    # ═══════════════════════════════════════════════════════════════════════════

    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    kid_profile_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # ═══════════════════════════════════════════════════════════════════════════
    # DISPLAY METADATA
    # ═══════════════════════════════════════════════════════════════════════════

    artist_name: Mapped[str] = mapped_column(Text, nullable=False)
    artwork_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ═══════════════════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════════════════════

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=RequestStatus.PENDING.value,
        index=True,
    )

    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    # Set on every transition out of pending, cleared by undo transitions
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    kid_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    denial_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    partial_approval_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Drives the kid-side "new decision" badge
    viewed_by_kid: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )


class SongRequest(Base, RequestMixin):
    """A kid's request to unlock one song."""

    __tablename__ = "song_requests"
    __table_args__ = (
        Index(
            "uq_song_requests_pending_target",
            "kid_profile_id",
            "apple_song_id",
            unique=True,
            postgresql_where=PENDING_ONLY,
            sqlite_where=PENDING_ONLY,
        ),
    )

    kind = RequestKind.SONG

    # Nullable only for legacy rows created before the catalog id was captured
    apple_song_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    song_name: Mapped[str] = mapped_column(Text, nullable=False)
    album_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def target_id(self) -> Optional[str]:
        return self.apple_song_id

    @property
    def content_name(self) -> str:
        return self.song_name

    def __repr__(self) -> str:
        return f"<SongRequest(id={self.id}, song={self.song_name}, status={self.status})>"


class AlbumRequest(Base, RequestMixin):
    """A kid's request to unlock a whole album."""

    __tablename__ = "album_requests"
    __table_args__ = (
        Index(
            "uq_album_requests_pending_target",
            "kid_profile_id",
            "apple_album_id",
            unique=True,
            postgresql_where=PENDING_ONLY,
            sqlite_where=PENDING_ONLY,
        ),
    )

    kind = RequestKind.ALBUM

    apple_album_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    album_name: Mapped[str] = mapped_column(Text, nullable=False)

    @property
    def target_id(self) -> Optional[str]:
        return self.apple_album_id

    @property
    def content_name(self) -> str:
        return self.album_name

    def __repr__(self) -> str:
        return f"<AlbumRequest(id={self.id}, album={self.album_name}, status={self.status})>"
