"""
Approved Content Models

The materialized "approved library" the kid-facing player reads.

    ApprovedSong   one row per (owner, kid, song)     ← kid-scoped unlock
    ApprovedAlbum  one row per (owner, album)         ← account-scoped unlock
    AlbumTrack     one row per (owner, album, song)   ← track list stored once

Approving an album writes one ApprovedAlbum row and one ApprovedSong row per
supplied track for the requesting kid. The unique constraints below back the
repositories' insert-or-skip writes, so approving the same content twice
(or two approvals racing) never produces duplicate rows.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from safetunes.shared.models.base import Base, TimestampMixin, utcnow


class ApprovedSong(Base, TimestampMixin):
    """A song a specific kid may play."""

    __tablename__ = "approved_songs"
    __table_args__ = (
        UniqueConstraint(
            "owner_id",
            "kid_profile_id",
            "apple_song_id",
            name="uq_approved_songs_owner_kid_song",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    kid_profile_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    apple_song_id: Mapped[str] = mapped_column(String(64), nullable=False)

    song_name: Mapped[str] = mapped_column(Text, nullable=False)
    artist_name: Mapped[str] = mapped_column(Text, nullable=False)
    # Set when the song was unlocked through an album approval
    apple_album_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    album_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    artwork_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    duration_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_explicit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    hide_artwork: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    approved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class ApprovedAlbum(Base, TimestampMixin):
    """An album unlocked for every kid on the account."""

    __tablename__ = "approved_albums"
    __table_args__ = (
        UniqueConstraint("owner_id", "apple_album_id", name="uq_approved_albums_owner_album"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    apple_album_id: Mapped[str] = mapped_column(String(64), nullable=False)

    album_name: Mapped[str] = mapped_column(Text, nullable=False)
    artist_name: Mapped[str] = mapped_column(Text, nullable=False)
    artwork_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    hide_artwork: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    approved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class AlbumTrack(Base, TimestampMixin):
    """Track list of an approved album, stored once per owner."""

    __tablename__ = "album_tracks"
    __table_args__ = (
        UniqueConstraint(
            "owner_id",
            "apple_album_id",
            "apple_song_id",
            name="uq_album_tracks_owner_album_song",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    apple_album_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    apple_song_id: Mapped[str] = mapped_column(String(64), nullable=False)

    song_name: Mapped[str] = mapped_column(Text, nullable=False)
    artist_name: Mapped[str] = mapped_column(Text, nullable=False)
    track_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    duration_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_explicit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
