"""
Approved Content Repositories

Database operations for the approved library the kid-facing player reads.

Common Operations:
==================
- ApprovedSongRepository.add_if_absent()   → Unlock a song for a kid (idempotent)
- ApprovedSongRepository.remove()          → Undo an unlock
- ApprovedAlbumRepository.add_if_absent()  → Unlock an album (idempotent)
- AlbumTrackRepository.store_once()        → Persist an album's track list once
"""

from typing import Any, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from safetunes.shared.models.approved_content import AlbumTrack, ApprovedAlbum, ApprovedSong
from safetunes.shared.repositories.base import BaseRepository


class ApprovedSongRepository(BaseRepository[ApprovedSong]):
    """Kid-scoped song unlocks."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(ApprovedSong, session)

    async def get_for(
        self,
        owner_id: UUID,
        kid_profile_id: UUID,
        apple_song_id: str,
    ) -> Optional[ApprovedSong]:
        result = await self.session.execute(
            select(ApprovedSong).where(
                ApprovedSong.owner_id == owner_id,
                ApprovedSong.kid_profile_id == kid_profile_id,
                ApprovedSong.apple_song_id == apple_song_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_kid(self, kid_profile_id: UUID) -> List[ApprovedSong]:
        result = await self.session.execute(
            select(ApprovedSong)
            .where(ApprovedSong.kid_profile_id == kid_profile_id)
            .order_by(ApprovedSong.approved_at.desc())
        )
        return list(result.scalars().all())

    async def add_if_absent(
        self,
        owner_id: UUID,
        kid_profile_id: UUID,
        apple_song_id: str,
        **metadata: Any,
    ) -> bool:
        """
        Unlock a song for a kid.

        Returns:
            True if a row was inserted, False if the kid already had it
        """
        new_id = await self.insert_or_skip(
            conflict_columns=["owner_id", "kid_profile_id", "apple_song_id"],
            owner_id=owner_id,
            kid_profile_id=kid_profile_id,
            apple_song_id=apple_song_id,
            **metadata,
        )
        return new_id is not None

    async def remove(self, owner_id: UUID, kid_profile_id: UUID, apple_song_id: str) -> int:
        """
        Delete a song request's unlock for exactly this owner, kid and song.

        Rows written by an album approval (apple_album_id set) belong to that
        album and are left in place.
        """
        return await self.delete_where(
            ApprovedSong.owner_id == owner_id,
            ApprovedSong.kid_profile_id == kid_profile_id,
            ApprovedSong.apple_song_id == apple_song_id,
            ApprovedSong.apple_album_id.is_(None),
        )


class ApprovedAlbumRepository(BaseRepository[ApprovedAlbum]):
    """Account-scoped album unlocks."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(ApprovedAlbum, session)

    async def get_for(self, owner_id: UUID, apple_album_id: str) -> Optional[ApprovedAlbum]:
        result = await self.session.execute(
            select(ApprovedAlbum).where(
                ApprovedAlbum.owner_id == owner_id,
                ApprovedAlbum.apple_album_id == apple_album_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_owner(self, owner_id: UUID) -> List[ApprovedAlbum]:
        result = await self.session.execute(
            select(ApprovedAlbum)
            .where(ApprovedAlbum.owner_id == owner_id)
            .order_by(ApprovedAlbum.approved_at.desc())
        )
        return list(result.scalars().all())

    async def add_if_absent(self, owner_id: UUID, apple_album_id: str, **metadata: Any) -> bool:
        """
        Unlock an album for the account.

        Returns:
            True if a row was inserted, False if it was already approved
        """
        new_id = await self.insert_or_skip(
            conflict_columns=["owner_id", "apple_album_id"],
            owner_id=owner_id,
            apple_album_id=apple_album_id,
            **metadata,
        )
        return new_id is not None

    async def remove(self, owner_id: UUID, apple_album_id: str) -> int:
        return await self.delete_where(
            ApprovedAlbum.owner_id == owner_id,
            ApprovedAlbum.apple_album_id == apple_album_id,
        )


class AlbumTrackRepository(BaseRepository[AlbumTrack]):
    """Stored track lists of approved albums."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AlbumTrack, session)

    async def list_for_album(self, owner_id: UUID, apple_album_id: str) -> List[AlbumTrack]:
        result = await self.session.execute(
            select(AlbumTrack)
            .where(
                AlbumTrack.owner_id == owner_id,
                AlbumTrack.apple_album_id == apple_album_id,
            )
            .order_by(AlbumTrack.track_number.asc())
        )
        return list(result.scalars().all())

    async def has_tracks(self, owner_id: UUID, apple_album_id: str) -> bool:
        result = await self.session.execute(
            select(AlbumTrack.id)
            .where(
                AlbumTrack.owner_id == owner_id,
                AlbumTrack.apple_album_id == apple_album_id,
            )
            .limit(1)
        )
        return result.first() is not None

    async def store_once(
        self,
        owner_id: UUID,
        apple_album_id: str,
        tracks: Iterable[dict[str, Any]],
    ) -> int:
        """
        Persist an album's track list unless it is already stored.

        Args:
            tracks: Dicts with apple_song_id, song_name, artist_name and optional
                track_number, duration_ms, is_explicit

        Returns:
            Number of track rows inserted
        """
        if await self.has_tracks(owner_id, apple_album_id):
            return 0

        inserted = 0
        for track in tracks:
            new_id = await self.insert_or_skip(
                conflict_columns=["owner_id", "apple_album_id", "apple_song_id"],
                owner_id=owner_id,
                apple_album_id=apple_album_id,
                **track,
            )
            if new_id is not None:
                inserted += 1
        return inserted
