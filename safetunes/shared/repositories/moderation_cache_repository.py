"""
Moderation Cache Repositories

Database operations for cached content reviews, lyrics-only entries and album
overviews.

Common Operations:
==================
- get_review_for_track() / get_review_for_album() → Completed reviews only
- save_review_if_absent()   → Insert-or-skip on the review unique indexes
- find_lyrics()             → Any entry with lyrics for a normalized name pair
- save_lyrics_if_absent()   → Check-then-skip lyrics-only insert
- record_hit()              → Reuse counter bump (inherited)
- review_totals() / most_reused() → Aggregates for cache stats
- clear_*()                 → Administrative cleanup

Lyric Lookups:
==============
    find_lyrics("yesterday", "the beatles")
        SELECT ... FROM content_review_cache
        WHERE normalized_track = ? AND normalized_artist = ?
          AND lyrics IS NOT NULL
        ORDER BY entry_kind DESC, created_at ASC     ← review rows first
        LIMIT 1
"""

from typing import Any, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from safetunes.shared.models.enums import CacheEntryKind, ReviewType
from safetunes.shared.models.moderation_cache import (
    ALBUM_REVIEWS,
    SONG_REVIEWS,
    AlbumOverviewCache,
    ContentReviewCache,
)
from safetunes.shared.repositories.base import CacheRepository


class ContentReviewCacheRepository(CacheRepository[ContentReviewCache]):
    """Repository for ContentReviewCache."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(ContentReviewCache, session)

    # ═══════════════════════════════════════════════════════════════════════════
    # REVIEW LOOKUPS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_review_for_track(self, apple_track_id: str) -> Optional[ContentReviewCache]:
        """Completed song review for a catalog track id. Lyrics-only rows never match."""
        result = await self.session.execute(
            select(ContentReviewCache)
            .where(
                ContentReviewCache.apple_track_id == apple_track_id,
                ContentReviewCache.review_type == ReviewType.SONG.value,
                ContentReviewCache.entry_kind == CacheEntryKind.REVIEW.value,
            )
            .order_by(ContentReviewCache.created_at.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_review_for_album(self, apple_album_id: str) -> Optional[ContentReviewCache]:
        """Completed album review for a catalog album id."""
        result = await self.session.execute(
            select(ContentReviewCache)
            .where(
                ContentReviewCache.apple_album_id == apple_album_id,
                ContentReviewCache.review_type == ReviewType.ALBUM.value,
                ContentReviewCache.entry_kind == CacheEntryKind.REVIEW.value,
            )
            .order_by(ContentReviewCache.created_at.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def save_review_if_absent(
        self, review_type: ReviewType, **values: Any
    ) -> Optional[ContentReviewCache]:
        """
        Store a completed review unless one already exists for its catalog id.

        Backed by the partial unique indexes on review rows, so of two
        concurrent misses for the same content exactly one insert lands.

        Returns:
            The new entry, or None if a review was already stored
        """
        if review_type == ReviewType.SONG:
            conflict_columns, conflict_where = ["apple_track_id"], SONG_REVIEWS
        else:
            conflict_columns, conflict_where = ["apple_album_id"], ALBUM_REVIEWS

        new_id = await self.insert_or_skip(
            conflict_columns=conflict_columns,
            conflict_where=conflict_where,
            entry_kind=CacheEntryKind.REVIEW.value,
            review_type=review_type.value,
            **values,
        )
        return await self.get(new_id) if new_id is not None else None

    # ═══════════════════════════════════════════════════════════════════════════
    # LYRICS
    # ═══════════════════════════════════════════════════════════════════════════

    async def find_lyrics(
        self,
        normalized_track: str,
        normalized_artist: str,
    ) -> Optional[ContentReviewCache]:
        """Any entry (review or lyrics-only) holding lyrics for the name pair."""
        result = await self.session.execute(
            select(ContentReviewCache)
            .where(
                ContentReviewCache.normalized_track == normalized_track,
                ContentReviewCache.normalized_artist == normalized_artist,
                ContentReviewCache.lyrics.is_not(None),
            )
            .order_by(
                ContentReviewCache.entry_kind.desc(),
                ContentReviewCache.created_at.asc(),
            )
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def save_lyrics_if_absent(
        self,
        track_name: str,
        artist_name: str,
        normalized_track: str,
        normalized_artist: str,
        lyrics: str,
        album_name: Optional[str] = None,
    ) -> Optional[ContentReviewCache]:
        """
        Store a lyrics-only entry unless one already exists for the name pair.

        The existence re-check runs immediately before the insert so two lyric
        fetches finishing together leave one row, not two.

        Returns:
            The new entry, or None if an entry already existed
        """
        if await self.find_lyrics(normalized_track, normalized_artist):
            return None

        return await self.create(
            entry_kind=CacheEntryKind.LYRICS_ONLY.value,
            track_name=track_name,
            artist_name=artist_name,
            album_name=album_name,
            normalized_track=normalized_track,
            normalized_artist=normalized_artist,
            lyrics=lyrics,
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # STATS
    # ═══════════════════════════════════════════════════════════════════════════

    async def review_totals(self) -> Tuple[int, int]:
        """
        Returns:
            Tuple of (review entry count, sum of times_reused) over review rows
        """
        result = await self.session.execute(
            select(
                func.count(ContentReviewCache.id),
                func.coalesce(func.sum(ContentReviewCache.times_reused), 0),
            ).where(ContentReviewCache.entry_kind == CacheEntryKind.REVIEW.value)
        )
        entries, reused = result.one()
        return int(entries or 0), int(reused or 0)

    async def most_reused(self, limit: int) -> List[ContentReviewCache]:
        """Review rows by times_reused desc; ties go to the earlier entry."""
        result = await self.session.execute(
            select(ContentReviewCache)
            .where(ContentReviewCache.entry_kind == CacheEntryKind.REVIEW.value)
            .order_by(
                ContentReviewCache.times_reused.desc(),
                ContentReviewCache.created_at.asc(),
            )
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    # ═══════════════════════════════════════════════════════════════════════════
    # ADMINISTRATION
    # ═══════════════════════════════════════════════════════════════════════════

    async def clear_for_content_id(self, content_id: str) -> int:
        """Delete every entry keyed by a track or album id."""
        return await self.delete_where(
            (ContentReviewCache.apple_track_id == content_id)
            | (ContentReviewCache.apple_album_id == content_id)
        )

    async def clear_for_names(self, normalized_track: str, normalized_artist: str) -> int:
        return await self.delete_where(
            ContentReviewCache.normalized_track == normalized_track,
            ContentReviewCache.normalized_artist == normalized_artist,
        )

    async def clear_lyrics_only(self) -> int:
        return await self.delete_where(
            ContentReviewCache.entry_kind == CacheEntryKind.LYRICS_ONLY.value
        )

    async def clear_all(self) -> int:
        return await self.delete_where(ContentReviewCache.id.is_not(None))


class AlbumOverviewCacheRepository(CacheRepository[AlbumOverviewCache]):
    """Repository for AlbumOverviewCache."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AlbumOverviewCache, session)

    async def get_by_album_id(self, apple_album_id: str) -> Optional[AlbumOverviewCache]:
        result = await self.session.execute(
            select(AlbumOverviewCache).where(AlbumOverviewCache.apple_album_id == apple_album_id)
        )
        return result.scalar_one_or_none()

    async def get_many(self, apple_album_ids: Sequence[str]) -> List[AlbumOverviewCache]:
        if not apple_album_ids:
            return []
        result = await self.session.execute(
            select(AlbumOverviewCache).where(
                AlbumOverviewCache.apple_album_id.in_(list(apple_album_ids))
            )
        )
        return list(result.scalars().all())

    async def save_if_absent(self, apple_album_id: str, **values: Any) -> bool:
        """Insert an overview unless one is already cached for the album."""
        new_id = await self.insert_or_skip(
            conflict_columns=["apple_album_id"],
            apple_album_id=apple_album_id,
            **values,
        )
        return new_id is not None
