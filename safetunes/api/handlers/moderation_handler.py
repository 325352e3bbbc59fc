"""
Moderation Handler

Cached AI lyric reviews, lyric lookup and album overviews, plus cache
statistics and administration.

ARCHITECTURE:
=============
    Handler → ModerationCacheService → ContentReviewCacheRepository
                    ↘ OpenAI (reviews)  ↘ Musixmatch (lyrics)

A review cache miss without lyrics returns 400 LYRICS_REQUIRED; the client
then looks the lyrics up (POST /lyrics) or asks the parent to paste them.
"""

from typing import Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from safetunes.api.dependencies import CurrentOwner
from safetunes.api.dependencies.services import get_moderation_service
from safetunes.shared.schemas.moderation import (
    AlbumOverviewBatchRequest,
    AlbumOverviewRequest,
    AlbumOverviewResponse,
    CachedOverviewSummary,
    CachedReviewDetail,
    CacheClearResponse,
    CacheStatsResponse,
    ClearReviewByNameRequest,
    ContentReviewRequest,
    LyricsRequest,
    LyricsResponse,
    ReviewResponse,
)
from safetunes.shared.services.moderation_cache_service import ModerationCacheService


router = APIRouter()


# ═══════════════════════════════════════════════════════════════════════════════
# REVIEWS & LYRICS
# ═══════════════════════════════════════════════════════════════════════════════


@router.post("/reviews", response_model=ReviewResponse)
async def review_content(
    body: ContentReviewRequest,
    _owner_id: CurrentOwner,
    service: ModerationCacheService = Depends(get_moderation_service),
):
    """Cached review of a song (by track id) or album (by album id)."""
    return await service.get_or_create_review(body)


@router.get("/reviews/{review_id}", response_model=CachedReviewDetail)
async def get_review(
    review_id: UUID,
    _owner_id: CurrentOwner,
    service: ModerationCacheService = Depends(get_moderation_service),
):
    entry = await service.get_review_by_id(review_id)
    return CachedReviewDetail.model_validate(entry)


@router.post("/lyrics", response_model=LyricsResponse)
async def lookup_lyrics(
    body: LyricsRequest,
    _owner_id: CurrentOwner,
    service: ModerationCacheService = Depends(get_moderation_service),
):
    return await service.get_or_fetch_lyrics(body.track_name, body.artist_name)


# ═══════════════════════════════════════════════════════════════════════════════
# ALBUM OVERVIEWS
# ═══════════════════════════════════════════════════════════════════════════════


@router.post("/album-overviews", response_model=AlbumOverviewResponse)
async def album_overview(
    body: AlbumOverviewRequest,
    _owner_id: CurrentOwner,
    service: ModerationCacheService = Depends(get_moderation_service),
):
    return await service.get_or_create_album_overview(body)


@router.post("/album-overviews/cached", response_model=Dict[str, CachedOverviewSummary])
async def cached_album_overviews(
    body: AlbumOverviewBatchRequest,
    _owner_id: CurrentOwner,
    service: ModerationCacheService = Depends(get_moderation_service),
):
    """Recommendation badges for many albums at once; uncached albums are omitted."""
    return await service.get_cached_overviews(body.apple_album_ids)


# ═══════════════════════════════════════════════════════════════════════════════
# STATS & ADMINISTRATION
# ═══════════════════════════════════════════════════════════════════════════════


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(
    _owner_id: CurrentOwner,
    top: Optional[int] = Query(None, ge=1, le=100),
    service: ModerationCacheService = Depends(get_moderation_service),
):
    return await service.get_cache_stats(top)


@router.delete("/cache/reviews/{content_id}", response_model=CacheClearResponse)
async def clear_review(
    content_id: str,
    _owner_id: CurrentOwner,
    service: ModerationCacheService = Depends(get_moderation_service),
):
    """Drop the cached review for a track or album id so the next request re-reviews."""
    return CacheClearResponse(deleted=await service.clear_review(content_id))


@router.post("/cache/clear-by-name", response_model=CacheClearResponse)
async def clear_review_by_name(
    body: ClearReviewByNameRequest,
    _owner_id: CurrentOwner,
    service: ModerationCacheService = Depends(get_moderation_service),
):
    deleted = await service.clear_review_by_name(body.name, body.artist_name)
    return CacheClearResponse(deleted=deleted)


@router.delete("/cache/lyrics", response_model=CacheClearResponse)
async def clear_lyrics_only(
    _owner_id: CurrentOwner,
    service: ModerationCacheService = Depends(get_moderation_service),
):
    return CacheClearResponse(deleted=await service.clear_lyrics_only())


@router.delete("/cache", response_model=CacheClearResponse)
async def clear_all(
    _owner_id: CurrentOwner,
    service: ModerationCacheService = Depends(get_moderation_service),
):
    return CacheClearResponse(deleted=await service.clear_all())
