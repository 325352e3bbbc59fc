"""
Moderation Cache Service

AI content reviews with a cache in front of every expensive call.

REVIEW FLOW:
============
    get_or_create_review(request)
        │
        ├─ cached review for the content id? ──yes──► record_hit ► return (from_cache)
        │                                               (separate UPDATE)
        ▼ no
    lyrics supplied? ──no──► cached lyrics for the names? ──no──► LyricsRequiredError
        │
        ▼
    AI reviewer ─► strip fences ─► validate ─► store review (best effort) ─► return

LYRICS FLOW:
============
    get_or_fetch_lyrics(track, artist)
        │
        ├─ lyric cache hit on normalized key ──► return
        ▼
    up to N (track variant × artist variant) searches ─► best match ≥ threshold
        │   (an upstream failure only skips that combination)
        ▼
    one broad "track artist" search ─► first result with usable lyrics
        │
        ▼
    found:     store under requested AND matched names (check-then-skip)
    not found: LyricsResponse(found=False) so the client can offer manual entry

Cache writes after a successful upstream call are best effort: a failed write
is logged and the computed result is still returned.

Usage:
======
    service = ModerationCacheService(db)
    response = await service.get_or_create_review(request)
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from openai import OpenAIError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from safetunes.config.settings import settings
from safetunes.shared.adapters.lyrics_adapter import LyricsAdapter, LyricTrack, get_lyrics_adapter
from safetunes.shared.adapters.openai_adapter import OpenAIAdapter, get_openai_adapter
from safetunes.shared.core.exceptions import LyricsRequiredError, ReviewNotFoundError, UpstreamError
from safetunes.shared.core.logging import get_logger
from safetunes.shared.models.enums import ReviewType
from safetunes.shared.models.moderation_cache import AlbumOverviewCache, ContentReviewCache
from safetunes.shared.repositories.moderation_cache_repository import (
    AlbumOverviewCacheRepository,
    ContentReviewCacheRepository,
)
from safetunes.shared.schemas.moderation import (
    AlbumOverview,
    AlbumOverviewRequest,
    AlbumOverviewResponse,
    CachedOverviewSummary,
    CacheStatsResponse,
    ContentReview,
    ContentReviewRequest,
    LyricsResponse,
    ReviewResponse,
    TopReviewedItem,
)
from safetunes.shared.services.fuzzy_match_service import FuzzyMatchService
from safetunes.shared.services.prompts import (
    ALBUM_OVERVIEW_SYSTEM_PROMPT,
    REVIEW_SYSTEM_PROMPT,
    build_album_overview_prompt,
    build_review_prompt,
)
from safetunes.shared.utils.review_parsing import ParseError, parse_album_overview, parse_review

logger = get_logger(__name__)

REVIEW_TEMPERATURE = 0.3
REVIEW_MAX_TOKENS = 3000
ALBUM_OVERVIEW_MAX_TOKENS = 800

LYRICS_SOURCE = "musixmatch"
LYRICS_FALLBACK_SOURCE = "musixmatch-fallback"


class ModerationCacheService:
    """
    Service for cached AI moderation.

    Handles:
    - Song and album lyric reviews (cached by catalog id)
    - Lyric lookup with fuzzy matching (cached by normalized names)
    - Album overviews (cached by album id)
    - Cache statistics and administration
    """

    def __init__(
        self,
        session: AsyncSession,
        ai: Optional[OpenAIAdapter] = None,
        lyrics: Optional[LyricsAdapter] = None,
        match_threshold: Optional[float] = None,
    ) -> None:
        """
        Initialize ModerationCacheService.

        Args:
            session: Async database session
            ai: AI reviewer adapter (defaults to the shared OpenAI adapter)
            lyrics: Lyric provider adapter (defaults to the shared Musixmatch adapter)
            match_threshold: Minimum combined fuzzy score for a lyric match
        """
        self.session = session
        self.review_repo = ContentReviewCacheRepository(session)
        self.overview_repo = AlbumOverviewCacheRepository(session)
        self._ai = ai
        self._lyrics = lyrics
        self.match_threshold = (
            match_threshold if match_threshold is not None else settings.LYRICS_MATCH_THRESHOLD
        )

    @property
    def ai(self) -> OpenAIAdapter:
        if self._ai is None:
            self._ai = get_openai_adapter()
        return self._ai

    @property
    def lyrics(self) -> LyricsAdapter:
        if self._lyrics is None:
            self._lyrics = get_lyrics_adapter()
        return self._lyrics

    # ═══════════════════════════════════════════════════════════════════════════
    # REVIEWS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_or_create_review(self, request: ContentReviewRequest) -> ReviewResponse:
        """
        Return the cached review for a song/album, or produce and cache one.

        Raises:
            LyricsRequiredError: Cache miss and no lyrics available
            UpstreamError: AI reviewer failed or returned an unusable payload
        """
        cached = await self._find_review(request.review_type, request.content_id)
        if cached is not None:
            times_reused = await self.review_repo.record_hit(cached.id)
            logger.info(
                "Review cache hit",
                review_type=request.review_type.value,
                content_id=request.content_id,
                times_reused=times_reused,
            )
            return ReviewResponse(
                review_id=cached.id,
                review=self._review_from_entry(cached),
                from_cache=True,
                times_reused=times_reused,
                reviewed_at=cached.reviewed_at,
            )

        logger.info(
            "Review cache miss",
            review_type=request.review_type.value,
            content_id=request.content_id,
        )

        lyrics = (request.lyrics or "").strip()
        if not lyrics and request.review_type == ReviewType.SONG:
            lyrics = await self._cached_lyrics(request.content_name, request.artist_name) or ""
        if not lyrics:
            raise LyricsRequiredError(request.content_name, request.artist_name)

        review, model = await self._run_review(request.content_name, request.artist_name, lyrics)
        reviewed_at = datetime.now(timezone.utc)
        entry = await self._store_review(request, review, lyrics, model, reviewed_at)

        return ReviewResponse(
            review_id=entry.id if entry else None,
            review=review,
            from_cache=False,
            times_reused=0,
            reviewed_at=reviewed_at,
        )

    async def get_review_by_id(self, review_id: UUID) -> ContentReviewCache:
        entry = await self.review_repo.get(review_id)
        if entry is None:
            raise ReviewNotFoundError(str(review_id))
        return entry

    async def _find_review(
        self, review_type: ReviewType, content_id: str
    ) -> Optional[ContentReviewCache]:
        if review_type == ReviewType.SONG:
            return await self.review_repo.get_review_for_track(content_id)
        return await self.review_repo.get_review_for_album(content_id)

    async def _cached_lyrics(self, track_name: str, artist_name: str) -> Optional[str]:
        entry = await self.review_repo.find_lyrics(
            FuzzyMatchService.normalize_cache_key(track_name),
            FuzzyMatchService.normalize_cache_key(artist_name),
        )
        return entry.lyrics if entry else None

    async def _run_review(
        self, content_name: str, artist_name: str, lyrics: str
    ) -> Tuple[ContentReview, str]:
        try:
            completion = await self.ai.complete(
                system_prompt=REVIEW_SYSTEM_PROMPT,
                user_prompt=build_review_prompt(content_name, artist_name, lyrics),
                temperature=REVIEW_TEMPERATURE,
                max_tokens=REVIEW_MAX_TOKENS,
            )
        except OpenAIError as e:
            raise UpstreamError("openai", str(e)) from e

        parsed = parse_review(completion.content)
        if isinstance(parsed, ParseError):
            logger.error("Unusable review payload", reason=parsed.reason, raw=parsed.raw[:200])
            raise UpstreamError("openai", parsed.reason)

        review = parsed.value
        logger.info(
            "Review complete",
            content=content_name,
            issues=len(review.inappropriate_content),
            rating=review.overall_rating.value,
        )
        return review, completion.model

    async def _store_review(
        self,
        request: ContentReviewRequest,
        review: ContentReview,
        lyrics: str,
        model: str,
        reviewed_at: datetime,
    ) -> Optional[ContentReviewCache]:
        """
        Persist a fresh review, or return the one a concurrent miss stored first.

        Runs in a savepoint so a failed write leaves the rest of the caller's
        transaction intact; the caller still returns the fresh review.
        """
        try:
            async with self.session.begin_nested():
                entry = await self.review_repo.save_review_if_absent(
                    request.review_type,
                    apple_track_id=request.apple_track_id,
                    apple_album_id=request.apple_album_id,
                    track_name=request.track_name,
                    album_name=request.album_name,
                    artist_name=request.artist_name,
                    normalized_track=FuzzyMatchService.normalize_cache_key(request.content_name),
                    normalized_artist=FuzzyMatchService.normalize_cache_key(request.artist_name),
                    lyrics=lyrics,
                    summary=review.summary,
                    positive_aspects=list(review.positive_aspects),
                    inappropriate_content=[
                        item.model_dump(mode="json") for item in review.inappropriate_content
                    ],
                    overall_rating=review.overall_rating.value,
                    age_recommendation=review.age_recommendation,
                    model=model,
                    reviewed_at=reviewed_at,
                )
                if entry is None:
                    logger.info("Review already cached", content_id=request.content_id)
                    entry = await self._find_review(request.review_type, request.content_id)
        except SQLAlchemyError as e:
            logger.warning(
                "Failed to cache review",
                content_id=request.content_id,
                error=str(e),
            )
            return None
        return entry

    @staticmethod
    def _review_from_entry(entry: ContentReviewCache) -> ContentReview:
        return ContentReview.model_validate(
            {
                "summary": entry.summary or "",
                "positive_aspects": entry.positive_aspects or [],
                "inappropriate_content": entry.inappropriate_content or [],
                "overall_rating": entry.overall_rating,
                "age_recommendation": entry.age_recommendation or "",
            }
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # LYRICS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_or_fetch_lyrics(self, track_name: str, artist_name: str) -> LyricsResponse:
        """
        Cached lyrics for a song, or lyrics fetched from the provider.

        A miss everywhere is a normal ``found=False`` result, not an error.
        """
        cached = await self.review_repo.find_lyrics(
            FuzzyMatchService.normalize_cache_key(track_name),
            FuzzyMatchService.normalize_cache_key(artist_name),
        )
        if cached is not None and cached.lyrics:
            logger.info("Lyrics cache hit", track=track_name, artist=artist_name)
            return LyricsResponse(
                found=True,
                lyrics=cached.lyrics,
                source="cache",
                matched_track_name=cached.track_name,
                matched_artist_name=cached.artist_name,
            )

        logger.info("Lyrics cache miss", track=track_name, artist=artist_name)

        combinations = FuzzyMatchService.candidate_combinations(
            track_name, artist_name, limit=settings.LYRICS_MAX_COMBINATIONS
        )
        for attempt, (track_variant, artist_variant) in enumerate(combinations, start=1):
            logger.debug(
                "Lyrics fetch attempt",
                attempt=attempt,
                of=len(combinations),
                track=track_variant,
                artist=artist_variant,
            )
            found = await self._try_combination(track_variant, artist_variant)
            if found is None:
                continue

            match, lyrics = found
            await self._save_lyrics(track_name, artist_name, lyrics, match.album_name)
            if match.track_name != track_name or match.artist_name != artist_name:
                await self._save_lyrics(match.track_name, match.artist_name, lyrics, match.album_name)

            return LyricsResponse(
                found=True,
                lyrics=lyrics,
                source=LYRICS_SOURCE,
                matched_track_name=match.track_name,
                matched_artist_name=match.artist_name,
            )

        found = await self._try_fallback(track_name, artist_name)
        if found is not None:
            match, lyrics = found
            await self._save_lyrics(track_name, artist_name, lyrics, match.album_name)
            await self._save_lyrics(match.track_name, match.artist_name, lyrics, match.album_name)
            return LyricsResponse(
                found=True,
                lyrics=lyrics,
                source=LYRICS_FALLBACK_SOURCE,
                matched_track_name=match.track_name,
                matched_artist_name=match.artist_name,
            )

        logger.info(
            "Lyrics not found",
            track=track_name,
            artist=artist_name,
            combinations=len(combinations),
        )
        return LyricsResponse(
            found=False,
            message=(
                f'Lyrics not found for "{track_name}" by "{artist_name}". The song may be '
                "instrumental, too new, or not in the lyrics database."
            ),
        )

    async def _try_combination(
        self, track_name: str, artist_name: str
    ) -> Optional[Tuple[LyricTrack, str]]:
        try:
            candidates = await self.lyrics.search_tracks(track_name, artist_name)
        except UpstreamError as e:
            logger.info("Lyrics search failed, trying next combination", reason=e.reason)
            return None

        best = FuzzyMatchService.best_match(
            candidates, track_name, artist_name, threshold=self.match_threshold
        )
        if best is None:
            return None

        logger.debug(
            "Lyrics match",
            track_id=best.candidate.track_id,
            score=round(best.score, 1),
            track=best.candidate.track_name,
            artist=best.candidate.artist_name,
        )
        lyrics = await self._fetch_clean_lyrics(best.candidate)
        return (best.candidate, lyrics) if lyrics else None

    async def _try_fallback(
        self, track_name: str, artist_name: str
    ) -> Optional[Tuple[LyricTrack, str]]:
        try:
            candidates = await self.lyrics.search_by_query(
                f"{track_name} {artist_name}", page_size=settings.LYRICS_FALLBACK_PAGE_SIZE
            )
        except UpstreamError as e:
            logger.info("Lyrics fallback search failed", reason=e.reason)
            return None

        for candidate in candidates:
            lyrics = await self._fetch_clean_lyrics(candidate)
            if lyrics:
                return candidate, lyrics
        return None

    async def _fetch_clean_lyrics(self, track: LyricTrack) -> Optional[str]:
        try:
            raw = await self.lyrics.fetch_lyrics(track.track_id)
        except UpstreamError as e:
            logger.info("Lyrics fetch failed", track_id=track.track_id, reason=e.reason)
            return None
        if not raw:
            return None

        cleaned = FuzzyMatchService.clean_lyrics(raw)
        if len(cleaned) < settings.LYRICS_MIN_LENGTH:
            return None
        return cleaned

    async def _save_lyrics(
        self,
        track_name: str,
        artist_name: str,
        lyrics: str,
        album_name: Optional[str] = None,
    ) -> None:
        try:
            async with self.session.begin_nested():
                entry = await self.review_repo.save_lyrics_if_absent(
                    track_name=track_name,
                    artist_name=artist_name,
                    normalized_track=FuzzyMatchService.normalize_cache_key(track_name),
                    normalized_artist=FuzzyMatchService.normalize_cache_key(artist_name),
                    lyrics=lyrics,
                    album_name=album_name,
                )
        except SQLAlchemyError as e:
            logger.warning(
                "Failed to cache lyrics",
                track=track_name,
                artist=artist_name,
                error=str(e),
            )
            return

        if entry is None:
            logger.debug("Lyrics already cached", track=track_name, artist=artist_name)

    # ═══════════════════════════════════════════════════════════════════════════
    # ALBUM OVERVIEWS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_or_create_album_overview(
        self, request: AlbumOverviewRequest
    ) -> AlbumOverviewResponse:
        """
        Cached album recommendation, or a fresh one from track titles.

        Raises:
            UpstreamError: AI reviewer failed or returned an unusable payload
        """
        cached = await self.overview_repo.get_by_album_id(request.apple_album_id)
        if cached is not None:
            await self.overview_repo.record_hit(cached.id)
            logger.info("Album overview cache hit", album=request.album_name)
            return AlbumOverviewResponse(
                apple_album_id=cached.apple_album_id,
                overview=self._overview_from_entry(cached),
                from_cache=True,
                track_count=cached.track_count,
            )

        logger.info("Album overview cache miss", album=request.album_name)

        tracks = [(track.name, track.is_explicit) for track in request.tracks]
        try:
            completion = await self.ai.complete(
                system_prompt=ALBUM_OVERVIEW_SYSTEM_PROMPT,
                user_prompt=build_album_overview_prompt(
                    request.album_name,
                    request.artist_name,
                    tracks,
                    request.editorial_notes,
                ),
                temperature=REVIEW_TEMPERATURE,
                max_tokens=ALBUM_OVERVIEW_MAX_TOKENS,
            )
        except OpenAIError as e:
            raise UpstreamError("openai", str(e)) from e

        parsed = parse_album_overview(completion.content)
        if isinstance(parsed, ParseError):
            logger.error("Unusable album overview payload", reason=parsed.reason)
            raise UpstreamError("openai", parsed.reason)

        overview = parsed.value
        try:
            async with self.session.begin_nested():
                await self.overview_repo.save_if_absent(
                    request.apple_album_id,
                    album_name=request.album_name,
                    artist_name=request.artist_name,
                    track_count=len(tracks),
                    overall_impression=overview.overall_impression,
                    artist_profile=overview.artist_profile,
                    recommendation=overview.recommendation.value,
                    suggested_action=overview.suggested_action,
                    model=completion.model,
                )
        except SQLAlchemyError as e:
            logger.warning("Failed to cache album overview", album=request.album_name, error=str(e))

        return AlbumOverviewResponse(
            apple_album_id=request.apple_album_id,
            overview=overview,
            from_cache=False,
            track_count=len(tracks),
        )

    async def get_cached_overviews(
        self, apple_album_ids: Sequence[str]
    ) -> Dict[str, CachedOverviewSummary]:
        """Cached recommendations for the given album ids; uncached ids are absent."""
        entries = await self.overview_repo.get_many(apple_album_ids)
        return {
            entry.apple_album_id: CachedOverviewSummary(
                recommendation=entry.recommendation,
                suggested_action=entry.suggested_action,
            )
            for entry in entries
        }

    @staticmethod
    def _overview_from_entry(entry: AlbumOverviewCache) -> AlbumOverview:
        return AlbumOverview(
            overall_impression=entry.overall_impression,
            artist_profile=entry.artist_profile,
            recommendation=entry.recommendation,
            suggested_action=entry.suggested_action,
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # STATS & ADMINISTRATION
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_cache_stats(self, top_n: Optional[int] = None) -> CacheStatsResponse:
        """
        Aggregate review-cache efficiency.

        Every review row cost one AI call; every reuse saved one.
        """
        entries, hits = await self.review_repo.review_totals()
        total_requests = entries + hits
        hit_rate = hits / total_requests if total_requests else 0.0

        top: List[TopReviewedItem] = [
            TopReviewedItem(
                name=entry.track_name or entry.album_name or "",
                artist=entry.artist_name,
                times_reused=entry.times_reused,
                rating=entry.overall_rating,
            )
            for entry in await self.review_repo.most_reused(top_n or settings.CACHE_STATS_TOP_N)
        ]

        return CacheStatsResponse(
            total_cache_entries=entries,
            total_cache_hits=hits,
            total_api_calls=entries,
            total_requests=total_requests,
            cache_hit_rate=hit_rate,
            cost_saved=round(hits * settings.REVIEW_COST_PER_CALL, 2),
            cost_spent=round(entries * settings.REVIEW_COST_PER_CALL, 2),
            top_reviewed=top,
        )

    async def clear_review(self, content_id: str) -> int:
        deleted = await self.review_repo.clear_for_content_id(content_id)
        logger.info("Cleared cached review", content_id=content_id, deleted=deleted)
        return deleted

    async def clear_review_by_name(self, name: str, artist_name: str) -> int:
        deleted = await self.review_repo.clear_for_names(
            FuzzyMatchService.normalize_cache_key(name),
            FuzzyMatchService.normalize_cache_key(artist_name),
        )
        logger.info("Cleared cached reviews by name", name=name, artist=artist_name, deleted=deleted)
        return deleted

    async def clear_lyrics_only(self) -> int:
        deleted = await self.review_repo.clear_lyrics_only()
        logger.info("Purged lyrics-only cache entries", deleted=deleted)
        return deleted

    async def clear_all(self) -> int:
        deleted = await self.review_repo.clear_all()
        logger.warning("Cleared entire review cache", deleted=deleted)
        return deleted
