"""
Query Cache Service

AI music search and recommendations, cached by a hash of the normalized query.

    search("Kids songs from the 80s ")  ─┐
    search("kids songs from the 80s")   ─┴─► sha256 ──► same cache row

Recommendation keys include the kid's age, preferences, genres (order
insensitive) and restrictions, so two parents describing the same kid share
one AI call.
"""

import hashlib
import json
from typing import Any, Dict, List, Optional

from openai import OpenAIError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from safetunes.shared.adapters.openai_adapter import OpenAIAdapter, get_openai_adapter
from safetunes.shared.core.exceptions import UpstreamError
from safetunes.shared.core.logging import get_logger
from safetunes.shared.repositories.query_cache_repository import (
    AIRecommendationCacheRepository,
    AISearchCacheRepository,
)
from safetunes.shared.schemas.discovery import (
    RecommendationItem,
    RecommendationRequest,
    RecommendationResponse,
    SearchResponse,
    SongSuggestion,
)
from safetunes.shared.services.prompts import (
    DISCOVERY_SYSTEM_PROMPT,
    build_recommendation_prompt,
    build_search_prompt,
)

logger = get_logger(__name__)

SEARCH_MAX_TOKENS = 2000
RECOMMENDATION_MAX_TOKENS = 1500


def _hash_key(parts: Dict[str, Any]) -> str:
    payload = json.dumps(parts, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def search_key(query: str) -> str:
    return _hash_key({"query": query.strip().lower()})


def recommendation_key(request: RecommendationRequest) -> str:
    return _hash_key(
        {
            "age": request.kid_age,
            "preferences": request.music_preferences.strip().lower(),
            "genres": sorted(g.strip().lower() for g in request.target_genres),
            "restrictions": (request.restrictions or "").strip().lower(),
        }
    )


class QueryCacheService:
    """Service for cached AI discovery."""

    def __init__(self, session: AsyncSession, ai: Optional[OpenAIAdapter] = None) -> None:
        self.session = session
        self.search_repo = AISearchCacheRepository(session)
        self.recommendation_repo = AIRecommendationCacheRepository(session)
        self._ai = ai

    @property
    def ai(self) -> OpenAIAdapter:
        if self._ai is None:
            self._ai = get_openai_adapter()
        return self._ai

    async def _ask(self, user_prompt: str, max_tokens: int) -> Dict[str, Any]:
        try:
            return await self.ai.complete_json(
                system_prompt=DISCOVERY_SYSTEM_PROMPT,
                user_prompt=user_prompt,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            raise UpstreamError("openai", str(e)) from e
        except ValueError as e:
            raise UpstreamError("openai", str(e)) from e

    # ═══════════════════════════════════════════════════════════════════════════
    # SEARCH
    # ═══════════════════════════════════════════════════════════════════════════

    async def search(self, query: str) -> SearchResponse:
        """
        Family-friendly song suggestions for a free-text query.

        Raises:
            UpstreamError: AI call failed or returned an unusable payload
        """
        query_hash = search_key(query)
        cached = await self.search_repo.get_by_hash(query_hash)
        if cached is not None:
            times_reused = await self.search_repo.record_hit(cached.id)
            logger.info("Search cache hit", query=query, times_reused=times_reused)
            return SearchResponse(
                query=query,
                suggestions=[SongSuggestion.model_validate(s) for s in cached.suggestions],
                age_range=cached.age_range,
                genres=cached.genres or [],
                from_cache=True,
            )

        logger.info("Search cache miss", query=query)
        data = await self._ask(build_search_prompt(query), SEARCH_MAX_TOKENS)

        try:
            suggestions = [SongSuggestion.model_validate(s) for s in data.get("songs") or []]
        except PydanticValidationError as e:
            raise UpstreamError("openai", "malformed song suggestions") from e

        age_range = data.get("ageRange")
        genres = [str(g) for g in data.get("genres") or []]

        try:
            async with self.session.begin_nested():
                await self.search_repo.save_if_absent(
                    query_hash,
                    original_query=query,
                    suggestions=[s.model_dump() for s in suggestions],
                    search_terms=[],
                    age_range=age_range,
                    genres=genres,
                    model=self.ai.model,
                )
        except SQLAlchemyError as e:
            logger.warning("Failed to cache search", query=query, error=str(e))

        return SearchResponse(
            query=query,
            suggestions=suggestions,
            age_range=age_range,
            genres=genres,
            from_cache=False,
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # RECOMMENDATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def recommend(self, request: RecommendationRequest) -> RecommendationResponse:
        """
        Artist / album / genre recommendations for a kid.

        Raises:
            UpstreamError: AI call failed or returned an unusable payload
        """
        query_hash = recommendation_key(request)
        cached = await self.recommendation_repo.get_by_hash(query_hash)
        if cached is not None:
            times_reused = await self.recommendation_repo.record_hit(cached.id)
            logger.info("Recommendation cache hit", times_reused=times_reused)
            return RecommendationResponse(
                recommendations=[
                    RecommendationItem.model_validate(r) for r in cached.recommendations
                ],
                from_cache=True,
            )

        logger.info("Recommendation cache miss", kid_age=request.kid_age)
        data = await self._ask(
            build_recommendation_prompt(
                request.kid_age,
                request.music_preferences,
                request.target_genres,
                request.restrictions,
            ),
            RECOMMENDATION_MAX_TOKENS,
        )

        try:
            items: List[RecommendationItem] = [
                RecommendationItem.model_validate(r) for r in data.get("recommendations") or []
            ]
        except PydanticValidationError as e:
            raise UpstreamError("openai", "malformed recommendations") from e

        try:
            async with self.session.begin_nested():
                await self.recommendation_repo.save_if_absent(
                    query_hash,
                    kid_age=request.kid_age,
                    music_preferences=request.music_preferences,
                    target_genres=request.target_genres,
                    restrictions=request.restrictions,
                    recommendations=[item.model_dump() for item in items],
                    model=self.ai.model,
                )
        except SQLAlchemyError as e:
            logger.warning("Failed to cache recommendations", error=str(e))

        return RecommendationResponse(recommendations=items, from_cache=False)
