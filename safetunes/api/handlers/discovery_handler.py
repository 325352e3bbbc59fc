"""
Discovery Handler

AI music search and recommendations, both cached by normalized query.
"""

from fastapi import APIRouter, Depends

from safetunes.api.dependencies import CurrentOwner
from safetunes.api.dependencies.services import get_query_cache_service
from safetunes.shared.schemas.discovery import (
    RecommendationRequest,
    RecommendationResponse,
    SearchRequest,
    SearchResponse,
)
from safetunes.shared.services.query_cache_service import QueryCacheService


router = APIRouter()


@router.post("/search", response_model=SearchResponse)
async def search(
    body: SearchRequest,
    _owner_id: CurrentOwner,
    service: QueryCacheService = Depends(get_query_cache_service),
):
    return await service.search(body.query)


@router.post("/recommendations", response_model=RecommendationResponse)
async def recommend(
    body: RecommendationRequest,
    _owner_id: CurrentOwner,
    service: QueryCacheService = Depends(get_query_cache_service),
):
    return await service.recommend(body)
