"""
Discovery Cache Repositories

Hash-keyed lookups for cached AI search and recommendation results.
"""

from typing import Any, Optional, Type, TypeVar, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from safetunes.shared.models.query_cache import AIRecommendationCache, AISearchCache
from safetunes.shared.repositories.base import CacheRepository


QueryCacheModel = TypeVar("QueryCacheModel", AISearchCache, AIRecommendationCache)


class QueryCacheRepository(CacheRepository[QueryCacheModel]):
    """Shared implementation for both discovery caches."""

    def __init__(
        self,
        model: Type[Union[AISearchCache, AIRecommendationCache]],
        session: AsyncSession,
    ) -> None:
        super().__init__(model, session)

    async def get_by_hash(self, query_hash: str) -> Optional[QueryCacheModel]:
        result = await self.session.execute(
            select(self.model).where(self.model.query_hash == query_hash)
        )
        return result.scalar_one_or_none()

    async def save_if_absent(self, query_hash: str, **values: Any) -> bool:
        """Insert a result unless the hash is already cached."""
        new_id = await self.insert_or_skip(
            conflict_columns=["query_hash"],
            query_hash=query_hash,
            **values,
        )
        return new_id is not None


class AISearchCacheRepository(QueryCacheRepository[AISearchCache]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AISearchCache, session)


class AIRecommendationCacheRepository(QueryCacheRepository[AIRecommendationCache]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AIRecommendationCache, session)
