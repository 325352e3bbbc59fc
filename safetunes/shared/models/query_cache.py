"""
Discovery Cache Models

Cached AI search and recommendation responses, keyed by a SHA256 hash of the
normalized query parameters (see QueryCacheService for the key rules).
"""

import uuid
from typing import Any, Optional

from sqlalchemy import Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from safetunes.shared.models.base import Base, ReuseCounterMixin, TimestampMixin


class AISearchCache(Base, TimestampMixin, ReuseCounterMixin):
    """
    Natural-language music search result.

    Attributes:
        query_hash: sha256 of the lower-cased, trimmed query
        original_query: The query as first asked
        suggestions: Albums/artists/songs the model suggested
        search_terms: Catalog search terms to run for the suggestions
    """

    __tablename__ = "ai_search_cache"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    query_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    original_query: Mapped[str] = mapped_column(Text, nullable=False)

    suggestions: Mapped[list[Any]] = mapped_column(nullable=False)
    search_terms: Mapped[list[Any]] = mapped_column(nullable=False)
    age_range: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    genres: Mapped[Optional[list[Any]]] = mapped_column(nullable=True)

    model: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)


class AIRecommendationCache(Base, TimestampMixin, ReuseCounterMixin):
    """Recommendations for a kid age / preference / genre / restriction combination."""

    __tablename__ = "ai_recommendation_cache"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    query_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    kid_age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    music_preferences: Mapped[str] = mapped_column(Text, nullable=False)
    target_genres: Mapped[Optional[list[Any]]] = mapped_column(nullable=True)
    restrictions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # [{type, name, reason, age_appropriate, genres}]
    recommendations: Mapped[list[Any]] = mapped_column(nullable=False)

    model: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
