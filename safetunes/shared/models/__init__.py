"""
SafeTunes SQLAlchemy Models

Model Overview:
===============
    KidProfile                 ← child under a parent account
    PushToken                  ← device tokens for push delivery

    SongRequest / AlbumRequest ← kid requests, resolved by the parent

    ApprovedSong               ← kid-scoped song unlock
    ApprovedAlbum              ← account-scoped album unlock
    AlbumTrack                 ← stored track list of an approved album

    ContentReviewCache         ← AI song/album reviews and lyrics-only entries
    AlbumOverviewCache         ← coarse album recommendations
    AISearchCache              ← natural-language search results
    AIRecommendationCache      ← recommendation results

    EmailNotificationBatch     ← batched new-request emails

Relations are by id only; no model holds an ORM relationship to another.

Usage:
======
    from safetunes.shared.models import SongRequest, ApprovedSong, ContentReviewCache
"""

from safetunes.shared.models.base import Base, TimestampMixin, ReuseCounterMixin
from safetunes.shared.models.enums import (
    RequestKind,
    RequestStatus,
    ReviewType,
    CacheEntryKind,
    OverallRating,
    ConcernSeverity,
    AlbumRecommendation,
    NotificationKind,
    PushPlatform,
)
from safetunes.shared.models.kid_profile import KidProfile
from safetunes.shared.models.push_token import PushToken
from safetunes.shared.models.request import SongRequest, AlbumRequest
from safetunes.shared.models.approved_content import ApprovedSong, ApprovedAlbum, AlbumTrack
from safetunes.shared.models.moderation_cache import ContentReviewCache, AlbumOverviewCache
from safetunes.shared.models.query_cache import AISearchCache, AIRecommendationCache
from safetunes.shared.models.notification_batch import EmailNotificationBatch

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "ReuseCounterMixin",
    # Enums
    "RequestKind",
    "RequestStatus",
    "ReviewType",
    "CacheEntryKind",
    "OverallRating",
    "ConcernSeverity",
    "AlbumRecommendation",
    "NotificationKind",
    "PushPlatform",
    # Models
    "KidProfile",
    "PushToken",
    "SongRequest",
    "AlbumRequest",
    "ApprovedSong",
    "ApprovedAlbum",
    "AlbumTrack",
    "ContentReviewCache",
    "AlbumOverviewCache",
    "AISearchCache",
    "AIRecommendationCache",
    "EmailNotificationBatch",
]
