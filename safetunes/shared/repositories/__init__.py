"""
Repository Pattern Implementations

Repositories encapsulate database queries and provide a clean API for data
access. They flush but never commit.

Repository Hierarchy:
=====================
    BaseRepository[ModelType]               ← CRUD + insert_or_skip / compare_and_set
         │
         ├── KidProfileRepository
         ├── PushTokenRepository
         ├── SongRequestRepository          ← via RequestRepository
         ├── AlbumRequestRepository         ← via RequestRepository
         ├── ApprovedSongRepository
         ├── ApprovedAlbumRepository
         ├── AlbumTrackRepository
         ├── EmailBatchRepository
         └── CacheRepository[ModelType]     ← + record_hit()
                ├── ContentReviewCacheRepository
                ├── AlbumOverviewCacheRepository
                ├── AISearchCacheRepository
                └── AIRecommendationCacheRepository

Usage Example:
==============
    from safetunes.shared.repositories import SongRequestRepository

    repo = SongRequestRepository(db)
    request, created = await repo.create_pending(
        owner_id=owner_id,
        kid_profile_id=kid_id,
        apple_song_id="1441133180",
        song_name="Let It Be",
        artist_name="The Beatles",
    )
"""

from safetunes.shared.repositories.base import BaseRepository, CacheRepository
from safetunes.shared.repositories.profile_repository import (
    KidProfileRepository,
    PushTokenRepository,
)
from safetunes.shared.repositories.request_repository import (
    RequestRepository,
    SongRequestRepository,
    AlbumRequestRepository,
)
from safetunes.shared.repositories.approved_content_repository import (
    ApprovedSongRepository,
    ApprovedAlbumRepository,
    AlbumTrackRepository,
)
from safetunes.shared.repositories.moderation_cache_repository import (
    ContentReviewCacheRepository,
    AlbumOverviewCacheRepository,
)
from safetunes.shared.repositories.query_cache_repository import (
    AISearchCacheRepository,
    AIRecommendationCacheRepository,
)
from safetunes.shared.repositories.notification_batch_repository import EmailBatchRepository

__all__ = [
    "BaseRepository",
    "CacheRepository",
    "KidProfileRepository",
    "PushTokenRepository",
    "RequestRepository",
    "SongRequestRepository",
    "AlbumRequestRepository",
    "ApprovedSongRepository",
    "ApprovedAlbumRepository",
    "AlbumTrackRepository",
    "ContentReviewCacheRepository",
    "AlbumOverviewCacheRepository",
    "AISearchCacheRepository",
    "AIRecommendationCacheRepository",
    "EmailBatchRepository",
]
