"""
Pydantic Schemas

Request and response models for the API.

Schema Categories:
==================
- common: Base schemas, list wrapper, error responses
- requests: Song/album requests and parent decisions
- library: Approved content, kid profiles, devices
- moderation: AI reviews, lyrics, album overviews, cache stats
- discovery: AI search and recommendations

Usage:
======
    from safetunes.shared.schemas.requests import SongRequestCreate, SongRequestResponse
    from safetunes.shared.schemas.common import ListResponse, ErrorResponse
"""

from safetunes.shared.schemas.common import (
    BaseSchema,
    ListResponse,
    MessageResponse,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
)
from safetunes.shared.schemas.requests import (
    SongRequestCreate,
    AlbumRequestCreate,
    ApprovalTrack,
    ApproveRequest,
    DenyRequest,
    PartialApprovalRequest,
    SongRequestResponse,
    AlbumRequestResponse,
    ApprovalResponse,
)
from safetunes.shared.schemas.library import (
    ApprovedSongResponse,
    ApprovedAlbumResponse,
    AlbumTrackResponse,
    ArtworkToggleRequest,
    KidProfileCreate,
    KidProfileResponse,
    PushTokenRegister,
    PushTokenResponse,
)
from safetunes.shared.schemas.moderation import (
    ContentReview,
    ContentReviewRequest,
    ReviewResponse,
    LyricsRequest,
    LyricsResponse,
    AlbumOverviewRequest,
    AlbumOverviewResponse,
    CacheStatsResponse,
)
from safetunes.shared.schemas.discovery import (
    SearchRequest,
    SearchResponse,
    RecommendationRequest,
    RecommendationResponse,
)

__all__ = [
    # Common
    "BaseSchema",
    "ListResponse",
    "MessageResponse",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    # Requests
    "SongRequestCreate",
    "AlbumRequestCreate",
    "ApprovalTrack",
    "ApproveRequest",
    "DenyRequest",
    "PartialApprovalRequest",
    "SongRequestResponse",
    "AlbumRequestResponse",
    "ApprovalResponse",
    # Library
    "ApprovedSongResponse",
    "ApprovedAlbumResponse",
    "AlbumTrackResponse",
    "ArtworkToggleRequest",
    "KidProfileCreate",
    "KidProfileResponse",
    "PushTokenRegister",
    "PushTokenResponse",
    # Moderation
    "ContentReview",
    "ContentReviewRequest",
    "ReviewResponse",
    "LyricsRequest",
    "LyricsResponse",
    "AlbumOverviewRequest",
    "AlbumOverviewResponse",
    "CacheStatsResponse",
    # Discovery
    "SearchRequest",
    "SearchResponse",
    "RecommendationRequest",
    "RecommendationResponse",
]
