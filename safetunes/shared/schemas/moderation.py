"""
Moderation-related Pydantic schemas.

ContentReview and AlbumOverview double as the validation schema for the AI
reviewer's JSON output, which uses camelCase keys; both accept either
spelling and serialize as snake_case.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field, model_validator

from ..models.enums import AlbumRecommendation, ConcernSeverity, OverallRating, ReviewType
from .common import BaseSchema


# ═══════════════════════════════════════════════════════════════════════════════
# AI OUTPUT
# ═══════════════════════════════════════════════════════════════════════════════


class InappropriateContentItem(BaseModel):
    """One flagged passage."""

    category: str
    severity: ConcernSeverity
    quote: str = ""
    context: str = ""


class ContentReview(BaseModel):
    """Safety verdict for a song. An empty concern list is a clean verdict."""

    summary: str
    positive_aspects: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("positiveAspects", "positive_aspects"),
    )
    inappropriate_content: List[InappropriateContentItem] = Field(
        default_factory=list,
        validation_alias=AliasChoices("inappropriateContent", "inappropriate_content"),
    )
    overall_rating: OverallRating = Field(
        validation_alias=AliasChoices("overallRating", "overall_rating"),
    )
    age_recommendation: str = Field(
        validation_alias=AliasChoices("ageRecommendation", "age_recommendation"),
    )


class AlbumOverview(BaseModel):
    """Coarse album recommendation based on titles and explicit flags."""

    overall_impression: str = Field(
        validation_alias=AliasChoices("overallImpression", "overall_impression"),
    )
    artist_profile: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("artistProfile", "artist_profile"),
    )
    recommendation: AlbumRecommendation
    suggested_action: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("suggestedAction", "suggested_action"),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# REQUESTS
# ═══════════════════════════════════════════════════════════════════════════════


class ContentReviewRequest(BaseModel):
    """
    Request a (cached) lyric review of a song or a whole album.

    Songs are keyed by ``apple_track_id``, albums by ``apple_album_id``.
    """

    review_type: ReviewType = ReviewType.SONG
    apple_track_id: Optional[str] = Field(None, description="Catalog track id (songs)")
    apple_album_id: Optional[str] = Field(None, description="Catalog album id (albums)")
    track_name: Optional[str] = None
    album_name: Optional[str] = None
    artist_name: str
    lyrics: Optional[str] = Field(
        None,
        description="Lyrics to review; required unless cached for this song",
    )

    @model_validator(mode="after")
    def check_identity(self) -> "ContentReviewRequest":
        if self.review_type == ReviewType.SONG:
            if not self.apple_track_id or not self.track_name:
                raise ValueError("Song reviews need apple_track_id and track_name")
        elif not self.apple_album_id or not self.album_name:
            raise ValueError("Album reviews need apple_album_id and album_name")
        return self

    @property
    def content_id(self) -> str:
        if self.review_type == ReviewType.SONG:
            return self.apple_track_id or ""
        return self.apple_album_id or ""

    @property
    def content_name(self) -> str:
        if self.review_type == ReviewType.SONG:
            return self.track_name or ""
        return self.album_name or ""


class AlbumTrackInfo(BaseModel):
    """A track title plus its explicit flag."""

    name: str
    is_explicit: bool = False


class AlbumOverviewRequest(BaseModel):
    """Request a (cached) album overview."""

    apple_album_id: str
    album_name: str
    artist_name: str
    tracks: List[AlbumTrackInfo] = Field(default_factory=list)
    editorial_notes: Optional[str] = None


class LyricsRequest(BaseModel):
    track_name: str = Field(min_length=1)
    artist_name: str = Field(min_length=1)


class AlbumOverviewBatchRequest(BaseModel):
    apple_album_ids: List[str] = Field(max_length=100)


class ClearReviewByNameRequest(BaseModel):
    """Clear cached entries for a song (or album) title and artist."""

    name: str = Field(min_length=1, description="Track or album title")
    artist_name: str = Field(min_length=1)


# ═══════════════════════════════════════════════════════════════════════════════
# RESPONSES
# ═══════════════════════════════════════════════════════════════════════════════


class ReviewResponse(BaseModel):
    """A verdict plus where it came from."""

    review_id: Optional[UUID] = None
    review: ContentReview
    from_cache: bool
    times_reused: int = 0
    reviewed_at: Optional[datetime] = None


class AlbumOverviewResponse(BaseModel):
    apple_album_id: str
    overview: AlbumOverview
    from_cache: bool
    track_count: int = 0


class CachedOverviewSummary(BaseModel):
    """Badge data for the request list."""

    recommendation: AlbumRecommendation
    suggested_action: Optional[str] = None


class LyricsResponse(BaseModel):
    """
    Lyric lookup result. ``found=False`` is a normal outcome: the client
    should offer manual lyric entry.
    """

    found: bool
    lyrics: Optional[str] = None
    source: Optional[str] = None
    matched_track_name: Optional[str] = None
    matched_artist_name: Optional[str] = None
    message: Optional[str] = None


class TopReviewedItem(BaseModel):
    name: str
    artist: str
    times_reused: int
    rating: Optional[str] = None


class CacheStatsResponse(BaseModel):
    """Cache efficiency report."""

    total_cache_entries: int
    total_cache_hits: int
    total_api_calls: int
    total_requests: int
    cache_hit_rate: float = Field(description="hits / (hits + entries), 0..1")
    cost_saved: float
    cost_spent: float
    top_reviewed: List[TopReviewedItem]


class CachedReviewDetail(BaseSchema):
    """A stored review row as kept in the cache."""

    id: UUID
    entry_kind: str
    review_type: Optional[str] = None
    apple_track_id: Optional[str] = None
    apple_album_id: Optional[str] = None
    track_name: Optional[str] = None
    album_name: Optional[str] = None
    artist_name: str
    summary: Optional[str] = None
    inappropriate_content: Optional[List[InappropriateContentItem]] = None
    overall_rating: Optional[str] = None
    age_recommendation: Optional[str] = None
    times_reused: int
    reviewed_at: Optional[datetime] = None


class CacheClearResponse(BaseModel):
    deleted: int
