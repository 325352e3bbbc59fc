"""
Enums used across the application.
"""

from enum import Enum


class RequestKind(str, Enum):
    """What a kid asked for. Songs and albums live in separate tables."""

    SONG = "song"
    ALBUM = "album"


class RequestStatus(str, Enum):
    """
    Request lifecycle state.

        pending ──approve──► approved ──undo──► pending
           │  ▲
      deny │  │ undo-deny
           ▼  │
         denied ──approve-denied──► approved

        pending ──partially-approve──► partially_approved
    """

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    PARTIALLY_APPROVED = "partially_approved"


class ReviewType(str, Enum):
    """Which catalog id a content review is keyed by."""

    SONG = "song"
    ALBUM = "album"


class CacheEntryKind(str, Enum):
    """
    What a content_review_cache row holds.

    LYRICS_ONLY rows carry raw lyrics fetched ahead of a review and must never
    be surfaced as a safety verdict.
    """

    LYRICS_ONLY = "lyrics_only"
    REVIEW = "review"


class OverallRating(str, Enum):
    """AI verdict for a single song."""

    APPROPRIATE = "appropriate"
    USE_CAUTION = "use-caution"
    INAPPROPRIATE = "inappropriate"


class ConcernSeverity(str, Enum):
    """Severity of one flagged passage."""

    MILD = "mild"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"
    SEVERE = "severe"


class AlbumRecommendation(str, Enum):
    """Coarse album-level recommendation (no per-track lyric analysis)."""

    LIKELY_SAFE = "Likely Safe"
    REVIEW_RECOMMENDED = "Review Recommended"
    DETAILED_REVIEW_REQUIRED = "Detailed Review Required"


class NotificationKind(str, Enum):
    """Outbound notification message types consumed by the worker."""

    PARENT_PUSH = "parent_push"
    PARENT_MOBILE_PUSH = "parent_mobile_push"
    KID_PUSH = "kid_push"
    EMAIL_BATCH = "email_batch"


class PushPlatform(str, Enum):
    """Device family a push token was registered from."""

    WEB = "web"
    IOS = "ios"
    ANDROID = "android"
