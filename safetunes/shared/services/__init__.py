"""
Business Logic Services

Services encapsulate business logic and coordinate between repositories,
external services, and domain rules.

Service Pattern:
================
    Handler → Service → Repository → Database
                ↘ External APIs / notification queue

Services should:
- Contain business logic and validation
- Coordinate multiple repositories if needed
- Flush, never commit (the session owner commits)
- NOT handle HTTP concerns (that's for handlers)

Available Services:
===================
- ApprovalService: Request lifecycle and the approved library
- ModerationCacheService: Cached AI reviews, lyrics and album overviews
- QueryCacheService: Cached AI search and recommendations
- ProfileService: Kid profiles and push-token registration
- NotificationDispatcher: Enqueues lifecycle notifications
- FuzzyMatchService: Name normalization and similarity scoring

Usage:
======
    from safetunes.shared.services import ApprovalService

    service = ApprovalService(db, dispatcher)
    result = await service.approve(RequestKind.SONG, request_id, owner_id)
"""

from safetunes.shared.services.approval_service import ApprovalResult, ApprovalService
from safetunes.shared.services.fuzzy_match_service import FuzzyMatchService
from safetunes.shared.services.moderation_cache_service import ModerationCacheService
from safetunes.shared.services.notification_service import (
    InMemoryNotificationQueue,
    NotificationDispatcher,
    NotificationMessage,
    SQSNotificationQueue,
)
from safetunes.shared.services.profile_service import ProfileService
from safetunes.shared.services.query_cache_service import QueryCacheService

__all__ = [
    "ApprovalResult",
    "ApprovalService",
    "FuzzyMatchService",
    "ModerationCacheService",
    "InMemoryNotificationQueue",
    "NotificationDispatcher",
    "NotificationMessage",
    "SQSNotificationQueue",
    "ProfileService",
    "QueryCacheService",
]
