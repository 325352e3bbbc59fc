"""
Service Dependencies

FastAPI dependencies for service injection.

Services are created per request with the request's db session. The
notification dispatcher is process-wide: it holds no per-request state.

Usage:
======
    from safetunes.api.dependencies.services import get_approval_service

    @router.post("/songs/{request_id}/approve")
    async def approve(
        request_id: UUID,
        service: ApprovalService = Depends(get_approval_service),
    ):
        ...
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from safetunes.config.settings import settings
from safetunes.api.dependencies.database import get_db
from safetunes.shared.core.logging import logger
from safetunes.shared.services.approval_service import ApprovalService
from safetunes.shared.services.moderation_cache_service import ModerationCacheService
from safetunes.shared.services.notification_service import (
    InMemoryNotificationQueue,
    NotificationDispatcher,
    SQSNotificationQueue,
)
from safetunes.shared.services.profile_service import ProfileService
from safetunes.shared.services.query_cache_service import QueryCacheService


@lru_cache
def get_notification_dispatcher() -> NotificationDispatcher:
    """
    Process-wide dispatcher.

    Without a configured queue URL (local development) notifications are
    collected in memory and never delivered.
    """
    if settings.SQS_NOTIFICATION_QUEUE_URL:
        return NotificationDispatcher(SQSNotificationQueue())
    logger.warning("SQS_NOTIFICATION_QUEUE_URL not set; notifications will not be delivered")
    return NotificationDispatcher(InMemoryNotificationQueue())


async def get_approval_service(
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> ApprovalService:
    return ApprovalService(db, dispatcher)


async def get_moderation_service(
    db: AsyncSession = Depends(get_db),
) -> ModerationCacheService:
    return ModerationCacheService(db)


async def get_query_cache_service(
    db: AsyncSession = Depends(get_db),
) -> QueryCacheService:
    return QueryCacheService(db)


async def get_profile_service(
    db: AsyncSession = Depends(get_db),
) -> ProfileService:
    return ProfileService(db)
