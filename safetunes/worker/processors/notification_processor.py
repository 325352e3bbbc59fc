"""
Notification processor.

Delivers NotificationMessages produced by the API:

    parent_push         → parent's web tokens        ─┐
    parent_mobile_push  → parent's ios/android tokens ├─► Expo push
    kid_push            → the kid's device tokens    ─┘
    email_batch         → appended to the parent's open email batch

A message with no registered tokens is a no-op. Expo errors propagate so the
queue redelivers the message.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from safetunes.config.settings import settings
from safetunes.shared.adapters.push_adapter import ExpoPushAdapter, get_push_adapter
from safetunes.shared.core.logging import get_logger
from safetunes.shared.models.enums import PushPlatform
from safetunes.shared.repositories.notification_batch_repository import EmailBatchRepository
from safetunes.shared.repositories.profile_repository import PushTokenRepository
from safetunes.shared.services.notification_service import NotificationMessage
from safetunes.worker.processors.base_processor import BaseProcessor

logger = get_logger(__name__)

MOBILE_PLATFORMS = (PushPlatform.IOS, PushPlatform.ANDROID)


class NotificationProcessor(BaseProcessor):
    def __init__(
        self,
        session: AsyncSession,
        push: Optional[ExpoPushAdapter] = None,
        batch_delay: Optional[timedelta] = None,
    ) -> None:
        self.session = session
        self.tokens = PushTokenRepository(session)
        self.batches = EmailBatchRepository(session)
        self._push = push
        self.batch_delay = batch_delay or timedelta(minutes=settings.EMAIL_BATCH_DELAY_MINUTES)

    @property
    def push(self) -> ExpoPushAdapter:
        if self._push is None:
            self._push = get_push_adapter()
        return self._push

    async def handle_parent_push(self, message: NotificationMessage) -> None:
        tokens = await self.tokens.tokens_for_owner(message.owner_id, [PushPlatform.WEB])
        await self._deliver(message, tokens)

    async def handle_parent_mobile_push(self, message: NotificationMessage) -> None:
        tokens = await self.tokens.tokens_for_owner(message.owner_id, MOBILE_PLATFORMS)
        await self._deliver(message, tokens)

    async def handle_kid_push(self, message: NotificationMessage) -> None:
        if message.kid_profile_id is None:
            logger.warning("Kid push without a kid profile", tag=message.tag)
            return
        tokens = await self.tokens.tokens_for_kid(message.kid_profile_id)
        await self._deliver(message, tokens)

    async def handle_email_batch(self, message: NotificationMessage) -> None:
        now = datetime.now(timezone.utc)
        item = {**message.payload, "requested_at": now.isoformat()}
        batch = await self.batches.append_item(message.owner_id, item, now, self.batch_delay)
        logger.info(
            "Queued request email",
            owner_id=str(message.owner_id),
            batch_id=str(batch.id),
            items=len(batch.pending_items),
        )

    async def _deliver(self, message: NotificationMessage, tokens: List[str]) -> None:
        if not tokens:
            logger.debug("No push tokens registered", kind=message.kind.value, tag=message.tag)
            return

        data = {**message.payload, "url": message.url, "tag": message.tag}
        tickets = await self.push.send(tokens, message.title, message.body, data)
        failed = [t for t in tickets if not t.ok]
        logger.info(
            "Push delivered",
            kind=message.kind.value,
            tag=message.tag,
            sent=len(tickets) - len(failed),
            failed=len(failed),
        )
