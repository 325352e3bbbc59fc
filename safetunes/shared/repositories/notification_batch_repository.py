"""
EmailNotificationBatch Repository

Collects new-request items into the parent's open email batch.

Common Operations:
==================
- get_open_batch()  → Unsent batch for a parent
- append_item()     → Add an item, opening a batch if none is open
"""

from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from safetunes.shared.models.notification_batch import EmailNotificationBatch
from safetunes.shared.repositories.base import BaseRepository


class EmailBatchRepository(BaseRepository[EmailNotificationBatch]):
    """Repository for EmailNotificationBatch."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(EmailNotificationBatch, session)

    async def get_open_batch(
        self,
        owner_id: UUID,
        batch_type: str = "new_requests",
    ) -> Optional[EmailNotificationBatch]:
        result = await self.session.execute(
            select(EmailNotificationBatch)
            .where(
                EmailNotificationBatch.owner_id == owner_id,
                EmailNotificationBatch.batch_type == batch_type,
                EmailNotificationBatch.sent_at.is_(None),
            )
            .order_by(EmailNotificationBatch.first_request_at.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def append_item(
        self,
        owner_id: UUID,
        item: dict[str, Any],
        now: datetime,
        delay: timedelta,
    ) -> EmailNotificationBatch:
        """
        Append an item to the parent's open batch, or open a new one.

        The send time is fixed when the batch opens; later items ride along.
        """
        batch = await self.get_open_batch(owner_id)
        if batch is None:
            return await self.create(
                owner_id=owner_id,
                pending_items=[item],
                first_request_at=now,
                should_send_at=now + delay,
            )

        # JSON columns are not mutation-tracked; assign a new list
        batch.pending_items = [*batch.pending_items, item]
        await self.session.flush()
        await self.session.refresh(batch)
        return batch

