"""
EmailNotificationBatch Entity Model

New-request emails are batched per parent: the first request opens a batch
with ``should_send_at = first_request_at + EMAIL_BATCH_DELAY_MINUTES``, later
requests are appended until the batch is sent. Sending itself is handled by
the email service outside this repo.

SAMPLE BATCH:
┌──────────────────────────────────────────────────────────────────────────────┐
│ owner_id         │ 550e8400-e29b-41d4-a716-446655440000                      │
│ pending_items    │ [{"item_type": "song_request", "kid_name": "Emma", ...}]  │
│ first_request_at │ 2024-01-15T10:30:00Z                                      │
│ should_send_at   │ 2024-01-15T10:45:00Z                                      │
│ sent_at          │ NULL  (open batch)                                        │
└──────────────────────────────────────────────────────────────────────────────┘
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from safetunes.shared.models.base import Base, TimestampMixin


class EmailNotificationBatch(Base, TimestampMixin):
    """Pending request-notification items for one parent."""

    __tablename__ = "email_notification_batches"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    batch_type: Mapped[str] = mapped_column(String(32), nullable=False, default="new_requests")

    # [{item_type, item_id, kid_name, content_name, artist_name, requested_at}]
    pending_items: Mapped[list[Any]] = mapped_column(nullable=False)

    first_request_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    should_send_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_open(self) -> bool:
        return self.sent_at is None
