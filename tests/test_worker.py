"""Tests for the worker's per-message acknowledge / redeliver handling."""

import uuid
from unittest.mock import MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from safetunes.shared.adapters.sqs_adapter import QueueMessage
from safetunes.shared.models.enums import NotificationKind
from safetunes.shared.repositories.notification_batch_repository import EmailBatchRepository
from safetunes.shared.services.notification_service import NotificationMessage
from safetunes.worker import main as worker


@pytest.fixture
def sessions(engine, monkeypatch):
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(worker, "AsyncSessionLocal", factory)
    return factory


def queue_message(body) -> QueueMessage:
    return QueueMessage(message_id="m-1", receipt_handle="r-1", body=body)


class TestHandleMessage:
    async def test_processed_message_is_deleted(self, sessions):
        owner_id = uuid.uuid4()
        sqs = MagicMock()
        body = NotificationMessage(
            kind=NotificationKind.EMAIL_BATCH,
            owner_id=owner_id,
            payload={"content_name": "Let It Be"},
        ).to_dict()

        handled = await worker.handle_message(sqs, queue_message(body))

        assert handled is True
        sqs.delete_message.assert_called_once_with("r-1")
        async with sessions() as session:
            batch = await EmailBatchRepository(session).get_open_batch(owner_id)
        assert batch.pending_items[0]["content_name"] == "Let It Be"

    async def test_failed_message_stays_queued(self, sessions):
        sqs = MagicMock()
        body = {"kind": "carrier_pigeon", "owner_id": str(uuid.uuid4())}

        handled = await worker.handle_message(sqs, queue_message(body))

        assert handled is False
        sqs.delete_message.assert_not_called()

    async def test_malformed_message_is_dropped(self, sessions):
        sqs = MagicMock()

        handled = await worker.handle_message(sqs, queue_message(None))

        assert handled is True
        sqs.delete_message.assert_called_once_with("r-1")
