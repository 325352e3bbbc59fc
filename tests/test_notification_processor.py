"""Tests for the worker's notification delivery."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from safetunes.shared.adapters.push_adapter import PushTicket
from safetunes.shared.models.enums import NotificationKind, PushPlatform
from safetunes.shared.repositories.notification_batch_repository import EmailBatchRepository
from safetunes.shared.repositories.profile_repository import PushTokenRepository
from safetunes.shared.services.notification_service import NotificationMessage
from safetunes.worker.processors.notification_processor import NotificationProcessor


WEB_TOKEN = "ExponentPushToken[web-parent]"
IOS_TOKEN = "ExponentPushToken[ios-parent]"
KID_TOKEN = "ExponentPushToken[kid-ipad]"


@pytest.fixture
def push() -> MagicMock:
    push = MagicMock()

    async def send(tokens, title, body, data=None):
        return [PushTicket(token=t, ok=True) for t in tokens]

    push.send = AsyncMock(side_effect=send)
    return push


@pytest.fixture
def processor(session, push) -> NotificationProcessor:
    return NotificationProcessor(session, push=push, batch_delay=timedelta(minutes=15))


@pytest.fixture
async def devices(session, owner_id, kid):
    tokens = PushTokenRepository(session)
    await tokens.register(owner_id, WEB_TOKEN, PushPlatform.WEB)
    await tokens.register(owner_id, IOS_TOKEN, PushPlatform.IOS)
    await tokens.register(owner_id, KID_TOKEN, PushPlatform.IOS, kid_profile_id=kid.id)


def message(kind: NotificationKind, owner_id, **kwargs) -> dict:
    return NotificationMessage(kind=kind, owner_id=owner_id, **kwargs).to_dict()


@pytest.mark.usefixtures("devices")
class TestPushRouting:
    async def test_parent_push_goes_to_web(self, processor, push, owner_id):
        await processor.process(
            message(
                NotificationKind.PARENT_PUSH,
                owner_id,
                title="Emma requested a song",
                url="/dashboard",
                tag="song-request-1",
            )
        )

        push.send.assert_awaited_once()
        tokens, title, _, data = push.send.await_args.args
        assert tokens == [WEB_TOKEN]
        assert title == "Emma requested a song"
        assert data == {"url": "/dashboard", "tag": "song-request-1"}

    async def test_mobile_push_skips_kid_devices(self, processor, push, owner_id):
        await processor.process(
            message(NotificationKind.PARENT_MOBILE_PUSH, owner_id, payload={"type": "new_request"})
        )

        tokens, _, _, data = push.send.await_args.args
        assert tokens == [IOS_TOKEN]
        assert data["type"] == "new_request"

    async def test_kid_push(self, processor, push, owner_id, kid):
        await processor.process(
            message(NotificationKind.KID_PUSH, owner_id, kid_profile_id=kid.id, title="Request approved!")
        )

        tokens, title, _, _ = push.send.await_args.args
        assert tokens == [KID_TOKEN]
        assert title == "Request approved!"

    async def test_kid_push_without_kid(self, processor, push, owner_id):
        await processor.process(message(NotificationKind.KID_PUSH, owner_id))
        push.send.assert_not_awaited()


class TestDelivery:
    async def test_no_tokens_is_noop(self, processor, push, owner_id):
        await processor.process(message(NotificationKind.PARENT_PUSH, owner_id, title="Hi"))
        push.send.assert_not_awaited()

    async def test_reassigned_token_follows_device(self, session, processor, push, owner_id, kid):
        tokens = PushTokenRepository(session)
        await tokens.register(owner_id, KID_TOKEN, PushPlatform.IOS)
        await tokens.register(owner_id, KID_TOKEN, PushPlatform.IOS, kid_profile_id=kid.id)

        await processor.process(message(NotificationKind.PARENT_MOBILE_PUSH, owner_id))

        push.send.assert_not_awaited()
        assert await tokens.tokens_for_kid(kid.id) == [KID_TOKEN]

    async def test_unknown_kind(self, processor, owner_id):
        body = message(NotificationKind.PARENT_PUSH, owner_id)
        body["kind"] = "carrier_pigeon"

        with pytest.raises(ValueError):
            await processor.process(body)


class TestEmailBatch:
    async def test_items_share_open_batch(self, session, processor, owner_id):
        for name in ("Let It Be", "Yellow Submarine"):
            await processor.process(
                message(
                    NotificationKind.EMAIL_BATCH,
                    owner_id,
                    payload={"request_type": "song_request", "content_name": name},
                )
            )

        batch = await EmailBatchRepository(session).get_open_batch(owner_id)
        assert batch is not None
        assert [item["content_name"] for item in batch.pending_items] == [
            "Let It Be",
            "Yellow Submarine",
        ]
        assert all("requested_at" in item for item in batch.pending_items)
        assert batch.sent_at is None
