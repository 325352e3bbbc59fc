"""Tests for notification messages, queues and the dispatcher."""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from safetunes.shared.models import AlbumRequest, SongRequest
from safetunes.shared.models.enums import NotificationKind, RequestStatus
from safetunes.shared.services.notification_service import (
    NotificationDispatcher,
    NotificationMessage,
    SQSNotificationQueue,
)


def make_song_request(status: RequestStatus = RequestStatus.PENDING) -> SongRequest:
    return SongRequest(
        id=uuid.uuid4(),
        owner_id=uuid.uuid4(),
        kid_profile_id=uuid.uuid4(),
        apple_song_id="1441133180",
        song_name="Let It Be",
        artist_name="The Beatles",
        status=status.value,
    )


def make_album_request(status: RequestStatus = RequestStatus.PENDING) -> AlbumRequest:
    return AlbumRequest(
        id=uuid.uuid4(),
        owner_id=uuid.uuid4(),
        kid_profile_id=uuid.uuid4(),
        apple_album_id="1441164426",
        album_name="Abbey Road",
        artist_name="The Beatles",
        status=status.value,
    )


class TestNotificationMessage:
    def test_dict_round_trip(self):
        message = NotificationMessage(
            kind=NotificationKind.KID_PUSH,
            owner_id=uuid.uuid4(),
            kid_profile_id=uuid.uuid4(),
            title="Request approved!",
            tag="song-review-1",
            payload={"type": "request_approved"},
        )

        data = message.to_dict()

        assert data["kind"] == "kid_push"
        assert isinstance(data["owner_id"], str)
        assert NotificationMessage.from_dict(data) == message

    def test_missing_kid_profile(self):
        message = NotificationMessage(kind=NotificationKind.PARENT_PUSH, owner_id=uuid.uuid4())
        assert message.to_dict()["kid_profile_id"] is None
        assert NotificationMessage.from_dict(message.to_dict()).kid_profile_id is None


class TestDispatcher:
    async def test_parent_notified_on_three_channels(self, dispatcher, queue):
        request = make_song_request()

        await dispatcher.notify_parent_of_request(request, "Emma")

        email, web, mobile = queue.drain()
        assert email.kind == NotificationKind.EMAIL_BATCH
        assert email.payload == {
            "request_type": "song_request",
            "request_id": str(request.id),
            "kid_name": "Emma",
            "content_name": "Let It Be",
            "artist_name": "The Beatles",
        }
        assert web.kind == NotificationKind.PARENT_PUSH
        assert web.title == "Emma requested a song"
        assert web.url == "/dashboard"
        assert web.tag == f"song-request-{request.id}"
        assert mobile.kind == NotificationKind.PARENT_MOBILE_PUSH
        assert mobile.title == "Emma requested music"
        assert mobile.payload == {"type": "new_request"}

    async def test_album_request_wording(self, dispatcher, queue):
        request = make_album_request()

        await dispatcher.notify_parent_of_request(request, "Noah")

        _, web, _ = queue.drain()
        assert web.title == "Noah requested an album"
        assert web.tag == f"album-request-{request.id}"

    @pytest.mark.parametrize(
        "status, title, event",
        [
            (RequestStatus.APPROVED, "Request approved!", "request_approved"),
            (RequestStatus.PARTIALLY_APPROVED, "Request reviewed", "request_partially_approved"),
            (RequestStatus.DENIED, "Request reviewed", "request_denied"),
        ],
    )
    async def test_kid_review_push(self, dispatcher, queue, status, title, event):
        request = make_song_request(status)

        await dispatcher.notify_kid_of_review(request)

        (message,) = queue.drain()
        assert message.kind == NotificationKind.KID_PUSH
        assert message.kid_profile_id == request.kid_profile_id
        assert message.title == title
        assert message.payload == {"type": event}
        assert message.tag == f"song-review-{request.id}"

    async def test_queue_failure_is_swallowed(self):
        broken = MagicMock()
        broken.enqueue = AsyncMock(side_effect=RuntimeError("queue down"))
        dispatcher = NotificationDispatcher(broken)

        sent = await dispatcher.send(
            NotificationMessage(kind=NotificationKind.PARENT_PUSH, owner_id=uuid.uuid4())
        )
        await dispatcher.notify_parent_of_request(make_song_request(), "Emma")

        assert sent is False
        assert broken.enqueue.await_count == 4


class TestSQSNotificationQueue:
    async def test_enqueue_serializes_message(self):
        sqs = MagicMock()
        queue = SQSNotificationQueue(sqs=sqs)
        message = NotificationMessage(
            kind=NotificationKind.PARENT_PUSH,
            owner_id=uuid.uuid4(),
            title="Emma requested a song",
        )

        await queue.enqueue(message)

        sqs.send_notification.assert_called_once_with(message.to_dict())
