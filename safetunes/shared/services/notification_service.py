"""
Notification Service

Fire-and-forget notifications for request lifecycle events.

The approval engine never talks to push or email providers. It hands
NotificationMessage objects to a NotificationQueue; the worker consumes the
queue and does the delivery.

    ApprovalService ──► NotificationDispatcher ──► NotificationQueue
                                                     │
                         SQSNotificationQueue ───────┤ (production)
                         InMemoryNotificationQueue ──┘ (tests, local dev)
                                                     │
                                  worker ◄───────────┘
                                    └─► Expo push / email batch

Delivery is at-most-once and best effort: an enqueue failure is logged and
swallowed, never surfaced to the caller.
"""

import asyncio
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Union
from uuid import UUID

from safetunes.shared.adapters.sqs_adapter import SQSAdapter, get_sqs_adapter
from safetunes.shared.core.logging import get_logger
from safetunes.shared.models.enums import NotificationKind, RequestKind, RequestStatus
from safetunes.shared.models.request import AlbumRequest, SongRequest

logger = get_logger(__name__)

AnyRequest = Union[SongRequest, AlbumRequest]


@dataclass
class NotificationMessage:
    """
    One outbound notification.

    Attributes:
        kind: Delivery channel (parent push, mobile push, kid push, email batch)
        owner_id: Parent account the notification belongs to
        kid_profile_id: Recipient kid for kid_push
        title / body: Display text
        url: Deep link opened on tap
        tag: Dedupe tag; a newer notification with the same tag replaces the old one
        payload: Extra data (email batch item)
    """

    kind: NotificationKind
    owner_id: UUID
    title: str = ""
    body: str = ""
    url: Optional[str] = None
    tag: Optional[str] = None
    kid_profile_id: Optional[UUID] = None
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        data["owner_id"] = str(self.owner_id)
        data["kid_profile_id"] = str(self.kid_profile_id) if self.kid_profile_id else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NotificationMessage":
        kid_profile_id = data.get("kid_profile_id")
        return cls(
            kind=NotificationKind(data["kind"]),
            owner_id=UUID(data["owner_id"]),
            title=data.get("title", ""),
            body=data.get("body", ""),
            url=data.get("url"),
            tag=data.get("tag"),
            kid_profile_id=UUID(kid_profile_id) if kid_profile_id else None,
            payload=data.get("payload") or {},
        )


class NotificationQueue(Protocol):
    async def enqueue(self, message: NotificationMessage) -> None: ...


class SQSNotificationQueue:
    """Publishes messages to the SQS notification queue."""

    def __init__(self, sqs: Optional[SQSAdapter] = None) -> None:
        self._sqs = sqs

    @property
    def sqs(self) -> SQSAdapter:
        if self._sqs is None:
            self._sqs = get_sqs_adapter()
        return self._sqs

    async def enqueue(self, message: NotificationMessage) -> None:
        # boto3 is blocking
        await asyncio.to_thread(self.sqs.send_notification, message.to_dict())


class InMemoryNotificationQueue:
    """Collects messages in a list."""

    def __init__(self) -> None:
        self.messages: List[NotificationMessage] = []

    async def enqueue(self, message: NotificationMessage) -> None:
        self.messages.append(message)

    def drain(self) -> List[NotificationMessage]:
        messages, self.messages = self.messages, []
        return messages


def _article(kind: RequestKind) -> str:
    return "an album" if kind == RequestKind.ALBUM else "a song"


class NotificationDispatcher:
    """Builds request lifecycle notifications and enqueues them."""

    PARENT_URL = "/dashboard"
    APP_URL = "/app"

    def __init__(self, queue: NotificationQueue) -> None:
        self.queue = queue

    async def send(self, message: NotificationMessage) -> bool:
        """Enqueue one message. Returns False (after logging) on failure."""
        try:
            await self.queue.enqueue(message)
            return True
        except Exception as e:
            logger.warning(
                "Notification enqueue failed",
                kind=message.kind.value,
                owner_id=str(message.owner_id),
                tag=message.tag,
                error=str(e),
            )
            return False

    async def notify_parent_of_request(self, request: AnyRequest, kid_name: str) -> None:
        """
        New request: one email-batch item plus web and mobile pushes.

        Each message is independent; one failing does not stop the others.
        """
        kind = request.kind
        tag = f"{kind.value}-request-{request.id}"

        await self.send(
            NotificationMessage(
                kind=NotificationKind.EMAIL_BATCH,
                owner_id=request.owner_id,
                payload={
                    "request_type": f"{kind.value}_request",
                    "request_id": str(request.id),
                    "kid_name": kid_name,
                    "content_name": request.content_name,
                    "artist_name": request.artist_name,
                },
            )
        )
        await self.send(
            NotificationMessage(
                kind=NotificationKind.PARENT_PUSH,
                owner_id=request.owner_id,
                title=f"{kid_name} requested {_article(kind)}",
                body=f'"{request.content_name}" by {request.artist_name}',
                url=self.PARENT_URL,
                tag=tag,
            )
        )
        await self.send(
            NotificationMessage(
                kind=NotificationKind.PARENT_MOBILE_PUSH,
                owner_id=request.owner_id,
                title=f"{kid_name} requested music",
                body=f'{kid_name} wants to add "{request.content_name}" to their library',
                url=self.APP_URL,
                tag=tag,
                payload={"type": "new_request"},
            )
        )

    async def notify_kid_of_review(self, request: AnyRequest) -> None:
        """Push the parent's decision to the kid's devices."""
        status = RequestStatus(request.status)
        name = request.content_name

        if status == RequestStatus.APPROVED:
            title, body, event = (
                "Request approved!",
                f'"{name}" has been added to your library!',
                "request_approved",
            )
        elif status == RequestStatus.PARTIALLY_APPROVED:
            title, body, event = (
                "Request reviewed",
                f'Some songs from "{name}" were added to your library',
                "request_partially_approved",
            )
        else:
            title, body, event = (
                "Request reviewed",
                f'Your request for "{name}" wasn\'t approved',
                "request_denied",
            )

        await self.send(
            NotificationMessage(
                kind=NotificationKind.KID_PUSH,
                owner_id=request.owner_id,
                kid_profile_id=request.kid_profile_id,
                title=title,
                body=body,
                url=self.APP_URL,
                tag=f"{request.kind.value}-review-{request.id}",
                payload={"type": event},
            )
        )
