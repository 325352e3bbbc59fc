"""
Base processor class.
"""

from typing import Any, Dict

from safetunes.shared.models.enums import NotificationKind
from safetunes.shared.services.notification_service import NotificationMessage


class BaseProcessor:
    """Base class for notification processors."""

    async def process(self, body: Dict[str, Any]) -> None:
        """Process one queue message body."""
        message = NotificationMessage.from_dict(body)

        if message.kind == NotificationKind.PARENT_PUSH:
            return await self.handle_parent_push(message)
        if message.kind == NotificationKind.PARENT_MOBILE_PUSH:
            return await self.handle_parent_mobile_push(message)
        if message.kind == NotificationKind.KID_PUSH:
            return await self.handle_kid_push(message)
        if message.kind == NotificationKind.EMAIL_BATCH:
            return await self.handle_email_batch(message)
        raise ValueError(f"Unknown notification kind: {message.kind}")

    async def handle_parent_push(self, message: NotificationMessage) -> None:
        """Handle a push to the parent's web devices."""
        raise NotImplementedError

    async def handle_parent_mobile_push(self, message: NotificationMessage) -> None:
        """Handle a push to the parent's mobile devices."""
        raise NotImplementedError

    async def handle_kid_push(self, message: NotificationMessage) -> None:
        """Handle a push to a kid's devices."""
        raise NotImplementedError

    async def handle_email_batch(self, message: NotificationMessage) -> None:
        """Handle an item for the parent's request email batch."""
        raise NotImplementedError
