"""Queue message processors."""

from safetunes.worker.processors.base_processor import BaseProcessor
from safetunes.worker.processors.notification_processor import NotificationProcessor

__all__ = ["BaseProcessor", "NotificationProcessor"]
