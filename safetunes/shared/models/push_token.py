"""
PushToken Entity Model

Expo push tokens registered by the parent app (web or mobile) or by a kid's
device. The worker resolves notification recipients to tokens through this
table.

Recipient Resolution:
=====================
    parent_push         → owner tokens, platform = web
    parent_mobile_push  → owner tokens, platform in (ios, android)
    kid_push            → tokens registered for the kid profile
"""

import uuid
from typing import Optional

from sqlalchemy import String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from safetunes.shared.models.base import Base, TimestampMixin
from safetunes.shared.models.enums import PushPlatform


class PushToken(Base, TimestampMixin):
    """
    PushToken model.

    Attributes:
        owner_id: Account the device belongs to
        kid_profile_id: Set when the device is a kid's player; None for parent devices
        token: Expo push token ("ExponentPushToken[...]")
        platform: web / ios / android
    """

    __tablename__ = "push_tokens"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    kid_profile_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)

    token: Mapped[str] = mapped_column(Text, nullable=False, unique=True)

    platform: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=PushPlatform.IOS.value,
    )
