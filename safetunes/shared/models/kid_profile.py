"""
KidProfile Entity Model

A child under a parent account. Requests and approved songs are scoped to a
profile; the name appears in parent-facing notification text.
"""

import uuid

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from safetunes.shared.models.base import Base, TimestampMixin


class KidProfile(Base, TimestampMixin):
    """
    KidProfile model.

    Attributes:
        id: Unique identifier (UUID v4)
        owner_id: Parent account that manages this profile
        name: Display name ("Emma")
    """

    __tablename__ = "kid_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<KidProfile(id={self.id}, name={self.name})>"
