"""
Base Model Classes

Declarative base, portable column types and the timestamp mixin shared by
every SafeTunes model.

Model Hierarchy:
================
    Base                    ← SQLAlchemy declarative base
       │
       ├── TimestampMixin     ← Automatic created_at/updated_at
       └── ReuseCounterMixin  ← times_reused / last_accessed_at for cache rows

Portable Types:
===============
Production runs on PostgreSQL (JSONB, native UUID); the test suite runs the
same models on SQLite. ``JSONType`` resolves to JSONB on PostgreSQL and to the
generic JSON type elsewhere, and ``sqlalchemy.Uuid`` maps to a native UUID
column or CHAR(32) as the dialect allows.

Usage:
======
    from safetunes.shared.models.base import Base, TimestampMixin, JSONType

    class KidProfile(Base, TimestampMixin):
        __tablename__ = "kid_profiles"
        id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Timezone-aware current time, used for Python-side timestamp defaults."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    ``dict[str, Any]`` and ``list[Any]`` annotations map to JSONB on
    PostgreSQL so review payloads and track lists can be stored as-is.
    """

    type_annotation_map = {
        dict[str, Any]: JSONType,
        list[Any]: JSONType,
    }


class TimestampMixin:
    """
    Mixin that adds automatic timestamp tracking to models.

    Database Behavior:
    ==================
    - created_at: Set on INSERT (Python default, with CURRENT_TIMESTAMP as the
      server-side fallback for rows written outside the ORM)
    - updated_at: Set on INSERT, refreshed by SQLAlchemy on UPDATE

    created_at doubles as the insertion order used to break ties in
    "most reused" cache listings.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=utcnow,
        nullable=False,
    )


class ReuseCounterMixin:
    """
    Hit bookkeeping for cache tables.

    times_reused counts cache hits (not the original computation), so
    ``times_reused == 0`` means the entry was computed once and never served again.
    """

    times_reused: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default=text("0"),
        nullable=False,
    )

    last_accessed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )
