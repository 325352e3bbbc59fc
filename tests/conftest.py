"""Shared fixtures: in-memory SQLite database and fake upstream adapters."""

import json
import uuid
from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from safetunes.shared.adapters.openai_adapter import CompletionResult
from safetunes.shared.models import Base, KidProfile
from safetunes.shared.services.notification_service import (
    InMemoryNotificationQueue,
    NotificationDispatcher,
)


def _completion(payload: Any, model: str = "gpt-4o-mini") -> CompletionResult:
    content = payload if isinstance(payload, str) else json.dumps(payload)
    return CompletionResult(
        content=content,
        model=model,
        usage_prompt_tokens=100,
        usage_completion_tokens=50,
    )


@pytest.fixture
def completion():
    """Wrap a payload (dict or raw text) the way the AI reviewer returns it."""
    return _completion


@pytest.fixture
async def engine():
    """Fresh in-memory database per test, schema created from the models."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite defers BEGIN, which breaks SAVEPOINT; emit it ourselves
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with factory() as session:
        yield session


@pytest.fixture
def owner_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
async def kid(session: AsyncSession, owner_id: uuid.UUID) -> KidProfile:
    kid = KidProfile(owner_id=owner_id, name="Emma")
    session.add(kid)
    await session.flush()
    return kid


@pytest.fixture
def queue() -> InMemoryNotificationQueue:
    return InMemoryNotificationQueue()


@pytest.fixture
def dispatcher(queue: InMemoryNotificationQueue) -> NotificationDispatcher:
    return NotificationDispatcher(queue)


@pytest.fixture
def fake_ai() -> MagicMock:
    """Stand-in for OpenAIAdapter; set complete/complete_json return values per test."""
    ai = MagicMock()
    ai.model = "gpt-4o-mini"
    ai.complete = AsyncMock()
    ai.complete_json = AsyncMock()
    return ai


@pytest.fixture
def fake_lyrics() -> MagicMock:
    """Stand-in for LyricsAdapter; every lookup comes back empty by default."""
    lyrics = MagicMock()
    lyrics.search_tracks = AsyncMock(return_value=[])
    lyrics.search_by_query = AsyncMock(return_value=[])
    lyrics.fetch_lyrics = AsyncMock(return_value=None)
    return lyrics
