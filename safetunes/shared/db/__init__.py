"""
Database Module

Database connectivity and session management for SafeTunes.

    FastAPI route / worker message
        │  get_db() / AsyncSessionLocal()
        ▼
    AsyncSession (one per unit of work, commit or rollback at the end)
        │
        ▼
    Repositories (flush only) → PostgreSQL

Usage:
======
    from safetunes.shared.db import AsyncSessionLocal

    async with AsyncSessionLocal() as session:
        repo = EmailBatchRepository(session)
        await repo.append_item(...)
        await session.commit()
"""

from safetunes.shared.db.session import (
    get_db,
    init_db,
    close_db,
    AsyncSessionLocal,
    engine,
)

__all__ = [
    "get_db",
    "init_db",
    "close_db",
    "AsyncSessionLocal",
    "engine",
]
