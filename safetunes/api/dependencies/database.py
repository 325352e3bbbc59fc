"""
Database Dependency

FastAPI dependency for database sessions.

The session is committed after the handler returns and rolled back if it
raises, so a request transition and its approved-library writes land
together or not at all.

Usage:
======
    from safetunes.api.dependencies.database import DbSession

    @router.get("/kids")
    async def list_kids(db: DbSession):
        return await KidProfileRepository(db).list_for_owner(owner_id)
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from safetunes.shared.db import get_db as _get_db


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for database sessions.

    Yields:
        AsyncSession: Database session for the current request
    """
    async for session in _get_db():
        yield session


# Type alias for cleaner route signatures
DbSession = Annotated[AsyncSession, Depends(get_db)]
