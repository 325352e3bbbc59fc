"""
API Dependencies

FastAPI dependencies for injection into route handlers.

Dependencies:
=============
- Database: get_db(), DbSession
- Authentication: get_current_user(), CurrentUser, CurrentOwner
- Services: get_*_service() functions

Type Aliases:
=============
Type aliases provide cleaner route signatures:

    # Instead of this:
    async def handler(
        db: AsyncSession = Depends(get_db),
        owner_id: UUID = Depends(get_current_owner_id)
    ):

    # Write this:
    async def handler(db: DbSession, owner_id: CurrentOwner):
"""

from safetunes.api.dependencies.database import (
    get_db,
    DbSession,
)
from safetunes.api.dependencies.auth import (
    get_current_user,
    get_current_user_token,
    get_current_owner_id,
    CurrentUser,
    CurrentOwner,
)

__all__ = [
    # Database
    "get_db",
    "DbSession",
    # Authentication
    "get_current_user",
    "get_current_user_token",
    "get_current_owner_id",
    "CurrentUser",
    "CurrentOwner",
]
