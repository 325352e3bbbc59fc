"""
Authentication Dependencies

FastAPI dependencies for parent-account authentication.

Accounts live in the auth service; SafeTunes only verifies the bearer JWT it
issued and reads the account id from the ``user_id`` claim.

Dependency Hierarchy:
=====================
    get_current_user_token()  ← Extract and validate JWT from header
           │
           ▼
    get_current_user()        ← Check the payload carries an account id
           │
           ▼
    get_current_owner_id()    ← Account id as a UUID (for most routes)

Type Aliases:
=============
    CurrentUser  - Decoded user data as dict
    CurrentOwner - Parent account id

Usage:
======
    from safetunes.api.dependencies.auth import CurrentOwner

    @router.get("/kids")
    async def list_kids(owner_id: CurrentOwner):
        ...
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ...config.settings import settings
from ...shared.core.exceptions import AuthenticationError
from ...shared.utils.security import SecurityUtils


# auto_error=False so a missing header goes through AuthenticationError (401)
security = HTTPBearer(auto_error=False)


async def get_current_user_token(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)] = None,
) -> dict:
    """
    Extract and validate JWT token from Authorization header.

    Raises:
        AuthenticationError: If token is missing or invalid
    """
    if not credentials:
        raise AuthenticationError("Authorization header required")

    try:
        return SecurityUtils.decode_access_token(
            credentials.credentials,
            settings.SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )
    except ValueError as e:
        raise AuthenticationError(str(e)) from e


async def get_current_user(
    token: Annotated[dict, Depends(get_current_user_token)],
) -> dict:
    """
    Get current authenticated user from token.

    Raises:
        AuthenticationError: If user_id not in token
    """
    user_id = token.get("user_id")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    return {
        "user_id": user_id,
        "email": token.get("email"),
    }


async def get_current_owner_id(
    user: Annotated[dict, Depends(get_current_user)],
) -> UUID:
    try:
        return UUID(str(user["user_id"]))
    except ValueError as e:
        raise AuthenticationError("Invalid account id in token") from e


# ═══════════════════════════════════════════════════════════════════════════════
# TYPE ALIASES
# ═══════════════════════════════════════════════════════════════════════════════

CurrentUser = Annotated[dict, Depends(get_current_user)]

# Parent account id (most common dependency)
CurrentOwner = Annotated[UUID, Depends(get_current_owner_id)]
