"""
Profile Service

Kid profiles and push-token registration for a parent account.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from safetunes.shared.core.exceptions import AuthorizationError, KidProfileNotFoundError
from safetunes.shared.core.logging import get_logger
from safetunes.shared.models.enums import PushPlatform
from safetunes.shared.models.kid_profile import KidProfile
from safetunes.shared.models.push_token import PushToken
from safetunes.shared.repositories.profile_repository import (
    KidProfileRepository,
    PushTokenRepository,
)

logger = get_logger(__name__)


class ProfileService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.kid_repo = KidProfileRepository(session)
        self.token_repo = PushTokenRepository(session)

    async def create_kid(self, owner_id: UUID, name: str) -> KidProfile:
        kid = await self.kid_repo.create(owner_id=owner_id, name=name.strip())
        logger.info("Kid profile created", kid_profile_id=str(kid.id), owner_id=str(owner_id))
        return kid

    async def list_kids(self, owner_id: UUID) -> List[KidProfile]:
        return await self.kid_repo.list_for_owner(owner_id)

    async def register_device(
        self,
        owner_id: UUID,
        token: str,
        platform: PushPlatform,
        kid_profile_id: Optional[UUID] = None,
    ) -> PushToken:
        """
        Register a push token for the parent, or for one of their kids.

        Raises:
            KidProfileNotFoundError: Unknown kid profile
            AuthorizationError: Kid profile belongs to another account
        """
        if kid_profile_id is not None:
            kid = await self.kid_repo.get(kid_profile_id)
            if kid is None:
                raise KidProfileNotFoundError(str(kid_profile_id))
            if kid.owner_id != owner_id:
                raise AuthorizationError("Kid profile belongs to another account")

        push_token = await self.token_repo.register(owner_id, token, platform, kid_profile_id)
        logger.info(
            "Push token registered",
            owner_id=str(owner_id),
            platform=platform.value,
            kid_device=kid_profile_id is not None,
        )
        return push_token
