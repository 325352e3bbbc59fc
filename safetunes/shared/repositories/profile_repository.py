"""
Profile Repositories

Kid profiles and the push tokens registered for parents and kids.
"""

from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from safetunes.shared.models.enums import PushPlatform
from safetunes.shared.models.kid_profile import KidProfile
from safetunes.shared.models.push_token import PushToken
from safetunes.shared.repositories.base import BaseRepository


class KidProfileRepository(BaseRepository[KidProfile]):
    """Repository for KidProfile."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(KidProfile, session)

    async def list_for_owner(self, owner_id: UUID) -> List[KidProfile]:
        result = await self.session.execute(
            select(KidProfile).where(KidProfile.owner_id == owner_id).order_by(KidProfile.name)
        )
        return list(result.scalars().all())


class PushTokenRepository(BaseRepository[PushToken]):
    """Repository for PushToken."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(PushToken, session)

    async def get_by_token(self, token: str) -> Optional[PushToken]:
        result = await self.session.execute(select(PushToken).where(PushToken.token == token))
        return result.scalar_one_or_none()

    async def register(
        self,
        owner_id: UUID,
        token: str,
        platform: PushPlatform,
        kid_profile_id: Optional[UUID] = None,
    ) -> PushToken:
        """
        Register a device token, re-pointing it if the device changed hands.
        """
        existing = await self.get_by_token(token)
        if existing:
            return await self.update(
                existing.id,
                owner_id=owner_id,
                kid_profile_id=kid_profile_id,
                platform=platform.value,
            )
        return await self.create(
            owner_id=owner_id,
            kid_profile_id=kid_profile_id,
            token=token,
            platform=platform.value,
        )

    async def tokens_for_owner(
        self,
        owner_id: UUID,
        platforms: Iterable[PushPlatform],
    ) -> List[str]:
        """Parent device tokens (kid devices excluded) on the given platforms."""
        result = await self.session.execute(
            select(PushToken.token).where(
                PushToken.owner_id == owner_id,
                PushToken.kid_profile_id.is_(None),
                PushToken.platform.in_([p.value for p in platforms]),
            )
        )
        return list(result.scalars().all())

    async def tokens_for_kid(self, kid_profile_id: UUID) -> List[str]:
        result = await self.session.execute(
            select(PushToken.token).where(PushToken.kid_profile_id == kid_profile_id)
        )
        return list(result.scalars().all())
