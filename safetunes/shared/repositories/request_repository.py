"""
Request Repositories

Database operations for song and album requests. Both share one
implementation; the subclasses only name the model and its catalog id column.

Common Operations:
==================
- create_pending()        → Insert a pending request or return the open one
- transition()            → Move a request between statuses (compare-and-set)
- get_pending_for_target()→ Open request for a (kid, catalog id) pair
- list_for_owner()        → Parent's request queue, optionally by status
- list_for_kid()          → Kid's own request history
"""

from typing import Any, Generic, List, Optional, Tuple, TypeVar, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from safetunes.shared.models.enums import RequestKind, RequestStatus
from safetunes.shared.models.request import AlbumRequest, SongRequest
from safetunes.shared.repositories.base import BaseRepository


RequestModel = TypeVar("RequestModel", SongRequest, AlbumRequest)
AnyRequest = Union[SongRequest, AlbumRequest]


class RequestRepository(BaseRepository[RequestModel], Generic[RequestModel]):
    """Shared request queries. Use SongRequestRepository / AlbumRequestRepository."""

    kind: RequestKind
    target_column: str

    # ═══════════════════════════════════════════════════════════════════════════
    # READ OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_pending_for_target(
        self,
        kid_profile_id: UUID,
        target_id: str,
    ) -> Optional[RequestModel]:
        """Get the open request for a kid and catalog id, if any."""
        result = await self.session.execute(
            select(self.model).where(
                self.model.kid_profile_id == kid_profile_id,
                getattr(self.model, self.target_column) == target_id,
                self.model.status == RequestStatus.PENDING.value,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_owner(
        self,
        owner_id: UUID,
        status: Optional[RequestStatus] = None,
        limit: int = 100,
    ) -> List[RequestModel]:
        """Parent's requests, newest first."""
        query = select(self.model).where(self.model.owner_id == owner_id)
        if status:
            query = query.where(self.model.status == status.value)
        query = query.order_by(self.model.requested_at.desc()).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_for_kid(self, kid_profile_id: UUID, limit: int = 100) -> List[RequestModel]:
        """Kid's requests, newest first."""
        result = await self.session.execute(
            select(self.model)
            .where(self.model.kid_profile_id == kid_profile_id)
            .order_by(self.model.requested_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    # ═══════════════════════════════════════════════════════════════════════════
    # WRITE OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def create_pending(self, **values: Any) -> Tuple[RequestModel, bool]:
        """
        Create a pending request unless the kid already has one for the target.

        The partial unique index on (kid_profile_id, catalog id) WHERE pending
        makes this safe against concurrent creates: exactly one INSERT wins and
        every caller gets that row back.

        Returns:
            Tuple of (request, created)
        """
        kid_profile_id = values["kid_profile_id"]
        target_id = values[self.target_column]

        existing = await self.get_pending_for_target(kid_profile_id, target_id)
        if existing:
            return existing, False

        new_id = await self.insert_or_skip(
            conflict_columns=["kid_profile_id", self.target_column],
            conflict_where=self.model.status == RequestStatus.PENDING.value,
            status=RequestStatus.PENDING.value,
            **values,
        )
        if new_id is None:
            # Lost the race to a concurrent create
            winner = await self.get_pending_for_target(kid_profile_id, target_id)
            return winner, False

        return await self.get(new_id), True

    async def transition(
        self,
        request_id: UUID,
        from_status: RequestStatus,
        **values: Any,
    ) -> Optional[RequestModel]:
        """
        Apply a status change only if the request is still in ``from_status``.

        Returns:
            The refreshed request, or None if another transaction moved it first
        """
        changed = await self.compare_and_set(
            request_id,
            expected={"status": from_status.value},
            **values,
        )
        if not changed:
            return None
        return await self.get(request_id, fresh=True)


class SongRequestRepository(RequestRepository[SongRequest]):
    """Repository for SongRequest."""

    kind = RequestKind.SONG
    target_column = "apple_song_id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(SongRequest, session)


class AlbumRequestRepository(RequestRepository[AlbumRequest]):
    """Repository for AlbumRequest."""

    kind = RequestKind.ALBUM
    target_column = "apple_album_id"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(AlbumRequest, session)
