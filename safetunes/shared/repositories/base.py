"""
Base Repository

Generic base repository with the CRUD operations every entity repository
shares, plus the two race-tolerant write primitives the approval engine and
the caches are built on.

What This Provides:
===================
- get(id)                     → Fetch single record by UUID
- list() / count()            → Filtered listing and counting
- create() / update()         → ORM insert / update
- delete()                    → Hard delete
- insert_or_skip()            → INSERT ... ON CONFLICT DO NOTHING
- compare_and_set()           → UPDATE ... WHERE id = ? AND <expected state>
- CacheRepository.record_hit() → times_reused + 1 as a single UPDATE

Race-Tolerant Writes:
=====================
┌─────────────────────────────────────────────────────────────────────────────┐
│   insert_or_skip(conflict_columns=[...], **values)                          │
│   ┌─────────────────────────────────────────────────────────────┐          │
│   │ INSERT INTO approved_albums (...) VALUES (...)              │          │
│   │ ON CONFLICT (owner_id, apple_album_id) DO NOTHING           │          │
│   │ RETURNING id                                                │          │
│   └─────────────────────────────────────────────────────────────┘          │
│   → new id if this call inserted, None if a row already existed            │
│                                                                             │
│   compare_and_set(id, expected={"status": "pending"}, status="approved")   │
│   ┌─────────────────────────────────────────────────────────────┐          │
│   │ UPDATE song_requests SET status = 'approved', ...           │          │
│   │ WHERE id = ? AND status = 'pending'                         │          │
│   └─────────────────────────────────────────────────────────────┘          │
│   → True only for the one transaction that moved the row                   │
└─────────────────────────────────────────────────────────────────────────────┘

The existence check and the insert are the same statement, so two concurrent
writers can never both insert; the loser simply gets ``None`` back.

flush() vs commit():
====================
Repositories only flush. The session owner (get_db() for the API, the
worker loop for queue messages) commits once per unit of work.
"""

from datetime import datetime, timezone
from typing import Any, Generic, Optional, Sequence, Type, TypeVar, Union
from uuid import UUID

from sqlalchemy import ColumnElement, TextClause, delete as sql_delete, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.functions import count as sql_count

from safetunes.shared.models.base import Base


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing common CRUD operations.

    Example:
        class KidProfileRepository(BaseRepository[KidProfile]):
            def __init__(self, session: AsyncSession):
                super().__init__(KidProfile, session)
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession) -> None:
        self.model = model
        self.session = session

    # ═══════════════════════════════════════════════════════════════════════════
    # READ OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def get(self, record_id: UUID, *, fresh: bool = False) -> Optional[ModelType]:
        """
        Get a single record by its UUID.

        Args:
            record_id: The UUID of the record to fetch
            fresh: Overwrite any identity-map copy with the row as stored.
                Needed after compare_and_set(), which bypasses the ORM.

        Returns:
            The model instance if found, None otherwise
        """
        query = select(self.model).where(self.model.id == record_id)
        if fresh:
            query = query.execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 100,
        filters: Optional[dict[str, Any]] = None,
        order_by: Optional[str] = None,
        order_desc: bool = True,
    ) -> list[ModelType]:
        """
        List records with pagination and simple equality filters.

        Example:
            requests = await repo.list(
                filters={"owner_id": owner_id, "status": "pending"},
                order_by="requested_at",
            )
        """
        query = select(self.model)

        if filters:
            for field, value in filters.items():
                if hasattr(self.model, field):
                    query = query.where(getattr(self.model, field) == value)

        if order_by and hasattr(self.model, order_by):
            order_field = getattr(self.model, order_by)
            query = query.order_by(order_field.desc() if order_desc else order_field)

        query = query.offset(offset).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count(self, filters: Optional[dict[str, Any]] = None) -> int:
        """Count records matching simple equality filters."""
        query = select(sql_count()).select_from(self.model)

        if filters:
            for field, value in filters.items():
                if hasattr(self.model, field):
                    query = query.where(getattr(self.model, field) == value)

        result = await self.session.execute(query)
        return result.scalar() or 0

    # ═══════════════════════════════════════════════════════════════════════════
    # CREATE OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Create a new record and flush it to get DB-generated values.

        Returns:
            The created model instance
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def insert_or_skip(
        self,
        conflict_columns: Sequence[str],
        conflict_where: Optional[Union[ColumnElement[bool], TextClause]] = None,
        **values: Any,
    ) -> Optional[UUID]:
        """
        Insert a row unless one already occupies the unique key.

        Args:
            conflict_columns: Columns of the unique constraint / index to infer
            conflict_where: Predicate of a partial unique index, if any
            **values: Column values for the new row

        Returns:
            The new row's id, or None when an existing row won
        """
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(self.model)
        elif dialect == "sqlite":
            stmt = sqlite_insert(self.model)
        else:
            raise NotImplementedError(f"insert_or_skip is not supported on {dialect}")

        stmt = (
            stmt.values(**values)
            .on_conflict_do_nothing(index_elements=list(conflict_columns), index_where=conflict_where)
            .returning(self.model.id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    # ═══════════════════════════════════════════════════════════════════════════
    # UPDATE OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def update(self, record_id: UUID, **kwargs: Any) -> Optional[ModelType]:
        """
        Load a record, apply the given fields and flush.

        None is written through so callers can clear nullable columns
        (reviewed_at, denial_reason).

        Returns:
            Updated model instance, or None if not found
        """
        instance = await self.get(record_id)
        if not instance:
            return None

        for field, value in kwargs.items():
            if hasattr(instance, field):
                setattr(instance, field, value)

        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def compare_and_set(
        self,
        record_id: UUID,
        expected: dict[str, Any],
        **values: Any,
    ) -> bool:
        """
        Update a record only if it still matches ``expected``.

        Args:
            record_id: Record to update
            expected: Column values the row must currently hold
            **values: New column values

        Returns:
            True if this call changed the row, False if the row is missing or
            has already moved on
        """
        stmt = update(self.model).where(self.model.id == record_id)
        for field, value in expected.items():
            stmt = stmt.where(getattr(self.model, field) == value)
        stmt = stmt.values(**values).execution_options(synchronize_session=False)

        result = await self.session.execute(stmt)
        return result.rowcount == 1

    # ═══════════════════════════════════════════════════════════════════════════
    # DELETE OPERATIONS
    # ═══════════════════════════════════════════════════════════════════════════

    async def delete(self, record_id: UUID) -> bool:
        """Hard delete a record. Returns False if it did not exist."""
        instance = await self.get(record_id)
        if not instance:
            return False

        await self.session.delete(instance)
        await self.session.flush()
        return True

    async def delete_where(self, *conditions: ColumnElement[bool]) -> int:
        """Bulk delete rows matching all conditions. Returns the number removed."""
        stmt = sql_delete(self.model).where(*conditions).execution_options(
            synchronize_session=False
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0


class CacheRepository(BaseRepository[ModelType]):
    """
    Base for cache tables carrying ReuseCounterMixin columns.

    Lookups stay pure reads; hit bookkeeping is a separate single-statement
    write so concurrent hits never lose increments.
    """

    async def record_hit(self, record_id: UUID) -> int:
        """
        times_reused += 1 and touch last_accessed_at.

        Returns:
            The new times_reused value (0 if the row is gone)
        """
        stmt = (
            update(self.model)
            .where(self.model.id == record_id)
            .values(
                times_reused=self.model.times_reused + 1,
                last_accessed_at=datetime.now(timezone.utc),
            )
            .returning(self.model.times_reused)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() or 0
