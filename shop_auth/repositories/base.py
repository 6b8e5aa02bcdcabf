from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Generic, List, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import Executable, delete, exists, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shop_auth.core.context import ExecutionContext, TenantInfo, TimeProvider
from shop_auth.core.pagination import PaginationInfo
from shop_auth.core.settings import get_app_settings
from shop_auth.db.base import Base
from shop_auth.schemas.common import EntityBase, EntityInfo

from .interfaces import EnumerateAllItemHandler, EnumerateModifiedSinceItemHandler

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=EntityBase)
M = TypeVar("M", bound=Base)


class BaseRepository:
    """
    Base class for repositories providing common helpers.

    Note:
      Queries filter on the execution context tenant explicitly. When RLS is
      enabled, open the session under shop_auth.db.session.tenant_context as well.

      A failed execute or commit rolls the session back before re-raising, so
      the session stays usable for the next call.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def execute(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute a SQLAlchemy statement."""
        try:
            return await self.session.execute(statement, params or {})
        except Exception:
            await self.rollback()
            raise

    async def scalars(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return scalars."""
        result = await self.execute(statement, params)
        return result.scalars()

    async def scalar_one_or_none(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return a single scalar or None."""
        result = await self.execute(statement, params)
        return result.scalar_one_or_none()

    async def commit(self) -> None:
        """Commit current transaction."""
        try:
            await self.session.commit()
        except Exception:
            await self.rollback()
            raise

    async def rollback(self) -> None:
        """Discard the current transaction and any pending rows."""
        await self.session.rollback()

    async def add(self, entity: Any) -> None:
        """Add a single row to session."""
        self.session.add(entity)


# PUBLIC_INTERFACE
def entity_info_from_row(row: Any) -> EntityInfo:
    """Rebuild EntityInfo from the audit columns of a row."""
    return EntityInfo(
        id=row.id,
        tenant=TenantInfo(code=row.tenant_code),
        created_at=row.created_at,
        created_by=row.created_by,
        created_correlation_id=row.created_correlation_id,
        created_execution_origin=row.created_execution_origin,
        created_business_operation_code=row.created_business_operation_code,
        last_changed_at=row.last_changed_at,
        last_changed_by=row.last_changed_by,
        last_changed_correlation_id=row.last_changed_correlation_id,
        last_changed_execution_origin=row.last_changed_execution_origin,
        last_changed_business_operation_code=row.last_changed_business_operation_code,
        entity_version=row.entity_version,
    )


# PUBLIC_INTERFACE
def audit_values(info: EntityInfo) -> dict[str, Any]:
    """Column values for the audit columns of a row."""
    return {
        "id": info.id,
        "tenant_code": info.tenant.code,
        "created_at": info.created_at,
        "created_by": info.created_by,
        "created_correlation_id": info.created_correlation_id,
        "created_execution_origin": info.created_execution_origin,
        "created_business_operation_code": info.created_business_operation_code,
        "last_changed_at": info.last_changed_at,
        "last_changed_by": info.last_changed_by,
        "last_changed_correlation_id": info.last_changed_correlation_id,
        "last_changed_execution_origin": info.last_changed_execution_origin,
        "last_changed_business_operation_code": info.last_changed_business_operation_code,
        "entity_version": info.entity_version,
    }


class PostgreSqlRepository(BaseRepository, Generic[E, M]):
    """
    Tenant-scoped CRUD and enumeration for one entity type over one ORM model.

    Subclasses set ``model`` and implement the row <-> entity mapping. Database
    errors propagate; masking them is the job of the resilient adapters.
    """

    model: Type[M]

    def __init__(self, session: AsyncSession, batch_size: Optional[int] = None) -> None:
        super().__init__(session)
        self.batch_size = batch_size or get_app_settings().DEFAULT_PAGE_SIZE

    def to_entity(self, row: M) -> E:
        raise NotImplementedError

    def entity_values(self, entity: E) -> dict[str, Any]:
        """Entity-specific column values (audit columns excluded)."""
        raise NotImplementedError

    def to_row(self, entity: E) -> M:
        return self.model(**audit_values(entity.entity_info), **self.entity_values(entity))

    def _select(self, execution_context: ExecutionContext):
        return select(self.model).where(self.model.tenant_code == execution_context.tenant_code)

    async def _fetch_many(self, statement: Executable) -> List[E]:
        rows = await self.scalars(statement)
        return [self.to_entity(row) for row in rows]

    async def _fetch_one(self, statement: Executable) -> Optional[E]:
        row = await self.scalar_one_or_none(statement)
        return self.to_entity(row) if row is not None else None

    # PUBLIC_INTERFACE
    async def get_by_id(self, execution_context: ExecutionContext, id: UUID) -> Optional[E]:
        """Load one entity of the context tenant by id."""
        return await self._fetch_one(self._select(execution_context).where(self.model.id == id))

    # PUBLIC_INTERFACE
    async def exists(self, execution_context: ExecutionContext, id: UUID) -> bool:
        """Check existence without loading the row."""
        stmt = select(
            exists().where(
                self.model.id == id,
                self.model.tenant_code == execution_context.tenant_code,
            )
        )
        result = await self.execute(stmt)
        return bool(result.scalar())

    # PUBLIC_INTERFACE
    async def register_new(self, execution_context: ExecutionContext, entity: E) -> bool:
        """Insert a new entity and commit."""
        await self.add(self.to_row(entity))
        await self.commit()
        logger.debug("Inserted %s id=%s", self.model.__tablename__, entity.id)
        return True

    async def _update_versioned(self, execution_context: ExecutionContext, entity: E) -> bool:
        """
        Write ``entity`` over the stored row whose version is the one just before
        the entity's version. Returns False when no row matched (missing or stale).
        """
        values = audit_values(entity.entity_info)
        values.update(self.entity_values(entity))
        for key in (
            "id",
            "tenant_code",
            "created_at",
            "created_by",
            "created_correlation_id",
            "created_execution_origin",
            "created_business_operation_code",
        ):
            values.pop(key)
        stmt = (
            update(self.model)
            .where(
                self.model.id == entity.id,
                self.model.tenant_code == execution_context.tenant_code,
                self.model.entity_version == entity.entity_version - 1,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.execute(stmt)
        await self.commit()
        return result.rowcount == 1

    async def _delete_where(self, execution_context: ExecutionContext, *criteria: Any) -> bool:
        stmt = delete(self.model).where(
            self.model.tenant_code == execution_context.tenant_code, *criteria
        )
        result = await self.execute(stmt)
        await self.commit()
        return result.rowcount > 0

    # PUBLIC_INTERFACE
    async def enumerate_all(
        self,
        execution_context: ExecutionContext,
        pagination: PaginationInfo,
        handler: EnumerateAllItemHandler[E],
    ) -> bool:
        """
        Call ``handler`` for every entity of the requested page, ordered by id.

        An unbounded pagination walks the whole table in batches. Returns True
        when enumeration finished or the handler asked to stop.
        """
        base = self._select(execution_context).order_by(self.model.id)
        if not pagination.is_unbounded:
            stmt = base.offset(pagination.offset).limit(pagination.page_size)
            for entity in await self._fetch_many(stmt):
                if not await handler(execution_context, entity, pagination):
                    break
            return True

        offset = 0
        while True:
            batch = await self._fetch_many(base.offset(offset).limit(self.batch_size))
            for entity in batch:
                if not await handler(execution_context, entity, pagination):
                    return True
            if len(batch) < self.batch_size:
                return True
            offset += self.batch_size

    # PUBLIC_INTERFACE
    async def enumerate_modified_since(
        self,
        execution_context: ExecutionContext,
        time_provider: TimeProvider,
        since: datetime,
        handler: EnumerateModifiedSinceItemHandler[E],
    ) -> bool:
        """Call ``handler`` for every entity created or changed at or after ``since``, oldest first."""
        modified_at = func.coalesce(self.model.last_changed_at, self.model.created_at)
        base = (
            self._select(execution_context)
            .where(modified_at >= since)
            .order_by(modified_at, self.model.id)
        )
        offset = 0
        while True:
            batch = await self._fetch_many(base.offset(offset).limit(self.batch_size))
            for entity in batch:
                if not await handler(execution_context, entity, time_provider, since):
                    return True
            if len(batch) < self.batch_size:
                return True
            offset += self.batch_size
