from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Union
from uuid import UUID

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import get_settings

logger = logging.getLogger(__name__)

_ENGINE: AsyncEngine | None = None
_SESSION_MAKER: async_sessionmaker[AsyncSession] | None = None

_SET_TENANT_LOCAL = text("SELECT set_config('app.tenant_id', :tenant_id, true);")


def _ensure_engine_initialized() -> None:
    """
    Lazily initialize the AsyncEngine and session maker.
    """
    global _ENGINE, _SESSION_MAKER
    if _ENGINE is None:
        settings = get_settings()
        _ENGINE = create_async_engine(
            settings.async_database_url,
            echo=settings.SQL_ECHO,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_pre_ping=True,
        )
        logger.info("Created async engine for %s", _ENGINE.url.render_as_string(hide_password=True))
    if _SESSION_MAKER is None:
        _SESSION_MAKER = async_sessionmaker(
            bind=_ENGINE, expire_on_commit=False, autoflush=False, autocommit=False
        )


# PUBLIC_INTERFACE
def get_engine() -> AsyncEngine:
    """Return the global AsyncEngine instance."""
    _ensure_engine_initialized()
    assert _ENGINE is not None
    return _ENGINE


# PUBLIC_INTERFACE
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Return the global session factory."""
    _ensure_engine_initialized()
    assert _SESSION_MAKER is not None
    return _SESSION_MAKER


# PUBLIC_INTERFACE
async def set_current_tenant(
    session: AsyncSession, tenant_code: Union[str, UUID]
) -> None:
    """
    Set the current tenant for the DB session using a custom GUC.

    This enables Row-Level Security (RLS) policies that reference:
      current_setting('app.tenant_id', true)
    """
    await session.execute(
        text("SELECT set_config('app.tenant_id', :tenant_id, false);"),
        {"tenant_id": str(tenant_code)},
    )


# PUBLIC_INTERFACE
@asynccontextmanager
async def tenant_context(
    session: AsyncSession, tenant_code: Union[str, UUID]
) -> AsyncGenerator[AsyncSession, None]:
    """
    Async context manager that sets and resets the tenant GUC on the session.

    Usage:
        async with tenant_context(session, ctx.tenant_code):
            ...

    Repositories filter on tenant_code explicitly as well, so RLS is a second line.
    The GUC is also set at the start of every transaction opened inside the block,
    so it survives commits and rollbacks.
    """
    tenant_id = str(tenant_code)

    def _reapply_tenant(_session, _transaction, connection) -> None:
        # A rollback discards the GUC; every new transaction sets it again.
        connection.execute(_SET_TENANT_LOCAL, {"tenant_id": tenant_id})

    event.listen(session.sync_session, "after_begin", _reapply_tenant)
    await set_current_tenant(session, tenant_code)
    try:
        yield session
    finally:
        event.remove(session.sync_session, "after_begin", _reapply_tenant)
        # Reset to empty string (policy USING ... will fail to match and thus deny access)
        await session.execute(
            text("SELECT set_config('app.tenant_id', '', false);")
        )
