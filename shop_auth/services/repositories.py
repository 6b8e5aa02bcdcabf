from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from shop_auth.core.context import ExecutionContext
from shop_auth.core.logging import bind_execution_context
from shop_auth.db.session import get_session_maker, tenant_context
from shop_auth.repositories.postgresql import (
    MfaSetupPostgreSqlRepository,
    PasswordHistoryPostgreSqlRepository,
    ServiceClientScopePostgreSqlRepository,
    TokenExchangePostgreSqlRepository,
)
from shop_auth.repositories.resilient import (
    MfaSetupRepository,
    PasswordHistoryRepository,
    ServiceClientScopeRepository,
    TokenExchangeRepository,
)
from shop_auth.services.base import BaseService


class AuthRepositories(BaseService):
    """
    Session-scoped set of resilient auth repositories.

    Each resilient repository wraps the PostgreSQL repository of the same entity,
    all sharing this service's session, and logs under its own module logger name.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.mfa_setups = MfaSetupRepository(
            logging.getLogger(f"{MfaSetupRepository.__module__}.MfaSetupRepository"),
            MfaSetupPostgreSqlRepository(session),
        )
        self.password_histories = PasswordHistoryRepository(
            logging.getLogger(f"{PasswordHistoryRepository.__module__}.PasswordHistoryRepository"),
            PasswordHistoryPostgreSqlRepository(session),
        )
        self.service_client_scopes = ServiceClientScopeRepository(
            logging.getLogger(f"{ServiceClientScopeRepository.__module__}.ServiceClientScopeRepository"),
            ServiceClientScopePostgreSqlRepository(session),
        )
        self.token_exchanges = TokenExchangeRepository(
            logging.getLogger(f"{TokenExchangeRepository.__module__}.TokenExchangeRepository"),
            TokenExchangePostgreSqlRepository(session),
        )


# PUBLIC_INTERFACE
@asynccontextmanager
async def open_auth_repositories(execution_context: ExecutionContext) -> AsyncIterator[AuthRepositories]:
    """
    Open a session for the context tenant and yield the auth repositories bound to it.

    The tenant GUC is set for the lifetime of the block so RLS policies apply,
    and log records emitted inside carry the context's correlation id and tenant.
    """
    async with get_session_maker()() as session:
        async with tenant_context(session, execution_context.tenant_code):
            with bind_execution_context(execution_context):
                yield AuthRepositories(session)
