"""
Capability interfaces between the resilient adapters and the stores they wrap.

Any object with matching coroutine methods satisfies these protocols; the
PostgreSQL repositories in shop_auth.repositories.postgresql are the production
implementations, and tests substitute AsyncMock objects.
"""
from __future__ import annotations

from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Protocol, TypeVar
from uuid import UUID

from shop_auth.core.context import ExecutionContext, TimeProvider
from shop_auth.core.pagination import PaginationInfo
from shop_auth.schemas.auth import MfaSetup, PasswordHistory, ServiceClientScope, TokenExchange

E = TypeVar("E")

# Handlers return True to keep enumerating and False to stop early (without error).
EnumerateAllItemHandler = Callable[[ExecutionContext, E, PaginationInfo], Awaitable[bool]]
EnumerateModifiedSinceItemHandler = Callable[
    [ExecutionContext, E, TimeProvider, datetime], Awaitable[bool]
]


class AggregateRepository(Protocol[E]):
    """Operations every entity store offers."""

    async def get_by_id(self, execution_context: ExecutionContext, id: UUID) -> Optional[E]: ...

    async def exists(self, execution_context: ExecutionContext, id: UUID) -> bool: ...

    async def register_new(self, execution_context: ExecutionContext, entity: E) -> bool: ...

    async def enumerate_all(
        self,
        execution_context: ExecutionContext,
        pagination: PaginationInfo,
        handler: EnumerateAllItemHandler[E],
    ) -> bool: ...

    async def enumerate_modified_since(
        self,
        execution_context: ExecutionContext,
        time_provider: TimeProvider,
        since: datetime,
        handler: EnumerateModifiedSinceItemHandler[E],
    ) -> bool: ...


class MfaSetupStore(AggregateRepository[MfaSetup], Protocol):
    async def get_by_user_id(self, execution_context: ExecutionContext, user_id: UUID) -> Optional[MfaSetup]: ...

    async def update(self, execution_context: ExecutionContext, mfa_setup: MfaSetup) -> bool: ...

    async def delete_by_user_id(self, execution_context: ExecutionContext, user_id: UUID) -> bool: ...


class PasswordHistoryStore(AggregateRepository[PasswordHistory], Protocol):
    async def get_latest_by_user_id(
        self, execution_context: ExecutionContext, user_id: UUID, count: int
    ) -> List[PasswordHistory]: ...


class ServiceClientScopeStore(AggregateRepository[ServiceClientScope], Protocol):
    async def get_by_service_client_id(
        self, execution_context: ExecutionContext, service_client_id: UUID
    ) -> List[ServiceClientScope]: ...

    async def delete_by_service_client_id(
        self, execution_context: ExecutionContext, service_client_id: UUID
    ) -> bool: ...


class TokenExchangeStore(AggregateRepository[TokenExchange], Protocol):
    async def get_by_user_id(self, execution_context: ExecutionContext, user_id: UUID) -> List[TokenExchange]: ...

    async def get_by_issued_token_jti(
        self, execution_context: ExecutionContext, issued_token_jti: str
    ) -> Optional[TokenExchange]: ...
