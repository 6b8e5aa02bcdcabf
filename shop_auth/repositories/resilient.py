from __future__ import annotations

import logging
from datetime import datetime
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar
from uuid import UUID

from shop_auth.core.context import ExecutionContext, TimeProvider
from shop_auth.core.logging import log_exception_for_distributed_tracing
from shop_auth.core.pagination import PaginationInfo
from shop_auth.schemas.auth import MfaSetup, PasswordHistory, ServiceClientScope, TokenExchange

from .interfaces import (
    AggregateRepository,
    EnumerateAllItemHandler,
    EnumerateModifiedSinceItemHandler,
    MfaSetupStore,
    PasswordHistoryStore,
    ServiceClientScopeStore,
    TokenExchangeStore,
)

E = TypeVar("E")
R = TypeVar("R", bound=AggregateRepository)
T = TypeVar("T")


class ResilientRepository(Generic[E, R]):
    """
    Fault-isolating wrapper around a persistence repository.

    Guarded operations (lookups, updates, deletes) never raise: an exception from
    the wrapped repository is logged once at ERROR with the execution context and
    replaced by the operation's empty result (None, [] or False). Callers cannot
    tell "not found" from "store failed" by the return value; only the log can.

    ``exists``, ``get_by_id`` and ``register_new`` delegate without guarding, so
    their exceptions reach the caller unchanged.

    Enumeration is not served through this layer: ``enumerate_all`` and
    ``enumerate_modified_since`` invoke the handler zero times and report success.

    asyncio.CancelledError is a BaseException and is never caught here.
    """

    entity_name: str = "entity"

    def __init__(self, logger: logging.Logger, repository: R) -> None:
        if repository is None:
            raise ValueError(f"{type(self).__name__} requires a repository to wrap")
        self._logger = logger
        self._repository = repository

    @property
    def repository(self) -> R:
        return self._repository

    def _log_failure(self, execution_context: ExecutionContext, exc: Exception, operation: str) -> None:
        log_exception_for_distributed_tracing(
            self._logger,
            execution_context,
            exc,
            f"An error occurred in {type(self).__name__}.{operation}.",
            event_id=f"{self.entity_name}.{operation}.failed",
        )

    async def _get_or_none(
        self,
        execution_context: ExecutionContext,
        operation: str,
        call: Callable[[], Awaitable[Optional[T]]],
    ) -> Optional[T]:
        try:
            return await call()
        except Exception as exc:
            self._log_failure(execution_context, exc, operation)
            return None

    async def _get_many_or_empty(
        self,
        execution_context: ExecutionContext,
        operation: str,
        call: Callable[[], Awaitable[List[T]]],
    ) -> List[T]:
        try:
            return await call()
        except Exception as exc:
            self._log_failure(execution_context, exc, operation)
            return []

    async def _apply_or_false(
        self,
        execution_context: ExecutionContext,
        operation: str,
        call: Callable[[], Awaitable[bool]],
    ) -> bool:
        try:
            return await call()
        except Exception as exc:
            self._log_failure(execution_context, exc, operation)
            return False

    # PUBLIC_INTERFACE
    async def exists(self, execution_context: ExecutionContext, id: UUID) -> bool:
        """Pass-through existence check."""
        return await self._repository.exists(execution_context, id)

    # PUBLIC_INTERFACE
    async def get_by_id(self, execution_context: ExecutionContext, id: UUID) -> Optional[E]:
        """Pass-through lookup by id."""
        return await self._repository.get_by_id(execution_context, id)

    # PUBLIC_INTERFACE
    async def register_new(self, execution_context: ExecutionContext, entity: E) -> bool:
        """Pass-through insert. Failures propagate to the caller and are not logged here."""
        return await self._repository.register_new(execution_context, entity)

    # PUBLIC_INTERFACE
    async def enumerate_all(
        self,
        execution_context: ExecutionContext,
        pagination: PaginationInfo,
        handler: EnumerateAllItemHandler[E],
    ) -> bool:
        """Yields no items: ``handler`` is never called. Always returns True."""
        return True

    # PUBLIC_INTERFACE
    async def enumerate_modified_since(
        self,
        execution_context: ExecutionContext,
        time_provider: TimeProvider,
        since: datetime,
        handler: EnumerateModifiedSinceItemHandler[E],
    ) -> bool:
        """Yields no items: ``handler`` is never called. Always returns True."""
        return True


class MfaSetupRepository(ResilientRepository[MfaSetup, MfaSetupStore]):
    """Resilient access to MFA setups."""

    entity_name = "mfa_setup"

    # PUBLIC_INTERFACE
    async def get_by_user_id(self, execution_context: ExecutionContext, user_id: UUID) -> Optional[MfaSetup]:
        """Setup of ``user_id``, or None when absent or on failure."""
        return await self._get_or_none(
            execution_context,
            "get_by_user_id",
            lambda: self._repository.get_by_user_id(execution_context, user_id),
        )

    # PUBLIC_INTERFACE
    async def update(self, execution_context: ExecutionContext, mfa_setup: MfaSetup) -> bool:
        """Persist a changed setup; False when nothing was updated or on failure."""
        return await self._apply_or_false(
            execution_context,
            "update",
            lambda: self._repository.update(execution_context, mfa_setup),
        )

    # PUBLIC_INTERFACE
    async def delete_by_user_id(self, execution_context: ExecutionContext, user_id: UUID) -> bool:
        return await self._apply_or_false(
            execution_context,
            "delete_by_user_id",
            lambda: self._repository.delete_by_user_id(execution_context, user_id),
        )


class PasswordHistoryRepository(ResilientRepository[PasswordHistory, PasswordHistoryStore]):
    """Resilient access to password history entries."""

    entity_name = "password_history"

    # PUBLIC_INTERFACE
    async def get_latest_by_user_id(
        self, execution_context: ExecutionContext, user_id: UUID, count: int
    ) -> List[PasswordHistory]:
        """Latest ``count`` entries of ``user_id`` (newest first); [] on failure."""
        return await self._get_many_or_empty(
            execution_context,
            "get_latest_by_user_id",
            lambda: self._repository.get_latest_by_user_id(execution_context, user_id, count),
        )


class ServiceClientScopeRepository(ResilientRepository[ServiceClientScope, ServiceClientScopeStore]):
    """Resilient access to service client scopes."""

    entity_name = "service_client_scope"

    # PUBLIC_INTERFACE
    async def get_by_service_client_id(
        self, execution_context: ExecutionContext, service_client_id: UUID
    ) -> List[ServiceClientScope]:
        return await self._get_many_or_empty(
            execution_context,
            "get_by_service_client_id",
            lambda: self._repository.get_by_service_client_id(execution_context, service_client_id),
        )

    # PUBLIC_INTERFACE
    async def delete_by_service_client_id(
        self, execution_context: ExecutionContext, service_client_id: UUID
    ) -> bool:
        return await self._apply_or_false(
            execution_context,
            "delete_by_service_client_id",
            lambda: self._repository.delete_by_service_client_id(execution_context, service_client_id),
        )


class TokenExchangeRepository(ResilientRepository[TokenExchange, TokenExchangeStore]):
    """Resilient access to token exchange records."""

    entity_name = "token_exchange"

    # PUBLIC_INTERFACE
    async def get_by_user_id(self, execution_context: ExecutionContext, user_id: UUID) -> List[TokenExchange]:
        return await self._get_many_or_empty(
            execution_context,
            "get_by_user_id",
            lambda: self._repository.get_by_user_id(execution_context, user_id),
        )

    # PUBLIC_INTERFACE
    async def get_by_issued_token_jti(
        self, execution_context: ExecutionContext, issued_token_jti: str
    ) -> Optional[TokenExchange]:
        return await self._get_or_none(
            execution_context,
            "get_by_issued_token_jti",
            lambda: self._repository.get_by_issued_token_jti(execution_context, issued_token_jti),
        )
