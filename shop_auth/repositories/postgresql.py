from __future__ import annotations

from typing import Any, List, Optional
from uuid import UUID

from shop_auth.core.context import ExecutionContext
from shop_auth.db.models.auth import (
    MfaSetupModel,
    PasswordHistoryModel,
    ServiceClientScopeModel,
    TokenExchangeModel,
)
from shop_auth.schemas.auth import MfaSetup, PasswordHistory, ServiceClientScope, TokenExchange

from .base import PostgreSqlRepository, entity_info_from_row


class MfaSetupPostgreSqlRepository(PostgreSqlRepository[MfaSetup, MfaSetupModel]):
    """MFA setups stored in auth_mfa_setups (one per user and tenant)."""

    model = MfaSetupModel

    def to_entity(self, row: MfaSetupModel) -> MfaSetup:
        return MfaSetup(
            entity_info=entity_info_from_row(row),
            user_id=row.user_id,
            encrypted_shared_secret=row.encrypted_shared_secret,
            is_enabled=row.is_enabled,
            enabled_at=row.enabled_at,
        )

    def entity_values(self, entity: MfaSetup) -> dict[str, Any]:
        return {
            "user_id": entity.user_id,
            "encrypted_shared_secret": entity.encrypted_shared_secret,
            "is_enabled": entity.is_enabled,
            "enabled_at": entity.enabled_at,
        }

    async def get_by_user_id(self, execution_context: ExecutionContext, user_id: UUID) -> Optional[MfaSetup]:
        stmt = self._select(execution_context).where(MfaSetupModel.user_id == user_id)
        return await self._fetch_one(stmt)

    async def update(self, execution_context: ExecutionContext, mfa_setup: MfaSetup) -> bool:
        return await self._update_versioned(execution_context, mfa_setup)

    async def delete_by_user_id(self, execution_context: ExecutionContext, user_id: UUID) -> bool:
        return await self._delete_where(execution_context, MfaSetupModel.user_id == user_id)


class PasswordHistoryPostgreSqlRepository(PostgreSqlRepository[PasswordHistory, PasswordHistoryModel]):
    """Password history entries stored in auth_password_histories."""

    model = PasswordHistoryModel

    def to_entity(self, row: PasswordHistoryModel) -> PasswordHistory:
        return PasswordHistory(
            entity_info=entity_info_from_row(row),
            user_id=row.user_id,
            password_hash=row.password_hash,
            changed_at=row.changed_at,
        )

    def entity_values(self, entity: PasswordHistory) -> dict[str, Any]:
        return {
            "user_id": entity.user_id,
            "password_hash": entity.password_hash,
            "changed_at": entity.changed_at,
        }

    async def get_latest_by_user_id(
        self, execution_context: ExecutionContext, user_id: UUID, count: int
    ) -> List[PasswordHistory]:
        """Most recent ``count`` entries of a user, newest first."""
        if count <= 0:
            return []
        stmt = (
            self._select(execution_context)
            .where(PasswordHistoryModel.user_id == user_id)
            .order_by(PasswordHistoryModel.changed_at.desc())
            .limit(count)
        )
        return await self._fetch_many(stmt)


class ServiceClientScopePostgreSqlRepository(PostgreSqlRepository[ServiceClientScope, ServiceClientScopeModel]):
    """Service client scopes stored in auth_service_client_scopes."""

    model = ServiceClientScopeModel

    def to_entity(self, row: ServiceClientScopeModel) -> ServiceClientScope:
        return ServiceClientScope(
            entity_info=entity_info_from_row(row),
            service_client_id=row.service_client_id,
            scope=row.scope,
        )

    def entity_values(self, entity: ServiceClientScope) -> dict[str, Any]:
        return {"service_client_id": entity.service_client_id, "scope": entity.scope}

    async def get_by_service_client_id(
        self, execution_context: ExecutionContext, service_client_id: UUID
    ) -> List[ServiceClientScope]:
        stmt = (
            self._select(execution_context)
            .where(ServiceClientScopeModel.service_client_id == service_client_id)
            .order_by(ServiceClientScopeModel.scope)
        )
        return await self._fetch_many(stmt)

    async def delete_by_service_client_id(
        self, execution_context: ExecutionContext, service_client_id: UUID
    ) -> bool:
        return await self._delete_where(
            execution_context, ServiceClientScopeModel.service_client_id == service_client_id
        )


class TokenExchangePostgreSqlRepository(PostgreSqlRepository[TokenExchange, TokenExchangeModel]):
    """Token exchange records stored in auth_token_exchanges."""

    model = TokenExchangeModel

    def to_entity(self, row: TokenExchangeModel) -> TokenExchange:
        return TokenExchange(
            entity_info=entity_info_from_row(row),
            user_id=row.user_id,
            subject_token_jti=row.subject_token_jti,
            requested_audience=row.requested_audience,
            issued_token_jti=row.issued_token_jti,
            issued_at=row.issued_at,
            expires_at=row.expires_at,
        )

    def entity_values(self, entity: TokenExchange) -> dict[str, Any]:
        return {
            "user_id": entity.user_id,
            "subject_token_jti": entity.subject_token_jti,
            "requested_audience": entity.requested_audience,
            "issued_token_jti": entity.issued_token_jti,
            "issued_at": entity.issued_at,
            "expires_at": entity.expires_at,
        }

    async def get_by_user_id(self, execution_context: ExecutionContext, user_id: UUID) -> List[TokenExchange]:
        stmt = (
            self._select(execution_context)
            .where(TokenExchangeModel.user_id == user_id)
            .order_by(TokenExchangeModel.issued_at.desc())
        )
        return await self._fetch_many(stmt)

    async def get_by_issued_token_jti(
        self, execution_context: ExecutionContext, issued_token_jti: str
    ) -> Optional[TokenExchange]:
        stmt = self._select(execution_context).where(TokenExchangeModel.issued_token_jti == issued_token_jti)
        return await self._fetch_one(stmt)
