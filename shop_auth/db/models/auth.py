from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID as PyUUID

from sqlalchemy import Boolean, DateTime, Index, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from shop_auth.db.base import AuditMixin, Base, TenantMixin, UUIDPkMixin


class MfaSetupModel(UUIDPkMixin, TenantMixin, AuditMixin, Base):
    """TOTP setup row; at most one per user within a tenant."""
    __tablename__ = "auth_mfa_setups"
    __table_args__ = (
        UniqueConstraint("tenant_code", "user_id", name="uq_auth_mfa_setups_tenant_user"),
    )

    user_id: Mapped[PyUUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    encrypted_shared_secret: Mapped[str] = mapped_column(String(1024), nullable=False)
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    enabled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class PasswordHistoryModel(UUIDPkMixin, TenantMixin, AuditMixin, Base):
    """Previous password hashes of a user."""
    __tablename__ = "auth_password_histories"
    __table_args__ = (
        Index("ix_auth_password_histories_tenant_user_changed", "tenant_code", "user_id", "changed_at"),
    )

    user_id: Mapped[PyUUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(1024), nullable=False)
    changed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class ServiceClientScopeModel(UUIDPkMixin, TenantMixin, AuditMixin, Base):
    """Scope granted to a service client."""
    __tablename__ = "auth_service_client_scopes"
    __table_args__ = (
        UniqueConstraint(
            "tenant_code", "service_client_id", "scope", name="uq_auth_service_client_scopes_tenant_client_scope"
        ),
    )

    service_client_id: Mapped[PyUUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    scope: Mapped[str] = mapped_column(String(255), nullable=False)


class TokenExchangeModel(UUIDPkMixin, TenantMixin, AuditMixin, Base):
    """Token exchange audit row."""
    __tablename__ = "auth_token_exchanges"
    __table_args__ = (
        UniqueConstraint("tenant_code", "issued_token_jti", name="uq_auth_token_exchanges_tenant_issued_jti"),
    )

    user_id: Mapped[PyUUID] = mapped_column(UUID(as_uuid=True), nullable=False, index=True)
    subject_token_jti: Mapped[str] = mapped_column(String(36), nullable=False)
    requested_audience: Mapped[str] = mapped_column(Text, nullable=False)
    issued_token_jti: Mapped[str] = mapped_column(String(36), nullable=False)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
