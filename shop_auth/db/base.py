from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID as PyUUID

from sqlalchemy import MetaData, DateTime, Integer, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# Standardized naming convention for alembic-friendly constraints/indexes.
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Declarative base class with metadata naming conventions."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class UUIDPkMixin:
    """Mixin that provides a UUID primary key. Ids are assigned by the domain, not the database."""
    id: Mapped[PyUUID] = mapped_column(UUID(as_uuid=True), primary_key=True)


class TenantMixin:
    """Mixin that provides tenant scoping, defaulting to the session's app.tenant_id GUC."""
    tenant_code: Mapped[PyUUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
        index=True,
        server_default=text("NULLIF(current_setting('app.tenant_id', true), '')::uuid"),
    )


class AuditMixin:
    """Mixin with creation/last-change provenance and the optimistic concurrency version."""
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )
    created_by: Mapped[str] = mapped_column(Text, nullable=False)
    created_correlation_id: Mapped[PyUUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    created_execution_origin: Mapped[str] = mapped_column(Text, nullable=False)
    created_business_operation_code: Mapped[str] = mapped_column(Text, nullable=False)

    last_changed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_changed_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_changed_correlation_id: Mapped[Optional[PyUUID]] = mapped_column(UUID(as_uuid=True), nullable=True)
    last_changed_execution_origin: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_changed_business_operation_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    entity_version: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("1"))
