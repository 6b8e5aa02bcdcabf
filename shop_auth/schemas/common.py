from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from shop_auth.core.context import ExecutionContext, TenantInfo


class EntityInfo(BaseModel):
    """Identity, ownership and change provenance shared by every entity."""
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(..., description="Unique identifier")
    tenant: TenantInfo = Field(..., description="Owning tenant")

    created_at: datetime = Field(..., description="Creation timestamp (UTC)")
    created_by: str = Field(..., description="User that created the entity")
    created_correlation_id: UUID
    created_execution_origin: str
    created_business_operation_code: str

    last_changed_at: Optional[datetime] = Field(default=None, description="Last change timestamp (UTC)")
    last_changed_by: Optional[str] = None
    last_changed_correlation_id: Optional[UUID] = None
    last_changed_execution_origin: Optional[str] = None
    last_changed_business_operation_code: Optional[str] = None

    entity_version: int = Field(1, ge=1, description="Optimistic concurrency version")

    # PUBLIC_INTERFACE
    @classmethod
    def register_new(cls, execution_context: ExecutionContext) -> "EntityInfo":
        """Stamp a fresh id and creation provenance taken from the context."""
        return cls(
            id=uuid4(),
            tenant=execution_context.tenant,
            created_at=execution_context.now(),
            created_by=execution_context.execution_user,
            created_correlation_id=execution_context.correlation_id,
            created_execution_origin=execution_context.execution_origin,
            created_business_operation_code=execution_context.business_operation_code,
            entity_version=1,
        )

    # PUBLIC_INTERFACE
    def changed(self, execution_context: ExecutionContext) -> "EntityInfo":
        """Return a copy carrying last-change provenance and the next version."""
        return self.model_copy(
            update={
                "last_changed_at": execution_context.now(),
                "last_changed_by": execution_context.execution_user,
                "last_changed_correlation_id": execution_context.correlation_id,
                "last_changed_execution_origin": execution_context.execution_origin,
                "last_changed_business_operation_code": execution_context.business_operation_code,
                "entity_version": self.entity_version + 1,
            }
        )

    @property
    def modified_at(self) -> datetime:
        """Timestamp of the latest change, falling back to creation."""
        return self.last_changed_at or self.created_at


class EntityBase(BaseModel):
    """Base for auth entities: frozen, carrying EntityInfo."""
    model_config = ConfigDict(frozen=True)

    entity_info: EntityInfo

    @property
    def id(self) -> UUID:
        return self.entity_info.id

    @property
    def entity_version(self) -> int:
        return self.entity_info.entity_version
