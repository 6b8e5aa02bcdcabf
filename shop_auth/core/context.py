from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# Zero-argument clock returning an aware datetime.
TimeProvider = Callable[[], datetime]


# PUBLIC_INTERFACE
def system_time_provider() -> datetime:
    """Return the current UTC time."""
    return datetime.now(tz=timezone.utc)


class TenantInfo(BaseModel):
    """Tenant that owns the data touched by an operation."""
    model_config = ConfigDict(frozen=True)

    code: UUID = Field(..., description="Tenant identifier")
    name: Optional[str] = Field(default=None, description="Tenant display name")


class ExecutionContext(BaseModel):
    """
    Immutable description of who is executing an operation, for which tenant,
    and under which correlation id.

    Passed explicitly as the first argument of every repository call; nothing in
    the persistence layer reads it from global state.
    """
    model_config = ConfigDict(frozen=True)

    correlation_id: UUID
    tenant: TenantInfo
    execution_user: str = Field(..., min_length=1)
    execution_origin: str = Field(..., min_length=1)
    business_operation_code: str = Field(..., min_length=1)
    timestamp: datetime
    time_provider: TimeProvider = Field(default=system_time_provider, exclude=True, repr=False)

    # PUBLIC_INTERFACE
    @classmethod
    def create(
        cls,
        *,
        correlation_id: UUID,
        tenant: TenantInfo,
        execution_user: str,
        execution_origin: str,
        business_operation_code: str,
        time_provider: Optional[TimeProvider] = None,
    ) -> "ExecutionContext":
        """Build a context stamped with the current time of the given clock."""
        provider = time_provider or system_time_provider
        return cls(
            correlation_id=correlation_id,
            tenant=tenant,
            execution_user=execution_user,
            execution_origin=execution_origin,
            business_operation_code=business_operation_code,
            timestamp=provider(),
            time_provider=provider,
        )

    @property
    def tenant_code(self) -> UUID:
        return self.tenant.code

    def now(self) -> datetime:
        """Current time according to this context's clock."""
        return self.time_provider()

    def with_business_operation_code(self, code: str) -> "ExecutionContext":
        """Return a copy that runs under another business operation code."""
        return self.model_copy(update={"business_operation_code": code})

    def log_extra(self) -> Dict[str, Any]:
        """Fields injected into log records emitted on behalf of this context."""
        return {
            "correlation_id": str(self.correlation_id),
            "tenant_id": str(self.tenant.code),
            "execution_user": self.execution_user,
            "execution_origin": self.execution_origin,
            "business_operation_code": self.business_operation_code,
        }
