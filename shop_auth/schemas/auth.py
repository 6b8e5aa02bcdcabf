from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from shop_auth.core.context import ExecutionContext
from .common import EntityBase, EntityInfo

ENCRYPTED_SHARED_SECRET_MAX_LENGTH = 1024
PASSWORD_HASH_MAX_LENGTH = 1024
SCOPE_MAX_LENGTH = 255
TOKEN_JTI_MAX_LENGTH = 36
REQUESTED_AUDIENCE_MAX_LENGTH = 255


class MfaSetup(EntityBase):
    """TOTP multi-factor setup of a user. The shared secret is stored encrypted."""

    user_id: UUID = Field(..., description="Owner user ID")
    encrypted_shared_secret: str = Field(
        ..., min_length=1, max_length=ENCRYPTED_SHARED_SECRET_MAX_LENGTH, description="Encrypted TOTP secret"
    )
    is_enabled: bool = Field(False, description="Whether MFA is enforced at login")
    enabled_at: Optional[datetime] = Field(None, description="When MFA was last enabled")

    # PUBLIC_INTERFACE
    @classmethod
    def register_new(
        cls, execution_context: ExecutionContext, *, user_id: UUID, encrypted_shared_secret: str
    ) -> "MfaSetup":
        """Create a pending (disabled) setup for a user."""
        return cls(
            entity_info=EntityInfo.register_new(execution_context),
            user_id=user_id,
            encrypted_shared_secret=encrypted_shared_secret,
            is_enabled=False,
            enabled_at=None,
        )

    def enable(self, execution_context: ExecutionContext) -> "MfaSetup":
        """Return an enabled copy stamped with the context time."""
        return self.model_copy(
            update={
                "entity_info": self.entity_info.changed(execution_context),
                "is_enabled": True,
                "enabled_at": execution_context.now(),
            }
        )

    def disable(self, execution_context: ExecutionContext) -> "MfaSetup":
        return self.model_copy(
            update={
                "entity_info": self.entity_info.changed(execution_context),
                "is_enabled": False,
                "enabled_at": None,
            }
        )


class PasswordHistory(EntityBase):
    """A previous password hash of a user, kept to block password reuse."""

    user_id: UUID = Field(..., description="Owner user ID")
    password_hash: str = Field(..., min_length=1, max_length=PASSWORD_HASH_MAX_LENGTH)
    changed_at: datetime = Field(..., description="When the password was set")

    # PUBLIC_INTERFACE
    @classmethod
    def register_new(
        cls, execution_context: ExecutionContext, *, user_id: UUID, password_hash: str
    ) -> "PasswordHistory":
        """Record a password change happening now."""
        return cls(
            entity_info=EntityInfo.register_new(execution_context),
            user_id=user_id,
            password_hash=password_hash,
            changed_at=execution_context.now(),
        )


class ServiceClientScope(EntityBase):
    """OAuth scope granted to a machine-to-machine service client."""

    service_client_id: UUID = Field(..., description="Owning service client ID")
    scope: str = Field(..., min_length=1, max_length=SCOPE_MAX_LENGTH, description="Scope name")

    # PUBLIC_INTERFACE
    @classmethod
    def register_new(
        cls, execution_context: ExecutionContext, *, service_client_id: UUID, scope: str
    ) -> "ServiceClientScope":
        return cls(
            entity_info=EntityInfo.register_new(execution_context),
            service_client_id=service_client_id,
            scope=scope,
        )


class TokenExchange(EntityBase):
    """Audit record of an RFC 8693 token exchange performed on behalf of a user."""

    user_id: UUID = Field(..., description="User the subject token belongs to")
    subject_token_jti: str = Field(..., min_length=1, max_length=TOKEN_JTI_MAX_LENGTH)
    requested_audience: str = Field(..., min_length=1, max_length=REQUESTED_AUDIENCE_MAX_LENGTH)
    issued_token_jti: str = Field(..., min_length=1, max_length=TOKEN_JTI_MAX_LENGTH)
    issued_at: datetime
    expires_at: datetime

    # PUBLIC_INTERFACE
    @classmethod
    def register_new(
        cls,
        execution_context: ExecutionContext,
        *,
        user_id: UUID,
        subject_token_jti: str,
        requested_audience: str,
        issued_token_jti: str,
        expires_at: datetime,
    ) -> "TokenExchange":
        """Record an exchange issued now by the context clock."""
        return cls(
            entity_info=EntityInfo.register_new(execution_context),
            user_id=user_id,
            subject_token_jti=subject_token_jti,
            requested_audience=requested_audience,
            issued_token_jti=issued_token_jti,
            issued_at=execution_context.now(),
            expires_at=expires_at,
        )
