"""
ORM models for the auth persistence layer.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .auth import (  # noqa: F401
    MfaSetupModel,
    PasswordHistoryModel,
    ServiceClientScopeModel,
    TokenExchangeModel,
)
