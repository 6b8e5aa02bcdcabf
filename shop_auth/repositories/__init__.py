"""
Repository layer for the auth entities.

Two tiers:
- PostgreSQL repositories (``postgresql``) run tenant-scoped SQLAlchemy queries
  on an AsyncSession and let database errors propagate.
- Resilient repositories (``resilient``) wrap a store, log failures with the
  execution context and return empty results instead of raising.
"""
from .postgresql import (
    MfaSetupPostgreSqlRepository,
    PasswordHistoryPostgreSqlRepository,
    ServiceClientScopePostgreSqlRepository,
    TokenExchangePostgreSqlRepository,
)
from .resilient import (
    MfaSetupRepository,
    PasswordHistoryRepository,
    ResilientRepository,
    ServiceClientScopeRepository,
    TokenExchangeRepository,
)

__all__ = [
    "MfaSetupPostgreSqlRepository",
    "PasswordHistoryPostgreSqlRepository",
    "ServiceClientScopePostgreSqlRepository",
    "TokenExchangePostgreSqlRepository",
    "MfaSetupRepository",
    "PasswordHistoryRepository",
    "ResilientRepository",
    "ServiceClientScopeRepository",
    "TokenExchangeRepository",
]
