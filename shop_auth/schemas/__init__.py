"""
Pydantic models for the auth domain.

Entities are immutable: operations that change one return a new instance with
updated EntityInfo provenance and version.
"""
from .common import EntityInfo
from .auth import MfaSetup, PasswordHistory, ServiceClientScope, TokenExchange

__all__ = [
    "EntityInfo",
    "MfaSetup",
    "PasswordHistory",
    "ServiceClientScope",
    "TokenExchange",
]
