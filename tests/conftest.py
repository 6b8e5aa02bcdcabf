"""Shared fixtures for the shop_auth test suite."""
from __future__ import annotations

import logging
from datetime import timedelta
from uuid import uuid4

import pytest

from shop_auth.core.context import ExecutionContext, TenantInfo
from shop_auth.schemas.auth import MfaSetup, PasswordHistory, ServiceClientScope, TokenExchange

from .helpers import FIXED_NOW, fixed_clock


@pytest.fixture
def execution_context() -> ExecutionContext:
    return ExecutionContext.create(
        correlation_id=uuid4(),
        tenant=TenantInfo(code=uuid4(), name="acme"),
        execution_user="test.user",
        execution_origin="UnitTest",
        business_operation_code="TEST_OP",
        time_provider=fixed_clock,
    )


@pytest.fixture
def logger(caplog: pytest.LogCaptureFixture) -> logging.Logger:
    caplog.set_level(logging.DEBUG)
    return logging.getLogger("tests.shop_auth.repositories")


@pytest.fixture
def mfa_setup(execution_context: ExecutionContext) -> MfaSetup:
    return MfaSetup.register_new(
        execution_context, user_id=uuid4(), encrypted_shared_secret="encrypted_shared_secret_value"
    )


@pytest.fixture
def password_history(execution_context: ExecutionContext) -> PasswordHistory:
    return PasswordHistory.register_new(
        execution_context, user_id=uuid4(), password_hash="hashed_password_value"
    )


@pytest.fixture
def service_client_scope(execution_context: ExecutionContext) -> ServiceClientScope:
    return ServiceClientScope.register_new(
        execution_context, service_client_id=uuid4(), scope="test.scope"
    )


@pytest.fixture
def token_exchange(execution_context: ExecutionContext) -> TokenExchange:
    return TokenExchange.register_new(
        execution_context,
        user_id=uuid4(),
        subject_token_jti="subject-token-jti",
        requested_audience="test-audience",
        issued_token_jti="issued-token-jti",
        expires_at=FIXED_NOW + timedelta(hours=1),
    )
