from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest
from pydantic import ValidationError

from shop_auth.core.pagination import UNBOUNDED_PAGE_SIZE, PaginationInfo
from shop_auth.schemas.auth import TOKEN_JTI_MAX_LENGTH, MfaSetup, ServiceClientScope, TokenExchange
from shop_auth.schemas.common import EntityInfo

from .helpers import FIXED_NOW


def test_register_new_stamps_creation_provenance(execution_context):
    info = EntityInfo.register_new(execution_context)

    assert info.entity_version == 1
    assert info.tenant == execution_context.tenant
    assert info.created_at == FIXED_NOW
    assert info.created_by == "test.user"
    assert info.created_correlation_id == execution_context.correlation_id
    assert info.last_changed_at is None
    assert info.modified_at == FIXED_NOW


def test_changed_bumps_version_and_keeps_creation(execution_context):
    info = EntityInfo.register_new(execution_context)
    later = execution_context.with_business_operation_code("ENABLE_MFA")

    changed = info.changed(later)

    assert changed.id == info.id
    assert changed.entity_version == 2
    assert changed.created_business_operation_code == "TEST_OP"
    assert changed.last_changed_business_operation_code == "ENABLE_MFA"
    assert info.entity_version == 1


def test_mfa_setup_enable_and_disable(execution_context, mfa_setup):
    assert mfa_setup.is_enabled is False

    enabled = mfa_setup.enable(execution_context)
    disabled = enabled.disable(execution_context)

    assert enabled.is_enabled is True
    assert enabled.enabled_at == FIXED_NOW
    assert disabled.is_enabled is False
    assert disabled.enabled_at is None
    assert disabled.entity_version == 3


def test_entities_are_frozen(mfa_setup):
    with pytest.raises(ValidationError):
        mfa_setup.is_enabled = True


def test_token_exchange_rejects_oversized_jti(execution_context):
    with pytest.raises(ValidationError):
        TokenExchange.register_new(
            execution_context,
            user_id=uuid4(),
            subject_token_jti="x" * (TOKEN_JTI_MAX_LENGTH + 1),
            requested_audience="test-audience",
            issued_token_jti="issued-token-jti",
            expires_at=FIXED_NOW + timedelta(minutes=5),
        )


def test_token_exchange_issued_by_context_clock(token_exchange):
    assert token_exchange.issued_at == FIXED_NOW


def test_service_client_scope_requires_scope(execution_context):
    with pytest.raises(ValidationError):
        ServiceClientScope.register_new(execution_context, service_client_id=uuid4(), scope="")


def test_mfa_setup_requires_secret(execution_context):
    with pytest.raises(ValidationError):
        MfaSetup.register_new(execution_context, user_id=uuid4(), encrypted_shared_secret="")


@pytest.mark.parametrize("page, page_size, offset", [(1, 10, 0), (2, 10, 10), (5, 25, 100)])
def test_pagination_offset(page, page_size, offset):
    pagination = PaginationInfo(page=page, page_size=page_size)

    assert pagination.offset == offset
    assert pagination.index == page - 1
    assert pagination.is_unbounded is False


def test_pagination_all_is_unbounded():
    pagination = PaginationInfo.all()

    assert pagination.page == 1
    assert pagination.page_size == UNBOUNDED_PAGE_SIZE
    assert pagination.is_unbounded is True
    assert pagination.offset == 0


def test_pagination_rejects_page_zero():
    with pytest.raises(ValidationError):
        PaginationInfo(page=0)


def test_next_page():
    assert PaginationInfo(page=2, page_size=10).next_page() == PaginationInfo(page=3, page_size=10)
