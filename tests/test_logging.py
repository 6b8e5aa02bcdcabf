from __future__ import annotations

import logging

from shop_auth.core.logging import (
    LoggingContextFilter,
    bind_execution_context,
    correlation_id_var,
    log_exception_for_distributed_tracing,
    tenant_id_var,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("tests", logging.INFO, __file__, 1, "message", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_filter_fills_placeholders_outside_any_context():
    record = _record()

    assert LoggingContextFilter().filter(record) is True
    assert record.correlation_id == "-"
    assert record.tenant_id == "-"
    assert record.event_id == "-"


def test_filter_uses_bound_execution_context(execution_context):
    record = _record()

    with bind_execution_context(execution_context):
        LoggingContextFilter().filter(record)

    assert record.correlation_id == str(execution_context.correlation_id)
    assert record.tenant_id == str(execution_context.tenant.code)


def test_explicit_extra_wins_over_context(execution_context):
    record = _record(correlation_id="explicit", event_id="mfa_setup.update.failed")

    with bind_execution_context(execution_context):
        LoggingContextFilter().filter(record)

    assert record.correlation_id == "explicit"
    assert record.event_id == "mfa_setup.update.failed"


def test_bind_execution_context_restores_previous_values(execution_context):
    with bind_execution_context(execution_context):
        assert correlation_id_var.get() == str(execution_context.correlation_id)

    assert correlation_id_var.get() is None
    assert tenant_id_var.get() is None


def test_log_exception_attaches_context(caplog, logger, execution_context):
    exc = RuntimeError("Database error")

    log_exception_for_distributed_tracing(
        logger, execution_context, exc, "lookup failed", event_id="token_exchange.get_by_user_id.failed"
    )

    [record] = caplog.records
    assert record.levelno == logging.ERROR
    assert record.getMessage() == "lookup failed"
    assert record.exc_info[1] is exc
    assert record.event_id == "token_exchange.get_by_user_id.failed"
    assert record.correlation_id == str(execution_context.correlation_id)
    assert record.execution_user == "test.user"
    assert record.execution_origin == "UnitTest"
    assert record.business_operation_code == "TEST_OP"
