from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Iterator, Optional

if TYPE_CHECKING:
    from shop_auth.core.context import ExecutionContext


# Context variables for enriched logging
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
tenant_id_var: ContextVar[Optional[str]] = ContextVar("tenant_id", default=None)

_CONTEXT_FIELDS = (
    ("correlation_id", correlation_id_var),
    ("tenant_id", tenant_id_var),
)


class LoggingContextFilter(logging.Filter):
    """
    Logging filter that makes correlation_id, tenant_id and event_id available
    on each log record so formatters can include them.

    Values passed explicitly through ``extra`` win over the contextvars. If no
    value is present anywhere, placeholders are used.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        for attr, var in _CONTEXT_FIELDS:
            if not getattr(record, attr, None):
                setattr(record, attr, var.get() or "-")
        if not getattr(record, "event_id", None):
            setattr(record, "event_id", "-")
        return True


# PUBLIC_INTERFACE
def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging with a structured format and context filter."""
    handler = logging.StreamHandler(stream=sys.stdout)
    fmt = (
        "%(asctime)s | %(levelname)s | %(name)s | cid=%(correlation_id)s | tenant=%(tenant_id)s | "
        "event=%(event_id)s | %(message)s"
    )
    formatter = logging.Formatter(fmt=fmt)
    handler.setFormatter(formatter)
    handler.addFilter(LoggingContextFilter())

    root = logging.getLogger()
    # Remove pre-existing default handlers configured elsewhere (e.g., basicConfig)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(level)


# PUBLIC_INTERFACE
@contextmanager
def bind_execution_context(execution_context: "ExecutionContext") -> Iterator[None]:
    """
    Expose the context's correlation id and tenant to every log record emitted
    inside the block, including records from libraries such as SQLAlchemy.
    """
    cid_token = correlation_id_var.set(str(execution_context.correlation_id))
    tid_token = tenant_id_var.set(str(execution_context.tenant.code))
    try:
        yield
    finally:
        tenant_id_var.reset(tid_token)
        correlation_id_var.reset(cid_token)


# PUBLIC_INTERFACE
def log_exception_for_distributed_tracing(
    logger: logging.Logger,
    execution_context: "ExecutionContext",
    exc: BaseException,
    message: str,
    *,
    event_id: str,
) -> None:
    """
    Log ``exc`` at ERROR with the execution context attached.

    The record carries the traceback (``exc_info``), an ``event_id`` naming the
    failed operation, and the context fields from ExecutionContext.log_extra().
    """
    extra = execution_context.log_extra()
    extra["event_id"] = event_id
    logger.error(message, exc_info=exc, extra=extra)
