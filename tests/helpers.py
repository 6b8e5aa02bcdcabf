from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest

FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


def error_records(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    """Records at ERROR or above captured so far."""
    return [r for r in caplog.records if r.levelno >= logging.ERROR]
