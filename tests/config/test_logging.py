# topmark:header:start
#
#   project      : Stencil
#   file         : test_logging.py
#   file_relpath : tests/config/test_logging.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for Stencil's logging helpers."""

from __future__ import annotations

import logging

import pytest

from stencil.config.logging import (
    LOG_LEVEL_ENV,
    TRACE_LEVEL,
    ChalkFormatter,
    get_logger,
    parse_log_level,
    resolve_env_log_level,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("trace", TRACE_LEVEL),
        (" Debug ", logging.DEBUG),
        ("warn", logging.WARNING),
        ("15", 15),
        ("verbose", None),
    ],
)
def test_parse_log_level(value: str, expected: int | None) -> None:
    """Level names are case-insensitive; numbers are taken as is."""
    assert parse_log_level(value) == expected


def test_env_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    """``STENCIL_LOG_LEVEL`` selects the level; unset means no override."""
    assert resolve_env_log_level() is None
    monkeypatch.setenv(LOG_LEVEL_ENV, "INFO")
    assert resolve_env_log_level() == logging.INFO


def test_trace_records_use_trace_level(caplog: pytest.LogCaptureFixture) -> None:
    """``trace`` logs below DEBUG under the TRACE level name."""
    logger = get_logger("stencil.tests.trace")
    with caplog.at_level(TRACE_LEVEL, logger="stencil.tests.trace"):
        logger.trace("step %d", 1)
    assert [(r.levelname, r.getMessage()) for r in caplog.records] == [("TRACE", "step 1")]


def test_formatter_keeps_the_message_text() -> None:
    """Colouring wraps the formatted message without altering it."""
    record = logging.LogRecord("stencil", logging.WARNING, __file__, 1, "careful", None, None)
    assert "[WARNING] careful" in ChalkFormatter("[%(levelname)s] %(message)s").format(record)
