from __future__ import annotations

import logging
import logging.handlers

import pytest

from core.logging import (
    LOG_FILE_NAME,
    SEATING_LOGGERS,
    build_handlers,
    configure_seating_loggers,
    resolve_log_level,
)


def test_level_defaults_by_environment():
    assert resolve_log_level("production") == logging.INFO
    assert resolve_log_level(" Production ") == logging.INFO
    assert resolve_log_level("development") == logging.DEBUG
    assert resolve_log_level("") == logging.DEBUG


def test_explicit_level_overrides_environment():
    assert resolve_log_level("development", "warning") == logging.WARNING
    assert resolve_log_level("production", "DEBUG") == logging.DEBUG
    with pytest.raises(ValueError):
        resolve_log_level("development", "chatty")


def test_console_only_outside_production():
    handlers = build_handlers(environment="development", level=logging.DEBUG)

    assert len(handlers) == 1
    assert not isinstance(handlers[0], logging.handlers.RotatingFileHandler)


def test_log_dir_enables_rotating_seating_log(tmp_path):
    handlers = build_handlers(environment="test", level=logging.INFO, log_dir=tmp_path / "logs")
    try:
        files = [h for h in handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(files) == 1
        assert files[0].baseFilename == str(tmp_path / "logs" / LOG_FILE_NAME)
        assert files[0].level == logging.INFO
    finally:
        for h in handlers:
            h.close()


def test_seating_trace_keeps_engine_at_debug():
    previous = {name: logging.getLogger(name).level for name in SEATING_LOGGERS}
    try:
        configure_seating_loggers(level=logging.INFO, trace=True)
        assert all(logging.getLogger(n).level == logging.DEBUG for n in SEATING_LOGGERS)

        configure_seating_loggers(level=logging.INFO)
        assert all(logging.getLogger(n).level == logging.INFO for n in SEATING_LOGGERS)
    finally:
        for name, level in previous.items():
            logging.getLogger(name).setLevel(level)
