"""Logger setup: naming, handlers and third-party levels."""

from __future__ import annotations

import logging
import logging.handlers

import pytest

from finance_tracker.logging_config import APP_LOGGER_NAME, THIRD_PARTY_LOGGERS, get_logger, setup_logging


@pytest.fixture
def restore_app_logger():
    app_logger = logging.getLogger(APP_LOGGER_NAME)
    saved = (app_logger.level, list(app_logger.handlers), app_logger.propagate)
    yield app_logger
    for handler in app_logger.handlers:
        handler.close()
    app_logger.setLevel(saved[0])
    app_logger.handlers[:] = saved[1]
    app_logger.propagate = saved[2]


def test_get_logger_nests_under_app_logger() -> None:
    assert get_logger("scripts.seed").name == "finance_tracker.scripts.seed"
    assert get_logger("finance_tracker.crud.crud_debt").name == "finance_tracker.crud.crud_debt"
    assert get_logger().name == APP_LOGGER_NAME


def test_setup_logging_with_file(tmp_path, restore_app_logger) -> None:
    log_file = tmp_path / "logs" / "app.log"
    app_logger = setup_logging(app_log_level="debug", third_party_log_level="error", log_file=str(log_file))

    assert app_logger is restore_app_logger
    assert app_logger.level == logging.DEBUG
    assert app_logger.propagate is False
    assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in app_logger.handlers)
    assert logging.getLogger(THIRD_PARTY_LOGGERS[0]).level == logging.ERROR

    get_logger("tests").info("written to file")
    for handler in app_logger.handlers:
        handler.flush()
    assert "written to file" in log_file.read_text()


def test_setup_logging_replaces_handlers(restore_app_logger, monkeypatch) -> None:
    monkeypatch.delenv("LOG_FILE", raising=False)
    monkeypatch.delenv("APP_LOG_LEVEL", raising=False)

    # Unknown level names fall back to INFO
    assert setup_logging(app_log_level="nonsense").level == logging.INFO
    app_logger = setup_logging()
    assert len(app_logger.handlers) == 1
