import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional


APP_LOGGER_NAME = "finance_tracker"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that are chatty at INFO; held at THIRD_PARTY_LOG_LEVEL
THIRD_PARTY_LOGGERS = (
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "sqlalchemy.dialects",
    "sqlalchemy.pool",
    "sqlalchemy.orm",
    "alembic",
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
    "faker",
)


def _level(name: str, fallback: int) -> int:
    # Unknown level names map to the fallback
    return getattr(logging, name.upper(), fallback)


def _rotating_file_handler(log_file: str, level: int, formatter: logging.Formatter,
                           max_file_size: int, backup_count: int) -> logging.Handler:
    # Create the log directory on first use
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=max_file_size,
        backupCount=backup_count
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    app_log_level: Optional[str] = None,
    third_party_log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """
    Configure the ``finance_tracker`` logger tree.

    Explicit arguments win over the APP_LOG_LEVEL, THIRD_PARTY_LOG_LEVEL and
    LOG_FILE environment variables. Safe to call more than once: handlers are
    replaced, not stacked.

    Args:
        app_log_level: Level for the application's own loggers (default INFO)
        third_party_log_level: Level for library loggers (default WARNING)
        log_file: Also write to this rotating file when set
        max_file_size: Bytes before the log file rotates
        backup_count: Rotated files to keep

    Returns:
        The application root logger
    """
    app_level = _level(app_log_level or os.getenv("APP_LOG_LEVEL", "INFO"), logging.INFO)
    third_party_level = _level(
        third_party_log_level or os.getenv("THIRD_PARTY_LOG_LEVEL", "WARNING"), logging.WARNING
    )
    log_file = log_file or os.getenv("LOG_FILE")

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(app_level)
    app_logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # Console output on stdout
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(app_level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if log_file:
        app_logger.addHandler(
            _rotating_file_handler(log_file, app_level, formatter, max_file_size, backup_count)
        )

    for logger_name in THIRD_PARTY_LOGGERS:
        logging.getLogger(logger_name).setLevel(third_party_level)

    # Records stop here, not at the root logger
    app_logger.propagate = False

    return app_logger


def get_logger(name: str = APP_LOGGER_NAME) -> logging.Logger:
    """
    Logger nested under the application logger.

    ``get_logger(__name__)`` inside the package already yields a nested name
    and is used as-is; any other name gets the package prefix.
    """
    if name == APP_LOGGER_NAME or name.startswith(f"{APP_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")
