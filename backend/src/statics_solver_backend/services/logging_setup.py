from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from statics_solver_backend.config import CONFIG

PACKAGE_LOGGER = "statics_solver_backend"
LOG_DIR_ENV = "STATICS_SOLVER_LOG_DIR"

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def resolve_log_path(log_dir: Optional[str] = None) -> str:
    """Explicit argument first, then the environment, then the config default."""
    directory = log_dir or os.environ.get(LOG_DIR_ENV) or CONFIG.log_dir
    return os.path.join(directory, CONFIG.log_file_name)


def setup_logging(log_dir: Optional[str] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Attach a rotating file handler and a stream handler to the package logger.

    Meant for process entry points (the app lifespan); the solver modules only
    ever call ``logging.getLogger(__name__)``. Calling it again is a no-op.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if logger.handlers:
        return logger

    log_path = resolve_log_path(log_dir)
    os.makedirs(os.path.dirname(log_path) or ".", exist_ok=True)

    formatter = logging.Formatter(_FORMAT)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=CONFIG.log_max_bytes,
        backupCount=CONFIG.log_backup_count,
        encoding="utf-8",
    )
    stream_handler = logging.StreamHandler()
    for handler in (file_handler, stream_handler):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    logger.info("Logging initialised. File: %s", log_path)
    return logger


def teardown_logging() -> None:
    """Close and detach the handlers installed by :func:`setup_logging`."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
