"""Logging for the dashboard. Records go to a rotating file, never the screen."""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "customclaude_tui"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MAX_LOG_BYTES = 1024 * 1024
BACKUP_COUNT = 3


def setup_logging(log_file: str | None, level: int = logging.INFO) -> logging.Logger:
    """Configure the package logger.

    With no log file a NullHandler is installed: the terminal belongs to the
    dashboard, so nothing may be written to stderr while it runs.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if not log_file:
        logger.addHandler(logging.NullHandler())
        return logger

    path = Path(log_file).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = RotatingFileHandler(
            path,
            maxBytes=MAX_LOG_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as exc:
        print(f"Could not open log file {path}: {exc}; logging disabled", file=sys.stderr)
        logger.addHandler(logging.NullHandler())
        return logger

    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
