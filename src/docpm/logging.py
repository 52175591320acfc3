"""Structured JSON logging for docpm.

Writes JSONL to <base_dir>/work-items/docpm.log with rotation (5MB, 3 backups).
"""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOGGER_NAME = "docpm"
_LOG_FILENAME = "docpm.log"
_setup_lock = threading.Lock()
_MAX_BYTES = 5 * 1024 * 1024  # 5MB
_BACKUP_COUNT = 3

# Optional ``extra=`` keys copied into each record.
_EXTRA_FIELDS: tuple[str, ...] = ("op", "item", "error")


class _JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "msg": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])
        return json.dumps(entry, default=str)


class _ConsoleHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Writes to whatever sys.stderr is when a record is emitted."""

    def __init__(self) -> None:
        logging.Handler.__init__(self)

    @property
    def stream(self) -> Any:  # type: ignore[override]
        return sys.stderr


def setup_logging(log_dir: Path) -> logging.Logger:
    """Set up structured JSON logging to <log_dir>/docpm.log.

    Idempotent: calling again with the same directory is a no-op, and a call
    with a different directory replaces the previous file handler.
    """
    logger = logging.getLogger(LOGGER_NAME)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / _LOG_FILENAME
    target_filename = os.path.abspath(str(log_path))

    with _setup_lock:
        for h in logger.handlers[:]:
            if not isinstance(h, RotatingFileHandler):
                continue
            if h.baseFilename == target_filename:
                return logger
            # Different path: drop the stale handler so records are not duplicated.
            logger.removeHandler(h)
            h.close()

        handler = RotatingFileHandler(
            str(log_path),
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(_JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def setup_console_logging(level: int = logging.WARNING) -> logging.Logger:
    """Echo docpm records at *level* and above to stderr as ``docpm: <message>``."""
    logger = logging.getLogger(LOGGER_NAME)
    with _setup_lock:
        for h in logger.handlers:
            if isinstance(h, _ConsoleHandler):
                h.setLevel(level)
                return logger
        handler = _ConsoleHandler()
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter("docpm: %(message)s"))
        logger.addHandler(handler)
    return logger
