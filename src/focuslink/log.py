"""Logging setup shared by both sides.

Records go to named `focuslink.*` loggers. A circular buffer keeps the most
recent entries so the phone service can expose them over HTTP.
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime
from typing import Deque

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Circular buffer to store recent log entries (max 100)
log_buffer: Deque[dict] = deque(maxlen=100)


class LogBufferHandler(logging.Handler):
    """Logging handler that captures records into log_buffer."""

    def emit(self, record: logging.LogRecord):
        try:
            log_buffer.append({
                "timestamp": datetime.fromtimestamp(record.created).strftime("%H:%M:%S"),
                "level": record.levelname,
                "logger": record.name,
                "message": self.format(record),
            })
        except Exception:
            self.handleError(record)


def _has_handler(logger: logging.Logger, name: str) -> bool:
    return any(h.get_name() == name for h in logger.handlers)


def setup_logging(level: int = logging.INFO, console: bool = True) -> logging.Logger:
    """Configure the `focuslink` logger tree. Safe to call more than once."""
    logger = logging.getLogger("focuslink")
    logger.setLevel(level)
    logger.propagate = False

    if not _has_handler(logger, "focuslink:buffer"):
        buffer_handler = LogBufferHandler()
        buffer_handler.setLevel(logging.DEBUG)
        buffer_handler.setFormatter(logging.Formatter("%(message)s"))
        buffer_handler.set_name("focuslink:buffer")
        logger.addHandler(buffer_handler)
        # Also capture uvicorn and fastapi logs
        logging.getLogger("uvicorn").addHandler(buffer_handler)
        logging.getLogger("fastapi").addHandler(buffer_handler)

    if console and not _has_handler(logger, "focuslink:console"):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        console_handler.set_name("focuslink:console")
        logger.addHandler(console_handler)

    for handler in logger.handlers:
        if handler.get_name() == "focuslink:console":
            handler.setLevel(level)

    return logger


def recent_logs(limit: int = 100) -> list[dict]:
    entries = list(log_buffer)
    return entries[-limit:] if limit else entries
