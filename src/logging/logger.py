# src/logging/logger.py - v3
"""Log formatting for the semcache namespace.

Every record carries the request context (correlation id, cache tier) set
in semcache.logging.context. setup_logging() configures the ``semcache``
logger only; the host application's root logger is never touched.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from semcache.logging.context import get_context

ROOT_LOGGER_NAME = "semcache"

# Client libraries that log every request at INFO.
_CHATTY_DEPENDENCIES = ("httpx", "httpcore", "urllib3")


def _utc(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=timezone.utc)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        doc: dict[str, Any] = {
            "timestamp": _utc(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            doc["context"] = context

        # logger.info(..., extra={"data": {...}})
        data = getattr(record, "data", None)
        if data:
            doc["data"] = data

        if record.exc_info and record.exc_info[1] is not None:
            doc["exception"] = self.formatException(record.exc_info)
        return json.dumps(doc, default=str)


class TextFormatter(logging.Formatter):
    """Single-line format for terminals: time [LEVEL] logger [cid] (tier) - msg."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        head = f"{_utc(record):%Y-%m-%d %H:%M:%S} [{record.levelname:8s}] {record.name}"
        tags = ""
        if ctx.correlation_id:
            tags += f" [{ctx.correlation_id}]"
        if ctx.cache_tier:
            tags += f" ({ctx.cache_tier})"
        out = f"{head}{tags} - {record.getMessage()}"
        if record.exc_info and record.exc_info[1] is not None:
            out += "\n" + self.formatException(record.exc_info)
        return out


_FORMATTERS: dict[str, type[logging.Formatter]] = {
    "json": JsonFormatter,
    "text": TextFormatter,
}


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the semcache namespace."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | Path | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> None:
    """Attach console (and optionally rotating file) handlers to ``semcache``.

    Safe to call repeatedly: previous handlers are closed and replaced.
    Unknown formats fall back to text.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for old in root.handlers:
        old.close()
    root.handlers.clear()

    formatter = _FORMATTERS.get(log_format, TextFormatter)()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        from semcache.logging.handlers import create_rotating_handler

        handlers.append(
            create_rotating_handler(log_file, rotation=rotation, retention=retention)
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in _CHATTY_DEPENDENCIES:
        logging.getLogger(name).setLevel(logging.WARNING)
