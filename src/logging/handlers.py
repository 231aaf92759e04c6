# src/logging/handlers.py - v3
"""Rotating file output for LOG_FILE.

LOG_ROTATION is a size such as ``10MB``, ``512K`` or ``1.5GB``; a bare number
is a byte count. Units are binary (1 KB = 1024 bytes).
"""

from __future__ import annotations

import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

_UNIT_SHIFT = {"": 0, "B": 0, "K": 10, "KB": 10, "M": 20, "MB": 20, "G": 30, "GB": 30}
_SIZE = re.compile(r"(?P<amount>\d+(?:\.\d+)?)\s*(?P<unit>[KMG]?B?)", re.IGNORECASE)


def parse_size(size_str: str) -> int:
    """Convert a LOG_ROTATION value into bytes."""
    match = _SIZE.fullmatch(size_str.strip())
    if match is None:
        raise ValueError(f"Invalid size format: {size_str!r}. Use e.g. '10MB'.")
    shift = _UNIT_SHIFT[match["unit"].upper()]
    return int(float(match["amount"]) * (1 << shift))


def create_rotating_handler(
    log_file: str | Path,
    rotation: str = "10MB",
    retention: int = 30,
) -> RotatingFileHandler:
    """Size-rotated UTF-8 handler; ``~`` is expanded and parent dirs created.

    The file is opened on the first record, so a configured but unused
    LOG_FILE leaves no empty file behind.
    """
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=parse_size(rotation),
        backupCount=retention,
        encoding="utf-8",
        delay=True,
    )
