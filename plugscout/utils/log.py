"""Logging setup for plugscout.

Every module logs through the shared ``plugscout`` logger and tags its
messages with a bracketed component, e.g. ``[discovery] Loaded archive``.
The console shows records at ``PLUGSCOUT_LOG_LEVEL`` (default ``WARNING``).
``init_logger(log_dir)`` adds a daily JSON-lines file that records every
message at debug level, with the component split out and the ``extra=``
fields kept under ``context``.
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

LOGGER_NAME = "plugscout"
LOG_LEVEL_ENV = "PLUGSCOUT_LOG_LEVEL"
DEFAULT_CONSOLE_LEVEL = logging.WARNING

_COMPONENT_RE = re.compile(r"^\[([\w-]+)\]\s*")
# Attributes every LogRecord has; anything else arrived through ``extra=``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the ``extra=`` fields attached to ``record``."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JsonLinesFormatter(logging.Formatter):
    """Render one JSON object per record for the discovery log file."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        entry: Dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname.lower(),
        }
        match = _COMPONENT_RE.match(message)
        if match:
            entry["component"] = match.group(1)
            message = message[match.end() :]
        entry["message"] = message
        context = record_context(record)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def console_level(environ: Optional[Mapping[str, str]] = None) -> int:
    """Resolve the console level from ``PLUGSCOUT_LOG_LEVEL``."""
    env = os.environ if environ is None else environ
    level = logging.getLevelName(env.get(LOG_LEVEL_ENV, "").strip().upper())
    return level if isinstance(level, int) else DEFAULT_CONSOLE_LEVEL


def log_file_path(log_dir: Path, day: Optional[date] = None) -> Path:
    day = day or date.today()
    return log_dir / f"plugscout-{day:%Y%m%d}.jsonl"


def get_logger() -> logging.Logger:
    """Return the shared ``plugscout`` logger, configuring it on first use."""
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        # Handlers filter by level; the logger itself lets debug through for the file.
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(console_level())
        console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        logger.addHandler(console)
    return logger


def init_logger(log_dir: Optional[Path] = None) -> logging.Logger:
    """Point the discovery log file at ``log_dir``, or drop it when ``None``."""
    logger = get_logger()
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file_path(log_dir), encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JsonLinesFormatter())
        logger.addHandler(file_handler)
    return logger


__all__ = [
    "JsonLinesFormatter",
    "LOGGER_NAME",
    "console_level",
    "get_logger",
    "init_logger",
    "log_file_path",
    "record_context",
]
