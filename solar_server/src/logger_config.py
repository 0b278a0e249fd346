"""
Structured JSON logging shared by the server and client entrypoints.

Installs a single stderr handler on the root logger that renders each
record as one JSON object (``ts``, ``level``, ``logger``, ``msg`` and, when
present, ``exception``).

CHANGELOG:
- 2026-10-19: Initial creation, moved out of the entrypoint (STORY-009)

TODO:
- None
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime


class JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def configure_logging(level: str | int = logging.INFO) -> None:
    """Configure structured JSON logging on the root logger.

    Args:
        level: Log level name or number for the root logger.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
