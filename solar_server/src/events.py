"""
Lifecycle and warning notifications published by the session manager.

Subscribers implement any subset of the :class:`SessionObserver` hooks and
register with ``SessionManager.subscribe``. The manager works the same with
zero subscribers; a subscriber that raises is logged and skipped so it can
never break ingestion.

:class:`LoggingObserver` is the default subscriber wired by the HTTP app:
it turns every event into a log line, replacing console progress output.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-007)

TODO:
- None
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from solar_server.src.models import SessionMeta, WarningRecord, percent_of_limit

logger = logging.getLogger(__name__)


@runtime_checkable
class SessionObserver(Protocol):
    """Receives session lifecycle and warning events."""

    def on_transfer_started(self, meta: SessionMeta) -> None: ...

    def on_sample_received(self, received_count: int) -> None: ...

    def on_transfer_completed(self, received_count: int) -> None: ...

    def on_warning_raised(self, record: WarningRecord) -> None: ...


class LoggingObserver:
    """Logs session events through the standard logging module."""

    def __init__(self) -> None:
        self._row_limit = 0

    def on_transfer_started(self, meta: SessionMeta) -> None:
        self._row_limit = meta.row_limit
        logger.info(
            "Transfer started: plant=%s file=%s total_rows=%d row_limit=%d schema=%s",
            meta.plant_id,
            meta.file_name,
            meta.total_rows,
            meta.row_limit,
            meta.schema_version,
        )

    def on_sample_received(self, received_count: int) -> None:
        logger.info(
            "Transfer in progress: received %d rows (%.2f%%)",
            received_count,
            percent_of_limit(received_count, self._row_limit),
        )

    def on_transfer_completed(self, received_count: int) -> None:
        logger.info("Transfer completed: %d rows accepted", received_count)

    def on_warning_raised(self, record: WarningRecord) -> None:
        logger.warning(
            "[WARNING] %s: %s (Row %d)", record.type, record.message, record.row_index
        )
