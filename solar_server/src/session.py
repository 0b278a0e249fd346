"""
Session manager: the state machine that drives one ingestion session.

Composes the per-sample pipeline::

    sequencing -> normalize -> validate -> analytics -> accept log
        |                         |
        +-------------------------+--> reject log

and owns everything a session accumulates: metadata, last accepted row
index, accepted count, the open sink, the analytics engine, and the
warnings feed.

States::

    IDLE --start_session--> ACTIVE --end_session--> IDLE
                              |
                              +--abort / sink fault--> FAULTED

``start_session`` is accepted from any state and discards whatever the
previous session left behind.

All mutating calls are serialized through a single ``asyncio.Lock`` so row
ordering and window updates hold however calls arrive. ``get_warnings``
does not take the lock; it returns a copy of the list, which cannot be
observed half-built on a single event loop.

Error policy:
- Protocol misuse (push/end without an active session, null metadata or
  sample) returns a failed Ack and changes nothing.
- Domain rejections (non-monotonic row, limit reached, validation failure)
  go to the reject log; the call still returns a successful Ack.
- Sink faults are not retried: start returns a failed Ack, push faults the
  session and returns a failed Ack.

CHANGELOG:
- 2026-10-19: Log validation rejects after normalization; refuse plant_id
  values that escape the data root (STORY-015)
- 2026-10-19: Add abort() for abnormal teardown (STORY-008)
- 2026-10-19: Publish lifecycle events to observers (STORY-007)
- 2026-10-19: Initial creation (STORY-006)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, date, datetime
from enum import StrEnum
from pathlib import Path
from typing import Any

from solar_server.src.analytics import AnalyticsEngine
from solar_server.src.config import AnalyticsThresholds
from solar_server.src.events import SessionObserver
from solar_server.src.models import (
    Ack,
    Sample,
    SessionMeta,
    WarningRecord,
    percent_of_limit,
)
from solar_server.src.normalizer import normalize
from solar_server.src.sink import SessionSink
from solar_server.src.validator import RejectCode, Rejected, Rejection, validate

logger = logging.getLogger(__name__)

NO_ROW = -1
"""Last-accepted sentinel; client row indices start at 1."""


class SessionStatus(StrEnum):
    """Lifecycle states of the session manager."""

    IDLE = "idle"
    ACTIVE = "active"
    FAULTED = "faulted"


def _utc_today() -> date:
    return datetime.now(tz=UTC).date()


class SessionManager:
    """Single-session ingest engine.

    Constructed once by the hosting process and handed to the transport;
    there is no module-level instance.

    Args:
        data_root: Directory under which session logs are written.
        thresholds_factory: Called at every session start to obtain the
            detector thresholds for that session.
        today: Returns the date used when the metadata carries none.

    Usage::

        manager = SessionManager("./Data")
        await manager.start_session(SessionMeta(plant_id="P1", row_limit=100))
        await manager.push_sample(Sample(row_index=1, day="2026-10-19", hour="12:00:00"))
        summary = await manager.end_session()
    """

    def __init__(
        self,
        data_root: str | Path,
        thresholds_factory: Callable[[], AnalyticsThresholds] = AnalyticsThresholds,
        *,
        today: Callable[[], date] = _utc_today,
    ) -> None:
        self._data_root = Path(data_root)
        self._thresholds_factory = thresholds_factory
        self._today = today
        self._lock = asyncio.Lock()
        self._observers: list[SessionObserver] = []

        self._status = SessionStatus.IDLE
        self._meta: SessionMeta | None = None
        self._sink: SessionSink | None = None
        self._analytics: AnalyticsEngine | None = None
        self._received = 0
        self._last_row_index = NO_ROW
        self._warnings: list[WarningRecord] = []

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def meta(self) -> SessionMeta | None:
        return self._meta

    @property
    def received_count(self) -> int:
        return self._received

    @property
    def rejected_count(self) -> int:
        return self._sink.rejected_count if self._sink is not None else 0

    @property
    def last_row_index(self) -> int:
        return self._last_row_index

    @property
    def sink(self) -> SessionSink | None:
        return self._sink

    @property
    def analytics(self) -> AnalyticsEngine | None:
        return self._analytics

    @property
    def warning_records(self) -> list[WarningRecord]:
        """Snapshot of the structured warnings of the current session."""
        return list(self._warnings)

    def subscribe(self, observer: SessionObserver) -> None:
        """Register an observer for lifecycle and warning events."""
        self._observers.append(observer)

    def unsubscribe(self, observer: SessionObserver) -> None:
        """Remove a previously registered observer."""
        if observer in self._observers:
            self._observers.remove(observer)

    # ------------------------------------------------------------------
    # Boundary operations
    # ------------------------------------------------------------------

    async def start_session(self, meta: SessionMeta | None) -> Ack:
        """Begin a new session, discarding any previous one.

        Args:
            meta: Session metadata. ``None`` is reported as a failed Ack.

        Returns:
            Success Ack with a zero count, or a failed Ack when the metadata
            is missing or the session logs cannot be opened.
        """
        if meta is None:
            return self._fail("Meta is null")

        async with self._lock:
            self._close_sink()
            self._sink = None
            self._meta = None
            self._analytics = None
            self._received = 0
            self._last_row_index = NO_ROW
            self._warnings = []
            self._status = SessionStatus.IDLE

            thresholds = self._thresholds_factory()
            session_date = meta.session_date or self._today()
            try:
                sink = SessionSink(self._data_root, meta.plant_id, session_date)
                sink.open()
            except (OSError, ValueError) as exc:
                logger.error(
                    "Cannot open session logs for plant=%s date=%s",
                    meta.plant_id,
                    session_date,
                    exc_info=True,
                )
                return self._fail(f"Cannot open session logs: {exc}")

            self._meta = meta
            self._sink = sink
            self._analytics = AnalyticsEngine(thresholds)
            self._status = SessionStatus.ACTIVE
            logger.info(
                "Session started: plant=%s date=%s row_limit=%d",
                meta.plant_id,
                session_date,
                meta.row_limit,
            )
            self._notify("on_transfer_started", meta)
            return self._ack("Session started")

    async def push_sample(self, sample: Sample | None) -> Ack:
        """Run one sample through the pipeline.

        Domain rejections are written to the reject log and still return a
        successful Ack; the accepted count in the Ack shows whether the row
        was taken.

        Args:
            sample: The sample as submitted by the client.

        Returns:
            Success Ack carrying the current count and percent-of-limit, or
            a failed Ack on protocol misuse or sink failure.
        """
        async with self._lock:
            if self._status is not SessionStatus.ACTIVE:
                return self._fail(self._inactive_message())
            if sample is None:
                return self._fail("Sample is null")

            try:
                self._process(sample)
            except OSError as exc:
                logger.error(
                    "Sink write failed at row %d; faulting session",
                    sample.row_index,
                    exc_info=True,
                )
                self._fault()
                return self._fail(f"Sink write failed: {exc}")

            return self._ack("OK")

    async def end_session(self) -> Ack:
        """Finish the active session and close its logs.

        Returns:
            Success Ack with the final count and percent-of-limit, or a
            failed Ack when no session is active.
        """
        async with self._lock:
            if self._status is not SessionStatus.ACTIVE:
                return self._fail(self._inactive_message())

            self._close_sink()
            self._status = SessionStatus.IDLE
            ack = self._ack("Session completed")
            logger.info(
                "Session completed: accepted=%d rejected=%d (%.2f%% of limit)",
                ack.received_count,
                self.rejected_count,
                ack.percent_of_limit,
            )
            self._notify("on_transfer_completed", self._received)
            return ack

    def get_warnings(self) -> list[str]:
        """Return a snapshot of the rendered warnings feed.

        Valid in any state. Warnings survive ``end_session`` and are only
        cleared by the next ``start_session``.
        """
        return [record.render() for record in list(self._warnings)]

    async def abort(self) -> None:
        """Tear down an active session without ending it.

        Used when the transport goes away. The logs are flushed and closed,
        the session moves to FAULTED. No-op when no session is active.
        """
        async with self._lock:
            if self._status is not SessionStatus.ACTIVE:
                return
            logger.warning(
                "Session aborted after %d accepted rows; logs closed",
                self._received,
            )
            self._fault()

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _process(self, sample: Sample) -> None:
        assert self._meta is not None and self._sink is not None
        assert self._analytics is not None

        if sample.row_index <= self._last_row_index:
            self._reject(
                sample,
                Rejection(
                    code=RejectCode.NOT_MONOTONIC,
                    message=f"RowIndex not monotonic (last={self._last_row_index})",
                ),
            )
            return

        if self._received >= self._meta.row_limit:
            self._reject(
                sample,
                Rejection(
                    code=RejectCode.LIMIT_REACHED,
                    message=f"RowLimitN reached ({self._meta.row_limit})",
                ),
            )
            return

        normalized = normalize(sample)
        result = validate(normalized)
        if isinstance(result, Rejected):
            self._reject(normalized, result.rejection)
            return

        # Detectors run before the write; a failed write still leaves the
        # row's warnings in the feed and its readings in the windows.
        for record in self._analytics.evaluate(normalized):
            self._warnings.append(record)
            self._notify("on_warning_raised", record)

        self._sink.write_accepted(normalized)
        self._last_row_index = normalized.row_index
        self._received += 1
        self._notify("on_sample_received", self._received)

    def _reject(self, sample: Sample, rejection: Rejection) -> None:
        assert self._sink is not None
        logger.info("Row %d rejected: %s", sample.row_index, rejection.message)
        self._sink.write_rejected(sample, rejection.message)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _fault(self) -> None:
        self._status = SessionStatus.FAULTED
        try:
            self._close_sink()
        except OSError:
            logger.warning("Failed to close session logs cleanly", exc_info=True)
            self._sink = None

    def _close_sink(self) -> None:
        if self._sink is not None:
            self._sink.close()

    def _inactive_message(self) -> str:
        if self._status is SessionStatus.FAULTED:
            return "Session faulted; start a new session"
        return "Session not started"

    def _notify(self, hook: str, *args: Any) -> None:
        for observer in list(self._observers):
            callback = getattr(observer, hook, None)
            if callback is None:
                continue
            try:
                callback(*args)
            except Exception:
                logger.error(
                    "Session observer %r failed on %s", observer, hook, exc_info=True
                )

    def _limit(self) -> int:
        return self._meta.row_limit if self._meta is not None else 0

    def _ack(self, message: str) -> Ack:
        return Ack(
            success=True,
            message=message,
            received_count=self._received,
            percent_of_limit=percent_of_limit(self._received, self._limit()),
        )

    def _fail(self, message: str) -> Ack:
        logger.warning("Session call refused: %s", message)
        return Ack(
            success=False,
            message=message,
            received_count=self._received,
            percent_of_limit=0.0,
        )
