"""
Append-only CSV logs for accepted and rejected session rows.

Every session owns two text logs under ``<data_root>/<plant_id>/<YYYY-MM-DD>/``:

- ``session.csv``: one line per accepted sample, all channel values rendered
  in their shortest lossless form (``repr``), empty field for missing.
- ``rejects.csv``: one line per rejected sample: row index, quoted reason,
  and a quoted dump of the sample at the point it was refused.

Both files are truncated on open and flushed after every write, so an
abrupt process exit never loses a row that was already acknowledged.

Operations:
- open(): create the directory, truncate both logs, write headers.
- write_accepted(sample): append an accepted row.
- write_rejected(sample, reason): append a rejected row.
- close(): flush and close both logs (idempotent).

Supports the context manager protocol for clean resource management.

CHANGELOG:
- 2026-10-19: Refuse plant_id values that escape the data root; close both
  logs even when flushing one fails (STORY-015)
- 2026-10-19: Initial creation (STORY-005)

TODO:
- None
"""

from __future__ import annotations

import csv
import logging
from datetime import date
from pathlib import Path
from typing import Any, TextIO

from solar_server.src.models import CHANNEL_FIELDS, Sample

logger = logging.getLogger(__name__)

ACCEPTED_FILE_NAME = "session.csv"
REJECTED_FILE_NAME = "rejects.csv"

ACCEPTED_HEADER = "RowIndex,Day,Hour,AcPwrt,DcVolt,Temper,Vl1to2,Vl2to3,Vl3to1,AcCur1,AcVlt1"
REJECTED_HEADER = "RowIndex,Reason,Raw"

# Column names of the channels, in CHANNEL_FIELDS order.
_CHANNEL_COLUMNS: tuple[str, ...] = tuple(ACCEPTED_HEADER.split(",")[3:])


def render_value(value: float | None) -> str:
    """Render a channel value losslessly; missing renders as empty."""
    if value is None:
        return ""
    return repr(float(value))


def render_raw(sample: Sample) -> str:
    """Render the semicolon-separated field dump used in the reject log."""
    parts = [f"Day={sample.day or ''}", f"Hour={sample.hour or ''}"]
    for column, field_name in zip(_CHANNEL_COLUMNS, CHANNEL_FIELDS, strict=True):
        parts.append(f"{column}={render_value(getattr(sample, field_name))}")
    return ";".join(parts)


def session_dir(data_root: str | Path, plant_id: str, session_date: date) -> Path:
    """Return the storage directory for a plant and session date.

    Raises:
        ValueError: If plant_id is not a single directory name, so the
            directory would land outside data_root.
    """
    name_only = Path(plant_id).name == plant_id and "\\" not in plant_id
    if plant_id in ("", ".", "..") or not name_only:
        raise ValueError(f"plant_id {plant_id!r} is not a plain directory name")
    return Path(data_root) / plant_id / session_date.isoformat()


def _close_handle(handle: TextIO | None) -> None:
    if handle is None or handle.closed:
        return
    try:
        handle.flush()
    finally:
        handle.close()


class SessionSink:
    """Two independent append-only CSV logs for one session.

    Args:
        data_root: Root directory for all session logs.
        plant_id: Plant identifier (first directory level).
        session_date: Session date (second directory level).

    Usage::

        with SessionSink("./Data", "PLANT-001", date(2026, 10, 19)) as sink:
            sink.write_accepted(sample)
            sink.write_rejected(other, "AcPwrt < 0")
    """

    def __init__(
        self,
        data_root: str | Path,
        plant_id: str,
        session_date: date,
    ) -> None:
        self._dir = session_dir(data_root, plant_id, session_date)
        self._accepted_file: TextIO | None = None
        self._rejected_file: TextIO | None = None
        self._accepted_writer: Any = None
        self._rejected_writer: Any = None
        self.accepted_count = 0
        self.rejected_count = 0

    @property
    def directory(self) -> Path:
        return self._dir

    @property
    def accepted_path(self) -> Path:
        return self._dir / ACCEPTED_FILE_NAME

    @property
    def rejected_path(self) -> Path:
        return self._dir / REJECTED_FILE_NAME

    @property
    def is_open(self) -> bool:
        return self._accepted_file is not None

    def open(self) -> None:
        """Create the session directory and truncate both logs.

        Raises:
            OSError: If the directory or either log cannot be created.
        """
        self._dir.mkdir(parents=True, exist_ok=True)
        accepted = self.accepted_path.open("w", encoding="utf-8", newline="")
        try:
            rejected = self.rejected_path.open("w", encoding="utf-8", newline="")
        except OSError:
            accepted.close()
            raise

        self._accepted_file = accepted
        self._rejected_file = rejected
        self._accepted_writer = csv.writer(accepted, lineterminator="\n")
        self._rejected_writer = csv.writer(
            rejected, lineterminator="\n", quoting=csv.QUOTE_NONNUMERIC
        )
        accepted.write(ACCEPTED_HEADER + "\n")
        rejected.write(REJECTED_HEADER + "\n")
        accepted.flush()
        rejected.flush()
        self.accepted_count = 0
        self.rejected_count = 0
        logger.info("Opened session logs in %s", self._dir)

    def close(self) -> None:
        """Flush and close both logs. Safe to call more than once."""
        was_open = self._accepted_file is not None
        accepted, rejected = self._accepted_file, self._rejected_file
        self._accepted_file = None
        self._rejected_file = None
        self._accepted_writer = None
        self._rejected_writer = None
        try:
            _close_handle(accepted)
        finally:
            _close_handle(rejected)
        if was_open:
            logger.info(
                "Closed session logs in %s (accepted=%d, rejected=%d)",
                self._dir,
                self.accepted_count,
                self.rejected_count,
            )

    def __enter__(self) -> SessionSink:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def write_accepted(self, sample: Sample) -> None:
        """Append an accepted sample and flush.

        Args:
            sample: The normalized sample that passed validation.
        """
        assert self._accepted_writer is not None, "Sink not opened. Call open()."
        row = [str(sample.row_index), sample.day or "", sample.hour or ""]
        row.extend(render_value(getattr(sample, name)) for name in CHANNEL_FIELDS)
        self._accepted_writer.writerow(row)
        self._accepted_file.flush()  # type: ignore[union-attr]
        self.accepted_count += 1

    def write_rejected(self, sample: Sample, reason: str) -> None:
        """Append a rejected sample with its reason and flush.

        Args:
            sample: The sample as it stood when refused: raw for sequencing
                and limit rejects, normalized for validation rejects.
            reason: Human-readable rejection reason.
        """
        assert self._rejected_writer is not None, "Sink not opened. Call open()."
        self._rejected_writer.writerow([sample.row_index, reason, render_raw(sample)])
        self._rejected_file.flush()  # type: ignore[union-attr]
        self.rejected_count += 1
