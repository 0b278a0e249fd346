"""
Reader that turns a plant CSV export into a stream of Samples.

Export layout: a header line beginning (after any leading commas) with
``DAY,HOUR,ACPWRT``, then one line per reading. Data lines carry a leading
index column, so the cells used are:

====  =========================================
col   meaning
====  =========================================
1     day as ``YYYYDDD`` (year * 1000 + day of year)
2     hour, ``HH:MM:SS``
3     ACPWRT
4     DCVOLT
6     TEMPER
7-9   VL1TO2, VL2TO3, VL3TO1
10    ACCUR1
13    ACVLT1
====  =========================================

Blank or unparsable numeric cells and the 32767 sentinel become missing.
A line that cannot be turned into a sample (bad day-of-year, too few
columns) is written to the client reject log and skipped; good lines get
consecutive row indices starting at 1.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-012)

TODO:
- None
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterator
from datetime import date, timedelta
from pathlib import Path

from solar_server.src.models import Sample
from solar_server.src.normalizer import is_sentinel
from solar_server.src.sink import REJECTED_HEADER

logger = logging.getLogger(__name__)

EXPECTED_HEADER_PREFIX = "DAY,HOUR,ACPWRT"

# Sample field -> data column index.
_CHANNEL_COLUMNS: dict[str, int] = {
    "ac_power": 3,
    "dc_voltage": 4,
    "temperature": 6,
    "v_l1_l2": 7,
    "v_l2_l3": 8,
    "v_l3_l1": 9,
    "ac_current": 10,
    "ac_voltage": 13,
}


class RowParseError(ValueError):
    """A data line could not be turned into a Sample."""


def parse_number(cell: str) -> float | None:
    """Parse a numeric cell; blank, unparsable, or sentinel yields None."""
    text = cell.strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if is_sentinel(value):
        return None
    return value


def day_from_year_doy(cell: str) -> str:
    """Convert ``YYYYDDD`` into an unpadded ``yyyy-M-d`` day string.

    Raises:
        RowParseError: If the cell is not an integer or the day of year
            is outside 1..366.
    """
    try:
        year_doy = int(cell.strip())
    except ValueError:
        raise RowParseError(f"Invalid DAY value '{cell}'") from None

    year, doy = divmod(year_doy, 1000)
    if doy < 1 or doy > 366:
        raise RowParseError("Invalid DOY")
    try:
        day = date(year, 1, 1) + timedelta(days=doy - 1)
    except (ValueError, OverflowError):
        raise RowParseError(f"Invalid year in DAY value '{cell}'") from None
    return f"{day.year}-{day.month}-{day.day}"


def parse_row(parts: list[str], row_index: int) -> Sample:
    """Build a Sample from the split cells of one data line.

    Raises:
        RowParseError: If the line is too short or its day is invalid.
    """
    needed = max(_CHANNEL_COLUMNS.values()) + 1
    if len(parts) < needed:
        raise RowParseError(f"Expected at least {needed} columns, got {len(parts)}")

    channels = {name: parse_number(parts[col]) for name, col in _CHANNEL_COLUMNS.items()}
    return Sample(
        row_index=row_index,
        day=day_from_year_doy(parts[1]),
        hour=parts[2].strip(),
        **channels,
    )


def count_data_rows(path: str | Path) -> int:
    """Return the number of lines after the header (the declared total)."""
    with Path(path).open(encoding="utf-8") as fh:
        total = sum(1 for _ in fh)
    return max(total - 1, 0)


def read_samples(
    path: str | Path,
    limit: int,
    rejects_path: str | Path,
) -> Iterator[Sample]:
    """Yield Samples from a plant CSV export.

    The reject log is truncated and given its header before the first line
    is read. Nothing is yielded when the export header is missing or wrong.

    Args:
        path: The CSV export to read.
        limit: Stop after this many samples have been yielded.
        rejects_path: Where unparsable lines are recorded.

    Yields:
        Sample: One per parsable data line, row indices from 1.
    """
    with (
        Path(path).open(encoding="utf-8") as reader,
        Path(rejects_path).open("w", encoding="utf-8", newline="") as rejects,
    ):
        rejects.write(REJECTED_HEADER + "\n")
        reject_writer = csv.writer(
            rejects, lineterminator="\n", quoting=csv.QUOTE_NONNUMERIC
        )

        header = reader.readline().strip().lstrip(",")
        if not header.upper().startswith(EXPECTED_HEADER_PREFIX):
            logger.warning("Unexpected CSV header in %s: %r", path, header[:40])
            return

        yielded = 0
        for raw_line in reader:
            if yielded >= limit:
                break
            line = raw_line.strip()
            if not line:
                continue
            line = line.lstrip(",")

            row_index = yielded + 1
            try:
                sample = parse_row(line.split(","), row_index)
            except RowParseError as exc:
                logger.warning("Client rejected row %d: %s", row_index, exc)
                reject_writer.writerow([row_index, str(exc), line])
                rejects.flush()
                continue

            yield sample
            yielded += 1
