"""
Structural and range validation for normalized telemetry samples.

``validate(sample)`` returns either :class:`Valid` (carrying the sample) or
:class:`Rejected` (carrying a structured :class:`Rejection`). Expected
domain rejections are values, not exceptions: the validator never raises
and never mutates its input.

Rules are evaluated in a fixed order and the first failing rule determines
the reported reason:

1. day parses as ``yyyy-M-d`` (month/day may be unpadded)
2. hour parses as ``HH:MM:SS`` (zero padded, 24h)
3. AcPwrt >= 0
4. DcVolt >= 0
5. Temper >= -50
6. AcVlt1 > 0
7. AcCur1 >= 0
8. Vl1to2, Vl2to3, Vl3to1 > 0

Channel rules only apply when the channel is present.

CHANGELOG:
- 2026-10-19: Match only ASCII digits in Day and Hour (STORY-015)
- 2026-10-19: Initial creation (STORY-003)

TODO:
- None
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from solar_server.src.models import Sample

_DAY_RE = re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})", re.ASCII)
_HOUR_RE = re.compile(r"([01]\d|2[0-3]):([0-5]\d):([0-5]\d)", re.ASCII)

MIN_TEMPERATURE_C = -50.0


class RejectCode(StrEnum):
    """Machine-readable rejection reasons."""

    INVALID_DAY = "invalid_day"
    INVALID_HOUR = "invalid_hour"
    NEGATIVE_AC_POWER = "negative_ac_power"
    NEGATIVE_DC_VOLTAGE = "negative_dc_voltage"
    TEMPERATURE_TOO_LOW = "temperature_too_low"
    NON_POSITIVE_AC_VOLTAGE = "non_positive_ac_voltage"
    NEGATIVE_AC_CURRENT = "negative_ac_current"
    NON_POSITIVE_V_L1_L2 = "non_positive_v_l1_l2"
    NON_POSITIVE_V_L2_L3 = "non_positive_v_l2_l3"
    NON_POSITIVE_V_L3_L1 = "non_positive_v_l3_l1"
    NOT_MONOTONIC = "not_monotonic"
    LIMIT_REACHED = "limit_reached"


class Rejection(BaseModel):
    """Why a sample was not accepted."""

    model_config = ConfigDict(frozen=True)

    code: RejectCode
    message: str


class Valid(BaseModel):
    """Validation passed; carries the sample that was checked."""

    model_config = ConfigDict(frozen=True)

    sample: Sample

    @property
    def ok(self) -> bool:
        return True


class Rejected(BaseModel):
    """Validation failed; carries the first failing rule."""

    model_config = ConfigDict(frozen=True)

    rejection: Rejection

    @property
    def ok(self) -> bool:
        return False


ValidationResult = Valid | Rejected


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------


def parse_day(text: str | None) -> date | None:
    """Parse a ``yyyy-M-d`` day string; return None when it is not a real date."""
    if not text:
        return None
    match = _DAY_RE.fullmatch(text)
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def is_valid_hour(text: str | None) -> bool:
    """Return True for a zero-padded 24h ``HH:MM:SS`` time of day."""
    return bool(text) and _HOUR_RE.fullmatch(text) is not None


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

_ChannelRule = tuple[str, Callable[[float], bool], RejectCode, str]

_CHANNEL_RULES: tuple[_ChannelRule, ...] = (
    ("ac_power", lambda v: v < 0, RejectCode.NEGATIVE_AC_POWER, "AcPwrt < 0"),
    ("dc_voltage", lambda v: v < 0, RejectCode.NEGATIVE_DC_VOLTAGE, "DcVolt < 0"),
    (
        "temperature",
        lambda v: v < MIN_TEMPERATURE_C,
        RejectCode.TEMPERATURE_TOO_LOW,
        "Temper too low",
    ),
    (
        "ac_voltage",
        lambda v: v <= 0,
        RejectCode.NON_POSITIVE_AC_VOLTAGE,
        "AcVlt1 <= 0",
    ),
    ("ac_current", lambda v: v < 0, RejectCode.NEGATIVE_AC_CURRENT, "AcCur1 < 0"),
    ("v_l1_l2", lambda v: v <= 0, RejectCode.NON_POSITIVE_V_L1_L2, "Vl1to2 <= 0"),
    ("v_l2_l3", lambda v: v <= 0, RejectCode.NON_POSITIVE_V_L2_L3, "Vl2to3 <= 0"),
    ("v_l3_l1", lambda v: v <= 0, RejectCode.NON_POSITIVE_V_L3_L1, "Vl3to1 <= 0"),
)
"""(field, fails-if predicate, code, message), evaluated in order."""


def _reject(code: RejectCode, message: str) -> Rejected:
    return Rejected(rejection=Rejection(code=code, message=message))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate(sample: Sample) -> ValidationResult:
    """Check a normalized sample against the structural and range rules.

    Args:
        sample: A sample that has already been through the normalizer.

    Returns:
        :class:`Valid` wrapping *sample*, or :class:`Rejected` carrying the
        first failing rule.
    """
    if parse_day(sample.day) is None:
        return _reject(RejectCode.INVALID_DAY, "Invalid Day format (expected yyyy-M-d)")

    if not is_valid_hour(sample.hour):
        return _reject(
            RejectCode.INVALID_HOUR, "Invalid Hour format (expected HH:mm:ss)"
        )

    for field_name, fails, code, message in _CHANNEL_RULES:
        value = getattr(sample, field_name)
        if value is not None and fails(value):
            return _reject(code, message)

    return Valid(sample=sample)
