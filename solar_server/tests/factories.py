"""
Builders for samples and session metadata used across the server tests.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-001)

TODO:
- None
"""

from __future__ import annotations

from datetime import date
from typing import Any

from solar_server.src.models import Sample, SessionMeta

SESSION_DATE = date(2026, 10, 19)


def make_sample(row_index: int = 1, **overrides: Any) -> Sample:
    """Return a sample that passes validation and trips no detector.

    Defaults: P=900 W at V=230 V, I=5 A (ratio 0.78), DC 400 V, 40 C,
    balanced 400 V line-to-line voltages.
    """
    fields: dict[str, Any] = {
        "row_index": row_index,
        "day": "2023-12-1",
        "hour": "12:00:00",
        "ac_power": 900.0,
        "dc_voltage": 400.0,
        "temperature": 40.0,
        "v_l1_l2": 400.0,
        "v_l2_l3": 400.0,
        "v_l3_l1": 400.0,
        "ac_current": 5.0,
        "ac_voltage": 230.0,
    }
    fields.update(overrides)
    return Sample(**fields)


def make_meta(row_limit: int = 100, **overrides: Any) -> SessionMeta:
    """Return session metadata for PLANT-TEST on the fixed session date."""
    fields: dict[str, Any] = {
        "plant_id": "PLANT-TEST",
        "file_name": "input.csv",
        "total_rows": 10,
        "schema_version": "1.0",
        "row_limit": row_limit,
        "session_date": SESSION_DATE,
    }
    fields.update(overrides)
    return SessionMeta(**fields)
