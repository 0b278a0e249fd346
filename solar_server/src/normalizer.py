"""
Pure normalizer that maps sentinel channel readings to "missing".

Plant exports encode "no reading" as the reserved value 32767 on any numeric
channel. The normalizer replaces those values with ``None`` so every later
stage (validation, analytics, persistence) sees a single representation of
a missing reading. Nothing else is changed: no scaling, no clamping.

This is a pure function: no side effects, no I/O. The input sample is left
untouched; a new Sample is returned.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-003)

TODO:
- None
"""

from __future__ import annotations

import logging

from solar_server.src.models import CHANNEL_FIELDS, Sample

logger = logging.getLogger(__name__)

SENTINEL = 32767.0
"""Reserved channel value meaning "no reading"."""

SENTINEL_TOLERANCE = 1e-9


def is_sentinel(value: float | None) -> bool:
    """Return True if *value* is the reserved no-reading code."""
    return value is not None and abs(value - SENTINEL) < SENTINEL_TOLERANCE


def normalize(sample: Sample) -> Sample:
    """Return a copy of *sample* with sentinel channel values set to None.

    Args:
        sample: The sample as pushed by the client.

    Returns:
        A new :class:`Sample`. Identical to the input when no channel
        carries the sentinel.
    """
    missing = {
        name: None for name in CHANNEL_FIELDS if is_sentinel(getattr(sample, name))
    }
    if not missing:
        return sample.model_copy()

    logger.debug(
        "Row %d: sentinel on %s mapped to missing",
        sample.row_index,
        ", ".join(sorted(missing)),
    )
    return sample.model_copy(update=missing)
