"""
Streaming anomaly detectors for accepted telemetry samples.

One :class:`AnalyticsEngine` lives for the duration of a session. It is fed
every sample that passed sequencing, normalization, and validation, in
arrival order, and returns the warnings that sample triggered. Findings are
advisory only: the engine never rejects or alters a sample.

Detectors (each independent, each skipped when its inputs are missing):

- DC sag/surge: |DcVolt - previous DcVolt| > dc_sag_delta
- DC fault: DcVolt missing or 0 while AcPwrt > 0
- Power spike: previous AcPwrt > 0 and |AcPwrt - prev| > prev * power_spike_threshold
- Power flatline: last ``power_flatline_window`` AcPwrt readings all equal
- Voltage imbalance: (max - min) / avg of the three line-to-line voltages,
  in percent, > voltage_imbalance_pct
- Low efficiency: AcPwrt / (AcVlt1 * AcCur1) < low_efficiency_ratio
- Over-temperature: Temper > over_temp_threshold

The flatline window includes the current reading, so the N-th identical
reading in a row is the one that raises the warning.

CHANGELOG:
- 2026-10-19: Include current reading in flatline window (STORY-004)
- 2026-10-19: Initial creation (STORY-004)

TODO:
- None
"""

from __future__ import annotations

import logging
from collections import deque

from solar_server.src.config import AnalyticsThresholds
from solar_server.src.models import Sample, WarningRecord, WarningType

logger = logging.getLogger(__name__)

FLATLINE_EPSILON = 1e-6
"""Two AC power readings closer than this count as equal."""


class AnalyticsEngine:
    """Per-session rolling detectors over accepted samples.

    Args:
        thresholds: Detector thresholds, fixed for the engine's lifetime.

    Usage::

        engine = AnalyticsEngine(AnalyticsThresholds())
        for sample in accepted_samples:
            for warning in engine.evaluate(sample):
                print(warning.render())
    """

    def __init__(self, thresholds: AnalyticsThresholds) -> None:
        self._thresholds = thresholds
        self._window_size = thresholds.power_flatline_window
        self._prev_dc_voltage: float | None = None
        self._prev_ac_power: float | None = None
        self._power_window: deque[float] = deque()

    @property
    def thresholds(self) -> AnalyticsThresholds:
        """Thresholds this engine was created with."""
        return self._thresholds

    @property
    def power_window(self) -> list[float]:
        """Snapshot of the AC power window, oldest first."""
        return list(self._power_window)

    def reset(self) -> None:
        """Forget all rolling state."""
        self._prev_dc_voltage = None
        self._prev_ac_power = None
        self._power_window.clear()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def evaluate(self, sample: Sample) -> list[WarningRecord]:
        """Run every detector against *sample* and advance the rolling state.

        Args:
            sample: A normalized sample that passed validation.

        Returns:
            Warnings raised by this sample, in detector order. Empty when
            nothing fired.
        """
        warnings: list[WarningRecord] = []
        warnings.extend(self._check_dc(sample))
        warnings.extend(self._check_power(sample))
        warnings.extend(self._check_voltage_imbalance(sample))
        warnings.extend(self._check_efficiency(sample))
        warnings.extend(self._check_temperature(sample))
        return warnings

    # ------------------------------------------------------------------
    # Detectors
    # ------------------------------------------------------------------

    def _check_dc(self, s: Sample) -> list[WarningRecord]:
        found: list[WarningRecord] = []
        dc = s.dc_voltage

        if dc is not None and self._prev_dc_voltage is not None:
            delta = dc - self._prev_dc_voltage
            if abs(delta) > self._thresholds.dc_sag_delta:
                found.append(
                    _warning(
                        WarningType.DC_SAG,
                        f"DCVOLT sudden change Δ={delta:.2f} > "
                        f"{self._thresholds.dc_sag_delta:g}",
                        s,
                    )
                )

        if (dc is None or dc == 0) and s.ac_power is not None and s.ac_power > 0:
            found.append(
                _warning(
                    WarningType.DC_FAULT,
                    "DCVOLT missing or zero while ACPWRT > 0",
                    s,
                )
            )

        if dc is not None:
            self._prev_dc_voltage = dc
        return found

    def _check_power(self, s: Sample) -> list[WarningRecord]:
        power = s.ac_power
        if power is None:
            return []

        found: list[WarningRecord] = []
        prev = self._prev_ac_power
        if prev is not None and prev > 0:
            delta = abs(power - prev)
            limit = prev * self._thresholds.power_spike_threshold
            if delta > limit:
                found.append(
                    _warning(
                        WarningType.POWER_SPIKE,
                        f"Power spike Δ={delta:.2f} > {limit:.2f}",
                        s,
                    )
                )

        if self._window_size >= 1:
            self._power_window.append(power)
            while len(self._power_window) > self._window_size:
                self._power_window.popleft()

            if len(self._power_window) == self._window_size:
                first = self._power_window[0]
                if all(abs(p - first) < FLATLINE_EPSILON for p in self._power_window):
                    found.append(
                        _warning(
                            WarningType.POWER_FLATLINE,
                            f"Power flatline over {self._window_size} samples",
                            s,
                        )
                    )

        self._prev_ac_power = power
        return found

    def _check_voltage_imbalance(self, s: Sample) -> list[WarningRecord]:
        voltages = (s.v_l1_l2, s.v_l2_l3, s.v_l3_l1)
        if any(v is None for v in voltages):
            return []

        avg = sum(voltages) / 3  # type: ignore[arg-type]
        if avg <= 0:
            return []
        imbalance_pct = (max(voltages) - min(voltages)) / avg * 100  # type: ignore[type-var, operator]

        if imbalance_pct > self._thresholds.voltage_imbalance_pct:
            return [
                _warning(
                    WarningType.VOLTAGE_IMBALANCE,
                    f"Voltage imbalance {imbalance_pct:.2f}% > "
                    f"{self._thresholds.voltage_imbalance_pct:g}%",
                    s,
                )
            ]
        return []

    def _check_efficiency(self, s: Sample) -> list[WarningRecord]:
        if s.ac_power is None or s.ac_voltage is None or s.ac_current is None:
            return []
        if s.ac_voltage <= 0:
            return []

        apparent = s.ac_voltage * s.ac_current
        if apparent <= 0:
            return []

        ratio = s.ac_power / apparent
        if ratio < self._thresholds.low_efficiency_ratio:
            return [
                _warning(
                    WarningType.LOW_EFFICIENCY,
                    f"Low efficiency ratio={ratio:.2f} < "
                    f"{self._thresholds.low_efficiency_ratio:g}",
                    s,
                )
            ]
        return []

    def _check_temperature(self, s: Sample) -> list[WarningRecord]:
        if s.temperature is None:
            return []
        if s.temperature > self._thresholds.over_temp_threshold:
            return [
                _warning(
                    WarningType.OVER_TEMP,
                    f"Over temperature {s.temperature:.1f} > "
                    f"{self._thresholds.over_temp_threshold:g}",
                    s,
                )
            ]
        return []


def _warning(kind: WarningType, message: str, sample: Sample) -> WarningRecord:
    logger.debug("Row %d raised %s: %s", sample.row_index, kind, message)
    return WarningRecord(type=kind, message=message, row_index=sample.row_index)
