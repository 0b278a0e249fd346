"""
Server configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
Two settings classes are defined:

- ``AnalyticsThresholds``: detector thresholds, re-read at every session
  start so a new session picks up changed values while a running session
  never observes them. Each option is read under its
  ``OverTempThreshold``-style key or its ``OVER_TEMP_THRESHOLD`` env name;
  the first spelling wins when both are set. A missing or unparsable value
  falls back to its default with a logged warning; thresholds never stop
  the server.
- ``ServerSettings``: storage root and HTTP binding.

CHANGELOG:
- 2026-10-19: Accept OverTempThreshold-style option keys (STORY-015)
- 2026-10-19: Fall back to defaults on unparsable thresholds (STORY-005)
- 2026-10-19: Initial creation (STORY-001)

TODO:
- None
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import AliasChoices, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class AnalyticsThresholds(BaseSettings):
    """Detector thresholds for the streaming analytics engine.

    Attributes:
        over_temp_threshold: Temperature (C) above which OverTemp fires.
        voltage_imbalance_pct: Line-to-line spread, in percent of the
            average, above which VoltageImbalance fires.
        power_flatline_window: Number of consecutive AC power readings
            that must be equal for PowerFlatline to fire.
        power_spike_threshold: Relative AC power jump (multiple of the
            previous reading) above which PowerSpike fires.
        dc_sag_delta: Absolute DC voltage jump above which DCSag fires.
        low_efficiency_ratio: P / (V * I) below which LowEfficiency fires.
    """

    over_temp_threshold: float = Field(
        default=75.0,
        validation_alias=AliasChoices("OverTempThreshold", "over_temp_threshold"),
    )
    voltage_imbalance_pct: float = Field(
        default=10.0,
        validation_alias=AliasChoices("VoltageImbalancePct", "voltage_imbalance_pct"),
    )
    power_flatline_window: int = Field(
        default=5,
        validation_alias=AliasChoices("PowerFlatlineWindow", "power_flatline_window"),
    )
    power_spike_threshold: float = Field(
        default=1.5,
        validation_alias=AliasChoices("PowerSpikeThreshold", "power_spike_threshold"),
    )
    dc_sag_delta: float = Field(
        default=50.0,
        validation_alias=AliasChoices("DcSagDelta", "dc_sag_delta"),
    )
    low_efficiency_ratio: float = Field(
        default=0.6,
        validation_alias=AliasChoices("LowEfficiencyRatio", "low_efficiency_ratio"),
    )

    @field_validator(
        "over_temp_threshold",
        "voltage_imbalance_pct",
        "power_spike_threshold",
        "dc_sag_delta",
        "low_efficiency_ratio",
        mode="before",
    )
    @classmethod
    def _float_or_default(cls, v: Any, info: ValidationInfo) -> Any:
        """Replace an unparsable float with the field default."""
        default = cls.model_fields[info.field_name].default
        try:
            return float(v)
        except (TypeError, ValueError):
            logger.warning(
                "Threshold %s=%r is not a number; using default %s",
                info.field_name.upper(),
                v,
                default,
            )
            return default

    @field_validator("power_flatline_window", mode="before")
    @classmethod
    def _int_or_default(cls, v: Any, info: ValidationInfo) -> Any:
        """Replace an unparsable integer with the field default."""
        default = cls.model_fields[info.field_name].default
        try:
            return int(str(v).strip())
        except (TypeError, ValueError):
            logger.warning(
                "Threshold %s=%r is not an integer; using default %s",
                info.field_name.upper(),
                v,
                default,
            )
            return default

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


class ServerSettings(BaseSettings):
    """Session ingest server configuration.

    Attributes:
        data_root: Directory under which ``<plant>/<date>/`` session logs
            are written.
        server_host: Interface the HTTP transport binds to.
        server_port: TCP port of the HTTP transport.
        log_level: Root log level name.
    """

    data_root: str = "./Data"
    server_host: str = "127.0.0.1"
    server_port: int = 8088
    log_level: str = "INFO"

    @field_validator("server_port")
    @classmethod
    def server_port_must_be_valid(cls, v: int) -> int:
        """Validate TCP port is in valid range."""
        if v < 1 or v > 65535:
            raise ValueError("SERVER_PORT must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        """Validate log level is a standard logging level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"LOG_LEVEL must be a logging level name (got: '{v}')")
        return level

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}
