"""
Shared test fixtures for session server tests.

All server env vars are cleaned before each test and the working directory
is moved to tmp_path so no .env file is accidentally loaded by Pydantic
BaseSettings. Provides a SessionManager writing under tmp_path with a fixed
session date.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-001)

TODO:
- None
"""

from __future__ import annotations

from pathlib import Path

import pytest
from solar_server.src.config import AnalyticsThresholds
from solar_server.src.session import SessionManager
from solar_server.tests.factories import SESSION_DATE

# All server settings environment variable names, used for cleanup.
_ALL_SERVER_ENV_VARS = (
    "OVER_TEMP_THRESHOLD",
    "VOLTAGE_IMBALANCE_PCT",
    "POWER_FLATLINE_WINDOW",
    "POWER_SPIKE_THRESHOLD",
    "DC_SAG_DELTA",
    "LOW_EFFICIENCY_RATIO",
    "OverTempThreshold",
    "VoltageImbalancePct",
    "PowerFlatlineWindow",
    "PowerSpikeThreshold",
    "DcSagDelta",
    "LowEfficiencyRatio",
    "DATA_ROOT",
    "SERVER_HOST",
    "SERVER_PORT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_server_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Remove all server env vars and isolate from .env files before each test.

    Changes working directory to tmp_path so no .env file is accidentally
    loaded by Pydantic BaseSettings.
    """
    for var in _ALL_SERVER_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def data_root(tmp_path: Path) -> Path:
    """Directory the session logs are written under."""
    return tmp_path / "Data"


@pytest.fixture()
def session_dir(data_root: Path) -> Path:
    """Directory holding the logs of a PLANT-TEST session on SESSION_DATE."""
    return data_root / "PLANT-TEST" / SESSION_DATE.isoformat()


@pytest.fixture()
def manager(data_root: Path) -> SessionManager:
    """SessionManager with default thresholds writing under data_root."""
    return SessionManager(
        data_root,
        AnalyticsThresholds,
        today=lambda: SESSION_DATE,
    )
