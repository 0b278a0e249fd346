"""
Shared test fixtures for the CSV client tests.

All client env vars are cleaned before each test and the working directory
is moved to tmp_path so no .env file is accidentally loaded by Pydantic
BaseSettings. Provides a small plant export on disk.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-012)

TODO:
- None
"""

from __future__ import annotations

from pathlib import Path

import pytest
from solar_client.tests.factories import data_line, write_export

_ALL_CLIENT_ENV_VARS = (
    "SERVER_BASE_URL",
    "CSV_PATH",
    "CLIENT_REJECTS_PATH",
    "PLANT_ID",
    "SCHEMA_VERSION",
    "ROW_LIMIT",
    "WARNINGS_EVERY",
    "BREAK_AFTER",
    "REQUEST_TIMEOUT_S",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_client_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Remove all client env vars and isolate from .env files before each test."""
    for var in _ALL_CLIENT_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def export_csv(tmp_path: Path) -> Path:
    """A three-row plant export."""
    return write_export(
        tmp_path / "export.csv",
        [data_line(0), data_line(1, hour="00:10:00"), data_line(2, hour="00:15:00")],
    )


@pytest.fixture()
def rejects_csv(tmp_path: Path) -> Path:
    """Path of the client reject log."""
    return tmp_path / "rejected_client.csv"
