"""
Unit tests for client configuration (ClientSettings).

Tests verify:
- Defaults allow running against a local server with no env set.
- Values are read from environment variables.
- SERVER_BASE_URL must be http(s); trailing slash is dropped.
- Numeric constraints on ROW_LIMIT, BREAK_AFTER, WARNINGS_EVERY, timeout.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-012)

TODO:
- None
"""

import pytest
from pydantic import ValidationError
from solar_client.src.config import ClientSettings


class TestClientSettingsDefaults:
    """No env vars set."""

    def test_defaults(self) -> None:
        s = ClientSettings()
        assert s.server_base_url == "http://127.0.0.1:8088"
        assert s.csv_path == "input.csv"
        assert s.client_rejects_path == "rejected_client.csv"
        assert s.plant_id == "PLANT-001"
        assert s.row_limit == 100
        assert s.warnings_every == 5
        assert s.break_after == 0
        assert s.request_timeout_s == 10.0


class TestClientSettingsFromEnv:
    """Env vars override defaults."""

    def test_loads_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SERVER_BASE_URL", "https://solar.example.com/")
        monkeypatch.setenv("CSV_PATH", "/data/plant.csv")
        monkeypatch.setenv("PLANT_ID", "PLANT-042")
        monkeypatch.setenv("ROW_LIMIT", "250")
        monkeypatch.setenv("WARNINGS_EVERY", "10")
        monkeypatch.setenv("BREAK_AFTER", "7")
        monkeypatch.setenv("REQUEST_TIMEOUT_S", "2.5")

        s = ClientSettings()
        assert s.server_base_url == "https://solar.example.com"
        assert s.csv_path == "/data/plant.csv"
        assert s.plant_id == "PLANT-042"
        assert s.row_limit == 250
        assert s.warnings_every == 10
        assert s.break_after == 7
        assert s.request_timeout_s == 2.5


class TestClientSettingsValidation:
    """Invalid values are refused at startup."""

    def test_rejects_non_http_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SERVER_BASE_URL", "ftp://solar.example.com")
        with pytest.raises(ValidationError, match="SERVER_BASE_URL"):
            ClientSettings()

    @pytest.mark.parametrize("var", ["ROW_LIMIT", "BREAK_AFTER"])
    def test_rejects_negative_counts(self, monkeypatch: pytest.MonkeyPatch, var: str) -> None:
        monkeypatch.setenv(var, "-1")
        with pytest.raises(ValidationError, match=">= 0"):
            ClientSettings()

    def test_rejects_zero_warnings_every(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WARNINGS_EVERY", "0")
        with pytest.raises(ValidationError, match="WARNINGS_EVERY"):
            ClientSettings()

    def test_rejects_zero_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REQUEST_TIMEOUT_S", "0")
        with pytest.raises(ValidationError, match="REQUEST_TIMEOUT_S"):
            ClientSettings()
