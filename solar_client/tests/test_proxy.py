"""
Unit tests for the session HTTP client.

Tests verify:
- Each operation hits the right route with the right body.
- Acks and the warnings feed are decoded.
- Network errors and non-200 answers raise SessionClientError.
- close() is idempotent and the async context manager closes the pool.
- End to end against the real app over an in-process ASGI transport.

CHANGELOG:
- 2026-10-19: Initial creation -- TDD tests written first (STORY-013)

TODO:
- None
"""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
from solar_client.src.proxy import SessionClient, SessionClientError
from solar_server.src.api.main import create_app
from solar_server.src.config import AnalyticsThresholds
from solar_server.src.models import Sample, SessionMeta
from solar_server.src.session import SessionManager

_BASE = "http://solar.test"

_ACK = {"success": True, "message": "OK", "received_count": 3, "percent_of_limit": 3.0}


def _sample(row_index: int = 1, **overrides: object) -> Sample:
    fields: dict[str, object] = {
        "row_index": row_index,
        "day": "2023-12-1",
        "hour": "12:00:00",
        "ac_power": 900.0,
        "temperature": None,
    }
    fields.update(overrides)
    return Sample(**fields)


class _Recorder:
    """MockTransport handler that records requests and answers with a fixed body."""

    def __init__(self, body: dict | None = None, status_code: int = 200) -> None:
        self.requests: list[httpx.Request] = []
        self._body = _ACK if body is None else body
        self._status_code = status_code

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self._status_code, json=self._body)


def _client(handler: object) -> SessionClient:
    return SessionClient(_BASE, transport=httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TestRequests:
    """Routes and bodies."""

    @pytest.mark.asyncio
    async def test_start_session(self) -> None:
        recorder = _Recorder()
        async with _client(recorder) as client:
            meta = SessionMeta(plant_id="P1", row_limit=10, file_name="a.csv")
            ack = await client.start_session(meta)

        (request,) = recorder.requests
        assert request.method == "POST"
        assert request.url.path == "/v1/session/start"
        body = json.loads(request.content)
        assert body["plant_id"] == "P1"
        assert body["row_limit"] == 10
        assert body["session_date"] is None
        assert ack.received_count == 3

    @pytest.mark.asyncio
    async def test_push_sample_uses_field_names(self) -> None:
        recorder = _Recorder()
        async with _client(recorder) as client:
            await client.push_sample(_sample(4))

        body = json.loads(recorder.requests[0].content)
        assert recorder.requests[0].url.path == "/v1/session/samples"
        assert body["row_index"] == 4
        assert body["ac_power"] == 900.0
        assert body["temperature"] is None

    @pytest.mark.asyncio
    async def test_end_session(self) -> None:
        recorder = _Recorder({**_ACK, "message": "Session completed"})
        async with _client(recorder) as client:
            ack = await client.end_session()
        assert recorder.requests[0].url.path == "/v1/session/end"
        assert ack.message == "Session completed"

    @pytest.mark.asyncio
    async def test_get_warnings(self) -> None:
        recorder = _Recorder({"warnings": ["[OverTempWarning] x (Row 1)"]})
        async with _client(recorder) as client:
            warnings = await client.get_warnings()
        assert recorder.requests[0].method == "GET"
        assert warnings == ["[OverTempWarning] x (Row 1)"]

    @pytest.mark.asyncio
    async def test_failed_ack_is_returned(self) -> None:
        recorder = _Recorder({"success": False, "message": "Session not started"})
        async with _client(recorder) as client:
            ack = await client.push_sample(_sample())
        assert ack.success is False
        assert ack.received_count == 0


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    """Transport failures raise SessionClientError."""

    @pytest.mark.asyncio
    async def test_connect_error(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(refuse) as client:
            with pytest.raises(SessionClientError, match="connection refused"):
                await client.end_session()

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        def slow(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(slow) as client:
            with pytest.raises(SessionClientError):
                await client.get_warnings()

    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        async with _client(_Recorder({"detail": "boom"}, status_code=500)) as client:
            with pytest.raises(SessionClientError, match="HTTP 500"):
                await client.end_session()

    @pytest.mark.asyncio
    async def test_unprocessable_body(self) -> None:
        async with _client(_Recorder({"detail": []}, status_code=422)) as client:
            with pytest.raises(SessionClientError, match="HTTP 422"):
                await client.push_sample(_sample())


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    """Connection pool handling."""

    @pytest.mark.asyncio
    async def test_close_idempotent(self) -> None:
        client = _client(_Recorder())
        await client.close()
        await client.close()
        assert client.is_closed is True

    @pytest.mark.asyncio
    async def test_context_manager_closes(self) -> None:
        async with _client(_Recorder()) as client:
            assert client.is_closed is False
        assert client.is_closed is True

    def test_base_url_trailing_slash_stripped(self) -> None:
        assert SessionClient(_BASE + "/").base_url == _BASE


# ---------------------------------------------------------------------------
# End to end
# ---------------------------------------------------------------------------


class TestAgainstServer:
    """The client talking to the real app in-process."""

    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path: Path) -> None:
        manager = SessionManager(tmp_path / "Data", AnalyticsThresholds)
        app = create_app(manager)
        app.state.manager = manager
        client = SessionClient(_BASE, transport=httpx.ASGITransport(app=app))

        async with client:
            meta = SessionMeta(plant_id="P1", row_limit=2)
            assert (await client.start_session(meta)).success is True
            await client.push_sample(_sample(1, temperature=80.0))
            await client.push_sample(_sample(1))
            await client.push_sample(_sample(2))
            await client.push_sample(_sample(3))
            warnings = await client.get_warnings()
            end = await client.end_session()

        assert warnings == ["[OverTempWarning] Over temperature 80.0 > 75 (Row 1)"]
        assert end.received_count == 2
        assert end.percent_of_limit == 100.0
        assert manager.rejected_count == 2
