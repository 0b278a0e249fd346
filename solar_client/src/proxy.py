"""
HTTP client for the session ingest server.

Mirrors the four server operations (start, push, end, warnings) over the
``/v1/session`` routes. Transport problems (connection errors, timeouts,
non-2xx answers) raise :class:`SessionClientError`; an Ack with
``success=False`` is a normal return value the caller must inspect.

Operations:
- start_session(meta): POST /v1/session/start
- push_sample(sample): POST /v1/session/samples
- end_session(): POST /v1/session/end
- get_warnings(): GET /v1/session/warnings
- close(): close the underlying connection pool.

Supports async context manager protocol for clean resource management.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-013)

TODO:
- None
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from solar_server.src.models import Ack, Sample, SessionMeta

logger = logging.getLogger(__name__)

_SESSION_PREFIX = "/v1/session"


class SessionClientError(RuntimeError):
    """The server could not be reached or answered with an HTTP error."""


class SessionClient:
    """Async client for one server.

    Args:
        base_url: Base URL of the session ingest server.
        timeout_s: Per-request timeout in seconds.
        transport: Optional httpx transport (used by tests).

    Usage::

        async with SessionClient("http://127.0.0.1:8088") as client:
            ack = await client.start_session(meta)
            ack = await client.push_sample(sample)
            warnings = await client.get_warnings()
            summary = await client.end_session()
    """

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout_s,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def close(self) -> None:
        """Close the connection pool. Safe to call more than once."""
        if not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> SessionClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def start_session(self, meta: SessionMeta) -> Ack:
        """Start a session on the server."""
        data = await self._request("POST", "/start", json=meta.model_dump(mode="json"))
        return Ack.model_validate(data)

    async def push_sample(self, sample: Sample) -> Ack:
        """Push one sample into the active session."""
        data = await self._request(
            "POST", "/samples", json=sample.model_dump(mode="json")
        )
        return Ack.model_validate(data)

    async def end_session(self) -> Ack:
        """End the active session."""
        data = await self._request("POST", "/end")
        return Ack.model_validate(data)

    async def get_warnings(self) -> list[str]:
        """Fetch the server's warnings feed."""
        data = await self._request("GET", "/warnings")
        return list(data.get("warnings", []))

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{_SESSION_PREFIX}{path}"
        try:
            response = await self._client.request(method, url, **kwargs)
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            logger.warning("%s %s failed (network error): %s", method, url, exc)
            raise SessionClientError(f"{method} {url} failed: {exc}") from exc

        if response.status_code != 200:
            logger.warning("%s %s failed (HTTP %d)", method, url, response.status_code)
            raise SessionClientError(
                f"{method} {url} returned HTTP {response.status_code}"
            )
        return response.json()
