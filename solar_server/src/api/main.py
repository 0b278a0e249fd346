"""
FastAPI application factory for the session ingest server.

``create_app`` wires the routers and a lifespan that owns the session
engine. When no engine is injected the lifespan builds one from
``ServerSettings`` and subscribes the logging observer. On shutdown any
still-active session is aborted so its logs are flushed and closed even
though the client never called end.

CHANGELOG:
- 2026-10-19: Abort active session on shutdown (STORY-008)
- 2026-10-19: Initial creation (STORY-010)
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from solar_server.src.api.health import router as health_router
from solar_server.src.api.session import router as session_router
from solar_server.src.config import AnalyticsThresholds, ServerSettings
from solar_server.src.events import LoggingObserver
from solar_server.src.session import SessionManager

logger = logging.getLogger(__name__)


def build_manager(settings: ServerSettings) -> SessionManager:
    """Construct the session engine for a server process.

    Args:
        settings: Loaded server settings.

    Returns:
        SessionManager: Engine writing under ``settings.data_root`` with the
        logging observer attached.
    """
    manager = SessionManager(settings.data_root, AnalyticsThresholds)
    manager.subscribe(LoggingObserver())
    return manager


def create_app(manager: SessionManager | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        manager: Engine to serve. Built from ``ServerSettings`` at startup
            when omitted.

    Returns:
        FastAPI: The configured application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan: engine setup and abnormal-teardown cleanup."""
        engine = manager
        if engine is None:
            settings = ServerSettings()
            engine = build_manager(settings)
            logger.info("Session logs will be written under %s", settings.data_root)
        app.state.manager = engine

        logger.info("Solar session server ready")
        yield
        await engine.abort()
        logger.info("Solar session server shutting down")

    app = FastAPI(
        title="Solar Session Ingest API",
        description="Session-based ingestion of PV plant telemetry.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(health_router)
    app.include_router(session_router)

    @app.get("/")
    async def root() -> dict:
        """Root health check endpoint.

        Returns:
            dict: JSON object with application status.
        """
        return {"status": "ok"}

    return app
