"""
Entrypoint for the solar session ingest server.

Loads ``ServerSettings``, configures structured JSON logging, logs a config
summary, and serves the FastAPI app with uvicorn until interrupted. Uvicorn
handles SIGTERM/SIGINT; the app lifespan then aborts any active session so
its logs are left flushed and closed.

Run with::

    python -m solar_server.src.main

CHANGELOG:
- 2026-10-19: Initial creation (STORY-009)

TODO:
- None
"""

from __future__ import annotations

import logging

import uvicorn

from solar_server.src.api.main import build_manager, create_app
from solar_server.src.config import AnalyticsThresholds, ServerSettings
from solar_server.src.logger_config import configure_logging

logger = logging.getLogger(__name__)


def log_config_summary(settings: ServerSettings, thresholds: AnalyticsThresholds) -> None:
    """Log the server and threshold configuration at startup.

    Args:
        settings: Loaded server settings.
        thresholds: Thresholds as they would apply to a session started now.
    """
    logger.info(
        "Solar session server starting with config: "
        "data_root=%s, server_host=%s, server_port=%s, log_level=%s, "
        "over_temp_threshold=%s, voltage_imbalance_pct=%s, "
        "power_flatline_window=%s, power_spike_threshold=%s, "
        "dc_sag_delta=%s, low_efficiency_ratio=%s",
        settings.data_root,
        settings.server_host,
        settings.server_port,
        settings.log_level,
        thresholds.over_temp_threshold,
        thresholds.voltage_imbalance_pct,
        thresholds.power_flatline_window,
        thresholds.power_spike_threshold,
        thresholds.dc_sag_delta,
        thresholds.low_efficiency_ratio,
    )


def main() -> None:
    """Synchronous entrypoint for the session server."""
    settings = ServerSettings()
    configure_logging(settings.log_level)
    log_config_summary(settings, AnalyticsThresholds())

    app = create_app(build_manager(settings))
    uvicorn.run(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
