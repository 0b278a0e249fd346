"""
Client entrypoint: stream one plant CSV export through a server session.

Flow:
1. Build SessionMeta from settings and the export (file name, row count).
2. Start the session; stop if the server refuses.
3. Push every parsed sample in order, logging any failed Ack.
4. Every ``WARNINGS_EVERY`` pushes, fetch and log the server warnings feed.
5. If ``BREAK_AFTER`` is set, drop the connection after that many pushes
   without ending the session (exercises the server's abort path).
6. Otherwise end the session and log the summary.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-014)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import closing
from datetime import UTC, datetime
from pathlib import Path

from solar_client.src.config import ClientSettings
from solar_client.src.csv_reader import count_data_rows, read_samples
from solar_client.src.proxy import SessionClient, SessionClientError
from solar_server.src.logger_config import configure_logging
from solar_server.src.models import Ack, SessionMeta

logger = logging.getLogger(__name__)


def build_meta(settings: ClientSettings, csv_path: Path) -> SessionMeta:
    """Build the session metadata for a CSV export."""
    return SessionMeta(
        plant_id=settings.plant_id,
        file_name=csv_path.name,
        total_rows=count_data_rows(csv_path),
        schema_version=settings.schema_version,
        row_limit=settings.row_limit,
        session_date=datetime.now(tz=UTC).date(),
    )


async def _log_warnings(client: SessionClient) -> None:
    for warning in await client.get_warnings():
        logger.warning("Server warning: %s", warning)


async def run_transfer(settings: ClientSettings, client: SessionClient) -> Ack | None:
    """Stream the configured CSV export through one session.

    Args:
        settings: Client settings.
        client: Connected session client. Closed here when a dropped
            connection is simulated.

    Returns:
        The end-of-session Ack, or None when the session was refused or the
        connection was dropped on purpose.

    Raises:
        FileNotFoundError: If the CSV export does not exist.
        SessionClientError: If the server cannot be reached.
    """
    csv_path = Path(settings.csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file '{csv_path}' not found")

    meta = build_meta(settings, csv_path)
    start_ack = await client.start_session(meta)
    logger.info("Session start: %s", start_ack.message)
    if not start_ack.success:
        return None

    sent = 0
    samples = read_samples(csv_path, settings.row_limit, settings.client_rejects_path)
    with closing(samples):
        for sample in samples:
            ack = await client.push_sample(sample)
            sent += 1

            if not ack.success:
                logger.warning(
                    "Push of row %d failed: %s", sample.row_index, ack.message
                )

            if sent % settings.warnings_every == 0:
                await _log_warnings(client)

            if settings.break_after and sent == settings.break_after:
                logger.warning("Simulating connection drop after %d samples", sent)
                await client.close()
                return None

    end_ack = await client.end_session()
    logger.info(
        "Session end: %s (%d rows, %.2f%%)",
        end_ack.message,
        end_ack.received_count,
        end_ack.percent_of_limit,
    )
    return end_ack


def log_config_summary(settings: ClientSettings) -> None:
    """Log the client configuration at startup."""
    logger.info(
        "Solar client starting with config: "
        "server_base_url=%s, csv_path=%s, client_rejects_path=%s, "
        "plant_id=%s, row_limit=%s, warnings_every=%s, break_after=%s",
        settings.server_base_url,
        settings.csv_path,
        settings.client_rejects_path,
        settings.plant_id,
        settings.row_limit,
        settings.warnings_every,
        settings.break_after,
    )


async def async_main() -> int:
    """Async entrypoint: load config, run the transfer, map failures to exit codes."""
    settings = ClientSettings()
    configure_logging(settings.log_level)
    log_config_summary(settings)

    try:
        async with SessionClient(
            settings.server_base_url, timeout_s=settings.request_timeout_s
        ) as client:
            await run_transfer(settings, client)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 2
    except SessionClientError as exc:
        logger.error("Server unreachable at %s: %s", settings.server_base_url, exc)
        return 1
    return 0


def main() -> None:
    """Synchronous entrypoint for the client."""
    sys.exit(asyncio.run(async_main()))


if __name__ == "__main__":
    main()
