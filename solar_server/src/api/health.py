"""
Health check endpoint for the session ingest server.

GET /health returns HTTP 200 with the engine status, so a supervisor can
tell a live idle server from one holding a faulted session.

CHANGELOG:
- 2026-10-19: Report session status (STORY-011)
- 2026-10-19: Initial creation (STORY-010)

TODO:
- None
"""

from fastapi import APIRouter

from solar_server.src.api.deps import Manager

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(manager: Manager) -> dict[str, str]:
    """Return a simple health status.

    Returns:
        dict: ``{"status": "ok", "session": "<idle|active|faulted>"}``.
    """
    return {"status": "ok", "session": str(manager.status)}
