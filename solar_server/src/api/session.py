"""
HTTP transport for the four session operations.

Routes (all under ``/v1/session``):
- POST /start     body: SessionMeta (or null)  -> Ack
- POST /samples   body: Sample (or null)       -> Ack
- POST /end                                    -> Ack
- GET  /warnings                               -> {"warnings": [...]}

Every engine call answers HTTP 200 with the Ack as body; ``Ack.success``
carries the outcome. A body that does not parse as the expected model is
answered with 422 by FastAPI and never reaches the engine.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-010)

TODO:
- None
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Body
from pydantic import BaseModel

from solar_server.src.api.deps import Manager
from solar_server.src.models import Ack, Sample, SessionMeta

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/session", tags=["session"])


class WarningsResponse(BaseModel):
    """Snapshot of the warnings feed."""

    warnings: list[str]


@router.post("/start", response_model=Ack)
async def start_session(
    manager: Manager,
    meta: Annotated[SessionMeta | None, Body()] = None,
) -> Ack:
    """Start a new session, discarding any previous one.

    Args:
        manager: The session engine.
        meta: Session metadata; a missing body yields a failed Ack.

    Returns:
        Ack: Outcome of the start call.
    """
    return await manager.start_session(meta)


@router.post("/samples", response_model=Ack)
async def push_sample(
    manager: Manager,
    sample: Annotated[Sample | None, Body()] = None,
) -> Ack:
    """Push one sample into the active session.

    Args:
        manager: The session engine.
        sample: The telemetry row; a missing body yields a failed Ack.

    Returns:
        Ack: Current accepted count and percent-of-limit.
    """
    return await manager.push_sample(sample)


@router.post("/end", response_model=Ack)
async def end_session(manager: Manager) -> Ack:
    """End the active session and close its logs."""
    return await manager.end_session()


@router.get("/warnings", response_model=WarningsResponse)
async def get_warnings(manager: Manager) -> WarningsResponse:
    """Return the warnings accumulated since the last session start."""
    return WarningsResponse(warnings=manager.get_warnings())
