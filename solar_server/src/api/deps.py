"""
FastAPI dependency injection providers.

Exposes the session manager built by the application lifespan for use with
FastAPI's Depends() mechanism.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-010)
"""

from typing import Annotated

from fastapi import Depends, Request

from solar_server.src.session import SessionManager


def get_manager(request: Request) -> SessionManager:
    """Return the session manager stored on app.state.

    Args:
        request: The incoming FastAPI request.

    Returns:
        SessionManager: The process-wide session engine.
    """
    return request.app.state.manager


# Type alias for injecting the session manager via FastAPI Depends().
Manager = Annotated[SessionManager, Depends(get_manager)]
