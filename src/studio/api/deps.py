"""FastAPI dependency injection for the minutes workflow.

The session store and the minutes service are created once at startup and
kept on ``app.state``; endpoints receive them through these dependencies.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from src.studio.minutes.service import MinutesService
from src.studio.minutes.session import MinutesSession, SessionStore


def get_session_store(request: Request) -> SessionStore:
    """Retrieve the SessionStore from app.state, 503 if not available."""
    store = getattr(request.app.state, "session_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session store not initialized",
        )
    return store


def get_minutes_service(request: Request) -> MinutesService:
    """Retrieve the MinutesService from app.state, 503 if not available."""
    service = getattr(request.app.state, "minutes_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Minutes service not initialized (check GEMINI_API_KEY)",
        )
    return service


def get_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> MinutesSession:
    """Resolve the path's session id (SessionNotFoundError -> 404)."""
    return store.get(session_id)
