"""REST endpoints for minutes sessions.

Thin adapter over MinutesService: every endpoint resolves the session, calls
one state machine action, and shapes the result. Domain errors are turned
into HTTP responses by the exception handlers registered in main.py.

The combined ``/actions`` endpoint mirrors the single-action form used by
the browser client (``action_type`` of ask, adjust or accept).
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.studio.api.deps import get_minutes_service, get_session, get_session_store
from src.studio.minutes.schemas import MinutesDocument, SessionStatus
from src.studio.minutes.service import MinutesService
from src.studio.minutes.session import MinutesSession, SessionStore

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


# ── Request Schemas ──────────────────────────────────────────────────────────


class StartRequest(BaseModel):
    """Start (or restart) generation; empty video_url keeps the session's."""

    video_url: str | None = Field(None, description="Meeting video URL")


class AskRequest(BaseModel):
    question: str = Field(..., description="Question about the current minutes")


class AdjustRequest(BaseModel):
    instruction: str = Field(..., description="Requested change to the minutes")
    include_video: bool = Field(False, description="Re-read the video with the capable model")


class ActionRequest(BaseModel):
    """Generic action request (ask | adjust | accept)."""

    action_type: str
    message: str | None = None
    include_video: bool = False


# ── Response Schemas ─────────────────────────────────────────────────────────


class SessionResponse(BaseModel):
    session_id: str
    video_url: str
    status: SessionStatus
    document: MinutesDocument | None = None
    last_answer: str | None = None
    created_at: str


class DocumentResponse(BaseModel):
    document: MinutesDocument | None
    message: str


class StartResponse(DocumentResponse):
    video_url: str


class AskResponse(DocumentResponse):
    answer: str


class AcceptResponse(DocumentResponse):
    files: list[str] = Field(default_factory=list)


class ActionResponse(DocumentResponse):
    answer: str | None = None
    files: list[str] | None = None


def _session_to_response(session: MinutesSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.id,
        video_url=session.video_url,
        status=session.status,
        document=session.document,
        last_answer=session.last_answer,
        created_at=session.created_at.isoformat(),
    )


# ── Endpoints ────────────────────────────────────────────────────────────────


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(store: SessionStore = Depends(get_session_store)):
    """Create a session pre-filled with the default video URL."""
    return _session_to_response(store.create())


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session_state(session: MinutesSession = Depends(get_session)):
    """Current state of a session (document, last answer, video)."""
    return _session_to_response(session)


@router.post("/{session_id}/start", response_model=StartResponse)
async def start_session(
    body: StartRequest,
    session: MinutesSession = Depends(get_session),
    service: MinutesService = Depends(get_minutes_service),
):
    """Generate the initial sections from the meeting video."""
    document = await service.start(session, body.video_url)
    return StartResponse(
        document=document,
        video_url=session.video_url,
        message="Initial sections generated.",
    )


@router.post("/{session_id}/ask", response_model=AskResponse)
async def ask_session(
    body: AskRequest,
    session: MinutesSession = Depends(get_session),
    service: MinutesService = Depends(get_minutes_service),
):
    """Answer a question; the document is returned unchanged."""
    answer = await service.ask(session, body.question)
    return AskResponse(document=session.document, answer=answer, message="Question answered.")


@router.post("/{session_id}/adjust", response_model=DocumentResponse)
async def adjust_session(
    body: AdjustRequest,
    session: MinutesSession = Depends(get_session),
    service: MinutesService = Depends(get_minutes_service),
):
    """Apply an adjustment and return the updated document."""
    document = await service.adjust(session, body.instruction, body.include_video)
    return DocumentResponse(document=document, message="Sections updated.")


@router.post("/{session_id}/accept", response_model=AcceptResponse)
async def accept_session(
    session: MinutesSession = Depends(get_session),
    service: MinutesService = Depends(get_minutes_service),
):
    """Write the current document to the output directory."""
    files = await service.accept(session)
    return AcceptResponse(
        document=session.document,
        files=files,
        message="Markdown files written.",
    )


@router.post("/{session_id}/actions", response_model=ActionResponse)
async def session_action(
    body: ActionRequest,
    session: MinutesSession = Depends(get_session),
    service: MinutesService = Depends(get_minutes_service),
):
    """Run ask/adjust/accept selected by ``action_type``."""
    result = await service.dispatch(
        session,
        body.action_type,
        message=body.message,
        include_video=body.include_video,
    )
    return ActionResponse(
        document=result["document"],
        answer=result.get("answer"),
        files=result.get("files"),
        message=f"Action '{body.action_type.strip().lower()}' completed.",
    )
