"""Minutes sessions and the in-process session store.

A MinutesSession exclusively owns its current document. Sessions live for the
lifetime of the process; the store is an explicit object created at startup
and handed to the adapters that need it.
"""

from __future__ import annotations

import asyncio
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

import structlog

from src.studio.core.monitoring import active_sessions
from src.studio.errors import SessionNotFoundError
from src.studio.minutes.schemas import MinutesDocument, SessionStatus

logger = structlog.get_logger(__name__)


@dataclass
class MinutesSession:
    """Conversation state for one minutes document.

    ``document`` is replaced wholesale by successful start/adjust rounds and
    is never mutated in place. ``lock`` serializes actions on this session.
    """

    id: str
    video_url: str = ""
    document: MinutesDocument | None = None
    last_answer: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def status(self) -> SessionStatus:
        return SessionStatus.EMPTY if self.document is None else SessionStatus.READY

    def replace_document(self, document: MinutesDocument) -> None:
        """Install a new document snapshot; any previous answer is stale."""
        self.document = document
        self.last_answer = None


class SessionStore:
    """Thread-safe registry of live sessions keyed by id.

    Args:
        default_video_url: Video URL new sessions start with.
    """

    def __init__(self, default_video_url: str = "") -> None:
        self._default_video_url = default_video_url
        self._sessions: dict[str, MinutesSession] = {}
        self._lock = threading.Lock()

    @property
    def default_video_url(self) -> str:
        return self._default_video_url

    def create(self) -> MinutesSession:
        """Create and register a session with a fresh, unique id."""
        with self._lock:
            session_id = str(uuid.uuid4())
            while session_id in self._sessions:
                session_id = str(uuid.uuid4())
            session = MinutesSession(id=session_id, video_url=self._default_video_url)
            self._sessions[session_id] = session
            active_sessions.set(len(self._sessions))

        logger.info("minutes.session_created", session_id=session_id)
        return session

    def get(self, session_id: str | None) -> MinutesSession:
        """Look up a live session.

        Raises:
            SessionNotFoundError: If the id is empty or unknown.
        """
        with self._lock:
            session = self._sessions.get(session_id or "")
        if session is None:
            raise SessionNotFoundError(session_id or "")
        return session

    def discard(self, session_id: str) -> bool:
        """Drop a session. Returns False if it did not exist."""
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None
            active_sessions.set(len(self._sessions))
        if removed:
            logger.info("minutes.session_discarded", session_id=session_id)
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions
