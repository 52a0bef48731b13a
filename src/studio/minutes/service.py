"""MinutesService -- the session state machine.

Applies the four session actions with their preconditions:

    start(video)          empty|ready -> ready   capable tier, video + initial prompt
    ask(question)         ready -> ready         capable tier, video + question prompt
    adjust(instr, video?) ready -> ready         capable+video or fast text-only
    accept()              ready -> ready         archive the current document

Every action runs under the session's lock and computes its result before
touching the session, so a failure (invalid input, generation error, parse
contract violation, persistence error) leaves the session exactly as it was.
The header section is synthesized from the template only on start.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

import structlog

from src.studio.core.monitoring import record_action
from src.studio.errors import InvalidInputError, MinutesError, SessionStateError
from src.studio.minutes.archive import MinutesArchive
from src.studio.minutes.header import render_header_section
from src.studio.minutes.parser import parse_document
from src.studio.minutes.prompts import (
    adjust_with_video_prompt,
    adjust_without_video_prompt,
    initial_prompt,
    question_prompt,
)
from src.studio.minutes.schemas import MinutesDocument
from src.studio.minutes.serializer import serialize_context
from src.studio.minutes.session import MinutesSession
from src.studio.services.llm import ModelTier, Part, VideoPart

logger = structlog.get_logger(__name__)

ACTION_TYPES = ("ask", "adjust", "accept")


class TextGenerator(Protocol):
    """Generation capability the service depends on (LLMService shape)."""

    async def generate(
        self, tier: ModelTier, parts: list[Part], metadata: dict | None = None
    ) -> str: ...


class MinutesService:
    """Runs minutes session actions against a generator and an archive.

    Args:
        generator: Generation capability (LLMService or a test double).
        archive: Destination for accepted documents.
        header_template: Template for the synthesized header section.
        video_fps: Frame sampling hint sent with every video part.
    """

    def __init__(
        self,
        generator: TextGenerator,
        archive: MinutesArchive,
        header_template: str,
        video_fps: float = 0.25,
    ) -> None:
        self._generator = generator
        self._archive = archive
        self._header_template = header_template
        self._video_fps = video_fps

    async def start(self, session: MinutesSession, video_url: str | None = None) -> MinutesDocument:
        """Generate the initial document from the meeting video.

        Args:
            session: Target session (empty or ready; ready means restart).
            video_url: Video to analyse. Falls back to the session's URL.

        Returns:
            The new document, header section first.
        """
        async with session.lock:
            resolved = (video_url or session.video_url or "").strip()
            if not resolved:
                raise InvalidInputError("A video URL is required to start")

            with _action_outcome("start", session):
                reply = await self._generator.generate(
                    ModelTier.CAPABLE,
                    [self._video(resolved), initial_prompt()],
                    metadata={"session_id": session.id, "action": "start"},
                )
                parsed = parse_document(reply)
                header_section = render_header_section(self._header_template, parsed.header)
                document = parsed.with_items((header_section, *parsed.items))

            session.video_url = resolved
            session.replace_document(document)
            logger.info(
                "minutes.start_completed",
                session_id=session.id,
                items=len(document.items),
                has_extra=document.extra is not None,
                header_resolved=bool(parsed.header and parsed.header.is_resolved),
            )
            return document

    async def ask(self, session: MinutesSession, question: str) -> str:
        """Answer a question about the current document without changing it."""
        async with session.lock:
            document = _require_document(session)
            question = _require_text(question, "question")

            with _action_outcome("ask", session):
                answer = await self._generator.generate(
                    ModelTier.CAPABLE,
                    [
                        self._video(session.video_url),
                        question_prompt(question, serialize_context(document)),
                    ],
                    metadata={"session_id": session.id, "action": "ask"},
                )

            session.last_answer = answer
            logger.info("minutes.ask_completed", session_id=session.id, answer_chars=len(answer))
            return answer

    async def adjust(
        self,
        session: MinutesSession,
        instruction: str,
        include_video: bool = False,
    ) -> MinutesDocument:
        """Apply an adjustment and replace the document with the result.

        With ``include_video`` the capable tier re-reads the video; otherwise
        the fast tier transforms the text alone.
        """
        async with session.lock:
            current = _require_document(session)
            instruction = _require_text(instruction, "instruction")
            context = serialize_context(current)

            if include_video:
                tier = ModelTier.CAPABLE
                parts: list[Part] = [
                    self._video(session.video_url),
                    adjust_with_video_prompt(instruction, context),
                ]
            else:
                tier = ModelTier.FAST
                parts = [adjust_without_video_prompt(instruction, context)]

            with _action_outcome("adjust", session):
                reply = await self._generator.generate(
                    tier,
                    parts,
                    metadata={"session_id": session.id, "action": "adjust"},
                )
                parsed = parse_document(reply)

            # Keep the previously extracted metadata when the reply omits it
            document = parsed.model_copy(update={"header": parsed.header or current.header})
            session.replace_document(document)
            logger.info(
                "minutes.adjust_completed",
                session_id=session.id,
                tier=tier.value,
                items=len(document.items),
                has_extra=document.extra is not None,
            )
            return document

    async def accept(self, session: MinutesSession) -> list[str]:
        """Write the current document to the archive. Returns file names."""
        async with session.lock:
            document = _require_document(session)
            with _action_outcome("accept", session):
                files = await asyncio.to_thread(self._archive.write, document)
            logger.info("minutes.accept_completed", session_id=session.id, files=files)
            return files

    async def dispatch(
        self,
        session: MinutesSession,
        action_type: str,
        message: str | None = None,
        include_video: bool = False,
    ) -> dict:
        """Route a generic action request to ask/adjust/accept.

        Returns:
            Dict with the resulting ``document`` plus ``answer`` (ask) or
            ``files`` (accept).

        Raises:
            InvalidInputError: If ``action_type`` is not a known action.
        """
        action = (action_type or "").strip().lower()
        if action == "ask":
            answer = await self.ask(session, message or "")
            return {"document": session.document, "answer": answer}
        if action == "adjust":
            document = await self.adjust(session, message or "", include_video)
            return {"document": document}
        if action == "accept":
            files = await self.accept(session)
            return {"document": session.document, "files": files}
        raise InvalidInputError(
            f"Invalid action type {action_type!r}; expected one of {', '.join(ACTION_TYPES)}"
        )

    def _video(self, url: str) -> VideoPart:
        return VideoPart(url=url, fps=self._video_fps)


# ── Module-Level Helpers ─────────────────────────────────────────────────────


def _require_document(session: MinutesSession) -> MinutesDocument:
    if session.document is None:
        raise SessionStateError("Generate the initial sections before continuing")
    return session.document


def _require_text(value: str | None, name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidInputError(f"The {name} must not be empty")
    return text


@contextmanager
def _action_outcome(action: str, session: MinutesSession) -> Iterator[None]:
    """Count an action's outcome and log failures with the session id."""
    try:
        yield
    except MinutesError as exc:
        record_action(action, type(exc).__name__)
        logger.warning(
            "minutes.action_failed",
            action=action,
            session_id=session.id,
            error_kind=type(exc).__name__,
            error=str(exc),
        )
        raise
    except Exception:
        record_action(action, "unexpected")
        raise
    record_action(action, "ok")
