"""Test fixtures for the minutes workflow.

Provides:
- FakeGenerator: scripted generation capability recording every call
- MinutesService wired to the fake generator and a tmp_path archive
- SessionStore with a default video URL
- FastAPI test app (lifespan not run) with app.state overridden, and an
  async HTTP client against it
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.studio.main import create_app
from src.studio.minutes.archive import MinutesArchive
from src.studio.minutes.service import MinutesService
from src.studio.minutes.session import SessionStore
from src.studio.services.llm import ModelTier, Part

DEFAULT_VIDEO = "https://www.youtube.com/watch?v=default"

HEADER_TEMPLATE = "# ATA <num_ata>\nDia <dia_reunião> de <mês_reunião_por_extenso> de <ano_reunião>"

INITIAL_REPLY = (
    "<<<CABECALHO>>>\n"
    "num_ata: 42\n"
    "dia_reuniao: 19\n"
    "mes_reuniao_por_extenso: fevereiro\n"
    "ano_reuniao: 2026\n"
    "\n"
    "<<<ITEM>>>\n"
    "**Nome:** Aprovação da ata anterior\n"
    "**Status:** abordado\n"
    "\n"
    "<<<ITEM>>>\n"
    "**Nome:** Orçamento\n"
    "**Status:** retirado da pauta\n"
    "\n"
    "<<<EXTRA_PAUTA>>>\n"
    "**Assunto:** Confraternização\n"
)


class FakeGenerator:
    """Scripted generation capability.

    Replies are consumed in order; an Exception instance in the script is
    raised instead of returned. Every call is recorded as (tier, parts).
    """

    def __init__(self, *replies: str | Exception) -> None:
        self.replies: list[str | Exception] = list(replies)
        self.calls: list[tuple[ModelTier, list[Part]]] = []

    def queue(self, *replies: str | Exception) -> None:
        self.replies.extend(replies)

    async def generate(
        self, tier: ModelTier, parts: list[Part], metadata: dict | None = None
    ) -> str:
        self.calls.append((tier, list(parts)))
        if not self.replies:
            raise AssertionError("FakeGenerator has no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def archive(tmp_path) -> MinutesArchive:
    return MinutesArchive(tmp_path / "result", "ant")


@pytest.fixture
def service(generator, archive) -> MinutesService:
    return MinutesService(
        generator=generator,
        archive=archive,
        header_template=HEADER_TEMPLATE,
        video_fps=0.25,
    )


@pytest.fixture
def store() -> SessionStore:
    return SessionStore(default_video_url=DEFAULT_VIDEO)


@pytest.fixture
def app(service, store, archive):
    """FastAPI app with the minutes workflow injected on app.state."""
    application = create_app()
    application.state.session_store = store
    application.state.minutes_service = service
    application.state.minutes_archive = archive
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing the API."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
