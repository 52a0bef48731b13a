#!/usr/bin/env python3
"""Terminal client for generating and refining meeting minutes.

Usage:
    uv run python scripts/minutes_chat.py
    uv run python scripts/minutes_chat.py --video https://www.youtube.com/watch?v=... --output ./result

Reads GEMINI_API_KEY, model names, header template and defaults from the
environment or .env file (see src/studio/config.py).
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Ensure project root is on sys.path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))

from src.studio.api.middleware.logging import configure_structlog  # noqa: E402
from src.studio.config import get_settings  # noqa: E402
from src.studio.errors import ConfigurationError  # noqa: E402
from src.studio.minutes.archive import MinutesArchive  # noqa: E402
from src.studio.minutes.service import MinutesService  # noqa: E402
from src.studio.minutes.session import SessionStore  # noqa: E402
from src.studio.services.llm import LLMService  # noqa: E402
from src.studio.terminal import run_terminal  # noqa: E402


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate meeting minutes from a video")
    parser.add_argument("--video", help="Default video URL (overrides DEFAULT_VIDEO_URL)")
    parser.add_argument("--output", help="Output directory (overrides OUTPUT_DIR)")
    args = parser.parse_args()

    settings = get_settings()
    configure_structlog()

    try:
        llm_service = LLMService(settings)
    except ConfigurationError as exc:
        print(f"Erro de configuração: {exc}", file=sys.stderr)
        return 1

    archive = MinutesArchive(args.output or settings.OUTPUT_DIR, settings.ARCHIVE_DIRNAME)
    service = MinutesService(
        generator=llm_service,
        archive=archive,
        header_template=settings.HEADER_TEMPLATE,
        video_fps=settings.VIDEO_FPS,
    )
    store = SessionStore(default_video_url=args.video or settings.DEFAULT_VIDEO_URL)

    print("\n=== Atas de reunião a partir de vídeo ===\n")
    return asyncio.run(run_terminal(service, store))


if __name__ == "__main__":
    sys.exit(main())
