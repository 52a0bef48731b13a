"""Generation capability via LiteLLM Router.

Two model groups are registered on the router:
- "capable": video-grounded reasoning (initial generation, questions,
  adjustments that re-read the video)
- "fast": text-only transforms of already-extracted sections

Callers pass an ordered list of parts, each a prompt string or a VideoPart,
and get the reply text back. Provider and transport failures surface as
GenerationFailure; the router's own timeout/retry settings are the only
retry policy applied here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

import structlog
from litellm import Router

from src.studio.config import Settings, get_settings
from src.studio.core.monitoring import track_llm_call
from src.studio.errors import GenerationFailure

logger = structlog.get_logger(__name__)


class ModelTier(str, Enum):
    """Router model group a generation call is sent to."""

    CAPABLE = "capable"
    FAST = "fast"


@dataclass(frozen=True)
class VideoPart:
    """Reference to the meeting video, sent alongside a prompt.

    Attributes:
        url: Address the provider can fetch (e.g. a YouTube URL).
        fps: Frame sampling hint; meetings change slowly so a low rate is
            enough and keeps token usage down.
        mime_type: Declared media type of the video.
    """

    url: str
    fps: float = 0.25
    mime_type: str = "video/mp4"

    def to_content_block(self) -> dict:
        return {
            "type": "file",
            "file": {
                "file_id": self.url,
                "format": self.mime_type,
                "video_metadata": {"fps": self.fps},
            },
        }


Part = Union[str, VideoPart]


def build_messages(parts: list[Part]) -> list[dict]:
    """Convert ordered parts into a single user message of content blocks."""
    content: list[dict] = []
    for part in parts:
        if isinstance(part, VideoPart):
            content.append(part.to_content_block())
        else:
            content.append({"type": "text", "text": part})
    return [{"role": "user", "content": content}]


# ── LLM Service ──────────────────────────────────────────────────────────────


class LLMService:
    """Tiered text generation over a LiteLLM Router.

    Args:
        settings: Application settings. Uses get_settings() if None.

    Raises:
        ConfigurationError: If no API key is configured.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        if settings is None:
            settings = get_settings()
        settings.require_generation_config()

        model_list = [
            {
                "model_name": ModelTier.CAPABLE.value,
                "litellm_params": {
                    "model": settings.CAPABLE_MODEL,
                    "api_key": settings.GEMINI_API_KEY,
                },
            },
            {
                "model_name": ModelTier.FAST.value,
                "litellm_params": {
                    "model": settings.FAST_MODEL,
                    "api_key": settings.GEMINI_API_KEY,
                },
            },
        ]

        self.router = Router(
            model_list=model_list,
            num_retries=settings.LLM_MAX_RETRIES,
            timeout=settings.LLM_TIMEOUT,
        )
        logger.info(
            "llm.router_configured",
            capable_model=settings.CAPABLE_MODEL,
            fast_model=settings.FAST_MODEL,
        )

    async def generate(
        self,
        tier: ModelTier,
        parts: list[Part],
        metadata: dict | None = None,
    ) -> str:
        """Run one generation call and return the reply text.

        Args:
            tier: Model group to route to.
            parts: Ordered prompt strings and video references.
            metadata: Extra metadata forwarded to LiteLLM callbacks.

        Returns:
            Reply text (empty string if the provider returned no content).

        Raises:
            GenerationFailure: If the provider call fails.
        """
        async with track_llm_call(tier.value) as tracker:
            try:
                response = await self.router.acompletion(
                    model=tier.value,
                    messages=build_messages(parts),
                    metadata=metadata or {},
                )
            except Exception as exc:
                logger.warning(
                    "llm.generation_failed",
                    tier=tier.value,
                    error=str(exc),
                )
                raise GenerationFailure(
                    f"Generation call failed on tier '{tier.value}': {exc}",
                    tier=tier.value,
                    original_error=exc,
                ) from exc

            if getattr(response, "usage", None):
                tracker["prompt_tokens"] = response.usage.prompt_tokens
                tracker["completion_tokens"] = response.usage.completion_tokens

        content = response.choices[0].message.content or ""
        logger.debug(
            "llm.generation_completed",
            tier=tier.value,
            model=getattr(response, "model", None),
            response_chars=len(content),
        )
        return content
