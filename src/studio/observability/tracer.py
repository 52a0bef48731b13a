"""Langfuse tracing for LiteLLM generation calls.

Registers Langfuse as a LiteLLM success/failure callback so every generation
call is traced with the metadata the minutes service attaches (session_id,
action). When Langfuse keys are not configured this is a no-op.
"""

from __future__ import annotations

import os

import structlog

from src.studio.config import Settings, get_settings

logger = structlog.get_logger(__name__)


def init_langfuse(settings: Settings | None = None) -> bool:
    """Initialize Langfuse tracing on LiteLLM.

    Sets LANGFUSE_* environment variables from the application settings if
    not already present, then appends "langfuse" to LiteLLM's callbacks. The
    callback loads the ``langfuse`` SDK, a declared project dependency.

    Args:
        settings: Application settings. Uses get_settings() if None.

    Returns:
        True if Langfuse was initialized, False if skipped.
    """
    if settings is None:
        settings = get_settings()

    if not settings.LANGFUSE_PUBLIC_KEY or not settings.LANGFUSE_SECRET_KEY:
        logger.info(
            "langfuse.skipped",
            reason="LANGFUSE_PUBLIC_KEY or LANGFUSE_SECRET_KEY not configured",
        )
        return False

    # Explicit env vars take precedence over Settings
    _set_env_if_missing("LANGFUSE_PUBLIC_KEY", settings.LANGFUSE_PUBLIC_KEY)
    _set_env_if_missing("LANGFUSE_SECRET_KEY", settings.LANGFUSE_SECRET_KEY)
    _set_env_if_missing("LANGFUSE_HOST", settings.LANGFUSE_HOST)

    import litellm

    if "langfuse" not in (litellm.success_callback or []):
        litellm.success_callback = litellm.success_callback or []
        litellm.success_callback.append("langfuse")

    if "langfuse" not in (litellm.failure_callback or []):
        litellm.failure_callback = litellm.failure_callback or []
        litellm.failure_callback.append("langfuse")

    logger.info(
        "langfuse.initialized",
        host=settings.LANGFUSE_HOST,
        callbacks_registered=True,
    )
    return True


def _set_env_if_missing(key: str, value: str) -> None:
    """Set an environment variable only if it is not already set."""
    if not os.environ.get(key):
        os.environ[key] = value
