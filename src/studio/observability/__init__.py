"""Observability package for Langfuse tracing of LiteLLM calls.

Degrades to a no-op when Langfuse is not configured.
"""

from __future__ import annotations


def __getattr__(name: str):
    if name == "init_langfuse":
        from src.studio.observability.tracer import init_langfuse
        return init_langfuse
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "init_langfuse",
]
