"""FastAPI application factory.

Creates the app with logging middleware, metrics middleware, CORS, Sentry,
domain exception handlers, lifespan wiring of the minutes workflow, and the
v1 API router.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse, Response

from src.studio.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.studio.api.v1.router import router as v1_router
from src.studio.config import get_settings
from src.studio.core.monitoring import MetricsMiddleware, get_metrics_response, init_sentry
from src.studio.errors import (
    ConfigurationError,
    GenerationFailure,
    InvalidInputError,
    MinutesError,
    ParseContractViolation,
    PersistenceError,
    SessionNotFoundError,
    SessionStateError,
)
from src.studio.minutes.archive import MinutesArchive
from src.studio.minutes.service import MinutesService
from src.studio.minutes.session import SessionStore
from src.studio.services.llm import LLMService

logger = structlog.get_logger(__name__)

# Most specific first; the first isinstance match wins.
ERROR_STATUS: tuple[tuple[type[MinutesError], int], ...] = (
    (SessionNotFoundError, status.HTTP_404_NOT_FOUND),
    (SessionStateError, status.HTTP_409_CONFLICT),
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (ParseContractViolation, status.HTTP_502_BAD_GATEWAY),
    (GenerationFailure, status.HTTP_502_BAD_GATEWAY),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (ConfigurationError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: wire the minutes workflow on startup.

    A ConfigurationError (missing API key or header template) aborts startup.
    """
    settings = get_settings()
    configure_structlog()

    if settings.SENTRY_DSN:
        init_sentry(dsn=settings.SENTRY_DSN, environment=settings.ENVIRONMENT.value)

    # Langfuse tracing is optional; the app runs without it
    try:
        from src.studio.observability.tracer import init_langfuse

        init_langfuse(settings)
    except Exception:
        logger.warning("langfuse_init_failed", exc_info=True)

    try:
        llm_service = LLMService(settings)
    except ConfigurationError as exc:
        logger.error("startup.configuration_error", error=str(exc))
        raise

    archive = MinutesArchive(settings.OUTPUT_DIR, settings.ARCHIVE_DIRNAME)
    app.state.session_store = SessionStore(default_video_url=settings.DEFAULT_VIDEO_URL)
    app.state.minutes_archive = archive
    app.state.minutes_service = MinutesService(
        generator=llm_service,
        archive=archive,
        header_template=settings.HEADER_TEMPLATE,
        video_fps=settings.VIDEO_FPS,
    )
    logger.info(
        "startup.minutes_initialized",
        output_dir=settings.OUTPUT_DIR,
        default_video=bool(settings.DEFAULT_VIDEO_URL),
    )

    yield

    logger.info("shutdown.complete", sessions=len(app.state.session_store))


async def minutes_error_handler(request: Request, exc: MinutesError) -> JSONResponse:
    """Map a domain error to its HTTP status with a uniform body."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in ERROR_STATUS:
        if isinstance(exc, error_type):
            status_code = code
            break
    return JSONResponse(
        status_code=status_code,
        content={"error": str(exc), "kind": type(exc).__name__},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Minutes Studio API",
        version="0.1.0",
        description="Meeting video to structured minutes, refined through a conversation",
        lifespan=lifespan,
    )

    # Middleware is added in reverse order (last added = outermost)

    if settings.CORS_ALLOWED_ORIGINS == "*":
        origins = ["*"]
    else:
        origins = [o.strip() for o in settings.CORS_ALLOWED_ORIGINS.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging middleware (logs every request with timing)
    app.add_middleware(LoggingMiddleware)

    # Metrics middleware (outermost -- records Prometheus metrics for all requests)
    app.add_middleware(MetricsMiddleware)

    app.add_exception_handler(MinutesError, minutes_error_handler)

    app.include_router(v1_router)

    @app.get("/metrics", include_in_schema=False)
    async def metrics(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


# Module-level app for uvicorn
app = create_app()
