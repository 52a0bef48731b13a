"""Health check endpoints.

Provides liveness (/health) and readiness (/health/ready). Readiness reports
whether the minutes service could be built (generation configured) and the
output directory is writable.
"""

from __future__ import annotations

import os

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from src.studio.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic liveness check. No dependencies are checked."""
    settings = get_settings()
    return {"status": "ok", "environment": settings.ENVIRONMENT.value}


def _check_dependencies(request: Request) -> dict:
    """Check the minutes service and output directory. Returns check results dict."""
    checks: dict = {"minutes_service": "ok", "output_dir": "ok"}

    if getattr(request.app.state, "minutes_service", None) is None:
        checks["minutes_service"] = "unavailable"

    archive = getattr(request.app.state, "minutes_archive", None)
    if archive is None:
        checks["output_dir"] = "unavailable"
    else:
        target = archive.output_dir
        probe = target if target.exists() else target.parent
        if not os.access(probe, os.W_OK):
            checks["output_dir"] = "error"
            checks["output_dir_error"] = f"{probe} is not writable"

    return checks


@router.get("/health/ready")
async def readiness_check(request: Request):
    """Readiness check: 200 if the workflow can run, 503 otherwise."""
    checks = _check_dependencies(request)
    all_healthy = all(v == "ok" for k, v in checks.items() if not k.endswith("_error"))

    return JSONResponse(
        status_code=status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if all_healthy else "degraded",
            "checks": checks,
        },
    )
