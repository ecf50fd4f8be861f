"""Liveness and readiness probes (unauthenticated)."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backup_console.api.deps import settings_dep
from backup_console.core.config import Settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Process is up."""
    return {"status": "ok"}


@router.get("/ready")
async def ready(settings: Settings = Depends(settings_dep)) -> JSONResponse:
    """Ready once the bucket and the session secret are configured.

    Only names what is missing, never the values.
    """
    missing = []
    if not settings.s3_configured:
        missing.append("BACKUP_S3_BUCKET")
    if not settings.session_secret:
        missing.append("SESSION_SECRET")
    if missing:
        return JSONResponse({"status": "not_ready", "missing": missing}, status_code=503)
    return JSONResponse({"status": "ready"})
