"""Backup archive API router: list, create, download and delete."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from backup_console.api.deps import (
    KeyRequest,
    S3Location,
    get_backup_trigger,
    get_object_store,
    require_s3_location,
    settings_dep,
    validate_key_request,
)
from backup_console.core.config import Settings
from backup_console.core.errors import BackupNotFoundError, UpstreamError
from backup_console.schemas import (
    BackupFile,
    BackupListResponse,
    CreateBackupResponse,
    DeleteBackupResponse,
    ErrorResponse,
)
from backup_console.services import BackupTriggerService, ObjectStoreGateway


router = APIRouter(prefix="/backups", tags=["backups"])

logger = logging.getLogger(__name__)

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("/list", response_model=BackupListResponse, responses={500: {"model": ErrorResponse}})
def list_backups(
    location: S3Location = Depends(require_s3_location),
    store: ObjectStoreGateway = Depends(get_object_store),
    settings: Settings = Depends(settings_dep),
) -> BackupListResponse:
    """List backup archives under the configured prefix, newest first."""
    try:
        records = store.list_backups(location.bucket, location.prefix, settings.list_max_keys)
    except Exception as exc:
        logger.error("backups_list_failed | bucket=%s prefix=%s error=%s", location.bucket, location.prefix, exc)
        raise UpstreamError(f"Failed to list backups from S3: {exc}") from exc

    return BackupListResponse(
        files=[
            BackupFile(
                key=r.key,
                last_modified=r.last_modified.isoformat() if r.last_modified else None,
                size=r.size,
            )
            for r in records
        ]
    )


@router.post(
    "/create",
    response_model=CreateBackupResponse,
    response_model_exclude_none=True,
    responses={500: {"model": ErrorResponse}},
)
async def create_backup(trigger: BackupTriggerService = Depends(get_backup_trigger)) -> CreateBackupResponse:
    """Ask the backup service to dump, compress and upload a new archive.

    An upstream reply of `{"success": false}` is a failure even on HTTP 200.
    """
    result = await trigger.trigger()
    return CreateBackupResponse(
        message="Backup created successfully and uploaded to S3.",
        url=result.url,
        stats=result.stats,
    )


@router.get("/download", status_code=302, response_class=RedirectResponse, responses=_ERRORS)
def download_backup(
    req: KeyRequest = Depends(validate_key_request),
    store: ObjectStoreGateway = Depends(get_object_store),
    settings: Settings = Depends(settings_dep),
) -> RedirectResponse:
    """Redirect to a short-lived pre-signed URL; bytes never pass through this server."""
    try:
        not_found = store.check_exists(req.bucket, req.key)
    except Exception as exc:
        logger.error("backups_download_head_failed | key=%s error=%s", req.key, exc)
        raise UpstreamError(f"Failed to generate download URL: {exc}") from exc
    if not_found is not None:
        raise not_found

    try:
        signed_url = store.generate_fetch_handle(req.bucket, req.key, settings.presign_ttl_seconds)
    except Exception as exc:
        logger.error("backups_download_presign_failed | key=%s error=%s", req.key, exc)
        not_found = store.classify(req.key, exc, operation="generate_presigned_url")
        if not_found is not None:
            raise not_found from exc
        raise UpstreamError(f"Failed to generate download URL: {exc}") from exc

    logger.info("backups_download_redirect | key=%s ttl=%s", req.key, settings.presign_ttl_seconds)
    return RedirectResponse(signed_url, status_code=302)


@router.delete("/delete", response_model=DeleteBackupResponse, responses=_ERRORS)
def delete_backup(
    req: KeyRequest = Depends(validate_key_request),
    store: ObjectStoreGateway = Depends(get_object_store),
) -> DeleteBackupResponse:
    """Delete one backup archive after confirming it exists."""
    try:
        store.delete(req.bucket, req.key)
    except BackupNotFoundError:
        raise
    except Exception as exc:
        logger.error("backups_delete_failed | key=%s error=%s", req.key, exc)
        raise UpstreamError("Failed to delete backup from S3.") from exc

    return DeleteBackupResponse(message=f"Backup '{req.key}' deleted successfully.")
