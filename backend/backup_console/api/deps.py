"""Shared FastAPI dependencies: configuration checks and key validation.

Config problems surface before input problems, and both before any call to
the object store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Query

from backup_console.core.config import Settings, get_settings
from backup_console.core.errors import ConfigError, ValidationError
from backup_console.core.storage import get_s3_client
from backup_console.core.supervisor import PM2Client
from backup_console.core.validation import validate_key
from backup_console.services import (
    BackupTriggerService,
    BotStatusService,
    DiscordAuthService,
    ObjectStoreGateway,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class S3Location:
    bucket: str
    prefix: str


@dataclass(frozen=True)
class KeyRequest:
    """A request whose bucket is configured and whose key passed validation."""

    bucket: str
    key: str


def settings_dep() -> Settings:
    return get_settings()


def require_s3_location(settings: Settings = Depends(settings_dep)) -> S3Location:
    if not settings.s3_bucket:
        raise ConfigError("S3 bucket not configured on server.")
    return S3Location(bucket=settings.s3_bucket, prefix=settings.s3_prefix)


def validate_key_request(
    key: Optional[str] = Query(None, description="Full object key of the backup archive"),
    location: S3Location = Depends(require_s3_location),
) -> KeyRequest:
    if not key:
        raise ValidationError("Missing required 'key' query parameter.")

    result = validate_key(key, location.prefix)
    if not result.valid:
        logger.warning(
            "backup_key_rejected | key=%r reason=%s",
            key,
            result.reason.value if result.reason else None,
        )
        raise ValidationError(result.error or "Invalid key.")
    return KeyRequest(bucket=location.bucket, key=key)


def get_object_store() -> ObjectStoreGateway:
    return ObjectStoreGateway(get_s3_client())


def get_backup_trigger(settings: Settings = Depends(settings_dep)) -> BackupTriggerService:
    return BackupTriggerService(settings)


_pm2_client: PM2Client | None = None


def get_pm2_client(settings: Settings = Depends(settings_dep)) -> PM2Client:
    # Keep one client so the availability probe runs once per process.
    global _pm2_client
    if _pm2_client is None:
        _pm2_client = PM2Client(settings.pm2_bin, timeout=settings.supervisor_timeout_seconds)
    return _pm2_client


def get_bot_status_service(
    client: PM2Client = Depends(get_pm2_client),
    settings: Settings = Depends(settings_dep),
) -> BotStatusService:
    return BotStatusService(client, match=settings.bot_process_match)


def get_discord_auth(settings: Settings = Depends(settings_dep)) -> DiscordAuthService:
    return DiscordAuthService(settings)
