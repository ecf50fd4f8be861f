"""Process-wide configuration read from environment variables.

Settings are loaded once, on first use, and shared read-only across requests.
Call `reset_settings()` to force a reload (tests, reconfiguration).
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Optional


DEFAULT_PREFIX = "backups/"
DEFAULT_REGION = "us-east-2"

logger = logging.getLogger(__name__)


def _get_str(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value or default


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("config_invalid_number | name=%s value=%r default=%s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("config_non_positive | name=%s value=%r default=%s", name, raw, default)
        return default
    return value


def _get_int(name: str, default: int) -> int:
    return int(_get_float(name, float(default)))


@dataclass(frozen=True)
class Settings:
    """Immutable snapshot of the dashboard configuration."""

    s3_bucket: Optional[str] = None
    s3_prefix: str = DEFAULT_PREFIX
    aws_region: str = DEFAULT_REGION
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    s3_endpoint_url: Optional[str] = None
    s3_timeout_seconds: float = 10.0
    presign_ttl_seconds: int = 300
    list_max_keys: int = 200

    backup_api_url: str = ""
    backup_api_origin: str = "http://127.0.0.1"
    backup_api_key: Optional[str] = None
    backup_api_timeout_seconds: float = 120.0

    discord_client_id: Optional[str] = None
    discord_client_secret: Optional[str] = None
    allowed_discord_user_id: Optional[str] = None
    session_secret: Optional[str] = None
    session_max_age_seconds: int = 30 * 24 * 3600
    public_base_url: Optional[str] = None

    pm2_bin: str = "pm2"
    bot_process_match: str = "bot"
    supervisor_timeout_seconds: float = 10.0

    @property
    def s3_configured(self) -> bool:
        return bool(self.s3_bucket)


def load_settings() -> Settings:
    """Build a `Settings` instance from the current environment."""
    return Settings(
        s3_bucket=_get_str("BACKUP_S3_BUCKET"),
        s3_prefix=_get_str("BACKUP_S3_PREFIX", DEFAULT_PREFIX) or DEFAULT_PREFIX,
        aws_region=_get_str("AWS_REGION", DEFAULT_REGION) or DEFAULT_REGION,
        aws_access_key_id=_get_str("AWS_ACCESS_KEY_ID"),
        aws_secret_access_key=_get_str("AWS_SECRET_ACCESS_KEY"),
        s3_endpoint_url=_get_str("S3_ENDPOINT_URL"),
        s3_timeout_seconds=_get_float("S3_TIMEOUT_SECONDS", 10.0),
        presign_ttl_seconds=_get_int("S3_PRESIGN_TTL_SECONDS", 300),
        list_max_keys=_get_int("S3_LIST_MAX_KEYS", 200),
        backup_api_url=_get_str("BACKUP_API_URL", "") or "",
        backup_api_origin=_get_str("BACKUP_API_ORIGIN", "http://127.0.0.1") or "http://127.0.0.1",
        backup_api_key=_get_str("BACKUP_API_KEY"),
        backup_api_timeout_seconds=_get_float("BACKUP_API_TIMEOUT_SECONDS", 120.0),
        discord_client_id=_get_str("DISCORD_CLIENT_ID"),
        discord_client_secret=_get_str("DISCORD_CLIENT_SECRET"),
        allowed_discord_user_id=_get_str("ALLOWED_DISCORD_USER_ID"),
        session_secret=_get_str("SESSION_SECRET"),
        session_max_age_seconds=_get_int("SESSION_MAX_AGE_SECONDS", 30 * 24 * 3600),
        public_base_url=_get_str("PUBLIC_BASE_URL"),
        pm2_bin=_get_str("PM2_BIN", "pm2") or "pm2",
        bot_process_match=(_get_str("BOT_PROCESS_MATCH", "bot") or "bot").lower(),
        supervisor_timeout_seconds=_get_float("SUPERVISOR_TIMEOUT_SECONDS", 10.0),
    )


_settings: Settings | None = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is not None:
        return _settings
    with _settings_lock:
        if _settings is None:
            _settings = load_settings()
            logger.debug(
                "settings_loaded | bucket_configured=%s prefix=%s region=%s",
                _settings.s3_configured,
                _settings.s3_prefix,
                _settings.aws_region,
            )
        return _settings


def reset_settings() -> None:
    global _settings
    with _settings_lock:
        _settings = None
