"""Client for the external service that produces and uploads backups."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from backup_console.core.config import Settings
from backup_console.core.errors import ConfigError, UpstreamError
from backup_console.core.validation import is_valid_backup_url


BACKUP_PATH = "/backup"


@dataclass
class BackupTriggerResult:
    url: Optional[str] = None
    stats: Optional[Dict[str, Any]] = None


class BackupTriggerService:
    """POSTs to the backup service and translates its `{success, url?, stats?}` reply."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._logger = logging.getLogger(__name__)

    def resolve_url(self) -> str:
        """Build the absolute URL to call, rejecting anything off the loopback allow-list.

        A relative URL is resolved against the configured backup origin, never
        against the incoming request's Host header.
        """
        base = self.settings.backup_api_url.rstrip("/")
        configured = f"{base}{BACKUP_PATH}" if base else BACKUP_PATH
        if not is_valid_backup_url(configured):
            self._logger.error("backup_url_rejected | url=%s", configured)
            raise ConfigError(
                "Backup service URL is not allowed: use a relative path or a loopback host."
            )

        if configured.startswith("/"):
            resolved = f"{self.settings.backup_api_origin.rstrip('/')}{configured}"
            if not is_valid_backup_url(resolved):
                self._logger.error("backup_origin_rejected | origin=%s", self.settings.backup_api_origin)
                raise ConfigError(
                    "Backup service origin is not allowed: use a loopback host."
                )
            return resolved
        return configured

    async def trigger(self) -> BackupTriggerResult:
        url = self.resolve_url()
        headers = {"Content-Type": "application/json"}
        if self.settings.backup_api_key:
            headers["Authorization"] = f"Bearer {self.settings.backup_api_key}"

        timeout = self.settings.backup_api_timeout_seconds
        self._logger.info("backup_trigger_request | url=%s timeout=%s", url, timeout)

        # Redirects are not followed so the allow-list cannot be bypassed upstream.
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=False) as client:
            try:
                resp = await client.post(url, headers=headers)
            except httpx.InvalidURL as exc:
                self._logger.error("backup_url_invalid | url=%s error=%s", url, exc)
                raise ConfigError(f"Backup service URL is invalid: {exc}") from exc
            except httpx.TimeoutException as exc:
                self._logger.error("backup_trigger_timeout | url=%s timeout=%s", url, timeout)
                raise UpstreamError(f"Backup service timed out after {timeout:g}s") from exc
            except httpx.HTTPError as exc:
                self._logger.error("backup_trigger_http_error | url=%s error=%s", url, exc)
                raise UpstreamError(f"Failed to connect to backup service: {exc}") from exc

        if resp.status_code // 100 != 2:
            error_text = resp.text
            self._logger.error(
                "backup_trigger_status | url=%s status=%s error=%s",
                url,
                resp.status_code,
                error_text,
            )
            raise UpstreamError(f"Backup failed: {error_text or 'Unknown error'}")

        try:
            data = resp.json()
        except ValueError as exc:
            self._logger.error("backup_trigger_invalid_json | url=%s", url)
            raise UpstreamError("Backup service returned an invalid response.") from exc
        if not isinstance(data, dict):
            raise UpstreamError("Backup service returned an invalid response.")

        if data.get("success") is not True:
            self._logger.error("backup_trigger_reported_failure | url=%s body=%s", url, data)
            raise UpstreamError("Backup completed but reported failure.")

        stats = data.get("stats")
        url_value = data.get("url")
        self._logger.info("backup_trigger_success | url=%s artifact=%s", url, url_value)
        return BackupTriggerResult(
            url=url_value if isinstance(url_value, str) else None,
            stats=stats if isinstance(stats, dict) else None,
        )
