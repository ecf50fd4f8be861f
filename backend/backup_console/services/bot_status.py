"""Companion bot liveness as reported by PM2."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from backup_console.core.errors import NotFoundError, SupervisorUnavailableError, UpstreamError
from backup_console.core.supervisor import PM2Client, SupervisorError
from backup_console.domain.enums import ProcessStatus


@dataclass
class BotProcess:
    name: str
    status: str
    uptime: int
    memory: int
    cpu: float
    restarts: int
    pm_id: int
    version: Optional[str] = None


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def to_bot_process(desc: Dict[str, Any], *, now_ms: Optional[float] = None) -> BotProcess:
    """Map a PM2 process description to the dashboard's shape.

    Uptime is reported in seconds and memory in MB.
    """
    if now_ms is None:
        now_ms = time.time() * 1000
    env = desc.get("pm2_env") or {}
    monit = desc.get("monit") or {}

    started_ms = _number(env.get("pm_uptime"))
    uptime_ms = now_ms - started_ms if started_ms else 0
    memory = _number(monit.get("memory")) or _number(env.get("used_memory"))

    version = env.get("version")
    if not version:
        inner_env = env.get("env")
        if isinstance(inner_env, dict) and inner_env.get("VERSION") is not None:
            version = str(inner_env["VERSION"])

    pm_id = desc.get("pm_id")
    status = env.get("status")
    if not status:
        status = ProcessStatus.ONLINE.value if pm_id is not None else ProcessStatus.STOPPED.value

    return BotProcess(
        name=desc.get("name") or "unknown",
        status=str(status),
        uptime=max(0, int(uptime_ms // 1000)),
        memory=int(memory // (1024 * 1024)),
        cpu=float(_number(monit.get("cpu"))),
        restarts=int(_number(env.get("restart_time"))),
        pm_id=int(_number(pm_id)),
        version=str(version) if version else None,
    )


class BotStatusService:
    """Find the companion bot among PM2-managed processes."""

    def __init__(self, client: PM2Client, match: str = "bot") -> None:
        self.client = client
        self.match = match.lower()
        self._logger = logging.getLogger(__name__)

    async def get_status(self) -> List[BotProcess]:
        if not self.client.available():
            raise SupervisorUnavailableError("PM2 is not available in this environment")

        try:
            processes = await self.client.list_processes()
        except SupervisorError as exc:
            self._logger.error("pm2_status_failed | error=%s", exc)
            raise UpstreamError(f"Failed to get PM2 status: {exc}") from exc

        bots = [p for p in processes if self.match in str(p.get("name") or "").lower()]
        if not bots:
            raise NotFoundError("No bot process found in PM2")
        return [to_bot_process(p) for p in bots]
