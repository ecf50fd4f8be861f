"""PM2 process-manager adapter.

PM2 is an optional dependency of the host, not of this package. Availability
is probed once and cached; callers branch on `available()` instead of failing
at import time.
"""

from __future__ import annotations

import asyncio
import json
import logging
import shutil
from typing import Any, Dict, List, Optional


class SupervisorError(RuntimeError):
    """PM2 was found but the process list could not be read."""


class PM2Client:
    """Reads the PM2 process list through `pm2 jlist` (no shell involved)."""

    def __init__(self, binary: str = "pm2", timeout: float = 10.0) -> None:
        self.binary = binary
        self.timeout = timeout
        self._resolved: Optional[str] = None
        self._probed = False
        self._logger = logging.getLogger(__name__)

    def _resolve(self) -> Optional[str]:
        if not self._probed:
            self._resolved = shutil.which(self.binary)
            self._probed = True
            if self._resolved is None:
                self._logger.warning("pm2_not_available | binary=%s", self.binary)
        return self._resolved

    def available(self) -> bool:
        return self._resolve() is not None

    async def list_processes(self) -> List[Dict[str, Any]]:
        resolved = self._resolve()
        if resolved is None:
            raise SupervisorError("PM2 is not available in this environment")

        proc = await asyncio.create_subprocess_exec(
            resolved,
            "jlist",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            proc.kill()
            await proc.wait()
            raise SupervisorError(f"pm2 jlist timed out after {self.timeout}s") from exc

        if proc.returncode != 0:
            detail = (stderr or b"").decode("utf-8", errors="replace").strip()
            raise SupervisorError(f"pm2 jlist exited with code {proc.returncode}: {detail}")

        try:
            data = json.loads((stdout or b"").decode("utf-8", errors="replace") or "[]")
        except ValueError as exc:
            raise SupervisorError("pm2 jlist returned invalid JSON") from exc
        if not isinstance(data, list):
            raise SupervisorError("pm2 jlist returned an unexpected payload")
        return [item for item in data if isinstance(item, dict)]
