from __future__ import annotations

from typing import Any, Dict, List

from fastapi.testclient import TestClient

from backup_console.api.deps import get_pm2_client
from backup_console.main import app


class FakePM2:
    def __init__(self, processes: List[Dict[str, Any]], available: bool = True) -> None:
        self.processes = processes
        self._available = available

    def available(self) -> bool:
        return self._available

    async def list_processes(self) -> List[Dict[str, Any]]:
        return self.processes


def test_bot_status_is_public(client: TestClient) -> None:
    app.dependency_overrides[get_pm2_client] = lambda: FakePM2(
        [
            {"name": "api", "pm_id": 0, "pm2_env": {"status": "online"}},
            {
                "name": "nightscout-bot",
                "pm_id": 1,
                "monit": {"memory": 32 * 1024 * 1024, "cpu": 0.5},
                "pm2_env": {"status": "online", "restart_time": 4, "version": "2.0.1"},
            },
        ]
    )
    resp = client.get("/api/pm2/status")
    assert resp.status_code == 200
    processes = resp.json()["processes"]
    assert len(processes) == 1
    proc = processes[0]
    assert proc["name"] == "nightscout-bot"
    assert proc["status"] == "online"
    assert proc["memory"] == 32
    assert proc["restarts"] == 4
    assert proc["pm_id"] == 1
    assert proc["version"] == "2.0.1"


def test_bot_status_without_pm2(client: TestClient) -> None:
    app.dependency_overrides[get_pm2_client] = lambda: FakePM2([], available=False)
    resp = client.get("/api/pm2/status")
    assert resp.status_code == 503
    assert resp.json() == {"error": "PM2 is not available in this environment"}


def test_bot_status_no_bot_process(client: TestClient) -> None:
    app.dependency_overrides[get_pm2_client] = lambda: FakePM2([{"name": "api"}])
    resp = client.get("/api/pm2/status")
    assert resp.status_code == 404
    assert resp.json() == {"error": "No bot process found in PM2"}
