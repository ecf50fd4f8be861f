from fastapi.testclient import TestClient


def test_health_is_public(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_ready_when_configured(client: TestClient) -> None:
    resp = client.get("/ready")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ready"}


def test_ready_names_missing_settings(client: TestClient, configure) -> None:
    configure(BACKUP_S3_BUCKET=None, SESSION_SECRET=None)
    resp = client.get("/ready")
    assert resp.status_code == 503
    assert resp.json() == {"status": "not_ready", "missing": ["BACKUP_S3_BUCKET", "SESSION_SECRET"]}
