from __future__ import annotations

from typing import Any, Dict

import pytest

from backup_console.core import storage
from backup_console.core.config import Settings


def _capture(monkeypatch: pytest.MonkeyPatch) -> Dict[str, Any]:
    seen: Dict[str, Any] = {}

    def fake_client(service: str, **kwargs: Any) -> object:
        seen["service"] = service
        seen.update(kwargs)
        return object()

    monkeypatch.setattr(storage.boto3, "client", fake_client)
    return seen


def test_build_client_with_static_credentials_and_endpoint(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = _capture(monkeypatch)
    settings = Settings(
        aws_region="eu-west-1",
        aws_access_key_id="AKIA",
        aws_secret_access_key="secret",
        s3_endpoint_url="http://localhost:9000",
        s3_timeout_seconds=3.0,
    )
    storage.build_s3_client(settings)

    assert seen["service"] == "s3"
    assert seen["region_name"] == "eu-west-1"
    assert seen["endpoint_url"] == "http://localhost:9000"
    assert seen["aws_access_key_id"] == "AKIA"
    config = seen["config"]
    assert config.connect_timeout == 3.0
    assert config.read_timeout == 3.0
    assert config.retries["total_max_attempts"] == 1


def test_build_client_uses_default_chain_without_both_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = _capture(monkeypatch)
    storage.build_s3_client(Settings(aws_access_key_id="AKIA"))
    assert "aws_access_key_id" not in seen
    assert "endpoint_url" not in seen


def test_shared_client_is_built_once(configure, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def fake_build(settings: Settings) -> object:
        calls.append(settings)
        return object()

    monkeypatch.setattr(storage, "build_s3_client", fake_build)
    first = storage.get_s3_client()
    assert storage.get_s3_client() is first
    assert len(calls) == 1

    storage.reset_s3_client()
    assert storage.get_s3_client() is not first
    assert len(calls) == 2
