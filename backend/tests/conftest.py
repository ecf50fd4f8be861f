"""Root conftest for tests directory."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generator, List, Optional

import pytest
from botocore.exceptions import ClientError

from backup_console.api import deps
from backup_console.core.config import reset_settings
from backup_console.core.storage import reset_s3_client


MANAGED_ENV = (
    "BACKUP_S3_BUCKET",
    "BACKUP_S3_PREFIX",
    "AWS_REGION",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "S3_ENDPOINT_URL",
    "S3_TIMEOUT_SECONDS",
    "S3_PRESIGN_TTL_SECONDS",
    "S3_LIST_MAX_KEYS",
    "BACKUP_API_URL",
    "BACKUP_API_ORIGIN",
    "BACKUP_API_KEY",
    "BACKUP_API_TIMEOUT_SECONDS",
    "DISCORD_CLIENT_ID",
    "DISCORD_CLIENT_SECRET",
    "ALLOWED_DISCORD_USER_ID",
    "SESSION_SECRET",
    "SESSION_MAX_AGE_SECONDS",
    "PUBLIC_BASE_URL",
    "PM2_BIN",
    "BOT_PROCESS_MATCH",
    "SUPERVISOR_TIMEOUT_SECONDS",
)

DEFAULT_TEST_ENV = {
    "BACKUP_S3_BUCKET": "test-bucket",
    "AWS_REGION": "us-east-2",
    "AWS_ACCESS_KEY_ID": "testing",
    "AWS_SECRET_ACCESS_KEY": "testing",
    "SESSION_SECRET": "test-session-secret",
    "DISCORD_CLIENT_ID": "client-id",
    "DISCORD_CLIENT_SECRET": "client-secret",
    "ALLOWED_DISCORD_USER_ID": "1234",
}


def make_client_error(code: str, status: int, operation: str = "HeadObject", message: str = "") -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": message or code},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class FakeS3Client:
    """In-memory stand-in for the boto3 S3 client methods the gateway uses."""

    def __init__(self) -> None:
        self.objects: Dict[str, Dict[str, Any]] = {}
        self.extra_listing: List[Dict[str, Any]] = []
        self.failures: Dict[str, Exception] = {}
        self.calls: List[str] = []

    def put(self, key: str, *, size: int = 10, last_modified: Optional[datetime] = None) -> None:
        self.objects[key] = {
            "Size": size,
            "LastModified": last_modified or datetime(2025, 1, 1, tzinfo=timezone.utc),
        }

    def _maybe_fail(self, operation: str) -> None:
        self.calls.append(operation)
        exc = self.failures.get(operation)
        if exc is not None:
            raise exc

    def head_object(self, *, Bucket: str, Key: str) -> Dict[str, Any]:
        self._maybe_fail("head_object")
        if Key not in self.objects:
            raise make_client_error("404", 404, "HeadObject", "Not Found")
        return {"ContentLength": self.objects[Key]["Size"]}

    def list_objects_v2(self, *, Bucket: str, Prefix: str = "", MaxKeys: int = 1000) -> Dict[str, Any]:
        self._maybe_fail("list_objects_v2")
        contents = [
            {"Key": key, **meta} for key, meta in self.objects.items() if key.startswith(Prefix)
        ]
        contents.extend(self.extra_listing)
        contents = contents[:MaxKeys]
        if not contents:
            return {"KeyCount": 0}
        return {"Contents": contents, "KeyCount": len(contents)}

    def generate_presigned_url(self, ClientMethod: str, Params: Dict[str, str], ExpiresIn: int) -> str:
        self._maybe_fail("generate_presigned_url")
        return f"https://{Params['Bucket']}.s3.example.test/{Params['Key']}?X-Amz-Expires={ExpiresIn}"

    def delete_object(self, *, Bucket: str, Key: str) -> Dict[str, Any]:
        self._maybe_fail("delete_object")
        self.objects.pop(Key, None)
        return {}


@pytest.fixture
def fake_s3() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def client_error() -> Callable[..., ClientError]:
    return make_client_error


@pytest.fixture
def configure(monkeypatch: pytest.MonkeyPatch) -> Generator[Callable[..., None], None, None]:
    """Apply environment overrides on top of a clean test environment.

    Pass a value of None to unset a variable.
    """

    def _apply(**env: Optional[str]) -> None:
        for name, value in env.items():
            if value is None:
                monkeypatch.delenv(name, raising=False)
            else:
                monkeypatch.setenv(name, value)
        reset_settings()

    for name in MANAGED_ENV:
        monkeypatch.delenv(name, raising=False)
    _apply(**DEFAULT_TEST_ENV)
    reset_s3_client()
    monkeypatch.setattr(deps, "_pm2_client", None)
    yield _apply
    reset_settings()
    reset_s3_client()
