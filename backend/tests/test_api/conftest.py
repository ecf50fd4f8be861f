from __future__ import annotations

from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from backup_console.api.deps import get_object_store
from backup_console.core.config import get_settings
from backup_console.core.session import SESSION_COOKIE_NAME, issue_session_token
from backup_console.main import app
from backup_console.services import ObjectStoreGateway


@pytest.fixture
def client(configure: Callable[..., None], fake_s3) -> Generator[TestClient, None, None]:
    """FastAPI TestClient backed by the in-memory S3 double."""
    app.dependency_overrides[get_object_store] = lambda: ObjectStoreGateway(fake_s3)

    with TestClient(app) as test_client:
        yield test_client

    # Cleanup overrides
    app.dependency_overrides.clear()


@pytest.fixture
def auth_client(client: TestClient) -> TestClient:
    """Same client, carrying a valid session cookie for the allowed operator."""
    token = issue_session_token(get_settings(), "1234", "operator")
    client.cookies.set(SESSION_COOKIE_NAME, token)
    return client
