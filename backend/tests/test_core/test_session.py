"""Tests for signed session and OAuth state tokens."""

from __future__ import annotations

import time

import pytest

from backup_console.core.config import Settings
from backup_console.core.errors import ConfigError
from backup_console.core.session import (
    issue_session_token,
    issue_state_token,
    read_session_token,
    read_state_token,
    safe_callback_path,
)


SETTINGS = Settings(session_secret="s3cret")


def test_session_round_trip() -> None:
    token = issue_session_token(SETTINGS, "1234", "operator")
    data = read_session_token(SETTINGS, token)
    assert data == {"sub": "1234", "name": "operator"}


def test_session_rejects_missing_and_forged_tokens() -> None:
    assert read_session_token(SETTINGS, None) is None
    assert read_session_token(SETTINGS, "") is None

    token = issue_session_token(SETTINGS, "1234")
    other = Settings(session_secret="different")
    assert read_session_token(other, token) is None
    assert read_session_token(SETTINGS, token + "x") is None


def test_session_expires(monkeypatch: pytest.MonkeyPatch) -> None:
    settings = Settings(session_secret="s3cret", session_max_age_seconds=60)
    token = issue_session_token(settings, "1234")
    real_time = time.time
    monkeypatch.setattr(time, "time", lambda: real_time() + 3600)
    assert read_session_token(settings, token) is None


def test_missing_secret_is_config_error() -> None:
    with pytest.raises(ConfigError):
        issue_session_token(Settings(), "1234")
    with pytest.raises(ConfigError):
        read_session_token(Settings(), "anything")


def test_state_token_is_not_a_session_token() -> None:
    state = issue_state_token(SETTINGS, "/docs")
    assert read_state_token(SETTINGS, state) == "/docs"
    assert read_session_token(SETTINGS, state) is None
    assert read_state_token(SETTINGS, "garbage") is None


@pytest.mark.parametrize(
    "value,expected",
    [
        ("/docs", "/docs"),
        ("/api/backups/list?x=1", "/api/backups/list?x=1"),
        (None, "/"),
        ("", "/"),
        ("https://evil.com/", "/"),
        ("//evil.com/", "/"),
        ("/\\evil.com", "/"),
    ],
)
def test_safe_callback_path(value, expected) -> None:
    assert safe_callback_path(value) == expected
