"""Signed session cookies and OAuth state tokens.

The cookie value is an itsdangerous timed token carrying the admin identity.
Only the signature and age are checked per request; the single-admin
allow-list is enforced once, at sign-in.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from backup_console.core.config import Settings
from backup_console.core.errors import ConfigError


SESSION_COOKIE_NAME = "backup_console_session"
STATE_MAX_AGE_SECONDS = 600

_SESSION_SALT = "backup-console.session"
_STATE_SALT = "backup-console.oauth-state"

logger = logging.getLogger(__name__)


def _serializer(settings: Settings, salt: str) -> URLSafeTimedSerializer:
    if not settings.session_secret:
        raise ConfigError("Session secret not configured on server.")
    return URLSafeTimedSerializer(settings.session_secret, salt=salt)


def issue_session_token(settings: Settings, user_id: str, name: Optional[str] = None) -> str:
    payload: Dict[str, Any] = {"sub": user_id}
    if name:
        payload["name"] = name
    return _serializer(settings, _SESSION_SALT).dumps(payload)


def read_session_token(settings: Settings, token: Optional[str]) -> Optional[Dict[str, Any]]:
    """Return the session payload, or None if the token is missing, forged or expired.

    Raises `ConfigError` when no signing secret is configured.
    """
    serializer = _serializer(settings, _SESSION_SALT)
    if not token:
        return None
    try:
        data = serializer.loads(token, max_age=settings.session_max_age_seconds)
    except SignatureExpired:
        logger.info("session_expired")
        return None
    except BadSignature:
        logger.warning("session_bad_signature")
        return None
    if not isinstance(data, dict) or not data.get("sub"):
        return None
    return data


def issue_state_token(settings: Settings, callback_path: str) -> str:
    return _serializer(settings, _STATE_SALT).dumps({"callback": callback_path})


def read_state_token(settings: Settings, token: str) -> Optional[str]:
    """Return the callback path stored in a state token, or None if invalid/expired."""
    serializer = _serializer(settings, _STATE_SALT)
    try:
        data = serializer.loads(token, max_age=STATE_MAX_AGE_SECONDS)
    except BadSignature:
        return None
    if not isinstance(data, dict):
        return None
    callback = data.get("callback")
    return callback if isinstance(callback, str) else None


def safe_callback_path(value: Optional[str]) -> str:
    """Keep only same-origin relative paths; anything else falls back to `/`."""
    if not value or not value.startswith("/") or value.startswith("//") or "\\" in value:
        return "/"
    return value
