"""Request gates applied before any route handler runs.

Order matters: the method gate runs first so wrong-verb requests are rejected
without revealing anything about the caller's session.
"""

from __future__ import annotations

from typing import Dict, List, Optional
from urllib.parse import urlencode

from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response

from backup_console.core.config import Settings
from backup_console.core.errors import ConfigError, MethodNotAllowedError
from backup_console.core.session import SESSION_COOKIE_NAME, read_session_token


SIGNIN_PATH = "/api/auth/signin"

ROUTE_METHODS: Dict[str, List[str]] = {
    "/api/backups/list": ["GET"],
    "/api/backups/create": ["POST"],
    "/api/backups/download": ["GET"],
    "/api/backups/delete": ["DELETE"],
    "/api/pm2/status": ["GET"],
}

PUBLIC_PATHS = frozenset({"/health", "/ready", "/api/pm2/status", "/favicon.ico", "/robots.txt"})
PUBLIC_PREFIXES = ("/api/auth/",)


def method_gate(path: str, method: str) -> Optional[Response]:
    """Return a 405 response if `method` is not allowed on `path`."""
    allowed = ROUTE_METHODS.get(path.rstrip("/") or "/")
    if allowed is None or method.upper() in allowed:
        return None
    err = MethodNotAllowedError(allowed)
    return JSONResponse(err.to_body(), status_code=err.status_code, headers=err.headers)


def is_public_path(path: str) -> bool:
    if path in PUBLIC_PATHS:
        return True
    return any(path.startswith(prefix) for prefix in PUBLIC_PREFIXES)


def is_api_path(path: str) -> bool:
    return path == "/api" or path.startswith("/api/")


def signin_redirect(request: Request) -> RedirectResponse:
    callback = request.url.path
    if request.url.query:
        callback = f"{callback}?{request.url.query}"
    location = f"{SIGNIN_PATH}?{urlencode({'callbackUrl': callback})}"
    return RedirectResponse(location, status_code=302)


def auth_gate(request: Request, settings: Settings) -> Optional[Response]:
    """Reject unauthenticated callers of protected paths.

    API paths get 401 JSON; page navigation is redirected to sign-in with the
    original path preserved as `callbackUrl`.
    """
    path = request.url.path
    if is_public_path(path):
        return None

    try:
        session = read_session_token(settings, request.cookies.get(SESSION_COOKIE_NAME))
    except ConfigError as exc:
        return JSONResponse(exc.to_body(), status_code=exc.status_code)

    if session is not None:
        request.state.session = session
        return None

    if is_api_path(path):
        return JSONResponse({"error": "Unauthorized"}, status_code=401)
    return signin_redirect(request)
