"""Sign-in, callback, sign-out and session endpoints."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse

from backup_console.api.deps import get_discord_auth, settings_dep
from backup_console.core.config import Settings
from backup_console.core.errors import ValidationError
from backup_console.core.session import (
    SESSION_COOKIE_NAME,
    issue_session_token,
    issue_state_token,
    read_session_token,
    read_state_token,
    safe_callback_path,
)
from backup_console.schemas import ErrorResponse, SessionResponse, SessionUser
from backup_console.services import DiscordAuthService


router = APIRouter(prefix="/auth", tags=["auth"])

logger = logging.getLogger(__name__)


@router.get("/signin", status_code=302, response_class=RedirectResponse)
def signin(
    request: Request,
    callback_url: Optional[str] = Query(None, alias="callbackUrl"),
    settings: Settings = Depends(settings_dep),
    discord: DiscordAuthService = Depends(get_discord_auth),
) -> RedirectResponse:
    """Start the Discord OAuth flow, remembering where to return afterwards."""
    state = issue_state_token(settings, safe_callback_path(callback_url))
    redirect_uri = discord.redirect_uri(str(request.base_url))
    return RedirectResponse(discord.authorize_url(redirect_uri=redirect_uri, state=state), status_code=302)


@router.get(
    "/callback/discord",
    status_code=302,
    response_class=RedirectResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def discord_callback(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    settings: Settings = Depends(settings_dep),
    discord: DiscordAuthService = Depends(get_discord_auth),
) -> RedirectResponse:
    """Finish the OAuth flow and issue a session for the allowed operator only."""
    if not code or not state:
        raise ValidationError("Missing 'code' or 'state' query parameter.")
    callback = read_state_token(settings, state)
    if callback is None:
        raise ValidationError("Invalid or expired sign-in state.")

    profile = await discord.fetch_profile(code=code, redirect_uri=discord.redirect_uri(str(request.base_url)))
    discord.ensure_allowed(profile)

    token = issue_session_token(settings, profile.id, profile.name)
    response = RedirectResponse(safe_callback_path(callback), status_code=302)
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        samesite="lax",
        secure=request.url.scheme == "https",
        path="/",
    )
    return response


@router.post("/signout")
def signout() -> JSONResponse:
    response = JSONResponse({"message": "Signed out."})
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return response


@router.get("/session", response_model=SessionResponse, response_model_exclude_none=True)
def session_info(request: Request, settings: Settings = Depends(settings_dep)) -> SessionResponse:
    """Return the signed-in operator, or an empty object when signed out."""
    data = read_session_token(settings, request.cookies.get(SESSION_COOKIE_NAME))
    if data is None:
        return SessionResponse()
    return SessionResponse(user=SessionUser(id=str(data["sub"]), name=data.get("name")))
