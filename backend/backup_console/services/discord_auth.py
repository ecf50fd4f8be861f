"""Discord OAuth2 sign-in for the single allowed operator.

Research summary:
- The authorize endpoint is ``https://discord.com/oauth2/authorize`` with
  ``response_type=code`` and the ``identify`` scope.
- ``POST /api/oauth2/token`` exchanges the code (form-encoded, client
  credentials in the body) for a bearer access token.
- ``GET /api/users/@me`` returns the profile; ``id`` is the stable snowflake.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from backup_console.core.config import Settings
from backup_console.core.errors import AccessDeniedError, ConfigError, UpstreamError


AUTHORIZE_URL = "https://discord.com/oauth2/authorize"
TOKEN_URL = "https://discord.com/api/oauth2/token"
PROFILE_URL = "https://discord.com/api/users/@me"
CALLBACK_PATH = "/api/auth/callback/discord"


@dataclass
class DiscordProfile:
    id: str
    name: Optional[str] = None


class DiscordAuthService:
    def __init__(self, settings: Settings, timeout: float = 10.0) -> None:
        self.settings = settings
        self.timeout = timeout
        self._logger = logging.getLogger(__name__)

    def _require_client(self) -> tuple[str, str]:
        client_id = self.settings.discord_client_id
        client_secret = self.settings.discord_client_secret
        if not client_id or not client_secret:
            raise ConfigError("Discord OAuth client not configured on server.")
        return client_id, client_secret

    def redirect_uri(self, request_base_url: str) -> str:
        base = (self.settings.public_base_url or request_base_url).rstrip("/")
        return f"{base}{CALLBACK_PATH}"

    def authorize_url(self, *, redirect_uri: str, state: str) -> str:
        client_id, _ = self._require_client()
        query = urlencode(
            {
                "client_id": client_id,
                "redirect_uri": redirect_uri,
                "response_type": "code",
                "scope": "identify",
                "state": state,
            }
        )
        return f"{AUTHORIZE_URL}?{query}"

    async def fetch_profile(self, *, code: str, redirect_uri: str) -> DiscordProfile:
        client_id, client_secret = self._require_client()
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                token_resp = await client.post(
                    TOKEN_URL,
                    data={
                        "client_id": client_id,
                        "client_secret": client_secret,
                        "grant_type": "authorization_code",
                        "code": code,
                        "redirect_uri": redirect_uri,
                    },
                    headers={"Accept": "application/json"},
                )
                if token_resp.status_code // 100 != 2:
                    self._logger.warning("discord_token_status | status=%s", token_resp.status_code)
                    raise AccessDeniedError("OAuthCallback")
                token_data: Dict[str, Any] = token_resp.json()
                access_token = token_data.get("access_token")
                if not access_token:
                    raise AccessDeniedError("OAuthCallback")

                profile_resp = await client.get(
                    PROFILE_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                profile_resp.raise_for_status()
                profile: Dict[str, Any] = profile_resp.json()
            except httpx.HTTPError as exc:
                self._logger.error("discord_http_error | error=%s", exc)
                raise UpstreamError(f"Failed to contact Discord: {exc}") from exc
            except ValueError as exc:
                raise UpstreamError("Discord returned an invalid response.") from exc

        user_id = profile.get("id")
        if not user_id:
            raise AccessDeniedError("OAuthCallback")
        name = profile.get("global_name") or profile.get("username")
        return DiscordProfile(id=str(user_id), name=name if isinstance(name, str) else None)

    def ensure_allowed(self, profile: DiscordProfile) -> None:
        """Admit only the configured operator. No allow-list means nobody gets in."""
        allowed = self.settings.allowed_discord_user_id
        if not allowed:
            self._logger.warning("signin_blocked_unconfigured | user_id=%s", profile.id)
            raise AccessDeniedError()
        if not hmac.compare_digest(profile.id, allowed):
            self._logger.warning("signin_denied | user_id=%s", profile.id)
            raise AccessDeniedError()
        self._logger.info("signin_allowed | user_id=%s", profile.id)
