"""Authorization-code exchange and token refresh against SoundCloud."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import aiohttp

from pysoundcloud.auth.authenticator import AuthConfig
from pysoundcloud.config.config import Config
from pysoundcloud.errors import TokenExchangeError

logger = logging.getLogger("pysoundcloud.auth")

TOKEN_URL = "https://api.soundcloud.com/oauth2/token"

# Refresh a little before the server-side expiry.
_EXPIRY_MARGIN = 5 * 60


@dataclass
class AuthToken:
    access_token: str
    refresh_token: Optional[str] = None
    scope: Optional[str] = None
    expires: Optional[float] = None  # epoch seconds, None = non-expiring

    @classmethod
    def from_response(cls, data: dict[str, Any], now: Optional[float] = None) -> "AuthToken":
        access = (data.get("access_token") or "").strip()
        if not access:
            raise TokenExchangeError("token response carried no access_token")
        expires_in = data.get("expires_in")
        expires = None
        if expires_in:
            expires = (now if now is not None else time.time()) + float(expires_in) - _EXPIRY_MARGIN
        return cls(
            access_token=access,
            refresh_token=(data.get("refresh_token") or "").strip() or None,
            scope=data.get("scope"),
            expires=expires,
        )

    def is_expired(self, now: Optional[float] = None) -> bool:
        if self.expires is None:
            return False
        return (now if now is not None else time.time()) >= self.expires

    def store(self, cfg: Config) -> None:
        cfg.set("auth.access_token", self.access_token)
        cfg.set("auth.refresh_token", self.refresh_token)
        cfg.set("auth.scope", self.scope)
        cfg.set("auth.token_expiry", str(self.expires) if self.expires is not None else None)


async def _post_token(data: dict[str, str]) -> dict[str, Any]:
    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(TOKEN_URL, data=data) as resp:
                payload = await resp.json(content_type=None)
                ok = resp.ok
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise TokenExchangeError(f"token endpoint unreachable: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise TokenExchangeError("token endpoint returned invalid JSON") from exc

    if not isinstance(payload, dict):
        raise TokenExchangeError("token endpoint returned a non-object response")
    if not ok or "error" in payload:
        raise TokenExchangeError(
            f"token request failed: {payload.get('error_description', payload.get('error', 'unknown'))}"
        )
    return payload


async def exchange_code(config: AuthConfig, code: str, client_secret: str) -> AuthToken:
    """Exchange an authorization code for an access token."""
    payload = await _post_token(
        {
            "client_id": config.client_id,
            "client_secret": client_secret,
            "redirect_uri": config.redirect_uri,
            "grant_type": "authorization_code",
            "code": code,
        }
    )
    logger.info("authorization code exchanged for a token")
    return AuthToken.from_response(payload)


async def refresh_token_if_needed(cfg: Config) -> Optional[str]:
    """Refresh the stored access token if expired.  Returns the current token."""
    token = cfg.get("auth.access_token")
    refresh = cfg.get("auth.refresh_token")
    expiry = cfg.token_expiry

    if not token and not refresh:
        return None

    if token and (expiry is None or time.time() < expiry):
        return token

    if not refresh:
        return token  # Can't refresh, return what we have

    try:
        payload = await _post_token(
            {
                "client_id": cfg.get("auth.client_id") or "",
                "client_secret": cfg.get("auth.client_secret") or "",
                "refresh_token": refresh,
                "grant_type": "refresh_token",
            }
        )
        new_token = AuthToken.from_response(payload)
    except TokenExchangeError as exc:
        logger.warning("token refresh failed: %s", exc)
        return None

    if new_token.refresh_token is None:
        new_token.refresh_token = refresh
    new_token.store(cfg)
    await cfg.save()
    return new_token.access_token
