"""Spotify OAuth: login redirect, code callback, token refresh."""
import logging
import urllib.parse
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from nowplaying_relay.config import FRONTEND_URI, SPOTIFY_CLIENT_ID, SPOTIFY_CLIENT_SECRET
from nowplaying_relay.core.return_path import (
    decode_state,
    encode_state,
    generate_nonce,
    sanitize_return_path,
)
from nowplaying_relay.core.spotify_client import (
    exchange_code,
    get_authorize_url,
    refresh_access_token,
)

logger = logging.getLogger(__name__)

router = APIRouter()

STATE_COOKIE = "spotify_auth_state"
STATE_COOKIE_MAX_AGE_SEC = 600


class RefreshTokenResponse(BaseModel):
    access_token: str
    # Only present when Spotify rotated it
    refresh_token: Optional[str] = None


def _frontend_redirect(return_path: str, params: dict) -> RedirectResponse:
    path, hash_, fragment = return_path.partition("#")
    separator = "&" if "?" in path else "?"
    url = f"{FRONTEND_URI.rstrip('/')}{path}{separator}{urllib.parse.urlencode(params)}"
    response = RedirectResponse(url=f"{url}{hash_}{fragment}", status_code=302)
    response.delete_cookie(STATE_COOKIE)
    return response


@router.get("/login")
def login(request: Request):
    """Redirect to Spotify's authorize page; ``return`` is where the overlay wants to land."""
    if not SPOTIFY_CLIENT_ID or not SPOTIFY_CLIENT_SECRET:
        return JSONResponse(
            {"error": "SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET not set"}, status_code=503
        )
    nonce = generate_nonce()
    return_path = sanitize_return_path(request.query_params.get("return"))
    response = RedirectResponse(url=get_authorize_url(encode_state(nonce, return_path)), status_code=302)
    response.set_cookie(
        STATE_COOKIE, nonce, max_age=STATE_COOKIE_MAX_AGE_SEC, httponly=True, samesite="lax"
    )
    return response


@router.get("/callback")
async def callback(request: Request, code: str | None = None, state: str | None = None):
    """Exchange code for tokens and hand them to the overlay in the query string."""
    nonce, return_path = decode_state(state)
    expected = request.cookies.get(STATE_COOKIE)
    if expected and expected != nonce:
        logger.warning("OAuth: state mismatch on callback")
        return _frontend_redirect(return_path, {"error": "state_mismatch"})
    if not code:
        return _frontend_redirect(return_path, {"error": "invalid_token"})

    token_info = await run_in_threadpool(exchange_code, code)
    if not token_info or not token_info.get("access_token"):
        return _frontend_redirect(return_path, {"error": "invalid_token"})
    return _frontend_redirect(
        return_path,
        {
            "access_token": token_info["access_token"],
            "refresh_token": token_info.get("refresh_token") or "",
        },
    )


@router.get(
    "/refresh_token",
    response_model=RefreshTokenResponse,
    response_model_exclude_none=True,
)
async def refresh(refresh_token: str | None = None):
    """Return a fresh access token for ``refresh_token``."""
    if not refresh_token:
        return JSONResponse({"error": "Missing refresh token"}, status_code=400)
    token_info = await run_in_threadpool(refresh_access_token, refresh_token)
    if not token_info or not token_info.get("access_token"):
        return JSONResponse({"error": "Failed to refresh token"}, status_code=400)
    rotated = token_info.get("refresh_token")
    return RefreshTokenResponse(
        access_token=token_info["access_token"],
        refresh_token=rotated if rotated and rotated != refresh_token else None,
    )
