"""Spotify access: currently-playing fetch (httpx) and OAuth code/refresh exchange (Spotipy)."""
import logging
from typing import Optional

import httpx
from requests import RequestException
from spotipy.cache_handler import MemoryCacheHandler
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError

from nowplaying_relay.config import (
    SPOTIFY_CLIENT_ID,
    SPOTIFY_CLIENT_SECRET,
    SPOTIFY_CURRENTLY_PLAYING_URL,
    SPOTIFY_REDIRECT_URI,
    SPOTIFY_SCOPES,
    UPSTREAM_TIMEOUT_SEC,
)
from nowplaying_relay.models.playback import UpstreamResult

logger = logging.getLogger(__name__)


class SpotifyPlaybackClient:
    """Fetches /me/player/currently-playing for a caller-supplied access token.

    One request per call, no retries; every failure comes back as an
    UpstreamResult with ``error`` set rather than an exception.
    """

    def __init__(
        self,
        http: Optional[httpx.AsyncClient] = None,
        url: str = SPOTIFY_CURRENTLY_PLAYING_URL,
        timeout_sec: float = UPSTREAM_TIMEOUT_SEC,
    ) -> None:
        self._http = http or httpx.AsyncClient(timeout=timeout_sec)
        self._url = url

    async def fetch_currently_playing(self, access_token: str) -> UpstreamResult:
        try:
            response = await self._http.get(
                self._url,
                params={"market": "from_token"},
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/json",
                },
            )
        except (httpx.HTTPError, UnicodeEncodeError) as e:
            # Non-ASCII tokens fail while httpx encodes the header
            logger.warning("Spotify currently-playing failed: %s", type(e).__name__)
            return UpstreamResult(status_code=None, error=type(e).__name__)

        payload = None
        if response.content:
            try:
                payload = response.json()
            except ValueError:
                logger.debug("Spotify returned a non-JSON body (status %d)", response.status_code)
        return UpstreamResult(status_code=response.status_code, payload=payload)

    async def aclose(self) -> None:
        await self._http.aclose()


def _oauth(cache: Optional[MemoryCacheHandler] = None, state: Optional[str] = None) -> SpotifyOAuth:
    """Spotipy OAuth helper scoped to one request; tokens never touch disk."""
    return SpotifyOAuth(
        client_id=SPOTIFY_CLIENT_ID,
        client_secret=SPOTIFY_CLIENT_SECRET,
        redirect_uri=SPOTIFY_REDIRECT_URI,
        scope=SPOTIFY_SCOPES,
        state=state,
        show_dialog=True,
        cache_handler=cache or MemoryCacheHandler(),
        requests_timeout=UPSTREAM_TIMEOUT_SEC,
        open_browser=False,
    )


def get_authorize_url(state: str) -> str:
    """Spotify authorize URL (forces the login dialog) carrying ``state``."""
    return _oauth(state=state).get_authorize_url(state=state)


def exchange_code(code: str) -> Optional[dict]:
    """Exchange an authorization code for a token dict, or None on failure."""
    if not SPOTIFY_CLIENT_ID or not SPOTIFY_CLIENT_SECRET:
        logger.warning("OAuth: SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET not set")
        return None
    cache = MemoryCacheHandler()
    try:
        _oauth(cache).get_access_token(code=code, as_dict=False, check_cache=False)
    except (SpotifyOauthError, RequestException) as e:
        logger.warning("OAuth: code exchange failed: %s", e)
        return None
    return cache.get_cached_token()


def refresh_access_token(refresh_token: str) -> Optional[dict]:
    """Exchange a refresh token for a new token dict, or None on failure."""
    if not SPOTIFY_CLIENT_ID or not SPOTIFY_CLIENT_SECRET:
        logger.warning("OAuth: SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET not set")
        return None
    try:
        return _oauth().refresh_access_token(refresh_token)
    except (SpotifyOauthError, RequestException) as e:
        logger.warning("OAuth: token refresh failed: %s", e)
        return None
