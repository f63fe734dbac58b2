"""Currently playing track, raw or stabilized for overlays."""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from nowplaying_relay.api.state import AppState, get_state
from nowplaying_relay.core.now_playing import resolve_now_playing
from nowplaying_relay.core.response import NO_STORE_HEADERS

router = APIRouter()

_TRUTHY = ("1", "true", "yes")


@router.get("/now-playing")
async def get_now_playing(
    access_token: str | None = None,
    stable: str | None = None,
    state: AppState = Depends(get_state),
):
    """Return the current track; ``stable=1`` routes it through the stabilization guard.

    Upstream failures still answer 200 with a "nothing playing" body so
    overlays degrade instead of resetting. Only a missing token is a 400.
    """
    if not access_token:
        return JSONResponse(
            {"error": "Missing access token"},
            status_code=400,
            headers=NO_STORE_HEADERS,
        )
    body = await resolve_now_playing(
        state.playback_client,
        state.store,
        access_token,
        stable=(stable or "").strip().lower() in _TRUTHY,
    )
    return JSONResponse(body, headers=NO_STORE_HEADERS)
