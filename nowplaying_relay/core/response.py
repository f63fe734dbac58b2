"""Build /now-playing response bodies."""
from typing import Any, Optional

from nowplaying_relay.models.playback import (
    Accept,
    AcceptedState,
    Decision,
    KeepStale,
    KeepSuppressed,
)

ERROR_FETCH_FAILED = "backend_fetch_failed"
ERROR_NON_200 = "spotify_non_200"

# Overlays poll every second; no cache between us and them may hold a snapshot
NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
    "Surrogate-Control": "no-store",
    "CDN-Cache-Control": "no-store",
    "Vary": "Authorization",
}


def _state_body(state: AcceptedState, server_now: int) -> dict:
    sample = state.sample
    return {
        "item": sample.item,
        "is_playing": sample.is_playing,
        "progress_ms": sample.progress_ms,
        "timestamp": sample.reported_at_ms,
        "currently_playing_type": sample.currently_playing_type,
        "accepted_at": state.accepted_at_ms,
        "source_status": state.source_status,
        "server_now": server_now,
    }


def decision_body(decision: Decision, server_now: int) -> dict:
    """Body for a guard decision; re-served states carry their rejection flag."""
    if isinstance(decision, Accept):
        return _state_body(decision.state, server_now)
    if isinstance(decision, (KeepStale, KeepSuppressed)):
        body = _state_body(decision.previous, server_now)
        body[decision.flag] = True
        return body
    raise TypeError(f"Unknown guard decision: {decision!r}")


def empty_body(
    server_now: int, error: Optional[str] = None, source_status: Optional[int] = None
) -> dict:
    """Stable "nothing playing" shape for 204s and upstream failures."""
    body = {
        "item": None,
        "is_playing": False,
        "progress_ms": 0,
        "timestamp": server_now,
        "server_now": server_now,
    }
    if source_status is not None:
        body["source_status"] = source_status
    if error is not None:
        body["error"] = error
    return body


def passthrough_body(payload: Any, server_now: int) -> dict:
    """Raw Spotify payload with only server_now added."""
    return {**payload, "server_now": server_now}
