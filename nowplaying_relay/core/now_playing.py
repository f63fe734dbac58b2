"""Resolve one /now-playing poll: fetch, then pass through or stabilize."""
import logging
import time
from typing import Callable

from nowplaying_relay.config import GUARD_SETTINGS, GuardSettings
from nowplaying_relay.core.normalizer import normalize
from nowplaying_relay.core.playback_guard import decide
from nowplaying_relay.core.response import (
    ERROR_FETCH_FAILED,
    ERROR_NON_200,
    decision_body,
    empty_body,
    passthrough_body,
)
from nowplaying_relay.core.spotify_client import SpotifyPlaybackClient
from nowplaying_relay.core.state_store import PlaybackStateStore
from nowplaying_relay.models.playback import Accept, UpstreamResult

logger = logging.getLogger(__name__)

# Statuses the guard sees; everything else is answered with an empty body
_USABLE_STATUSES = (200, 204)


def now_ms() -> int:
    return int(time.time() * 1000)


def _failure_body(result: UpstreamResult, server_now: int) -> dict:
    if result.failed:
        return empty_body(server_now, error=ERROR_FETCH_FAILED)
    return empty_body(server_now, error=ERROR_NON_200, source_status=result.status_code)


def _is_usable(result: UpstreamResult) -> bool:
    if result.failed or result.status_code not in _USABLE_STATUSES:
        return False
    # A 200 without a JSON object is as good as an error
    return result.status_code == 204 or isinstance(result.payload, dict)


def passthrough(result: UpstreamResult, clock: Callable[[], int] = now_ms) -> dict:
    """Upstream payload plus server_now; the store is never consulted."""
    server_now = clock()
    if not _is_usable(result):
        return _failure_body(result, server_now)
    if result.status_code == 204:
        return empty_body(server_now, source_status=204)
    return passthrough_body(result.payload, server_now)


async def stabilize(
    store: PlaybackStateStore,
    access_token: str,
    result: UpstreamResult,
    clock: Callable[[], int] = now_ms,
    settings: GuardSettings = GUARD_SETTINGS,
) -> dict:
    """Run a fetched result through the guard and record accepted states."""
    if not _is_usable(result):
        return _failure_body(result, clock())

    async with store.locked(access_token):
        server_now = clock()
        sample = normalize(result.status_code, result.payload, server_now)
        decision = decide(
            store.get(access_token),
            sample,
            server_now,
            source_status=result.status_code,
            settings=settings,
        )
        if isinstance(decision, Accept):
            store.set(access_token, decision.state)
    return decision_body(decision, server_now)


async def resolve_now_playing(
    client: SpotifyPlaybackClient,
    store: PlaybackStateStore,
    access_token: str,
    stable: bool,
    clock: Callable[[], int] = now_ms,
) -> dict:
    result = await client.fetch_currently_playing(access_token)
    if stable:
        return await stabilize(store, access_token, result, clock)
    return passthrough(result, clock)
