from collections import deque

import pytest
from fastapi.testclient import TestClient

from nowplaying_relay.api.app import app
from nowplaying_relay.api.state import AppState, get_state
from nowplaying_relay.models.playback import UpstreamResult


class FakePlaybackClient:
    """Replays queued UpstreamResults and records the tokens it was called with."""

    def __init__(self, *results: UpstreamResult) -> None:
        self.results = deque(results)
        self.calls: list[str] = []

    def queue(self, *results: UpstreamResult) -> None:
        self.results.extend(results)

    async def fetch_currently_playing(self, access_token: str) -> UpstreamResult:
        self.calls.append(access_token)
        return self.results.popleft()

    async def aclose(self) -> None:
        pass


def track(track_id: str, duration_ms: int = 200_000, name: str = "Song") -> dict:
    return {"id": track_id, "name": name, "duration_ms": duration_ms, "type": "track"}


def playing(
    track_id: str,
    progress_ms: int,
    timestamp: int = 100_000,
    duration_ms: int = 200_000,
    is_playing: bool = True,
) -> UpstreamResult:
    return UpstreamResult(
        status_code=200,
        payload={
            "item": track(track_id, duration_ms),
            "is_playing": is_playing,
            "progress_ms": progress_ms,
            "timestamp": timestamp,
            "currently_playing_type": "track",
        },
    )


@pytest.fixture
def fake_client() -> FakePlaybackClient:
    return FakePlaybackClient()


@pytest.fixture
def app_state(fake_client) -> AppState:
    return AppState(playback_client=fake_client)


@pytest.fixture
def client(app_state):
    app.dependency_overrides[get_state] = lambda: app_state
    yield TestClient(app)
    app.dependency_overrides.clear()
