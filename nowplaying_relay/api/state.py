"""Shared application state (injected into routes)."""
from nowplaying_relay.core.spotify_client import SpotifyPlaybackClient
from nowplaying_relay.core.state_store import PlaybackStateStore


class AppState:
    def __init__(
        self,
        playback_client: SpotifyPlaybackClient | None = None,
        store: PlaybackStateStore | None = None,
    ) -> None:
        self.store = store or PlaybackStateStore()
        self._playback_client = playback_client

    @property
    def playback_client(self) -> SpotifyPlaybackClient:
        if self._playback_client is None:
            self._playback_client = SpotifyPlaybackClient()
        return self._playback_client

    async def close(self) -> None:
        if self._playback_client is not None:
            await self._playback_client.aclose()
            self._playback_client = None


_state = AppState()


def get_state() -> AppState:
    return _state
