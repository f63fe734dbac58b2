"""Core services: Spotify access, normalizer, stabilization guard, state store."""
from nowplaying_relay.core.spotify_client import SpotifyPlaybackClient
from nowplaying_relay.core.state_store import PlaybackStateStore

__all__ = ["PlaybackStateStore", "SpotifyPlaybackClient"]
