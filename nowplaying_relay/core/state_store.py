"""In-memory accepted playback state per access token.

Single-process only: entries are never evicted, so memory grows with the
number of distinct access tokens seen since startup. Running more than one
instance needs a shared keyed cache with the same per-key locking.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from nowplaying_relay.models.playback import AcceptedState


class PlaybackStateStore:
    """Maps access token -> last AcceptedState, with one asyncio lock per token."""

    def __init__(self) -> None:
        self._states: Dict[str, AcceptedState] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(self, credential: str) -> Optional[AcceptedState]:
        return self._states.get(credential)

    def set(self, credential: str, state: AcceptedState) -> None:
        self._states[credential] = state

    def __len__(self) -> int:
        return len(self._states)

    def _lock_for(self, credential: str) -> asyncio.Lock:
        lock = self._locks.get(credential)
        if lock is None:
            lock = self._locks[credential] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def locked(self, credential: str) -> AsyncIterator[None]:
        """Serialize read-modify-write for one token; other tokens are not blocked."""
        async with self._lock_for(credential):
            yield
