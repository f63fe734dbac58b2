"""Playback snapshots from Spotify and the guard's view of them."""
from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass(frozen=True)
class UpstreamResult:
    """Outcome of one currently-playing call: status, parsed body or transport error."""
    status_code: Optional[int]
    payload: Any = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class Sample:
    """Normalized currently-playing snapshot, produced fresh per poll."""
    item: Optional[dict]
    track_id: Optional[str]
    track_duration_ms: int
    is_playing: bool
    progress_ms: int
    reported_at_ms: int
    currently_playing_type: Optional[str] = None

    @property
    def has_track(self) -> bool:
        return self.item is not None


@dataclass(frozen=True)
class AcceptedState:
    """Last sample the guard exposed for one access token."""
    sample: Sample
    accepted_at_ms: int
    source_status: int

    # Shortcuts so guard code reads like the sample fields
    @property
    def item(self) -> Optional[dict]:
        return self.sample.item

    @property
    def track_id(self) -> Optional[str]:
        return self.sample.track_id

    @property
    def track_duration_ms(self) -> int:
        return self.sample.track_duration_ms

    @property
    def is_playing(self) -> bool:
        return self.sample.is_playing

    @property
    def progress_ms(self) -> int:
        return self.sample.progress_ms

    @property
    def reported_at_ms(self) -> int:
        return self.sample.reported_at_ms


@dataclass(frozen=True)
class Accept:
    state: AcceptedState


@dataclass(frozen=True)
class KeepStale:
    previous: AcceptedState
    flag: str = field(default="stale_guard", init=False)


@dataclass(frozen=True)
class KeepSuppressed:
    previous: AcceptedState
    flag: str = field(default="early_switch_suppressed", init=False)


Decision = Union[Accept, KeepStale, KeepSuppressed]
