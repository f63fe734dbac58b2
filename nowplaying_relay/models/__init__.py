"""Data models for upstream results, samples and guard decisions."""
from nowplaying_relay.models.playback import (
    Accept,
    AcceptedState,
    Decision,
    KeepStale,
    KeepSuppressed,
    Sample,
    UpstreamResult,
)

__all__ = [
    "Accept",
    "AcceptedState",
    "Decision",
    "KeepStale",
    "KeepSuppressed",
    "Sample",
    "UpstreamResult",
]
