"""Stabilization guard: decide whether a new sample replaces the accepted one.

Spotify's currently-playing endpoint is noisy when polled every second or so.
Replicas occasionally answer with an older cached snapshot, and the next track
is often announced a moment before the current one really ends (gapless,
crossfade, autoplay). Overlays that render every sample verbatim flicker. The
guard keeps the last accepted state unless the new sample is trustworthy.
"""
import logging
import math
from typing import Optional

from nowplaying_relay.config import GUARD_SETTINGS, GuardSettings
from nowplaying_relay.models.playback import (
    Accept,
    AcceptedState,
    Decision,
    KeepStale,
    KeepSuppressed,
    Sample,
)

logger = logging.getLogger(__name__)


def estimate_progress_ms(previous: AcceptedState, now_ms: int) -> float:
    """Where the previous track should be by now. Paused tracks don't advance."""
    if not previous.is_playing:
        return previous.progress_ms
    elapsed_ms = now_ms - previous.accepted_at_ms
    limit = previous.track_duration_ms or math.inf
    return min(previous.progress_ms + elapsed_ms, limit)


def is_stale(
    previous: AcceptedState, sample: Sample, settings: GuardSettings = GUARD_SETTINGS
) -> bool:
    """True if the sample's reported time is behind the accepted one beyond jitter."""
    return sample.reported_at_ms + settings.stale_tolerance_ms < previous.reported_at_ms


def is_early_switch(
    previous: AcceptedState,
    sample: Sample,
    now_ms: int,
    settings: GuardSettings = GUARD_SETTINGS,
) -> bool:
    """True if the sample switches track before the previous one was nearly done."""
    if not (previous.item is not None and sample.has_track):
        return False
    if previous.track_id == sample.track_id:
        return False

    duration = previous.track_duration_ms
    near_end = (
        duration > 0
        and estimate_progress_ms(previous, now_ms) / duration >= settings.near_end_ratio
    )
    new_is_young = sample.progress_ms < settings.young_progress_ms
    return not near_end and new_is_young


def decide(
    previous: Optional[AcceptedState],
    sample: Sample,
    now_ms: int,
    source_status: int = 200,
    settings: GuardSettings = GUARD_SETTINGS,
) -> Decision:
    """Return Accept, KeepStale or KeepSuppressed for a sample.

    Pure: the caller writes ``Accept.state`` to the store, the other two
    decisions re-serve ``previous`` untouched.
    """
    if previous is None:
        return Accept(AcceptedState(sample, accepted_at_ms=now_ms, source_status=source_status))

    if is_stale(previous, sample, settings):
        logger.debug(
            "Guard: stale sample (%d ms behind accepted)",
            previous.reported_at_ms - sample.reported_at_ms,
        )
        return KeepStale(previous)

    if is_early_switch(previous, sample, now_ms, settings):
        logger.debug(
            "Guard: early switch suppressed (new progress %d ms)", sample.progress_ms
        )
        return KeepSuppressed(previous)

    # Wall clock may step backwards; accepted_at never does
    accepted_at = max(now_ms, previous.accepted_at_ms)
    return Accept(AcceptedState(sample, accepted_at_ms=accepted_at, source_status=source_status))
