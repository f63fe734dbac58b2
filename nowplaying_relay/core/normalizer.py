"""Turn a currently-playing response into a Sample.

Every field has an explicit rule for what happens when it is missing and
when it has the wrong type, so nothing depends on truthiness of odd values.

    field                   absent            wrong type
    item                    None              None (an empty object is None too)
    is_playing              False             False
    progress_ms             0                 0 (negatives clamp to 0)
    timestamp               now_ms            now_ms
    currently_playing_type  None              None
"""
import math
from typing import Any, Optional

from nowplaying_relay.models.playback import Sample


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def empty_sample(now_ms: int) -> Sample:
    """Canonical "nothing playing" sample."""
    return Sample(
        item=None,
        track_id=None,
        track_duration_ms=0,
        is_playing=False,
        progress_ms=0,
        reported_at_ms=now_ms,
    )


def _item(payload: dict) -> Optional[dict]:
    item = payload.get("item")
    return item if isinstance(item, dict) and item else None


def _track_id(item: Optional[dict]) -> Optional[str]:
    if item is None:
        return None
    track_id = item.get("id")
    return str(track_id) if track_id is not None else None


def _duration_ms(item: Optional[dict]) -> int:
    if item is None:
        return 0
    duration = item.get("duration_ms")
    return max(0, int(duration)) if _is_number(duration) else 0


def normalize(status_code: Optional[int], payload: Any, now_ms: int) -> Sample:
    """Map an upstream status/body to a Sample. Pure; never touches the store."""
    if status_code != 200 or not isinstance(payload, dict):
        return empty_sample(now_ms)

    item = _item(payload)
    is_playing = payload.get("is_playing")
    progress = payload.get("progress_ms")
    timestamp = payload.get("timestamp")
    playing_type = payload.get("currently_playing_type")
    return Sample(
        item=item,
        track_id=_track_id(item),
        track_duration_ms=_duration_ms(item),
        is_playing=is_playing if isinstance(is_playing, bool) else False,
        progress_ms=max(0, int(progress)) if _is_number(progress) else 0,
        reported_at_ms=int(timestamp) if _is_number(timestamp) else now_ms,
        currently_playing_type=playing_type if isinstance(playing_type, str) else None,
    )
