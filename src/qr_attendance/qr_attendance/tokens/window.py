from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from ..common.datetime_utils import as_utc

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _window_length(window_minutes: int) -> timedelta:
    if int(window_minutes) <= 0:
        raise ValueError(f"window_minutes must be positive, got {window_minutes!r}")
    return timedelta(minutes=int(window_minutes))


def window_start(t: datetime, window_minutes: int) -> datetime:
    """Floor ``t`` to the nearest multiple of ``window_minutes`` since the epoch (UTC)."""
    length = _window_length(window_minutes)
    elapsed = as_utc(t) - _EPOCH
    windows = math.floor(elapsed / length)
    return _EPOCH + windows * length


def window_end(start: datetime, window_minutes: int) -> datetime:
    return start + _window_length(window_minutes)
