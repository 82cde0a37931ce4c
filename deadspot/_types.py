from __future__ import annotations

import time

# Epoch timestamps and durations are integer milliseconds throughout.
Millis = int

MS_PER_SECOND: Millis = 1000
MS_PER_MINUTE: Millis = 60 * MS_PER_SECOND
MS_PER_HOUR: Millis = 60 * MS_PER_MINUTE
MS_PER_DAY: Millis = 24 * MS_PER_HOUR


def now_ms() -> Millis:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp *value* into [low, high]."""
    if value < low:
        return low
    if value > high:
        return high
    return value
