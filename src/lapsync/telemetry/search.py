"""Nearest-in-time lookups over time-ordered samples."""

from __future__ import annotations

import bisect
from collections.abc import Sequence


def nearest_index(times: Sequence[float], t: float) -> int:
    """Index of the entry in *times* closest to *t*.

    *times* must be sorted ascending. On equal distance the earliest index
    wins, including among duplicate timestamps.

    Raises:
        ValueError: If *times* is empty.
    """
    if not times:
        raise ValueError("times must not be empty")
    idx = bisect.bisect_left(times, t)
    if idx == 0:
        return 0
    if idx == len(times):
        return bisect.bisect_left(times, times[-1])
    before, after = times[idx - 1], times[idx]
    if t - before <= after - t:
        return bisect.bisect_left(times, before)
    return idx
