"""Lap indexing: lap durations → absolute lap windows and the reference lap."""

from __future__ import annotations

from collections.abc import Sequence

from lapsync.telemetry.models import Lap


def build_laps(lap_times: Sequence[float]) -> tuple[Lap, ...]:
    """Place each lap on the telemetry clock.

    ``start[0] = 0`` and ``start[i] = start[i-1] + lap_time[i-1]``; the last
    lap ends at its own start plus its lap time.
    """
    laps: list[Lap] = []
    start = 0.0
    for i, lap_time in enumerate(lap_times):
        laps.append(Lap(index=i, lap_time=lap_time, start_time=start, end_time=start + lap_time))
        start += lap_time
    return tuple(laps)


def find_best_lap(laps: Sequence[Lap]) -> Lap | None:
    """Return the reference lap: the fastest timed lap.

    The out-lap only competes when it is the only lap. Ties go to the lowest
    index. Returns ``None`` for an empty sequence.
    """
    if not laps:
        return None
    candidates = list(laps[1:]) if len(laps) > 1 else list(laps)
    best = candidates[0]
    for lap in candidates[1:]:
        if lap.lap_time < best.lap_time:
            best = lap
    return best


def timed_laps(laps: Sequence[Lap]) -> list[Lap]:
    """Laps that take part in best-lap / best-sector comparisons."""
    return list(laps[1:]) if len(laps) > 1 else list(laps)


def beacon_markers_to_lap_times(markers: Sequence[float], last_sample_time: float | None) -> list[float]:
    """Convert absolute beacon times into lap durations.

    Each marker closes a lap that started at the previous marker (or 0). Data
    logged after the last marker forms one more lap running to
    *last_sample_time*.
    """
    lap_times: list[float] = []
    previous = 0.0
    for marker in markers:
        lap_times.append(marker - previous)
        previous = marker
    if last_sample_time is not None and last_sample_time > previous:
        lap_times.append(last_sample_time - previous)
    return lap_times
