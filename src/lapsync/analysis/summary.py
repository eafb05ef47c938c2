"""Per-lap statistics for the lap table."""

from __future__ import annotations

from dataclasses import dataclass

from lapsync.telemetry.models import Session


@dataclass(frozen=True)
class LapSummary:
    """Headline numbers for one lap."""

    lap_index: int
    name: str
    lap_time: float
    start_time: float
    sample_count: int
    avg_speed: float
    """Mean GPS speed over the lap's samples (km/h); ``0.0`` without samples."""
    max_speed: float
    is_best: bool = False


def summarize_laps(session: Session) -> list[LapSummary]:
    """Return one :class:`LapSummary` per lap, flagging the reference lap."""
    best = session.best_lap
    summaries: list[LapSummary] = []
    for lap in session.laps:
        speeds = [s.speed for s in session.lap_samples(lap)]
        summaries.append(LapSummary(
            lap_index=lap.index,
            name=lap.name,
            lap_time=lap.lap_time,
            start_time=lap.start_time,
            sample_count=len(speeds),
            avg_speed=sum(speeds) / len(speeds) if speeds else 0.0,
            max_speed=max(speeds) if speeds else 0.0,
            is_best=best is not None and lap.index == best.index,
        ))
    return summaries
