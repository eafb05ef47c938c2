"""Reporting data models."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field


@dataclass
class LapRow:
    """One row of the lap table.

    ``sector_times`` has one entry per sector; ``best_sector_flags`` marks the
    sectors in which this lap set the session best.
    """

    lap_index: int
    name: str
    lap_time: float
    start_time: float
    sample_count: int
    avg_speed: float
    max_speed: float
    sector_times: list[float]
    best_sector_flags: list[bool] = field(default_factory=list)
    is_best: bool = False


@dataclass
class SessionReport:
    """Lap table plus session-level timing summary."""

    laps: list[LapRow]
    sector_labels: list[str]
    best_lap_index: int | None = None
    best_sector_times: list[float] = field(default_factory=list)
    theoretical_best: float | None = None
    date: str | None = None
    time: str | None = None
    duration: float | None = None

    def to_dict(self) -> dict:
        """Return a JSON-serializable dict (recursive via :func:`dataclasses.asdict`)."""
        return dataclasses.asdict(self)
