"""Sector modeling data structures."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SectorGate:
    """A virtual timing line: a short segment perpendicular to the trajectory.

    Coordinates are GPS degrees. The segment runs from ``start`` to ``end``
    through ``center``:

    ::

        start ───────── center ───────── end
                          │
                     (trajectory)
    """

    time: float
    """Reference-lap telemetry time the gate was placed at."""

    center_lat: float
    center_lon: float
    start_lat: float
    start_lon: float
    end_lat: float
    end_lon: float


@dataclass(frozen=True)
class SectorTimes:
    """Sector durations for one lap.

    ``times`` has one entry per sector and sums to the lap time.
    """

    lap_index: int
    times: tuple[float, ...]

    @property
    def labels(self) -> tuple[str, ...]:
        """Sector labels ``('S1', 'S2', …)``."""
        return tuple(f"S{i}" for i in range(1, len(self.times) + 1))

    @property
    def total(self) -> float:
        return sum(self.times)


@dataclass(frozen=True)
class BestSectors:
    """Fastest time per sector across the timed laps."""

    times: tuple[float, ...]
    lap_indices: tuple[int, ...]
    """Lap index that set each best sector (lowest index on ties)."""

    @property
    def theoretical_best(self) -> float:
        """Sum of the best sectors."""
        return sum(self.times)
