"""Telemetry data models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field


@dataclass(frozen=True)
class TelemetrySample:
    """A single row of logged GPS telemetry.

    Optional channels that were missing from the source file are stored as
    ``0.0``; :attr:`Session.channels` records which ones were actually present.
    """

    time: float
    """Seconds from session start."""

    speed: float
    """GPS speed in km/h."""

    lat_acc: float = 0.0
    """Lateral acceleration (g)."""

    lon_acc: float = 0.0
    """Longitudinal acceleration (g)."""

    altitude: float = 0.0
    """Altitude in metres."""

    lat: float = 0.0
    """Latitude in degrees."""

    lon: float = 0.0
    """Longitude in degrees."""

    heading: float = 0.0
    """GPS heading in degrees, clockwise from north."""

    @property
    def has_gps(self) -> bool:
        """True unless both coordinates are exactly zero (no fix / no column)."""
        return self.lat != 0.0 or self.lon != 0.0

    def is_valid(self) -> bool:
        """Return True if all fields are finite (no NaN/Inf)."""
        return all(
            math.isfinite(v)
            for v in (
                self.time,
                self.speed,
                self.lat_acc,
                self.lon_acc,
                self.altitude,
                self.lat,
                self.lon,
                self.heading,
            )
        )


@dataclass(frozen=True)
class Lap:
    """One lap of a session, positioned on the telemetry clock.

    ``index == 0`` is the out-lap. Laps are derived once per load and never
    edited; changing lap times means rebuilding them with
    :func:`~lapsync.telemetry.laps.build_laps`.
    """

    index: int
    lap_time: float
    start_time: float
    end_time: float

    @property
    def is_out_lap(self) -> bool:
        return self.index == 0

    @property
    def name(self) -> str:
        """Display name: ``'Out Lap'`` or ``'Lap N'``."""
        return "Out Lap" if self.is_out_lap else f"Lap {self.index}"

    def contains(self, t: float) -> bool:
        """True if telemetry time *t* lies within ``[start_time, end_time]``."""
        return self.start_time <= t <= self.end_time


@dataclass(frozen=True)
class SessionHeader:
    """Metadata rows found above the column header."""

    duration: float | None = None
    date: str | None = None
    time: str | None = None


@dataclass(frozen=True)
class Session:
    """An immutable, fully parsed telemetry set.

    Produced by :func:`~lapsync.telemetry.parser.parse`; everything downstream
    (gates, sector times, diffs) is derived from it without mutating it.
    """

    samples: tuple[TelemetrySample, ...]
    lap_times: tuple[float, ...]
    laps: tuple[Lap, ...]
    header: SessionHeader = field(default_factory=SessionHeader)
    channels: frozenset[str] = frozenset()
    """Optional column names that were present in the source file."""

    @property
    def best_lap(self) -> Lap | None:
        """The reference lap (see :func:`~lapsync.telemetry.laps.find_best_lap`)."""
        from lapsync.telemetry.laps import find_best_lap

        return find_best_lap(self.laps)

    @property
    def has_gps(self) -> bool:
        return any(s.has_gps for s in self.samples)

    @property
    def duration(self) -> float:
        """Time of the last sample, or ``0.0`` for an empty session."""
        return self.samples[-1].time if self.samples else 0.0

    def lap_samples(self, lap: Lap) -> list[TelemetrySample]:
        """Samples with ``lap.start_time <= time <= lap.end_time``."""
        return [s for s in self.samples if lap.contains(s.time)]

    def lap_index_range(self, lap: Lap) -> range:
        """Sample indices belonging to *lap* (half-open except for the last lap).

        A sample exactly on a boundary belongs to the lap that starts there, so
        every sample maps to at most one lap.
        """
        is_last = bool(self.laps) and lap.index == self.laps[-1].index
        indices = [
            i
            for i, s in enumerate(self.samples)
            if lap.start_time <= s.time < lap.end_time
            or (is_last and s.time == lap.end_time)
        ]
        if not indices:
            return range(0)
        return range(indices[0], indices[-1] + 1)

    def lap_at(self, t: float) -> Lap | None:
        """Return the lap that telemetry time *t* falls in, or ``None``."""
        for lap in self.laps:
            if lap.start_time <= t < lap.end_time:
                return lap
        if self.laps and t == self.laps[-1].end_time:
            return self.laps[-1]
        return None
