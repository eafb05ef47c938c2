"""Shared synthetic-data fixtures.

The synthetic track is a 300 m radius circle. Every lap covers the full circle
at uniform progress, so two laps are at the same place on track when they have
completed the same fraction of their lap time. The speed channel is
independent of the positions: it holds 150 km/h except inside braking zones,
where it falls linearly by 23 km/h per second for 3 s and then jumps back.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence

import pytest

from lapsync.telemetry.laps import build_laps
from lapsync.telemetry.models import Session, TelemetrySample

LAT0 = 45.0
LON0 = 7.0
RADIUS_M = 300.0
M_PER_DEG = 111_320.0

SCENARIO_LAP_TIMES = [10.0, 62.345, 61.998, 63.102]
BRAKING_ZONES = (15.0, 38.0)
BRAKE_DURATION = 3.0
OUT_LAP_START_FRACTION = 0.8

# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def circle_position(fraction: float) -> tuple[float, float, float]:
    """``(lat, lon, heading)`` at *fraction* of a counter-clockwise lap."""
    theta = 2 * math.pi * fraction
    north = RADIUS_M * math.sin(theta)
    east = RADIUS_M * math.cos(theta)
    lat = LAT0 + north / M_PER_DEG
    lon = LON0 + east / (M_PER_DEG * math.cos(math.radians(LAT0)))
    # Travel direction (-sin, cos) in (east, north); heading clockwise from north.
    heading = math.degrees(math.atan2(-math.sin(theta), math.cos(theta))) % 360
    return lat, lon, heading


def braking_speed(tau: float, zones: Sequence[float] = BRAKING_ZONES) -> float:
    for z in zones:
        if z <= tau <= z + BRAKE_DURATION:
            return 150.0 - 23.0 * (tau - z)
    return 150.0


def build_samples(
    lap_times: Sequence[float],
    hz: float = 10.0,
    gps: bool = True,
    speed_fn: Callable[[float], float] = braking_speed,
) -> list[TelemetrySample]:
    """Samples every ``1/hz`` s from 0 to the end of the last lap."""
    laps = build_laps(lap_times)
    end = laps[-1].end_time if laps else 0.0
    samples: list[TelemetrySample] = []
    k = 0
    while k / hz <= end:
        t = round(k / hz, 3)
        lap = next((lp for lp in laps if lp.start_time <= t < lp.end_time), laps[-1])
        tau = t - lap.start_time
        if lap.index == 0 and len(laps) > 1:
            fraction = OUT_LAP_START_FRACTION + (1 - OUT_LAP_START_FRACTION) * tau / lap.lap_time
            speed = 100.0
        else:
            fraction = tau / lap.lap_time
            speed = speed_fn(tau)
        lat, lon, heading = circle_position(fraction) if gps else (0.0, 0.0, 0.0)
        samples.append(TelemetrySample(
            time=t, speed=speed, lat_acc=0.1, lon_acc=-0.2, altitude=120.0,
            lat=lat, lon=lon, heading=heading,
        ))
        k += 1
    return samples


def build_session(
    lap_times: Sequence[float] = SCENARIO_LAP_TIMES,
    hz: float = 10.0,
    gps: bool = True,
    speed_fn: Callable[[float], float] = braking_speed,
) -> Session:
    return Session(
        samples=tuple(build_samples(lap_times, hz, gps, speed_fn)),
        lap_times=tuple(lap_times),
        laps=build_laps(lap_times),
    )


def format_lap_time(seconds: float) -> str:
    minutes, secs = divmod(seconds, 60)
    return f"{int(minutes)}:{secs:06.3f}"


def build_csv(
    lap_times: Sequence[float] = SCENARIO_LAP_TIMES,
    hz: float = 10.0,
    gps: bool = True,
) -> str:
    """A logger export with metadata rows, header, units row and data."""
    samples = build_samples(lap_times, hz, gps)
    segment_cells = ",".join(f'"{format_lap_time(t)}"' for t in lap_times)
    lines = [
        '"Format","LapTimer CSV"',
        '"Session","Test Day"',
        '"Date","Sunday, June 1, 2025"',
        '"Time","14:32:05"',
        f'"Duration","{sum(lap_times):.3f}"',
        f'"Segment Times",{segment_cells}',
        "",
        '"Time","GPS Speed","GPS LatAcc","GPS LonAcc","GPS Heading","Altitude",'
        '"GPS Latitude","GPS Longitude"',
        '"s","km/h","g","g","deg","m","deg","deg"',
    ]
    for s in samples:
        lines.append(
            f'"{s.time:.3f}","{s.speed:.3f}","{s.lat_acc}","{s.lon_acc}","{s.heading:.4f}",'
            f'"{s.altitude}","{s.lat:.9f}","{s.lon:.9f}"'
        )
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_session():
    """Factory for synthetic sessions (see :func:`build_session`)."""
    return build_session


@pytest.fixture
def make_csv():
    """Factory for synthetic CSV exports (see :func:`build_csv`)."""
    return build_csv


@pytest.fixture
def braking_profile():
    """Factory for a speed function with braking zones at the given lap times."""
    def _profile(*zones: float) -> Callable[[float], float]:
        return lambda tau: braking_speed(tau, zones)
    return _profile


@pytest.fixture
def session() -> Session:
    """Out-lap + three timed laps; lap 2 is the reference."""
    return build_session()
