"""Gate geometry: perpendicular timing lines and trajectory crossings.

Positions are handled in GPS-degree space with longitude as *x* and latitude
as *y*. Direction vectors get a ``cos(latitude)`` correction on the longitude
component so that perpendiculars are perpendicular on the ground, not just on
the degree grid.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from lapsync.telemetry.models import TelemetrySample
from lapsync.telemetry.search import nearest_index
from lapsync.track.models import SectorGate

GATE_HALF_WIDTH_DEG = 4e-5
"""Half-length of a gate in degrees (≈4.4 m either side of the centre line)."""

PARALLEL_EPS = 1e-10
"""Determinant magnitude below which two segments are treated as parallel."""

EARTH_RADIUS_M = 6_371_000.0

_DIRECTION_STEPS = (5, 1)

# ---------------------------------------------------------------------------
# Distance helpers
# ---------------------------------------------------------------------------


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two lat/lon points, in metres."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (math.sin(dlat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2))
         * math.sin(dlon / 2) ** 2)
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def point_segment_distance(
    px: float, py: float, ax: float, ay: float, bx: float, by: float
) -> float:
    """Distance from ``(px, py)`` to the finite segment ``A→B``.

    The projection parameter is clamped to ``[0, 1]``, so points beyond either
    end measure to the nearest endpoint.
    """
    dx, dy = bx - ax, by - ay
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        return math.hypot(px - ax, py - ay)
    t = ((px - ax) * dx + (py - ay) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(px - (ax + t * dx), py - (ay + t * dy))


def segment_intersection(
    x1: float, y1: float, x2: float, y2: float,
    x3: float, y3: float, x4: float, y4: float,
) -> tuple[float, float] | None:
    """Intersection parameters of segments ``P1→P2`` and ``P3→P4``.

    Returns ``(t, u)`` where the hit point is ``P1 + t (P2 - P1)`` and
    ``P3 + u (P4 - P3)``, or ``None`` when the segments are (nearly) parallel
    or do not overlap.
    """
    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    if abs(denom) < PARALLEL_EPS:
        return None
    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom
    u = -((x1 - x2) * (y1 - y3) - (y1 - y2) * (x1 - x3)) / denom
    if 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0:
        return t, u
    return None


# ---------------------------------------------------------------------------
# Gate construction
# ---------------------------------------------------------------------------


def _trajectory_direction(
    samples: Sequence[TelemetrySample], idx: int
) -> tuple[float, float]:
    """Unit travel direction at *idx* as ``(x, y)`` in cosine-corrected space.

    Uses the samples 5 steps either side, then 1 step, then the reported
    heading when the data boundary (or a stationary car) leaves no usable
    pair.
    """
    here = samples[idx]
    cos_lat = math.cos(math.radians(here.lat))
    for step in _DIRECTION_STEPS:
        lo, hi = idx - step, idx + step
        if lo < 0 or hi >= len(samples):
            continue
        dx = (samples[hi].lon - samples[lo].lon) * cos_lat
        dy = samples[hi].lat - samples[lo].lat
        norm = math.hypot(dx, dy)
        if norm > 0.0:
            return dx / norm, dy / norm

    heading = math.radians(here.heading)
    return math.sin(heading), math.cos(heading)


def build_gate(
    samples: Sequence[TelemetrySample],
    t: float,
    times: Sequence[float] | None = None,
    half_width: float = GATE_HALF_WIDTH_DEG,
) -> SectorGate | None:
    """Build a gate perpendicular to the trajectory at telemetry time *t*.

    The gate is centred on the sample nearest to *t*. Pass *times* (the
    samples' timestamps) to avoid rebuilding it on every call.
    Returns ``None`` if *samples* is empty.
    """
    if not samples:
        return None
    if times is None:
        times = [s.time for s in samples]
    idx = nearest_index(times, t)
    center = samples[idx]

    dx, dy = _trajectory_direction(samples, idx)
    # Rotate the travel direction by 90° to get the gate direction.
    px, py = -dy, dx

    cos_lat = max(math.cos(math.radians(center.lat)), 1e-9)
    off_lat = py * half_width
    off_lon = px * half_width / cos_lat
    return SectorGate(
        time=t,
        center_lat=center.lat,
        center_lon=center.lon,
        start_lat=center.lat + off_lat,
        start_lon=center.lon + off_lon,
        end_lat=center.lat - off_lat,
        end_lon=center.lon - off_lon,
    )


# ---------------------------------------------------------------------------
# Crossing search
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GateCrossing:
    """Where a trajectory passes a gate."""

    time: float
    """Interpolated crossing time (or the closest sample's time)."""

    exact: bool
    """True for a real segment intersection, False for the closest-point fallback."""

    distance: float
    """Distance from the gate in degrees; ``0.0`` when *exact*."""


def locate_crossing(
    samples: Sequence[TelemetrySample], gate: SectorGate
) -> GateCrossing | None:
    """Find where *samples* cross *gate*.

    Returns the first intersection along the trajectory (not the best one),
    with time interpolated linearly along the crossing segment. If the
    trajectory never intersects the gate, falls back to the sample closest to
    the finite gate segment. Returns ``None`` only for empty *samples*.
    """
    if not samples:
        return None

    gx1, gy1 = gate.start_lon, gate.start_lat
    gx2, gy2 = gate.end_lon, gate.end_lat

    for a, b in zip(samples, samples[1:]):
        hit = segment_intersection(a.lon, a.lat, b.lon, b.lat, gx1, gy1, gx2, gy2)
        if hit is not None:
            t, _ = hit
            return GateCrossing(time=a.time + t * (b.time - a.time), exact=True, distance=0.0)

    best = min(
        samples,
        key=lambda s: point_segment_distance(s.lon, s.lat, gx1, gy1, gx2, gy2),
    )
    distance = point_segment_distance(best.lon, best.lat, gx1, gy1, gx2, gy2)
    return GateCrossing(time=best.time, exact=False, distance=distance)


def find_border_crossing(
    samples: Sequence[TelemetrySample], gate: SectorGate
) -> float | None:
    """Time at which *samples* cross *gate* (see :func:`locate_crossing`)."""
    crossing = locate_crossing(samples, gate)
    return crossing.time if crossing is not None else None
