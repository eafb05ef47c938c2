"""Diff-to-best: per-sample time delta against the reference lap.

Unlike a time-aligned comparison, each sample is matched to the moment the
reference lap passed the *same place on track*: a gate is laid across the
current lap's trajectory at the sample, and the reference trajectory's crossing
of that gate gives the corresponding reference time.
"""

from __future__ import annotations

import bisect
import logging
import warnings
from collections.abc import Sequence

from lapsync.errors import DataQualityWarning
from lapsync.telemetry.models import Lap, Session, TelemetrySample
from lapsync.telemetry.search import nearest_index
from lapsync.track.geometry import GATE_HALF_WIDTH_DEG, build_gate, haversine_m, locate_crossing

_logger = logging.getLogger(__name__)

DiffSeries = list[float | None]


def find_nearest_by_distance(
    samples: Sequence[TelemetrySample],
    lat: float,
    lon: float,
    max_distance_m: float = 50.0,
) -> int | None:
    """Index of the sample closest to ``(lat, lon)`` by haversine distance.

    Samples without GPS are ignored. Returns ``None`` when nothing lies within
    *max_distance_m*. On equal distance the earliest sample wins.
    """
    best_idx: int | None = None
    best_dist = max_distance_m
    for i, s in enumerate(samples):
        if not s.has_gps:
            continue
        d = haversine_m(lat, lon, s.lat, s.lon)
        if d <= best_dist and (best_idx is None or d < best_dist):
            best_idx, best_dist = i, d
    return best_idx


class DeltaCalculator:
    """Compute the diff-to-best series for a whole session.

    Args:
        search_window: Reference samples within this many seconds of the
            time-aligned anchor are searched first. When that window holds no
            exact crossing the whole reference lap is searched.
        max_match_distance_m: A closest-point fallback farther than this from
            the current sample counts as no correspondence.
        gate_half_width: Half-length of the synthetic gates in degrees.
    """

    def __init__(
        self,
        search_window: float = 20.0,
        max_match_distance_m: float = 50.0,
        gate_half_width: float = GATE_HALF_WIDTH_DEG,
    ) -> None:
        self.search_window = search_window
        self.max_match_distance_m = max_match_distance_m
        self.gate_half_width = gate_half_width

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compute(self, session: Session) -> DiffSeries:
        """Return one diff per sample of *session*.

        ``0.0`` on the reference lap, ``None`` where no correspondence exists,
        otherwise seconds (positive = slower than the reference at that point).
        """
        diffs: DiffSeries = [None] * len(session.samples)
        ref_lap = session.best_lap
        if ref_lap is None:
            self._warn("No laps found; diff-to-best unavailable")
            return diffs

        ref_samples = session.lap_samples(ref_lap)
        if not ref_samples:
            self._warn(f"No telemetry for reference lap {ref_lap.index}")
            return diffs

        if any(s.has_gps for s in ref_samples):
            ref_times = [s.time for s in ref_samples]
            for lap in session.laps:
                if lap.index != ref_lap.index:
                    self._fill_lap(session, lap, ref_lap, ref_samples, ref_times, diffs)
        else:
            self._warn("No GPS data in reference lap; diff-to-best unavailable")

        for i in session.lap_index_range(ref_lap):
            diffs[i] = 0.0

        misses = sum(1 for d in diffs if d is None)
        _logger.info(
            "Diff-to-best vs lap %d: %d samples, %d without correspondence",
            ref_lap.index, len(diffs), misses,
        )
        return diffs

    def diff_for_sample(
        self,
        lap_samples: Sequence[TelemetrySample],
        lap_times: Sequence[float],
        k: int,
        lap: Lap,
        ref_lap: Lap,
        ref_samples: Sequence[TelemetrySample],
        ref_times: Sequence[float],
    ) -> float | None:
        """Diff for the *k*-th sample of *lap_samples* (see :meth:`compute`)."""
        sample = lap_samples[k]
        if not sample.has_gps:
            return None

        progress = sample.time - lap.start_time
        anchor = ref_times[nearest_index(ref_times, ref_lap.start_time + progress)]
        lo = bisect.bisect_left(ref_times, anchor - self.search_window)
        hi = bisect.bisect_right(ref_times, anchor + self.search_window)
        window = ref_samples[lo:hi]

        gate = build_gate(lap_samples, sample.time, lap_times, self.gate_half_width)
        if gate is None:
            return None
        crossing = locate_crossing(window, gate)
        if crossing is None or not crossing.exact:
            # Lap has drifted outside the window; search the whole reference lap.
            crossing = locate_crossing(ref_samples, gate)
        if crossing is None:
            return None

        if not crossing.exact:
            match = ref_samples[nearest_index(ref_times, crossing.time)]
            if not match.has_gps:
                return None
            distance = haversine_m(sample.lat, sample.lon, match.lat, match.lon)
            if distance > self.max_match_distance_m:
                return None

        return progress - (crossing.time - ref_lap.start_time)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _fill_lap(
        self,
        session: Session,
        lap: Lap,
        ref_lap: Lap,
        ref_samples: list[TelemetrySample],
        ref_times: list[float],
        diffs: DiffSeries,
    ) -> None:
        indices = session.lap_index_range(lap)
        if not indices:
            return
        lap_samples = session.samples[indices.start:indices.stop]
        lap_times = [s.time for s in lap_samples]
        for k, i in enumerate(indices):
            diffs[i] = self.diff_for_sample(
                lap_samples, lap_times, k, lap, ref_lap, ref_samples, ref_times
            )

    @staticmethod
    def _warn(message: str) -> None:
        _logger.warning(message)
        warnings.warn(message, DataQualityWarning, stacklevel=3)


def compute_diffs(session: Session) -> DiffSeries:
    """Shortcut for ``DeltaCalculator().compute(session)``."""
    return DeltaCalculator().compute(session)
