"""Automatic sector segmentation from the reference lap's GPS trajectory.

Sector boundaries are placed just before the end of each significant
deceleration (braking) zone of the best lap, so every sector roughly spans
"exit of one corner → braking for the next". No track map is needed: the gates
are derived purely from the logged trajectory and then reused, unchanged, for
every lap.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass

from lapsync.errors import DataQualityWarning
from lapsync.telemetry.models import Session, TelemetrySample
from lapsync.track.geometry import GATE_HALF_WIDTH_DEG, build_gate
from lapsync.track.models import SectorGate

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecelerationEpisode:
    """A contiguous stretch where speed drops faster than the threshold."""

    start_time: float
    end_time: float

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class _Sector:
    start_time: float
    end_time: float
    closing: DecelerationEpisode | None
    """Episode whose end forms this sector's closing boundary (``None`` for the tail)."""

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


def _warn(message: str) -> None:
    _logger.warning(message)
    warnings.warn(message, DataQualityWarning, stacklevel=3)


class SectorDetector:
    """Derive sector gates from the reference lap of a :class:`Session`.

    Args:
        decel_threshold: Acceleration (km/h per second) below which the car
            counts as decelerating.
        min_decel_duration: Minimum length of a closed deceleration episode.
        min_tail_decel_duration: Minimum length of an episode still open when
            the lap ends.
        min_sector_duration: Provisional sectors shorter than this are merged
            into a neighbour.
        gate_lead: Gates sit this many seconds before the episode end.
        min_final_sector: A gate is skipped if it would leave less than this
            many seconds before the lap's last sample.
        gate_half_width: Half-length of each gate in degrees.
    """

    def __init__(
        self,
        decel_threshold: float = -0.5,
        min_decel_duration: float = 1.0,
        min_tail_decel_duration: float = 0.2,
        min_sector_duration: float = 5.0,
        gate_lead: float = 0.2,
        min_final_sector: float = 2.0,
        gate_half_width: float = GATE_HALF_WIDTH_DEG,
    ) -> None:
        self.decel_threshold = decel_threshold
        self.min_decel_duration = min_decel_duration
        self.min_tail_decel_duration = min_tail_decel_duration
        self.min_sector_duration = min_sector_duration
        self.gate_lead = gate_lead
        self.min_final_sector = min_final_sector
        self.gate_half_width = gate_half_width

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def detect(self, session: Session) -> list[SectorGate]:
        """Return the sector gates for *session*, sorted by time.

        Emits :class:`~lapsync.errors.DataQualityWarning` and returns an empty
        list when there is no reference-lap telemetry, no GPS data, or no
        deceleration zone.
        """
        ref_lap = session.best_lap
        if ref_lap is None:
            _warn("No laps found; cannot place sector gates")
            return []

        samples = session.lap_samples(ref_lap)
        if not samples:
            _warn(f"No telemetry for reference lap {ref_lap.index}")
            return []
        if not any(s.has_gps for s in samples):
            _warn("No GPS data in reference lap; cannot place sector gates")
            return []

        episodes = self.find_deceleration_episodes(samples)
        if not episodes:
            _warn(f"No deceleration periods found in reference lap {ref_lap.index}")
            return []

        sectors = self._merge_short_sectors(
            self._provisional_sectors(episodes, ref_lap.start_time, ref_lap.end_time)
        )

        times = [s.time for s in samples]
        last_time = samples[-1].time
        gates: list[SectorGate] = []
        for sector in sectors:
            if sector.closing is None:
                continue
            gate_time = sector.closing.end_time - self.gate_lead
            if last_time - gate_time < self.min_final_sector:
                continue
            gate = build_gate(samples, gate_time, times, self.gate_half_width)
            if gate is not None:
                gates.append(gate)

        gates.sort(key=lambda g: g.time)
        _logger.info(
            "Placed %d sector gates from %d deceleration episodes on reference lap %d",
            len(gates), len(episodes), ref_lap.index,
        )
        return gates

    def find_deceleration_episodes(
        self, samples: list[TelemetrySample]
    ) -> list[DecelerationEpisode]:
        """Return the retained deceleration episodes of one lap, in time order."""
        episodes: list[DecelerationEpisode] = []
        start: float | None = None
        for prev, cur in zip(samples, samples[1:]):
            dt = cur.time - prev.time
            if dt <= 0:
                continue
            accel = (cur.speed - prev.speed) / dt
            if accel < self.decel_threshold:
                if start is None:
                    start = prev.time
            elif start is not None:
                episode = DecelerationEpisode(start, prev.time)
                if episode.duration >= self.min_decel_duration:
                    episodes.append(episode)
                start = None

        if start is not None:
            # Still braking when the lap ends; looser threshold applies here.
            episode = DecelerationEpisode(start, samples[-1].time)
            if episode.duration >= self.min_tail_decel_duration:
                episodes.append(episode)
        return episodes

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _provisional_sectors(
        self,
        episodes: list[DecelerationEpisode],
        lap_start: float,
        lap_end: float,
    ) -> list[_Sector]:
        """Spans between episodes, plus the lead-in and the tail."""
        sectors: list[_Sector] = []
        boundary = lap_start
        for ep in episodes:
            sectors.append(_Sector(boundary, ep.start_time, ep))
            boundary = ep.end_time
        sectors.append(_Sector(boundary, lap_end, None))
        return sectors

    def _merge_short_sectors(self, sectors: list[_Sector]) -> list[_Sector]:
        """Fold short sectors into their successor (the last into its predecessor)."""
        merged = list(sectors)
        i = 0
        while i < len(merged) and len(merged) > 1:
            sector = merged[i]
            if sector.duration >= self.min_sector_duration:
                i += 1
                continue
            if i < len(merged) - 1:
                nxt = merged[i + 1]
                merged[i:i + 2] = [_Sector(sector.start_time, nxt.end_time, nxt.closing)]
            else:
                prev = merged[i - 1]
                merged[i - 1:i + 1] = [_Sector(prev.start_time, sector.end_time, sector.closing)]
                i -= 1
        return merged


def compute_sectors(session: Session) -> list[SectorGate]:
    """Shortcut for ``SectorDetector().detect(session)``."""
    return SectorDetector().detect(session)
