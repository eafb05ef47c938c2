"""Per-lap sector timing against a fixed set of gates."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from lapsync.telemetry.laps import timed_laps
from lapsync.telemetry.models import Lap, Session
from lapsync.track.geometry import find_border_crossing
from lapsync.track.models import BestSectors, SectorGate, SectorTimes

_logger = logging.getLogger(__name__)


class SectorTimer:
    """Split every lap of a session into sector times.

    The same gates (from :class:`~lapsync.track.sectors.SectorDetector`) are
    used for every lap. Sector times always add up to the lap time: each
    crossing is clamped between the previous boundary and the lap end, and the
    final sector takes whatever remains.
    """

    def compute(self, session: Session, gates: Sequence[SectorGate]) -> list[SectorTimes]:
        """Return one :class:`SectorTimes` per lap, in lap order."""
        return [self.compute_lap(session, lap, gates) for lap in session.laps]

    def compute_lap(
        self, session: Session, lap: Lap, gates: Sequence[SectorGate]
    ) -> SectorTimes:
        """Sector times for a single *lap*.

        Without gates, or without samples in the lap, the whole lap is
        reported as one sector.
        """
        samples = session.lap_samples(lap)
        if not gates or not samples:
            return SectorTimes(lap_index=lap.index, times=(lap.lap_time,))

        times: list[float] = []
        boundary = lap.start_time
        for gate in gates:
            crossing = find_border_crossing(samples, gate)
            if crossing is None:
                crossing = boundary
            crossing = min(max(crossing, boundary), lap.end_time)
            times.append(crossing - boundary)
            boundary = crossing
        times.append(lap.end_time - boundary)
        return SectorTimes(lap_index=lap.index, times=tuple(times))

    def best_sectors(
        self, session: Session, sector_times: Sequence[SectorTimes]
    ) -> BestSectors | None:
        """Fastest time per sector over the timed laps.

        Only laps split into the full number of sectors are compared. Returns
        ``None`` if no lap qualifies.
        """
        eligible = {lap.index for lap in timed_laps(session.laps)}
        candidates = [st for st in sector_times if st.lap_index in eligible]
        if not candidates:
            return None
        n_sectors = max(len(st.times) for st in candidates)
        candidates = [st for st in candidates if len(st.times) == n_sectors]

        best_times: list[float] = []
        best_laps: list[int] = []
        for k in range(n_sectors):
            best = min(candidates, key=lambda st: (st.times[k], st.lap_index))
            best_times.append(best.times[k])
            best_laps.append(best.lap_index)
        _logger.debug("Best sectors %s from laps %s", best_times, best_laps)
        return BestSectors(times=tuple(best_times), lap_indices=tuple(best_laps))


def compute_sector_times(session: Session, gates: Sequence[SectorGate]) -> list[SectorTimes]:
    """Shortcut for ``SectorTimer().compute(session, gates)``."""
    return SectorTimer().compute(session, gates)
