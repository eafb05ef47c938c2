"""SessionReportAggregator — merges lap summaries and sector timing into one report."""

from __future__ import annotations

from collections.abc import Sequence

from lapsync.analysis.summary import summarize_laps
from lapsync.reporting.models import LapRow, SessionReport
from lapsync.telemetry.models import Session
from lapsync.track.models import BestSectors, SectorTimes


class SessionReportAggregator:
    """Build a :class:`SessionReport` from the outputs of the analysis steps."""

    def aggregate(
        self,
        session: Session,
        sector_times: Sequence[SectorTimes],
        best_sectors: BestSectors | None = None,
    ) -> SessionReport:
        """Return the lap table in lap order.

        Laps missing from *sector_times* are reported as a single sector equal
        to their lap time.
        """
        by_lap = {st.lap_index: st for st in sector_times}
        rows: list[LapRow] = []
        n_sectors = 1
        for summary in summarize_laps(session):
            st = by_lap.get(summary.lap_index)
            times = list(st.times) if st is not None else [summary.lap_time]
            n_sectors = max(n_sectors, len(times))
            flags = [
                best_sectors is not None
                and k < len(best_sectors.lap_indices)
                and best_sectors.lap_indices[k] == summary.lap_index
                for k in range(len(times))
            ]
            rows.append(LapRow(
                lap_index=summary.lap_index,
                name=summary.name,
                lap_time=summary.lap_time,
                start_time=summary.start_time,
                sample_count=summary.sample_count,
                avg_speed=summary.avg_speed,
                max_speed=summary.max_speed,
                sector_times=times,
                best_sector_flags=flags,
                is_best=summary.is_best,
            ))

        best = session.best_lap
        return SessionReport(
            laps=rows,
            sector_labels=[f"S{i}" for i in range(1, n_sectors + 1)],
            best_lap_index=best.index if best is not None else None,
            best_sector_times=list(best_sectors.times) if best_sectors is not None else [],
            theoretical_best=best_sectors.theoretical_best if best_sectors is not None else None,
            date=session.header.date,
            time=session.header.time,
            duration=session.header.duration,
        )
