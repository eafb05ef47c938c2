"""Playback queries: which telemetry sample is on screen at video time T."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from lapsync.analysis.delta import find_nearest_by_distance
from lapsync.sync.state import SyncState
from lapsync.telemetry.models import Lap, Session, TelemetrySample
from lapsync.telemetry.search import nearest_index


@dataclass(frozen=True)
class QueryResult:
    """The telemetry matched to one video instant."""

    index: int
    """Index of the matched sample in ``session.samples``."""

    sample: TelemetrySample
    diff: float | None
    """Diff-to-best of the matched sample (``None`` = no data)."""

    telemetry_time: float
    """Telemetry time the video instant maps to (before snapping to a sample)."""

    lap: Lap | None
    reference_speed: float | None = None
    """Speed of the reference lap at the nearest point on track, if within range."""


class TelemetryQuery:
    """Answers video-time lookups against one session and its diff series.

    Holds only read-only data, so :meth:`query_at` can be polled at display
    refresh rate. Build a new instance whenever the session or diffs change.

    Args:
        session: The parsed session.
        diffs: Diff series from :class:`~lapsync.analysis.delta.DeltaCalculator`
            (one entry per sample), or ``None`` to report no diffs.
        max_reference_distance_m: Range for the reference-speed lookup.
    """

    def __init__(
        self,
        session: Session,
        diffs: Sequence[float | None] | None = None,
        max_reference_distance_m: float = 50.0,
    ) -> None:
        if diffs is not None and len(diffs) != len(session.samples):
            raise ValueError(
                f"diffs has {len(diffs)} entries for {len(session.samples)} samples"
            )
        self._session = session
        self._diffs = tuple(diffs) if diffs is not None else None
        self._times = [s.time for s in session.samples]
        self._max_reference_distance_m = max_reference_distance_m
        best = session.best_lap
        self._ref_samples = session.lap_samples(best) if best is not None else []

    def nearest_sample(self, telemetry_time: float) -> int | None:
        """Index of the sample closest in time, or ``None`` for an empty session."""
        if not self._times:
            return None
        return nearest_index(self._times, telemetry_time)

    def query_at(self, sync: SyncState, video_time: float) -> QueryResult | None:
        """Return the telemetry shown at *video_time*.

        ``None`` while *sync* is not established or the session has no samples.
        """
        if not sync.is_synced:
            return None
        telemetry_time = sync.telemetry_time_for_video(video_time)
        idx = self.nearest_sample(telemetry_time)
        if idx is None:
            return None
        sample = self._session.samples[idx]
        return QueryResult(
            index=idx,
            sample=sample,
            diff=self._diffs[idx] if self._diffs is not None else None,
            telemetry_time=telemetry_time,
            lap=self._session.lap_at(sample.time),
            reference_speed=self._reference_speed(sample),
        )

    def _reference_speed(self, sample: TelemetrySample) -> float | None:
        if not sample.has_gps or not self._ref_samples:
            return None
        ref_idx = find_nearest_by_distance(
            self._ref_samples, sample.lat, sample.lon, self._max_reference_distance_m
        )
        return self._ref_samples[ref_idx].speed if ref_idx is not None else None
