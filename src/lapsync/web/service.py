"""AnalysisService — runs the analysis pipeline and holds the loaded session."""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass

from lapsync.analysis.delta import DeltaCalculator
from lapsync.config import Settings
from lapsync.errors import DataQualityWarning
from lapsync.reporting.aggregator import SessionReportAggregator
from lapsync.reporting.models import SessionReport
from lapsync.sync.query import QueryResult, TelemetryQuery
from lapsync.sync.state import SyncState
from lapsync.telemetry.models import Lap, Session
from lapsync.telemetry.parser import parse
from lapsync.track.models import BestSectors, SectorGate, SectorTimes
from lapsync.track.sectors import SectorDetector
from lapsync.track.timing import SectorTimer

_logger = logging.getLogger(__name__)


class NoSessionError(LookupError):
    """Raised when an operation needs a loaded session and none is loaded."""


class LapNotFoundError(LookupError):
    """Raised for a lap index the session does not have."""


@dataclass(frozen=True)
class SessionAnalysis:
    """Everything derived from one telemetry upload.

    Replaced as a whole on every load so gates, sector times and diffs always
    belong to the same session.
    """

    session: Session
    gates: tuple[SectorGate, ...]
    sector_times: tuple[SectorTimes, ...]
    best_sectors: BestSectors | None
    diffs: tuple[float | None, ...]
    warnings: tuple[str, ...] = ()


def analyze_text(text: str, settings: Settings | None = None) -> SessionAnalysis:
    """Run the pipeline on CSV *text*.

    Parse → sector gates → sector times → best sectors → diff-to-best.
    Data-quality warnings are collected into the result instead of being
    printed.

    Raises
    ------
    FormatError
        If *text* has no usable column header.
    """
    settings = settings or Settings()
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", DataQualityWarning)

        # ------------------------------------------------------------------
        # Step 1: Parse
        # ------------------------------------------------------------------
        session = parse(text)

        # ------------------------------------------------------------------
        # Step 2: Gates + sector times from the reference lap
        # ------------------------------------------------------------------
        gates = SectorDetector().detect(session)
        timer = SectorTimer()
        sector_times = timer.compute(session, gates)
        best_sectors = timer.best_sectors(session, sector_times)

        # ------------------------------------------------------------------
        # Step 3: Diff-to-best
        # ------------------------------------------------------------------
        diffs = DeltaCalculator(
            search_window=settings.search_window_s,
            max_match_distance_m=settings.max_match_distance_m,
        ).compute(session)

    messages = tuple(
        str(w.message) for w in caught if issubclass(w.category, DataQualityWarning)
    )
    return SessionAnalysis(
        session=session,
        gates=tuple(gates),
        sector_times=tuple(sector_times),
        best_sectors=best_sectors,
        diffs=tuple(diffs),
        warnings=messages,
    )


class AnalysisService:
    """In-memory holder for one analysed session and its video sync.

    Parameters
    ----------
    settings:
        Runtime settings; defaults to :class:`~lapsync.config.Settings` defaults.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._analysis: SessionAnalysis | None = None
        self._query: TelemetryQuery | None = None
        self._sync = SyncState()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def analysis(self) -> SessionAnalysis:
        """The loaded analysis.

        Raises
        ------
        NoSessionError
            If no session has been loaded.
        """
        if self._analysis is None:
            raise NoSessionError("No telemetry session loaded")
        return self._analysis

    @property
    def sync(self) -> SyncState:
        return self._sync

    def load(self, text: str) -> SessionAnalysis:
        """Analyse CSV *text* and replace the loaded session. Clears the sync."""
        analysis = analyze_text(text, self._settings)
        self._analysis = analysis
        self._query = TelemetryQuery(
            analysis.session,
            analysis.diffs,
            max_reference_distance_m=self._settings.max_match_distance_m,
        )
        self._sync = SyncState()
        _logger.info(
            "Loaded session: %d samples, %d laps, %d gates, %d warnings",
            len(analysis.session.samples), len(analysis.session.laps),
            len(analysis.gates), len(analysis.warnings),
        )
        return analysis

    def reset(self) -> None:
        """Forget the loaded session and sync."""
        self._analysis = None
        self._query = None
        self._sync = SyncState()

    def report(self) -> SessionReport:
        a = self.analysis
        return SessionReportAggregator().aggregate(a.session, a.sector_times, a.best_sectors)

    def lap(self, lap_index: int) -> Lap:
        for lap in self.analysis.session.laps:
            if lap.index == lap_index:
                return lap
        raise LapNotFoundError(f"Lap not found: {lap_index}")

    def sync_to_lap(self, video_time: float, lap_index: int) -> SyncState:
        """Declare that *video_time* shows the start of lap *lap_index*."""
        self._sync = SyncState.for_lap(video_time, self.lap(lap_index))
        _logger.info("Synced video %.3fs to lap %d (offset %.3fs)",
                     video_time, lap_index, self._sync.offset)
        return self._sync

    def sync_to_time(self, video_time: float, telemetry_time: float) -> SyncState:
        """Declare that *video_time* shows telemetry time *telemetry_time*."""
        self._require_query()
        self._sync = SyncState.establish(video_time, telemetry_time)
        return self._sync

    def query(self, video_time: float) -> QueryResult | None:
        """Telemetry at *video_time*; ``None`` until synced."""
        return self._require_query().query_at(self._sync, video_time)

    def lap_video_start(self, lap_index: int, video_duration: float) -> float:
        """Video time to seek to for the start of lap *lap_index*."""
        return self._sync.jump_to_lap_start(self.lap(lap_index), video_duration)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _require_query(self) -> TelemetryQuery:
        if self._query is None:
            raise NoSessionError("No telemetry session loaded")
        return self._query
