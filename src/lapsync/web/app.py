"""FastAPI Web application — the query surface for the browser shell.

The browser owns the video element, file picker and drawing; it uploads the
CSV text, establishes the sync, and then polls ``/api/query`` during playback.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException

from lapsync import __version__
from lapsync.config import Settings
from lapsync.errors import FormatError
from lapsync.overlay.renderer import OverlayData, OverlayRenderer
from lapsync.web.schemas import (
    GateRecord,
    GatesResponse,
    HealthResponse,
    LapRecord,
    LapsResponse,
    LoadSessionRequest,
    QueryResponse,
    SessionResponse,
    SyncRequest,
    SyncResponse,
    VideoStartResponse,
)
from lapsync.web.service import AnalysisService, LapNotFoundError, NoSessionError

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

settings = Settings.from_env()
logging.basicConfig(level=settings.log_level)

app = FastAPI(title="Lap Video Sync", version=__version__)

_service = AnalysisService(settings)
_renderer = OverlayRenderer()


def get_service() -> AnalysisService:
    return _service


def _not_loaded(exc: NoSessionError) -> HTTPException:
    return HTTPException(status_code=409, detail=str(exc))


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


@app.post("/api/session", response_model=SessionResponse)
def load_session(req: LoadSessionRequest) -> SessionResponse:
    """Parse the uploaded CSV and run the full analysis pipeline."""
    try:
        analysis = get_service().load(req.csv_text)
    except FormatError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    session = analysis.session
    best = session.best_lap
    return SessionResponse(
        sample_count=len(session.samples),
        lap_count=len(session.laps),
        best_lap_index=best.index if best is not None else None,
        gate_count=len(analysis.gates),
        sector_count=len(analysis.gates) + 1,
        has_gps=session.has_gps,
        warnings=list(analysis.warnings),
        date=session.header.date,
        time=session.header.time,
        duration=session.header.duration,
    )


@app.get("/api/laps", response_model=LapsResponse)
def list_laps() -> LapsResponse:
    """Return the lap table with sector times and best-sector flags."""
    try:
        report = get_service().report()
    except NoSessionError as exc:
        raise _not_loaded(exc) from exc

    laps = [
        LapRecord(
            lap_index=r.lap_index,
            name=r.name,
            lap_time=r.lap_time,
            start_time=r.start_time,
            sample_count=r.sample_count,
            avg_speed=r.avg_speed,
            max_speed=r.max_speed,
            sector_times=r.sector_times,
            best_sector_flags=r.best_sector_flags,
            is_best=r.is_best,
        )
        for r in report.laps
    ]
    return LapsResponse(
        laps=laps,
        sector_labels=report.sector_labels,
        best_lap_index=report.best_lap_index,
        best_sector_times=report.best_sector_times,
        theoretical_best=report.theoretical_best,
    )


@app.get("/api/gates", response_model=GatesResponse)
def list_gates() -> GatesResponse:
    """Return gate geometry for drawing on the track map."""
    try:
        gates = get_service().analysis.gates
    except NoSessionError as exc:
        raise _not_loaded(exc) from exc

    return GatesResponse(gates=[
        GateRecord(
            time=g.time,
            center_lat=g.center_lat,
            center_lon=g.center_lon,
            start_lat=g.start_lat,
            start_lon=g.start_lon,
            end_lat=g.end_lat,
            end_lon=g.end_lon,
        )
        for g in gates
    ])


@app.post("/api/sync", response_model=SyncResponse)
def establish_sync(req: SyncRequest) -> SyncResponse:
    """Tie a video time to either a lap start or an explicit telemetry time."""
    if (req.lap_index is None) == (req.telemetry_time is None):
        raise HTTPException(
            status_code=422, detail="Provide exactly one of lap_index or telemetry_time"
        )
    svc = get_service()
    try:
        if req.lap_index is not None:
            state = svc.sync_to_lap(req.video_time, req.lap_index)
        else:
            state = svc.sync_to_time(req.video_time, req.telemetry_time)
    except NoSessionError as exc:
        raise _not_loaded(exc) from exc
    except LapNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return SyncResponse(synced=state.is_synced, offset=state.offset)


@app.get("/api/query", response_model=QueryResponse)
def query(video_time: float) -> QueryResponse:
    """Telemetry and diff-to-best at *video_time*; ``synced=false`` until synced."""
    try:
        result = get_service().query(video_time)
    except NoSessionError as exc:
        raise _not_loaded(exc) from exc

    if result is None:
        return QueryResponse(synced=False)

    return QueryResponse(
        synced=True,
        index=result.index,
        time=result.sample.time,
        telemetry_time=result.telemetry_time,
        lap_index=result.lap.index if result.lap is not None else None,
        speed=result.sample.speed,
        lat=result.sample.lat,
        lon=result.sample.lon,
        diff=result.diff,
        overlay=_renderer.render(OverlayData.from_query(result)),
    )


@app.get("/api/laps/{lap_index}/video-start", response_model=VideoStartResponse)
def lap_video_start(lap_index: int, duration: float) -> VideoStartResponse:
    """Video time to seek to for the start of a lap, clamped to the video length."""
    try:
        video_time = get_service().lap_video_start(lap_index, duration)
    except NoSessionError as exc:
        raise _not_loaded(exc) from exc
    except LapNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return VideoStartResponse(lap_index=lap_index, video_time=video_time)
