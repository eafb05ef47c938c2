"""Pydantic request/response schemas for the Web API."""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str


class LoadSessionRequest(BaseModel):
    csv_text: str


class SessionResponse(BaseModel):
    sample_count: int
    lap_count: int
    best_lap_index: int | None
    gate_count: int
    sector_count: int
    has_gps: bool
    warnings: list[str]
    date: str | None = None
    time: str | None = None
    duration: float | None = None


class LapRecord(BaseModel):
    lap_index: int
    name: str
    lap_time: float
    start_time: float
    sample_count: int
    avg_speed: float
    max_speed: float
    sector_times: list[float]
    best_sector_flags: list[bool]
    is_best: bool


class LapsResponse(BaseModel):
    laps: list[LapRecord]
    sector_labels: list[str]
    best_lap_index: int | None
    best_sector_times: list[float]
    theoretical_best: float | None


class GateRecord(BaseModel):
    time: float
    center_lat: float
    center_lon: float
    start_lat: float
    start_lon: float
    end_lat: float
    end_lon: float


class GatesResponse(BaseModel):
    gates: list[GateRecord]


class SyncRequest(BaseModel):
    video_time: float
    lap_index: int | None = None
    telemetry_time: float | None = None


class SyncResponse(BaseModel):
    synced: bool
    offset: float | None


class QueryResponse(BaseModel):
    synced: bool
    index: int | None = None
    time: float | None = None
    telemetry_time: float | None = None
    lap_index: int | None = None
    speed: float | None = None
    lat: float | None = None
    lon: float | None = None
    diff: float | None = None
    overlay: dict | None = None


class VideoStartResponse(BaseModel):
    lap_index: int
    video_time: float
