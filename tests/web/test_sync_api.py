"""Sync, playback query and lap-jump endpoints."""

from __future__ import annotations

import pytest

# ---------------------------------------------------------------------------
# POST /api/sync
# ---------------------------------------------------------------------------


def test_sync_before_upload_is_409(client):
    resp = client.post("/api/sync", json={"video_time": 5.0, "telemetry_time": 0.0})
    assert resp.status_code == 409


def test_sync_to_lap(loaded_client):
    resp = loaded_client.post("/api/sync", json={"video_time": 80.0, "lap_index": 2})
    assert resp.status_code == 200
    data = resp.json()
    assert data["synced"] is True
    assert data["offset"] == pytest.approx(80.0 - 72.345)


def test_sync_to_time_with_zero_offset(loaded_client):
    data = loaded_client.post("/api/sync", json={"video_time": 3.0, "telemetry_time": 3.0}).json()
    assert data == {"synced": True, "offset": 0.0}


def test_sync_unknown_lap_is_404(loaded_client):
    resp = loaded_client.post("/api/sync", json={"video_time": 1.0, "lap_index": 9})
    assert resp.status_code == 404


@pytest.mark.parametrize(
    "body",
    [
        {"video_time": 1.0},
        {"video_time": 1.0, "lap_index": 1, "telemetry_time": 2.0},
    ],
)
def test_sync_needs_exactly_one_anchor(loaded_client, body):
    assert loaded_client.post("/api/sync", json=body).status_code == 422


# ---------------------------------------------------------------------------
# GET /api/query
# ---------------------------------------------------------------------------


def test_query_before_upload_is_409(client):
    assert client.get("/api/query", params={"video_time": 1.0}).status_code == 409


def test_query_unsynced(loaded_client):
    data = loaded_client.get("/api/query", params={"video_time": 1.0}).json()
    assert data["synced"] is False
    assert data["index"] is None
    assert data["overlay"] is None


def test_query_on_reference_lap(loaded_client):
    loaded_client.post("/api/sync", json={"video_time": 80.0, "lap_index": 2})
    data = loaded_client.get("/api/query", params={"video_time": 90.0}).json()
    assert data["synced"] is True
    assert data["lap_index"] == 2
    assert data["telemetry_time"] == pytest.approx(82.345)
    assert abs(data["time"] - 82.345) <= 0.1
    assert data["diff"] == 0.0
    assert data["overlay"]["delta"] == "+0.000"
    assert data["overlay"]["lap"] == "Lap 2"


def test_query_on_slower_lap(loaded_client):
    loaded_client.post("/api/sync", json={"video_time": 0.0, "telemetry_time": 0.0})
    data = loaded_client.get("/api/query", params={"video_time": 134.343 + 30.0}).json()
    assert data["lap_index"] == 3
    assert data["diff"] > 0
    assert data["overlay"]["delta_status"] == "behind"
    assert data["overlay"]["reference_speed"] is not None


def test_reload_clears_sync(loaded_client, csv_text):
    loaded_client.post("/api/sync", json={"video_time": 0.0, "telemetry_time": 0.0})
    loaded_client.post("/api/session", json={"csv_text": csv_text})
    assert loaded_client.get("/api/query", params={"video_time": 1.0}).json()["synced"] is False


# ---------------------------------------------------------------------------
# GET /api/laps/{index}/video-start
# ---------------------------------------------------------------------------


def test_video_start_after_sync(loaded_client):
    loaded_client.post("/api/sync", json={"video_time": 80.0, "lap_index": 2})
    data = loaded_client.get("/api/laps/3/video-start", params={"duration": 600.0}).json()
    assert data["lap_index"] == 3
    assert data["video_time"] == pytest.approx(80.0 + 61.998)


def test_video_start_is_clamped(loaded_client):
    loaded_client.post("/api/sync", json={"video_time": 0.0, "lap_index": 3})
    data = loaded_client.get("/api/laps/0/video-start", params={"duration": 600.0}).json()
    assert data["video_time"] == 0.0


def test_video_start_unknown_lap_is_404(loaded_client):
    resp = loaded_client.get("/api/laps/42/video-start", params={"duration": 600.0})
    assert resp.status_code == 404


def test_video_start_needs_duration(loaded_client):
    assert loaded_client.get("/api/laps/1/video-start").status_code == 422
