"""Shared fixtures for web tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from lapsync.web import app as app_module


@pytest.fixture
def client():
    """FastAPI test client with no session loaded."""
    app_module.get_service().reset()
    with TestClient(app_module.app) as c:
        yield c
    app_module.get_service().reset()


@pytest.fixture
def csv_text(make_csv) -> str:
    """5 Hz synthetic export: out-lap + three timed laps, lap 2 fastest."""
    return make_csv(hz=5)


@pytest.fixture
def loaded_client(client, csv_text):
    """Test client with the synthetic session already uploaded."""
    resp = client.post("/api/session", json={"csv_text": csv_text})
    assert resp.status_code == 200
    return client
