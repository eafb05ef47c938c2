"""Tests for per-lap sector times and best sectors."""

from __future__ import annotations

import pytest

from lapsync.telemetry.laps import build_laps
from lapsync.telemetry.models import Session, TelemetrySample
from lapsync.track.models import SectorGate, SectorTimes
from lapsync.track.sectors import compute_sectors
from lapsync.track.timing import SectorTimer, compute_sector_times


@pytest.fixture
def timer() -> SectorTimer:
    return SectorTimer()


@pytest.fixture
def gates(session):
    return compute_sectors(session)


def test_every_lap_gets_three_sectors(session, gates):
    sector_times = compute_sector_times(session, gates)
    assert [st.lap_index for st in sector_times] == [0, 1, 2, 3]
    for st in sector_times:
        assert st.labels == ("S1", "S2", "S3")


def test_sector_times_sum_to_lap_time(session, gates):
    for lap, st in zip(session.laps, compute_sector_times(session, gates)):
        assert st.total == pytest.approx(lap.lap_time, abs=1e-9)
        assert all(t >= 0 for t in st.times)


def test_reference_lap_sectors_end_at_its_gates(session, gates):
    ref = session.best_lap
    st = compute_sector_times(session, gates)[ref.index]
    assert st.times[0] == pytest.approx(gates[0].time - ref.start_time, abs=0.05)
    assert st.times[0] + st.times[1] == pytest.approx(gates[1].time - ref.start_time, abs=0.05)


def test_slower_lap_has_proportionally_longer_sectors(session, gates):
    sector_times = compute_sector_times(session, gates)
    ref, slow = sector_times[2], sector_times[3]
    scale = 63.102 / 61.998
    for r, s in zip(ref.times, slow.times):
        assert s == pytest.approx(r * scale, abs=0.05)


def test_lap_that_never_crosses_still_sums(session, gates):
    # The out-lap only covers the last fifth of the circle.
    out = compute_sector_times(session, gates)[0]
    assert out.total == pytest.approx(10.0, abs=1e-9)
    assert all(t >= 0 for t in out.times)


def test_no_gates_gives_single_sector(session, timer):
    sector_times = timer.compute(session, [])
    assert [st.times for st in sector_times] == [(lap.lap_time,) for lap in session.laps]
    assert sector_times[0].labels == ("S1",)


def test_lap_without_samples_gives_single_sector(timer):
    session = Session(
        samples=(TelemetrySample(time=0.0, speed=50.0, lat=45.0, lon=7.0),),
        lap_times=(10.0, 60.0),
        laps=build_laps([10.0, 60.0]),
    )
    gate = SectorGate(time=1.0, center_lat=45.0, center_lon=7.0, start_lat=45.0,
                      start_lon=7.0, end_lat=45.0, end_lon=7.0)
    st = timer.compute_lap(session, session.laps[1], [gate])
    assert st.times == (60.0,)


def test_far_away_gates_clamp_into_the_lap(session, gates, timer):
    shifted = [
        SectorGate(time=g.time, center_lat=g.center_lat + 0.01, center_lon=g.center_lon,
                   start_lat=g.start_lat + 0.01, start_lon=g.start_lon,
                   end_lat=g.end_lat + 0.01, end_lon=g.end_lon)
        for g in gates
    ]
    for lap in session.laps:
        st = timer.compute_lap(session, lap, shifted)
        assert len(st.times) == 3
        assert all(t >= 0 for t in st.times)
        assert st.total == pytest.approx(lap.lap_time, abs=1e-9)


# ---------------------------------------------------------------------------
# Best sectors
# ---------------------------------------------------------------------------


def test_best_sectors_on_synthetic_session(session, gates, timer):
    sector_times = timer.compute(session, gates)
    best = timer.best_sectors(session, sector_times)
    assert best.lap_indices == (2, 2, 2)
    assert best.theoretical_best == pytest.approx(61.998, abs=1e-9)


def _times_session(lap_times):
    return Session(samples=(), lap_times=tuple(lap_times), laps=build_laps(lap_times))


def test_best_sectors_pick_fastest_per_sector(timer):
    session = _times_session([5.0, 30.0, 30.0, 30.0])
    sector_times = [
        SectorTimes(0, (1.0, 1.0, 3.0)),
        SectorTimes(1, (10.0, 12.0, 8.0)),
        SectorTimes(2, (11.0, 9.0, 10.0)),
        SectorTimes(3, (10.0, 11.0, 9.0)),
    ]
    best = timer.best_sectors(session, sector_times)
    assert best.times == (10.0, 9.0, 8.0)
    assert best.lap_indices == (1, 2, 1)
    assert best.theoretical_best == pytest.approx(27.0)


def test_best_sectors_ignore_laps_with_fewer_sectors(timer):
    session = _times_session([5.0, 30.0, 30.0])
    sector_times = [
        SectorTimes(0, (5.0,)),
        SectorTimes(1, (30.0,)),
        SectorTimes(2, (14.0, 16.0)),
    ]
    best = timer.best_sectors(session, sector_times)
    assert best.times == (14.0, 16.0)
    assert best.lap_indices == (2, 2)


def test_best_sectors_single_lap_session(timer):
    session = _times_session([60.0])
    best = timer.best_sectors(session, [SectorTimes(0, (20.0, 40.0))])
    assert best.lap_indices == (0, 0)


def test_best_sectors_none_without_laps(timer):
    assert timer.best_sectors(_times_session([]), []) is None
