"""
===============================================================================
MISSION DESIGN - Ground-Station Pass Prediction Test Suite
===============================================================================
Tests for look angles, the per-station pass state machine (AOS/LOS/TCA,
60 s minimum, open-at-end handling), quality grading, the full multi-station
scan (ISS-like scenario) and aggregate contact metrics.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from mission_design.core.data_structures import (
    GeodeticCoord, GroundStation, OrbitalElements,
)
from mission_design.core.frames import geodetic_to_ecef
from mission_design.navigation.ground_stations import (
    DEFAULT_GROUND_STATIONS, get_station, with_active,
)
from mission_design.navigation.pass_prediction import (
    MIN_PASS_DURATION, Pass, PassQuality, compute_pass_metrics, grade_pass,
    look_angles, passes_to_dataframe, predict_passes, sample_times,
    scan_station,
)
from mission_design.performance.parallel import ParallelSim


EPOCH = datetime(2025, 3, 20, 0, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def station():
    return GroundStation('test', 'Test Site', 45.0, 10.0, 0.2, 5.0, True)


@pytest.fixture
def iss_elements():
    return OrbitalElements(6778.0, 0.0001, 51.6, 0.0, 0.0, 0.0)


@pytest.fixture
def three_stations():
    return with_active(DEFAULT_GROUND_STATIONS, ['svalbard', 'fairbanks', 'darmstadt'])


def _overhead(station):
    return geodetic_to_ecef(GeodeticCoord(station.lat, station.lon, 500.0))


def _hidden(station):
    return geodetic_to_ecef(GeodeticCoord(-station.lat, station.lon + 180.0, 500.0))


def _synthetic_scan(station, visible, step=30.0):
    """Run the state machine over a hand-built in-view/hidden sequence."""
    times = np.arange(len(visible), dtype=np.float64) * step
    sat = np.array([_overhead(station) if v else _hidden(station) for v in visible])
    return scan_station((station, EPOCH, times, sat))


# =============================================================================
# Test: Look angles
# =============================================================================

class TestLookAngles:

    def test_satellite_overhead(self, station):
        el, _, rng = look_angles(_overhead(station), station)
        assert el == pytest.approx(90.0, abs=1e-4)
        assert rng == pytest.approx(499.8, abs=1e-6)

    def test_satellite_below_horizon(self, station):
        el, _, _ = look_angles(_hidden(station), station)
        assert el < 0.0

    def test_below_horizon_contributes_no_pass(self, station):
        assert _synthetic_scan(station, [False] * 20) == []


# =============================================================================
# Test: Quality grade
# =============================================================================

class TestQualityGrade:

    @pytest.mark.parametrize("elevation,grade", [
        (90.0, PassQuality.A),
        (60.0, PassQuality.A),
        (59.999, PassQuality.B),
        (30.0, PassQuality.B),
        (29.999, PassQuality.C),
        (10.0, PassQuality.C),
        (9.999, PassQuality.D),
        (5.0, PassQuality.D),
    ])
    def test_grade_boundaries(self, elevation, grade):
        assert grade_pass(elevation) is grade


# =============================================================================
# Test: Pass state machine
# =============================================================================

class TestScanStation:
    """AOS/LOS bookkeeping on a synthetic ephemeris."""

    def test_pass_opens_and_closes(self, station):
        passes = _synthetic_scan(station, [False, False, True, True, True, False, False])
        assert len(passes) == 1
        p = passes[0]
        assert p.aos == EPOCH + timedelta(seconds=60)
        assert p.los == EPOCH + timedelta(seconds=150)
        assert p.duration == pytest.approx(90.0)
        assert p.max_elevation == pytest.approx(90.0, abs=1e-4)
        assert p.quality is PassQuality.A

    def test_tca_at_first_maximum(self, station):
        passes = _synthetic_scan(station, [False, True, True, True, False])
        assert passes[0].tca == passes[0].aos

    def test_short_pass_discarded(self, station):
        """A single in-view sample gives a 30 s pass, which is dropped."""
        assert _synthetic_scan(station, [False, True, False, False]) == []

    def test_exactly_sixty_seconds_kept(self, station):
        passes = _synthetic_scan(station, [False, True, True, False])
        assert len(passes) == 1
        assert passes[0].duration == pytest.approx(MIN_PASS_DURATION)

    def test_open_pass_at_window_end_not_reported(self, station):
        assert _synthetic_scan(station, [False, False, True, True, True, True]) == []

    def test_multiple_passes_in_order(self, station):
        visible = [False, True, True, True, False, False, True, True, True, True, False]
        passes = _synthetic_scan(station, visible)
        assert len(passes) == 2
        assert passes[0].los <= passes[1].aos


# =============================================================================
# Test: Full scan
# =============================================================================

class TestPredictPasses:
    """Propagated multi-station scans."""

    def test_iss_one_day_three_stations(self, iss_elements, three_stations):
        passes = predict_passes(iss_elements, EPOCH, three_stations, 1.0)
        assert len(passes) > 0

        aos = [p.aos for p in passes]
        assert aos == sorted(aos)

        min_el = {s.id: s.min_elevation for s in three_stations}
        for p in passes:
            assert p.duration >= MIN_PASS_DURATION
            assert p.max_elevation >= min_el[p.station_id]
            assert p.aos <= p.tca <= p.los
            assert p.station_id in ('svalbard', 'fairbanks', 'darmstadt')

    def test_inactive_stations_skipped(self, iss_elements):
        inactive = with_active(DEFAULT_GROUND_STATIONS, [])
        assert predict_passes(iss_elements, EPOCH, inactive, 1.0) == []

    def test_empty_station_list(self, iss_elements):
        assert predict_passes(iss_elements, EPOCH, [], 1.0) == []

    def test_invalid_elements(self, three_stations):
        assert predict_passes(OrbitalElements(7000.0, 1.1), EPOCH, three_stations, 1.0) == []

    def test_non_positive_step(self, iss_elements, three_stations):
        assert predict_passes(iss_elements, EPOCH, three_stations, 1.0, step_sec=0.0) == []

    def test_naive_epoch_taken_as_utc(self, iss_elements, three_stations):
        aware = predict_passes(iss_elements, EPOCH, three_stations, 0.5)
        naive = predict_passes(iss_elements, EPOCH.replace(tzinfo=None), three_stations, 0.5)
        assert aware == naive

    def test_repeatable(self, iss_elements, three_stations):
        first = predict_passes(iss_elements, EPOCH, three_stations, 0.5)
        second = predict_passes(iss_elements, EPOCH, three_stations, 0.5)
        assert first == second

    def test_parallel_matches_sequential(self, iss_elements, three_stations):
        sequential = predict_passes(iss_elements, EPOCH, three_stations, 0.5)
        parallel = predict_passes(iss_elements, EPOCH, three_stations, 0.5,
                                  parallel=ParallelSim(2))
        assert parallel == sequential

    def test_sample_times_inclusive(self):
        times = sample_times(1.0 / 24.0, 30.0)
        assert len(times) == 121
        assert times[-1] == pytest.approx(3600.0)


# =============================================================================
# Test: Metrics
# =============================================================================

def _make_pass(start_s, duration_s, station_id='a'):
    aos = EPOCH + timedelta(seconds=start_s)
    return Pass(station_id, station_id.upper(), aos, aos + timedelta(seconds=duration_s),
                aos, 45.0, 0.0, 180.0, duration_s, PassQuality.B)


class TestPassMetrics:

    def test_no_passes(self):
        metrics = compute_pass_metrics([], 2.0, 1000.0)
        assert metrics.passes_per_day == 0.0
        assert metrics.max_gap_hours == pytest.approx(48.0)
        assert metrics.daily_data_mb == 0.0

    def test_global_gap_across_stations(self):
        passes = [_make_pass(0, 600, 'a'), _make_pass(3600, 300, 'b'),
                  _make_pass(4200, 600, 'a')]
        metrics = compute_pass_metrics(passes, 1.0, 1000.0)

        assert metrics.passes_per_day == pytest.approx(3.0)
        assert metrics.avg_duration_min == pytest.approx(1500.0 / 3.0 / 60.0)
        assert metrics.max_gap_hours == pytest.approx(3000.0 / 3600.0)
        assert metrics.daily_contact_min == pytest.approx(25.0)

    def test_data_volume_uses_link_efficiency(self):
        metrics = compute_pass_metrics([_make_pass(0, 1000)], 1.0, 8.0)
        expected_bytes = 8.0 * 1000.0 * 1000.0 * 0.70 / 8.0
        assert metrics.daily_data_mb == pytest.approx(expected_bytes / 1024.0 / 1024.0)

    def test_dataframe(self):
        frame = passes_to_dataframe([_make_pass(0, 600), _make_pass(900, 300)])
        assert list(frame.columns[:4]) == ['station', 'aos', 'los', 'tca']
        assert len(frame) == 2
        assert frame['duration_min'].tolist() == [10.0, 5.0]

    def test_empty_dataframe(self):
        assert passes_to_dataframe([]).empty


# =============================================================================
# Test: Ground-station network
# =============================================================================

class TestGroundStations:

    def test_default_network(self):
        assert len(DEFAULT_GROUND_STATIONS) == 15
        assert sum(s.active for s in DEFAULT_GROUND_STATIONS) == 4

    def test_get_station(self):
        assert get_station('svalbard').lat == pytest.approx(78.23)
        with pytest.raises(ValueError):
            get_station('atlantis')

    def test_with_active(self):
        stations = with_active(DEFAULT_GROUND_STATIONS, ['madrid'])
        assert [s.id for s in stations if s.active] == ['madrid']
        assert DEFAULT_GROUND_STATIONS[0].active
