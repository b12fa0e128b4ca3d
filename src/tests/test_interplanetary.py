"""
===============================================================================
MISSION DESIGN - Interplanetary Transfer Test Suite
===============================================================================
Tests for the planar circular ephemeris, heliocentric Hohmann figures,
escape and capture burns, dated Lambert transfers, the porkchop sweep and
the mission-level result with its Hohmann fallback.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import logging
import math
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest
from numpy.testing import assert_allclose

from mission_design.core.constants import (
    AU_KM, EARTH_MU, MOON_MU, PLANET_DATA, SUN_MU, TargetBody, get_body_mu,
    get_body_radius,
)
from mission_design.guidance.interplanetary import (
    InterplanetaryParams, MAX_PORKCHOP_C3, TransferType, circular_velocity,
    comms_delay, departure_delta_v, earth_position, hohmann_interplanetary,
    interplanetary_result, lambert_v_infinity, min_c3_point, planet_position,
    porkchop_grid, porkchop_to_dataframe,
)
from mission_design.performance.parallel import ParallelSim


J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
START = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _find_lambert_dates(target=TargetBody.MARS, flight_days=220.0):
    """First departure over a synodic period whose Lambert solve converges."""
    for day in range(0, 780, 26):
        departure = START + timedelta(days=day)
        arrival = departure + timedelta(days=flight_days)
        v_inf = lambert_v_infinity(target, departure, arrival)
        if v_inf is not None:
            return departure, arrival, v_inf
    return None


# =============================================================================
# Test: Body lookup
# =============================================================================

class TestBodyLookup:

    @pytest.mark.parametrize("name,mu", [
        ('earth', EARTH_MU), ('Moon', MOON_MU), ('SUN', SUN_MU),
        ('mars', PLANET_DATA[TargetBody.MARS].mu),
    ])
    def test_mu(self, name, mu):
        assert get_body_mu(name) == mu

    def test_radius(self):
        assert get_body_radius('jupiter') == PLANET_DATA[TargetBody.JUPITER].radius_km
        assert get_body_radius('earth') == pytest.approx(6371.0)

    @pytest.mark.parametrize("lookup", [get_body_mu, get_body_radius])
    def test_unknown_body(self, lookup):
        with pytest.raises(ValueError):
            lookup('pluto')


# =============================================================================
# Test: Ephemeris
# =============================================================================

class TestEphemeris:
    """Circular coplanar orbits in the ecliptic x-y plane."""

    def test_phase_zero_at_j2000(self):
        assert_allclose(planet_position(TargetBody.MARS, J2000),
                        [PLANET_DATA[TargetBody.MARS].semi_major_axis_km, 0.0, 0.0])
        assert_allclose(earth_position(J2000), [AU_KM, 0.0, 0.0])

    @pytest.mark.parametrize("target", list(TargetBody))
    def test_planar_and_on_orbit(self, target):
        pos = planet_position(target, datetime(2031, 7, 14))
        assert pos[2] == 0.0
        assert np.linalg.norm(pos) == pytest.approx(PLANET_DATA[target].semi_major_axis_km)

    def test_earth_half_year(self):
        pos = earth_position(J2000 + timedelta(days=365.25 / 2.0))
        assert_allclose(pos, [-AU_KM, 0.0, 0.0], atol=1.0)

    def test_naive_dates_are_utc(self):
        assert_allclose(earth_position(datetime(2030, 5, 5)),
                        earth_position(datetime(2030, 5, 5, tzinfo=timezone.utc)))

    def test_circular_velocity_counter_clockwise(self):
        v = circular_velocity(np.array([AU_KM, 0.0, 0.0]))
        assert_allclose(v, [0.0, math.sqrt(SUN_MU / AU_KM), 0.0])


# =============================================================================
# Test: Hohmann and patched-conic burns
# =============================================================================

class TestHohmannInterplanetary:

    def test_earth_to_mars(self):
        """C3 ~ 8.7 km^2/s^2, v_inf ~ 2.94 / 2.65 km/s, ~259 days."""
        h = hohmann_interplanetary(TargetBody.MARS)
        assert h.c3 == pytest.approx(8.66, abs=0.05)
        assert h.v_inf_depart == pytest.approx(2.943, abs=0.005)
        assert h.v_inf_arrive == pytest.approx(2.649, abs=0.005)
        assert h.transfer_time_days == pytest.approx(258.8, abs=0.5)

    def test_inner_planet(self):
        h = hohmann_interplanetary(TargetBody.VENUS)
        assert h.c3 > 0.0
        assert h.transfer_time_days < hohmann_interplanetary(TargetBody.MARS).transfer_time_days

    def test_departure_burn_from_leo(self):
        dv = departure_delta_v(300.0, 2.943)
        assert dv == pytest.approx(3590.0, abs=30.0)

    def test_departure_burn_increases_with_v_inf(self):
        assert departure_delta_v(300.0, 5.0) > departure_delta_v(300.0, 3.0)

    def test_comms_delay_one_au(self):
        assert comms_delay(AU_KM) == pytest.approx(499.0, abs=0.1)


# =============================================================================
# Test: Dated Lambert transfers
# =============================================================================

class TestLambertTransfers:

    def test_arrival_before_departure(self):
        assert lambert_v_infinity(TargetBody.MARS, START, START - timedelta(days=10)) is None

    def test_converged_cells_cost_at_least_hohmann(self):
        hohmann_c3 = hohmann_interplanetary(TargetBody.MARS).c3
        found = 0
        for day in range(0, 780, 26):
            departure = START + timedelta(days=day)
            v_inf = lambert_v_infinity(TargetBody.MARS, departure,
                                       departure + timedelta(days=220))
            if v_inf is None:
                continue
            found += 1
            assert v_inf[0] ** 2 >= 0.99 * hohmann_c3
            assert v_inf[1] > 0.0
        assert found > 0


# =============================================================================
# Test: Porkchop sweep
# =============================================================================

class TestPorkchop:

    def test_points_within_grid_and_c3_window(self):
        points = porkchop_grid(TargetBody.MARS, START, 360.0, 5, 150.0, 350.0, 5)
        assert len(points) <= 25
        for p in points:
            assert 0.0 < p.c3 < MAX_PORKCHOP_C3
            assert 0.0 <= p.departure_day <= 360.0
            assert 150.0 <= p.flight_time_days <= 350.0
            assert math.isfinite(p.v_inf_arrive)

    @pytest.mark.parametrize("n_dep,n_flight", [(0, 5), (5, 0), (-1, 3)])
    def test_empty_grid(self, n_dep, n_flight):
        assert porkchop_grid(TargetBody.MARS, START, 100.0, n_dep, 150.0, 350.0, n_flight) == []

    def test_single_sample_uses_range_start(self):
        points = porkchop_grid(TargetBody.MARS, START, 100.0, 1, 200.0, 300.0, 1)
        for p in points:
            assert p.departure_day == 0.0
            assert p.flight_time_days == 200.0

    def test_parallel_matches_sequential(self):
        args = (TargetBody.MARS, START, 200.0, 4, 180.0, 300.0, 3)
        sequential = porkchop_grid(*args)
        parallel = porkchop_grid(*args, parallel=ParallelSim(2))
        assert parallel == sequential

    def test_min_c3(self):
        assert min_c3_point([]) is None
        points = porkchop_grid(TargetBody.MARS, START, 360.0, 5, 150.0, 350.0, 5)
        best = min_c3_point(points)
        if points:
            assert best.c3 == min(p.c3 for p in points)

    def test_dataframe(self):
        points = porkchop_grid(TargetBody.MARS, START, 360.0, 3, 150.0, 350.0, 3)
        frame = porkchop_to_dataframe(points)
        assert list(frame.columns) == ['departure_day', 'flight_time_days', 'c3',
                                       'v_inf_arrive']
        assert len(frame) == len(points)


# =============================================================================
# Test: Mission-level result
# =============================================================================

class TestInterplanetaryResult:

    def test_hohmann_default(self):
        result = interplanetary_result(InterplanetaryParams())
        mars = PLANET_DATA[TargetBody.MARS]

        assert not result.used_lambert
        assert result.c3 == pytest.approx(8.66, abs=0.05)
        assert result.total_delta_v == pytest.approx(
            result.departure_delta_v + result.arrival_insertion_delta_v)
        assert result.synodic_period_days == mars.synodic_period_days
        assert result.comms_distance_au == pytest.approx(
            (mars.semi_major_axis_km - AU_KM) / AU_KM)
        assert result.comms_delay == pytest.approx(comms_delay(mars.semi_major_axis_km - AU_KM))
        assert result.planet_radius == mars.radius_km

    def test_lambert_without_dates_falls_back(self, caplog):
        params = InterplanetaryParams(transfer_type=TransferType.LAMBERT)
        with caplog.at_level(logging.WARNING):
            result = interplanetary_result(params)
        assert not result.used_lambert
        assert result.c3 == pytest.approx(hohmann_interplanetary(TargetBody.MARS).c3)
        assert "Hohmann" in caplog.text

    def test_lambert_with_dates(self):
        found = _find_lambert_dates()
        assert found is not None
        departure, arrival, v_inf = found
        result = interplanetary_result(InterplanetaryParams(
            transfer_type=TransferType.LAMBERT,
            departure_date=departure, arrival_date=arrival))

        assert result.used_lambert
        assert result.c3 == pytest.approx(v_inf[0] ** 2)
        assert result.arrival_v_inf == pytest.approx(v_inf[1])
        assert result.transfer_time_days == pytest.approx(220.0)

    def test_outer_planet_capture_is_expensive(self):
        jupiter = interplanetary_result(InterplanetaryParams(target=TargetBody.JUPITER))
        mars = interplanetary_result(InterplanetaryParams())
        assert jupiter.departure_delta_v > mars.departure_delta_v
        assert jupiter.transfer_time_days > 900.0
