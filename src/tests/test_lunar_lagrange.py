"""
===============================================================================
MISSION DESIGN - Lunar and Lagrange-Point Mission Test Suite
===============================================================================
Tests for the patched-conic lunar transfer (TLI, LOI, phasing, mission
types) and the libration-point tables, transfers and station keeping.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import itertools

import pytest

from mission_design.core.constants import AU_KM, MOON_SMA, SPEED_OF_LIGHT_KM
from mission_design.guidance.lagrange import (
    LAGRANGE_POINTS, LagrangeOrbitType, LagrangeParams, LagrangePoint,
    LagrangeSystem, LagrangeTransferType, StabilityClass, comms_distance,
    lagrange_distance, lagrange_result, lagrange_transfer,
    lissajous_out_of_plane_period, orbit_period, stability, station_keeping,
)
from mission_design.guidance.lunar_transfer import (
    LANDING_DESCENT_DV, LunarMissionType, LunarParams, LunarTransferType,
    loi_delta_v, lunar_orbit_period, lunar_result, phase_angle, tli_delta_v,
    transfer_time,
)
from mission_design.guidance.maneuver_planner import ManeuverPlanner


SE = LagrangeSystem.SUN_EARTH
EM = LagrangeSystem.EARTH_MOON


# =============================================================================
# Test: Lunar transfer
# =============================================================================

class TestLunarBurns:

    def test_tli_from_300_km(self):
        assert tli_delta_v(300.0) == pytest.approx(3106.0, abs=10.0)

    def test_tli_decreases_with_parking_altitude(self):
        assert tli_delta_v(1000.0) < tli_delta_v(200.0)

    def test_loi_into_100_km_orbit(self):
        assert loi_delta_v(100.0) == pytest.approx(821.0, abs=10.0)

    def test_loi_independent_of_departure(self):
        a = lunar_result(LunarParams(departure_alt=200.0))
        b = lunar_result(LunarParams(departure_alt=800.0))
        assert a.loi_delta_v == b.loi_delta_v

    def test_lunar_orbit_period(self):
        assert lunar_orbit_period(100.0) == pytest.approx(117.8, abs=0.5)

    @pytest.mark.parametrize("transfer,days", [
        (LunarTransferType.HOHMANN, 4.5),
        (LunarTransferType.LOW_ENERGY, 100.0),
        (LunarTransferType.GRAVITY_ASSIST, 14.0),
    ])
    def test_transfer_time(self, transfer, days):
        assert transfer_time(transfer) == days

    @pytest.mark.parametrize("days", [0.0, 4.5, 14.0, 100.0, 1000.0])
    def test_phase_angle_range(self, days):
        assert 0.0 <= phase_angle(days) < 360.0

    def test_hohmann_phase_angle(self):
        rate = 360.0 / 27.3217
        assert phase_angle(4.5) == pytest.approx(180.0 - rate * 4.5, abs=0.01)


class TestLunarMissions:

    def test_orbit_mission(self):
        result = lunar_result(LunarParams())
        assert result.total_delta_v == pytest.approx(result.tli_delta_v + result.loi_delta_v)
        assert result.lunar_orbit_period_min > 0.0
        assert result.free_return_period_days == 0.0
        assert result.comms_delay == pytest.approx(MOON_SMA / SPEED_OF_LIGHT_KM)
        assert result.propellant_required == pytest.approx(
            ManeuverPlanner().propellant_mass(result.total_delta_v, 300.0, 100.0))

    def test_flyby_has_no_capture(self):
        result = lunar_result(LunarParams(mission_type=LunarMissionType.FLYBY))
        assert result.loi_delta_v == 0.0
        assert result.total_delta_v == result.tli_delta_v
        assert result.lunar_orbit_period_min == 0.0

    def test_landing_adds_descent(self):
        orbit = lunar_result(LunarParams())
        landing = lunar_result(LunarParams(mission_type=LunarMissionType.LANDING))
        assert landing.loi_delta_v == pytest.approx(orbit.loi_delta_v + LANDING_DESCENT_DV)
        assert landing.propellant_required > orbit.propellant_required

    def test_free_return_period(self):
        result = lunar_result(LunarParams(mission_type=LunarMissionType.FREE_RETURN,
                                          transfer_type=LunarTransferType.GRAVITY_ASSIST))
        assert result.free_return_period_days == pytest.approx(2.0 * 14.0 + 1.0)
        assert result.loi_delta_v == 0.0

    def test_invalid_mass_needs_no_propellant(self):
        result = lunar_result(LunarParams(spacecraft_mass=0.0))
        assert result.propellant_required == 0.0


# =============================================================================
# Test: Lagrange-point tables
# =============================================================================

class TestLagrangeTables:

    def test_every_combination_present(self):
        for system, point in itertools.product(LagrangeSystem, LagrangePoint):
            assert (system, point) in LAGRANGE_POINTS

    def test_sun_earth_l2_distance(self):
        assert lagrange_distance(SE, LagrangePoint.L2) == pytest.approx(1.5e6, rel=0.01)

    @pytest.mark.parametrize("point,expected", [
        (LagrangePoint.L1, StabilityClass.UNSTABLE),
        (LagrangePoint.L2, StabilityClass.UNSTABLE),
        (LagrangePoint.L3, StabilityClass.UNSTABLE),
        (LagrangePoint.L4, StabilityClass.STABLE),
        (LagrangePoint.L5, StabilityClass.STABLE),
    ])
    def test_stability(self, point, expected):
        assert stability(point) is expected

    def test_triangular_points_need_no_station_keeping(self):
        for system in LagrangeSystem:
            for point in (LagrangePoint.L4, LagrangePoint.L5):
                assert station_keeping(system, point, LagrangeOrbitType.HALO, 1.0) == 0.0

    def test_orbit_period_scaling(self):
        halo = orbit_period(SE, LagrangePoint.L1)
        assert halo == pytest.approx(177.86)
        assert orbit_period(SE, LagrangePoint.L1, LagrangeOrbitType.LISSAJOUS) == halo
        assert orbit_period(SE, LagrangePoint.L1, LagrangeOrbitType.LYAPUNOV) == \
            pytest.approx(0.93 * halo)

    def test_lissajous_out_of_plane(self):
        assert lissajous_out_of_plane_period(EM, LagrangePoint.L2) == \
            pytest.approx(1.12 * 14.77)
        assert lissajous_out_of_plane_period(EM, LagrangePoint.L4) == pytest.approx(27.3)


# =============================================================================
# Test: Lagrange-point transfers and station keeping
# =============================================================================

class TestLagrangeMissions:

    def test_station_keeping_scaling(self):
        halo = station_keeping(SE, LagrangePoint.L2, LagrangeOrbitType.HALO, 500000.0)
        assert halo == pytest.approx(3.0 * 1.1)
        lissajous = station_keeping(SE, LagrangePoint.L2, LagrangeOrbitType.LISSAJOUS, 500000.0)
        assert lissajous == pytest.approx(0.75 * halo)
        lyapunov = station_keeping(SE, LagrangePoint.L2, LagrangeOrbitType.LYAPUNOV, 500000.0)
        assert lyapunov == pytest.approx(0.55 * halo)

    def test_station_keeping_amplitude_capped(self):
        big = station_keeping(EM, LagrangePoint.L1, LagrangeOrbitType.HALO, 1e6)
        assert big == pytest.approx(20.0 * (0.9 + 0.2 * 3.0))

    def test_sun_earth_l2_direct(self):
        transfer = lagrange_transfer(SE, LagrangePoint.L2, 300.0, LagrangeTransferType.DIRECT)
        assert 3100.0 < transfer.transfer_delta_v < 3300.0
        assert transfer.insertion_delta_v == 15.0
        assert transfer.transfer_time_days == 30.0

    def test_low_energy_slower_and_cheaper_insertion(self):
        direct = lagrange_transfer(SE, LagrangePoint.L1, 300.0, LagrangeTransferType.DIRECT)
        low = lagrange_transfer(SE, LagrangePoint.L1, 300.0, LagrangeTransferType.LOW_ENERGY)
        assert low.transfer_time_days > direct.transfer_time_days
        assert low.insertion_delta_v < direct.insertion_delta_v

    def test_earth_moon_insertion_capped(self):
        for point in (LagrangePoint.L1, LagrangePoint.L2):
            transfer = lagrange_transfer(EM, point, 300.0, LagrangeTransferType.DIRECT)
            assert 0.0 < transfer.insertion_delta_v <= 500.0
            assert transfer.transfer_time_days == 4.5

    def test_comms_distance(self):
        assert comms_distance(EM, LagrangePoint.L2) == pytest.approx(MOON_SMA + 64500.0)
        assert comms_distance(SE, LagrangePoint.L3) == pytest.approx(2.0 * AU_KM)

    def test_default_result(self):
        result = lagrange_result(LagrangeParams())
        assert result.stability is StabilityClass.UNSTABLE
        assert result.total_delta_v == pytest.approx(
            result.transfer_delta_v + result.insertion_delta_v)
        assert result.mission_total_delta_v == pytest.approx(
            result.total_delta_v + 5.0 * result.annual_station_keeping)
        assert result.comms_delay == pytest.approx(result.comms_distance / SPEED_OF_LIGHT_KM)
        assert result.point_distance_au == pytest.approx(result.point_distance / AU_KM)

    def test_orbit_type_scales_insertion(self):
        halo = lagrange_result(LagrangeParams())
        lyapunov = lagrange_result(LagrangeParams(orbit_type=LagrangeOrbitType.LYAPUNOV))
        assert lyapunov.insertion_delta_v == pytest.approx(0.75 * halo.insertion_delta_v)
