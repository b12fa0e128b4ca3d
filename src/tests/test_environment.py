"""
===============================================================================
MISSION DESIGN - Atmosphere and Lifetime Test Suite
===============================================================================
Tests for the piecewise exponential atmosphere, solar activity scaling,
ballistic coefficients, King-Hele decay and the disposal-rule check.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from mission_design.dynamics.environment import (
    DEFAULT_ATMOSPHERE, REENTRY_ALTITUDE, PiecewiseExponentialAtmosphere,
    SolarActivity, ballistic_coefficient, check_compliance, decay_rate,
    estimate_cross_section, estimate_lifetime, simulate_decay,
)


# =============================================================================
# Test: Atmosphere
# =============================================================================

class TestAtmosphere:

    def test_density_decreases_with_altitude(self):
        altitudes = [0.0, 50.0, 100.0, 200.0, 300.0, 400.0, 500.0, 700.0, 900.0]
        densities = [DEFAULT_ATMOSPHERE.get_density(h) for h in altitudes]
        assert all(a > b for a, b in zip(densities, densities[1:]))

    def test_band_base_values(self):
        assert DEFAULT_ATMOSPHERE.get_density(0.0) == pytest.approx(1.225)
        assert DEFAULT_ATMOSPHERE.get_density(400.0) == pytest.approx(3.725e-12)

    def test_limits(self):
        atm = PiecewiseExponentialAtmosphere()
        assert atm.get_density(-5.0) == atm.SEA_LEVEL_DENSITY
        assert atm.get_density(1000.0) == atm.EXOSPHERE_DENSITY
        assert atm.get_density(5000.0) == atm.EXOSPHERE_DENSITY


class TestSolarActivity:

    def test_multipliers(self):
        assert SolarActivity.MODERATE.density_multiplier == 1.0
        assert SolarActivity.LOW.density_multiplier < 1.0 < SolarActivity.HIGH.density_multiplier

    @pytest.mark.parametrize("name,level", [
        ('low', SolarActivity.LOW), ('Moderate', SolarActivity.MODERATE),
        ('HIGH', SolarActivity.HIGH),
    ])
    def test_from_name(self, name, level):
        assert SolarActivity.from_name(name) is level

    def test_unknown_name(self):
        with pytest.raises(ValueError):
            SolarActivity.from_name('extreme')


class TestBallisticCoefficient:

    def test_cubesat(self):
        assert ballistic_coefficient(4.0, 0.01) == pytest.approx(0.0055)

    def test_massless(self):
        assert ballistic_coefficient(0.0, 0.01) == 0.0

    def test_cross_sections(self):
        assert estimate_cross_section('6U') == 0.02
        assert estimate_cross_section('27U') == 0.01


# =============================================================================
# Test: Decay and lifetime
# =============================================================================

class TestDecay:

    def test_rate_negative_and_faster_lower(self):
        assert decay_rate(300.0, 0.01) < decay_rate(500.0, 0.01) < 0.0

    def test_rate_zero_at_surface(self):
        assert decay_rate(0.0, 0.01) == 0.0

    def test_rate_scales_with_activity(self):
        assert decay_rate(400.0, 0.01, SolarActivity.HIGH) < decay_rate(400.0, 0.01)

    def test_history_ends_at_reentry(self):
        history = simulate_decay(250.0, 0.01)
        assert history[0].altitude == 250.0
        assert history[-1].altitude == REENTRY_ALTITUDE
        days = [p.days for p in history]
        assert days == sorted(days)
        alts = [p.altitude for p in history]
        assert all(a >= b for a, b in zip(alts, alts[1:]))

    def test_history_capped(self):
        history = simulate_decay(900.0, 0.01, max_years=1.0)
        assert history[-1].altitude > REENTRY_ALTITUDE
        assert history[-1].days <= 365.25

    def test_lifetime_ordering(self):
        assert estimate_lifetime(300.0, 0.01) < estimate_lifetime(450.0, 0.01)
        assert estimate_lifetime(400.0, 0.01, SolarActivity.HIGH) < \
            estimate_lifetime(400.0, 0.01, SolarActivity.LOW)


class TestCompliance:

    def test_low_orbit_compliant(self):
        result = check_compliance(300.0, 0.01)
        assert result.lifetime_5_year and result.lifetime_25_year
        assert result.lifetime_years == pytest.approx(result.lifetime_days / 365.25)
        assert 'No deorbit' in result.recommendation

    def test_high_orbit_needs_deorbit(self):
        result = check_compliance(800.0, 0.005)
        assert not result.lifetime_25_year
        assert result.deorbit_delta_v > 0.0
        assert 'Active deorbit' in result.recommendation

    @pytest.mark.parametrize("altitude", [350.0, 550.0, 650.0])
    def test_recommendation_matches_flags(self, altitude):
        result = check_compliance(altitude, 0.01)
        if result.lifetime_5_year:
            assert 'No deorbit' in result.recommendation
        elif result.lifetime_25_year:
            assert 'Consider' in result.recommendation
        else:
            assert 'Exceeds' in result.recommendation
