"""
===============================================================================
MISSION DESIGN - Walker Constellation Test Suite
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import math

import pytest

from mission_design.dynamics.constellation import (
    WalkerParams, WalkerType, compute_constellation_metrics,
    generate_walker_constellation, plane_separation,
)


class TestWalkerDelta:

    def test_count_and_planes(self):
        sats = generate_walker_constellation(WalkerParams(24, 6, 1))
        assert len(sats) == 24
        assert [s.id for s in sats] == list(range(24))
        assert sorted({s.plane for s in sats}) == list(range(6))

    def test_spacing(self):
        sats = generate_walker_constellation(WalkerParams(24, 6, 1, inclination=53.0))
        by_plane = {(s.plane, s.index_in_plane): s.elements for s in sats}

        assert by_plane[(1, 0)].raan == pytest.approx(60.0)
        assert by_plane[(0, 1)].true_anomaly == pytest.approx(90.0)
        # F * 360 / T = 15 deg between adjacent planes
        assert by_plane[(1, 0)].true_anomaly == pytest.approx(15.0)
        assert all(el.inclination == 53.0 and el.eccentricity == 0.0
                   for el in by_plane.values())

    def test_raan_offset(self):
        sats = generate_walker_constellation(WalkerParams(4, 2, 0, raan0=350.0))
        assert sats[-1].elements.raan == pytest.approx(170.0)

    @pytest.mark.parametrize("total,planes", [(3, 6), (10, 0)])
    def test_degenerate_patterns(self, total, planes):
        assert generate_walker_constellation(WalkerParams(total, planes, 0)) == []


class TestWalkerStar:

    def test_raan_spread_over_half_circle(self):
        params = WalkerParams(12, 4, 0, inclination=90.0, walker_type=WalkerType.STAR)
        raans = sorted({s.elements.raan for s in generate_walker_constellation(params)})
        assert raans == pytest.approx([0.0, 45.0, 90.0, 135.0])
        assert plane_separation(params) == pytest.approx(45.0)


class TestConstellationMetrics:

    def test_metrics(self):
        metrics = compute_constellation_metrics(WalkerParams(24, 6, 1), 10.0)
        assert metrics.total_mass == 240.0
        assert metrics.sats_per_plane == 4
        assert metrics.orbital_period_min == pytest.approx(95.6, abs=0.2)
        assert metrics.coverage_lat_band == (-53.0, 53.0)

    def test_retrograde_coverage(self):
        metrics = compute_constellation_metrics(WalkerParams(inclination=97.6), 5.0)
        low, high = metrics.coverage_lat_band
        assert high == pytest.approx(82.4)
        assert low == pytest.approx(-82.4)

    def test_plane_separation(self):
        assert plane_separation(WalkerParams(24, 6, 1)) == pytest.approx(60.0)
        assert math.isnan(plane_separation(WalkerParams(24, 0, 1)))
