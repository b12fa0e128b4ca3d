"""
===============================================================================
MISSION DESIGN - Process Pool Test Suite
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

from mission_design.performance.parallel import ParallelSim


def _square(x):
    return x * x


class TestParallelSim:

    def test_sequential(self):
        sim = ParallelSim(1)
        assert sim.is_sequential
        assert sim.map(_square, [1, 2, 3]) == [1, 4, 9]

    def test_order_preserved(self):
        payloads = list(range(20))
        assert ParallelSim(3).map(_square, payloads) == [p * p for p in payloads]

    def test_empty_payloads(self):
        assert ParallelSim(2).map(_square, []) == []

    @pytest.mark.parametrize("workers", [0, -3])
    def test_non_positive_counts_run_sequentially(self, workers):
        sim = ParallelSim(workers)
        assert sim.num_workers == 1
        assert sim.is_sequential

    def test_default_worker_count(self):
        assert ParallelSim().num_workers >= 1

    def test_repr(self):
        assert repr(ParallelSim(4)) == "ParallelSim(num_workers=4)"
