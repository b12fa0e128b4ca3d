"""
===============================================================================
MISSION DESIGN - Small-Satellite Mission Design Calculator
===============================================================================
Astrodynamics engine for preliminary small-satellite mission design: orbit
geometry, ground-station contact windows, transfer costs and delta-v
budgets.

Subpackages:
    core        -- Constants, value types, time systems, reference frames
    dynamics    -- Kepler/J2 propagation, Lambert solver, lifetime, Walker
    navigation  -- Ground-station network and pass prediction
    guidance    -- Delta-v budgets, interplanetary, lunar and Lagrange transfers
    performance -- Process-pool parallel execution
===============================================================================
"""

__version__ = "1.0.0"
