"""
===============================================================================
MISSION DESIGN - Dynamics Package
===============================================================================
Orbit propagation and two-body boundary-value problems.

Submodules:
    orbital_mechanics -- Kepler equation, J2 secular drift, derived parameters
    environment       -- Atmosphere density table and orbital lifetime
    lambert           -- Universal-variable Lambert solver
    constellation     -- Walker delta/star constellation generation
===============================================================================
"""
