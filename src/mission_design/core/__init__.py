"""
===============================================================================
MISSION DESIGN - Core Package
===============================================================================
Foundations shared by every other subpackage.

Modules:
    constants        -- Physical constants and planetary data table
    data_structures  -- Immutable OrbitalElements, StateVector, GroundStation
    time_utils       -- Julian Date, MJD and GMST
    frames           -- Keplerian/Cartesian, ECI/ECEF/geodetic, SEZ, Sun
===============================================================================
"""
