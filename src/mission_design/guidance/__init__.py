"""
===============================================================================
MISSION DESIGN - Guidance Package
===============================================================================
Maneuver costing and transfer design.

Modules:
    maneuver_planner : Rocket equation, Hohmann/plane-change/escape and the
                       mission delta-v budget
    interplanetary   : Planar heliocentric transfers and porkchop sweeps
    lunar_transfer   : Patched-conic TLI / LOI transfers to the Moon
    lagrange         : Sun-Earth and Earth-Moon libration-point missions
===============================================================================
"""
