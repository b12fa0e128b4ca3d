"""
===============================================================================
MISSION DESIGN - Physical and Astronomical Constants
===============================================================================
Central repository for all physical constants used throughout the mission
design calculator.  Units follow the astrodynamics convention used by the
rest of the package: kilometres, seconds, kilograms and degrees at the
public interface (radians internally).

Values come from IAU 2012 / IERS / WGS84 where applicable.  Planetary data
are mean values adequate for preliminary mission design only.
===============================================================================
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np


# =============================================================================
# MATHEMATICAL CONSTANTS
# =============================================================================
PI = np.pi
TWO_PI = 2.0 * np.pi
DEG2RAD = PI / 180.0
RAD2DEG = 180.0 / PI

# =============================================================================
# FUNDAMENTAL PHYSICAL CONSTANTS
# =============================================================================
SPEED_OF_LIGHT = 299792458.0           # m/s
SPEED_OF_LIGHT_KM = SPEED_OF_LIGHT / 1000.0  # km/s
G0 = 9.80665                           # Standard gravity (m/s^2)
AU_KM = 1.495978707e8                  # Astronomical Unit (km)

# =============================================================================
# TIME
# =============================================================================
SEC_PER_DAY = 86400.0
DAYS_PER_YEAR = 365.25
SEC_PER_YEAR = DAYS_PER_YEAR * SEC_PER_DAY
JD_J2000 = 2451545.0                   # Julian Date of J2000.0
DAYS_PER_CENTURY = 36525.0
JD_MJD_OFFSET = 2400000.5

# =============================================================================
# EARTH PARAMETERS
# =============================================================================
EARTH_MU = 3.986004418e5               # Gravitational parameter (km^3/s^2)
EARTH_RADIUS = 6371.0                  # Mean radius (km)
EARTH_EQUATORIAL_RADIUS = 6378.137     # WGS84 equatorial radius (km)
EARTH_J2 = 1.08262668e-3               # J2 oblateness coefficient

# Sun-synchronous nodal regression: one revolution per tropical year
SUN_SYNC_DRIFT_DEG_PER_DAY = 360.0 / DAYS_PER_YEAR
SUN_SYNC_TOLERANCE_DEG_PER_DAY = 0.05

# =============================================================================
# MOON PARAMETERS
# =============================================================================
MOON_MU = 4902.800066                  # km^3/s^2
MOON_RADIUS = 1737.4                   # Mean radius (km)
MOON_SMA = 384400.0                    # Earth-Moon mean distance (km)
MOON_ORBITAL_PERIOD = 2360591.5        # Sidereal period (s) ~27.32 days

# =============================================================================
# SUN PARAMETERS
# =============================================================================
SUN_MU = 1.32712440018e11              # km^3/s^2
SUN_RADIUS = 695700.0                  # km

# =============================================================================
# PLANETARY DATA
# =============================================================================

class TargetBody(Enum):
    """Interplanetary destinations supported by the transfer calculators."""
    MERCURY = 'mercury'
    VENUS = 'venus'
    MARS = 'mars'
    JUPITER = 'jupiter'
    SATURN = 'saturn'
    URANUS = 'uranus'
    NEPTUNE = 'neptune'
    CERES = 'ceres'
    VESTA = 'vesta'


@dataclass(frozen=True)
class PlanetData:
    """Mean physical and orbital data for a heliocentric target body."""
    name: str
    semi_major_axis_au: float
    semi_major_axis_km: float
    orbital_period_days: float
    mu: float                     # km^3/s^2
    radius_km: float
    mass_kg: float
    escape_velocity_kms: float
    surface_gravity_ms2: float
    atmosphere: str
    synodic_period_days: float


PLANET_DATA = {
    TargetBody.MERCURY: PlanetData(
        'Mercury', 0.387, 5.791e7, 87.97, 2.2032e4, 2439.7, 3.301e23,
        4.25, 3.70, 'none', 115.88),
    TargetBody.VENUS: PlanetData(
        'Venus', 0.723, 1.082e8, 224.70, 3.2486e5, 6051.8, 4.867e24,
        10.36, 8.87, 'thick', 583.92),
    TargetBody.MARS: PlanetData(
        'Mars', 1.524, 2.279e8, 686.97, 4.2828e4, 3389.5, 6.39e23,
        5.03, 3.71, 'thin', 779.96),
    TargetBody.JUPITER: PlanetData(
        'Jupiter', 5.203, 7.783e8, 4332.59, 1.26687e8, 71492.0, 1.898e27,
        59.5, 24.79, 'thick', 398.88),
    TargetBody.SATURN: PlanetData(
        'Saturn', 9.537, 1.432e9, 10759.22, 3.7931e7, 60268.0, 5.683e26,
        35.5, 10.44, 'thick', 378.09),
    TargetBody.URANUS: PlanetData(
        'Uranus', 19.191, 2.871e9, 30688.5, 5.7940e6, 25559.0, 8.681e25,
        21.3, 8.69, 'thick', 369.66),
    TargetBody.NEPTUNE: PlanetData(
        'Neptune', 30.069, 4.495e9, 60182.0, 6.8351e6, 24764.0, 1.024e26,
        23.5, 11.15, 'thick', 367.49),
    TargetBody.CERES: PlanetData(
        'Ceres', 2.767, 4.140e8, 1681.63, 62.6284, 473.0, 9.383e20,
        0.51, 0.28, 'none', 466.62),
    TargetBody.VESTA: PlanetData(
        'Vesta', 2.362, 3.533e8, 1325.75, 17.288, 265.0, 2.59e20,
        0.36, 0.25, 'none', 577.26),
}

# Earth as the departure body of every heliocentric transfer
EARTH_HELIO_SMA = AU_KM                # km
EARTH_ORBITAL_PERIOD_DAYS = DAYS_PER_YEAR


def get_body_mu(body_name: str) -> float:
    """
    Look up gravitational parameter by body name.

    Args:
        body_name: 'earth', 'moon', 'sun' or any ``TargetBody`` value.

    Returns:
        Gravitational parameter mu in km^3/s^2

    Raises:
        ValueError: If body_name is not recognized
    """
    lookup = {
        'earth': EARTH_MU,
        'moon': MOON_MU,
        'sun': SUN_MU,
    }
    lookup.update({body.value: data.mu for body, data in PLANET_DATA.items()})
    if body_name.lower() not in lookup:
        raise ValueError(f"Unknown body: {body_name}. Valid: {list(lookup.keys())}")
    return lookup[body_name.lower()]


def get_body_radius(body_name: str) -> float:
    """
    Look up mean radius by body name.

    Args:
        body_name: 'earth', 'moon', 'sun' or any ``TargetBody`` value.

    Returns:
        Mean radius in km
    """
    lookup = {
        'earth': EARTH_RADIUS,
        'moon': MOON_RADIUS,
        'sun': SUN_RADIUS,
    }
    lookup.update({body.value: data.radius_km for body, data in PLANET_DATA.items()})
    if body_name.lower() not in lookup:
        raise ValueError(f"Unknown body: {body_name}. Valid: {list(lookup.keys())}")
    return lookup[body_name.lower()]
