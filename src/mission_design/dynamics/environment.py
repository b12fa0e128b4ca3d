"""
===============================================================================
MISSION DESIGN - Atmosphere and Orbital Lifetime
===============================================================================
Drag environment for small satellites in low Earth orbit:

    - PiecewiseExponentialAtmosphere : Tabulated density, 0-1000 km
    - SolarActivity                  : F10.7 levels and density multiplier
    - simulate_decay / estimate_lifetime : King-Hele semi-major-axis decay
    - check_compliance               : 25-year and 5-year disposal rules

The density table represents moderate solar activity; other activity levels
scale it by (F10.7 / 140)^0.7.  Distances km, density kg/m^3, ballistic
coefficient Cd*A/m in m^2/kg.
===============================================================================
"""

import bisect
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List

from mission_design.core.constants import (
    DAYS_PER_YEAR,
    EARTH_EQUATORIAL_RADIUS,
    EARTH_MU,
    SEC_PER_DAY,
)
from mission_design.dynamics.orbital_mechanics import deorbit_delta_v

logger = logging.getLogger(__name__)

REENTRY_ALTITUDE = 80.0             # km
FINE_STEP_ALTITUDE = 200.0          # km, switch to 0.1-day sub-steps below
FINE_STEP_DAYS = 0.1
MAX_LIFETIME_YEARS = 50.0


# ============================================================================
#  PIECEWISE EXPONENTIAL ATMOSPHERE
# ============================================================================

# (base altitude km, top altitude km, base density kg/m^3, scale height km)
ATMOSPHERE_TABLE = (
    (0.0, 25.0, 1.225, 7.249),
    (25.0, 30.0, 3.899e-2, 6.349),
    (30.0, 40.0, 1.774e-2, 6.682),
    (40.0, 50.0, 3.972e-3, 7.554),
    (50.0, 60.0, 1.057e-3, 8.382),
    (60.0, 70.0, 3.206e-4, 7.714),
    (70.0, 80.0, 8.770e-5, 6.549),
    (80.0, 90.0, 1.905e-5, 5.799),
    (90.0, 100.0, 3.396e-6, 5.382),
    (100.0, 110.0, 5.297e-7, 5.877),
    (110.0, 120.0, 9.661e-8, 7.263),
    (120.0, 130.0, 2.438e-8, 9.473),
    (130.0, 140.0, 8.484e-9, 12.636),
    (140.0, 150.0, 3.845e-9, 16.149),
    (150.0, 180.0, 2.070e-9, 22.523),
    (180.0, 200.0, 5.464e-10, 29.740),
    (200.0, 250.0, 2.789e-10, 37.105),
    (250.0, 300.0, 7.248e-11, 45.546),
    (300.0, 350.0, 2.418e-11, 53.628),
    (350.0, 400.0, 9.158e-12, 53.298),
    (400.0, 450.0, 3.725e-12, 58.515),
    (450.0, 500.0, 1.585e-12, 60.828),
    (500.0, 600.0, 6.967e-13, 63.822),
    (600.0, 700.0, 1.454e-13, 71.835),
    (700.0, 800.0, 3.614e-14, 88.667),
    (800.0, 900.0, 1.170e-14, 124.64),
    (900.0, 1000.0, 5.245e-15, 181.05),
)


class PiecewiseExponentialAtmosphere:
    """
    Tabulated exponential atmosphere (moderate solar activity).

    Within band k the density is

        rho(h) = rho_k * exp(-(h - h_k) / H_k)

    Below 0 km the sea-level value is returned; above 1000 km a constant
    exospheric floor of 3.019e-15 kg/m^3.

    Parameters
    ----------
    table : sequence of (h_min, h_max, rho0, H)
        Density bands in ascending altitude order.
    """

    SEA_LEVEL_DENSITY = 1.225
    EXOSPHERE_DENSITY = 3.019e-15

    def __init__(self, table=ATMOSPHERE_TABLE) -> None:
        self.table = tuple(table)
        self._bases = [band[0] for band in self.table]

    def get_density(self, altitude: float) -> float:
        """
        Atmospheric density at *altitude* km.

        Returns
        -------
        float
            Density in kg/m^3.
        """
        if altitude < 0.0:
            return self.SEA_LEVEL_DENSITY
        if altitude > self.table[-1][1]:
            return self.EXOSPHERE_DENSITY

        k = bisect.bisect_right(self._bases, altitude) - 1
        h_min, h_max, rho0, H = self.table[k]
        if altitude >= h_max:
            # exactly at the top of the last band
            return self.EXOSPHERE_DENSITY
        return rho0 * math.exp(-(altitude - h_min) / H)


DEFAULT_ATMOSPHERE = PiecewiseExponentialAtmosphere()


class SolarActivity(Enum):
    """Solar activity level, valued by its representative F10.7 index."""
    LOW = 70.0
    MODERATE = 140.0
    HIGH = 250.0

    @property
    def density_multiplier(self) -> float:
        """rho / rho_moderate = (F10.7 / 140)^0.7"""
        return (self.value / SolarActivity.MODERATE.value) ** 0.7

    @classmethod
    def from_name(cls, name: str) -> 'SolarActivity':
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(
                f"Unknown solar activity '{name}'. "
                f"Valid: {[a.name.lower() for a in cls]}") from None


# ============================================================================
#  BALLISTIC COEFFICIENT
# ============================================================================

CUBESAT_CROSS_SECTION = {
    '1U': 0.01,
    '1.5U': 0.01,
    '2U': 0.01,
    '3U': 0.01,
    '6U': 0.02,
    '12U': 0.04,
}


def ballistic_coefficient(mass: float, cross_section: float,
                          cd: float = 2.2) -> float:
    """B = Cd * A / m (m^2/kg); 0 for a massless spacecraft."""
    if mass <= 0.0:
        return 0.0
    return cd * cross_section / mass


def estimate_cross_section(size: str) -> float:
    """Mean drag area (m^2) of a CubeSat form factor, 0.01 if unknown."""
    return CUBESAT_CROSS_SECTION.get(size, 0.01)


# ============================================================================
#  KING-HELE DECAY
# ============================================================================

@dataclass(frozen=True)
class DecayPoint:
    days: float
    altitude: float


def decay_rate(altitude: float, ballistic_coeff: float,
               activity: SolarActivity = SolarActivity.MODERATE,
               atmosphere: PiecewiseExponentialAtmosphere = DEFAULT_ATMOSPHERE
               ) -> float:
    """
    Semi-major-axis decay rate of a circular orbit.

    King-Hele decay per revolution

        da_rev = -2*pi * r^2 * rho * B

    (rho in kg/km^3, B in km^2/kg) multiplied by revolutions per day.

    Returns
    -------
    float
        da/dt in km/day (negative), 0 at or below the surface.
    """
    if altitude <= 0.0:
        return 0.0

    r = EARTH_EQUATORIAL_RADIUS + altitude
    rho = atmosphere.get_density(altitude) * activity.density_multiplier
    rho_km = rho * 1e9
    b_km = ballistic_coeff * 1e-6

    period = 2.0 * math.pi * math.sqrt(r ** 3 / EARTH_MU)
    da_per_orbit = -2.0 * math.pi * r * r * rho_km * b_km
    return da_per_orbit * (SEC_PER_DAY / period)


def simulate_decay(initial_altitude: float, ballistic_coeff: float,
                   activity: SolarActivity = SolarActivity.MODERATE,
                   max_years: float = 30.0,
                   step_days: float = 1.0) -> List[DecayPoint]:
    """
    Integrate the altitude history until re-entry or *max_years*.

    Explicit Euler steps of *step_days*; below 200 km each step is split
    into 0.1-day sub-steps.  The history ends with a point at 80 km when
    the spacecraft re-enters.

    Returns
    -------
    list of DecayPoint
    """
    points = [DecayPoint(0.0, initial_altitude)]
    alt = initial_altitude
    max_days = max_years * DAYS_PER_YEAR

    steps = int(math.floor(max_days / step_days + 1e-9))
    for k in range(1, steps + 1):
        day = k * step_days
        if alt < FINE_STEP_ALTITUDE and step_days > FINE_STEP_DAYS:
            sub_steps = int(math.ceil(step_days / FINE_STEP_DAYS))
        else:
            sub_steps = 1
        sub_dt = step_days / sub_steps

        for _ in range(sub_steps):
            alt += decay_rate(alt, ballistic_coeff, activity) * sub_dt
            if alt <= REENTRY_ALTITUDE:
                break

        if alt <= REENTRY_ALTITUDE:
            points.append(DecayPoint(day, REENTRY_ALTITUDE))
            break
        points.append(DecayPoint(day, alt))

    return points


def estimate_lifetime(initial_altitude: float, ballistic_coeff: float,
                      activity: SolarActivity = SolarActivity.MODERATE) -> float:
    """
    Orbital lifetime in days, capped at the 50-year simulation horizon.
    """
    history = simulate_decay(initial_altitude, ballistic_coeff, activity,
                             max_years=MAX_LIFETIME_YEARS, step_days=1.0)
    lifetime = history[-1].days
    logger.debug("Lifetime from %.1f km (B=%.4f, %s): %.1f days",
                 initial_altitude, ballistic_coeff, activity.name, lifetime)
    return lifetime


@dataclass(frozen=True)
class ComplianceResult:
    lifetime_25_year: bool
    lifetime_5_year: bool
    lifetime_days: float
    lifetime_years: float
    deorbit_delta_v: float          # m/s, perigee lowered to 80 km
    recommendation: str


def check_compliance(initial_altitude: float, ballistic_coeff: float,
                     activity: SolarActivity = SolarActivity.MODERATE
                     ) -> ComplianceResult:
    """
    Evaluate natural decay against the 25-year and 5-year disposal rules.
    """
    days = estimate_lifetime(initial_altitude, ballistic_coeff, activity)
    years = days / DAYS_PER_YEAR
    dv = deorbit_delta_v(initial_altitude, target_perigee_alt=REENTRY_ALTITUDE)

    within_25 = years <= 25.0
    within_5 = years <= 5.0

    if within_5:
        recommendation = 'Compliant with the 5-year rule. No deorbit maneuver needed.'
    elif within_25:
        recommendation = (f"Natural deorbit in {years:.1f} years. Consider a deorbit "
                          f"burn ({dv:.1f} m/s) for 5-year compliance.")
    else:
        recommendation = (f"Exceeds 25-year limit. Active deorbit required: "
                          f"{dv:.1f} m/s delta-v.")

    return ComplianceResult(
        lifetime_25_year=within_25,
        lifetime_5_year=within_5,
        lifetime_days=days,
        lifetime_years=years,
        deorbit_delta_v=dv,
        recommendation=recommendation,
    )
