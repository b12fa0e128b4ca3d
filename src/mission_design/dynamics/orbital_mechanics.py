"""
===============================================================================
MISSION DESIGN - Orbital Mechanics Engine
===============================================================================
Kepler propagation with J2 secular drift, sun-synchronous design and the
derived orbit parameters displayed for every candidate orbit.

This module provides:

    1. **Kepler's equation** -- Newton-Raphson solution with an analytic
       starting guess, plus conversions between true, eccentric and mean
       anomaly.

    2. **J2 secular drift** -- First-order nodal regression and apsidal
       rotation rates, the sun-synchronous inclination inverse, and the
       sun-synchronous classification used throughout the tool.

    3. **Propagation** -- ``KeplerPropagator`` advances an element set by a
       time step (mean anomaly linear in time, RAAN / argument of perigee
       linear in time from J2), yielding new immutable element sets or
       inertial state vectors.

    4. **Orbit geometry** -- Period, vis-viva, eclipse fraction, revs/day,
       derived parameter summary, LEO/MEO/GEO/HEO/SSO classification and
       the sub-satellite ground track.

Distances are km, speeds km/s, angles degrees at the public interface.
Invalid geometry (e >= 1, a <= 0) yields NaN / unchanged inputs rather than
exceptions, so a caller recomputing on every parameter change never fails
mid-update.

References
----------
    [1] Vallado, "Fundamentals of Astrodynamics and Applications", 4th ed.
    [2] Curtis, "Orbital Mechanics for Engineering Students", 4th ed.
    [3] Wertz, "Space Mission Engineering: The New SMAD", Ch. 9.

===============================================================================
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import List

import numpy as np

from mission_design.core.constants import (
    DEG2RAD,
    EARTH_EQUATORIAL_RADIUS,
    EARTH_J2,
    EARTH_MU,
    RAD2DEG,
    SEC_PER_DAY,
    SUN_SYNC_DRIFT_DEG_PER_DAY,
    SUN_SYNC_TOLERANCE_DEG_PER_DAY,
    TWO_PI,
)
from mission_design.core.data_structures import (
    GeodeticCoord,
    OrbitalElements,
    StateVector,
)
from mission_design.core.frames import (
    ecef_to_geodetic,
    eci_to_ecef,
    keplerian_to_cartesian,
)
from mission_design.core.time_utils import date_to_gmst

logger = logging.getLogger(__name__)

KEPLER_TOLERANCE = 1e-12
KEPLER_MAX_ITER = 30


# =============================================================================
# KEPLER'S EQUATION AND ANOMALIES
# =============================================================================

def solve_kepler_equation(M: float, e: float,
                          tolerance: float = KEPLER_TOLERANCE) -> float:
    """
    Solve Kepler's equation M = E - e sin(E) for the eccentric anomaly.

    Newton-Raphson iteration

        E_{k+1} = E_k - (E_k - e sin(E_k) - M) / (1 - e cos(E_k))

    seeded with the analytic starter

        E_0 = M + e sin(M) / (1 - sin(M + e) + sin(M))

    which converges in a handful of steps for 0 <= e <= 0.9.  Iteration
    stops when |dE| < tolerance or after 30 iterations; the last iterate is
    returned in either case.

    Parameters
    ----------
    M : float
        Mean anomaly (rad).  Callers reduce it modulo 2*pi.
    e : float
        Eccentricity (0 <= e < 1).

    Returns
    -------
    float
        Eccentric anomaly E (rad).
    """
    E = M + e * math.sin(M) / (1.0 - math.sin(M + e) + math.sin(M))

    for _ in range(KEPLER_MAX_ITER):
        dE = (E - e * math.sin(E) - M) / (1.0 - e * math.cos(E))
        E -= dE
        if abs(dE) < tolerance:
            break

    return E


def eccentric_to_true_anomaly(E: float, e: float) -> float:
    """nu = 2 atan2( sqrt(1+e) sin(E/2), sqrt(1-e) cos(E/2) )  (rad)."""
    return 2.0 * math.atan2(
        math.sqrt(1.0 + e) * math.sin(E / 2.0),
        math.sqrt(1.0 - e) * math.cos(E / 2.0),
    )


def true_to_eccentric_anomaly(nu: float, e: float) -> float:
    """E = 2 atan2( sqrt(1-e) sin(nu/2), sqrt(1+e) cos(nu/2) )  (rad)."""
    return 2.0 * math.atan2(
        math.sqrt(1.0 - e) * math.sin(nu / 2.0),
        math.sqrt(1.0 + e) * math.cos(nu / 2.0),
    )


def true_to_mean_anomaly(nu: float, e: float) -> float:
    """Mean anomaly (rad) from true anomaly (rad)."""
    E = true_to_eccentric_anomaly(nu, e)
    return E - e * math.sin(E)


def mean_to_true_anomaly(M: float, e: float) -> float:
    """True anomaly (rad) from mean anomaly (rad), via Kepler's equation."""
    E = solve_kepler_equation(M % TWO_PI, e)
    return eccentric_to_true_anomaly(E, e)


# =============================================================================
# ORBIT UTILITY FUNCTIONS
# =============================================================================

def mean_motion(a: float, mu: float = EARTH_MU) -> float:
    """n = sqrt(mu / a^3)  (rad/s)."""
    return math.sqrt(mu / (a * a * a))


def orbital_period(a: float, mu: float = EARTH_MU) -> float:
    """
    Orbital period from Kepler's third law.

        T = 2*pi * sqrt(a^3 / mu)

    Returns NaN for a <= 0 (open orbits have no finite period).
    """
    if a <= 0.0:
        return float('nan')
    return TWO_PI * math.sqrt(a ** 3 / mu)


def velocity_at_radius(a: float, r: float, mu: float = EARTH_MU) -> float:
    """
    Orbital speed from the vis-viva equation.

        v = sqrt( mu * (2/r - 1/a) )

    Parameters
    ----------
    a : float
        Semi-major axis (km).
    r : float
        Current radius (km).

    Returns
    -------
    float
        Speed (km/s).
    """
    return math.sqrt(mu * (2.0 / r - 1.0 / a))


def revs_per_day(a: float, mu: float = EARTH_MU) -> float:
    """Number of orbital revolutions per solar day."""
    return SEC_PER_DAY / orbital_period(a, mu)


def eclipse_fraction(altitude: float) -> float:
    """
    Fraction of a circular orbit spent in the Earth's cylindrical shadow
    (worst case, Sun in the orbit plane).

        rho = asin(R_eq / r),  fraction = rho / pi

    Returns 1.0 when the orbit radius does not exceed the Earth radius.
    """
    r = EARTH_EQUATORIAL_RADIUS + altitude
    sin_rho = EARTH_EQUATORIAL_RADIUS / r
    if sin_rho >= 1.0:
        return 1.0
    return math.asin(sin_rho) / math.pi


def deorbit_delta_v(altitude: float, target_perigee_alt: float = 200.0,
                    mu: float = EARTH_MU) -> float:
    """
    Retrograde burn lowering the perigee of a circular orbit.

    First burn of a Hohmann transfer from r1 = R_eq + altitude down to
    r2 = R_eq + target_perigee_alt:

        dV = | sqrt(mu/r1) - sqrt(mu (2/r1 - 2/(r1 + r2))) |

    Parameters
    ----------
    altitude : float
        Current circular altitude (km).
    target_perigee_alt : float
        Perigee altitude of the disposal ellipse (km).

    Returns
    -------
    float
        Delta-v (m/s); 0 when already at or below the target perigee.
    """
    if altitude <= target_perigee_alt:
        return 0.0
    r1 = EARTH_EQUATORIAL_RADIUS + altitude
    r2 = EARTH_EQUATORIAL_RADIUS + target_perigee_alt
    v1 = math.sqrt(mu / r1)
    v_transfer = math.sqrt(mu * (2.0 / r1 - 2.0 / (r1 + r2)))
    return abs(v1 - v_transfer) * 1000.0


# =============================================================================
# J2 SECULAR DRIFT
# =============================================================================

def _j2_factor(a: float, e: float, mu: float) -> float:
    """n * J2 * (R_eq / p)^2  (rad/s)."""
    n = mean_motion(a, mu)
    p = a * (1.0 - e * e)
    return n * EARTH_J2 * (EARTH_EQUATORIAL_RADIUS / p) ** 2


def j2_raan_drift(a: float, e: float, inclination: float,
                  mu: float = EARTH_MU) -> float:
    """
    Secular nodal regression due to J2.

        dRAAN/dt = -1.5 n J2 (R_eq/p)^2 cos(i)

    Parameters
    ----------
    a : float
        Semi-major axis (km).
    e : float
        Eccentricity.
    inclination : float
        Inclination (deg).

    Returns
    -------
    float
        RAAN rate (deg/day).  Negative (westward) for prograde orbits,
        positive for retrograde orbits.
    """
    i = inclination * DEG2RAD
    rate = -1.5 * _j2_factor(a, e, mu) * math.cos(i)
    return rate * RAD2DEG * SEC_PER_DAY


def j2_arg_perigee_drift(a: float, e: float, inclination: float,
                         mu: float = EARTH_MU) -> float:
    """
    Secular apsidal rotation due to J2.

        domega/dt = 0.75 n J2 (R_eq/p)^2 (5 cos^2(i) - 1)

    Vanishes at the critical inclinations 63.43 deg and 116.57 deg.

    Returns
    -------
    float
        Argument-of-perigee rate (deg/day).
    """
    i = inclination * DEG2RAD
    cos_i = math.cos(i)
    rate = 0.75 * _j2_factor(a, e, mu) * (5.0 * cos_i * cos_i - 1.0)
    return rate * RAD2DEG * SEC_PER_DAY


def sun_sync_inclination(a: float, e: float, mu: float = EARTH_MU) -> float:
    """
    Inclination giving a sun-synchronous nodal drift of 360/365.25 deg/day.

    Inverting the J2 nodal-regression rate:

        cos(i) = -dRAAN_target / (1.5 n J2 (R_eq/p)^2)

    Parameters
    ----------
    a : float
        Semi-major axis (km).
    e : float
        Eccentricity.

    Returns
    -------
    float
        Inclination (deg), or NaN when |cos(i)| > 1 (orbit too high for any
        inclination to reach the required drift).
    """
    target = SUN_SYNC_DRIFT_DEG_PER_DAY * DEG2RAD / SEC_PER_DAY
    cos_i = -target / (1.5 * _j2_factor(a, e, mu))

    if abs(cos_i) > 1.0:
        logger.debug("No sun-synchronous inclination for a=%.1f km e=%.4f "
                     "(cos i = %.3f)", a, e, cos_i)
        return float('nan')

    return math.acos(cos_i) * RAD2DEG


def is_sun_synchronous(raan_drift: float) -> bool:
    """True when a RAAN drift (deg/day) is within 0.05 deg/day of sun-sync."""
    return abs(raan_drift - SUN_SYNC_DRIFT_DEG_PER_DAY) < SUN_SYNC_TOLERANCE_DEG_PER_DAY


# =============================================================================
# KEPLER PROPAGATOR WITH J2 SECULAR DRIFT
# =============================================================================

class KeplerPropagator:
    """
    Analytic two-body propagator with first-order J2 secular drift.

    Given elements at epoch and an offset dt (s):

        1. nu0 -> E0 -> M0
        2. M = M0 + n dt                 (mod 2*pi)
        3. solve M = E - e sin(E)        (Newton-Raphson)
        4. E -> nu
        5. RAAN  += dRAAN/dt  * dt
           omega += domega/dt * dt

    The propagator holds only the gravitational parameter; every call is a
    pure function of its arguments.
    """

    def __init__(self, mu: float = EARTH_MU, include_j2: bool = True) -> None:
        """
        Parameters
        ----------
        mu : float
            Gravitational parameter (km^3/s^2).
        include_j2 : bool
            Apply J2 secular drift to RAAN and argument of perigee.  Only
            meaningful for Earth orbits.
        """
        self.mu = mu
        self.include_j2 = include_j2

    def propagate(self, elements: OrbitalElements, dt: float) -> OrbitalElements:
        """
        Advance *elements* by *dt* seconds.

        Returns the input unchanged when the element set is not a bound
        orbit (e >= 1 or a <= 0).
        """
        if not elements.is_valid:
            logger.debug("Skipping propagation of invalid elements %s", elements)
            return elements

        a = elements.semi_major_axis
        e = elements.eccentricity

        n = mean_motion(a, self.mu)
        M0 = true_to_mean_anomaly(elements.true_anomaly * DEG2RAD, e)
        M = (M0 + n * dt) % TWO_PI

        E = solve_kepler_equation(M, e)
        nu = eccentric_to_true_anomaly(E, e)

        raan = elements.raan
        argp = elements.arg_perigee
        if self.include_j2:
            days = dt / SEC_PER_DAY
            raan += j2_raan_drift(a, e, elements.inclination, self.mu) * days
            argp += j2_arg_perigee_drift(a, e, elements.inclination, self.mu) * days

        return elements.replace(
            raan=raan,
            arg_perigee=argp,
            true_anomaly=nu * RAD2DEG,
        )

    def state_at(self, elements: OrbitalElements, dt: float) -> StateVector:
        """Inertial state vector *dt* seconds after the element epoch."""
        return keplerian_to_cartesian(self.propagate(elements, dt), self.mu)

    def positions(self, elements: OrbitalElements, times) -> np.ndarray:
        """
        ECI positions (km) at each offset in *times* (s).

        Returns
        -------
        np.ndarray
            Array of shape (len(times), 3).
        """
        out = np.empty((len(times), 3), dtype=np.float64)
        for k, dt in enumerate(times):
            out[k] = self.state_at(elements, float(dt)).position
        return out

    def __repr__(self) -> str:
        return f"KeplerPropagator(mu={self.mu:.6e}, include_j2={self.include_j2})"


# =============================================================================
# DERIVED PARAMETERS
# =============================================================================

class OrbitType(Enum):
    """Coarse orbit regime."""
    LEO = 'LEO'
    MEO = 'MEO'
    GEO = 'GEO'
    HEO = 'HEO'
    SSO = 'SSO'


@dataclass(frozen=True)
class DerivedOrbitalParams:
    """
    Summary of an Earth orbit's geometry and perturbation rates.

    Attributes
    ----------
    period : float
        Orbital period (s).
    periapsis_alt, apoapsis_alt : float
        Apsis altitudes above the equatorial radius (km).
    velocity_perigee, velocity_apogee : float
        Apsis speeds (km/s).
    raan_drift, arg_perigee_drift : float
        J2 secular rates (deg/day).
    revs_per_day : float
        Revolutions per solar day.
    eclipse_fraction : float
        Worst-case fraction of the orbit in shadow (0-1).
    avg_eclipse_duration, max_eclipse_duration : float
        Eclipse durations (s); the maximum is taken as 1.1 x average.
    is_sun_sync : bool
        RAAN drift within tolerance of the sun-synchronous rate.
    ltan : str
        Approximate local time of ascending node, 'HH:MM'.
    orbit_type : OrbitType
        Coarse regime classification.
    """
    period: float
    periapsis_alt: float
    apoapsis_alt: float
    velocity_perigee: float
    velocity_apogee: float
    raan_drift: float
    arg_perigee_drift: float
    revs_per_day: float
    eclipse_fraction: float
    avg_eclipse_duration: float
    max_eclipse_duration: float
    is_sun_sync: bool
    ltan: str
    orbit_type: OrbitType


def classify_orbit(mean_altitude: float, eccentricity: float,
                   inclination: float, raan_drift: float) -> OrbitType:
    """
    Classify an orbit by regime.

    Checked in order: HEO (e > 0.25), SSO (sun-synchronous drift),
    GEO (34000-37000 km, i < 5 deg), MEO (2000-35786 km), otherwise LEO.
    """
    if eccentricity > 0.25:
        return OrbitType.HEO
    if is_sun_synchronous(raan_drift):
        return OrbitType.SSO
    if 34000.0 < mean_altitude < 37000.0 and inclination < 5.0:
        return OrbitType.GEO
    if 2000.0 < mean_altitude < 35786.0:
        return OrbitType.MEO
    return OrbitType.LEO


def local_time_of_ascending_node(raan: float) -> str:
    """Approximate LTAN 'HH:MM' from RAAN: (RAAN/15 + 12) mod 24 hours."""
    hours = (raan / 15.0 + 12.0) % 24.0
    hh = int(math.floor(hours))
    mm = int(math.floor((hours - hh) * 60.0))
    return f"{hh:02d}:{mm:02d}"


def compute_derived_params(elements: OrbitalElements) -> DerivedOrbitalParams:
    """
    Derive period, apsides, drift rates, eclipse and classification for an
    Earth orbit.

    Parameters
    ----------
    elements : OrbitalElements
        Earth-centred element set.

    Returns
    -------
    DerivedOrbitalParams
    """
    a = elements.semi_major_axis
    e = elements.eccentricity
    i = elements.inclination

    period = orbital_period(a)
    periapsis_alt = elements.perigee_radius - EARTH_EQUATORIAL_RADIUS
    apoapsis_alt = elements.apogee_radius - EARTH_EQUATORIAL_RADIUS
    mean_alt = 0.5 * (periapsis_alt + apoapsis_alt)

    raan_drift = j2_raan_drift(a, e, i)
    fraction = eclipse_fraction(mean_alt)
    avg_eclipse = fraction * period

    params = DerivedOrbitalParams(
        period=period,
        periapsis_alt=periapsis_alt,
        apoapsis_alt=apoapsis_alt,
        velocity_perigee=velocity_at_radius(a, elements.perigee_radius),
        velocity_apogee=velocity_at_radius(a, elements.apogee_radius),
        raan_drift=raan_drift,
        arg_perigee_drift=j2_arg_perigee_drift(a, e, i),
        revs_per_day=revs_per_day(a),
        eclipse_fraction=fraction,
        avg_eclipse_duration=avg_eclipse,
        max_eclipse_duration=1.1 * avg_eclipse,
        is_sun_sync=is_sun_synchronous(raan_drift),
        ltan=local_time_of_ascending_node(elements.raan),
        orbit_type=classify_orbit(mean_alt, e, i, raan_drift),
    )
    logger.debug("Derived params: T=%.1f s, hp=%.1f km, ha=%.1f km, "
                 "dRAAN=%.4f deg/day, type=%s", params.period,
                 params.periapsis_alt, params.apoapsis_alt, params.raan_drift,
                 params.orbit_type.value)
    return params


# =============================================================================
# GROUND TRACK
# =============================================================================

def ground_track(elements: OrbitalElements, epoch: datetime,
                 num_revolutions: int = 1,
                 points_per_rev: int = 360) -> List[GeodeticCoord]:
    """
    Sub-satellite points over *num_revolutions* orbits, including J2 drift.

    Each sample is propagated with :class:`KeplerPropagator`, rotated into
    ECEF by the GMST of its own instant and converted to spherical geodetic
    coordinates.

    Returns
    -------
    list of GeodeticCoord
        ``num_revolutions * points_per_rev + 1`` points.
    """
    if not elements.is_valid:
        return []

    propagator = KeplerPropagator()
    period = orbital_period(elements.semi_major_axis)
    total = num_revolutions * points_per_rev

    track = []
    for k in range(total + 1):
        dt = (k / points_per_rev) * period
        r_eci = propagator.state_at(elements, dt).position
        gmst = date_to_gmst(epoch + timedelta(seconds=dt))
        track.append(ecef_to_geodetic(eci_to_ecef(r_eci, gmst)))

    return track


# =============================================================================
# ORBIT PRESETS
# =============================================================================

ORBIT_PRESETS = {
    'iss': OrbitalElements(6778.0, 0.0001, 51.6),
    'landsat': OrbitalElements(7083.14, 0.001, 98.2),
    'sentinel': OrbitalElements(7071.14, 0.001, 98.18),
    'starlink': OrbitalElements(6928.0, 0.0001, 53.0),
    'gps': OrbitalElements(26560.0, 0.01, 55.0),
    'geo': OrbitalElements(42164.0, 0.0, 0.0),
    'molniya': OrbitalElements(26600.0, 0.74, 63.4, arg_perigee=270.0),
}
