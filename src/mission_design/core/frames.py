"""
===============================================================================
MISSION DESIGN - Reference Frame Transformations
===============================================================================
Supports: ECI (mean equator, GMST-rotated), ECEF, spherical geodetic,
          Perifocal (PQW) and topocentric South-East-Zenith (SEZ) frames.

A small-satellite mission analysis moves between these frames continuously:

    Orbit geometry      -> Perifocal / ECI  (Keplerian elements, propagation)
    Ground track        -> ECEF / geodetic  (sub-satellite point)
    Station contacts    -> SEZ              (elevation / azimuth look angles)
    Eclipse / lighting  -> ECI              (Sun direction)

The Earth is modelled as a **sphere** of equatorial radius for all geodetic
conversions: latitude = asin(z / r), altitude = r - R_eq.  Ground-station
visibility results are calibrated against this approximation, so it is kept
deliberately rather than replaced by an oblate WGS84 inversion.

All functions operate on NumPy arrays and return NumPy arrays.  Angles are
in radians unless noted otherwise; distances in km.

References
----------
    [1] Vallado, "Fundamentals of Astrodynamics and Applications", 4th ed.
    [2] Montenbruck & Gill, "Satellite Orbits", Springer, 2000.
    [3] The Astronomical Almanac, low-precision solar coordinates.

===============================================================================
"""

from datetime import datetime
from typing import Tuple

import numpy as np

from mission_design.core.constants import (
    DEG2RAD,
    EARTH_EQUATORIAL_RADIUS,
    EARTH_MU,
    RAD2DEG,
    TWO_PI,
)
from mission_design.core.data_structures import (
    GeodeticCoord,
    OrbitalElements,
    StateVector,
)
from mission_design.core.time_utils import date_to_julian_centuries


# =============================================================================
# ELEMENTARY ROTATION MATRICES
# =============================================================================

def Rx(angle: float) -> np.ndarray:
    """
    Elementary frame rotation about the X-axis.

        Rx(a) = | 1    0       0     |
                | 0   cos(a)  sin(a)  |
                | 0  -sin(a)  cos(a)  |

    Parameters
    ----------
    angle : float
        Rotation angle in radians.

    Returns
    -------
    np.ndarray
        3x3 rotation matrix.
    """
    c = np.cos(angle)
    s = np.sin(angle)
    return np.array([
        [1.0,  0.0,  0.0],
        [0.0,    c,    s],
        [0.0,   -s,    c],
    ], dtype=np.float64)


def Ry(angle: float) -> np.ndarray:
    """
    Elementary frame rotation about the Y-axis.

        Ry(a) = | cos(a)  0  -sin(a) |
                |   0     1     0     |
                | sin(a)  0   cos(a)  |
    """
    c = np.cos(angle)
    s = np.sin(angle)
    return np.array([
        [  c,  0.0,   -s],
        [0.0,  1.0,  0.0],
        [  s,  0.0,    c],
    ], dtype=np.float64)


def Rz(angle: float) -> np.ndarray:
    """
    Elementary frame rotation about the Z-axis.

        Rz(a) = |  cos(a)  sin(a)  0 |
                | -sin(a)  cos(a)  0 |
                |    0       0     1 |
    """
    c = np.cos(angle)
    s = np.sin(angle)
    return np.array([
        [  c,    s,  0.0],
        [ -s,    c,  0.0],
        [0.0,  0.0,  1.0],
    ], dtype=np.float64)


# =============================================================================
# KEPLERIAN <-> CARTESIAN
# =============================================================================

def perifocal_to_eci_matrix(raan: float, inc: float, argp: float) -> np.ndarray:
    """
    Rotation matrix from the perifocal (PQW) frame to ECI.

    Classical 3-1-3 Euler sequence (Vallado Algorithm 11):

        R_eci_pqw = Rz(-RAAN) * Rx(-i) * Rz(-omega)

    Parameters
    ----------
    raan, inc, argp : float
        RAAN, inclination and argument of perigee (rad).
    """
    return Rz(-raan) @ Rx(-inc) @ Rz(-argp)


def keplerian_to_cartesian(elements: OrbitalElements,
                           mu: float = EARTH_MU) -> StateVector:
    """
    Convert classical orbital elements to an inertial state vector.

    Perifocal frame quantities:

        p = a * (1 - e^2)                        (semi-latus rectum)
        r = p / (1 + e*cos(nu))                  (orbital radius)
        r_pqw = r * [cos(nu), sin(nu), 0]
        v_pqw = sqrt(mu/p) * [-sin(nu), e+cos(nu), 0]

    rotated into the reference frame with :func:`perifocal_to_eci_matrix`.

    Only bound orbits (0 <= e < 1) are supported; the result for e >= 1 is
    undefined.

    Parameters
    ----------
    elements : OrbitalElements
        Element set (km, deg).
    mu : float
        Gravitational parameter of the central body (km^3/s^2).

    Returns
    -------
    StateVector
        Position (km) and velocity (km/s) in the inertial frame.
    """
    a = elements.semi_major_axis
    e = elements.eccentricity
    nu = elements.true_anomaly * DEG2RAD

    p = a * (1.0 - e * e)
    r_mag = p / (1.0 + e * np.cos(nu))

    cos_nu = np.cos(nu)
    sin_nu = np.sin(nu)

    r_pqw = r_mag * np.array([cos_nu, sin_nu, 0.0], dtype=np.float64)
    v_pqw = np.sqrt(mu / p) * np.array([-sin_nu, e + cos_nu, 0.0],
                                        dtype=np.float64)

    R = perifocal_to_eci_matrix(
        elements.raan * DEG2RAD,
        elements.inclination * DEG2RAD,
        elements.arg_perigee * DEG2RAD,
    )
    return StateVector(position=R @ r_pqw, velocity=R @ v_pqw)


def cartesian_to_keplerian(state: StateVector,
                           mu: float = EARTH_MU) -> OrbitalElements:
    """
    Convert an inertial state vector to classical orbital elements.

        h = r x v                       (angular momentum)
        n = z_hat x h                   (ascending node vector)
        e_vec = (v x h)/mu - r/|r|      (eccentricity vector)
        a = -mu / (2*E),  E = v^2/2 - mu/r

    Edge cases:
        - Circular orbit (e ~ 0): argument of perigee set to 0, true
          anomaly measured from the ascending node.
        - Equatorial orbit (i ~ 0): RAAN set to 0, perigee measured from X.
        - Circular equatorial: true anomaly measured from X.

    Returns
    -------
    OrbitalElements
        Element set in km and degrees.
    """
    r = state.position
    v = state.velocity

    r_mag = np.linalg.norm(r)
    v_mag = np.linalg.norm(v)

    h = np.cross(r, v)
    h_mag = np.linalg.norm(h)

    n = np.cross(np.array([0.0, 0.0, 1.0]), h)
    n_mag = np.linalg.norm(n)

    e_vec = (np.cross(v, h) / mu) - (r / r_mag)
    e = np.linalg.norm(e_vec)

    energy = 0.5 * v_mag * v_mag - mu / r_mag
    a = -mu / (2.0 * energy) if abs(energy) > 1e-20 else np.inf

    inc = np.arccos(np.clip(h[2] / h_mag, -1.0, 1.0))

    raan = np.arctan2(n[1], n[0]) % TWO_PI if n_mag > 1e-12 else 0.0

    if e > 1e-12 and n_mag > 1e-12:
        argp = np.arccos(np.clip(np.dot(n, e_vec) / (n_mag * e), -1.0, 1.0))
        if e_vec[2] < 0.0:
            argp = TWO_PI - argp
    elif e > 1e-12:
        argp = np.arctan2(e_vec[1], e_vec[0]) % TWO_PI
    else:
        argp = 0.0

    if e > 1e-12:
        nu = np.arccos(np.clip(np.dot(e_vec, r) / (e * r_mag), -1.0, 1.0))
        if np.dot(r, v) < 0.0:
            nu = TWO_PI - nu
    elif n_mag > 1e-12:
        nu = np.arccos(np.clip(np.dot(n, r) / (n_mag * r_mag), -1.0, 1.0))
        if r[2] < 0.0:
            nu = TWO_PI - nu
    else:
        nu = np.arctan2(r[1], r[0]) % TWO_PI

    return OrbitalElements(
        semi_major_axis=float(a),
        eccentricity=float(e),
        inclination=float(inc * RAD2DEG),
        raan=float(raan * RAD2DEG),
        arg_perigee=float(argp * RAD2DEG),
        true_anomaly=float(nu * RAD2DEG),
    )


# =============================================================================
# ECI <-> ECEF
# =============================================================================

def eci_to_ecef(r_eci: np.ndarray, gmst: float) -> np.ndarray:
    """
    Rotate an ECI vector into ECEF by the Greenwich sidereal angle.

        x' =  cos(G) x + sin(G) y
        y' = -sin(G) x + cos(G) y
        z' =  z

    Parameters
    ----------
    r_eci : np.ndarray
        3-element ECI vector (km).
    gmst : float
        Greenwich Mean Sidereal Time (rad).

    Returns
    -------
    np.ndarray
        3-element ECEF vector (km).
    """
    return Rz(gmst) @ np.asarray(r_eci, dtype=np.float64)


def ecef_to_eci(r_ecef: np.ndarray, gmst: float) -> np.ndarray:
    """Inverse of :func:`eci_to_ecef`: r_eci = Rz(-G) * r_ecef."""
    return Rz(-gmst) @ np.asarray(r_ecef, dtype=np.float64)


# =============================================================================
# ECEF <-> GEODETIC (spherical Earth)
# =============================================================================

def geodetic_to_ecef(coord: GeodeticCoord) -> np.ndarray:
    """
    Convert spherical geodetic coordinates to ECEF.

        r = R_eq + alt
        x = r cos(lat) cos(lon)
        y = r cos(lat) sin(lon)
        z = r sin(lat)

    Parameters
    ----------
    coord : GeodeticCoord
        Latitude/longitude in degrees, altitude in km.

    Returns
    -------
    np.ndarray
        3-element ECEF position (km).
    """
    lat = coord.lat * DEG2RAD
    lon = coord.lon * DEG2RAD
    r = EARTH_EQUATORIAL_RADIUS + coord.alt

    return np.array([
        r * np.cos(lat) * np.cos(lon),
        r * np.cos(lat) * np.sin(lon),
        r * np.sin(lat),
    ], dtype=np.float64)


def ecef_to_geodetic(r_ecef: np.ndarray) -> GeodeticCoord:
    """
    Convert an ECEF position to spherical geodetic coordinates.

        lon = atan2(y, x)
        lat = asin(z / r)
        alt = r - R_eq

    Returns
    -------
    GeodeticCoord
        Latitude/longitude in degrees (lon in (-180, 180]), altitude in km.
    """
    x, y, z = np.asarray(r_ecef, dtype=np.float64)
    r = np.sqrt(x * x + y * y + z * z)

    return GeodeticCoord(
        lat=float(np.arcsin(z / r) * RAD2DEG),
        lon=float(np.arctan2(y, x) * RAD2DEG),
        alt=float(r - EARTH_EQUATORIAL_RADIUS),
    )


# =============================================================================
# TOPOCENTRIC (South-East-Zenith)
# =============================================================================

def ecef_to_sez(r_sat_ecef: np.ndarray, r_site_ecef: np.ndarray,
                lat: float, lon: float) -> np.ndarray:
    """
    Express the site-to-satellite range vector in the SEZ frame.

    With d = r_sat - r_site and (phi, lambda) the site latitude/longitude:

        S =  sin(phi) cos(lambda) dx + sin(phi) sin(lambda) dy - cos(phi) dz
        E = -sin(lambda) dx + cos(lambda) dy
        Z =  cos(phi) cos(lambda) dx + cos(phi) sin(lambda) dy + sin(phi) dz

    Parameters
    ----------
    r_sat_ecef : np.ndarray
        Satellite ECEF position (km).  May also be an (N, 3) array.
    r_site_ecef : np.ndarray
        Site ECEF position (km).
    lat, lon : float
        Site latitude and longitude (rad).

    Returns
    -------
    np.ndarray
        [south, east, zenith] components (km), shape matching the input.
    """
    d = np.asarray(r_sat_ecef, dtype=np.float64) - r_site_ecef

    sin_lat, cos_lat = np.sin(lat), np.cos(lat)
    sin_lon, cos_lon = np.sin(lon), np.cos(lon)

    R_sez = np.array([
        [sin_lat * cos_lon, sin_lat * sin_lon, -cos_lat],
        [-sin_lon,          cos_lon,            0.0],
        [cos_lat * cos_lon, cos_lat * sin_lon,  sin_lat],
    ], dtype=np.float64)

    return d @ R_sez.T


# =============================================================================
# SUN DIRECTION
# =============================================================================

def sun_direction_eci(date: datetime) -> np.ndarray:
    """
    Approximate unit vector from Earth to Sun in ECI.

    Low-precision almanac model (accurate to about one degree):

        L0  = 280.46646 + 36000.76983 T + 0.0003032 T^2      (mean longitude)
        M   = 357.52911 + 35999.05029 T - 0.0001537 T^2      (mean anomaly)
        C   = equation of centre
        lam = L0 + C                                         (true longitude)
        eps = 23.439291 - 0.0130042 T                        (obliquity)

        s = [cos(lam), cos(eps) sin(lam), sin(eps) sin(lam)]

    Parameters
    ----------
    date : datetime
        UTC epoch.

    Returns
    -------
    np.ndarray
        Unit Sun direction in ECI.
    """
    T = date_to_julian_centuries(date)

    L0 = (280.46646 + 36000.76983 * T + 0.0003032 * T * T) % 360.0
    M = (357.52911 + 35999.05029 * T - 0.0001537 * T * T) % 360.0
    M_rad = M * DEG2RAD

    C = ((1.914602 - 0.004817 * T - 0.000014 * T * T) * np.sin(M_rad)
         + (0.019993 - 0.000101 * T) * np.sin(2.0 * M_rad)
         + 0.000289 * np.sin(3.0 * M_rad))

    sun_lon = (L0 + C) * DEG2RAD
    obliquity = (23.439291 - 0.0130042 * T) * DEG2RAD

    return np.array([
        np.cos(sun_lon),
        np.cos(obliquity) * np.sin(sun_lon),
        np.sin(obliquity) * np.sin(sun_lon),
    ], dtype=np.float64)


def look_angles_from_sez(sez: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Elevation, azimuth (deg) and range (km) from SEZ components.

        elevation = asin(Z / rho)
        azimuth   = atan2(E, -S), normalised to [0, 360)

    Accepts a single (3,) vector or an (N, 3) array.
    """
    sez = np.asarray(sez, dtype=np.float64)
    south = sez[..., 0]
    east = sez[..., 1]
    zenith = sez[..., 2]

    rng = np.sqrt(south * south + east * east + zenith * zenith)
    elevation = np.arcsin(np.clip(zenith / rng, -1.0, 1.0)) * RAD2DEG
    azimuth = (np.arctan2(east, -south) * RAD2DEG + 360.0) % 360.0

    return elevation, azimuth, rng
