"""
===============================================================================
MISSION DESIGN - Interplanetary Transfers
===============================================================================
Patched-conic analysis of Earth-to-planet transfers.

Heliocentric model
------------------
Earth and the target move on circular, coplanar orbits in the ecliptic x-y
plane, phased from zero at J2000.  True inclinations and eccentricities are
not modelled, so Lambert arcs are planar as well.

    theta(t) = (360 / T_orbit * days_since_J2000) mod 360
    r(t)     = a * [cos(theta), sin(theta), 0]
    v(t)     = sqrt(mu_sun / a) * [-sin(theta), cos(theta), 0]

Escape and capture
------------------
The hyperbolic excess v_inf of the heliocentric arc is converted into a
burn from (or into) a circular orbit around the departure or arrival body:

    dv = sqrt(v_inf^2 + 2 mu / r) - sqrt(mu / r)

Porkchop sweep
--------------
A (departure date x flight time) grid of Lambert solves.  Departure rows
are independent and may be distributed over a ``ParallelSim`` pool.  Cells
whose Lambert solve fails are skipped, and only cells with
0 < C3 < 200 km^2/s^2 are reported.
===============================================================================
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from mission_design.core.constants import (
    AU_KM,
    EARTH_EQUATORIAL_RADIUS,
    EARTH_HELIO_SMA,
    EARTH_MU,
    EARTH_ORBITAL_PERIOD_DAYS,
    PLANET_DATA,
    SEC_PER_DAY,
    SPEED_OF_LIGHT_KM,
    SUN_MU,
    TargetBody,
)
from mission_design.core.time_utils import ensure_utc
from mission_design.dynamics.lambert import solve_lambert
from mission_design.guidance.maneuver_planner import ManeuverPlanner
from mission_design.performance.parallel import ParallelSim

logger = logging.getLogger(__name__)

J2000_EPOCH = datetime(2000, 1, 1, 12, 0, 0)
MAX_PORKCHOP_C3 = 200.0                 # km^2/s^2


class TransferType(Enum):
    HOHMANN = 'hohmann'
    LAMBERT = 'lambert'


# =============================================================================
# PLANAR EPHEMERIS
# =============================================================================

def _days_since_j2000(date: datetime) -> float:
    return (ensure_utc(date) - ensure_utc(J2000_EPOCH)).total_seconds() / SEC_PER_DAY


def _circular_position(sma: float, period_days: float, date: datetime) -> np.ndarray:
    angle = math.radians((360.0 / period_days * _days_since_j2000(date)) % 360.0)
    return np.array([sma * math.cos(angle), sma * math.sin(angle), 0.0])


def planet_position(target: TargetBody, date: datetime) -> np.ndarray:
    """Heliocentric position (km) of *target* on its circular orbit."""
    planet = PLANET_DATA[target]
    return _circular_position(planet.semi_major_axis_km, planet.orbital_period_days, date)


def earth_position(date: datetime) -> np.ndarray:
    """Heliocentric position (km) of the Earth on its circular orbit."""
    return _circular_position(EARTH_HELIO_SMA, EARTH_ORBITAL_PERIOD_DAYS, date)


def circular_velocity(position: np.ndarray, mu: float = SUN_MU) -> np.ndarray:
    """Circular orbit velocity (km/s) at *position*, counter-clockwise about +z."""
    r = float(np.hypot(position[0], position[1]))
    speed = math.sqrt(mu / r)
    return np.array([-speed * position[1] / r, speed * position[0] / r, 0.0])


# =============================================================================
# HOHMANN AND PATCHED-CONIC BURNS
# =============================================================================

@dataclass(frozen=True)
class HohmannInterplanetary:
    c3: float                   # km^2/s^2
    v_inf_depart: float         # km/s
    v_inf_arrive: float         # km/s
    transfer_time_days: float


def hohmann_interplanetary(target: TargetBody) -> HohmannInterplanetary:
    """
    Heliocentric Hohmann transfer from 1 AU to the target's mean distance.

        v_inf_dep = |v_t(r1) - sqrt(mu/r1)|,  C3 = v_inf_dep^2
        v_inf_arr = |sqrt(mu/r2) - v_t(r2)|
    """
    r1 = EARTH_HELIO_SMA
    r2 = PLANET_DATA[target].semi_major_axis_km
    planner = ManeuverPlanner()

    v_inf_depart, v_inf_arrive = planner.hohmann_transfer(r1, r2, SUN_MU)
    transfer_time = planner.hohmann_transfer_time(r1, r2, SUN_MU) / SEC_PER_DAY

    return HohmannInterplanetary(
        c3=v_inf_depart ** 2,
        v_inf_depart=v_inf_depart,
        v_inf_arrive=v_inf_arrive,
        transfer_time_days=transfer_time,
    )


def departure_delta_v(departure_alt: float, v_inf: float) -> float:
    """Escape burn (m/s) from a circular Earth parking orbit at *departure_alt* km."""
    r_park = EARTH_EQUATORIAL_RADIUS + departure_alt
    return ManeuverPlanner().escape_maneuver(r_park, EARTH_MU, v_inf) * 1000.0


def arrival_insertion_delta_v(target: TargetBody, arrival_alt: float,
                              v_inf: float) -> float:
    """Capture burn (m/s) into a circular orbit at *arrival_alt* km above the target."""
    planet = PLANET_DATA[target]
    r_orbit = planet.radius_km + arrival_alt
    return ManeuverPlanner().orbit_insertion(v_inf, r_orbit, planet.mu) * 1000.0


def comms_delay(distance_km: float) -> float:
    """One-way light time (s)."""
    return distance_km / SPEED_OF_LIGHT_KM


def lambert_v_infinity(target: TargetBody, departure: datetime,
                       arrival: datetime) -> Optional[Tuple[float, float]]:
    """
    Departure and arrival v_inf (km/s) of the dated Lambert arc, or None if
    the solve fails or the dates are not ordered.
    """
    r1 = earth_position(departure)
    r2 = planet_position(target, arrival)
    tof = (ensure_utc(arrival) - ensure_utc(departure)).total_seconds()

    solution = solve_lambert(r1, r2, tof, SUN_MU)
    if not solution:
        logger.debug("Lambert %s -> %s failed: %s", departure, arrival,
                     solution.status.value)
        return None

    v_inf_depart = float(np.linalg.norm(solution.v1 - circular_velocity(r1)))
    v_inf_arrive = float(np.linalg.norm(solution.v2 - circular_velocity(r2)))
    return v_inf_depart, v_inf_arrive


# =============================================================================
# PORKCHOP GRID
# =============================================================================

@dataclass(frozen=True)
class PorkchopPoint:
    departure_day: float        # days after the sweep start
    flight_time_days: float
    c3: float                   # km^2/s^2
    v_inf_arrive: float         # km/s


def _grid_fraction(index: int, count: int) -> float:
    return index / (count - 1) if count > 1 else 0.0


def porkchop_row(payload: Tuple[TargetBody, datetime, float, Sequence[float]]
                 ) -> List[PorkchopPoint]:
    """
    Evaluate one departure date against every flight time.

    Module-level so that it can be shipped to a worker process.

    Parameters
    ----------
    payload : tuple
        (target, sweep start, departure day offset, flight times [days]).
    """
    target, start_date, departure_day, flight_times = payload
    departure = start_date + timedelta(days=departure_day)

    points = []
    for flight_days in flight_times:
        arrival = departure + timedelta(days=flight_days)
        v_inf = lambert_v_infinity(target, departure, arrival)
        if v_inf is None:
            continue
        c3 = v_inf[0] ** 2
        if 0.0 < c3 < MAX_PORKCHOP_C3:
            points.append(PorkchopPoint(departure_day, flight_days, c3, v_inf[1]))
    return points


def porkchop_grid(target: TargetBody, start_date: datetime,
                  departure_day_range: float, n_departure: int,
                  min_flight_days: float, max_flight_days: float,
                  n_flight: int,
                  parallel: Optional[ParallelSim] = None) -> List[PorkchopPoint]:
    """
    C3 and arrival v_inf over a departure-date x flight-time grid.

    Parameters
    ----------
    target : TargetBody
    start_date : datetime
        First departure date.
    departure_day_range : float
        Departure window length (days), sampled at n_departure points.
    n_departure : int
    min_flight_days, max_flight_days : float
        Flight time range (days), sampled at n_flight points.
    n_flight : int
    parallel : ParallelSim, optional
        Distribute the departure rows over worker processes.

    Returns
    -------
    list of PorkchopPoint
        Row-major (departure, then flight time).  Empty for empty grids.
    """
    if n_departure <= 0 or n_flight <= 0:
        return []

    start_date = ensure_utc(start_date)
    flight_times = [
        min_flight_days + _grid_fraction(j, n_flight) * (max_flight_days - min_flight_days)
        for j in range(n_flight)
    ]
    payloads = [
        (target, start_date, _grid_fraction(i, n_departure) * departure_day_range, flight_times)
        for i in range(n_departure)
    ]

    if parallel is None:
        rows = [porkchop_row(p) for p in payloads]
    else:
        rows = parallel.map(porkchop_row, payloads)

    points = [point for row in rows for point in row]
    logger.info("Porkchop %s: %d of %d cells kept", target.value, len(points),
                n_departure * n_flight)
    return points


def min_c3_point(points: Sequence[PorkchopPoint]) -> Optional[PorkchopPoint]:
    """Cell with the lowest departure energy, or None for an empty grid."""
    if not points:
        return None
    return min(points, key=lambda p: p.c3)


def porkchop_to_dataframe(points: Sequence[PorkchopPoint]) -> pd.DataFrame:
    columns = ['departure_day', 'flight_time_days', 'c3', 'v_inf_arrive']
    return pd.DataFrame(
        [(p.departure_day, p.flight_time_days, p.c3, p.v_inf_arrive) for p in points],
        columns=columns,
    )


# =============================================================================
# FULL ANALYSIS
# =============================================================================

@dataclass(frozen=True)
class InterplanetaryParams:
    target: TargetBody = TargetBody.MARS
    transfer_type: TransferType = TransferType.HOHMANN
    departure_alt: float = 300.0            # km, Earth parking orbit
    arrival_alt: float = 400.0              # km, capture orbit
    departure_date: Optional[datetime] = None
    arrival_date: Optional[datetime] = None


@dataclass(frozen=True)
class InterplanetaryResult:
    """
    Attributes
    ----------
    c3 : float
        Departure energy (km^2/s^2).
    departure_delta_v, arrival_insertion_delta_v, total_delta_v : float
        m/s.
    transfer_time_days : float
    arrival_v_inf : float
        km/s.
    used_lambert : bool
        False when the Hohmann figures were used (requested, or fallback).
    synodic_period_days, comms_delay, comms_distance_au : float
        Comms figures at closest approach, |a_target - a_earth|.
    planet_radius, planet_surface_gravity, planet_escape_velocity : float
    """
    c3: float
    departure_delta_v: float
    transfer_time_days: float
    arrival_v_inf: float
    arrival_insertion_delta_v: float
    total_delta_v: float
    used_lambert: bool
    synodic_period_days: float
    comms_delay: float
    comms_distance_au: float
    planet_radius: float
    planet_surface_gravity: float
    planet_escape_velocity: float


def interplanetary_result(params: InterplanetaryParams) -> InterplanetaryResult:
    """
    Mission-level figures for a transfer to ``params.target``.

    Lambert transfers use the given departure and arrival dates.  If the
    dates are missing or the solve fails, the Hohmann v_inf values are used
    while the transfer time stays the dated one.
    """
    planet = PLANET_DATA[params.target]
    hohmann = hohmann_interplanetary(params.target)

    v_inf = None
    transfer_time = hohmann.transfer_time_days
    if params.transfer_type is TransferType.LAMBERT:
        if params.departure_date is not None and params.arrival_date is not None:
            transfer_time = (ensure_utc(params.arrival_date)
                             - ensure_utc(params.departure_date)).total_seconds() / SEC_PER_DAY
            v_inf = lambert_v_infinity(params.target, params.departure_date,
                                       params.arrival_date)
        if v_inf is None:
            logger.warning("Lambert transfer to %s unavailable, using Hohmann figures",
                           planet.name)

    if v_inf is None:
        v_inf_depart, v_inf_arrive = hohmann.v_inf_depart, hohmann.v_inf_arrive
    else:
        v_inf_depart, v_inf_arrive = v_inf

    dep_dv = departure_delta_v(params.departure_alt, v_inf_depart)
    arr_dv = arrival_insertion_delta_v(params.target, params.arrival_alt, v_inf_arrive)

    comms_distance = abs(planet.semi_major_axis_km - EARTH_HELIO_SMA)

    logger.debug("Interplanetary %s: C3=%.2f km^2/s^2, dv=%.0f m/s, %.0f days",
                 planet.name, v_inf_depart ** 2, dep_dv + arr_dv, transfer_time)
    return InterplanetaryResult(
        c3=v_inf_depart ** 2,
        departure_delta_v=dep_dv,
        transfer_time_days=transfer_time,
        arrival_v_inf=v_inf_arrive,
        arrival_insertion_delta_v=arr_dv,
        total_delta_v=dep_dv + arr_dv,
        used_lambert=v_inf is not None,
        synodic_period_days=planet.synodic_period_days,
        comms_delay=comms_delay(comms_distance),
        comms_distance_au=comms_distance / AU_KM,
        planet_radius=planet.radius_km,
        planet_surface_gravity=planet.surface_gravity_ms2,
        planet_escape_velocity=planet.escape_velocity_kms,
    )
