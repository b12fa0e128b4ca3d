"""
===============================================================================
MISSION DESIGN - Lagrange Point Missions
===============================================================================
Transfer, insertion and station-keeping estimates for libration-point
orbits in the Sun-Earth and Earth-Moon systems.

Point data (distance from the secondary body, characteristic period and
annual station-keeping budget) is held in one table keyed by
(LagrangeSystem, LagrangePoint) covering every combination.

Transfer model (patched conic from a circular Earth parking orbit):
    SE L1/L2   near-escape, v_inf = 0.3 + 0.2 d/AU
    SE L3      v_inf = 2.0 km/s
    SE L4/L5   v_inf = 1.5 km/s
    EM L1/L2   Hohmann-like ellipse to the point distance from Earth
    EM L3      Hohmann-like ellipse to 381,700 km
    EM L4/L5   Hohmann-like ellipse to lunar distance

Collinear points (L1-L3) are unstable and need active station keeping;
the triangular points (L4, L5) are stable.
===============================================================================
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from mission_design.core.constants import (
    AU_KM,
    DAYS_PER_YEAR,
    EARTH_EQUATORIAL_RADIUS,
    EARTH_MU,
    MOON_SMA,
    SPEED_OF_LIGHT_KM,
)
from mission_design.guidance.maneuver_planner import ManeuverPlanner

logger = logging.getLogger(__name__)


class LagrangeSystem(Enum):
    SUN_EARTH = 'SE'
    EARTH_MOON = 'EM'


class LagrangePoint(Enum):
    L1 = 'L1'
    L2 = 'L2'
    L3 = 'L3'
    L4 = 'L4'
    L5 = 'L5'

    @property
    def is_collinear(self) -> bool:
        return self in (LagrangePoint.L1, LagrangePoint.L2, LagrangePoint.L3)


class LagrangeOrbitType(Enum):
    HALO = 'halo'
    LISSAJOUS = 'lissajous'
    LYAPUNOV = 'lyapunov'


class LagrangeTransferType(Enum):
    DIRECT = 'direct'
    LOW_ENERGY = 'low-energy'


class StabilityClass(Enum):
    STABLE = 'stable'
    UNSTABLE = 'unstable'


@dataclass(frozen=True)
class LagrangePointData:
    distance: float                 # km from the secondary body
    period_days: float              # characteristic (halo) period
    station_keeping: float          # m/s/yr for a halo orbit


SE, EM = LagrangeSystem.SUN_EARTH, LagrangeSystem.EARTH_MOON
L1, L2, L3, L4, L5 = LagrangePoint

EM_L1_DISTANCE = 58000.0            # km Earthward of the Moon
EM_L2_DISTANCE = 64500.0            # km beyond the Moon
EM_L3_DISTANCE = 381700.0           # km from Earth, opposite the Moon

LAGRANGE_POINTS = {
    (SE, L1): LagrangePointData(1.491e6, 177.86, 2.5),
    (SE, L2): LagrangePointData(1.501e6, 179.1, 3.0),
    (SE, L3): LagrangePointData(2.0 * AU_KM, DAYS_PER_YEAR, 10.0),
    (SE, L4): LagrangePointData(AU_KM, DAYS_PER_YEAR, 0.0),
    (SE, L5): LagrangePointData(AU_KM, DAYS_PER_YEAR, 0.0),
    (EM, L1): LagrangePointData(EM_L1_DISTANCE, 14.0, 20.0),
    (EM, L2): LagrangePointData(EM_L2_DISTANCE, 14.77, 25.0),
    (EM, L3): LagrangePointData(EM_L3_DISTANCE, 27.3, 30.0),
    (EM, L4): LagrangePointData(MOON_SMA, 27.3, 0.0),
    (EM, L5): LagrangePointData(MOON_SMA, 27.3, 0.0),
}

# period, station keeping and insertion scaling relative to a halo orbit
ORBIT_TYPE_FACTORS = {
    LagrangeOrbitType.HALO: (1.0, 1.0, 1.0),
    LagrangeOrbitType.LISSAJOUS: (1.0, 0.75, 0.85),
    LagrangeOrbitType.LYAPUNOV: (0.93, 0.55, 0.75),
}

TYPICAL_AMPLITUDE = {SE: 500000.0, EM: 15000.0}    # km
LISSAJOUS_OUT_OF_PLANE_RATIO = 1.12


def point_data(system: LagrangeSystem, point: LagrangePoint) -> LagrangePointData:
    return LAGRANGE_POINTS[(system, point)]


def lagrange_distance(system: LagrangeSystem, point: LagrangePoint) -> float:
    """Distance (km) of the point from the secondary body."""
    return point_data(system, point).distance


def orbit_period(system: LagrangeSystem, point: LagrangePoint,
                 orbit_type: LagrangeOrbitType = LagrangeOrbitType.HALO) -> float:
    """
    In-plane period (days) of a libration orbit.

    Lyapunov orbits are planar and about 7% shorter than the halo; the
    dominant Lissajous period equals the halo period.
    """
    return point_data(system, point).period_days * ORBIT_TYPE_FACTORS[orbit_type][0]


def lissajous_out_of_plane_period(system: LagrangeSystem,
                                  point: LagrangePoint) -> float:
    """Out-of-plane Lissajous period (days); 12% longer at collinear points."""
    base = point_data(system, point).period_days
    return base * LISSAJOUS_OUT_OF_PLANE_RATIO if point.is_collinear else base


def stability(point: LagrangePoint) -> StabilityClass:
    return StabilityClass.UNSTABLE if point.is_collinear else StabilityClass.STABLE


@dataclass(frozen=True)
class LagrangeTransfer:
    transfer_delta_v: float         # m/s
    insertion_delta_v: float        # m/s, halo insertion
    transfer_time_days: float


def _escape_transfer(r_park: float, v_inf: float) -> float:
    return ManeuverPlanner().escape_maneuver(r_park, EARTH_MU, v_inf) * 1000.0


def _ellipse_departure(r_park: float, target: float) -> Tuple[float, float]:
    """Perigee burn (m/s) and apogee speed (km/s) of an ellipse from r_park to target."""
    a = (r_park + target) / 2.0
    v_perigee = math.sqrt(EARTH_MU * (2.0 / r_park - 1.0 / a))
    v_apogee = math.sqrt(EARTH_MU * (2.0 / target - 1.0 / a))
    return (v_perigee - math.sqrt(EARTH_MU / r_park)) * 1000.0, v_apogee


def lagrange_transfer(system: LagrangeSystem, point: LagrangePoint,
                      departure_alt: float,
                      transfer_type: LagrangeTransferType) -> LagrangeTransfer:
    """Transfer and insertion delta-v from a circular Earth parking orbit."""
    r_park = EARTH_EQUATORIAL_RADIUS + departure_alt
    direct = transfer_type is LagrangeTransferType.DIRECT

    if system is SE:
        if point in (L1, L2):
            v_inf = 0.3 + lagrange_distance(system, point) / AU_KM * 0.2
            return LagrangeTransfer(_escape_transfer(r_park, v_inf),
                                    15.0 if direct else 5.0,
                                    30.0 if direct else 120.0)
        if point is L3:
            return LagrangeTransfer(_escape_transfer(r_park, 2.0), 200.0, 200.0)
        return LagrangeTransfer(_escape_transfer(r_park, 1.5), 50.0,
                                180.0 if direct else 365.0)

    if point in (L1, L2):
        target = MOON_SMA - EM_L1_DISTANCE if point is L1 else MOON_SMA + EM_L2_DISTANCE
        transfer_dv, v_arrival = _ellipse_departure(r_park, target)
        # approximate halo speed about the point
        v_halo = math.sqrt(EARTH_MU / target) * 0.1
        insertion = min(abs(v_arrival - v_halo) * 1000.0, 500.0)
        return LagrangeTransfer(transfer_dv, insertion, 4.5 if direct else 90.0)
    if point is L3:
        transfer_dv, _ = _ellipse_departure(r_park, EM_L3_DISTANCE)
        return LagrangeTransfer(transfer_dv, 300.0, 15.0)
    transfer_dv, _ = _ellipse_departure(r_park, MOON_SMA)
    return LagrangeTransfer(transfer_dv, 200.0, 5.0 if direct else 90.0)


def station_keeping(system: LagrangeSystem, point: LagrangePoint,
                    orbit_type: LagrangeOrbitType, amplitude: float) -> float:
    """
    Annual station-keeping delta-v (m/s/yr).

    Scaled by orbit type (Lissajous 0.75, Lyapunov 0.55 of a halo) and by
    amplitude relative to the system's typical halo amplitude:
    0.9 + 0.2 * min(A / A_typ, 3).
    """
    base = point_data(system, point).station_keeping
    amp_factor = 0.9 + 0.2 * min(amplitude / TYPICAL_AMPLITUDE[system], 3.0)
    return base * ORBIT_TYPE_FACTORS[orbit_type][1] * amp_factor


def comms_distance(system: LagrangeSystem, point: LagrangePoint) -> float:
    """Earth-to-spacecraft distance (km) at the point."""
    if system is SE:
        return lagrange_distance(system, point)
    if point is L1:
        return MOON_SMA - EM_L1_DISTANCE
    if point is L2:
        return MOON_SMA + EM_L2_DISTANCE
    if point is L3:
        return EM_L3_DISTANCE
    return MOON_SMA


@dataclass(frozen=True)
class LagrangeParams:
    system: LagrangeSystem = LagrangeSystem.SUN_EARTH
    point: LagrangePoint = LagrangePoint.L2
    orbit_type: LagrangeOrbitType = LagrangeOrbitType.HALO
    amplitude: float = 500000.0         # km
    departure_alt: float = 300.0        # km
    transfer_type: LagrangeTransferType = LagrangeTransferType.DIRECT
    lifetime_years: float = 5.0


@dataclass(frozen=True)
class LagrangeResult:
    point_distance: float               # km
    point_distance_au: float
    transfer_delta_v: float             # m/s
    transfer_time_days: float
    insertion_delta_v: float            # m/s
    total_delta_v: float                # m/s, transfer + insertion
    orbit_period_days: float
    comms_distance: float               # km
    comms_delay: float                  # s
    stability: StabilityClass
    annual_station_keeping: float       # m/s/yr
    mission_total_delta_v: float        # m/s, including station keeping


def lagrange_result(params: LagrangeParams) -> LagrangeResult:
    transfer = lagrange_transfer(params.system, params.point,
                                 params.departure_alt, params.transfer_type)
    insertion = transfer.insertion_delta_v * ORBIT_TYPE_FACTORS[params.orbit_type][2]
    total = transfer.transfer_delta_v + insertion
    annual_sk = station_keeping(params.system, params.point,
                                params.orbit_type, params.amplitude)
    distance = lagrange_distance(params.system, params.point)
    comms = comms_distance(params.system, params.point)

    logger.debug("Lagrange %s-%s %s: dv=%.1f m/s, SK=%.2f m/s/yr",
                 params.system.value, params.point.value,
                 params.orbit_type.value, total, annual_sk)
    return LagrangeResult(
        point_distance=distance,
        point_distance_au=distance / AU_KM,
        transfer_delta_v=transfer.transfer_delta_v,
        transfer_time_days=transfer.transfer_time_days,
        insertion_delta_v=insertion,
        total_delta_v=total,
        orbit_period_days=orbit_period(params.system, params.point, params.orbit_type),
        comms_distance=comms,
        comms_delay=comms / SPEED_OF_LIGHT_KM,
        stability=stability(params.point),
        annual_station_keeping=annual_sk,
        mission_total_delta_v=total + annual_sk * params.lifetime_years,
    )
