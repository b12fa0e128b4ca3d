"""
===============================================================================
MISSION DESIGN - Lunar Transfer
===============================================================================
Patched-conic estimates for Earth-Moon missions.

    TLI:  perigee burn from a circular parking orbit onto an ellipse whose
          apogee is the mean lunar distance.
    LOI:  the transfer ellipse arrives at apogee with speed v_a; the Moon
          moves at v_m = sqrt(mu_E / d_moon), so v_inf = |v_m - v_a| and
          the capture burn into a circular lunar orbit is
              dv = sqrt(v_inf^2 + 2 mu_M / r) - sqrt(mu_M / r).
          The arrival speed is always evaluated for a 400 km reference
          parking orbit, independent of the actual departure altitude.

Transfer time is set by the transfer type rather than integrated.
===============================================================================
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum

from mission_design.core.constants import (
    EARTH_EQUATORIAL_RADIUS,
    EARTH_MU,
    MOON_MU,
    MOON_ORBITAL_PERIOD,
    MOON_RADIUS,
    MOON_SMA,
    SEC_PER_DAY,
    SPEED_OF_LIGHT_KM,
)
from mission_design.core.data_structures import wrap_degrees
from mission_design.guidance.maneuver_planner import ManeuverPlanner

logger = logging.getLogger(__name__)

LOI_REFERENCE_PARKING_ALT = 400.0   # km
LANDING_DESCENT_DV = 1700.0         # m/s, deorbit + powered descent


class LunarMissionType(Enum):
    ORBIT = 'orbit'
    FLYBY = 'flyby'
    LANDING = 'landing'
    FREE_RETURN = 'free-return'


class LunarTransferType(Enum):
    HOHMANN = 'hohmann'
    LOW_ENERGY = 'low-energy'
    GRAVITY_ASSIST = 'gravity-assist'


TRANSFER_TIME_DAYS = {
    LunarTransferType.HOHMANN: 4.5,
    LunarTransferType.LOW_ENERGY: 100.0,        # weak stability boundary capture
    LunarTransferType.GRAVITY_ASSIST: 14.0,
}


def tli_delta_v(departure_alt: float) -> float:
    """Trans-lunar injection (m/s) from a circular parking orbit."""
    r_park = EARTH_EQUATORIAL_RADIUS + departure_alt
    a_transfer = (r_park + MOON_SMA) / 2.0
    v_circ = math.sqrt(EARTH_MU / r_park)
    v_transfer = math.sqrt(EARTH_MU * (2.0 / r_park - 1.0 / a_transfer))
    return (v_transfer - v_circ) * 1000.0


def arrival_v_infinity() -> float:
    """Hyperbolic excess (km/s) relative to the Moon at the end of the transfer."""
    r_park = EARTH_EQUATORIAL_RADIUS + LOI_REFERENCE_PARKING_ALT
    a_transfer = (r_park + MOON_SMA) / 2.0
    v_arrival = math.sqrt(EARTH_MU * (2.0 / MOON_SMA - 1.0 / a_transfer))
    v_moon = math.sqrt(EARTH_MU / MOON_SMA)
    return abs(v_moon - v_arrival)


def loi_delta_v(target_alt: float) -> float:
    """Lunar orbit insertion (m/s) into a circular orbit *target_alt* km high."""
    r_target = MOON_RADIUS + target_alt
    return ManeuverPlanner().orbit_insertion(arrival_v_infinity(), r_target, MOON_MU) * 1000.0


def transfer_time(transfer_type: LunarTransferType) -> float:
    """Earth-Moon flight time (days)."""
    return TRANSFER_TIME_DAYS[transfer_type]


def phase_angle(transfer_time_days: float) -> float:
    """
    Moon lead angle at departure (deg, [0, 360)): the Moon must be where the
    transfer apogee will be when the spacecraft arrives.

        phase = 180 - omega_moon * t_transfer
    """
    moon_rate = 360.0 / (MOON_ORBITAL_PERIOD / SEC_PER_DAY)     # deg/day
    return wrap_degrees(180.0 - moon_rate * transfer_time_days)


def lunar_orbit_period(target_alt: float) -> float:
    """Period (min) of a circular lunar orbit."""
    r = MOON_RADIUS + target_alt
    return 2.0 * math.pi * math.sqrt(r ** 3 / MOON_MU) / 60.0


@dataclass(frozen=True)
class LunarParams:
    mission_type: LunarMissionType = LunarMissionType.ORBIT
    transfer_type: LunarTransferType = LunarTransferType.HOHMANN
    target_orbit_alt: float = 100.0     # km above the lunar surface
    departure_alt: float = 300.0        # km, Earth parking orbit
    spacecraft_mass: float = 100.0      # kg, dry
    specific_impulse: float = 300.0     # s


@dataclass(frozen=True)
class LunarResult:
    tli_delta_v: float                  # m/s
    transfer_time_days: float
    loi_delta_v: float                  # m/s (0 for flyby / free return)
    total_delta_v: float                # m/s
    lunar_orbit_period_min: float       # 0 unless the mission stays in orbit
    propellant_required: float          # kg
    phase_angle: float                  # deg
    comms_delay: float                  # s
    free_return_period_days: float


def lunar_result(params: LunarParams) -> LunarResult:
    """
    Delta-v, timing and propellant of a lunar mission.

    Mission type selects the capture figures:
        orbit        LOI into the target orbit
        flyby        no capture burn
        landing      LOI plus 1700 m/s for deorbit and powered descent
        free-return  no capture burn; round trip of 2 x transfer + 1 day
    """
    tli = tli_delta_v(params.departure_alt)
    t_transfer = transfer_time(params.transfer_type)

    loi = 0.0
    orbit_period = 0.0
    free_return = 0.0
    if params.mission_type is LunarMissionType.ORBIT:
        loi = loi_delta_v(params.target_orbit_alt)
        orbit_period = lunar_orbit_period(params.target_orbit_alt)
    elif params.mission_type is LunarMissionType.LANDING:
        loi = loi_delta_v(params.target_orbit_alt) + LANDING_DESCENT_DV
    elif params.mission_type is LunarMissionType.FREE_RETURN:
        free_return = 2.0 * t_transfer + 1.0

    total = tli + loi
    propellant = ManeuverPlanner().propellant_mass(
        total, params.specific_impulse, params.spacecraft_mass)

    logger.debug("Lunar %s: TLI=%.1f m/s, LOI=%.1f m/s, propellant=%.2f kg",
                 params.mission_type.value, tli, loi, propellant)
    return LunarResult(
        tli_delta_v=tli,
        transfer_time_days=t_transfer,
        loi_delta_v=loi,
        total_delta_v=total,
        lunar_orbit_period_min=orbit_period,
        propellant_required=propellant,
        phase_angle=phase_angle(t_transfer),
        comms_delay=MOON_SMA / SPEED_OF_LIGHT_KM,
        free_return_period_days=free_return,
    )
