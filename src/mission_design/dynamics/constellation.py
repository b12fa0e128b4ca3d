"""
===============================================================================
MISSION DESIGN - Walker Constellations
===============================================================================
Element generation for Walker delta (i:T/P/F) and Walker star (polar,
RAAN spread over 180 deg) constellations, plus summary metrics.

    RAAN spacing      = 360/P (delta)  or  180/P (star)
    In-plane spacing  = 360/S,  S = floor(T/P)
    Inter-plane phase = F * 360 / T
===============================================================================
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from mission_design.core.constants import EARTH_EQUATORIAL_RADIUS
from mission_design.core.data_structures import OrbitalElements
from mission_design.dynamics.orbital_mechanics import orbital_period

logger = logging.getLogger(__name__)


class WalkerType(Enum):
    DELTA = 'delta'
    STAR = 'star'


@dataclass(frozen=True)
class WalkerParams:
    """
    Walker pattern definition.

    Attributes
    ----------
    total_sats : int
        T, total number of satellites.
    planes : int
        P, number of orbital planes.
    phasing : int
        F, relative phasing parameter (0 .. P-1).
    altitude : float
        Circular altitude (km).
    inclination : float
        Inclination (deg).
    raan0 : float
        RAAN of the first plane (deg).
    walker_type : WalkerType
    """
    total_sats: int = 24
    planes: int = 6
    phasing: int = 1
    altitude: float = 550.0
    inclination: float = 53.0
    raan0: float = 0.0
    walker_type: WalkerType = WalkerType.DELTA

    @property
    def sats_per_plane(self) -> int:
        if self.planes <= 0:
            return 0
        return self.total_sats // self.planes


@dataclass(frozen=True)
class ConstellationSatellite:
    id: int
    plane: int
    index_in_plane: int
    elements: OrbitalElements


def generate_walker_constellation(params: WalkerParams) -> List[ConstellationSatellite]:
    """
    Orbital elements of every satellite in a Walker pattern.

    Returns an empty list for a pattern with no planes or fewer satellites
    than planes.
    """
    per_plane = params.sats_per_plane
    if per_plane <= 0:
        return []

    a = EARTH_EQUATORIAL_RADIUS + params.altitude
    if params.walker_type is WalkerType.DELTA:
        raan_spacing = 360.0 / params.planes
    else:
        raan_spacing = 180.0 / params.planes
    in_plane_spacing = 360.0 / per_plane
    phase_offset = params.phasing * 360.0 / params.total_sats

    satellites = []
    sat_id = 0
    for p in range(params.planes):
        plane_raan = params.raan0 + p * raan_spacing
        for s in range(per_plane):
            satellites.append(ConstellationSatellite(
                id=sat_id,
                plane=p,
                index_in_plane=s,
                elements=OrbitalElements(
                    semi_major_axis=a,
                    eccentricity=0.0,
                    inclination=params.inclination,
                    raan=plane_raan,
                    arg_perigee=0.0,
                    true_anomaly=s * in_plane_spacing + p * phase_offset,
                ),
            ))
            sat_id += 1

    logger.debug("Walker %s %d/%d/%d: %d satellites generated",
                 params.walker_type.value, params.total_sats, params.planes,
                 params.phasing, len(satellites))
    return satellites


@dataclass(frozen=True)
class ConstellationMetrics:
    total_mass: float                       # kg
    total_satellites: int
    planes: int
    sats_per_plane: int
    orbital_period_min: float
    coverage_lat_band: Tuple[float, float]  # deg


def compute_constellation_metrics(params: WalkerParams,
                                  sat_mass: float) -> ConstellationMetrics:
    """Fleet mass, period and the latitude band reached by the ground tracks."""
    a = EARTH_EQUATORIAL_RADIUS + params.altitude
    # retrograde planes reach the same |lat| as their supplement
    reach = params.inclination if params.inclination <= 90.0 else 180.0 - params.inclination
    return ConstellationMetrics(
        total_mass=params.total_sats * sat_mass,
        total_satellites=params.total_sats,
        planes=params.planes,
        sats_per_plane=params.sats_per_plane,
        orbital_period_min=orbital_period(a) / 60.0,
        coverage_lat_band=(-reach, reach),
    )


def plane_separation(params: WalkerParams) -> float:
    """Angular separation between adjacent orbit planes at the equator (deg)."""
    if params.planes <= 0:
        return math.nan
    span = 360.0 if params.walker_type is WalkerType.DELTA else 180.0
    return span / params.planes
