"""
===============================================================================
MISSION DESIGN - Ground-Station Pass Prediction
===============================================================================
Fixed-step visibility scan of a satellite over a ground-station network.

Algorithm
---------
    1. Sample t = 0, step, 2*step, ... <= duration.  At every sample the
       element set is propagated (Kepler + J2 secular drift) and rotated
       into ECEF by the GMST of that instant.  This ephemeris is computed
       once and shared by every station.
    2. For each *active* station the site-to-satellite vector is expressed
       in South-East-Zenith and converted to elevation / azimuth.
    3. A pass opens on the first sample at or above the station's elevation
       mask and closes on the first later sample below it (that sample is
       the LOS time).  Passes shorter than 60 s are dropped.  A pass still
       open at the end of the window is not reported.
    4. TCA is the sample of highest elevation (step resolution, no
       refinement).  Quality grade from max elevation:
       >= 60 A, >= 30 B, >= 10 C, else D.
    5. Passes from all stations are merged and sorted by AOS.

Stations are independent, so step 2-4 may be distributed over a
``ParallelSim`` process pool; the result is identical to the sequential
scan.
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

from mission_design.core.constants import DEG2RAD, EARTH_MU, SEC_PER_DAY
from mission_design.core.data_structures import (
    GeodeticCoord,
    GroundStation,
    OrbitalElements,
)
from mission_design.core.frames import (
    ecef_to_sez,
    eci_to_ecef,
    geodetic_to_ecef,
    look_angles_from_sez,
)
from mission_design.core.time_utils import date_to_gmst, ensure_utc
from mission_design.dynamics.orbital_mechanics import KeplerPropagator
from mission_design.performance.parallel import ParallelSim

logger = logging.getLogger(__name__)

DEFAULT_STEP_SEC = 30.0
MIN_PASS_DURATION = 60.0            # s
LINK_EFFICIENCY = 0.70


class PassQuality(Enum):
    A = 'A'
    B = 'B'
    C = 'C'
    D = 'D'


def grade_pass(max_elevation: float) -> PassQuality:
    """Quality grade from the maximum elevation (deg) of a pass."""
    if max_elevation >= 60.0:
        return PassQuality.A
    if max_elevation >= 30.0:
        return PassQuality.B
    if max_elevation >= 10.0:
        return PassQuality.C
    return PassQuality.D


@dataclass(frozen=True)
class Pass:
    """
    One contact window between the satellite and a ground station.

    Attributes
    ----------
    station_id, station_name : str
    aos, los, tca : datetime
        Acquisition, loss of signal and time of maximum elevation (UTC).
    max_elevation : float
        Peak elevation (deg).
    aos_azimuth, los_azimuth : float
        Azimuth (deg) at the first and last in-view samples.
    duration : float
        LOS - AOS (s).
    quality : PassQuality
    """
    station_id: str
    station_name: str
    aos: datetime
    los: datetime
    tca: datetime
    max_elevation: float
    aos_azimuth: float
    los_azimuth: float
    duration: float
    quality: PassQuality


# =============================================================================
# LOOK ANGLES
# =============================================================================

def station_ecef(station: GroundStation) -> np.ndarray:
    """ECEF position (km) of a station on the spherical Earth."""
    return geodetic_to_ecef(GeodeticCoord(station.lat, station.lon, station.alt))


def look_angles(r_sat_ecef: np.ndarray,
                station: GroundStation) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Elevation (deg), azimuth (deg, [0, 360)) and range (km) of the satellite
    as seen from *station*.

    Parameters
    ----------
    r_sat_ecef : np.ndarray
        Satellite ECEF position (3,) or ephemeris (N, 3), km.
    station : GroundStation
    """
    sez = ecef_to_sez(r_sat_ecef, station_ecef(station),
                      station.lat * DEG2RAD, station.lon * DEG2RAD)
    return look_angles_from_sez(sez)


# =============================================================================
# EPHEMERIS
# =============================================================================

def sample_times(duration_days: float, step_sec: float) -> np.ndarray:
    """Offsets 0, step, ... <= duration (s), built as i*step."""
    total = duration_days * SEC_PER_DAY
    if step_sec <= 0.0 or total < 0.0:
        return np.empty(0)
    count = int(math.floor(total / step_sec + 1e-9))
    return np.arange(count + 1, dtype=np.float64) * step_sec


def ecef_ephemeris(elements: OrbitalElements, epoch: datetime,
                   times: np.ndarray, mu: float = EARTH_MU) -> np.ndarray:
    """
    Satellite ECEF positions (km) at each offset in *times*.

    Returns
    -------
    np.ndarray
        Shape (len(times), 3).
    """
    propagator = KeplerPropagator(mu)
    out = np.empty((len(times), 3), dtype=np.float64)
    for k, dt in enumerate(times):
        r_eci = propagator.state_at(elements, float(dt)).position
        gmst = date_to_gmst(epoch + timedelta(seconds=float(dt)))
        out[k] = eci_to_ecef(r_eci, gmst)
    return out


# =============================================================================
# PER-STATION SCAN
# =============================================================================

def scan_station(payload: Tuple[GroundStation, datetime, np.ndarray, np.ndarray]
                 ) -> List[Pass]:
    """
    Scan one station against a precomputed ephemeris.

    Module-level so that it can be shipped to a worker process.

    Parameters
    ----------
    payload : tuple
        (station, epoch, times [s], ECEF ephemeris [km]).

    Returns
    -------
    list of Pass
        Passes of this station in chronological order.
    """
    station, epoch, times, sat_ecef = payload
    elevation, azimuth, _ = look_angles(sat_ecef, station)

    passes = []
    in_pass = False
    start_t = 0.0
    start_az = 0.0
    max_el = 0.0
    max_el_t = 0.0
    last_az = 0.0

    for k in range(len(times)):
        t = float(times[k])
        el = float(elevation[k])
        az = float(azimuth[k])

        if el >= station.min_elevation:
            if not in_pass:
                in_pass = True
                start_t = t
                start_az = az
                max_el = el
                max_el_t = t
            if el > max_el:
                max_el = el
                max_el_t = t
            last_az = az
        elif in_pass:
            in_pass = False
            duration = t - start_t
            if duration < MIN_PASS_DURATION:
                continue
            passes.append(Pass(
                station_id=station.id,
                station_name=station.name,
                aos=epoch + timedelta(seconds=start_t),
                los=epoch + timedelta(seconds=t),
                tca=epoch + timedelta(seconds=max_el_t),
                max_elevation=max_el,
                aos_azimuth=start_az,
                los_azimuth=last_az,
                duration=duration,
                quality=grade_pass(max_el),
            ))

    return passes


def predict_passes(elements: OrbitalElements, epoch: datetime,
                   stations: Sequence[GroundStation],
                   duration_days: float,
                   step_sec: float = DEFAULT_STEP_SEC,
                   mu: float = EARTH_MU,
                   parallel: Optional[ParallelSim] = None) -> List[Pass]:
    """
    Predict all contact windows over *duration_days* from *epoch*.

    Parameters
    ----------
    elements : OrbitalElements
        Orbit at epoch.
    epoch : datetime
        Scan start (UTC; naive is taken as UTC).
    stations : sequence of GroundStation
        Inactive stations are skipped.
    duration_days : float
        Scan window (days).
    step_sec : float
        Sample spacing (s).
    mu : float
        Gravitational parameter (km^3/s^2).
    parallel : ParallelSim, optional
        Distribute the per-station scans over worker processes.

    Returns
    -------
    list of Pass
        Sorted by AOS.  Empty for invalid elements, no active stations or
        a non-positive step.
    """
    active = [s for s in stations if s.active]
    if not active or not elements.is_valid:
        return []

    times = sample_times(duration_days, step_sec)
    if len(times) == 0:
        return []

    epoch = ensure_utc(epoch)
    sat_ecef = ecef_ephemeris(elements, epoch, times, mu)

    payloads = [(station, epoch, times, sat_ecef) for station in active]
    if parallel is None:
        per_station = [scan_station(p) for p in payloads]
    else:
        per_station = parallel.map(scan_station, payloads)

    passes = [p for station_passes in per_station for p in station_passes]
    passes.sort(key=lambda p: p.aos)

    logger.info("Predicted %d passes over %d active stations in %.2f days",
                len(passes), len(active), duration_days)
    return passes


# =============================================================================
# METRICS
# =============================================================================

@dataclass(frozen=True)
class PassMetrics:
    """
    Aggregate contact statistics of a pass list.

    Attributes
    ----------
    passes_per_day : float
    avg_duration_min : float
    max_gap_hours : float
        Longest interval between the LOS of one pass and the AOS of the next
        in the merged chronological list (all stations together).
    daily_contact_min : float
    daily_data_mb : float
        Downlinked volume per day at the given rate and 70% link efficiency.
    """
    passes_per_day: float
    avg_duration_min: float
    max_gap_hours: float
    daily_contact_min: float
    daily_data_mb: float


def compute_pass_metrics(passes: Sequence[Pass], duration_days: float,
                         data_rate_kbps: float) -> PassMetrics:
    """
    Contact statistics of a sorted pass list.

    With no passes the gap is the whole window and everything else is 0.
    """
    if not passes:
        return PassMetrics(0.0, 0.0, duration_days * 24.0, 0.0, 0.0)

    days = max(1.0, duration_days)
    total_contact = sum(p.duration for p in passes)

    max_gap = 0.0
    for prev, nxt in zip(passes[:-1], passes[1:]):
        gap = (nxt.aos - prev.los).total_seconds()
        max_gap = max(max_gap, gap)

    daily_contact = total_contact / days
    daily_bits = data_rate_kbps * 1000.0 * daily_contact * LINK_EFFICIENCY

    return PassMetrics(
        passes_per_day=len(passes) / days,
        avg_duration_min=total_contact / len(passes) / 60.0,
        max_gap_hours=max_gap / 3600.0,
        daily_contact_min=daily_contact / 60.0,
        daily_data_mb=daily_bits / 8.0 / 1024.0 / 1024.0,
    )


def passes_to_dataframe(passes: Sequence[Pass]) -> pd.DataFrame:
    """Tabulate passes, one row per pass, in list order."""
    columns = ['station', 'aos', 'los', 'tca', 'duration_min',
               'max_elevation', 'aos_azimuth', 'los_azimuth', 'quality']
    rows = [{
        'station': p.station_name,
        'aos': p.aos,
        'los': p.los,
        'tca': p.tca,
        'duration_min': p.duration / 60.0,
        'max_elevation': p.max_elevation,
        'aos_azimuth': p.aos_azimuth,
        'los_azimuth': p.los_azimuth,
        'quality': p.quality.value,
    } for p in passes]
    return pd.DataFrame(rows, columns=columns)
