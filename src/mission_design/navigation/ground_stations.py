"""
Default ground-station network.

Fifteen commercial, agency and deep-space sites.  The four polar and
mid-latitude stations listed first are active by default; the rest are
available for what-if analyses and are skipped by the pass predictor until
activated.
"""

import dataclasses
from typing import Iterable, List

from mission_design.core.data_structures import GroundStation

DEFAULT_GROUND_STATIONS = (
    GroundStation('svalbard', 'Svalbard (SvalSat)', 78.23, 15.39, 0.5, 5.0, True),
    GroundStation('fairbanks', 'Fairbanks, AK', 64.86, -147.72, 0.16, 5.0, True),
    GroundStation('darmstadt', 'Darmstadt (ESOC)', 49.87, 8.63, 0.14, 5.0, True),
    GroundStation('santiago', 'Santiago, Chile', -33.45, -70.67, 0.52, 5.0, True),
    GroundStation('goldstone', 'Goldstone (DSN)', 35.43, -116.89, 0.99, 5.0, False),
    GroundStation('canberra', 'Canberra (DSN)', -35.40, 148.98, 0.68, 5.0, False),
    GroundStation('madrid', 'Madrid (DSN)', 40.43, -4.25, 0.83, 5.0, False),
    GroundStation('tokyo', 'Tokyo, Japan', 35.68, 139.77, 0.04, 10.0, False),
    GroundStation('bangalore', 'Bangalore (ISTRAC)', 13.03, 77.57, 0.92, 5.0, False),
    GroundStation('tromso', 'Tromsø, Norway', 69.65, 18.96, 0.10, 5.0, False),
    GroundStation('mcmurdo', 'McMurdo, Antarctica', -77.85, 166.67, 0.02, 5.0, False),
    GroundStation('hawaii', 'Hawaii (AMOS)', 20.71, -156.26, 3.06, 5.0, False),
    GroundStation('singapore', 'Singapore', 1.35, 103.82, 0.01, 10.0, False),
    GroundStation('redu', 'Redu, Belgium', 50.00, 5.15, 0.38, 5.0, False),
    GroundStation('kiruna', 'Kiruna, Sweden', 67.86, 20.22, 0.39, 5.0, False),
)


def get_station(station_id: str) -> GroundStation:
    """Look up a default station by id; raises ValueError if unknown."""
    for station in DEFAULT_GROUND_STATIONS:
        if station.id == station_id:
            return station
    raise ValueError(
        f"Unknown ground station: {station_id}. "
        f"Valid: {[s.id for s in DEFAULT_GROUND_STATIONS]}")


def with_active(stations: Iterable[GroundStation],
                active_ids: Iterable[str]) -> List[GroundStation]:
    """Copy of *stations* with exactly the ids in *active_ids* activated."""
    wanted = set(active_ids)
    return [dataclasses.replace(s, active=s.id in wanted) for s in stations]
