"""
Mission configuration loading.

The YAML file (``config/mission_config.yaml`` at the repository root by
default) is read with ``yaml.safe_load`` and turned into a typed
``MissionConfig``.  Every section is optional; missing keys take the
defaults below.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

import yaml

from mission_design.core.constants import TargetBody
from mission_design.core.data_structures import GroundStation, OrbitalElements
from mission_design.core.time_utils import ensure_utc
from mission_design.dynamics.environment import SolarActivity
from mission_design.dynamics.orbital_mechanics import ORBIT_PRESETS
from mission_design.guidance.maneuver_planner import (
    DEFAULT_MANEUVERS,
    Maneuver,
    ManeuverKind,
    PROPULSION_PRESETS,
    PropulsionConfig,
    PropulsionType,
)
from mission_design.navigation.ground_stations import (
    DEFAULT_GROUND_STATIONS,
    with_active,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / 'config' / 'mission_config.yaml'
DEFAULT_EPOCH = datetime(2025, 1, 1, 0, 0, 0)


class ConfigError(ValueError):
    """Malformed or inconsistent mission configuration."""


@dataclass(frozen=True)
class PorkchopRequest:
    target: TargetBody = TargetBody.MARS
    start_date: datetime = DEFAULT_EPOCH
    departure_range_days: float = 365.0
    n_departure: int = 20
    min_flight_days: float = 150.0
    max_flight_days: float = 350.0
    n_flight: int = 20


@dataclass(frozen=True)
class MissionConfig:
    name: str = 'Untitled Mission'
    epoch: datetime = DEFAULT_EPOCH
    elements: OrbitalElements = ORBIT_PRESETS['iss']
    stations: Tuple[GroundStation, ...] = DEFAULT_GROUND_STATIONS
    scan_days: float = 1.0
    step_sec: float = 30.0
    data_rate_kbps: float = 1000.0
    dry_mass: float = 12.0                  # kg
    propulsion: PropulsionConfig = field(default_factory=PropulsionConfig)
    maneuvers: Tuple[Maneuver, ...] = DEFAULT_MANEUVERS
    lifetime_years: float = 3.0
    ballistic_coeff: float = 0.01           # m^2/kg
    solar_activity: SolarActivity = SolarActivity.MODERATE
    porkchop: Optional[PorkchopRequest] = None


def load_config(config_path: Optional[str] = None) -> dict:
    """
    Load mission configuration from YAML file.

    Args:
        config_path: Path to YAML config. Defaults to config/mission_config.yaml

    Returns:
        Dictionary of mission configuration parameters

    Raises:
        ConfigError: If the file is not a YAML mapping.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    logger.info("Loading configuration from: %s", path)
    with open(path, 'r') as f:
        try:
            config = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"{path}: top level must be a mapping")
    return config


def _section(config: dict, key: str) -> dict:
    """A mapping-valued section, {} when absent."""
    section = config.get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"{key}: expected a mapping, got {type(section).__name__}")
    return section


def _parse_number(section: dict, key: str, default, prefix: str, cast=float):
    value = section.get(key, default)
    try:
        return cast(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{prefix}.{key}: not a number: {value!r}") from exc


def _parse_date(value, key: str) -> datetime:
    if isinstance(value, datetime):
        return ensure_utc(value)
    try:
        return ensure_utc(datetime.fromisoformat(str(value).replace('Z', '+00:00')))
    except ValueError as exc:
        raise ConfigError(f"{key}: not an ISO-8601 date: {value!r}") from exc


def _parse_enum(enum_cls, value, key: str):
    try:
        return enum_cls(str(value).lower())
    except ValueError as exc:
        valid = [member.value for member in enum_cls]
        raise ConfigError(f"{key}: unknown value {value!r}. Valid: {valid}") from exc


def _parse_solar_activity(value) -> SolarActivity:
    try:
        return SolarActivity.from_name(str(value))
    except ValueError as exc:
        raise ConfigError(f"solar_activity: {exc}") from exc


def _parse_elements(section: dict) -> OrbitalElements:
    if 'preset' in section:
        preset = str(section['preset']).lower()
        if preset not in ORBIT_PRESETS:
            raise ConfigError(f"orbit.preset: unknown preset {preset!r}. "
                              f"Valid: {sorted(ORBIT_PRESETS)}")
        return ORBIT_PRESETS[preset]
    if 'semi_major_axis' not in section:
        raise ConfigError("orbit: missing semi_major_axis")
    values = {key: _parse_number(section, key, 0.0, 'orbit')
              for key in ('semi_major_axis', 'eccentricity', 'inclination',
                          'raan', 'arg_perigee', 'true_anomaly')}
    elements = OrbitalElements.from_dict(values)
    if not elements.is_valid:
        raise ConfigError(f"orbit: invalid elements {elements}")
    return elements


def _parse_stations(section: dict) -> Tuple[GroundStation, ...]:
    stations: List[GroundStation] = []
    if section.get('use_default_stations', True):
        stations.extend(DEFAULT_GROUND_STATIONS)
        if 'active' in section:
            active = section['active']
            if not isinstance(active, list):
                raise ConfigError("ground_stations.active: expected a list of ids")
            stations = with_active(stations, [str(station_id) for station_id in active])
    custom = section.get('custom') or []
    if not isinstance(custom, list):
        raise ConfigError("ground_stations.custom: expected a list")
    for entry in custom:
        if not isinstance(entry, dict):
            raise ConfigError(f"ground_stations.custom: expected a mapping, got {entry!r}")
        try:
            stations.append(GroundStation.from_dict(entry))
        except KeyError as exc:
            raise ConfigError(f"ground_stations.custom: missing {exc.args[0]}") from exc
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"ground_stations.custom: {entry}: {exc}") from exc
    return tuple(stations)


def _parse_propulsion(section: dict) -> PropulsionConfig:
    ptype = _parse_enum(PropulsionType, section.get('type', 'none'), 'propulsion.type')
    isp = _parse_number(section, 'specific_impulse', PROPULSION_PRESETS[ptype][0],
                        'propulsion')
    return PropulsionConfig(ptype, isp,
                            _parse_number(section, 'propellant_mass', 0.0, 'propulsion'))


def _parse_maneuvers(items) -> Tuple[Maneuver, ...]:
    if not isinstance(items, list):
        raise ConfigError("maneuvers: expected a list")
    maneuvers = []
    for item in items:
        if not isinstance(item, dict):
            raise ConfigError(f"maneuvers: expected a mapping, got {item!r}")
        if 'id' not in item:
            raise ConfigError(f"maneuvers: entry without id: {item}")
        kind = _parse_enum(ManeuverKind, item.get('kind', 'fixed'), 'maneuvers.kind')
        maneuvers.append(Maneuver(
            id=str(item['id']),
            name=str(item.get('name', item['id'])),
            delta_v=_parse_number(item, 'delta_v', 0.0, f"maneuvers.{item['id']}"),
            per_year=bool(item.get('per_year', False)),
            kind=kind,
        ))
    return tuple(maneuvers)


def _parse_porkchop(section: dict) -> PorkchopRequest:
    defaults = PorkchopRequest()
    return PorkchopRequest(
        target=_parse_enum(TargetBody, section.get('target', defaults.target.value),
                           'porkchop.target'),
        start_date=_parse_date(section.get('start_date', defaults.start_date),
                               'porkchop.start_date'),
        departure_range_days=_parse_number(section, 'departure_range_days',
                                           defaults.departure_range_days, 'porkchop'),
        n_departure=_parse_number(section, 'n_departure', defaults.n_departure,
                                  'porkchop', int),
        min_flight_days=_parse_number(section, 'min_flight_days',
                                      defaults.min_flight_days, 'porkchop'),
        max_flight_days=_parse_number(section, 'max_flight_days',
                                      defaults.max_flight_days, 'porkchop'),
        n_flight=_parse_number(section, 'n_flight', defaults.n_flight, 'porkchop', int),
    )


def build_mission(config: dict) -> MissionConfig:
    """
    Build a typed mission description from a configuration mapping.

    Raises:
        ConfigError: On non-mapping sections, non-numeric values, unknown
            enum values, bad dates or missing keys.
    """
    mission = _section(config, 'mission')
    scan = _section(config, 'scan')
    spacecraft = _section(config, 'spacecraft')
    defaults = MissionConfig()

    built = MissionConfig(
        name=str(mission.get('name', defaults.name)),
        epoch=_parse_date(mission.get('epoch', defaults.epoch), 'mission.epoch'),
        elements=(_parse_elements(_section(config, 'orbit'))
                  if 'orbit' in config else defaults.elements),
        stations=_parse_stations(_section(config, 'ground_stations')),
        scan_days=_parse_number(scan, 'duration_days', defaults.scan_days, 'scan'),
        step_sec=_parse_number(scan, 'step_sec', defaults.step_sec, 'scan'),
        data_rate_kbps=_parse_number(scan, 'data_rate_kbps', defaults.data_rate_kbps,
                                     'scan'),
        dry_mass=_parse_number(spacecraft, 'dry_mass', defaults.dry_mass, 'spacecraft'),
        propulsion=_parse_propulsion(_section(config, 'propulsion')),
        maneuvers=(_parse_maneuvers(config['maneuvers'])
                   if 'maneuvers' in config else defaults.maneuvers),
        lifetime_years=_parse_number(mission, 'lifetime_years', defaults.lifetime_years,
                                     'mission'),
        ballistic_coeff=_parse_number(spacecraft, 'ballistic_coeff',
                                      defaults.ballistic_coeff, 'spacecraft'),
        solar_activity=_parse_solar_activity(config.get('solar_activity', 'moderate')),
        porkchop=(_parse_porkchop(_section(config, 'porkchop'))
                  if 'porkchop' in config else None),
    )
    logger.info("Mission: %s", built.name)
    return built
