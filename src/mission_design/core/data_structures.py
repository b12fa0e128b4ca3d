"""
Value types shared by every mission-design component.

Structures
----------
OrbitalElements -- Immutable classical Keplerian element set (km, deg).
StateVector     -- Immutable inertial position/velocity snapshot (km, km/s).
GeodeticCoord   -- Latitude/longitude/altitude triple on a spherical Earth.
GroundStation   -- Ground-station site definition read by the pass predictor.

Every structure is frozen: a changed orbit or site is a *new* instance, so no
computation can observe a partially updated input or a stale cached result.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

import numpy as np


def wrap_degrees(angle: float) -> float:
    """Wrap an angle in degrees into [0, 360)."""
    wrapped = float(angle) % 360.0
    # -1e-17 % 360 rounds to exactly 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


# ---------------------------------------------------------------------------
# OrbitalElements
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OrbitalElements:
    """Classical orbital elements of a closed (elliptic) orbit.

    Attributes
    ----------
    semi_major_axis : float
        Semi-major axis *a* in km (must be > 0).
    eccentricity : float
        Eccentricity *e*, valid range 0 <= e < 1.  Parabolic and hyperbolic
        orbits are not supported; see :attr:`is_valid`.
    inclination : float
        Inclination *i* in degrees.
    raan : float
        Right ascension of the ascending node in degrees.
    arg_perigee : float
        Argument of perigee in degrees.
    true_anomaly : float
        True anomaly in degrees.

    All angles are wrapped to [0, 360) on construction.
    """
    semi_major_axis: float
    eccentricity: float
    inclination: float = 0.0
    raan: float = 0.0
    arg_perigee: float = 0.0
    true_anomaly: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'semi_major_axis', float(self.semi_major_axis))
        object.__setattr__(self, 'eccentricity', float(self.eccentricity))
        for name in ('inclination', 'raan', 'arg_perigee', 'true_anomaly'):
            object.__setattr__(self, name, wrap_degrees(getattr(self, name)))

    @property
    def is_valid(self) -> bool:
        """True for a bound orbit: a > 0 and 0 <= e < 1."""
        return (
            bool(np.isfinite(self.semi_major_axis))
            and self.semi_major_axis > 0.0
            and 0.0 <= self.eccentricity < 1.0
        )

    @property
    def semi_latus_rectum(self) -> float:
        """p = a (1 - e^2) in km."""
        return self.semi_major_axis * (1.0 - self.eccentricity ** 2)

    @property
    def perigee_radius(self) -> float:
        return self.semi_major_axis * (1.0 - self.eccentricity)

    @property
    def apogee_radius(self) -> float:
        return self.semi_major_axis * (1.0 + self.eccentricity)

    def replace(self, **changes) -> 'OrbitalElements':
        """Return a new element set with the given fields changed."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_dict(cls, data: dict) -> 'OrbitalElements':
        """Build elements from a mapping using the field names above."""
        return cls(
            semi_major_axis=data['semi_major_axis'],
            eccentricity=data.get('eccentricity', 0.0),
            inclination=data.get('inclination', 0.0),
            raan=data.get('raan', 0.0),
            arg_perigee=data.get('arg_perigee', 0.0),
            true_anomaly=data.get('true_anomaly', 0.0),
        )


# ---------------------------------------------------------------------------
# StateVector
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class StateVector:
    """Inertial position/velocity snapshot.

    Attributes
    ----------
    position : np.ndarray
        3-element position vector (km).
    velocity : np.ndarray
        3-element velocity vector (km/s).
    frame : str
        Reference frame label (default 'ECI').  Used for bookkeeping only.
    """
    position: np.ndarray
    velocity: np.ndarray
    frame: str = 'ECI'

    def __post_init__(self):
        position = np.array(self.position, dtype=np.float64)
        velocity = np.array(self.velocity, dtype=np.float64)
        position.setflags(write=False)
        velocity.setflags(write=False)
        object.__setattr__(self, 'position', position)
        object.__setattr__(self, 'velocity', velocity)

    @property
    def r_mag(self) -> float:
        """Magnitude of the position vector (km)."""
        return float(np.linalg.norm(self.position))

    @property
    def v_mag(self) -> float:
        """Magnitude of the velocity vector (km/s)."""
        return float(np.linalg.norm(self.velocity))

    @property
    def angular_momentum(self) -> np.ndarray:
        """Specific angular momentum h = r x v (km^2/s)."""
        return np.cross(self.position, self.velocity)


# ---------------------------------------------------------------------------
# Ground segment
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GeodeticCoord:
    """Latitude/longitude (deg) and altitude above the equatorial radius (km)."""
    lat: float
    lon: float
    alt: float = 0.0


@dataclass(frozen=True)
class GroundStation:
    """A ground-station site.

    Attributes
    ----------
    id : str
        Stable identifier.
    name : str
        Display name.
    lat, lon : float
        Site latitude and longitude in degrees.
    alt : float
        Site altitude in km.
    min_elevation : float
        Elevation mask in degrees; the satellite is in contact at or above it.
    active : bool
        Inactive stations are skipped by the pass predictor.
    """
    id: str
    name: str
    lat: float
    lon: float
    alt: float = 0.0
    min_elevation: float = 5.0
    active: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> 'GroundStation':
        return cls(
            id=str(data['id']),
            name=str(data.get('name', data['id'])),
            lat=float(data['lat']),
            lon=float(data['lon']),
            alt=float(data.get('alt', 0.0)),
            min_elevation=float(data.get('min_elevation', 5.0)),
            active=bool(data.get('active', True)),
        )
