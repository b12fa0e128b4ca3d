"""
===============================================================================
MISSION DESIGN - Maneuver Planner
===============================================================================
Delta-V computation, propellant sizing and the mission delta-v budget of a
small satellite.

This module provides classical impulsive maneuver calculations (Hohmann,
bi-elliptic, plane change, escape and capture burns, deorbit), the
Tsiolkovsky rocket equation, the annual drag make-up estimate and the
maneuver-by-maneuver budget engine that compares the required delta-v with
what the propulsion system can deliver.

Sign conventions and units:
    - Orbit radii in km, gravitational parameters in km^3/s^2
    - Orbital speeds in km/s, maneuver delta-v figures in m/s
    - All masses in kg
    - All angles in degrees at the public interface
    - Specific impulse (Isp) in seconds
    - g0 = 9.80665 m/s^2 (standard gravity)

Invalid propulsion inputs (non-positive Isp, dry mass or propellant) give
0 delta-v / 0 propellant rather than exceptions.
===============================================================================
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple

import numpy as np
import pandas as pd

from mission_design.core.constants import (
    EARTH_EQUATORIAL_RADIUS,
    EARTH_MU,
    G0,
    SEC_PER_YEAR,
)
from mission_design.dynamics.environment import SolarActivity
from mission_design.dynamics.orbital_mechanics import deorbit_delta_v

logger = logging.getLogger(__name__)

MARGIN_FRACTION = 0.10
NOMINAL_MARGIN = 0.10
DEORBIT_TARGET_PERIGEE = 200.0      # km


# =============================================================================
# PROPULSION AND MANEUVER DEFINITIONS
# =============================================================================

class PropulsionType(Enum):
    NONE = 'none'
    COLD_GAS = 'cold-gas'
    RESISTOJET = 'resistojet'
    ION = 'ion'
    HALL_THRUSTER = 'hall-thruster'


# Typical specific impulse (s) and display label per propulsion type
PROPULSION_PRESETS = {
    PropulsionType.NONE: (0.0, 'No Propulsion'),
    PropulsionType.COLD_GAS: (70.0, 'Cold Gas'),
    PropulsionType.RESISTOJET: (150.0, 'Resistojet'),
    PropulsionType.ION: (3000.0, 'Ion Thruster'),
    PropulsionType.HALL_THRUSTER: (1500.0, 'Hall Thruster'),
}


@dataclass(frozen=True)
class PropulsionConfig:
    """Propulsion system: type, specific impulse (s), propellant load (kg)."""
    type: PropulsionType = PropulsionType.NONE
    specific_impulse: float = 0.0
    propellant_mass: float = 0.0

    @classmethod
    def from_preset(cls, propulsion_type: PropulsionType,
                    propellant_mass: float) -> 'PropulsionConfig':
        isp, _ = PROPULSION_PRESETS[propulsion_type]
        return cls(propulsion_type, isp, propellant_mass)


class ManeuverKind(Enum):
    """FIXED maneuvers carry their own delta-v; DEORBIT derives it from altitude."""
    FIXED = 'fixed'
    DEORBIT = 'deorbit'


@dataclass(frozen=True)
class Maneuver:
    """
    A budgeted maneuver.

    Attributes
    ----------
    id, name : str
    delta_v : float
        Delta-v per occurrence (m/s).  Ignored for DEORBIT maneuvers.
    per_year : bool
        Multiply by the mission lifetime in years.
    kind : ManeuverKind
    """
    id: str
    name: str
    delta_v: float = 0.0
    per_year: bool = False
    kind: ManeuverKind = ManeuverKind.FIXED


DEFAULT_MANEUVERS = (
    Maneuver('insertion', 'Orbit Insertion Correction', 5.0, False),
    Maneuver('stationkeeping', 'Station Keeping', 2.0, True),
    Maneuver('collision', 'Collision Avoidance', 1.0, True),
    Maneuver('deorbit', 'Deorbit', 0.0, False, ManeuverKind.DEORBIT),
)


class MarginStatus(Enum):
    NOMINAL = 'nominal'
    WARNING = 'warning'
    CRITICAL = 'critical'


@dataclass(frozen=True)
class BudgetLine:
    """
    One row of the delta-v budget.

    ``propellant`` is this maneuver's requirement against the original dry
    mass; ``remaining_propellant`` is the tank content after the maneuver
    in list order, floored at zero.
    """
    id: str
    name: str
    delta_v: float              # m/s
    propellant: float           # kg
    remaining_propellant: float  # kg


@dataclass(frozen=True)
class DeltaVBudgetResult:
    """
    Delta-v budget of a mission.

    Attributes
    ----------
    available_delta_v : float
        Tsiolkovsky capability of the propulsion system (m/s).
    deorbit_delta_v : float
        Deorbit burn to a 200 km perigee (m/s).
    drag_delta_v_per_year : float
        Annual drag make-up (m/s/yr), informational.
    breakdown : tuple of BudgetLine
        Maneuvers in list order followed by the 10% margin line.
    total_required_delta_v : float
        Subtotal plus margin (m/s).
    margin_delta_v : float
        available - required (m/s).
    margin_percent : float
        margin / available as a fraction; -1 with no propulsion.
    margin_status : MarginStatus
    propellant_remaining : float
        Propellant left after the total requirement (kg), >= 0.
    mass_ratio : float
        Wet / dry mass.
    """
    available_delta_v: float
    deorbit_delta_v: float
    drag_delta_v_per_year: float
    breakdown: Tuple[BudgetLine, ...]
    total_required_delta_v: float
    margin_delta_v: float
    margin_percent: float
    margin_status: MarginStatus
    propellant_remaining: float
    mass_ratio: float


def classify_margin(margin_percent: float) -> MarginStatus:
    """nominal > 10%, warning in (0, 10%], critical <= 0."""
    if margin_percent > NOMINAL_MARGIN:
        return MarginStatus.NOMINAL
    if margin_percent > 0.0:
        return MarginStatus.WARNING
    return MarginStatus.CRITICAL


# Annual drag make-up model: (base altitude km, density kg/m^3, scale height km)
DRAG_DENSITY_TABLE = (
    (200.0, 2.789e-10, 37.5),
    (300.0, 7.248e-11, 53.6),
    (400.0, 2.803e-11, 58.5),
    (500.0, 1.184e-11, 60.8),
    (600.0, 5.215e-12, 63.8),
    (700.0, 2.390e-12, 65.2),
    (800.0, 1.170e-12, 68.9),
    (900.0, 5.790e-13, 72.0),
    (1000.0, 3.000e-13, 76.0),
)

DRAG_SOLAR_FACTORS = {
    SolarActivity.LOW: 0.5,
    SolarActivity.MODERATE: 1.0,
    SolarActivity.HIGH: 2.5,
}


# =============================================================================
# MANEUVER PLANNER
# =============================================================================

class ManeuverPlanner:
    """
    Computes delta-V and propellant requirements for small-satellite
    maneuvers.

    The planner is stateless: all inputs are passed as arguments and results
    are returned directly.

    Typical usage:
        planner = ManeuverPlanner()
        dv1, dv2 = planner.hohmann_transfer(6778.0, 7078.0, EARTH_MU)
        budget = planner.compute_delta_v_budget(propulsion, maneuvers,
                                                dry_mass=12.0, altitude=500.0,
                                                lifetime_years=3.0)
    """

    # -------------------------------------------------------------------------
    # Hohmann Transfer
    # -------------------------------------------------------------------------

    def hohmann_transfer(
        self,
        r1: float,
        r2: float,
        mu: float = EARTH_MU,
    ) -> Tuple[float, float]:
        """
        Two-impulse Hohmann transfer between coplanar circular orbits.

        Equations:
            a_t  = (r1 + r2) / 2
            dv1  = | sqrt(mu (2/r1 - 1/a_t)) - sqrt(mu/r1) |
            dv2  = | sqrt(mu/r2) - sqrt(mu (2/r2 - 1/a_t)) |

        Args:
            r1: Radius of initial circular orbit (km).
            r2: Radius of final circular orbit (km).
            mu: Gravitational parameter of central body (km^3/s^2).

        Returns:
            (dv1, dv2): Burn magnitudes (km/s).
        """
        a_transfer = (r1 + r2) / 2.0

        v_circ_1 = math.sqrt(mu / r1)
        v_circ_2 = math.sqrt(mu / r2)
        v_transfer_periapsis = math.sqrt(mu * (2.0 / r1 - 1.0 / a_transfer))
        v_transfer_apoapsis = math.sqrt(mu * (2.0 / r2 - 1.0 / a_transfer))

        dv1 = abs(v_transfer_periapsis - v_circ_1)
        dv2 = abs(v_circ_2 - v_transfer_apoapsis)

        logger.debug(
            "Hohmann transfer: r1=%.1f km, r2=%.1f km, dv1=%.4f km/s, dv2=%.4f km/s",
            r1, r2, dv1, dv2,
        )
        return dv1, dv2

    def hohmann_transfer_time(self, r1: float, r2: float,
                              mu: float = EARTH_MU) -> float:
        """Half the period of the transfer ellipse (s)."""
        a_transfer = (r1 + r2) / 2.0
        return math.pi * math.sqrt(a_transfer ** 3 / mu)

    # -------------------------------------------------------------------------
    # Bi-Elliptic Transfer
    # -------------------------------------------------------------------------

    def bi_elliptic_transfer(
        self,
        r1: float,
        r2: float,
        r_apoapsis: float,
        mu: float = EARTH_MU,
    ) -> Tuple[float, float, float]:
        """
        Three-impulse bi-elliptic transfer through an intermediate apoapsis.

        More economical than Hohmann when r2/r1 > 11.94.

        Args:
            r1: Radius of initial circular orbit (km).
            r2: Radius of final circular orbit (km).
            r_apoapsis: Intermediate apoapsis radius (km), >= max(r1, r2).
            mu: Gravitational parameter (km^3/s^2).

        Returns:
            (dv1, dv2, dv3): Burn magnitudes (km/s).

        Raises:
            ValueError: If r_apoapsis < max(r1, r2).
        """
        if r_apoapsis < max(r1, r2):
            raise ValueError(
                f"r_apoapsis ({r_apoapsis:.1f} km) must be >= max(r1, r2) = "
                f"{max(r1, r2):.1f} km"
            )

        a1 = (r1 + r_apoapsis) / 2.0
        dv1 = abs(math.sqrt(mu * (2.0 / r1 - 1.0 / a1)) - math.sqrt(mu / r1))

        a2 = (r2 + r_apoapsis) / 2.0
        v_apo_1 = math.sqrt(mu * (2.0 / r_apoapsis - 1.0 / a1))
        v_apo_2 = math.sqrt(mu * (2.0 / r_apoapsis - 1.0 / a2))
        dv2 = abs(v_apo_2 - v_apo_1)

        dv3 = abs(math.sqrt(mu / r2) - math.sqrt(mu * (2.0 / r2 - 1.0 / a2)))

        logger.debug(
            "Bi-elliptic transfer: r1=%.1f, r2=%.1f, r_apo=%.1f -> "
            "dv1=%.4f, dv2=%.4f, dv3=%.4f km/s",
            r1, r2, r_apoapsis, dv1, dv2, dv3,
        )
        return dv1, dv2, dv3

    # -------------------------------------------------------------------------
    # Plane Change
    # -------------------------------------------------------------------------

    def plane_change(self, velocity: float, delta_inclination: float) -> float:
        """
        Pure plane change at constant speed.

            dv = 2 v sin(delta_i / 2)

        Args:
            velocity: Orbital speed at the maneuver point.
            delta_inclination: Inclination change (deg).

        Returns:
            Delta-V in the units of *velocity*.
        """
        dv = 2.0 * velocity * math.sin(math.radians(abs(delta_inclination)) / 2.0)
        logger.debug("Plane change: v=%.4f, di=%.2f deg -> dv=%.4f",
                     velocity, delta_inclination, dv)
        return dv

    def combined_plane_change_and_transfer(
        self,
        r1: float,
        r2: float,
        inc_change: float,
        mu: float = EARTH_MU,
    ) -> float:
        """
        Hohmann transfer with the plane change folded into the second burn.

            dv2 = sqrt(v_c2^2 + v_t2^2 - 2 v_c2 v_t2 cos(delta_i))

        Args:
            inc_change: Inclination change (deg).

        Returns:
            Total delta-V (km/s).
        """
        a_transfer = (r1 + r2) / 2.0
        v_circ_1 = math.sqrt(mu / r1)
        v_circ_2 = math.sqrt(mu / r2)
        v_trans_peri = math.sqrt(mu * (2.0 / r1 - 1.0 / a_transfer))
        v_trans_apo = math.sqrt(mu * (2.0 / r2 - 1.0 / a_transfer))

        dv1 = abs(v_trans_peri - v_circ_1)
        dv2 = math.sqrt(
            v_circ_2 ** 2 + v_trans_apo ** 2
            - 2.0 * v_circ_2 * v_trans_apo * math.cos(math.radians(inc_change))
        )
        return dv1 + dv2

    # -------------------------------------------------------------------------
    # Escape and Capture
    # -------------------------------------------------------------------------

    def escape_maneuver(self, r_orbit: float, mu_body: float,
                        v_infinity: float) -> float:
        """
        Burn from a circular orbit onto a hyperbola with excess speed v_inf.

            dv = sqrt(v_inf^2 + 2 mu / r) - sqrt(mu / r)

        Args:
            r_orbit: Circular departure orbit radius (km).
            mu_body: Gravitational parameter (km^3/s^2).
            v_infinity: Hyperbolic excess speed (km/s).

        Returns:
            Delta-V (km/s).
        """
        v_circ = math.sqrt(mu_body / r_orbit)
        v_periapsis = math.sqrt(v_infinity ** 2 + 2.0 * mu_body / r_orbit)
        dv = v_periapsis - v_circ
        logger.debug("Escape: r=%.1f km, v_inf=%.4f km/s, dv=%.4f km/s",
                     r_orbit, v_infinity, dv)
        return dv

    def orbit_insertion(self, v_infinity: float, r_orbit: float,
                        mu_body: float) -> float:
        """
        Retrograde capture from a hyperbolic approach into a circular orbit.

        Identical magnitude to the escape burn at the same radius and v_inf.
        """
        return self.escape_maneuver(r_orbit, mu_body, v_infinity)

    def deorbit_delta_v(self, altitude: float,
                        target_perigee_alt: float = DEORBIT_TARGET_PERIGEE) -> float:
        """Hohmann first burn lowering perigee to 200 km (m/s); 0 if already below."""
        return deorbit_delta_v(altitude, target_perigee_alt)

    # -------------------------------------------------------------------------
    # Drag Make-Up
    # -------------------------------------------------------------------------

    def drag_density(self, altitude: float,
                     activity: SolarActivity = SolarActivity.MODERATE) -> float:
        """
        Density (kg/m^3) of the drag make-up model, scaled by the solar
        factor (low 0.5, moderate 1.0, high 2.5).

        Below 200 km the 200 km value is held.  At and above 1000 km the last
        band (3e-13 at 1000 km, 76 km scale height) is extended rather than
        falling to a flat 1e-12 without solar scaling.
        """
        factor = DRAG_SOLAR_FACTORS[activity]
        if altitude < DRAG_DENSITY_TABLE[0][0]:
            return DRAG_DENSITY_TABLE[0][1] * factor

        h0, rho0, H = DRAG_DENSITY_TABLE[-1]
        for band, upper in zip(DRAG_DENSITY_TABLE[:-1], DRAG_DENSITY_TABLE[1:]):
            if band[0] <= altitude < upper[0]:
                h0, rho0, H = band
                break
        return rho0 * math.exp(-(altitude - h0) / H) * factor

    def drag_delta_v(self, altitude: float, ballistic_coeff: float,
                     activity: SolarActivity = SolarActivity.MODERATE) -> float:
        """
        Annual delta-v to cancel atmospheric drag on a circular orbit.

            a_drag = rho v^2 B,   dv/yr = a_drag * 365.25 d

        Args:
            altitude: Circular altitude (km).
            ballistic_coeff: B = Cd A / m (m^2/kg).

        Returns:
            Delta-v per year (m/s).
        """
        rho = self.drag_density(altitude, activity)
        r_m = (EARTH_EQUATORIAL_RADIUS + altitude) * 1000.0
        v = math.sqrt(EARTH_MU * 1e9 / r_m)
        return rho * v * v * ballistic_coeff * SEC_PER_YEAR

    # -------------------------------------------------------------------------
    # Tsiolkovsky Rocket Equation
    # -------------------------------------------------------------------------

    def tsiolkovsky_delta_v(self, isp: float, dry_mass: float,
                            propellant_mass: float) -> float:
        """
        Delta-V capability from the Tsiolkovsky rocket equation.

            dv = Isp g0 ln((m_dry + m_prop) / m_dry)

        Args:
            isp: Specific impulse (s).
            dry_mass: Dry mass (kg).
            propellant_mass: Propellant mass (kg).

        Returns:
            Delta-V in m/s; 0 when any input is non-positive.
        """
        if isp <= 0.0 or dry_mass <= 0.0 or propellant_mass <= 0.0:
            return 0.0

        dv = isp * G0 * math.log((dry_mass + propellant_mass) / dry_mass)
        logger.debug(
            "Tsiolkovsky: Isp=%.0f s, m_dry=%.2f kg, m_prop=%.3f kg -> dv=%.1f m/s",
            isp, dry_mass, propellant_mass, dv,
        )
        return dv

    def propellant_mass(self, dv: float, isp: float, dry_mass: float) -> float:
        """
        Propellant needed for a delta-V, from the rearranged rocket equation:

            m_prop = m_dry (exp(dv / (Isp g0)) - 1)

        Args:
            dv: Required delta-V (m/s).
            isp: Specific impulse (s).
            dry_mass: Mass after the burn (kg).

        Returns:
            Propellant mass (kg); 0 when any input is non-positive.
        """
        if isp <= 0.0 or dry_mass <= 0.0 or dv <= 0.0:
            return 0.0
        return dry_mass * (math.exp(dv / (isp * G0)) - 1.0)

    # -------------------------------------------------------------------------
    # Delta-V Budget
    # -------------------------------------------------------------------------

    def compute_delta_v_budget(
        self,
        propulsion: PropulsionConfig,
        maneuvers: Sequence[Maneuver],
        dry_mass: float,
        altitude: float,
        lifetime_years: float,
        ballistic_coeff: float = 0.01,
    ) -> DeltaVBudgetResult:
        """
        Compare the required mission delta-v with the propulsion capability.

        Sequencing:
            - Maneuvers are taken in list order.  DEORBIT maneuvers use the
              Hohmann deorbit-to-200 km burn, per-year maneuvers are
              multiplied by the lifetime.
            - Each maneuver's propellant is computed against the *original*
              dry mass.  The remaining-propellant trace is decremented in
              order and floored at zero.
            - A margin line of 10% of the subtotal is appended.

        Args:
            propulsion: Propulsion system.
            maneuvers: Budgeted maneuvers.
            dry_mass: Spacecraft dry mass (kg).
            altitude: Operational circular altitude (km).
            lifetime_years: Mission lifetime (years).
            ballistic_coeff: Cd A / m (m^2/kg), for the drag estimate.

        Returns:
            DeltaVBudgetResult
        """
        isp = propulsion.specific_impulse
        prop_mass = propulsion.propellant_mass

        available = self.tsiolkovsky_delta_v(isp, dry_mass, prop_mass)
        deorbit_dv = self.deorbit_delta_v(altitude)
        drag_dv = self.drag_delta_v(altitude, ballistic_coeff)

        if prop_mass > 0.0 and dry_mass > 0.0:
            mass_ratio = (dry_mass + prop_mass) / dry_mass
        else:
            mass_ratio = 1.0

        remaining = max(0.0, prop_mass)
        lines = []
        for maneuver in maneuvers:
            dv = deorbit_dv if maneuver.kind is ManeuverKind.DEORBIT else maneuver.delta_v
            if maneuver.per_year:
                dv *= lifetime_years

            needed = self.propellant_mass(dv, isp, dry_mass)
            remaining = max(0.0, remaining - min(needed, remaining))
            lines.append(BudgetLine(maneuver.id, maneuver.name, dv, needed, remaining))

        subtotal = sum(line.delta_v for line in lines)
        margin_dv = subtotal * MARGIN_FRACTION
        margin_prop = self.propellant_mass(margin_dv, isp, dry_mass)
        remaining = max(0.0, remaining - min(margin_prop, remaining))
        lines.append(BudgetLine('margin', 'Margin (10%)', margin_dv, margin_prop, remaining))

        total_required = subtotal + margin_dv
        margin = available - total_required
        margin_percent = margin / available if available > 0.0 else -1.0

        total_prop = self.propellant_mass(total_required, isp, dry_mass)
        result = DeltaVBudgetResult(
            available_delta_v=available,
            deorbit_delta_v=deorbit_dv,
            drag_delta_v_per_year=drag_dv,
            breakdown=tuple(lines),
            total_required_delta_v=total_required,
            margin_delta_v=margin,
            margin_percent=margin_percent,
            margin_status=classify_margin(margin_percent),
            propellant_remaining=max(0.0, prop_mass - total_prop),
            mass_ratio=mass_ratio,
        )
        logger.info(
            "Delta-V budget: available=%.1f m/s, required=%.1f m/s, margin=%.1f%% (%s)",
            available, total_required, 100.0 * margin_percent,
            result.margin_status.value,
        )
        return result

    def __repr__(self) -> str:
        return "ManeuverPlanner()"


def budget_to_dataframe(result: DeltaVBudgetResult) -> pd.DataFrame:
    """Tabulate the budget breakdown, one row per line item."""
    frame = pd.DataFrame(
        [(line.id, line.name, line.delta_v, line.propellant, line.remaining_propellant)
         for line in result.breakdown],
        columns=['id', 'name', 'delta_v_ms', 'propellant_kg', 'remaining_kg'],
    )
    frame['share'] = np.where(
        result.total_required_delta_v > 0.0,
        frame['delta_v_ms'] / max(result.total_required_delta_v, 1e-300),
        0.0,
    )
    return frame
