"""
===============================================================================
MISSION DESIGN - Lambert Solver (Universal Variable Formulation)
===============================================================================
Given two position vectors r1, r2 and the time of flight between them, find
the departure and arrival velocities of the connecting two-body arc.

The universal-variable method (Bate, Mueller & White; Vallado Algorithm 58)
parameterises the transfer by z = (delta E)^2, which is continuous across
elliptic (z > 0), parabolic (z = 0) and hyperbolic (z < 0) arcs:

    A  = +/- sqrt(r1 r2 (1 + cos(dnu)))
    y  = r1 + r2 + A (z S(z) - 1) / sqrt(C(z))
    x  = sqrt(y / C(z))
    t  = (x^3 S(z) + A sqrt(y)) / sqrt(mu)

Newton iteration on z drives t(z) to the requested time of flight.  The
derivative dt/dz is taken by a forward finite difference, each Newton step
is clamped to +/-5 and z is clamped to [-50, 200] (single revolution).
Iteration stops when |t - tof| < 1e-8 s; a solve that cannot reach that
within 100 iterations is reported as NOT_CONVERGED.

A failed solve is a *value*, not an exception: grid sweeps call the solver
once per cell and simply skip cells whose status is not CONVERGED.

References
----------
    [1] Vallado, "Fundamentals of Astrodynamics and Applications", 4th ed.,
        Algorithm 58.
    [2] Curtis, "Orbital Mechanics for Engineering Students", 4th ed.,
        Algorithm 5.2.
    [3] Bate, Mueller & White, "Fundamentals of Astrodynamics", Ch. 5.

===============================================================================
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

SINGULAR_A_THRESHOLD = 1e-10
TOF_TOLERANCE = 1e-8                # s
MAX_ITERATIONS = 100
FD_STEP = 1e-4
MAX_Z_STEP = 5.0
Z_MIN = -50.0
Z_MAX = 200.0
Z_RECOVERY_STEP = 0.5
STUMPFF_EPS = 1e-6


class LambertStatus(Enum):
    """Outcome of a Lambert solve."""
    CONVERGED = 'converged'
    SINGULAR_GEOMETRY = 'singular_geometry'     # transfer angle ~180 deg
    NOT_CONVERGED = 'not_converged'
    INVALID_INPUT = 'invalid_input'


@dataclass(frozen=True, eq=False)
class LambertSolution:
    """
    Result of a Lambert query.

    Attributes
    ----------
    status : LambertStatus
        CONVERGED when v1/v2 are valid.
    v1, v2 : np.ndarray or None
        Departure and arrival velocity (km/s), None unless converged.
    iterations : int
        Newton iterations used.
    z : float
        Final universal variable.
    """
    status: LambertStatus
    v1: Optional[np.ndarray] = None
    v2: Optional[np.ndarray] = None
    iterations: int = 0
    z: float = float('nan')

    @property
    def converged(self) -> bool:
        return self.status is LambertStatus.CONVERGED

    def __bool__(self) -> bool:
        return self.converged


# =============================================================================
# STUMPFF FUNCTIONS
# =============================================================================

def stumpff(z: float) -> Tuple[float, float]:
    """
    Stumpff functions C(z) = c2 and S(z) = c3.

        z > 0:  c2 = (1 - cos(sqrt(z))) / z
                c3 = (sqrt(z) - sin(sqrt(z))) / z^(3/2)
        z < 0:  c2 = (cosh(sqrt(-z)) - 1) / (-z)
                c3 = (sinh(sqrt(-z)) - sqrt(-z)) / (-z)^(3/2)
        |z| <= 1e-6:  c2 = 1/2,  c3 = 1/6

    Returns
    -------
    (c2, c3)
    """
    if z > STUMPFF_EPS:
        sz = math.sqrt(z)
        return (1.0 - math.cos(sz)) / z, (sz - math.sin(sz)) / (z * sz)
    if z < -STUMPFF_EPS:
        sz = math.sqrt(-z)
        return (math.cosh(sz) - 1.0) / (-z), (math.sinh(sz) - sz) / ((-z) * sz)
    return 0.5, 1.0 / 6.0


def _y_of_z(z: float, r1: float, r2: float, A: float) -> Optional[float]:
    """y(z), or None where it leaves the valid domain (y < 0 or c2 ~ 0)."""
    c2, c3 = stumpff(z)
    if c2 <= 1e-12:
        return None
    y = r1 + r2 + A * (z * c3 - 1.0) / math.sqrt(c2)
    if y < 0.0:
        return None
    return y


def _tof_of_z(z: float, r1: float, r2: float, A: float,
              sqrt_mu: float) -> Optional[Tuple[float, float]]:
    """(time of flight, y) at z, or None outside the valid domain."""
    y = _y_of_z(z, r1, r2, A)
    if y is None:
        return None
    c2, c3 = stumpff(z)
    x = math.sqrt(y / c2)
    return (x ** 3 * c3 + A * math.sqrt(y)) / sqrt_mu, y


# =============================================================================
# SOLVER
# =============================================================================

def solve_lambert(r1_vec, r2_vec, tof: float, mu: float,
                  prograde: bool = True) -> LambertSolution:
    """
    Solve Lambert's problem for a single-revolution transfer.

    Parameters
    ----------
    r1_vec, r2_vec : array_like
        Departure and arrival position vectors (km).
    tof : float
        Time of flight (s), > 0.
    mu : float
        Gravitational parameter of the central body (km^3/s^2).
    prograde : bool
        Short-way / long-way selector relative to the +z orbit normal.
        True selects the transfer moving counter-clockwise about +z: the
        short way when (r1 x r2).z >= 0, the long way otherwise.  False
        selects the opposite arc.

    Returns
    -------
    LambertSolution
        CONVERGED with v1/v2, or SINGULAR_GEOMETRY (|A| < 1e-10, transfer
        angle of 180 deg), NOT_CONVERGED (100 iterations) or INVALID_INPUT.
    """
    r1_vec = np.asarray(r1_vec, dtype=np.float64)
    r2_vec = np.asarray(r2_vec, dtype=np.float64)
    r1 = float(np.linalg.norm(r1_vec))
    r2 = float(np.linalg.norm(r2_vec))

    if not (tof > 0.0 and mu > 0.0 and r1 > 0.0 and r2 > 0.0):
        logger.debug("Lambert: invalid input tof=%s mu=%s r1=%s r2=%s",
                     tof, mu, r1, r2)
        return LambertSolution(LambertStatus.INVALID_INPUT)

    cos_dnu = float(np.clip(np.dot(r1_vec, r2_vec) / (r1 * r2), -1.0, 1.0))
    cross_z = float(np.cross(r1_vec, r2_vec)[2])

    sign = 1.0 if cross_z >= 0.0 else -1.0
    if not prograde:
        sign = -sign
    A = sign * math.sqrt(r1 * r2 * (1.0 + cos_dnu))

    if abs(A) < SINGULAR_A_THRESHOLD:
        logger.debug("Lambert: singular 180 deg transfer geometry")
        return LambertSolution(LambertStatus.SINGULAR_GEOMETRY)

    sqrt_mu = math.sqrt(mu)
    z = 0.0

    for iteration in range(1, MAX_ITERATIONS + 1):
        current = _tof_of_z(z, r1, r2, A, sqrt_mu)
        if current is None:
            z = min(z + Z_RECOVERY_STEP, Z_MAX)
            continue
        t, y = current

        residual = t - tof
        if abs(residual) < TOF_TOLERANCE:
            f = 1.0 - y / r1
            g = A * math.sqrt(y / mu)
            g_dot = 1.0 - y / r2
            v1 = (r2_vec - f * r1_vec) / g
            v2 = (g_dot * r2_vec - r1_vec) / g
            return LambertSolution(LambertStatus.CONVERGED, v1, v2,
                                   iterations=iteration, z=z)

        ahead = _tof_of_z(z + FD_STEP, r1, r2, A, sqrt_mu)
        if ahead is not None:
            dt_dz = (ahead[0] - t) / FD_STEP
        else:
            behind = _tof_of_z(z - FD_STEP, r1, r2, A, sqrt_mu)
            if behind is None:
                z = min(z + Z_RECOVERY_STEP, Z_MAX)
                continue
            dt_dz = (t - behind[0]) / FD_STEP

        if dt_dz == 0.0 or not math.isfinite(dt_dz):
            break

        step = max(-MAX_Z_STEP, min(MAX_Z_STEP, -residual / dt_dz))
        z = max(Z_MIN, min(Z_MAX, z + step))

    logger.debug("Lambert: no convergence after %d iterations (z=%.4f)",
                 iteration, z)
    return LambertSolution(LambertStatus.NOT_CONVERGED, iterations=iteration, z=z)
