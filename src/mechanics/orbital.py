"""
Orbital Elements Solver
=======================
Converts classical Keplerian elements plus an epoch into Cartesian state.

Pipeline for ``initial_conditions(t)``:
---------------------------------------
1. Mean anomaly        M = 2π/T · (t - Tp)
2. Eccentric anomaly   E, root of f(E) = E + e·sin(E) - M, from a fixed
                       count of iterations x ← f(x)/f'(x) + x starting at M
3. True anomaly        v = 2·atan( sqrt((1+e)/(1-e)) · tan(E/2) )
4. Radius              r = a(1 - e²) / (1 + e·cos v)
5. Speed (vis-viva)    s = sqrt(μ (2/r - 1/a)),   μ = 4π²a³/T²
6. Directions          unit vectors built from i, Ω, ω and (ω + v)

The iteration count is fixed and there is no convergence test. Degenerate
elements (e >= 1, a == 0, T == 0) are not rejected; they produce NaN/Inf.
All arithmetic is done on numpy float64 with floating-point warnings
silenced so that such inputs propagate instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Tuple

import numpy as np
from scipy.spatial.transform import Rotation

from .vector import Vector3


KEPLER_ITERATIONS = 100


# =============================================================================
# SCALAR HELPERS
# =============================================================================

def newton_iterations(
    f: Callable[[float], float],
    f_prime: Callable[[float], float],
    x0: float,
    iterations: int
) -> float:
    """
    Run a fixed number of root-finding updates ``x ← f(x)/f'(x) + x``.

    Args:
        f: Function whose root is sought
        f_prime: Derivative of ``f``
        x0: Starting point
        iterations: Exact number of updates to perform

    Returns:
        Final iterate
    """
    xn = x0
    for _ in range(iterations):
        xn = f(xn) / f_prime(xn) + xn
    return xn


def solve_eccentric_anomaly(
    mean_anomaly: float,
    eccentricity: float,
    iterations: int = KEPLER_ITERATIONS
) -> float:
    """
    Eccentric anomaly for a mean anomaly, starting the iteration at M.

    Args:
        mean_anomaly: Mean anomaly M (rad)
        eccentricity: Orbital eccentricity e

    Returns:
        Eccentric anomaly E (rad)
    """
    M = np.float64(mean_anomaly)
    e = np.float64(eccentricity)

    def f(E):
        return E + e * np.sin(E) - M

    def f_prime(E):
        return 1 + e * np.cos(E)

    with np.errstate(all="ignore"):
        return newton_iterations(f, f_prime, M, iterations)


def true_anomaly_from_eccentric(eccentric_anomaly: float, eccentricity: float) -> float:
    """True anomaly v from eccentric anomaly E."""
    e = np.float64(eccentricity)
    with np.errstate(all="ignore"):
        return 2 * np.arctan(np.sqrt((1.0 + e) / (1.0 - e)) * np.tan(np.float64(eccentric_anomaly) / 2.0))


def orbit_radius(true_anomaly: float, semimajor_axis: float, eccentricity: float) -> float:
    """Conic radius r = a(1 - e²) / (1 + e·cos v)."""
    a = np.float64(semimajor_axis)
    e = np.float64(eccentricity)
    with np.errstate(all="ignore"):
        return a * (1.0 - e * e) / (1 + e * np.cos(np.float64(true_anomaly)))


def vis_viva_speed(mu: float, radius: float, semimajor_axis: float) -> float:
    """Orbital speed from the vis-viva relation."""
    with np.errstate(all="ignore"):
        return np.sqrt(np.float64(mu) * ((2.0 / np.float64(radius)) - (1.0 / np.float64(semimajor_axis))))


# =============================================================================
# ORBITAL ELEMENTS
# =============================================================================

@dataclass(frozen=True)
class OrbitalElements:
    """
    Classical orbital elements of one body.

    Angles are in radians; time units are whatever the scenario uses, as long
    as ``pericenter_epoch``, ``period`` and the query time agree.

    Attributes:
        eccentricity: e
        semimajor_axis: a
        inclination: i
        longitude_of_ascending_node: Ω
        argument_of_periapsis: ω
        pericenter_epoch: Tp, time of pericenter passage
        period: T, orbital period
    """
    eccentricity: float
    semimajor_axis: float
    inclination: float
    longitude_of_ascending_node: float
    argument_of_periapsis: float
    pericenter_epoch: float
    period: float

    @property
    def gravitational_parameter(self) -> float:
        """μ = 4π²a³/T², implied by Kepler's third law."""
        a = np.float64(self.semimajor_axis)
        T = np.float64(self.period)
        with np.errstate(all="ignore"):
            return float(4 * np.pi * np.pi * a * a * a / (T * T))

    # -------------------------------------------------------------------------
    # Anomalies
    # -------------------------------------------------------------------------

    def mean_anomaly(self, t: float) -> float:
        """Mean anomaly M(t) = 2π/T · (t - Tp)."""
        with np.errstate(all="ignore"):
            return float(2.0 * np.pi / np.float64(self.period) * (t - self.pericenter_epoch))

    def eccentric_anomaly(self, t: float) -> float:
        """Eccentric anomaly at time t."""
        return float(solve_eccentric_anomaly(self.mean_anomaly(t), self.eccentricity))

    def true_anomaly(self, t: float) -> float:
        """True anomaly at time t."""
        return float(true_anomaly_from_eccentric(self.eccentric_anomaly(t), self.eccentricity))

    def radius(self, t: float) -> float:
        """Distance from the focus at time t."""
        return float(orbit_radius(self.true_anomaly(t), self.semimajor_axis, self.eccentricity))

    def speed(self, t: float) -> float:
        """Orbital speed at time t."""
        return float(vis_viva_speed(self.gravitational_parameter, self.radius(t), self.semimajor_axis))

    # -------------------------------------------------------------------------
    # State vectors
    # -------------------------------------------------------------------------

    def initial_conditions(self, t: float) -> Tuple[Vector3, Vector3]:
        """
        Cartesian position and velocity at time t.

        Args:
            t: Epoch at which the state is wanted

        Returns:
            (position, velocity) in the inertial frame centred on the focus
        """
        e = self.eccentricity
        a = self.semimajor_axis
        I = self.inclination
        O = self.longitude_of_ascending_node
        W = self.argument_of_periapsis

        M = self.mean_anomaly(t)
        E = solve_eccentric_anomaly(M, e)
        v = true_anomaly_from_eccentric(E, e)

        with np.errstate(all="ignore"):
            pos_unit = Vector3(
                float(np.cos(O) * np.cos(W + v) - np.sin(O) * np.cos(I) * np.sin(W + v)),
                float(np.sin(O) * np.cos(W + v) + np.cos(O) * np.cos(I) * np.sin(W + v)),
                float(np.sin(I) * np.sin(W + v)),
            ).normalized()
            vel_unit = Vector3(
                float(-np.cos(O) * np.sin(W + v) - np.sin(O) * np.cos(I) * np.cos(W + v)),
                float(-np.sin(O) * np.sin(W + v) + np.cos(O) * np.cos(I) * np.cos(W + v)),
                float(np.sin(I) * np.cos(W + v)),
            ).normalized()

        r = float(orbit_radius(v, a, e))
        speed = float(vis_viva_speed(self.gravitational_parameter, r, a))
        return pos_unit * r, vel_unit * speed

    def perifocal_position(self, t: float) -> Vector3:
        """Position in the orbital plane, x-axis toward pericenter."""
        v = self.true_anomaly(t)
        r = self.radius(t)
        return Vector3(r * float(np.cos(v)), r * float(np.sin(v)), 0.0)

    def perifocal_velocity(self, t: float) -> Vector3:
        """Velocity in the orbital plane, from the eccentric anomaly."""
        E = self.eccentric_anomaly(t)
        e = np.float64(self.eccentricity)
        with np.errstate(all="ignore"):
            scale = float(np.sqrt(self.gravitational_parameter * self.semimajor_axis) / self.radius(t))
            return scale * Vector3(
                float(-np.sin(E)),
                float(np.sqrt(1 - e * e) * np.cos(E)),
                0.0,
            )

    def to_inertial(self, vec: Vector3) -> Vector3:
        """
        Rotate a perifocal vector into the inertial frame.

        R = Rz(Ω) · Rx(i) · Rz(ω), i.e. intrinsic Z-X-Z Euler angles.
        """
        rotation = Rotation.from_euler(
            "ZXZ",
            [self.longitude_of_ascending_node, self.inclination, self.argument_of_periapsis],
        )
        return Vector3.from_array(rotation.apply(vec.to_array()))
