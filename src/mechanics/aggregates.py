"""
Aggregate Queries
=================
Whole-system summaries recomputed on demand from the current body state.

Nothing here is cached and nothing is validated: an empty or massless system
yields NaN from ``center_of_mass``, matching the permissive numeric policy of
the rest of the core.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from .bodies import Body
from .vector import Vector3


def total_mass(bodies: Iterable[Body]) -> float:
    """Sum of all masses."""
    return sum(body.mass for body in bodies)


def center_of_mass(bodies: Iterable[Body]) -> Vector3:
    """
    Mass-weighted mean position Σ(m·x) / Σm.

    Args:
        bodies: Bodies to average over

    Returns:
        Center of mass position
    """
    mx = 0.0
    my = 0.0
    mz = 0.0
    mass = 0.0
    for body in bodies:
        mx += body.mass * body.position.x
        my += body.mass * body.position.y
        mz += body.mass * body.position.z
        mass += body.mass
    return Vector3(mx, my, mz) / mass


def linear_momentum(bodies: Iterable[Body]) -> Vector3:
    """Total linear momentum Σ m·v."""
    total = Vector3.zero()
    for body in bodies:
        total += body.momentum
    return total


def angular_momentum(bodies: Iterable[Body]) -> Vector3:
    """Total angular momentum about the origin, Σ x × (m·v)."""
    total = Vector3.zero()
    for body in bodies:
        total += body.position.cross(body.momentum)
    return total


def kinetic_energy(bodies: Iterable[Body]) -> float:
    """Total kinetic energy."""
    return sum(body.kinetic_energy for body in bodies)


def potential_energy(g: float, bodies: Sequence[Body]) -> float:
    """
    Gravitational potential energy summed over unordered pairs.

    Coincident pairs are skipped, as in the acceleration sum.

    Args:
        g: Gravitational constant
        bodies: Bodies in the system

    Returns:
        Σ_{i<j} -g·m_i·m_j / r_ij
    """
    energy = 0.0
    for i, a in enumerate(bodies):
        for b in bodies[i + 1:]:
            r = (b.position - a.position).length
            if r == 0:
                continue
            energy -= g * a.mass * b.mass / r
    return energy


def total_energy(g: float, bodies: Sequence[Body]) -> float:
    """Kinetic plus potential energy."""
    return kinetic_energy(bodies) + potential_energy(g, bodies)
