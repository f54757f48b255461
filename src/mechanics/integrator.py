"""
Gravity Integrator
==================
Pairwise Newtonian acceleration and the symplectic (semi-implicit) Euler step.

Mathematical Model:
-------------------
The acceleration felt at point p is

    a(p) = Σ_b  g · m_b / r_b² · (x_b - p) / r_b,      r_b = |x_b - p|

where bodies with r_b == 0 (the query body itself, or a coincident body)
are skipped. One step of size dt is

    1. v_i += a(x_i) · dt     for every body, using pre-step positions
    2. x_i += v_i · dt        for every body, using the new velocities

The two phases must not be fused: updating a position right after its
velocity changes the method and the trajectories it produces.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from .bodies import Body
from .vector import Vector3


def acceleration(g: float, p: Vector3, bodies: Iterable[Body]) -> Vector3:
    """
    Gravitational acceleration at a point due to a set of bodies.

    Args:
        g: Gravitational constant (scenario units)
        p: Query point
        bodies: Bodies whose attraction is summed

    Returns:
        Acceleration vector at ``p``
    """
    total = Vector3.zero()
    for body in bodies:
        x = body.position - p
        r = x.length
        if r == 0:
            continue
        total += x.normalized() * ((g * body.mass) / (r * r))
    return total


def step(g: float, dt: float, bodies: Sequence[Body]) -> None:
    """
    Advance all bodies by one time step in place.

    Velocities are updated first for every body; positions are untouched
    during that phase, so every acceleration sees the pre-step snapshot.
    Positions are then advanced with the new velocities.

    Args:
        g: Gravitational constant
        dt: Time step
        bodies: Bodies to advance (mutated)
    """
    for body in bodies:
        a = acceleration(g, body.position, bodies)
        body.velocity += a * dt

    for body in bodies:
        body.position += body.velocity * dt
