"""
Point-Mass Bodies
=================
Mutable point mass advanced in place by the integrator.

Mass is expected to be positive but is not checked: zero or negative masses
simply scale the forces they produce.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .vector import Vector3


@dataclass
class Body:
    """
    Point mass with position and velocity.

    Attributes:
        mass: Body mass (scenario units)
        position: Current position
        velocity: Current velocity
    """
    mass: float
    position: Vector3 = field(default_factory=Vector3.zero)
    velocity: Vector3 = field(default_factory=Vector3.zero)

    @property
    def momentum(self) -> Vector3:
        """Linear momentum m·v."""
        return self.velocity * self.mass

    @property
    def kinetic_energy(self) -> float:
        """Kinetic energy ½·m·|v|²."""
        return 0.5 * self.mass * self.velocity.dot(self.velocity)

    def copy(self) -> Body:
        """Independent copy (vectors are immutable, so a shallow copy suffices)."""
        return Body(self.mass, self.position, self.velocity)
