"""
Mechanics Package
=================
Point-mass gravity core: vector algebra, bodies, the symplectic integrator,
the orbital-elements solver, field sampling, aggregate queries and the
simulation driver.
"""

from .vector import Vector3
from .bodies import Body
from .integrator import acceleration, step
from .orbital import (
    KEPLER_ITERATIONS,
    OrbitalElements,
    newton_iterations,
    solve_eccentric_anomaly,
    true_anomaly_from_eccentric,
    orbit_radius,
    vis_viva_speed,
)
from .vector_field import FieldSample, VectorField
from .aggregates import (
    total_mass,
    center_of_mass,
    linear_momentum,
    angular_momentum,
    kinetic_energy,
    potential_energy,
    total_energy,
)
from .simulator import BodyLabel, GravitySimulator, SimulationConfig

__all__ = [
    "Vector3",
    "Body",
    "acceleration",
    "step",
    "KEPLER_ITERATIONS",
    "OrbitalElements",
    "newton_iterations",
    "solve_eccentric_anomaly",
    "true_anomaly_from_eccentric",
    "orbit_radius",
    "vis_viva_speed",
    "FieldSample",
    "VectorField",
    "total_mass",
    "center_of_mass",
    "linear_momentum",
    "angular_momentum",
    "kinetic_energy",
    "potential_energy",
    "total_energy",
    "BodyLabel",
    "GravitySimulator",
    "SimulationConfig",
]
