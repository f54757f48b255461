"""
Vector Field Sampler
====================
Fixed 3D lattice of sample points carrying one vector each.

Used to display the instantaneous gravitational acceleration field. The
lattice is built with inclusive, accumulating bounds on each axis
(``v = min; v <= max; v += spacing``), so its size is the product of the
per-axis sample counts. Refreshing it never touches the bodies.
"""

from __future__ import annotations

from typing import Callable, Iterable, List, NamedTuple

import numpy as np
from numpy.typing import NDArray

from .bodies import Body
from .integrator import acceleration
from .vector import Vector3


class FieldSample(NamedTuple):
    """One lattice point and its current vector."""
    position: Vector3
    value: Vector3


def _axis_values(v_min: float, v_max: float, spacing: float) -> List[float]:
    values = []
    v = v_min
    while v <= v_max:
        values.append(v)
        v += spacing
    return values


class VectorField:
    """
    Lattice of sampled vectors over an axis-aligned box.

    Usage:
        field = VectorField(-1, 1, -1, 1, -1, 1, spacing=0.25)
        field.update_from_bodies(g=1.0, bodies=bodies)
        for sample in field.samples:
            draw_arrow(sample.position, sample.value)
    """

    def __init__(
        self,
        x_min: float,
        x_max: float,
        y_min: float,
        y_max: float,
        z_min: float,
        z_max: float,
        spacing: float
    ):
        """
        Build the lattice with every vector set to zero.

        Args:
            x_min, x_max, y_min, y_max, z_min, z_max: Inclusive box bounds
            spacing: Distance between neighbouring samples on every axis

        Raises:
            ValueError: If spacing is not positive
        """
        if spacing <= 0:
            raise ValueError(f"spacing must be > 0, got {spacing}")

        self.spacing = spacing
        self.samples: List[FieldSample] = []

        zero = Vector3.zero()
        for x in _axis_values(x_min, x_max, spacing):
            for y in _axis_values(y_min, y_max, spacing):
                for z in _axis_values(z_min, z_max, spacing):
                    self.samples.append(FieldSample(Vector3(x, y, z), zero))

    def __len__(self) -> int:
        return len(self.samples)

    def update_vectors(self, mapping: Callable[[Vector3, Vector3], Vector3]) -> None:
        """
        Replace every sample value with ``mapping(position, previous_value)``.

        Args:
            mapping: Function of the sample position and its current value
        """
        self.samples = [
            FieldSample(sample.position, mapping(sample.position, sample.value))
            for sample in self.samples
        ]

    def update_from_bodies(self, g: float, bodies: Iterable[Body]) -> None:
        """Sample the gravitational acceleration of ``bodies`` at every point."""
        bodies = list(bodies)
        self.update_vectors(lambda pos, _: acceleration(g, pos, bodies))

    def positions_array(self) -> NDArray:
        """Sample positions as an (N, 3) array."""
        return np.array([tuple(s.position) for s in self.samples], dtype=np.float64).reshape(-1, 3)

    def values_array(self) -> NDArray:
        """Sample values as an (N, 3) array."""
        return np.array([tuple(s.value) for s in self.samples], dtype=np.float64).reshape(-1, 3)
