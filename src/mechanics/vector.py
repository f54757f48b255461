"""
Vector Algebra
==============
Double-precision 3D vector value type used by every physics routine.

Vector3 is immutable: each operation returns a new value. Division by a
zero scalar follows IEEE-754 (``0/0 -> nan``, ``x/0 -> ±inf``) instead of
raising, so normalizing the zero vector silently yields NaN components.
Callers that must avoid NaN (the gravity sum, for instance) check the
length before normalizing.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class Vector3:
    """
    Immutable 3-component vector.

    Attributes:
        x: X component
        y: Y component
        z: Z component
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def zero(cls) -> Vector3:
        """The zero vector."""
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_sequence(cls, values: Iterable[float]) -> Vector3:
        """
        Create a vector from any 3-item iterable.

        Args:
            values: Iterable holding exactly three numbers

        Returns:
            New vector
        """
        x, y, z = values
        return cls(float(x), float(y), float(z))

    @classmethod
    def from_array(cls, arr: NDArray) -> Vector3:
        """Create a vector from a numpy array of shape (3,)."""
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    def to_array(self) -> NDArray:
        """Convert to numpy float64 array [x, y, z]."""
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def __mul__(self, s: float) -> Vector3:
        return Vector3(self.x * s, self.y * s, self.z * s)

    def __rmul__(self, s: float) -> Vector3:
        return self * s

    def __truediv__(self, s: float) -> Vector3:
        if s == 0:
            with np.errstate(divide="ignore", invalid="ignore"):
                return Vector3.from_array(self.to_array() / np.float64(s))
        return Vector3(self.x / s, self.y / s, self.z / s)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    # -------------------------------------------------------------------------
    # Products and norms
    # -------------------------------------------------------------------------

    def dot(self, other: Vector3) -> float:
        """Scalar (dot) product."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector3) -> Vector3:
        """
        Vector (cross) product ``self × other``.

        Args:
            other: Right-hand operand

        Returns:
            Vector perpendicular to both operands
        """
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    @property
    def length(self) -> float:
        """Euclidean length."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> Vector3:
        """
        Unit vector in the same direction.

        The zero vector normalizes to NaN components; no exception is raised.
        """
        return self / self.length

    def is_finite(self) -> bool:
        """True when no component is NaN or infinite."""
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)

    def __str__(self) -> str:
        return f"<{self.x}, {self.y}, {self.z}>"
