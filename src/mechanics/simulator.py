"""
Gravity Simulation Driver
=========================
Owns the body collection and advances it once per tick.

The driver is the only long-lived holder of the bodies. Each tick it:
- runs ``steps_per_tick`` integrator steps (dt is 0 while paused),
- extends the display trails,
- refreshes the acceleration field and center of mass when shown,
- notifies tick subscribers.

Display-only data (name, color, trail flag) lives in ``BodyLabel`` records
kept index-aligned with ``bodies``; the physics core never sees them.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Optional, Tuple

from loguru import logger

from . import aggregates
from .bodies import Body
from .constants import (
    DEFAULT_FIELD_BOUNDS,
    DEFAULT_FIELD_SPACING,
    DEFAULT_GRAVITATIONAL_CONSTANT,
    DEFAULT_STEPS_PER_TICK,
    DEFAULT_TIME_STEP,
    DEFAULT_TRAIL_LENGTH,
)
from .integrator import acceleration, step
from .vector import Vector3
from .vector_field import VectorField


@dataclass
class SimulationConfig:
    """
    Simulation-wide settings owned by the driver.

    Attributes:
        gravitational_constant: G used by the integrator (scenario units)
        time_step: Integrator dt
        steps_per_tick: Integrator steps per tick
        paused: When True every tick steps with dt = 0
        trail_length: Maximum stored trail points per body (0 disables trails)
        show_acceleration_field: Refresh the field every tick
        show_center_of_mass: Refresh the cached center of mass every tick
        field_bounds: (x_min, x_max, y_min, y_max, z_min, z_max)
        field_spacing: Lattice spacing of the acceleration field
        strict: Raise FloatingPointError when a step produces NaN/Inf
    """
    gravitational_constant: float = DEFAULT_GRAVITATIONAL_CONSTANT
    time_step: float = DEFAULT_TIME_STEP
    steps_per_tick: int = DEFAULT_STEPS_PER_TICK
    paused: bool = False
    trail_length: int = DEFAULT_TRAIL_LENGTH
    show_acceleration_field: bool = False
    show_center_of_mass: bool = False
    field_bounds: Tuple[float, float, float, float, float, float] = DEFAULT_FIELD_BOUNDS
    field_spacing: float = DEFAULT_FIELD_SPACING
    strict: bool = False

    def validate(self) -> None:
        """
        Check driver settings.

        Raises:
            ValueError: On a setting the driver cannot run with
        """
        if self.steps_per_tick <= 0:
            raise ValueError("steps_per_tick must be > 0")
        if self.trail_length < 0:
            raise ValueError("trail_length must be >= 0")
        if self.field_spacing <= 0:
            raise ValueError("field_spacing must be > 0")
        if len(self.field_bounds) != 6:
            raise ValueError("field_bounds must hold six values")


@dataclass
class BodyLabel:
    """Display-only attributes of a body."""
    name: str = ""
    color: str = "#ffffff"
    show_trail: bool = True


class GravitySimulator:
    """
    N-body gravity simulator.

    Usage:
        simulator = GravitySimulator(SimulationConfig(time_step=0.01))
        simulator.add_body(Body(1.0), name="Sun")
        simulator.add_body(Body(0.01, Vector3(0, 1, 0), Vector3(1, 0, 0)), name="Planet")

        for _ in range(1000):
            simulator.tick()
        print(simulator.center_of_mass())
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        """
        Initialize an empty simulator.

        Args:
            config: Driver settings (defaults if omitted)
        """
        self.config = config or SimulationConfig()
        self.config.validate()

        self._bodies: List[Body] = []
        self._labels: List[BodyLabel] = []
        self._trails: List[Deque[Vector3]] = []

        self._time = 0.0
        self._tick_count = 0

        self._acceleration_field: Optional[VectorField] = None
        self._center_of_mass: Optional[Vector3] = None

        self._subscribers: List[Callable[[GravitySimulator], None]] = []

        logger.info(
            f"Gravity simulator initialized (G={self.config.gravitational_constant}, "
            f"dt={self.config.time_step}, steps/tick={self.config.steps_per_tick})"
        )

    # -------------------------------------------------------------------------
    # Bodies
    # -------------------------------------------------------------------------

    @property
    def bodies(self) -> List[Body]:
        """Live body list, in insertion order."""
        return self._bodies

    @property
    def labels(self) -> List[BodyLabel]:
        """Display labels, index-aligned with ``bodies``."""
        return self._labels

    def add_body(
        self,
        body: Body,
        name: str = "",
        color: str = "#ffffff",
        show_trail: bool = True
    ) -> int:
        """
        Add a body to the system.

        Args:
            body: Body to take ownership of
            name: Display name
            color: Display color
            show_trail: Whether to keep a trail for this body

        Returns:
            Stable index of the body
        """
        self._bodies.append(body)
        self._labels.append(BodyLabel(name=name, color=color, show_trail=show_trail))
        self._trails.append(deque(maxlen=self.config.trail_length))

        index = len(self._bodies) - 1
        logger.debug(f"Added body #{index} '{name}' mass={body.mass} at {body.position}")
        return index

    # -------------------------------------------------------------------------
    # Time evolution
    # -------------------------------------------------------------------------

    @property
    def time(self) -> float:
        """Accumulated simulation time."""
        return self._time

    @property
    def tick_count(self) -> int:
        """Number of completed ticks."""
        return self._tick_count

    @property
    def effective_time_step(self) -> float:
        """dt actually applied this tick (0 while paused)."""
        return 0.0 if self.config.paused else self.config.time_step

    @property
    def time_scale(self) -> float:
        """Simulated time advanced per tick."""
        return self.effective_time_step * self.config.steps_per_tick

    def tick(self) -> None:
        """
        Advance the simulation by one tick.

        Raises:
            FloatingPointError: In strict mode, when a body state becomes non-finite
        """
        g = self.config.gravitational_constant
        dt = self.effective_time_step

        for _ in range(self.config.steps_per_tick):
            step(g, dt, self._bodies)
            self._time += dt
            if self.config.strict:
                self._check_finite()

        self._tick_count += 1

        for body, label, trail in zip(self._bodies, self._labels, self._trails):
            if label.show_trail:
                trail.append(body.position)

        if self.config.show_acceleration_field:
            if self._acceleration_field is None:
                self.regenerate_acceleration_field()
            self._acceleration_field.update_from_bodies(g, self._bodies)

        if self.config.show_center_of_mass:
            self._center_of_mass = self.center_of_mass()

        logger.trace(f"Tick {self._tick_count} complete, t={self._time:.6g}")
        self._notify_subscribers()

    def run(
        self,
        n_ticks: int,
        callback: Optional[Callable[[GravitySimulator], None]] = None,
        should_stop: Optional[Callable[[], bool]] = None
    ) -> int:
        """
        Run a number of ticks.

        Args:
            n_ticks: Ticks to run
            callback: Optional function called after each tick
            should_stop: Optional predicate checked before each tick

        Returns:
            Number of ticks actually run
        """
        completed = 0
        for _ in range(n_ticks):
            if should_stop is not None and should_stop():
                logger.info(f"Run stopped early after {completed} ticks")
                break
            self.tick()
            completed += 1
            if callback:
                callback(self)
        return completed

    def _check_finite(self) -> None:
        for index, body in enumerate(self._bodies):
            if not (body.position.is_finite() and body.velocity.is_finite()):
                name = self._labels[index].name
                raise FloatingPointError(
                    f"Body #{index} '{name}' has non-finite state at t={self._time}: "
                    f"position={body.position}, velocity={body.velocity}"
                )

    # -------------------------------------------------------------------------
    # Subscribers
    # -------------------------------------------------------------------------

    def subscribe(self, callback: Callable[[GravitySimulator], None]) -> None:
        """
        Subscribe to tick notifications.

        Args:
            callback: Function called with the simulator after every tick
        """
        self._subscribers.append(callback)
        logger.debug(f"Added tick subscriber, total: {len(self._subscribers)}")

    def unsubscribe(self, callback: Callable) -> None:
        """Remove a subscriber."""
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify_subscribers(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self)
            except Exception as e:
                logger.error(f"Tick subscriber error: {e}")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def acceleration_at(self, p: Vector3) -> Vector3:
        """Gravitational acceleration at an arbitrary point."""
        return acceleration(self.config.gravitational_constant, p, self._bodies)

    def center_of_mass(self) -> Vector3:
        """Current center of mass."""
        return aggregates.center_of_mass(self._bodies)

    @property
    def displayed_center_of_mass(self) -> Optional[Vector3]:
        """Center of mass as of the last tick with ``show_center_of_mass`` on."""
        return self._center_of_mass

    def total_energy(self) -> float:
        """Current kinetic plus potential energy."""
        return aggregates.total_energy(self.config.gravitational_constant, self._bodies)

    def trail(self, index: int) -> List[Vector3]:
        """Stored trail points of one body, oldest first."""
        return list(self._trails[index])

    def clear_trails(self) -> None:
        """Drop all stored trail points."""
        for trail in self._trails:
            trail.clear()

    # -------------------------------------------------------------------------
    # Acceleration field
    # -------------------------------------------------------------------------

    @property
    def acceleration_field(self) -> Optional[VectorField]:
        """Acceleration field lattice, if one has been built."""
        return self._acceleration_field

    def regenerate_acceleration_field(self) -> VectorField:
        """
        Rebuild the field lattice from the configured bounds and spacing.

        Returns:
            The new (zero-valued) field
        """
        x_min, x_max, y_min, y_max, z_min, z_max = self.config.field_bounds
        self._acceleration_field = VectorField(
            x_min, x_max, y_min, y_max, z_min, z_max, self.config.field_spacing
        )
        logger.info(f"Acceleration field regenerated with {len(self._acceleration_field)} vectors")
        return self._acceleration_field
