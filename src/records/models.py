"""
Records - Data Models
=====================
Pydantic models for the data boundary of the simulator.

Scenario records are what an external loader hands to the core; snapshot
records are what the core hands back to displays and recorders. Validation
here is structural only (types, vector arity, spacing > 0). Physically
meaningless numbers such as negative masses or e >= 1 pass through.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple, TYPE_CHECKING

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from mechanics import Body, OrbitalElements, Vector3
from mechanics import aggregates
from mechanics.constants import DEFAULT_FIELD_SPACING

if TYPE_CHECKING:
    from mechanics import GravitySimulator


Vec3 = Tuple[float, float, float]


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# SCENARIO RECORDS
# =============================================================================

class BodyRecord(_Record):
    """
    Body given directly by mass, position and velocity.
    """
    name: str = ""
    mass: float
    position: Vec3 = (0.0, 0.0, 0.0)
    velocity: Vec3 = (0.0, 0.0, 0.0)
    color: str = "#ffffff"
    show_trail: bool = Field(True, alias="showTrail")

    def to_body(self) -> Body:
        """Create the simulation body."""
        return Body(
            mass=self.mass,
            position=Vector3.from_sequence(self.position),
            velocity=Vector3.from_sequence(self.velocity),
        )


class OrbitalBodyRecord(_Record):
    """
    Body given by classical orbital elements.

    Angles are in radians. ``reference`` names the source of the elements
    and is informational only.
    """
    name: str = ""
    color: str = "#ffffff"
    show_trail: bool = Field(True, alias="showTrail")
    reference: str = ""
    mass: float

    e: float = Field(..., description="Eccentricity")
    a: float = Field(..., description="Semimajor axis")
    i: float = Field(0.0, description="Inclination")
    longitude_of_ascending_node: float = Field(
        0.0,
        validation_alias=AliasChoices("Ω", "Omega", "longitude_of_ascending_node"),
        serialization_alias="Ω",
    )
    argument_of_periapsis: float = Field(
        0.0,
        validation_alias=AliasChoices("ω", "omega", "argument_of_periapsis"),
        serialization_alias="ω",
    )
    pericenter_epoch: float = Field(0.0, alias="Tp")
    period: float = Field(..., alias="T")

    def to_elements(self) -> OrbitalElements:
        """Orbital elements of this body."""
        return OrbitalElements(
            eccentricity=self.e,
            semimajor_axis=self.a,
            inclination=self.i,
            longitude_of_ascending_node=self.longitude_of_ascending_node,
            argument_of_periapsis=self.argument_of_periapsis,
            pericenter_epoch=self.pericenter_epoch,
            period=self.period,
        )

    def to_body(self, t: float) -> Body:
        """
        Create the simulation body from its state at time ``t``.

        Args:
            t: Scenario initial time
        """
        position, velocity = self.to_elements().initial_conditions(t)
        return Body(mass=self.mass, position=position, velocity=velocity)


class VectorFieldSettings(_Record):
    """Bounds and spacing of the acceleration-field lattice."""
    x_min: float = Field(-1.0, alias="xMin")
    x_max: float = Field(1.0, alias="xMax")
    y_min: float = Field(-1.0, alias="yMin")
    y_max: float = Field(1.0, alias="yMax")
    z_min: float = Field(-1.0, alias="zMin")
    z_max: float = Field(1.0, alias="zMax")
    spacing: float = Field(DEFAULT_FIELD_SPACING, gt=0)

    @property
    def bounds(self) -> Tuple[float, float, float, float, float, float]:
        return (self.x_min, self.x_max, self.y_min, self.y_max, self.z_min, self.z_max)


class ScenarioRecord(_Record):
    """
    Complete scenario: global scalars plus both kinds of body records.

    ``scale`` multiplies positions in plots. ``initial_time`` is the epoch passed to every
    orbital body's ``initial_conditions``.
    """
    name: str = ""
    scale: float = 1.0
    initial_time: float = Field(0.0, alias="initialTime")
    time_step: Optional[float] = Field(None, alias="timeStep")
    gravitational_constant: Optional[float] = Field(None, alias="gravitationalConstant")
    bodies: List[BodyRecord] = Field(default_factory=list)
    orbital_bodies: List[OrbitalBodyRecord] = Field(default_factory=list, alias="orbitalBodies")
    vector_field: Optional[VectorFieldSettings] = Field(None, alias="vectorField")

    @property
    def body_count(self) -> int:
        return len(self.bodies) + len(self.orbital_bodies)


# =============================================================================
# SNAPSHOT RECORDS
# =============================================================================

class BodySnapshot(BaseModel):
    """State of one body at a point in time."""
    index: int
    name: str = ""
    mass: float
    position: Vec3
    velocity: Vec3

    @property
    def speed(self) -> float:
        return Vector3.from_sequence(self.velocity).length


class SystemSnapshot(BaseModel):
    """
    Complete system state at a point in simulation time.

    This is the unit recorded by the trajectory recorder and exported.
    """
    captured_at: datetime = Field(default_factory=datetime.now)
    time: float
    tick: int
    bodies: List[BodySnapshot] = Field(default_factory=list)
    center_of_mass: Vec3
    kinetic_energy: float
    potential_energy: float

    @property
    def total_energy(self) -> float:
        return self.kinetic_energy + self.potential_energy

    @classmethod
    def capture(cls, simulator: GravitySimulator) -> SystemSnapshot:
        """
        Snapshot the current state of a simulator.

        Args:
            simulator: Simulator to read (not modified)
        """
        bodies = simulator.bodies
        g = simulator.config.gravitational_constant
        return cls(
            time=simulator.time,
            tick=simulator.tick_count,
            bodies=[
                BodySnapshot(
                    index=index,
                    name=label.name,
                    mass=body.mass,
                    position=tuple(body.position),
                    velocity=tuple(body.velocity),
                )
                for index, (body, label) in enumerate(zip(bodies, simulator.labels))
            ],
            center_of_mass=tuple(aggregates.center_of_mass(bodies)),
            kinetic_energy=aggregates.kinetic_energy(bodies),
            potential_energy=aggregates.potential_energy(g, bodies),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return self.model_dump()
