"""
Records - Scenario Loader
=========================
Reads scenario files and builds a populated simulator from them.

Supported formats are JSON (``.json``) and YAML (``.yaml`` / ``.yml``); both
map onto ``ScenarioRecord``. Direct bodies are added first, then orbital
bodies, each group in file order, so body indices are stable across runs.
"""

from __future__ import annotations

import json
import math
from dataclasses import replace
from pathlib import Path
from typing import Optional, Union

import yaml
from loguru import logger

from mechanics import GravitySimulator, SimulationConfig
from .models import OrbitalBodyRecord, ScenarioRecord


def load_scenario(path: Union[str, Path]) -> ScenarioRecord:
    """
    Load a scenario file.

    Args:
        path: Path to a .json, .yaml or .yml file

    Returns:
        Parsed scenario

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the suffix is not a supported format
        pydantic.ValidationError: If the content does not match the schema
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")

    suffix = path.suffix.lower()
    with open(path, "r", encoding="utf-8") as f:
        if suffix == ".json":
            data = json.load(f)
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f) or {}
        else:
            raise ValueError(f"Unsupported scenario format: {suffix}")

    scenario = ScenarioRecord.model_validate(data)
    if not scenario.name:
        scenario.name = path.stem

    logger.info(
        f"Scenario '{scenario.name}' loaded from {path}: "
        f"{len(scenario.bodies)} bodies, {len(scenario.orbital_bodies)} orbital bodies"
    )
    return scenario


def _check_orbital_record(record: OrbitalBodyRecord, t: float) -> None:
    """Log elements the fixed-count Kepler iteration is not expected to handle."""
    if record.e >= 1:
        logger.warning(
            f"Orbital body '{record.name}' has e={record.e}; "
            f"only elliptical orbits are supported, state will be NaN/Inf"
        )
        return
    if record.e > 0:
        mean_anomaly = record.to_elements().mean_anomaly(t)
        if math.isfinite(mean_anomaly) and math.sin(mean_anomaly) != 0:
            logger.warning(
                f"Orbital body '{record.name}' starts away from pericenter "
                f"(M={mean_anomaly:.6g} rad); eccentric anomaly iteration may not settle"
            )


def build_simulator(
    scenario: ScenarioRecord,
    config: Optional[SimulationConfig] = None
) -> GravitySimulator:
    """
    Create a simulator populated with the scenario's bodies.

    The scenario's time step, gravitational constant and vector-field
    settings, where present, override the corresponding fields of ``config``.

    Args:
        scenario: Parsed scenario
        config: Base driver settings (defaults if omitted)

    Returns:
        Ready-to-run simulator
    """
    config = replace(config) if config is not None else SimulationConfig()
    if scenario.time_step is not None:
        config.time_step = scenario.time_step
    if scenario.gravitational_constant is not None:
        config.gravitational_constant = scenario.gravitational_constant
    if scenario.vector_field is not None:
        config.field_bounds = scenario.vector_field.bounds
        config.field_spacing = scenario.vector_field.spacing

    simulator = GravitySimulator(config)

    for record in scenario.bodies:
        simulator.add_body(
            record.to_body(),
            name=record.name,
            color=record.color,
            show_trail=record.show_trail,
        )

    t0 = scenario.initial_time
    for record in scenario.orbital_bodies:
        _check_orbital_record(record, t0)
        body = record.to_body(t0)
        simulator.add_body(
            body,
            name=record.name,
            color=record.color,
            show_trail=record.show_trail,
        )
        logger.debug(
            f"Orbital body '{record.name}' ({record.reference or 'no reference'}) "
            f"r={body.position.length:.6g} v={body.velocity.length:.6g}"
        )

    logger.info(f"Simulator built with {len(simulator.bodies)} bodies")
    return simulator


def demo_scenario() -> ScenarioRecord:
    """
    Built-in two-body system: a unit mass at rest and a light companion.
    """
    return ScenarioRecord.model_validate({
        "name": "demo",
        "timeStep": 0.01,
        "gravitationalConstant": 1.0,
        "bodies": [
            {"name": "Primary", "mass": 1.0, "position": [0, 0, 0], "velocity": [0, 0, 0],
             "color": "#ffd93d"},
            {"name": "Companion", "mass": 0.01, "position": [0, 1, 0], "velocity": [1, 0, 0],
             "color": "#00d4ff"},
        ],
    })
