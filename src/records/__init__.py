"""
Records Package
===============
Data boundary of the simulator: scenario records consumed at setup,
snapshot records produced while running, and the scenario loader.
"""

from .models import (
    BodyRecord,
    OrbitalBodyRecord,
    VectorFieldSettings,
    ScenarioRecord,
    BodySnapshot,
    SystemSnapshot,
)
from .loader import load_scenario, build_simulator, demo_scenario

__all__ = [
    "BodyRecord",
    "OrbitalBodyRecord",
    "VectorFieldSettings",
    "ScenarioRecord",
    "BodySnapshot",
    "SystemSnapshot",
    "load_scenario",
    "build_simulator",
    "demo_scenario",
]
