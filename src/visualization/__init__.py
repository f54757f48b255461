"""
Visualization Package
======================
Static rendering of trajectories, acceleration fields and energy history.
"""

from .plotting import (
    PlotConfig,
    TrajectoryPlotter,
)

__all__ = [
    "PlotConfig",
    "TrajectoryPlotter",
]
