"""
Recording Package
=================
Trajectory recording and export for simulation runs.
"""

from .trajectory_recorder import (
    RecorderConfig,
    TrajectoryRecorder,
)

__all__ = [
    "RecorderConfig",
    "TrajectoryRecorder",
]
