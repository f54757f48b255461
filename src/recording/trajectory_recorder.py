"""
Recording - Trajectory Recorder
===============================
Records system snapshots while a simulation runs and exports them.

The recorder subscribes to the simulator's tick notifications between
``start_recording`` and ``stop_recording``. It only reads the simulator;
retaining history is entirely its own business.
"""

from __future__ import annotations

import csv
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from loguru import logger

from mechanics import GravitySimulator
from records import SystemSnapshot


@dataclass
class RecorderConfig:
    """Configuration for trajectory recording."""
    sample_every: int = 1  # record one snapshot every N ticks
    capture_initial_state: bool = True


class TrajectoryRecorder:
    """
    Records simulation snapshots with run metadata.

    Usage:
        recorder = TrajectoryRecorder(simulator)
        recorder.start_recording("two-body")
        simulator.run(1000)
        summary = recorder.stop_recording()
        recorder.export_to_csv("two_body.csv")
    """

    def __init__(self, simulator: GravitySimulator, config: Optional[RecorderConfig] = None):
        """
        Initialize recorder.

        Args:
            simulator: Simulator to record from
            config: Recording configuration
        """
        self.simulator = simulator
        self.config = config or RecorderConfig()
        if self.config.sample_every <= 0:
            raise ValueError("sample_every must be > 0")

        self._recording = False
        self._run_id: Optional[str] = None
        self._snapshots: List[SystemSnapshot] = []
        self._metadata: Dict[str, Any] = {}

        logger.info("TrajectoryRecorder initialized")

    @property
    def is_recording(self) -> bool:
        """Check if recording is active."""
        return self._recording

    @property
    def snapshots(self) -> List[SystemSnapshot]:
        """Recorded snapshots, oldest first."""
        return list(self._snapshots)

    def start_recording(
        self,
        run_name: str,
        description: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Start recording a run.

        Args:
            run_name: Name of the run
            description: Optional description
            metadata: Additional metadata

        Returns:
            Run ID
        """
        if self._recording:
            raise RuntimeError("Already recording")

        config = self.simulator.config
        self._run_id = f"run_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
        self._snapshots = []
        self._metadata = {
            "id": self._run_id,
            "name": run_name,
            "description": description,
            "start_time": datetime.now().isoformat(),
            "gravitational_constant": config.gravitational_constant,
            "time_step": config.time_step,
            "steps_per_tick": config.steps_per_tick,
            "body_count": len(self.simulator.bodies),
            **(metadata or {})
        }

        if self.config.capture_initial_state:
            self._snapshots.append(SystemSnapshot.capture(self.simulator))

        self.simulator.subscribe(self._on_tick)
        self._recording = True

        logger.info(f"Started recording run: {run_name}")
        return self._run_id

    def stop_recording(self) -> Dict[str, Any]:
        """
        Stop recording and return summary.

        Returns:
            Run summary dictionary
        """
        if not self._recording:
            raise RuntimeError("Not recording")

        self._recording = False
        self.simulator.unsubscribe(self._on_tick)

        energies = [s.total_energy for s in self._snapshots]
        drift = None
        if len(energies) >= 2 and energies[0] != 0:
            drift = (energies[-1] - energies[0]) / abs(energies[0])

        duration = self._snapshots[-1].time - self._snapshots[0].time if self._snapshots else 0.0

        summary = {
            **self._metadata,
            "end_time": datetime.now().isoformat(),
            "sample_count": len(self._snapshots),
            "simulated_duration": duration,
            "initial_energy": energies[0] if energies else None,
            "final_energy": energies[-1] if energies else None,
            "relative_energy_drift": drift,
        }

        logger.info(f"Stopped recording. Simulated: {duration:.6g}, Samples: {len(self._snapshots)}")
        return summary

    def _on_tick(self, simulator: GravitySimulator) -> None:
        """Callback for tick notifications."""
        if self._recording and simulator.tick_count % self.config.sample_every == 0:
            self._snapshots.append(SystemSnapshot.capture(simulator))

    def export_to_csv(self, filepath: str) -> None:
        """
        Export recorded trajectories to CSV, one row per body per sample.

        Args:
            filepath: Output file path
        """
        if not self._snapshots:
            logger.warning("No data to export")
            return

        fieldnames = [
            "time",
            "tick",
            "body_index",
            "body_name",
            "mass",
            "x",
            "y",
            "z",
            "vx",
            "vy",
            "vz",
        ]

        with open(filepath, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()

            for snapshot in self._snapshots:
                for body in snapshot.bodies:
                    writer.writerow({
                        "time": snapshot.time,
                        "tick": snapshot.tick,
                        "body_index": body.index,
                        "body_name": body.name,
                        "mass": body.mass,
                        "x": body.position[0],
                        "y": body.position[1],
                        "z": body.position[2],
                        "vx": body.velocity[0],
                        "vy": body.velocity[1],
                        "vz": body.velocity[2],
                    })

        logger.info(f"Exported {len(self._snapshots)} samples to {filepath}")

    def export_to_json(self, filepath: str) -> None:
        """
        Export recorded run to JSON.

        Args:
            filepath: Output file path
        """
        data = {
            "metadata": self._metadata,
            "data": [s.to_dict() for s in self._snapshots]
        }

        with open(filepath, 'w') as f:
            json.dump(data, f, indent=2, default=str)

        logger.info(f"Exported run to {filepath}")
