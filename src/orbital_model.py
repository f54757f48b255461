"""
Orbital Model - Command Line Entry Point
========================================
Runs a gravitational N-body scenario headlessly.

The application loads settings in increasing order of precedence:
dataclass defaults, the YAML configuration file, the scenario file, and
finally command-line flags. Without a scenario argument the built-in
two-body demo runs.

Usage:
    orbital-model data/scenarios/sun_earth.json --ticks 5000 --plot orbit.png
    orbital-model --record run.csv --verbose
"""

from __future__ import annotations

import argparse
import signal
import sys
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from loguru import logger

from mechanics import GravitySimulator, SimulationConfig
from records import ScenarioRecord, build_simulator, demo_scenario, load_scenario
from recording import TrajectoryRecorder
from visualization import PlotConfig, TrajectoryPlotter


SRC_DIR = Path(__file__).parent
PROJECT_ROOT = SRC_DIR.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "default_config.yaml"
DEFAULT_TICKS = 1000


def _dataclass_kwargs(cls, section: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the keys of ``section`` that are fields of ``cls``."""
    names = {f.name for f in fields(cls)}
    unknown = set(section) - names
    if unknown:
        logger.warning(f"Ignoring unknown {cls.__name__} keys: {sorted(unknown)}")
    kwargs = {k: v for k, v in section.items() if k in names}
    for key in ("field_bounds", "figsize"):
        if key in kwargs:
            kwargs[key] = tuple(kwargs[key])
    return kwargs


class OrbitalModelApplication:
    """
    Wires scenario loading, the simulator, recording and plotting together.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize application.

        Args:
            config_path: Path to configuration YAML file
        """
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self.config = self._load_config()

        self.scenario: Optional[ScenarioRecord] = None
        self.simulator: Optional[GravitySimulator] = None
        self.recorder: Optional[TrajectoryRecorder] = None

        self._stop_requested = False

    def _load_config(self) -> dict:
        """Load configuration from YAML file."""
        if self.config_path.exists():
            with open(self.config_path, 'r') as f:
                config = yaml.safe_load(f) or {}
                logger.info(f"Configuration loaded from {self.config_path}")
                return config
        else:
            logger.warning(f"Config file not found: {self.config_path}")
            return {}

    def simulation_config(self) -> SimulationConfig:
        """Driver settings from the configuration file over the defaults."""
        section = self.config.get("simulation", {}) or {}
        return SimulationConfig(**_dataclass_kwargs(SimulationConfig, section))

    def plot_config(self) -> PlotConfig:
        """Plot settings from the configuration file, scaled by the loaded scenario."""
        section = self.config.get("plot", {}) or {}
        config = PlotConfig(**_dataclass_kwargs(PlotConfig, section))
        if self.scenario is not None:
            config.scale = self.scenario.scale
        return config

    def setup(self, args: argparse.Namespace) -> GravitySimulator:
        """
        Load the scenario and build the simulator.

        Args:
            args: Parsed command-line arguments

        Returns:
            Ready-to-run simulator
        """
        self.scenario = load_scenario(args.scenario) if args.scenario else demo_scenario()

        base = self.simulation_config()
        if args.steps_per_tick is not None:
            base.steps_per_tick = args.steps_per_tick
        if args.strict:
            base.strict = True

        simulator = build_simulator(self.scenario, base)

        # Command-line flags win over the scenario
        if args.dt is not None:
            simulator.config.time_step = args.dt
        if args.g is not None:
            simulator.config.gravitational_constant = args.g

        self.simulator = simulator
        return simulator

    def request_shutdown(self) -> None:
        """Request the run loop to stop before the next tick."""
        self._stop_requested = True

    def should_stop(self) -> bool:
        return self._stop_requested

    def run(self, n_ticks: int, record: bool = False) -> Dict[str, Any]:
        """
        Run the simulation and return results.

        Args:
            n_ticks: Ticks to run
            record: Whether to record snapshots while running

        Returns:
            Dictionary with simulation results
        """
        if self.simulator is None:
            raise RuntimeError("Simulator not set up")

        simulator = self.simulator
        initial_energy = simulator.total_energy()

        if record:
            self.recorder = TrajectoryRecorder(simulator)
            self.recorder.start_recording(self.scenario.name)

        logger.info(f"Running {n_ticks} ticks of '{self.scenario.name}'")
        completed = simulator.run(n_ticks, should_stop=self.should_stop)

        results: Dict[str, Any] = {
            "scenario": self.scenario.name,
            "bodies": len(simulator.bodies),
            "ticks": completed,
            "simulated_time": simulator.time,
            "initial_energy": initial_energy,
            "final_energy": simulator.total_energy(),
        }
        if initial_energy != 0:
            results["relative_energy_drift"] = (
                (results["final_energy"] - initial_energy) / abs(initial_energy)
            )

        com = simulator.center_of_mass()
        results["center_of_mass"] = str(com)

        if self.recorder is not None:
            summary = self.recorder.stop_recording()
            results["samples"] = summary["sample_count"]

        logger.info(f"Run complete after {completed} ticks, t={simulator.time:.6g}")
        return results

    def export_recording(self, filepath: Path) -> None:
        """
        Export recorded data, format chosen by suffix.

        Args:
            filepath: Output file path (.csv or .json)
        """
        if self.recorder is None:
            raise RuntimeError("Recording not enabled")

        suffix = filepath.suffix.lower()
        if suffix == ".csv":
            self.recorder.export_to_csv(str(filepath))
        elif suffix == ".json":
            self.recorder.export_to_json(str(filepath))
        else:
            raise ValueError(f"Unknown export format: {suffix}")

    def save_plots(self, filepath: Path) -> List[Path]:
        """
        Save the trail plot, plus the energy plot when a recording exists.

        Args:
            filepath: Output path of the trail plot

        Returns:
            Paths written
        """
        plotter = TrajectoryPlotter(self.plot_config())
        written = []

        fig = plotter.create_trail_figure(self.simulator)
        plotter.save_figure(fig, filepath)
        written.append(filepath)

        if self.recorder is not None and self.recorder.snapshots:
            energy_path = filepath.with_name(f"{filepath.stem}_energy{filepath.suffix}")
            fig = plotter.create_energy_figure(self.recorder.snapshots)
            plotter.save_figure(fig, energy_path)
            written.append(energy_path)

        return written


def setup_logging(verbose: bool = False, log_dir: Optional[Path] = None) -> None:
    """Configure logging."""
    logger.remove()  # Remove default handler

    level = "DEBUG" if verbose else "INFO"

    # Console handler with custom format
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=level,
        colorize=True
    )

    # File handler for debug logs
    log_dir = log_dir or Path("logs")
    log_dir.mkdir(exist_ok=True)

    logger.add(
        log_dir / "orbital_model_{time}.log",
        rotation="10 MB",
        retention="7 days",
        level="DEBUG"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="orbital-model",
        description="Orbital Model - gravitational N-body simulation"
    )
    parser.add_argument(
        "scenario",
        nargs="?",
        type=Path,
        default=None,
        help="Scenario file (.json, .yaml, .yml); runs the demo system if omitted"
    )
    parser.add_argument(
        "--ticks", "-n",
        type=int,
        default=None,
        help=f"Number of ticks to run (default: {DEFAULT_TICKS})"
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=None,
        help="Integrator time step (overrides scenario)"
    )
    parser.add_argument(
        "--g",
        type=float,
        default=None,
        help="Gravitational constant (overrides scenario)"
    )
    parser.add_argument(
        "--steps-per-tick",
        type=int,
        default=None,
        help="Integrator steps per tick"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file"
    )
    parser.add_argument(
        "--record",
        type=Path,
        default=None,
        help="Record the run and export it (.csv or .json)"
    )
    parser.add_argument(
        "--plot",
        type=Path,
        default=None,
        help="Save a trajectory plot to this image file"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Stop with an error when a body state becomes NaN/Inf"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Setup logging
    setup_logging(args.verbose)

    app = OrbitalModelApplication(config_path=args.config)

    # Setup signal handlers
    def signal_handler(sig, frame):
        logger.info("Received shutdown signal")
        app.request_shutdown()

    previous_handlers = {
        sig: signal.signal(sig, signal_handler) for sig in (signal.SIGINT, signal.SIGTERM)
    }

    try:
        app.setup(args)

        n_ticks = args.ticks
        if n_ticks is None:
            n_ticks = int((app.config.get("run", {}) or {}).get("ticks", DEFAULT_TICKS))

        results = app.run(n_ticks, record=args.record is not None)

        if args.record is not None:
            app.export_recording(args.record)
        if args.plot is not None:
            app.save_plots(args.plot)

        print("\n=== Simulation Results ===")
        for key, value in results.items():
            if isinstance(value, float):
                print(f"  {key}: {value:.6f}")
            else:
                print(f"  {key}: {value}")

    finally:
        for sig, handler in previous_handlers.items():
            signal.signal(sig, handler)

    return 0


def run() -> None:
    """Console-script wrapper."""
    sys.exit(main())


if __name__ == "__main__":
    run()
