"""
Trajectory Visualization
========================
Static matplotlib rendering of a simulation.

This module provides:
- 3D trail plots with current body positions and center of mass
- Acceleration-field quiver overlay
- Energy history plots from recorded snapshots

Figures are built on the Agg canvas so rendering works without a display.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from loguru import logger

from mechanics import GravitySimulator, VectorField
from records import SystemSnapshot


# Default color cycle for bodies without a usable color
PALETTE = ['#00ff88', '#00d4ff', '#ff6b6b', '#ffd93d', '#6bcb77', '#4d96ff']


@dataclass
class PlotConfig:
    """Configuration for trajectory plots."""
    title: str = "Trajectories"
    figsize: Tuple[float, float] = (10, 8)
    line_width: float = 1.2
    marker_size: float = 40.0
    background_color: str = "#1a1a2e"
    axes_color: str = "#0f0f1a"
    text_color: str = "#ffffff"
    grid: bool = True
    show_legend: bool = True
    show_center_of_mass: bool = True
    show_acceleration_field: bool = False
    field_arrow_length: float = 0.1  # longest arrow, in plot units
    scale: float = 1.0  # multiplies every plotted position


class TrajectoryPlotter:
    """
    Renders simulator state and recorded runs to matplotlib figures.

    Usage:
        plotter = TrajectoryPlotter()
        fig = plotter.create_trail_figure(simulator)
        plotter.save_figure(fig, "orbits.png")
    """

    def __init__(self, config: Optional[PlotConfig] = None):
        """
        Initialize plotter.

        Args:
            config: Plot configuration
        """
        self.config = config or PlotConfig()
        logger.debug("TrajectoryPlotter initialized")

    def _new_figure(self) -> Figure:
        fig = Figure(figsize=self.config.figsize, facecolor=self.config.background_color)
        FigureCanvasAgg(fig)
        return fig

    def _style_axes(self, ax) -> None:
        ax.set_facecolor(self.config.axes_color)
        ax.tick_params(colors='#aaaaaa')
        ax.title.set_color(self.config.text_color)
        ax.xaxis.label.set_color(self.config.text_color)
        ax.yaxis.label.set_color(self.config.text_color)
        if self.config.grid:
            ax.grid(True, color='#333366', linestyle='--', alpha=0.5)

    def create_trail_figure(self, simulator: GravitySimulator) -> Figure:
        """
        Create a 3D figure of body trails and current positions.

        Args:
            simulator: Simulator to draw (not modified)

        Returns:
            Matplotlib Figure object
        """
        fig = self._new_figure()
        ax = fig.add_subplot(projection='3d')
        self._style_axes(ax)
        ax.zaxis.label.set_color(self.config.text_color)

        for index, (body, label) in enumerate(zip(simulator.bodies, simulator.labels)):
            color = label.color or PALETTE[index % len(PALETTE)]
            name = label.name or f"Body {index}"

            trail = simulator.trail(index)
            if label.show_trail and len(trail) > 1:
                points = np.array([p.to_array() for p in trail]) * self.config.scale
                ax.plot(points[:, 0], points[:, 1], points[:, 2],
                        color=color, linewidth=self.config.line_width, alpha=0.8)

            x, y, z = body.position.to_array() * self.config.scale
            ax.scatter([x], [y], [z],
                       color=color, s=self.config.marker_size, label=name)

        if self.config.show_center_of_mass and simulator.bodies:
            com = simulator.center_of_mass()
            if com.is_finite():
                x, y, z = com.to_array() * self.config.scale
                ax.scatter([x], [y], [z], color='white', marker='x',
                           s=self.config.marker_size, label="Center of mass")

        if self.config.show_acceleration_field:
            self._draw_field(ax, simulator)

        ax.set_xlabel("x")
        ax.set_ylabel("y")
        ax.set_zlabel("z")
        ax.set_title(f"{self.config.title} (t={simulator.time:.4g})")

        if self.config.show_legend and simulator.bodies:
            ax.legend(loc='upper right', framealpha=0.8)

        return fig

    def _draw_field(self, ax, simulator: GravitySimulator) -> None:
        """Overlay the acceleration field, arrows scaled to the strongest sample."""
        x_min, x_max, y_min, y_max, z_min, z_max = simulator.config.field_bounds
        field = VectorField(x_min, x_max, y_min, y_max, z_min, z_max, simulator.config.field_spacing)
        field.update_from_bodies(simulator.config.gravitational_constant, simulator.bodies)

        positions = field.positions_array() * self.config.scale
        values = field.values_array()
        finite = np.all(np.isfinite(values), axis=1)
        if not np.any(finite):
            logger.warning("Acceleration field has no finite samples, skipping overlay")
            return

        positions = positions[finite]
        values = values[finite]
        peak = np.max(np.linalg.norm(values, axis=1))
        if peak > 0:
            values = values * (self.config.field_arrow_length / peak)

        ax.quiver(positions[:, 0], positions[:, 1], positions[:, 2],
                  values[:, 0], values[:, 1], values[:, 2],
                  color='#4d96ff', alpha=0.5, linewidth=0.8)

    def create_energy_figure(self, snapshots: Sequence[SystemSnapshot]) -> Figure:
        """
        Create a figure of kinetic, potential and total energy over time.

        Args:
            snapshots: Recorded snapshots, oldest first

        Returns:
            Matplotlib Figure object
        """
        fig = self._new_figure()
        ax = fig.add_subplot()
        self._style_axes(ax)

        if snapshots:
            t = np.array([s.time for s in snapshots])
            series: List[Tuple[str, np.ndarray]] = [
                ("kinetic", np.array([s.kinetic_energy for s in snapshots])),
                ("potential", np.array([s.potential_energy for s in snapshots])),
                ("total", np.array([s.total_energy for s in snapshots])),
            ]
            for i, (name, values) in enumerate(series):
                ax.plot(t, values, label=name, color=PALETTE[i % len(PALETTE)],
                        linewidth=self.config.line_width)
            if self.config.show_legend:
                ax.legend(loc='upper right', framealpha=0.8)
        else:
            logger.warning("No snapshots to plot")

        ax.set_xlabel("Time")
        ax.set_ylabel("Energy")
        ax.set_title("Energy History")

        fig.tight_layout()
        return fig

    def save_figure(self, fig: Figure, filepath: Union[str, Path], dpi: int = 150) -> None:
        """
        Save figure to file.

        Args:
            fig: Figure to save
            filepath: Output path
            dpi: Resolution
        """
        fig.savefig(filepath, dpi=dpi, bbox_inches='tight', facecolor=fig.get_facecolor())
        logger.info(f"Plot saved to {filepath}")
