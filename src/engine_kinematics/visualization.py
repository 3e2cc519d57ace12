"""
Visualization Module
Plots of piston travel, rod obliquity and valve lift over a cycle sweep.
"""

import matplotlib.pyplot as plt
from matplotlib.gridspec import GridSpec
import numpy as np
from typing import Optional

from .engine_assembly import CycleSweep


class KinematicsPlotter:
    """
    Creates plots of a kinematic cycle sweep.

    Supports:
    - Piston position vs crank angle (all cylinders)
    - Connecting rod angle vs crank angle
    - Intake / exhaust valve lift vs crank angle
    - Combined 3-panel overview
    """

    def __init__(self, style: str = "default", show: bool = True):
        """
        Initialize plotter with specified style.

        Args:
            style: Matplotlib style ('default', 'seaborn', 'ggplot')
            show: Call plt.show() after each plot
        """
        if style != "default":
            try:
                plt.style.use(style)
            except (OSError, ValueError) as e:
                print(f"Warning: Style '{style}' not found, using default. Error: {e}")

        self.show = show
        self.fig_size = (12, 8)
        self.dpi = 100

    def _finish(self, fig, save_path: Optional[str], label: str):
        plt.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=300, bbox_inches="tight")
            print(f"{label} saved to {save_path}")

        if self.show:
            plt.show()
        return fig

    @staticmethod
    def _mark_dead_centres(ax, max_deg: float):
        for deg in np.arange(0.0, max_deg + 1e-9, 180.0):
            is_tdc = int(round(deg / 180.0)) % 2 == 0
            ax.axvline(
                deg,
                color="red" if is_tdc else "blue",
                linestyle="--",
                alpha=0.3,
            )

    def plot_piston_travel(self, sweep: CycleSweep, save_path: Optional[str] = None):
        """
        Plot piston position vs crank angle for every cylinder.

        Args:
            sweep: Cycle sweep from EngineAssembly.sweep()
            save_path: Optional path to save figure
        """
        fig, ax = plt.subplots(figsize=(12, 6))

        for i in range(sweep.num_cylinders):
            ax.plot(
                sweep.crank_angles_deg,
                sweep.piston_position[i] * 1000.0,
                linewidth=1.5,
                label=f"Cylinder {i+1}",
            )

        self._mark_dead_centres(ax, float(np.max(sweep.crank_angles_deg)))
        ax.set_xlabel("Crank Angle (degrees)", fontsize=12, fontweight="bold")
        ax.set_ylabel("Piston Position (mm)", fontsize=12, fontweight="bold")
        ax.set_title("Piston Position vs Crank Angle", fontsize=14, fontweight="bold")
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=9, ncol=2)

        return self._finish(fig, save_path, "Piston travel plot")

    def plot_rod_angle(self, sweep: CycleSweep, save_path: Optional[str] = None):
        """
        Plot connecting rod obliquity vs crank angle.

        Args:
            sweep: Cycle sweep from EngineAssembly.sweep()
            save_path: Optional path to save figure
        """
        fig, ax = plt.subplots(figsize=(12, 6))

        for i in range(sweep.num_cylinders):
            ax.plot(
                sweep.crank_angles_deg,
                np.degrees(sweep.rod_angle[i]),
                linewidth=1.5,
                label=f"Cylinder {i+1}",
            )
        ax.axhline(0, color="k", linestyle="-", alpha=0.3)

        ax.set_xlabel("Crank Angle (degrees)", fontsize=12, fontweight="bold")
        ax.set_ylabel("Rod Angle (degrees)", fontsize=12, fontweight="bold")
        ax.set_title(
            "Connecting Rod Angle vs Crank Angle", fontsize=14, fontweight="bold"
        )
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=9, ncol=2)

        return self._finish(fig, save_path, "Rod angle plot")

    def plot_valve_lift(
        self,
        sweep: CycleSweep,
        cylinder: int = 1,
        save_path: Optional[str] = None,
    ):
        """
        Plot intake and exhaust lift of one cylinder vs crank angle.

        Args:
            sweep: Cycle sweep from EngineAssembly.sweep()
            cylinder: 1-indexed cylinder number
            save_path: Optional path to save figure
        """
        if not 1 <= cylinder <= sweep.num_cylinders:
            raise ValueError(
                f"cylinder must be in [1, {sweep.num_cylinders}], got {cylinder}"
            )
        i = cylinder - 1

        fig, ax = plt.subplots(figsize=(12, 6))

        ax.plot(
            sweep.crank_angles_deg,
            sweep.intake_lift[i] * 1000.0,
            "b-",
            linewidth=2,
            label="Intake",
        )
        ax.plot(
            sweep.crank_angles_deg,
            sweep.exhaust_lift[i] * 1000.0,
            "r-",
            linewidth=2,
            label="Exhaust",
        )
        # Shade the overlap where both valves are off their seats
        overlap = (sweep.intake_lift[i] > 0.0) & (sweep.exhaust_lift[i] > 0.0)
        if np.any(overlap):
            ax.fill_between(
                sweep.crank_angles_deg,
                0.0,
                np.minimum(sweep.intake_lift[i], sweep.exhaust_lift[i]) * 1000.0,
                where=overlap,
                color="purple",
                alpha=0.3,
                label="Overlap",
            )

        self._mark_dead_centres(ax, float(np.max(sweep.crank_angles_deg)))
        ax.set_xlabel("Crank Angle (degrees)", fontsize=12, fontweight="bold")
        ax.set_ylabel("Valve Lift (mm)", fontsize=12, fontweight="bold")
        ax.set_title(
            f"Valve Lift vs Crank Angle (Cylinder {cylinder})",
            fontsize=14,
            fontweight="bold",
        )
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=10)

        return self._finish(fig, save_path, "Valve lift plot")

    def plot_comprehensive_analysis(
        self, sweep: CycleSweep, save_path: Optional[str] = None
    ):
        """
        Create comprehensive 3-panel kinematics plot.

        Args:
            sweep: Cycle sweep from EngineAssembly.sweep()
            save_path: Optional path to save figure
        """
        fig = plt.figure(figsize=(16, 12))
        gs = GridSpec(3, 1, figure=fig, hspace=0.35)
        angles = sweep.crank_angles_deg

        # Piston position
        ax1 = fig.add_subplot(gs[0, 0])
        for i in range(sweep.num_cylinders):
            ax1.plot(angles, sweep.piston_position[i] * 1000.0, label=f"Cyl {i+1}")
        ax1.set_ylabel("Piston (mm)", fontweight="bold")
        ax1.set_title("Piston Position", fontweight="bold")
        ax1.grid(True, alpha=0.3)
        ax1.legend(fontsize=8, ncol=sweep.num_cylinders)

        # Rod angle
        ax2 = fig.add_subplot(gs[1, 0], sharex=ax1)
        for i in range(sweep.num_cylinders):
            ax2.plot(angles, np.degrees(sweep.rod_angle[i]))
        ax2.axhline(0, color="k", linestyle="-", alpha=0.3)
        ax2.set_ylabel("Rod Angle (deg)", fontweight="bold")
        ax2.set_title("Connecting Rod Angle", fontweight="bold")
        ax2.grid(True, alpha=0.3)

        # Valve lift, all cylinders
        ax3 = fig.add_subplot(gs[2, 0], sharex=ax1)
        for i in range(sweep.num_cylinders):
            ax3.plot(angles, sweep.intake_lift[i] * 1000.0, "-", alpha=0.7)
            ax3.plot(angles, sweep.exhaust_lift[i] * 1000.0, "--", alpha=0.7)
        ax3.set_xlabel("Crank Angle (deg)", fontweight="bold")
        ax3.set_ylabel("Lift (mm)", fontweight="bold")
        ax3.set_title("Valve Lift (solid: intake, dashed: exhaust)", fontweight="bold")
        ax3.grid(True, alpha=0.3)

        fig.suptitle(
            "Comprehensive Mechanism Kinematics", fontsize=16, fontweight="bold"
        )

        if save_path:
            fig.savefig(save_path, dpi=300, bbox_inches="tight")
            print(f"Comprehensive analysis saved to {save_path}")

        if self.show:
            plt.show()
        return fig
