"""
Basic Engine Kinematics Example
Demonstrates simple usage of the mechanism solver.
"""

import math
import os

import numpy as np
import matplotlib.pyplot as plt

# Headless environment check for observability stability
if "DISPLAY" not in os.environ and os.name != "nt":
    import matplotlib
    matplotlib.use("Agg")
    print("Physical display not detected. Using 'Agg' backend for plot exports.")

from engine_kinematics.crank_clock import CrankClock
from engine_kinematics.engine_assembly import EngineAssembly
from engine_kinematics.engine_config import EngineGeometry, create_default_inline_4
from engine_kinematics.kinematics import SliderCrank
from engine_kinematics.utilities import DataExporter, summarize_sweep
from engine_kinematics.visualization import KinematicsPlotter


def example_1_single_slider_crank():
    """Example 1: One slider-crank over a revolution"""

    print("=" * 70)
    print("EXAMPLE 1: Single Slider-Crank")
    print("=" * 70)
    print()

    slider_crank = SliderCrank(crank_radius=0.043, connecting_rod_length=0.145)

    print(f"  λ = r/l = {slider_crank.lambda_ratio:.4f}")
    for deg in [0, 45, 90, 135, 180]:
        theta = math.radians(deg)
        sol = slider_crank.solve(theta, deck_height=0.5)
        rod = slider_crank.align_rod(sol.crank_pin, sol.piston_pin)
        print(
            f"  θ={deg:3d}°: offset {sol.piston_offset*1000:7.2f} mm, "
            f"piston {sol.piston_position*1000:7.2f} mm, "
            f"rod angle {math.degrees(slider_crank.connecting_rod_angle(theta)):6.2f}°, "
            f"rod length {rod.length*1000:.2f} mm"
        )
    print()

    return slider_crank


def example_2_inline_4_frames():
    """Example 2: Inline-4 driven frame by frame"""

    print("=" * 70)
    print("EXAMPLE 2: Inline-4 Animation Loop")
    print("=" * 70)
    print()

    assembly = EngineAssembly(create_default_inline_4())
    clock = CrankClock(rpm=1500.0)

    print(f"  TDC groups: {assembly.tdc_groups()}")
    for frame in range(6):
        state = assembly.update(clock.advance(1.0 / 60.0))
        pistons = ", ".join(f"{c.piston_position*1000:.1f}" for c in state.cylinders)
        print(
            f"  frame {frame}: crank {math.degrees(state.crank_angle):6.1f}°, "
            f"cam {math.degrees(state.cam_angle):6.1f}°, pistons [{pistons}] mm"
        )
    print()

    layout = assembly.set_exploded(1.0)
    print("Exploded view at factor 1:")
    for name, offset in layout.as_dict().items():
        if name != "factor":
            print(f"  {name:13s} {np.round(offset, 3)}")
    print()

    return assembly


def example_3_cycle_sweep():
    """Example 3: Full four-stroke sweep with plots and export"""

    print("=" * 70)
    print("EXAMPLE 3: Four-Stroke Cycle Sweep")
    print("=" * 70)
    print()

    assembly = EngineAssembly(create_default_inline_4())
    sweep = assembly.sweep(resolution_deg=0.5)
    summary = summarize_sweep(sweep)

    print(DataExporter.create_motion_report(summary))
    DataExporter.export_sweep_to_csv(sweep, "./example3_sweep.csv")

    plotter = KinematicsPlotter()
    plotter.plot_valve_lift(sweep, cylinder=1, save_path="./example3_valve_lift.png")
    plotter.plot_comprehensive_analysis(sweep, save_path="./example3_overview.png")

    return sweep


def example_4_rod_ratio_study():
    """Example 4: Parametric study of rod length"""

    print("=" * 70)
    print("EXAMPLE 4: Parametric Study - Rod Length Effect")
    print("=" * 70)
    print()

    rod_lengths = [0.120, 0.130, 0.140, 0.150, 0.160, 0.170]
    max_angles = []

    for rod in rod_lengths:
        geometry = EngineGeometry(
            crank_radius=0.043,
            connecting_rod_length=rod,
            deck_height=0.5,
            bore_offsets=(0.0,),
            crank_phases=(0.0,),
        )
        sweep = EngineAssembly(geometry).sweep(resolution_deg=2.0)
        max_angles.append(summarize_sweep(sweep)["max_rod_angle_deg"])

        print(f"  l {rod*1000:.0f} mm: λ={geometry.lambda_ratio:.3f}, max rod angle={max_angles[-1]:.2f}°")

    print()

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(np.array(rod_lengths) * 1000, max_angles, "bo-", linewidth=2, markersize=8)
    ax.set_xlabel("Connecting Rod Length (mm)", fontweight="bold")
    ax.set_ylabel("Max Rod Angle (deg)", fontweight="bold")
    ax.set_title("Rod Obliquity vs Rod Length", fontweight="bold")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig("./example4_rod_ratio.png", dpi=300)
    plt.show()

    print("Parametric study complete!")


def main():
    """Run all examples"""

    print("\n")
    print("╔" + "═" * 68 + "╗")
    print("║" + " " * 16 + "ENGINE KINEMATICS EXAMPLES" + " " * 26 + "║")
    print("╚" + "═" * 68 + "╝")
    print("\n")

    example_1_single_slider_crank()
    print("\n" + "─" * 70 + "\n")

    example_2_inline_4_frames()
    print("\n" + "─" * 70 + "\n")

    example_3_cycle_sweep()
    print("\n" + "─" * 70 + "\n")

    example_4_rod_ratio_study()

    print("\n" + "═" * 70)
    print("All examples completed successfully!")
    print("═" * 70 + "\n")


if __name__ == "__main__":
    main()
