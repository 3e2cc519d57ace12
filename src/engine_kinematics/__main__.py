"""
CLI entry point for engine_kinematics.
"""
import argparse
import math
import sys
from .crank_clock import TWO_PI, FOUR_STROKE_CYCLE, CrankClock
from .engine_assembly import EngineAssembly
from .engine_config import PRESETS, EngineGeometry
from .utilities import (
    DataExporter,
    EngineeringValidator,
    calculate_statistics,
    summarize_sweep,
)

def load_geometry(preset, config_path):
    if config_path:
        try:
            return EngineGeometry.from_json(config_path)
        except (OSError, KeyError, ValueError) as exc:
            print(f"Error: cannot load geometry from '{config_path}': {exc}")
            sys.exit(1)
    if preset not in PRESETS:
        print(f"Error: Unknown preset '{preset}'")
        sys.exit(1)
    return PRESETS[preset]()

def run_frames(assembly, clock, frames, fps):
    dt = 1.0 / fps
    header = f"{'frame':>5} {'crank°':>8} {'cam°':>8} " + " ".join(
        f"{'P' + str(c.number) + ' mm':>9}" for c in assembly.cylinders
    ) + "  " + " ".join(
        f"{'I/E' + str(c.number) + ' mm':>11}" for c in assembly.cylinders
    )
    print(header)
    print("─" * len(header))

    lifts = []
    for frame in range(frames):
        state = assembly.update(clock.advance(dt))
        pistons = " ".join(f"{cyl.piston_position * 1000:9.2f}" for cyl in state.cylinders)
        valves = " ".join(
            f"{v.intake_lift * 1000:5.2f}/{v.exhaust_lift * 1000:5.2f}" for v in state.valves
        )
        print(
            f"{frame:5d} {math.degrees(state.crank_angle):8.2f} "
            f"{math.degrees(state.cam_angle):8.2f} {pistons}  {valves}"
        )
        lifts.extend(v.intake_lift for v in state.valves)
    return lifts

def main(argv=None):
    parser = argparse.ArgumentParser(description="Engine Mechanism Kinematics CLI")
    parser.add_argument("--preset", choices=sorted(PRESETS), default="inline4", help="Engine preset to run (default: inline4)")
    parser.add_argument("--config", default=None, help="Load geometry from a JSON file instead of a preset")
    parser.add_argument("--rpm", type=float, default=1500.0, help="Engine speed in RPM (default: 1500.0)")
    parser.add_argument("--frames", type=int, default=12, help="Number of frames to step (default: 12)")
    parser.add_argument("--fps", type=float, default=60.0, help="Frame rate driving the clock (default: 60)")
    parser.add_argument("--full-cycle", action="store_true", help="Wrap the crank angle at 720° instead of 360°")
    parser.add_argument("--exploded", type=float, default=0.0, help="Exploded-view factor in [0, 1] (default: 0)")
    parser.add_argument("--csv", default=None, help="Export a 0-720° sweep to this CSV file")
    parser.add_argument("--json", default=None, help="Export the sweep summary to this JSON file")
    parser.add_argument("--plot", default=None, help="Save a kinematics overview plot to this image file")

    args = parser.parse_args(argv)
    if args.frames < 0 or args.fps <= 0.0:
        print("Error: --frames must be ≥ 0 and --fps must be > 0")
        sys.exit(1)

    geometry = load_geometry(args.preset, args.config)
    assembly = EngineAssembly(geometry)
    try:
        clock = CrankClock(
            rpm=args.rpm, period=FOUR_STROKE_CYCLE if args.full_cycle else TWO_PI
        )
    except ValueError as exc:
        print(f"Error: {exc}")
        sys.exit(1)
    layout = assembly.set_exploded(args.exploded)

    name = args.config or args.preset.upper()
    print("\n" + "═" * 50)
    print(f"  KINEMATICS: {name} at {args.rpm:.0f} RPM, {geometry.num_cylinders} cylinders")
    print("═" * 50)

    _, notices = EngineeringValidator.validate_geometry(geometry)
    for notice in notices:
        print(f"Notice: {notice}")
    print(f"TDC groups: {assembly.tdc_groups()}")
    print(f"Exploded factor: {layout.factor:.2f}")
    print("─" * 50)

    lifts = run_frames(assembly, clock, args.frames, args.fps)
    if lifts:
        stats = calculate_statistics(lifts)
        print("─" * 50)
        print(f"Intake lift over run: mean {stats['mean'] * 1000:.2f} mm, max {stats['max'] * 1000:.2f} mm")

    sweep = assembly.sweep()
    summary = summarize_sweep(sweep)
    print(DataExporter.create_motion_report(summary))

    if args.csv:
        DataExporter.export_sweep_to_csv(sweep, args.csv)
    if args.json:
        payload = dict(summary)
        payload["rpm"] = args.rpm
        payload["tdc_groups"] = assembly.tdc_groups()
        payload["geometry"] = geometry.to_dict()
        DataExporter.export_to_json(payload, args.json)
    if args.plot:
        from .visualization import KinematicsPlotter

        KinematicsPlotter(show=False).plot_comprehensive_analysis(sweep, save_path=args.plot)
    print("═" * 50 + "\n")

if __name__ == "__main__":
    main()
