"""
Utilities Module
Geometry validation, data export and summary statistics.
"""

import csv
import json
import math
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .engine_assembly import CycleSweep
from .engine_config import EngineGeometry


class EngineeringValidator:
    """
    Checks mechanism geometry against engineering norms.

    Provides warnings for parameters outside typical ranges; nothing here
    rejects a geometry (that is :class:`EngineGeometry`'s job).
    """

    # Valid ranges for key parameters
    VALID_RANGES = {
        "stroke": (0.020, 0.500),  # 20mm to 500mm
        "rod_ratio": (2.0, 10.0),
        "valve_duration_deg": (90.0, 160.0),  # cam degrees
        "max_valve_lift": (0.004, 0.020),  # 4mm to 20mm
    }

    @staticmethod
    def validate_geometry(geometry: EngineGeometry) -> Tuple[bool, List[str]]:
        """
        Validate a mechanism geometry.

        Args:
            geometry: Geometry to check

        Returns:
            Tuple of (is_valid, list_of_warnings)
        """
        warnings = []
        ranges = EngineeringValidator.VALID_RANGES

        stroke = geometry.stroke
        if not (ranges["stroke"][0] <= stroke <= ranges["stroke"][1]):
            warnings.append(
                f"Stroke {stroke*1000:.1f}mm outside typical range [20, 500]mm"
            )

        rod_ratio = geometry.rod_ratio
        if rod_ratio <= 1.0:
            warnings.append(
                f"Rod ratio {rod_ratio:.2f} ≤ 1: connecting rod cannot follow the crank"
            )
        elif not (ranges["rod_ratio"][0] <= rod_ratio <= ranges["rod_ratio"][1]):
            warnings.append(
                f"Rod ratio {rod_ratio:.2f} outside typical range [2.0, 10.0]"
            )
        elif rod_ratio < 3.0:
            warnings.append("Low rod ratio: Expect higher side loading on piston")

        duration_deg = math.degrees(geometry.valve_duration)
        low, high = ranges["valve_duration_deg"]
        if not (low <= duration_deg <= high):
            warnings.append(
                f"Valve duration {duration_deg:.0f}° cam outside typical range "
                f"[{low:.0f}, {high:.0f}]°"
            )

        lift = geometry.max_valve_lift
        low, high = ranges["max_valve_lift"]
        if not (low <= lift <= high):
            warnings.append(
                f"Valve lift {lift*1000:.1f}mm outside typical range "
                f"[{low*1000:.0f}, {high*1000:.0f}]mm"
            )

        # Adjacent bores closer than one stroke usually means overlapping throws
        offsets = sorted(geometry.bore_offsets)
        for a, b in zip(offsets, offsets[1:]):
            if b - a < stroke:
                warnings.append(
                    f"Bore spacing {(b - a)*1000:.1f}mm is less than the stroke "
                    f"({stroke*1000:.1f}mm)"
                )
                break

        is_valid = len(warnings) == 0
        return is_valid, warnings


class DataExporter:
    """
    Export kinematic sweeps to various formats.

    Supports: CSV, JSON, plain-text summary
    """

    @staticmethod
    def sweep_columns(sweep: CycleSweep) -> Dict[str, np.ndarray]:
        """Flatten a sweep into named 1-D columns (one per cylinder)."""
        data_dict = {
            "crank_angle_deg": sweep.crank_angles_deg,
            "cam_angle_deg": np.rad2deg(sweep.cam_angle),
        }
        for i in range(sweep.num_cylinders):
            n = i + 1
            data_dict[f"cyl{n}_piston_position_m"] = sweep.piston_position[i]
            data_dict[f"cyl{n}_piston_offset_m"] = sweep.piston_offset[i]
            data_dict[f"cyl{n}_rod_angle_deg"] = np.rad2deg(sweep.rod_angle[i])
            data_dict[f"cyl{n}_intake_lift_m"] = sweep.intake_lift[i]
            data_dict[f"cyl{n}_exhaust_lift_m"] = sweep.exhaust_lift[i]
        return data_dict

    @staticmethod
    def export_sweep_to_csv(
        sweep: CycleSweep, filepath: str, variables: Optional[List[str]] = None
    ):
        """
        Export a cycle sweep to CSV, one row per crank angle.

        Args:
            sweep: Result of EngineAssembly.sweep()
            filepath: Output file path
            variables: List of column names to export (None = all)
        """
        data_dict = DataExporter.sweep_columns(sweep)

        # Filter by requested variables
        if variables:
            data_dict = {k: v for k, v in data_dict.items() if k in variables}

        if len(data_dict) == 0:
            raise ValueError("No data to export")

        num_rows = len(next(iter(data_dict.values())))

        with open(filepath, "w", newline="") as csvfile:
            writer = csv.writer(csvfile)
            writer.writerow(data_dict.keys())
            for i in range(num_rows):
                writer.writerow([float(data_dict[key][i]) for key in data_dict])

        print(f"Data exported to {filepath}")

    @staticmethod
    def export_to_json(data: Dict[str, Any], filepath: str):
        """
        Export data dictionary to JSON file.

        Args:
            data: Dictionary of data to export
            filepath: Output file path
        """
        # Convert numpy arrays to lists for JSON serialization
        serializable_data = {}
        for key, value in data.items():
            if isinstance(value, np.ndarray):
                serializable_data[key] = value.tolist()
            elif isinstance(value, np.generic):
                serializable_data[key] = value.item()
            elif isinstance(value, (int, float, str, bool, list, dict, type(None))):
                serializable_data[key] = value
            else:
                serializable_data[key] = str(value)

        with open(filepath, "w") as f:
            json.dump(serializable_data, f, indent=2)

        print(f"Data exported to {filepath}")

    @staticmethod
    def create_motion_report(metrics: Dict[str, float]) -> str:
        """
        Create formatted kinematics report string.

        Args:
            metrics: Dictionary of summary values (see summarize_sweep)

        Returns:
            Formatted report string
        """
        report = []
        report.append("=" * 60)
        report.append("MECHANISM KINEMATICS REPORT")
        report.append("=" * 60)
        report.append("")

        report.append("PISTON TRAVEL:")
        report.append("-" * 60)
        if "stroke_mm" in metrics:
            report.append(f"  Stroke:                 {metrics['stroke_mm']:.2f} mm")
        if "tdc_offset_mm" in metrics:
            report.append(
                f"  Offset at TDC:          {metrics['tdc_offset_mm']:.2f} mm"
            )
        if "bdc_offset_mm" in metrics:
            report.append(
                f"  Offset at BDC:          {metrics['bdc_offset_mm']:.2f} mm"
            )
        if "max_rod_angle_deg" in metrics:
            report.append(
                f"  Max Rod Angle:          {metrics['max_rod_angle_deg']:.2f}°"
            )
        report.append("")

        report.append("VALVETRAIN:")
        report.append("-" * 60)
        if "max_intake_lift_mm" in metrics:
            report.append(
                f"  Peak Intake Lift:       {metrics['max_intake_lift_mm']:.2f} mm"
            )
        if "max_exhaust_lift_mm" in metrics:
            report.append(
                f"  Peak Exhaust Lift:      {metrics['max_exhaust_lift_mm']:.2f} mm"
            )
        if "intake_open_deg" in metrics:
            report.append(
                f"  Intake Open (crank):    {metrics['intake_open_deg']:.0f}° per cycle"
            )
        report.append("")

        report.append("=" * 60)

        return "\n".join(report)


def summarize_sweep(sweep: CycleSweep) -> Dict[str, float]:
    """
    Scalar summary of a cycle sweep.

    Args:
        sweep: Result of EngineAssembly.sweep()

    Returns:
        Dictionary of summary values in display units

    Raises:
        ValueError: If the sweep holds no crank angles
    """
    angles = sweep.crank_angles_deg
    if len(angles) == 0:
        raise ValueError("cannot summarize an empty sweep (no crank angles)")

    offset = sweep.piston_offset
    step_deg = float(angles[1] - angles[0]) if len(angles) > 1 else 0.0
    intake = sweep.intake_lift[0]
    # A closed 720° grid repeats its first sample at the end
    if len(angles) > 1 and np.isclose(angles[-1] - angles[0], 720.0):
        intake = intake[:-1]
    intake_open = intake > 0.0

    return {
        "stroke_mm": float(np.max(offset) - np.min(offset)) * 1000.0,
        "tdc_offset_mm": float(np.max(offset)) * 1000.0,
        "bdc_offset_mm": float(np.min(offset)) * 1000.0,
        "max_rod_angle_deg": float(np.degrees(np.max(np.abs(sweep.rod_angle)))),
        "max_intake_lift_mm": float(np.max(sweep.intake_lift)) * 1000.0,
        "max_exhaust_lift_mm": float(np.max(sweep.exhaust_lift)) * 1000.0,
        "intake_open_deg": float(np.count_nonzero(intake_open)) * step_deg,
    }


def calculate_statistics(data: List[float]) -> Dict[str, float]:
    """
    Calculate basic statistics for a data series.

    Args:
        data: List or array of numerical data

    Returns:
        Dictionary of statistics
    """
    data_array = np.array(data, dtype=float)

    stats = {
        "mean": float(np.mean(data_array)),
        "std": float(np.std(data_array, ddof=0)),
        "min": float(np.min(data_array)),
        "max": float(np.max(data_array)),
        "median": float(np.median(data_array)),
        "range": float(np.max(data_array) - np.min(data_array)),  # peak-to-peak
    }

    return stats
