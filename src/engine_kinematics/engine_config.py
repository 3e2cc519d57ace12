"""
Engine Configuration Module
Defines the immutable mechanism geometry and operating conditions.

Frame convention
----------------
    X  = crankshaft axis (bores are spaced along X)
    Y  = cylinder axis
    Z  = depth

All angles are stored in radians.  Camshaft angles (lobe centres and lobe
duration) are measured on the camshaft, i.e. one cam revolution spans two
crank revolutions.
"""

import math
import json
import warnings
from dataclasses import dataclass
from typing import Dict, Tuple

# ── Defaults ──────────────────────────────────────────────────────────────────

CAM_TO_CRANK_RATIO: float = 0.5  # one cam revolution per two crank revolutions

_DEFAULT_VALVE_DURATION = math.radians(120.0)  # cam degrees
_DEFAULT_MAX_VALVE_LIFT = 0.015  # m
_DEFAULT_INTAKE_LOBE_CENTER = math.radians(60.0)  # cam degrees
_DEFAULT_EXHAUST_LOBE_CENTER = math.radians(-60.0)  # cam degrees

# Informational range for λ = r / l; outside it a warning is issued.
_LAMBDA_WARN_LOW = 0.22
_LAMBDA_WARN_HIGH = 0.40


# ── Geometry ──────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class EngineGeometry:
    """Mechanism geometry (SI units, radians).

    Attributes
    ----------
    crank_radius          : m    crank throw r (centre to pin)
    connecting_rod_length : m    rod length l  (expected l > r)
    deck_height           : m    Y coordinate of the crank centreline, not
                                 of the cylinder head.  Pistons hang below
                                 it at Y = deck_height − s(θ), reaching
                                 deck_height − (r + l) at TDC, so a head
                                 belongs near that level, not at deck_height
    bore_offsets          : m    per-cylinder position along the crank axis
    crank_phases          : rad  per-cylinder crank phase
    cam_ratio             : -    cam angle / crank angle
    valve_duration        : rad  lobe window on the camshaft
    max_valve_lift        : m
    intake_lobe_center    : rad  cam angle of peak intake lift
    exhaust_lobe_center   : rad  cam angle of peak exhaust lift
    rod_rest_axis         : -    direction of an unrotated connecting rod
    """

    crank_radius: float
    connecting_rod_length: float
    deck_height: float
    bore_offsets: Tuple[float, ...]
    crank_phases: Tuple[float, ...]
    cam_ratio: float = CAM_TO_CRANK_RATIO
    valve_duration: float = _DEFAULT_VALVE_DURATION
    max_valve_lift: float = _DEFAULT_MAX_VALVE_LIFT
    intake_lobe_center: float = _DEFAULT_INTAKE_LOBE_CENTER
    exhaust_lobe_center: float = _DEFAULT_EXHAUST_LOBE_CENTER
    rod_rest_axis: Tuple[float, float, float] = (0.0, 1.0, 0.0)

    def __post_init__(self) -> None:
        # Lists passed by callers are frozen into tuples so that phases can
        # never be mutated after construction.
        object.__setattr__(
            self, "bore_offsets", tuple(float(z) for z in self.bore_offsets)
        )
        object.__setattr__(
            self, "crank_phases", tuple(float(p) for p in self.crank_phases)
        )
        object.__setattr__(
            self, "rod_rest_axis", tuple(float(c) for c in self.rod_rest_axis)
        )

        if self.crank_radius <= 0.0:
            raise ValueError(f"crank_radius must be > 0 m, got {self.crank_radius}")
        if self.connecting_rod_length <= 0.0:
            raise ValueError(
                f"connecting_rod_length must be > 0 m, got {self.connecting_rod_length}"
            )
        if len(self.crank_phases) < 1:
            raise ValueError("at least one cylinder is required (crank_phases is empty)")
        if len(self.bore_offsets) != len(self.crank_phases):
            raise ValueError(
                f"bore_offsets length {len(self.bore_offsets)} must equal "
                f"crank_phases length {len(self.crank_phases)}"
            )
        if self.cam_ratio <= 0.0:
            raise ValueError(f"cam_ratio must be > 0, got {self.cam_ratio}")
        if not (0.0 < self.valve_duration <= 2.0 * math.pi):
            raise ValueError(
                f"valve_duration must be in (0, 2π] rad, got {self.valve_duration}"
            )
        if self.max_valve_lift < 0.0:
            raise ValueError(
                f"max_valve_lift must be ≥ 0 m, got {self.max_valve_lift}"
            )
        if len(self.rod_rest_axis) != 3 or math.hypot(*self.rod_rest_axis) == 0.0:
            raise ValueError(
                f"rod_rest_axis must be a non-zero 3-vector, got {self.rod_rest_axis}"
            )

        if self.connecting_rod_length <= self.crank_radius:
            # The solver clamps the radicand, so the geometry still evaluates;
            # it just no longer describes a real mechanism.
            warnings.warn(
                f"connecting_rod_length ({self.connecting_rod_length} m) ≤ "
                f"crank_radius ({self.crank_radius} m): slider-crank is "
                "physically invalid, piston offset will degenerate to r·cos θ "
                "where the rod cannot reach.",
                UserWarning,
                stacklevel=3,
            )
        elif not (_LAMBDA_WARN_LOW <= self.lambda_ratio <= _LAMBDA_WARN_HIGH):
            warnings.warn(
                f"Rod ratio λ = {self.lambda_ratio:.4f} is outside the typical "
                f"automotive range [{_LAMBDA_WARN_LOW}, {_LAMBDA_WARN_HIGH}]. "
                "Verify mechanism geometry.",
                UserWarning,
                stacklevel=3,
            )

    # ── Derived properties ────────────────────────────────────────────────

    @property
    def num_cylinders(self) -> int:
        return len(self.crank_phases)

    @property
    def stroke(self) -> float:
        """Piston stroke  2r  [m]."""
        return 2.0 * self.crank_radius

    @property
    def lambda_ratio(self) -> float:
        """Crank-to-rod ratio  λ = r / l  [dimensionless]."""
        return self.crank_radius / self.connecting_rod_length

    @property
    def rod_ratio(self) -> float:
        """Rod ratio  l / r  [dimensionless].  Typical automotive range: 3.0 – 4.5."""
        return self.connecting_rod_length / self.crank_radius

    # ── Serialisation ─────────────────────────────────────────────────────

    def to_dict(self) -> Dict:
        """Serialise geometry to a plain dictionary (angles in radians)."""
        return {
            "crank_radius": self.crank_radius,
            "connecting_rod_length": self.connecting_rod_length,
            "deck_height": self.deck_height,
            "bore_offsets": list(self.bore_offsets),
            "crank_phases": list(self.crank_phases),
            "cam_ratio": self.cam_ratio,
            "valve_duration": self.valve_duration,
            "max_valve_lift": self.max_valve_lift,
            "intake_lobe_center": self.intake_lobe_center,
            "exhaust_lobe_center": self.exhaust_lobe_center,
            "rod_rest_axis": list(self.rod_rest_axis),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "EngineGeometry":
        """Build geometry from a dictionary produced by :meth:`to_dict`.

        Raises
        ------
        KeyError
            If a required field is missing.
        ValueError
            If a field has an invalid value.
        """
        required = (
            "crank_radius",
            "connecting_rod_length",
            "deck_height",
            "bore_offsets",
            "crank_phases",
        )
        missing = [key for key in required if key not in data]
        if missing:
            raise KeyError(f"Missing field(s) in geometry configuration: {missing}")

        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown field(s) in geometry configuration: {unknown}")

        kwargs = dict(data)
        kwargs["bore_offsets"] = tuple(kwargs["bore_offsets"])
        kwargs["crank_phases"] = tuple(kwargs["crank_phases"])
        if "rod_rest_axis" in kwargs:
            kwargs["rod_rest_axis"] = tuple(kwargs["rod_rest_axis"])
        return cls(**kwargs)

    def to_json(self, filepath: str) -> None:
        """Persist geometry to a JSON file."""
        with open(filepath, "w", encoding="utf-8") as fh:
            json.dump(self.to_dict(), fh, indent=2)

    @classmethod
    def from_json(cls, filepath: str) -> "EngineGeometry":
        """Load geometry from a JSON file.

        Raises
        ------
        FileNotFoundError
            If filepath does not exist.
        KeyError
            If a required field is missing from the JSON.
        ValueError
            If a field has an invalid value.
        """
        with open(filepath, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(
                f"Geometry configuration must be a JSON object, got {type(data).__name__}"
            )
        return cls.from_dict(data)


# ── Operating conditions ──────────────────────────────────────────────────────


@dataclass
class OperatingConditions:
    """Engine speed and frame-step limit for the render loop."""

    rpm: float = 1500.0
    max_frame_step: float = 0.05  # s  (largest dt honoured per frame)

    def __post_init__(self) -> None:
        if self.rpm <= 0.0:
            raise ValueError(f"rpm must be > 0, got {self.rpm}")
        if self.max_frame_step <= 0.0:
            raise ValueError(
                f"max_frame_step must be > 0 s, got {self.max_frame_step}"
            )

    @property
    def angular_velocity(self) -> float:
        """Angular velocity  ω = 2π·N/60  [rad/s]."""
        return self.rpm * 2.0 * math.pi / 60.0

    @property
    def cycle_time(self) -> float:
        """Duration of one complete 4-stroke cycle  t = 2 rev / (N/60)  [s]."""
        return 120.0 / self.rpm


# ── Factory functions ─────────────────────────────────────────────────────────


def _inline_bore_offsets(num_cylinders: int, spacing: float) -> Tuple[float, ...]:
    """Bore centres spaced evenly along the crank axis, centred on zero."""
    centre = (num_cylinders - 1) / 2.0
    return tuple((i - centre) * spacing for i in range(num_cylinders))


def create_default_inline_4() -> EngineGeometry:
    """Create the default inline-4 mechanism.

    Based on a 2.0 L turbocharged DOHC four:
        Crank throw   : 43 mm  (86 mm stroke)
        Rod length    : 145 mm
        Bore spacing  : 95 mm
        Crank phases  : 0°, 180°, 180°, 0°  (flat-plane, firing order 1-3-4-2)
    """
    return EngineGeometry(
        crank_radius=0.043,
        connecting_rod_length=0.145,
        deck_height=0.5,
        bore_offsets=_inline_bore_offsets(4, 0.095),
        crank_phases=(0.0, math.pi, math.pi, 0.0),
    )


def create_default_inline_6() -> EngineGeometry:
    """Create an inline-6 mechanism (120° throws, firing order 1-5-3-6-2-4)."""
    phases_deg = [0.0, 120.0, 240.0, 240.0, 120.0, 0.0]
    return EngineGeometry(
        crank_radius=0.0445,
        connecting_rod_length=0.1445,
        deck_height=0.5,
        bore_offsets=_inline_bore_offsets(6, 0.091),
        crank_phases=tuple(math.radians(p) for p in phases_deg),
    )


PRESETS = {
    "inline4": create_default_inline_4,
    "inline6": create_default_inline_6,
}
