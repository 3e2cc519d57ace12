"""
Valvetrain Module
Camshaft timing and lobe-based valve lift.

Cam drive
---------
A four-stroke cycle spans two crank revolutions, so the camshaft turns at
half crank speed:

    ψ = ratio · θ,   ratio = 1/2

The crank sprocket turns with the crank, the cam sprockets with the cams.
Neither chain slip nor backlash is modelled.

Lift profile (raised cosine)
----------------------------
    d    = wrap(ψ − ψ_c)  into [−π, π]
    L(d) = L_max · (cos(π d / (Δ/2)) + 1) / 2     for |d| ≤ Δ/2
    L(d) = 0                                      otherwise

L is zero with zero slope at the window edges, so valve velocity is
continuous at opening and closing.
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from .engine_config import CAM_TO_CRANK_RATIO


def normalize_angle(angle: float) -> float:
    """Shortest signed angle equivalent to ``angle``, in [−π, π]  [rad]."""
    return math.atan2(math.sin(angle), math.cos(angle))


def lobe_lift(
    cam_phase: float, lobe_center: float, duration: float, max_lift: float
) -> float:
    """Valve lift produced by a single cam lobe  [m].

    Parameters
    ----------
    cam_phase   : float  Cam angle the lobe is evaluated at  [rad]
    lobe_center : float  Cam angle of peak lift  [rad]
    duration    : float  Lobe window width Δ  [rad cam]
    max_lift    : float  Peak lift  [m]

    Returns
    -------
    float  Lift  [m]  ∈ [0, max_lift]
    """
    half_window = duration / 2.0
    d = normalize_angle(cam_phase - lobe_center)
    if abs(d) > half_window:
        return 0.0
    t = (math.cos(d / half_window * math.pi) + 1.0) / 2.0
    return max_lift * t


@dataclass(frozen=True)
class SprocketAngles:
    """Timing-drive sprocket rotations  [rad]."""

    crank: float
    intake: float
    exhaust: float


class CamTiming:
    """Fixed-ratio cam drive.

    Attributes
    ----------
    ratio : float  cam angle / crank angle  (0.5 for a four-stroke)
    """

    def __init__(self, ratio: float = CAM_TO_CRANK_RATIO) -> None:
        if ratio <= 0.0:
            raise ValueError(f"ratio must be > 0, got {ratio}")
        self.ratio = ratio

    def cam_angle(self, crank_angle: float) -> float:
        """Camshaft angle for a crank angle  [rad].  No wrapping is applied."""
        return crank_angle * self.ratio

    def cam_phase(self, crank_angle: float, crank_phase: float) -> float:
        """Cam angle seen by a cylinder whose crank throw is offset by
        ``crank_phase``."""
        return self.cam_angle(crank_angle) + crank_phase * self.ratio

    def sprocket_angles(self, crank_angle: float) -> SprocketAngles:
        cam = self.cam_angle(crank_angle)
        return SprocketAngles(crank=crank_angle, intake=cam, exhaust=cam)


class ValveLiftProfile:
    """Raised-cosine lift curve of one cam lobe.

    Attributes
    ----------
    lobe_center : float  Cam angle of peak lift  [rad]
    duration    : float  Lobe window  [rad cam]  ∈ (0, 2π]
    max_lift    : float  Peak lift  [m]  (≥ 0)
    """

    def __init__(self, lobe_center: float, duration: float, max_lift: float) -> None:
        if not (0.0 < duration <= 2.0 * math.pi):
            raise ValueError(f"duration must be in (0, 2π] rad, got {duration}")
        if max_lift < 0.0:
            raise ValueError(f"max_lift must be ≥ 0 m, got {max_lift}")
        self.lobe_center = lobe_center
        self.duration = duration
        self.max_lift = max_lift

    def lift(self, cam_phase: float) -> float:
        """Lift at ``cam_phase``  [m]."""
        return lobe_lift(cam_phase, self.lobe_center, self.duration, self.max_lift)

    def lift_array(self, cam_phase: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Vectorised :meth:`lift` over an array of cam angles."""
        phi = np.asarray(cam_phase, dtype=float)
        d = phi - self.lobe_center
        d = np.arctan2(np.sin(d), np.cos(d))
        half_window = self.duration / 2.0
        bump = self.max_lift * (np.cos(d / half_window * np.pi) + 1.0) / 2.0
        return np.where(np.abs(d) > half_window, 0.0, bump)

    def is_open(self, cam_phase: float) -> bool:
        """True while the lobe holds the valve off its seat."""
        return self.lift(cam_phase) > 0.0
