"""
Exploded View Module
Presentation-only displacements that pull the assembly apart for display.

Displacements are expressed in the assembly frame (X crank axis, Y cylinder
axis, Z depth) and are added by the renderer to each component group's
assembled placement.  Nothing here depends on crank angle, and nothing here
is read by the kinematics.
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

# Full-travel displacement of each group at factor 1  [m]
HEAD_TRAVEL = 0.15
CAM_SPREAD = 0.12
TIMING_TRAVEL = 0.15
VALVE_TRAVEL = 0.05

# Pistons hang below the crank centreline, so "away from the crank" is −Y.
_AWAY_FROM_CRANK = np.array([0.0, -1.0, 0.0])


def clamp_factor(t: float) -> float:
    return min(1.0, max(0.0, float(t)))


@dataclass(frozen=True)
class ExplodedLayout:
    """Group displacements for one exploded-view factor."""

    factor: float
    head: npt.NDArray[np.float64]
    intake_cam: npt.NDArray[np.float64]
    exhaust_cam: npt.NDArray[np.float64]
    timing_group: npt.NDArray[np.float64]
    valve_group: npt.NDArray[np.float64]

    def as_dict(self):
        return {
            "factor": self.factor,
            "head": self.head.tolist(),
            "intake_cam": self.intake_cam.tolist(),
            "exhaust_cam": self.exhaust_cam.tolist(),
            "timing_group": self.timing_group.tolist(),
            "valve_group": self.valve_group.tolist(),
        }


def exploded_layout(t: float) -> ExplodedLayout:
    """Linear exploded-view layout for factor ``t`` (clamped to [0, 1]).

    At 0 every displacement is zero; at 1 the head lifts off by
    HEAD_TRAVEL, the camshafts spread apart by CAM_SPREAD each, the timing
    drive slides off the front of the crank by TIMING_TRAVEL and the valves
    follow the head by VALVE_TRAVEL.
    """
    k = clamp_factor(t)
    return ExplodedLayout(
        factor=k,
        head=_AWAY_FROM_CRANK * (k * HEAD_TRAVEL),
        intake_cam=np.array([0.0, 0.0, -k * CAM_SPREAD]),
        exhaust_cam=np.array([0.0, 0.0, k * CAM_SPREAD]),
        timing_group=np.array([-k * TIMING_TRAVEL, 0.0, 0.0]),
        valve_group=_AWAY_FROM_CRANK * (k * VALVE_TRAVEL),
    )
