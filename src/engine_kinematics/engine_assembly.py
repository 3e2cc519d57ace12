"""
Engine Assembly
Fans a single crank angle out to every cylinder's slider-crank, the shared
cam drive and each cylinder's intake/exhaust lobes.

The assembly holds only immutable configuration plus the presentation-only
exploded factor.  :meth:`EngineAssembly.update` returns a fresh
:class:`AssemblyState` on every call; writing that state into scene objects
is the caller's job.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
import numpy.typing as npt

from .crank_clock import wrap_angle
from .engine_config import EngineGeometry
from .exploded_view import ExplodedLayout, clamp_factor, exploded_layout
from .kinematics import RodAlignment, SliderCrank
from .valvetrain import CamTiming, ValveLiftProfile


# ── Per-frame state ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CylinderState:
    """Pose of one cylinder's moving parts."""

    number: int  # 1-indexed
    crank_angle: float  # [rad]  local angle, wrapped into [0, 2π)
    piston_offset: float  # [m]   crank centre → piston pin
    piston_position: float  # [m]   deck_height − piston_offset
    crank_pin: npt.NDArray[np.float64]  # [m]   assembly frame
    piston_pin: npt.NDArray[np.float64]  # [m]   assembly frame
    rod: RodAlignment


@dataclass(frozen=True)
class ValveState:
    """Valve lifts of one cylinder."""

    cylinder: int  # 1-indexed
    intake_lift: float  # [m]
    exhaust_lift: float  # [m]


@dataclass(frozen=True)
class AssemblyState:
    """Everything the renderer needs for one frame."""

    crank_angle: float  # [rad]  wrapped into [0, 2π)
    cam_angle: float  # [rad]
    crank_sprocket_angle: float  # [rad]
    intake_sprocket_angle: float  # [rad]
    exhaust_sprocket_angle: float  # [rad]
    cylinders: Tuple[CylinderState, ...]
    valves: Tuple[ValveState, ...]


@dataclass
class CycleSweep:
    """Kinematics evaluated over a grid of crank angles.

    Per-cylinder arrays have shape (num_cylinders, num_angles).
    """

    crank_angles_deg: npt.NDArray[np.float64]  # [deg]
    crank_angles_rad: npt.NDArray[np.float64]  # [rad]
    cam_angle: npt.NDArray[np.float64]  # [rad]

    piston_offset: npt.NDArray[np.float64]  # [m]
    piston_position: npt.NDArray[np.float64]  # [m]
    rod_angle: npt.NDArray[np.float64]  # [rad]
    intake_lift: npt.NDArray[np.float64]  # [m]
    exhaust_lift: npt.NDArray[np.float64]  # [m]

    @property
    def num_cylinders(self) -> int:
        return self.piston_offset.shape[0]


# ── Cylinder ──────────────────────────────────────────────────────────────────


class Cylinder:
    """Represents a single cylinder of the assembly.

    Stores the crank phase and bore offset for one cylinder and provides
    the mapping from global to local crank angle.
    """

    def __init__(
        self, cylinder_number: int, crank_phase: float, bore_offset: float
    ) -> None:
        """
        Parameters
        ----------
        cylinder_number : int    1-indexed cylinder identifier
        crank_phase     : float  Crank phase offset  [rad]
        bore_offset     : float  Position along the crank axis  [m]
        """
        self._number = cylinder_number
        self._crank_phase = float(crank_phase)
        self._bore_offset = float(bore_offset)

    @property
    def number(self) -> int:
        return self._number

    @property
    def crank_phase(self) -> float:
        """Crank phase offset  [rad]  (read-only)."""
        return self._crank_phase

    @property
    def bore_offset(self) -> float:
        return self._bore_offset

    def local_angle(self, global_angle: float) -> float:
        """local angle = (global angle + crank phase) mod 2π  [rad]."""
        return wrap_angle(global_angle + self.crank_phase)

    def __repr__(self) -> str:
        return (
            f"Cylinder(number={self.number}, "
            f"crank_phase={math.degrees(self.crank_phase):.1f}°, "
            f"bore_offset={self.bore_offset:.4f} m)"
        )


# ── Assembly ──────────────────────────────────────────────────────────────────


class EngineAssembly:
    """N-cylinder crank, rod, piston and valvetrain kinematics.

    Each cylinder is a phase-shifted copy of the same slider-crank: its
    local crank angle is the global angle plus its crank phase, and its cam
    lobes are evaluated at the cam angle plus that phase scaled by the cam
    ratio.  Cam and sprocket angles are shared by all cylinders.
    """

    def __init__(self, geometry: EngineGeometry) -> None:
        self.geometry = geometry
        self.num_cylinders = geometry.num_cylinders

        self.cylinders: Tuple[Cylinder, ...] = tuple(
            Cylinder(cylinder_number=i + 1, crank_phase=phase, bore_offset=offset)
            for i, (phase, offset) in enumerate(
                zip(geometry.crank_phases, geometry.bore_offsets)
            )
        )

        self.slider_crank = SliderCrank(
            geometry.crank_radius,
            geometry.connecting_rod_length,
            rest_axis=geometry.rod_rest_axis,
        )
        self.cam_timing = CamTiming(geometry.cam_ratio)
        self.intake_profile = ValveLiftProfile(
            geometry.intake_lobe_center,
            geometry.valve_duration,
            geometry.max_valve_lift,
        )
        self.exhaust_profile = ValveLiftProfile(
            geometry.exhaust_lobe_center,
            geometry.valve_duration,
            geometry.max_valve_lift,
        )

        self._exploded = 0.0

    # ── Per-frame update ──────────────────────────────────────────────────

    def update(self, crank_angle: float) -> AssemblyState:
        """Pose every moving part at global crank angle ``crank_angle``  [rad].

        Crank-side results depend on the angle modulo 2π.  The cam drive
        sees the angle as given, so a caller that accumulates over a full
        four-stroke cycle (0 – 4π) gets a camshaft that completes its
        revolution; one that wraps at 2π sees the cam return every crank
        revolution.
        """
        angle = wrap_angle(crank_angle)
        sprockets = self.cam_timing.sprocket_angles(crank_angle)

        cylinder_states = []
        valve_states = []
        for cyl in self.cylinders:
            cylinder_states.append(self._solve_cylinder(cyl, angle))

            cam_phase = self.cam_timing.cam_phase(crank_angle, cyl.crank_phase)
            valve_states.append(
                ValveState(
                    cylinder=cyl.number,
                    intake_lift=self.intake_profile.lift(cam_phase),
                    exhaust_lift=self.exhaust_profile.lift(cam_phase),
                )
            )

        return AssemblyState(
            crank_angle=angle,
            cam_angle=self.cam_timing.cam_angle(crank_angle),
            crank_sprocket_angle=sprockets.crank,
            intake_sprocket_angle=sprockets.intake,
            exhaust_sprocket_angle=sprockets.exhaust,
            cylinders=tuple(cylinder_states),
            valves=tuple(valve_states),
        )

    def _solve_cylinder(self, cyl: Cylinder, global_angle: float) -> CylinderState:
        theta = cyl.local_angle(global_angle)
        solution = self.slider_crank.solve(
            theta, self.geometry.deck_height, bore_offset=cyl.bore_offset
        )
        return CylinderState(
            number=cyl.number,
            crank_angle=theta,
            piston_offset=solution.piston_offset,
            piston_position=solution.piston_position,
            crank_pin=solution.crank_pin,
            piston_pin=solution.piston_pin,
            rod=self.slider_crank.align_rod(solution.crank_pin, solution.piston_pin),
        )

    # ── Exploded view (presentation only) ─────────────────────────────────

    @property
    def exploded(self) -> float:
        return self._exploded

    def set_exploded(self, t: float) -> ExplodedLayout:
        """Set the exploded-view factor (clamped to [0, 1]).

        Has no effect on :meth:`update`.
        """
        self._exploded = clamp_factor(t)
        return exploded_layout(self._exploded)

    def exploded_layout(self) -> ExplodedLayout:
        return exploded_layout(self._exploded)

    # ── Cycle sweep ───────────────────────────────────────────────────────

    def sweep(
        self,
        angles_deg: Optional[npt.ArrayLike] = None,
        resolution_deg: float = 1.0,
    ) -> CycleSweep:
        """Evaluate the kinematics over a grid of global crank angles.

        Parameters
        ----------
        angles_deg     : array-like, optional  Crank angles  [deg].  Defaults
                         to one full four-stroke cycle, 0° – 720° inclusive.
        resolution_deg : float  Grid step when ``angles_deg`` is omitted  [deg]

        Matches :meth:`update` at every grid angle; a 0° – 720° sweep covers
        one complete camshaft revolution.
        """
        if angles_deg is None:
            if resolution_deg <= 0.0:
                raise ValueError(
                    f"resolution_deg must be > 0°, got {resolution_deg}"
                )
            num_steps = int(round(720.0 / resolution_deg))
            angles_deg = np.linspace(0.0, 720.0, num_steps + 1)

        deg = np.asarray(angles_deg, dtype=float)
        rad = np.deg2rad(deg)
        cam = rad * self.cam_timing.ratio

        phases = np.array([cyl.crank_phase for cyl in self.cylinders])[:, np.newaxis]
        local = rad[np.newaxis, :] + phases

        offset = self.slider_crank.piston_offset_array(local)
        rod_argument = np.clip(self.slider_crank.lambda_ratio * np.sin(local), -1.0, 1.0)
        cam_phase = cam[np.newaxis, :] + phases * self.cam_timing.ratio

        return CycleSweep(
            crank_angles_deg=deg,
            crank_angles_rad=rad,
            cam_angle=cam,
            piston_offset=offset,
            piston_position=self.geometry.deck_height - offset,
            rod_angle=np.arcsin(rod_argument),
            intake_lift=self.intake_profile.lift_array(cam_phase),
            exhaust_lift=self.exhaust_profile.lift_array(cam_phase),
        )

    # ── Phasing analysis ──────────────────────────────────────────────────

    def tdc_groups(self, tolerance: float = 1.0e-9) -> List[List[int]]:
        """Cylinder numbers grouped by crank phase (mod 2π).

        Cylinders in one group reach TDC at the same crank angle.  Groups are
        ordered by the crank angle at which they reach TDC.
        """
        groups: List[Tuple[float, List[int]]] = []
        for cyl in self.cylinders:
            # TDC when local angle ≡ 0, i.e. global angle ≡ −phase
            tdc_angle = wrap_angle(-cyl.crank_phase)
            for angle, members in groups:
                gap = abs(angle - tdc_angle)
                if min(gap, 2.0 * math.pi - gap) <= tolerance:
                    members.append(cyl.number)
                    break
            else:
                groups.append((tdc_angle, [cyl.number]))
        groups.sort(key=lambda item: item[0])
        return [members for _, members in groups]

    def tdc_angle(self, cylinder_number: int) -> float:
        """Global crank angle at which ``cylinder_number`` is at TDC  [rad]."""
        if not 1 <= cylinder_number <= self.num_cylinders:
            raise ValueError(
                f"cylinder_number must be in [1, {self.num_cylinders}], "
                f"got {cylinder_number}"
            )
        return wrap_angle(-self.cylinders[cylinder_number - 1].crank_phase)
