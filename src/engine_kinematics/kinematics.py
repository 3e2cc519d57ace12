"""
Kinematics Module
Crank-pin position, slider-crank piston travel and connecting-rod alignment.

Mathematical Basis
------------------
Slider-crank notation
    r  = crank throw radius                     [m]
    l  = connecting rod length                  [m]
    λ  = r / l  (rod ratio, typically 0.25–0.35)
    θ  = local crank angle from TDC             [rad]
    φ  = connecting rod angle from cylinder axis [rad]

Piston offset measured from the crank centre along the cylinder axis
    s(θ) = r cos θ + √(max(l² − (r sin θ)², 0))

    s(0) = l + r   (TDC)
    s(π) = l − r   (BDC)

The clamp under the radical keeps s(θ) defined when l < r: wherever the rod
cannot reach, the offset degenerates to r cos θ instead of becoming complex.

Frame
-----
X is the crankshaft axis, Y the cylinder axis.  The crank centre of a
cylinder sits at Y = deck_height and the piston hangs at
Y = deck_height − s(θ).  At θ = 0 the throw points along −Y, towards the
piston, so crank centre, crank pin and piston pin are collinear at TDC and
|pin → piston pin| = l for every θ.
"""

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import numpy.typing as npt

# Directions within this angle of antiparallel take the π-turn branch.
_ANTIPARALLEL_EPS = 1.0e-12


def journal_position(angle: float, throw_radius: float) -> npt.NDArray[np.float64]:
    """Crank-pin position relative to the crank centre  [m].

    The canonical throw (−Y) is rotated by ``angle`` about the crankshaft
    axis (+X).

    Parameters
    ----------
    angle        : float  Crank angle  [rad]
    throw_radius : float  Distance centre → pin  [m]  (≥ 0)

    Returns
    -------
    ndarray, shape (3,)
    """
    return np.array(
        [
            0.0,
            -throw_radius * math.cos(angle),
            -throw_radius * math.sin(angle),
        ]
    )


def rotation_between(
    source: Sequence[float], target: Sequence[float]
) -> npt.NDArray[np.float64]:
    """Minimal rotation taking direction ``source`` onto direction ``target``.

    Returns a unit quaternion ``(w, x, y, z)``.  Identity is returned when
    either vector has zero length.  For antiparallel inputs the rotation is a
    half turn about an axis perpendicular to ``source``.
    """
    u = np.asarray(source, dtype=float)
    v = np.asarray(target, dtype=float)
    nu = np.linalg.norm(u)
    nv = np.linalg.norm(v)
    if nu == 0.0 or nv == 0.0:
        return np.array([1.0, 0.0, 0.0, 0.0])
    u = u / nu
    v = v / nv

    # With h = u + v:  1 + u·v = |h|²/2  and  u × v = u × h.  Both stay
    # accurate as v approaches −u, where 1 + u·v cancels to rounding noise.
    h = u + v
    xyz = np.cross(u, h)
    if np.dot(u, v) < 0.0 and np.linalg.norm(xyz) < _ANTIPARALLEL_EPS:
        # Half turn about u × e_k, e_k the last smallest component of u.  For
        # the +Y rest axis this is the crank axis, the same limit the rod
        # approaches on either side of TDC.
        helper = np.zeros(3)
        helper[2 - int(np.argmin(np.abs(u[::-1])))] = 1.0
        axis = np.cross(u, helper)
        axis /= np.linalg.norm(axis)
        return np.array([0.0, axis[0], axis[1], axis[2]])

    q = np.array([0.5 * float(np.dot(h, h)), xyz[0], xyz[1], xyz[2]])
    return q / np.linalg.norm(q)


def rotate_vector(
    quaternion: Sequence[float], vector: Sequence[float]
) -> npt.NDArray[np.float64]:
    """Apply unit quaternion ``(w, x, y, z)`` to a 3-vector."""
    w = float(quaternion[0])
    q = np.asarray(quaternion[1:], dtype=float)
    v = np.asarray(vector, dtype=float)
    t = 2.0 * np.cross(q, v)
    return v + w * t + np.cross(q, t)


@dataclass(frozen=True)
class RodAlignment:
    """Pose of a connecting rod stretched between two pins.

    Attributes
    ----------
    direction : unit vector big end → small end
    length    : instantaneous pin-to-pin distance  [m]
    scale     : length / nominal rod length  (1.0 for consistent geometry)
    rotation  : unit quaternion (w, x, y, z) mapping the rest axis onto
                ``direction``
    """

    direction: npt.NDArray[np.float64]
    length: float
    scale: float
    rotation: npt.NDArray[np.float64]


@dataclass(frozen=True)
class SliderCrankSolution:
    """Slider-crank result for one cylinder at one crank angle."""

    piston_offset: float  # [m]  crank centre → piston pin
    piston_position: float  # [m]  deck_height − piston_offset
    rod_length: float  # [m]  |crank pin → piston pin|
    crank_pin: npt.NDArray[np.float64]  # [m]  cylinder frame
    piston_pin: npt.NDArray[np.float64]  # [m]  cylinder frame


class SliderCrank:
    """Exact slider-crank mechanism kinematics.

    Attributes
    ----------
    r            : float  Crank throw radius  [m]
    l            : float  Connecting rod length  [m]
    lambda_ratio : float  Rod ratio λ = r / l  [dimensionless]
    rest_axis    : ndarray  Unit direction of an unrotated rod
    """

    def __init__(
        self,
        crank_radius: float,
        connecting_rod_length: float,
        rest_axis: Sequence[float] = (0.0, 1.0, 0.0),
    ) -> None:
        """
        Parameters
        ----------
        crank_radius           : float  r  [m]  (must be > 0)
        connecting_rod_length  : float  l  [m]  (must be > 0)
        rest_axis              : 3-vector, rod direction in its rest pose

        Raises
        ------
        ValueError
            If crank_radius ≤ 0, connecting_rod_length ≤ 0, or rest_axis
            has zero length.

        Geometry with l ≤ r is accepted; :class:`EngineGeometry` is where
        that case is reported.
        """
        if crank_radius <= 0.0:
            raise ValueError(f"crank_radius must be > 0 m, got {crank_radius}")
        if connecting_rod_length <= 0.0:
            raise ValueError(
                f"connecting_rod_length must be > 0 m, got {connecting_rod_length}"
            )
        axis = np.asarray(rest_axis, dtype=float)
        norm = np.linalg.norm(axis)
        if axis.shape != (3,) or norm == 0.0:
            raise ValueError(f"rest_axis must be a non-zero 3-vector, got {rest_axis}")

        self.r = crank_radius
        self.l = connecting_rod_length
        self.lambda_ratio = crank_radius / connecting_rod_length  # λ = r/l
        self.rest_axis = axis / norm

    # ── Piston travel ─────────────────────────────────────────────────────

    def piston_offset(self, theta: float) -> float:
        """Piston pin distance from the crank centre  s(θ)  [m].

        Formula
        -------
            s(θ) = r cos θ + √(max(l² − (r sin θ)², 0))

        Boundary conditions:
            s(0) = r + l   (TDC)
            s(π) = l − r   (BDC)
        """
        r_sin = self.r * math.sin(theta)
        radicand = max(self.l * self.l - r_sin * r_sin, 0.0)
        return self.r * math.cos(theta) + math.sqrt(radicand)

    def piston_offset_array(self, theta: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Vectorised :meth:`piston_offset` over an array of angles."""
        theta = np.asarray(theta, dtype=float)
        r_sin = self.r * np.sin(theta)
        radicand = np.maximum(self.l * self.l - r_sin * r_sin, 0.0)
        return self.r * np.cos(theta) + np.sqrt(radicand)

    def piston_position(self, theta: float, deck_height: float) -> float:
        """Piston pin axial position  deck_height − s(θ)  [m]."""
        return deck_height - self.piston_offset(theta)

    def connecting_rod_angle(self, theta: float) -> float:
        """Connecting rod angle from cylinder axis  φ = arcsin(λ sin θ)  [rad].

        The argument is clamped to [−1, 1], so for λ > 1 the angle saturates
        at ±π/2 where the rod cannot reach.
        """
        argument = self.lambda_ratio * math.sin(theta)
        argument = max(-1.0, min(1.0, argument))
        return math.asin(argument)

    # ── Rod alignment ─────────────────────────────────────────────────────

    def align_rod(
        self, crank_pin: Sequence[float], piston_pin: Sequence[float]
    ) -> RodAlignment:
        """Orient the rod from ``crank_pin`` (big end) to ``piston_pin``.

        The scale factor ``length / l`` absorbs any drift between the
        pin-to-pin distance and the nominal rod length.
        """
        a = np.asarray(crank_pin, dtype=float)
        b = np.asarray(piston_pin, dtype=float)
        delta = b - a
        length = float(np.linalg.norm(delta))
        if length > 0.0:
            direction = delta / length
        else:
            direction = self.rest_axis.copy()
        return RodAlignment(
            direction=direction,
            length=length,
            scale=length / self.l,
            rotation=rotation_between(self.rest_axis, direction),
        )

    # ── Full solve ────────────────────────────────────────────────────────

    def solve(
        self,
        theta: float,
        deck_height: float,
        bore_offset: float = 0.0,
    ) -> SliderCrankSolution:
        """Piston travel and both pin positions at local crank angle ``theta``.

        Parameters
        ----------
        theta       : float  Local crank angle  [rad]
        deck_height : float  Axial position of the crank centreline  [m]
        bore_offset : float  Cylinder position along the crank axis  [m]
        """
        offset = self.piston_offset(theta)
        position = deck_height - offset

        centre = np.array([bore_offset, deck_height, 0.0])
        crank_pin = centre + journal_position(theta, self.r)
        piston_pin = np.array([bore_offset, position, 0.0])

        return SliderCrankSolution(
            piston_offset=offset,
            piston_position=position,
            rod_length=float(np.linalg.norm(piston_pin - crank_pin)),
            crank_pin=crank_pin,
            piston_pin=piston_pin,
        )
