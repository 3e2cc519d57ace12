"""
Crank Clock Module
Frame-synchronous crank-angle accumulator.

Each rendered frame the caller reports the wall-clock time elapsed since the
previous frame.  The step is clamped to ``max_step`` so that a stalled loop
(e.g. a backgrounded window) resumes without a large angular jump, then
converted to an angle increment

    Δθ = 2π · N/60 · dt

and added to the running crank angle, which is wrapped into [0, period).
The default period is one crank revolution (2π); a period of 4π keeps a
whole four-stroke cycle so the camshaft completes its own revolution.
"""

import math

from .engine_config import OperatingConditions

TWO_PI = 2.0 * math.pi
FOUR_STROKE_CYCLE = 4.0 * math.pi


def wrap_angle(angle: float, period: float = TWO_PI) -> float:
    """Wrap ``angle`` into [0, period)  [rad]."""
    wrapped = math.fmod(angle, period)
    if wrapped < 0.0:
        wrapped += period
    # fmod of a tiny negative value can round up to exactly the period
    if wrapped >= period:
        wrapped = 0.0
    return wrapped


class CrankClock:
    """Running crank angle driven by frame time.

    Attributes
    ----------
    angle  : float  Current crank angle  [rad]  ∈ [0, period)
    period : float  Wrap period  [rad]
    """

    def __init__(
        self,
        rpm: float = 1500.0,
        max_step: float = 0.05,
        angle: float = 0.0,
        period: float = TWO_PI,
    ) -> None:
        if period <= 0.0:
            raise ValueError(f"period must be > 0 rad, got {period}")
        self._conditions = OperatingConditions(rpm=rpm, max_frame_step=max_step)
        self.period = period
        self.angle = wrap_angle(angle, period)

    @classmethod
    def from_conditions(
        cls, conditions: OperatingConditions, period: float = TWO_PI
    ) -> "CrankClock":
        return cls(
            rpm=conditions.rpm, max_step=conditions.max_frame_step, period=period
        )

    @property
    def rpm(self) -> float:
        return self._conditions.rpm

    @rpm.setter
    def rpm(self, value: float) -> None:
        self._conditions = OperatingConditions(
            rpm=value, max_frame_step=self._conditions.max_frame_step
        )

    @property
    def max_step(self) -> float:
        return self._conditions.max_frame_step

    @property
    def angular_velocity(self) -> float:
        """ω = 2π·N/60  [rad/s]."""
        return self._conditions.angular_velocity

    def advance(self, dt: float) -> float:
        """Advance by ``dt`` seconds of wall-clock time.

        Negative ``dt`` (clock skew) is treated as zero.

        Returns
        -------
        float  New crank angle  [rad]  ∈ [0, period)
        """
        step = min(self.max_step, max(0.0, dt))
        self.angle = wrap_angle(self.angle + self.angular_velocity * step, self.period)
        return self.angle

    def reset(self, angle: float = 0.0) -> None:
        self.angle = wrap_angle(angle, self.period)
