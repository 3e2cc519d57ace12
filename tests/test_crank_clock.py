"""
Unit Tests for the Crank Clock
Tests frame-time integration, step clamping and angle wrapping.
"""

import math
import pytest

from engine_kinematics.crank_clock import (
    FOUR_STROKE_CYCLE,
    TWO_PI,
    CrankClock,
    wrap_angle,
)
from engine_kinematics.engine_config import OperatingConditions


class TestWrapAngle:

    def test_in_range_unchanged(self):
        assert wrap_angle(1.0) == 1.0

    def test_positive_overflow(self):
        assert wrap_angle(TWO_PI + 0.5) == pytest.approx(0.5)

    def test_negative_input(self):
        assert wrap_angle(-0.5) == pytest.approx(TWO_PI - 0.5)

    def test_result_never_reaches_period(self):
        assert wrap_angle(-1e-18) < TWO_PI
        assert wrap_angle(TWO_PI) == 0.0

    def test_custom_period(self):
        assert wrap_angle(5.0 * math.pi, FOUR_STROKE_CYCLE) == pytest.approx(math.pi)


class TestCrankClock:

    def setup_method(self):
        self.clock = CrankClock(rpm=1500.0)

    def test_angular_velocity(self):
        assert self.clock.angular_velocity == pytest.approx(50.0 * math.pi)

    def test_advance_one_frame(self):
        # 1500 RPM for 10 ms is a quarter turn
        assert self.clock.advance(0.01) == pytest.approx(math.pi / 2.0)

    def test_large_step_is_clamped(self):
        # Clamped to 50 ms = 1.25 rev, which wraps to a quarter turn
        assert self.clock.advance(10.0) == pytest.approx(math.pi / 2.0)

    def test_negative_step_is_ignored(self):
        self.clock.advance(0.004)
        before = self.clock.angle
        assert self.clock.advance(-1.0) == before

    def test_angle_stays_in_range(self):
        for _ in range(500):
            angle = self.clock.advance(0.0167)
            assert 0.0 <= angle < TWO_PI

    def test_full_cycle_period(self):
        clock = CrankClock(rpm=1500.0, period=FOUR_STROKE_CYCLE)
        clock.advance(0.05)
        assert clock.angle == pytest.approx(2.5 * math.pi)

    def test_initial_angle_is_wrapped(self):
        assert CrankClock(angle=-math.pi).angle == pytest.approx(math.pi)

    def test_reset(self):
        self.clock.advance(0.013)
        self.clock.reset(TWO_PI + 0.25)
        assert self.clock.angle == pytest.approx(0.25)

    def test_rpm_change_takes_effect(self):
        self.clock.rpm = 3000.0
        assert self.clock.advance(0.005) == pytest.approx(math.pi / 2.0)

    def test_invalid_rpm(self):
        with pytest.raises(ValueError):
            CrankClock(rpm=-10.0)
        with pytest.raises(ValueError):
            self.clock.rpm = 0.0

    def test_invalid_period(self):
        with pytest.raises(ValueError):
            CrankClock(period=0.0)

    def test_from_conditions(self):
        clock = CrankClock.from_conditions(OperatingConditions(rpm=600.0, max_frame_step=0.02))
        assert clock.rpm == 600.0
        assert clock.max_step == 0.02
        assert clock.advance(1.0) == pytest.approx(0.4 * math.pi)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
