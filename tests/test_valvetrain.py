"""
Unit Tests for Valvetrain Module
Tests cam drive ratio, sprocket angles and lobe lift profiles.
"""

import math
import pytest
import numpy as np

from engine_kinematics.valvetrain import (
    CamTiming,
    ValveLiftProfile,
    lobe_lift,
    normalize_angle,
)

DURATION = math.radians(120.0)
MAX_LIFT = 0.015
CENTER = math.radians(60.0)


class TestNormalizeAngle:

    def test_in_range_unchanged(self):
        for a in [-3.0, -1.0, 0.0, 0.5, 3.0]:
            assert normalize_angle(a) == pytest.approx(a, abs=1e-15)

    def test_wraps_multiple_revolutions(self):
        assert normalize_angle(2.0 * math.pi + 0.25) == pytest.approx(0.25, abs=1e-12)
        assert normalize_angle(-6.0 * math.pi - 0.25) == pytest.approx(-0.25, abs=1e-12)

    def test_shortest_path(self):
        assert normalize_angle(math.radians(350.0)) == pytest.approx(math.radians(-10.0))


class TestCamTiming:

    def setup_method(self):
        self.ct = CamTiming()

    def test_default_ratio_is_half(self):
        assert self.ct.ratio == 0.5

    def test_cam_angle_is_half_crank_angle(self):
        for crank in [0.0, 1.0, math.pi, 2.0 * math.pi, 7.5 * math.pi, -3.0, -100.0]:
            assert self.ct.cam_angle(crank) == crank / 2.0

    def test_cam_phase_includes_scaled_crank_phase(self):
        assert self.ct.cam_phase(1.0, math.pi) == pytest.approx(0.5 + math.pi / 2.0)

    def test_sprockets_follow_crank_and_cam(self):
        s = self.ct.sprocket_angles(3.0)
        assert s.crank == 3.0
        assert s.intake == 1.5
        assert s.exhaust == 1.5

    def test_invalid_ratio(self):
        with pytest.raises(ValueError):
            CamTiming(0.0)


class TestLobeLift:

    def test_peak_at_lobe_center(self):
        assert lobe_lift(CENTER, CENTER, DURATION, MAX_LIFT) == pytest.approx(MAX_LIFT)

    def test_zero_outside_window(self):
        for deg in [121.0, 150.0, 180.0, -60.0, -1.0]:
            assert lobe_lift(math.radians(deg), CENTER, DURATION, MAX_LIFT) == 0.0

    def test_zero_at_window_edges(self):
        for deg in [0.0, 120.0]:
            lift = lobe_lift(math.radians(deg), CENTER, DURATION, MAX_LIFT)
            assert lift == pytest.approx(0.0, abs=1e-18)

    def test_half_lift_at_quarter_window(self):
        """Raised cosine: half lift halfway between centre and edge."""
        lift = lobe_lift(CENTER + DURATION / 4.0, CENTER, DURATION, MAX_LIFT)
        assert lift == pytest.approx(MAX_LIFT / 2.0)

    def test_periodic_over_cam_revolutions(self):
        phase = CENTER + 0.3
        base = lobe_lift(phase, CENTER, DURATION, MAX_LIFT)
        for k in [-2, -1, 1, 5]:
            shifted = lobe_lift(phase + 2.0 * math.pi * k, CENTER, DURATION, MAX_LIFT)
            assert shifted == pytest.approx(base, abs=1e-12)

    def test_symmetric_about_center(self):
        for x in [0.1, 0.4, 0.9]:
            assert lobe_lift(CENTER + x, CENTER, DURATION, MAX_LIFT) == pytest.approx(
                lobe_lift(CENTER - x, CENTER, DURATION, MAX_LIFT), abs=1e-15
            )

    def test_continuous_across_window(self):
        phases = np.linspace(-math.pi, math.pi, 3601)
        lifts = np.array([lobe_lift(p, CENTER, DURATION, MAX_LIFT) for p in phases])
        assert np.all(lifts >= 0.0)
        # Largest jump between neighbours bounded by the steepest slope
        max_slope = MAX_LIFT * math.pi / DURATION
        assert np.max(np.abs(np.diff(lifts))) <= max_slope * (phases[1] - phases[0]) * 1.01


class TestValveLiftProfile:

    def setup_method(self):
        self.profile = ValveLiftProfile(CENTER, DURATION, MAX_LIFT)

    def test_lift_delegates_to_lobe(self):
        assert self.profile.lift(CENTER) == pytest.approx(MAX_LIFT)
        assert self.profile.lift(math.radians(-90.0)) == 0.0

    def test_is_open(self):
        assert self.profile.is_open(CENTER)
        assert not self.profile.is_open(math.radians(200.0))

    def test_lift_array_matches_scalar(self):
        phases = np.linspace(-3.0 * math.pi, 3.0 * math.pi, 721)
        expected = [self.profile.lift(p) for p in phases]
        assert self.profile.lift_array(phases) == pytest.approx(expected, abs=1e-15)

    def test_invalid_duration(self):
        with pytest.raises(ValueError):
            ValveLiftProfile(CENTER, 0.0, MAX_LIFT)
        with pytest.raises(ValueError):
            ValveLiftProfile(CENTER, 7.0, MAX_LIFT)

    def test_invalid_negative_lift(self):
        with pytest.raises(ValueError):
            ValveLiftProfile(CENTER, DURATION, -0.001)

    def test_full_revolution_duration(self):
        profile = ValveLiftProfile(0.0, 2.0 * math.pi, MAX_LIFT)
        assert profile.lift(0.0) == pytest.approx(MAX_LIFT)
        assert profile.lift(math.pi) == pytest.approx(0.0, abs=1e-18)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
