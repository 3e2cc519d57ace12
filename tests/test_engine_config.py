"""
Unit Tests for Engine Configuration
Tests geometry validation, derived properties, presets and JSON round-trip.
"""

import dataclasses
import json
import math
import warnings

import pytest

from engine_kinematics.engine_config import (
    PRESETS,
    EngineGeometry,
    OperatingConditions,
    create_default_inline_4,
    create_default_inline_6,
)


def make_geometry(**overrides) -> EngineGeometry:
    """Convenience factory for a valid two-cylinder geometry."""
    params = dict(
        crank_radius=0.043,
        connecting_rod_length=0.145,
        deck_height=0.5,
        bore_offsets=(0.0, 0.095),
        crank_phases=(0.0, math.pi),
    )
    params.update(overrides)
    return EngineGeometry(**params)


class TestEngineGeometry:

    # ── Construction guards ───────────────────────────────────────────────

    def test_valid_geometry_does_not_warn(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            make_geometry()

    def test_invalid_zero_crank_radius(self):
        with pytest.raises(ValueError):
            make_geometry(crank_radius=0.0)

    def test_invalid_negative_rod_length(self):
        with pytest.raises(ValueError):
            make_geometry(connecting_rod_length=-0.1)

    def test_rod_shorter_than_crank_warns(self):
        with pytest.warns(UserWarning, match="physically invalid"):
            geometry = make_geometry(crank_radius=0.2, connecting_rod_length=0.1)
        assert geometry.crank_radius == 0.2

    def test_unusual_rod_ratio_warns(self):
        with pytest.warns(UserWarning, match="Rod ratio"):
            make_geometry(crank_radius=0.01, connecting_rod_length=0.2)

    def test_mismatched_cylinder_lists(self):
        with pytest.raises(ValueError):
            make_geometry(bore_offsets=(0.0,), crank_phases=(0.0, math.pi))

    def test_no_cylinders(self):
        with pytest.raises(ValueError):
            make_geometry(bore_offsets=(), crank_phases=())

    def test_invalid_cam_ratio(self):
        with pytest.raises(ValueError):
            make_geometry(cam_ratio=0.0)

    def test_invalid_valve_duration(self):
        with pytest.raises(ValueError):
            make_geometry(valve_duration=0.0)
        with pytest.raises(ValueError):
            make_geometry(valve_duration=2.0 * math.pi + 0.1)

    def test_invalid_negative_lift(self):
        with pytest.raises(ValueError):
            make_geometry(max_valve_lift=-0.001)

    def test_invalid_rest_axis(self):
        with pytest.raises(ValueError):
            make_geometry(rod_rest_axis=(0.0, 0.0, 0.0))

    # ── Immutability ──────────────────────────────────────────────────────

    def test_lists_frozen_into_tuples(self):
        geometry = make_geometry(bore_offsets=[0.0, 0.1], crank_phases=[0.0, 1.0])
        assert geometry.bore_offsets == (0.0, 0.1)
        assert geometry.crank_phases == (0.0, 1.0)

    def test_fields_cannot_be_reassigned(self):
        geometry = make_geometry()
        with pytest.raises(dataclasses.FrozenInstanceError):
            geometry.crank_phases = (1.0, 2.0)

    # ── Derived properties ────────────────────────────────────────────────

    def test_derived_properties(self):
        geometry = make_geometry()
        assert geometry.num_cylinders == 2
        assert geometry.stroke == pytest.approx(0.086)
        assert geometry.lambda_ratio == pytest.approx(0.043 / 0.145)
        assert geometry.rod_ratio == pytest.approx(0.145 / 0.043)

    def test_default_cam_ratio_is_half(self):
        assert make_geometry().cam_ratio == 0.5

    # ── Serialisation ─────────────────────────────────────────────────────

    def test_dict_round_trip(self):
        geometry = create_default_inline_4()
        assert EngineGeometry.from_dict(geometry.to_dict()) == geometry

    def test_json_round_trip(self, tmp_path):
        path = tmp_path / "geometry.json"
        geometry = create_default_inline_6()
        geometry.to_json(str(path))
        assert EngineGeometry.from_json(str(path)) == geometry

    def test_json_is_plain_data(self, tmp_path):
        path = tmp_path / "geometry.json"
        create_default_inline_4().to_json(str(path))
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["crank_phases"] == pytest.approx([0.0, math.pi, math.pi, 0.0])

    def test_missing_field(self):
        data = create_default_inline_4().to_dict()
        del data["deck_height"]
        with pytest.raises(KeyError):
            EngineGeometry.from_dict(data)

    def test_unknown_field(self):
        data = create_default_inline_4().to_dict()
        data["bore"] = 0.082
        with pytest.raises(ValueError):
            EngineGeometry.from_dict(data)

    def test_json_must_be_object(self, tmp_path):
        path = tmp_path / "geometry.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(ValueError):
            EngineGeometry.from_json(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EngineGeometry.from_json(str(tmp_path / "absent.json"))


class TestPresets:

    def test_inline_4_preset(self):
        geometry = create_default_inline_4()
        assert geometry.num_cylinders == 4
        assert geometry.crank_radius == 0.043
        assert geometry.connecting_rod_length == 0.145
        assert geometry.crank_phases == (0.0, math.pi, math.pi, 0.0)
        assert geometry.max_valve_lift == 0.015
        assert math.degrees(geometry.valve_duration) == pytest.approx(120.0)

    def test_inline_6_preset(self):
        geometry = create_default_inline_6()
        assert geometry.num_cylinders == 6
        assert sum(geometry.bore_offsets) == pytest.approx(0.0, abs=1e-12)

    def test_preset_registry(self):
        assert set(PRESETS) == {"inline4", "inline6"}


class TestOperatingConditions:

    def test_angular_velocity(self):
        assert OperatingConditions(rpm=60.0).angular_velocity == pytest.approx(2.0 * math.pi)

    def test_cycle_time(self):
        assert OperatingConditions(rpm=1200.0).cycle_time == pytest.approx(0.1)

    def test_invalid_rpm(self):
        with pytest.raises(ValueError):
            OperatingConditions(rpm=0.0)

    def test_invalid_frame_step(self):
        with pytest.raises(ValueError):
            OperatingConditions(max_frame_step=0.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
