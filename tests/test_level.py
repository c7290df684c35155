"""Tests for level.py and geometry.py - level layout checks."""

import json
import os
import tempfile
import numpy as np
import pytest

from partlint.level import LevelLayout, Placement, SpawnPoint, check_layout, lint_layout, load_layout
from partlint.geometry import placement_box, boxes_overlap, box_contains_box, is_point_in_polygon
from partlint.profile import make_profile, LintProfile


def make_layout(**overrides):
    values = dict(
        name="Lobby",
        bounds_studs=[100.0, 50.0, 100.0],
        spawn=SpawnPoint(position=[10.0, 0.0, 10.0]),
        placements=[
            Placement(name="Door_Front", asset="Door_Wooden", position=[50.0, 3.5, 50.0], size=[4.0, 7.0, 0.5]),
            Placement(name="Wall_North", position=[50.0, 6.0, 99.5], size=[100.0, 12.0, 1.0]),
        ],
    )
    values.update(overrides)
    return LevelLayout(**values)


def rule_ids(findings):
    return [f.rule_id for f in findings]


class TestGeometry:
    """Test box helpers."""
    
    def test_placement_box(self):
        lo, hi = placement_box([0, 0, 0], [4, 2, 2])
        np.testing.assert_allclose(lo, [-2, -1, -1])
        np.testing.assert_allclose(hi, [2, 1, 1])
    
    def test_rotated_box(self):
        """A quarter turn swaps the X and Z extents."""
        lo, hi = placement_box([0, 0, 0], [4, 2, 2], yaw_degrees=90)
        np.testing.assert_allclose(hi - lo, [2, 2, 4], atol=1e-9)
    
    def test_overlap(self):
        a = placement_box([0, 0, 0], [2, 2, 2])
        b = placement_box([1, 0, 0], [2, 2, 2])
        touching = placement_box([2, 0, 0], [2, 2, 2])
        
        assert boxes_overlap(a, b)
        assert not boxes_overlap(a, touching)
        assert box_contains_box(placement_box([0, 0, 0], [10, 10, 10]), a)
    
    def test_point_in_polygon(self):
        square = [(0, 0), (10, 0), (10, 10), (0, 10)]
        
        assert is_point_in_polygon((5, 5), square)
        assert not is_point_in_polygon((15, 5), square)

    def test_point_in_concave_polygon(self):
        """The notch of an L-shaped outline is outside."""
        l_shape = [(0, 0), (10, 0), (10, 4), (4, 4), (4, 10), (0, 10)]

        assert is_point_in_polygon((2, 8), l_shape)
        assert is_point_in_polygon((8, 2), l_shape)
        assert not is_point_in_polygon((8, 8), l_shape)
        assert not is_point_in_polygon((2, 2), [(0, 0), (10, 0)])

    def test_diagonal_footprint(self):
        """An eighth turn widens a square footprint to its diagonal."""
        lo, hi = placement_box([0, 0, 0], [2, 3, 2], yaw_degrees=45)
        np.testing.assert_allclose(hi - lo, [2 * np.sqrt(2), 3, 2 * np.sqrt(2)])


class TestCheckLayout:
    """Test check_layout."""
    
    def test_clean_layout(self):
        assert check_layout(make_layout(), make_profile()) == []
    
    def test_out_of_bounds(self):
        layout = make_layout(placements=[
            Placement(name="Wall_East", position=[100.0, 6.0, 50.0], size=[1.0, 12.0, 100.0]),
        ])
        
        assert rule_ids(check_layout(layout, make_profile())) == ["level.bounds"]
    
    def test_outline(self):
        layout = make_layout(outline=[[0, 0], [40, 0], [40, 40], [0, 40]])
        
        findings = check_layout(layout, make_profile())
        
        assert rule_ids(findings) == ["level.outline", "level.outline"]
    
    def test_duplicate_and_bad_names(self):
        layout = make_layout(placements=[
            Placement(name="Prop_Crate", position=[20.0, 1.0, 20.0], size=[2.0, 2.0, 2.0]),
            Placement(name="Prop_Crate", position=[30.0, 1.0, 30.0], size=[2.0, 2.0, 2.0]),
            Placement(name="Cube.001", position=[40.0, 1.0, 40.0], size=[2.0, 2.0, 2.0]),
        ])
        
        ids = rule_ids(check_layout(layout, make_profile()))
        
        assert ids.count("level.duplicate-name") == 1
        assert ids.count("level.naming") == 1
    
    def test_overlap(self):
        layout = make_layout(placements=[
            Placement(name="Prop_A", position=[20.0, 1.0, 20.0], size=[2.0, 2.0, 2.0]),
            Placement(name="Prop_B", position=[21.0, 1.0, 20.0], size=[2.0, 2.0, 2.0]),
            Placement(name="Env_Fog", position=[20.0, 1.0, 20.0], size=[4.0, 2.0, 4.0], solid=False),
        ])
        
        findings = check_layout(layout, make_profile())
        
        assert rule_ids(findings) == ["level.overlap"]
        assert findings[0].message == "Prop_A overlaps Prop_B"
    
    def test_dimensions(self):
        """Door size is checked in the door's own frame."""
        layout = make_layout(placements=[
            Placement(name="Door_Side", position=[50.0, 3.5, 50.0], size=[4.0, 7.0, 0.5], rotation_y=90.0),
            Placement(name="Door_Tall", position=[60.0, 5.0, 50.0], size=[4.0, 10.0, 0.5]),
            Placement(name="Hall_A", category="corridor", position=[30.0, 6.0, 30.0],
                      size=[6.0, 12.0, 40.0], solid=False),
        ])
        
        findings = check_layout(layout, make_profile())
        dims = [f for f in findings if f.rule_id == "level.dimension"]
        
        assert len(dims) == 2
        assert "Door_Tall" in dims[0].message
        assert "Hall_A (corridor)" in dims[1].message
    
    def test_missing_spawn(self):
        findings = check_layout(make_layout(spawn=None), make_profile())
        
        assert rule_ids(findings) == ["level.spawn"]
    
    def test_spawn_blocked(self):
        layout = make_layout(placements=[
            Placement(name="Prop_Crate", position=[10.0, 1.0, 10.0], size=[2.0, 2.0, 2.0]),
        ])
        
        findings = check_layout(layout, make_profile())
        
        assert rule_ids(findings) == ["level.spawn"]
        assert "Prop_Crate" in findings[0].message
    
    def test_spawn_outside_and_headroom(self):
        outside = check_layout(make_layout(spawn=SpawnPoint(position=[-5.0, 0.0, 10.0])), make_profile())
        low = check_layout(make_layout(spawn=SpawnPoint(position=[10.0, 47.0, 10.0])), make_profile())
        
        assert "outside the level bounds" in outside[0].message
        assert "headroom" in low[0].message
    
    def test_spawn_custom_clearance(self):
        """A spawn's own clearance replaces the character height."""
        beam = Placement(name="Prop_Beam", position=[10.0, 8.0, 10.0], size=[2.0, 2.0, 2.0])
        default = check_layout(make_layout(placements=[beam]), make_profile())
        tall = check_layout(
            make_layout(placements=[beam], spawn=SpawnPoint(position=[10.0, 0.0, 10.0], clearance=12.0)),
            make_profile(),
        )
        low = check_layout(
            make_layout(placements=[], spawn=SpawnPoint(position=[10.0, 40.0, 10.0], clearance=12.0)),
            make_profile(),
        )

        assert default == []
        assert rule_ids(tall) == ["level.spawn"]
        assert "Prop_Beam" in tall[0].message
        assert "12 studs of headroom" in low[0].message

    def test_spawn_on_floor(self):
        """Standing on top of a floor slab is fine."""
        layout = make_layout(placements=[
            Placement(name="Floor_Main", position=[50.0, 0.5, 50.0], size=[100.0, 1.0, 100.0]),
        ], spawn=SpawnPoint(position=[10.0, 1.0, 10.0]))
        
        assert check_layout(layout, make_profile()) == []


class TestLayoutSerialization:
    """Test LevelLayout JSON."""
    
    def test_roundtrip(self):
        original = make_layout()
        
        restored = LevelLayout.from_json(original.to_json())
        
        assert restored.name == "Lobby"
        assert restored.spawn.position == [10.0, 0.0, 10.0]
        assert [p.name for p in restored.placements] == ["Door_Front", "Wall_North"]
        assert restored.placements[0].asset == "Door_Wooden"
    
    def test_units(self):
        """Layouts in meters are converted to studs."""
        layout = LevelLayout.from_dict({
            "units": "meters",
            "bounds_studs": [28.0, 14.0, 28.0],
            "placements": [{"name": "Prop_A", "position": [2.8, 0.28, 2.8], "size": [0.56, 0.56, 0.56]}],
        })
        
        np.testing.assert_allclose(layout.bounds_studs, [100.0, 50.0, 100.0])
        np.testing.assert_allclose(layout.placements[0].size, [2.0, 2.0, 2.0])
    
    def test_spawn_clearance_serialized(self):
        layout = LevelLayout.from_dict({
            "units": "meters",
            "spawn": {"position": [2.8, 0.0, 2.8], "clearance": 2.8},
        })

        assert layout.spawn.clearance == pytest.approx(10.0)
        assert layout.to_dict()["spawn"]["clearance"] == pytest.approx(10.0)
        assert "clearance" not in make_layout().to_dict()["spawn"]

    def test_placement_requires_name(self):
        with pytest.raises(ValueError, match="name"):
            LevelLayout.from_dict({"placements": [{"position": [0, 0, 0]}]})
    
    def test_load_layout(self):
        with tempfile.NamedTemporaryFile("w", suffix=".json", delete=False) as f:
            f.write(make_layout().to_json())
            path = f.name
        
        try:
            report = lint_layout(load_layout(path), make_profile())
        finally:
            os.unlink(path)
        
        assert report.passed
        assert "level.spawn" in report.checked
    
    def test_load_missing(self):
        with pytest.raises(FileNotFoundError):
            load_layout("/nonexistent/level.json")
    
    def test_severity_override(self):
        profile = make_profile()
        profile.severity_overrides["level.overlap"] = "error"
        layout = make_layout(placements=[
            Placement(name="Prop_A", position=[20.0, 1.0, 20.0], size=[2.0, 2.0, 2.0]),
            Placement(name="Prop_B", position=[21.0, 1.0, 20.0], size=[2.0, 2.0, 2.0]),
        ])
        
        report = lint_layout(layout, profile)
        
        assert report.findings[0].severity == "error"
        assert not report.passed

    def test_disabled_check(self):
        profile = make_profile()
        profile.disabled_rules.append("level.spawn")

        report = lint_layout(make_layout(spawn=None), profile)

        assert report.passed
        assert "level.spawn" not in report.checked


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
