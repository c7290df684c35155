"""
Level layout checks.

A level layout is a JSON document listing every placed asset with its center
position and size in studs. The level occupies the box from the origin to
bounds_studs, optionally restricted to an XZ outline polygon.
"""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Dict, Any, Optional, Union

from partlint.geometry import (
    placement_box, boxes_overlap, box_contains_box, box_contains_point, is_point_in_polygon,
)
from partlint.linter import Finding, LintReport
from partlint.naming import check_name
from partlint.profile import LintProfile
from partlint.rules import compare_dimensions
from partlint.units import unit_scale

LEVEL_CHECKS = [
    "level.bounds",
    "level.outline",
    "level.duplicate-name",
    "level.naming",
    "level.overlap",
    "level.dimension",
    "level.spawn",
]

# Used when the profile has no "character" dimension
DEFAULT_CHARACTER_SIZE = [2.0, 5.0, 1.0]


@dataclass
class Placement:
    """One placed asset. Position is the box center."""
    name: str
    asset: str = ""
    category: Optional[str] = None
    position: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    size: List[float] = field(default_factory=lambda: [1.0, 1.0, 1.0])
    rotation_y: float = 0.0
    solid: bool = True


@dataclass
class SpawnPoint:
    """Player spawn. Position is at the feet, clearance is the headroom in studs."""
    position: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    yaw_degrees: float = 0.0
    clearance: Optional[float] = None


@dataclass
class LevelLayout:
    """Level content specification in studs."""
    name: str = "Level"
    bounds_studs: List[float] = field(default_factory=lambda: [512.0, 128.0, 512.0])
    outline: List[List[float]] = field(default_factory=list)
    spawn: Optional[SpawnPoint] = None
    placements: List[Placement] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        d = {
            "name": self.name,
            "units": "studs",
            "bounds_studs": list(self.bounds_studs),
            "placements": [
                {k: v for k, v in asdict(p).items() if v is not None}
                for p in self.placements
            ],
        }
        if self.outline:
            d["outline"] = [list(p) for p in self.outline]
        if self.spawn:
            d["spawn"] = {k: v for k, v in asdict(self.spawn).items() if v is not None}
        return d

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LevelLayout":
        """
        Create LevelLayout from dictionary.

        An optional "units" key gives the units of every length in the
        document; they are converted to studs.
        """
        scale = unit_scale(d.get("units", "studs"))

        placements = []
        for p in d.get("placements", []):
            if "name" not in p:
                raise ValueError("Placement missing required 'name' field")
            placements.append(Placement(
                name=p["name"],
                asset=p.get("asset", ""),
                category=p.get("category"),
                position=[v * scale for v in p.get("position", [0.0, 0.0, 0.0])],
                size=[v * scale for v in p.get("size", [1.0, 1.0, 1.0])],
                rotation_y=p.get("rotation_y", 0.0),
                solid=p.get("solid", True),
            ))

        spawn = None
        if "spawn" in d and d["spawn"]:
            spawn_data = d["spawn"]
            clearance = spawn_data.get("clearance")
            spawn = SpawnPoint(
                position=[v * scale for v in spawn_data.get("position", [0.0, 0.0, 0.0])],
                yaw_degrees=spawn_data.get("yaw_degrees", 0.0),
                clearance=clearance * scale if clearance is not None else None,
            )

        return cls(
            name=d.get("name", "Level"),
            bounds_studs=[v * scale for v in d.get("bounds_studs", [512.0, 128.0, 512.0])],
            outline=[[v * scale for v in pt] for pt in d.get("outline", [])],
            spawn=spawn,
            placements=placements,
        )

    @classmethod
    def from_json(cls, json_str: str) -> "LevelLayout":
        """Create LevelLayout from JSON string."""
        return cls.from_dict(json.loads(json_str))


def load_layout(path: Union[str, Path]) -> LevelLayout:
    """
    Read a level layout JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the JSON is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Level layout not found: {path}")
    try:
        return LevelLayout.from_json(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}")


def _character_size(profile: LintProfile) -> List[float]:
    try:
        spec = profile.dimension("character")
    except KeyError:
        return DEFAULT_CHARACTER_SIZE
    return [v if v is not None else d for v, d in zip(spec.size_studs, DEFAULT_CHARACTER_SIZE)]


def check_layout(layout: LevelLayout, profile: LintProfile) -> List[Finding]:
    """
    Check a level layout against the profile's reference tables.

    Checks:
    - Every placement lies inside the level bounds and outline
    - Placement names are unique and follow the naming convention
    - Solid placements do not overlap (touching is allowed)
    - Placement sizes match the dimension table for their category
    - The spawn point is inside the level with a character's clearance
      (or the spawn's own clearance height)

    Returns:
        List of findings (empty if the layout is clean)
    """
    findings = []
    level_box = placement_box(
        [v / 2.0 for v in layout.bounds_studs], layout.bounds_studs,
    )

    boxes = []
    seen = set()
    for p in layout.placements:
        box = placement_box(p.position, p.size, p.rotation_y)
        boxes.append(box)

        if not box_contains_box(level_box, box):
            findings.append(Finding("level.bounds", "error", f"{p.name} extends outside the level bounds"))

        if layout.outline and not is_point_in_polygon((p.position[0], p.position[2]), layout.outline):
            findings.append(Finding("level.outline", "error", f"{p.name} is outside the level outline"))

        if p.name in seen:
            findings.append(Finding("level.duplicate-name", "error", f"Duplicate placement name: {p.name}"))
        seen.add(p.name)

        problems = check_name(p.name, profile.naming)
        if problems:
            findings.append(Finding("level.naming", "warning", f"'{p.name}': " + "; ".join(problems)))

        category = p.category or profile.naming.category_for(p.name)
        for spec in profile.dimensions_for(category):
            dim_problems = compare_dimensions(p.size, spec)
            if dim_problems:
                findings.append(Finding(
                    "level.dimension", "warning",
                    f"{p.name} ({spec.name}): " + ", ".join(dim_problems),
                ))

    solid = [(p, b) for p, b in zip(layout.placements, boxes) if p.solid]
    for i, (a, a_box) in enumerate(solid):
        for b, b_box in solid[i + 1:]:
            if boxes_overlap(a_box, b_box):
                findings.append(Finding("level.overlap", "warning", f"{a.name} overlaps {b.name}"))

    if layout.spawn is None:
        findings.append(Finding("level.spawn", "error", "Level has no spawn point"))
    else:
        pos = layout.spawn.position
        char = list(_character_size(profile))
        if layout.spawn.clearance is not None:
            char[1] = layout.spawn.clearance
        clearance = placement_box(
            [pos[0], pos[1] + char[1] / 2.0, pos[2]], char, layout.spawn.yaw_degrees,
        )
        if not box_contains_point(level_box, pos):
            findings.append(Finding("level.spawn", "error", f"Spawn {pos} is outside the level bounds"))
        elif not box_contains_box(level_box, clearance):
            findings.append(Finding("level.spawn", "error", f"Spawn has less than {char[1]:g} studs of headroom"))
        for p, box in solid:
            if boxes_overlap(clearance, box):
                findings.append(Finding("level.spawn", "error", f"Spawn clearance is blocked by {p.name}"))

    return findings


def lint_layout(layout: LevelLayout, profile: LintProfile, strict: bool = False) -> LintReport:
    """Run the layout checks and wrap the findings in a report."""
    disabled = set(profile.disabled_rules)
    findings = [f for f in check_layout(layout, profile) if f.rule_id not in disabled]
    for f in findings:
        f.severity = profile.severity_overrides.get(f.rule_id, f.severity)
    return LintReport(
        name=layout.name,
        findings=findings,
        checked=[c for c in LEVEL_CHECKS if c not in disabled],
        strict=strict,
    )
