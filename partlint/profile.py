"""
Lint profile: the reference tables every rule is evaluated against.

A profile bundles export limits, the naming convention, color palettes and
the dimension table into one JSON document. Profiles are plain configuration:
they are loaded once, validated, and never mutated by the linter.
"""

from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import List, Dict, Any, Optional, Iterable, Union
import json
import re

from partlint.units import UNIT_SCALE

SEVERITIES = ("error", "warning", "info")

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


@dataclass
class ExportLimits:
    """Per-MeshPart export limits."""
    max_triangles: int = 10000
    hard_max_triangles: int = 20000
    max_size_studs: float = 2048.0
    min_size_studs: float = 0.05
    max_bodies: int = 1
    max_materials: int = 1
    max_texture_size: int = 1024
    max_origin_offset_studs: float = 0.5
    min_bbox_fill: float = 0.05
    require_uv: bool = True
    require_vertex_colors: bool = False
    allow_non_manifold: bool = False


@dataclass
class NamingConvention:
    """Asset naming convention: Category prefix + PascalCase body + optional variant."""
    pattern: str = r"^[A-Z][a-z]*_[A-Z][A-Za-z0-9]*(_\d{2})?$"
    prefixes: Dict[str, str] = field(default_factory=lambda: {
        "prop": "Prop_",
        "env": "Env_",
        "character": "Char_",
        "door": "Door_",
        "window": "Window_",
        "wall": "Wall_",
        "floor": "Floor_",
        "stair": "Stair_",
        "corridor": "Corridor_",
    })
    max_length: int = 50

    def category_for(self, name: str) -> Optional[str]:
        """Return the category whose prefix `name` starts with, if any."""
        for category, prefix in self.prefixes.items():
            if name.startswith(prefix):
                return category
        return None


@dataclass
class Palette:
    """Named color palette for vertex-colored assets."""
    name: str
    colors: List[str] = field(default_factory=list)
    tolerance: float = 24.0
    min_coverage: float = 0.95


@dataclass
class DimensionSpec:
    """
    Reference size for a category of asset, in studs.

    Axes are [x, y, z] with Y up. A None axis is not checked. In "exact" mode
    each checked axis must be within tolerance of the reference; in "min"
    mode it must be at least reference minus tolerance.
    """
    name: str
    category: str
    size_studs: List[Optional[float]] = field(default_factory=lambda: [None, None, None])
    tolerance_studs: float = 0.5
    mode: str = "exact"


def _type_errors(obj: Any, label: str) -> List[str]:
    """Scalar fields of a config dataclass holding a value of the wrong type."""
    errors = []
    for f in fields(obj):
        value = getattr(obj, f.name)
        if f.type is bool:
            ok = isinstance(value, bool)
        elif f.type in (int, float):
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        elif f.type is str:
            ok = isinstance(value, str)
        else:
            continue
        if not ok:
            errors.append(f"{label}.{f.name} must be {f.type.__name__}, got {value!r}")
    return errors


def default_palettes() -> List[Palette]:
    return [
        Palette(
            name="stylized",
            colors=[
                "#F2E8CF", "#A7C957", "#6A994E", "#386641",
                "#BC4749", "#E9C46A", "#F4A261", "#E76F51",
                "#264653", "#2A9D8F", "#8D99AE", "#2B2D42",
                "#FFFFFF", "#000000",
            ],
        ),
        Palette(
            name="greyscale",
            colors=["#FFFFFF", "#C0C0C0", "#808080", "#404040", "#000000"],
            tolerance=16.0,
        ),
    ]


def default_dimensions() -> List[DimensionSpec]:
    return [
        DimensionSpec(name="character", category="character", size_studs=[2.0, 5.0, 1.0], tolerance_studs=0.5),
        DimensionSpec(name="door", category="door", size_studs=[4.0, 7.0, None], tolerance_studs=0.5),
        DimensionSpec(name="window", category="window", size_studs=[None, 4.0, None], tolerance_studs=1.0),
        DimensionSpec(name="wall", category="wall", size_studs=[None, 12.0, None], tolerance_studs=1.0),
        DimensionSpec(name="stair step", category="stair", size_studs=[None, 1.0, None], tolerance_studs=0.25),
        DimensionSpec(name="corridor", category="corridor", size_studs=[8.0, 12.0, None], tolerance_studs=0.0, mode="min"),
    ]


@dataclass
class LintProfile:
    """
    Complete lint configuration.

    Required fields:
    - name: Profile name, shown in reports
    - source_units: Units of incoming geometry ("meters", "studs", ...)
    - limits: Export limits
    - naming: Naming convention
    """
    name: str = "default"
    source_units: str = "meters"
    limits: ExportLimits = field(default_factory=ExportLimits)
    naming: NamingConvention = field(default_factory=NamingConvention)
    palettes: List[Palette] = field(default_factory=default_palettes)
    active_palette: Optional[str] = "stylized"
    dimensions: List[DimensionSpec] = field(default_factory=default_dimensions)
    disabled_rules: List[str] = field(default_factory=list)
    severity_overrides: Dict[str, str] = field(default_factory=dict)

    def palette(self, name: str) -> Palette:
        """Look up a palette by name."""
        for pal in self.palettes:
            if pal.name == name:
                return pal
        available = ", ".join(p.name for p in self.palettes) or "none"
        raise KeyError(f"Unknown palette {name!r} (available: {available})")

    def dimension(self, name: str) -> DimensionSpec:
        """Look up a dimension spec by name."""
        for dim in self.dimensions:
            if dim.name == name:
                return dim
        available = ", ".join(d.name for d in self.dimensions) or "none"
        raise KeyError(f"Unknown dimension {name!r} (available: {available})")

    def dimensions_for(self, category: Optional[str]) -> List[DimensionSpec]:
        """All dimension specs that apply to a category."""
        if category is None:
            return []
        return [d for d in self.dimensions if d.category == category]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "source_units": self.source_units,
            "limits": asdict(self.limits),
            "naming": asdict(self.naming),
            "palettes": [asdict(p) for p in self.palettes],
            "active_palette": self.active_palette,
            "dimensions": [asdict(d) for d in self.dimensions],
            "disabled_rules": list(self.disabled_rules),
            "severity_overrides": dict(self.severity_overrides),
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "LintProfile":
        """Create LintProfile from dictionary. Missing sections take defaults."""
        limits = ExportLimits(**d.get("limits", {}))
        naming = NamingConvention(**d.get("naming", {}))

        palettes = default_palettes()
        if "palettes" in d:
            palettes = [Palette(**p) for p in d["palettes"]]

        dimensions = default_dimensions()
        if "dimensions" in d:
            dimensions = [DimensionSpec(**dim) for dim in d["dimensions"]]

        return cls(
            name=d.get("name", "default"),
            source_units=d.get("source_units", "meters"),
            limits=limits,
            naming=naming,
            palettes=palettes,
            active_palette=d.get("active_palette", "stylized" if "palettes" not in d else None),
            dimensions=dimensions,
            disabled_rules=list(d.get("disabled_rules", [])),
            severity_overrides=dict(d.get("severity_overrides", {})),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "LintProfile":
        """Create LintProfile from JSON string."""
        return cls.from_dict(json.loads(json_str))

    def validate(self, known_rules: Optional[Iterable[str]] = None) -> List[str]:
        """
        Validate the profile for consistency.

        Args:
            known_rules: Rule ids that may appear in disabled_rules and
                         severity_overrides. Not checked when None.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = _type_errors(self, "profile")
        errors += _type_errors(self.limits, "limits")
        errors += _type_errors(self.naming, "naming")
        for pal in self.palettes:
            errors += _type_errors(pal, f"palette {pal.name}")
            if not all(isinstance(c, str) for c in pal.colors):
                errors.append(f"Palette {pal.name}: colors must be hex strings")
        for dim in self.dimensions:
            errors += _type_errors(dim, f"dimension {dim.name}")
            if not all(v is None or isinstance(v, (int, float)) for v in dim.size_studs):
                errors.append(f"Dimension {dim.name}: size_studs must be numbers or null")
        if errors:
            # the range checks below assume well-typed values
            return errors

        lim = self.limits

        if self.source_units not in UNIT_SCALE:
            errors.append(f"Invalid source_units: {self.source_units}")

        if lim.max_triangles <= 0 or lim.hard_max_triangles <= 0:
            errors.append("Triangle limits must be positive")
        elif lim.max_triangles > lim.hard_max_triangles:
            errors.append(
                f"max_triangles ({lim.max_triangles}) exceeds hard_max_triangles ({lim.hard_max_triangles})"
            )

        if lim.min_size_studs <= 0 or lim.max_size_studs <= 0:
            errors.append("Size limits must be positive")
        elif lim.min_size_studs >= lim.max_size_studs:
            errors.append("min_size_studs must be smaller than max_size_studs")

        if lim.max_bodies < 1:
            errors.append("max_bodies must be at least 1")
        if lim.max_materials < 1:
            errors.append("max_materials must be at least 1")
        if lim.max_texture_size <= 0:
            errors.append("max_texture_size must be positive")
        if lim.max_origin_offset_studs < 0:
            errors.append("max_origin_offset_studs must not be negative")
        if not 0.0 <= lim.min_bbox_fill <= 1.0:
            errors.append(f"min_bbox_fill must be in [0, 1], got {lim.min_bbox_fill}")

        try:
            re.compile(self.naming.pattern)
        except re.error as e:
            errors.append(f"Invalid naming pattern: {e}")
        if self.naming.max_length <= 0:
            errors.append("naming.max_length must be positive")

        names = set()
        for pal in self.palettes:
            if pal.name in names:
                errors.append(f"Duplicate palette name: {pal.name}")
            names.add(pal.name)
            if not pal.colors:
                errors.append(f"Palette {pal.name} has no colors")
            for color in pal.colors:
                if not HEX_COLOR.match(color):
                    errors.append(f"Palette {pal.name}: invalid color {color!r}")
            if pal.tolerance < 0:
                errors.append(f"Palette {pal.name}: tolerance must not be negative")
            if not 0.0 <= pal.min_coverage <= 1.0:
                errors.append(f"Palette {pal.name}: min_coverage must be in [0, 1]")

        if self.active_palette is not None and self.active_palette not in names:
            errors.append(f"Active palette {self.active_palette} is not defined")

        for dim in self.dimensions:
            if len(dim.size_studs) != 3:
                errors.append(f"Dimension {dim.name}: size_studs must have 3 axes")
            elif any(v is not None and v <= 0 for v in dim.size_studs):
                errors.append(f"Dimension {dim.name}: sizes must be positive")
            if dim.tolerance_studs < 0:
                errors.append(f"Dimension {dim.name}: tolerance must not be negative")
            if dim.mode not in ["exact", "min"]:
                errors.append(f"Dimension {dim.name}: invalid mode {dim.mode}")

        for rule_id, severity in self.severity_overrides.items():
            if severity not in SEVERITIES:
                errors.append(f"Invalid severity for {rule_id}: {severity}")

        if known_rules is not None:
            known = set(known_rules)
            for rule_id in list(self.disabled_rules) + list(self.severity_overrides):
                if rule_id not in known:
                    errors.append(f"Unknown rule id: {rule_id}")

        return errors


def make_profile(
    name: str = "default",
    source_units: str = "meters",
    max_triangles: Optional[int] = None,
    active_palette: Optional[str] = "stylized",
    disabled_rules: Optional[List[str]] = None,
) -> LintProfile:
    """
    Create a profile with the standard reference tables.

    Args:
        name: Profile name
        source_units: Units the geometry files are authored in
        max_triangles: Override for the per-MeshPart triangle budget
        active_palette: Palette vertex colors are checked against (None to skip)
        disabled_rules: Rule ids to skip

    Returns:
        LintProfile instance
    """
    limits = ExportLimits()
    if max_triangles is not None:
        limits.max_triangles = max_triangles

    return LintProfile(
        name=name,
        source_units=source_units,
        limits=limits,
        active_palette=active_palette,
        disabled_rules=disabled_rules or [],
    )


def load_profile(
    path: Union[str, Path],
    known_rules: Optional[Iterable[str]] = None,
) -> LintProfile:
    """
    Load and validate a profile JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the JSON is malformed or the profile is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Profile not found: {path}")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in profile {path}: {e}")

    try:
        profile = LintProfile.from_dict(data)
    except TypeError as e:
        raise ValueError(f"Invalid profile {path}: {e}")

    errors = profile.validate(known_rules)
    if errors:
        raise ValueError(f"Invalid profile {path}: " + "; ".join(errors))

    return profile
