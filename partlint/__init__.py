"""
partlint - Pre-export checklist for MeshPart assets.

Checks geometry files against export limits before they are imported as
MeshParts:
- Triangle budget and loose geometry
- Size in studs, pivot placement, bounding box tightness
- UV map, vertex colors and palette, materials
- SurfaceAppearance texture maps
- Naming convention and reference dimensions
"""

__version__ = "0.1.0"

from partlint.profile import LintProfile, make_profile, load_profile
from partlint.mesh_summary import MeshSummary, summarize_mesh, load_summaries
from partlint.linter import LintReport, Finding, lint_summary, lint_file, lint_paths
from partlint.level import LevelLayout, check_layout, load_layout
from partlint.units import STUD_IN_METERS, studs_to_meters, meters_to_studs

__all__ = [
    "LintProfile",
    "make_profile",
    "load_profile",
    "MeshSummary",
    "summarize_mesh",
    "load_summaries",
    "LintReport",
    "Finding",
    "lint_summary",
    "lint_file",
    "lint_paths",
    "LevelLayout",
    "check_layout",
    "load_layout",
    "STUD_IN_METERS",
    "studs_to_meters",
    "meters_to_studs",
]
