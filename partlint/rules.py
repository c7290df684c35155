"""
Pre-export checklist rules.

Each rule is an independent predicate over a MeshSummary and the active
LintProfile. A rule returns None when the check passes, or a message
describing the failure. Rules are registered in definition order, which is
the order reports list them in.

Adding a rule:

    @rule("geometry.something", "warning", "Short description")
    def check_something(summary, profile):
        if bad:
            return "what is wrong"
        return None
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from partlint.mesh_summary import MeshSummary
from partlint.profile import LintProfile, SEVERITIES
from partlint.naming import check_name, suggest_name
from partlint.palette import palette_coverage, off_palette_colors
from partlint.textures import inspect_texture, check_texture
from partlint.units import format_studs

CheckFn = Callable[[MeshSummary, LintProfile], Optional[str]]


@dataclass(frozen=True)
class Rule:
    """A single checklist item."""
    id: str
    severity: str
    description: str
    check: CheckFn


REGISTRY: Dict[str, Rule] = {}


def rule(rule_id: str, severity: str, description: str):
    """Register a check function as a rule."""
    if severity not in SEVERITIES:
        raise ValueError(f"Invalid severity for {rule_id}: {severity}")

    def decorator(fn: CheckFn) -> CheckFn:
        if rule_id in REGISTRY:
            raise ValueError(f"Duplicate rule id: {rule_id}")
        REGISTRY[rule_id] = Rule(id=rule_id, severity=severity, description=description, check=fn)
        return fn

    return decorator


def get_rule(rule_id: str) -> Rule:
    """Look up a registered rule."""
    if rule_id not in REGISTRY:
        raise KeyError(f"Unknown rule id: {rule_id}")
    return REGISTRY[rule_id]


def all_rules() -> List[Rule]:
    """All registered rules in registration order."""
    return list(REGISTRY.values())


def _fmt_extent(extent) -> str:
    return " x ".join(f"{v:.2f}" for v in extent)


# =============================================================================
# Geometry
# =============================================================================

@rule("geometry.empty", "error", "MeshPart has at least one triangle")
def check_empty(summary, profile):
    if summary.triangle_count == 0:
        return "Mesh has no triangles"
    return None


@rule("geometry.triangle-budget", "warning", "Triangle count within the authoring budget")
def check_triangle_budget(summary, profile):
    limit = profile.limits.max_triangles
    if summary.triangle_count > limit:
        return f"{summary.triangle_count} triangles exceeds budget of {limit}; decimate before export"
    return None


@rule("geometry.triangle-hard-limit", "error", "Triangle count within the platform import limit")
def check_triangle_hard_limit(summary, profile):
    limit = profile.limits.hard_max_triangles
    if summary.triangle_count > limit:
        return f"{summary.triangle_count} triangles exceeds the import limit of {limit}"
    return None


@rule("geometry.loose-parts", "error", "No loose geometry (single connected body)")
def check_loose_parts(summary, profile):
    limit = profile.limits.max_bodies
    if summary.body_count > limit:
        return f"Mesh has {summary.body_count} disconnected bodies, at most {limit} allowed"
    return None


@rule("geometry.degenerate-faces", "warning", "No zero-area faces")
def check_degenerate_faces(summary, profile):
    if summary.degenerate_faces:
        return f"{summary.degenerate_faces} zero-area face(s)"
    return None


@rule("geometry.duplicate-faces", "warning", "No faces sharing the same vertices")
def check_duplicate_faces(summary, profile):
    if summary.duplicate_faces:
        return f"{summary.duplicate_faces} duplicate face(s)"
    return None


@rule("geometry.unreferenced-vertices", "info", "No vertices outside any face")
def check_unreferenced_vertices(summary, profile):
    if summary.unreferenced_vertices:
        return f"{summary.unreferenced_vertices} vertex(es) not used by any face"
    return None


@rule("geometry.non-manifold", "warning", "No edges shared by more than two faces")
def check_non_manifold(summary, profile):
    if profile.limits.allow_non_manifold:
        return None
    if summary.non_manifold_edges:
        return f"{summary.non_manifold_edges} non-manifold edge(s)"
    return None


@rule("geometry.winding", "warning", "Consistent face winding")
def check_winding(summary, profile):
    if summary.triangle_count and not summary.winding_consistent:
        return "Face winding is inconsistent; recalculate normals"
    return None


# =============================================================================
# Scale and placement
# =============================================================================

@rule("scale.max-size", "error", "Every axis within the maximum MeshPart size")
def check_max_size(summary, profile):
    limit = profile.limits.max_size_studs
    if max(summary.extent) > limit:
        return f"Size {_fmt_extent(summary.extent)} studs exceeds {limit:g} studs"
    return None


@rule("scale.min-size", "error", "Every axis above the minimum MeshPart size")
def check_min_size(summary, profile):
    if summary.triangle_count == 0:
        return None
    limit = profile.limits.min_size_studs
    if min(summary.extent) < limit:
        return f"Size {_fmt_extent(summary.extent)} studs is below {limit:g} studs on at least one axis"
    return None


@rule("scale.origin-offset", "warning", "Pivot at the bounding box center")
def check_origin_offset(summary, profile):
    limit = profile.limits.max_origin_offset_studs
    offset = summary.origin_offset
    if offset > limit:
        return f"Pivot is {format_studs(round(offset, 2))} from the bounding box center; apply transforms and set origin"
    return None


@rule("scale.bbox-fill", "warning", "Bounding box fits the geometry tightly")
def check_bbox_fill(summary, profile):
    if summary.triangle_count == 0 or summary.bbox_volume <= 0:
        return None
    limit = profile.limits.min_bbox_fill
    fill = summary.bbox_fill
    if fill < limit:
        return f"Geometry fills {fill:.1%} of its bounding box (minimum {limit:.0%}); stray vertices or a missing split?"
    return None


# =============================================================================
# UVs, colors and materials
# =============================================================================

@rule("uv.present", "error", "UV map present")
def check_uv_present(summary, profile):
    if profile.limits.require_uv and summary.triangle_count and not summary.has_uv:
        return "Mesh has no UV map"
    return None


@rule("uv.range", "info", "UVs inside the 0-1 tile")
def check_uv_range(summary, profile):
    if summary.has_uv and summary.uv_out_of_range > 0:
        return f"{summary.uv_out_of_range:.1%} of UV coordinates fall outside 0-1"
    return None


@rule("color.vertex-colors-present", "warning", "Vertex colors present when required")
def check_vertex_colors_present(summary, profile):
    if profile.limits.require_vertex_colors and not summary.has_vertex_colors:
        return "Mesh has no vertex colors"
    return None


@rule("color.palette", "warning", "Vertex colors drawn from the active palette")
def check_palette(summary, profile):
    if profile.active_palette is None or not summary.has_vertex_colors:
        return None

    palette = profile.palette(profile.active_palette)
    coverage = palette_coverage(summary.vertex_colors, palette)
    if coverage < palette.min_coverage:
        offenders = ", ".join(off_palette_colors(summary.vertex_colors, palette))
        return (
            f"Only {coverage:.1%} of vertex colors match palette '{palette.name}' "
            f"(minimum {palette.min_coverage:.0%}); off-palette: {offenders}"
        )
    return None


@rule("material.count", "warning", "Material count within limit")
def check_material_count(summary, profile):
    limit = profile.limits.max_materials
    if len(summary.materials) > limit:
        return f"{len(summary.materials)} materials ({', '.join(summary.materials)}), at most {limit} per MeshPart"
    return None


@rule("naming.convention", "warning", "Name follows the naming convention")
def check_naming(summary, profile):
    problems = check_name(summary.name, profile.naming)
    if problems:
        message = f"'{summary.name}': " + "; ".join(problems)
        naming = profile.naming
        category = naming.category_for(summary.name)
        if category is None and "prop" in naming.prefixes:
            category = "prop"
        suggestion = suggest_name(summary.name, category, naming)
        if not check_name(suggestion, naming):
            message += f" (suggested: '{suggestion}')"
        return message
    return None


# =============================================================================
# Textures
# =============================================================================

def _texture_problems(summary, profile, key):
    problems = []
    for kind, path in sorted(summary.textures.items()):
        try:
            info = inspect_texture(path)
        except (FileNotFoundError, ValueError) as e:
            if key == "size":
                problems.append(f"{kind}: {e}")
            continue
        problems.extend(check_texture(info, kind, profile.limits.max_texture_size)[key])
    return problems


@rule("texture.size", "error", "Texture maps readable and within the size limit")
def check_texture_size(summary, profile):
    problems = _texture_problems(summary, profile, "size")
    if problems:
        return "; ".join(problems)
    return None


@rule("texture.format", "warning", "Texture maps square and power-of-two")
def check_texture_format(summary, profile):
    problems = _texture_problems(summary, profile, "format")
    if problems:
        return "; ".join(problems)
    return None


# =============================================================================
# Reference dimensions
# =============================================================================

def compare_dimensions(extent, spec) -> List[str]:
    """Compare a stud extent against one dimension spec; return problems per axis."""
    problems = []
    for axis, actual, expected in zip("XYZ", extent, spec.size_studs):
        if expected is None:
            continue
        if spec.mode == "min":
            if actual < expected - spec.tolerance_studs:
                problems.append(f"{axis} {actual:.2f} < {expected:g} studs")
        elif abs(actual - expected) > spec.tolerance_studs:
            problems.append(f"{axis} {actual:.2f} vs {expected:g}±{spec.tolerance_studs:g} studs")
    return problems


@rule("dimension.reference", "warning", "Size matches the reference dimension table")
def check_dimensions(summary, profile):
    category = profile.naming.category_for(summary.name)
    messages = []
    for spec in profile.dimensions_for(category):
        problems = compare_dimensions(summary.extent, spec)
        if problems:
            messages.append(f"{spec.name}: " + ", ".join(problems))
    if messages:
        return "; ".join(messages)
    return None
