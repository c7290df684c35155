"""
Mesh descriptions for linting.

A MeshSummary holds every measurement the rules look at for one MeshPart:
topology counts, stud-space bounds, UV and vertex-color presence, materials
and texture maps. Summaries come from geometry files loaded with trimesh, or
from JSON descriptions dumped by the modeling application.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Any, Optional, Sequence, Union

import numpy as np
import trimesh
from scipy.spatial import QhullError

from partlint.units import unit_scale
from partlint.palette import parse_hex, to_hex
from partlint.textures import find_textures

MESH_EXTENSIONS = {".glb", ".gltf", ".obj", ".stl", ".ply", ".off", ".dae"}
DESCRIPTION_EXTENSIONS = {".json"}
SUPPORTED_EXTENSIONS = MESH_EXTENSIONS | DESCRIPTION_EXTENSIONS

# Faces smaller than this (in squared source units) count as degenerate
DEGENERATE_AREA = 1e-12


@dataclass
class MeshSummary:
    """
    Measurements of a single MeshPart.

    Lengths are in studs, volumes in cubic studs.
    """
    name: str
    triangle_count: int = 0
    vertex_count: int = 0
    body_count: int = 0
    degenerate_faces: int = 0
    duplicate_faces: int = 0
    unreferenced_vertices: int = 0
    non_manifold_edges: int = 0
    is_watertight: bool = False
    winding_consistent: bool = True
    extent: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    center: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    hull_volume: float = 0.0
    has_uv: bool = False
    uv_out_of_range: float = 0.0
    has_vertex_colors: bool = False
    vertex_colors: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.uint8))
    materials: List[str] = field(default_factory=list)
    textures: Dict[str, str] = field(default_factory=dict)
    source: Optional[str] = None

    @property
    def bbox_volume(self) -> float:
        return float(np.prod(self.extent))

    @property
    def bbox_fill(self) -> float:
        """Convex hull volume over bounding box volume (0 for flat meshes)."""
        box = self.bbox_volume
        if box <= 0:
            return 0.0
        return min(1.0, self.hull_volume / box)

    @property
    def origin_offset(self) -> float:
        """Distance from the pivot to the bounding box center."""
        return float(np.linalg.norm(self.center))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        d = {
            "name": self.name,
            "triangle_count": self.triangle_count,
            "vertex_count": self.vertex_count,
            "body_count": self.body_count,
            "degenerate_faces": self.degenerate_faces,
            "duplicate_faces": self.duplicate_faces,
            "unreferenced_vertices": self.unreferenced_vertices,
            "non_manifold_edges": self.non_manifold_edges,
            "is_watertight": self.is_watertight,
            "winding_consistent": self.winding_consistent,
            "extent_studs": [round(float(v), 6) for v in self.extent],
            "center_studs": [round(float(v), 6) for v in self.center],
            "hull_volume_studs": round(float(self.hull_volume), 6),
            "has_uv": self.has_uv,
            "uv_out_of_range": round(float(self.uv_out_of_range), 6),
            "has_vertex_colors": self.has_vertex_colors,
            "vertex_colors": _color_counts(self.vertex_colors),
            "materials": list(self.materials),
            "textures": dict(self.textures),
        }
        if self.source:
            d["source"] = self.source
        return d

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, d: Dict[str, Any], units: str = "studs") -> "MeshSummary":
        """
        Create MeshSummary from a description dictionary.

        Lengths in the dictionary are read as `units` and converted to studs.
        Vertex colors may be a {hex: vertex count} mapping (as written by
        to_dict) or a per-vertex list of hex strings or [r, g, b] lists.
        """
        if "name" not in d:
            raise ValueError("Mesh description missing required 'name' field")

        scale = unit_scale(units)

        colors = d.get("vertex_colors", [])
        if isinstance(colors, dict):
            colors = [c for c, count in colors.items() for _ in range(int(count))]
        if colors:
            vertex_colors = np.array(
                [parse_hex(c) if isinstance(c, str) else c[:3] for c in colors],
                dtype=np.uint8,
            )
        else:
            vertex_colors = np.zeros((0, 3), dtype=np.uint8)

        triangle_count = int(d.get("triangle_count", 0))

        return cls(
            name=d["name"],
            triangle_count=triangle_count,
            vertex_count=int(d.get("vertex_count", 0)),
            body_count=int(d.get("body_count", 1 if triangle_count else 0)),
            degenerate_faces=int(d.get("degenerate_faces", 0)),
            duplicate_faces=int(d.get("duplicate_faces", 0)),
            unreferenced_vertices=int(d.get("unreferenced_vertices", 0)),
            non_manifold_edges=int(d.get("non_manifold_edges", 0)),
            is_watertight=bool(d.get("is_watertight", False)),
            winding_consistent=bool(d.get("winding_consistent", True)),
            extent=[float(v) * scale for v in d.get("extent_studs", [0.0, 0.0, 0.0])],
            center=[float(v) * scale for v in d.get("center_studs", [0.0, 0.0, 0.0])],
            hull_volume=float(d.get("hull_volume_studs", 0.0)) * scale ** 3,
            has_uv=bool(d.get("has_uv", False)),
            uv_out_of_range=float(d.get("uv_out_of_range", 0.0)),
            has_vertex_colors=bool(d.get("has_vertex_colors", len(vertex_colors) > 0)),
            vertex_colors=vertex_colors,
            materials=list(d.get("materials", [])),
            textures=dict(d.get("textures", {})),
            source=d.get("source"),
        )


def _color_counts(colors: np.ndarray) -> Dict[str, int]:
    """Vertex count per hex color, most common first."""
    if len(colors) == 0:
        return {}
    unique, counts = np.unique(np.asarray(colors)[:, :3], axis=0, return_counts=True)
    order = np.argsort(-counts, kind="stable")
    return {to_hex(unique[i]): int(counts[i]) for i in order}


def _hull_volume(mesh: "trimesh.Trimesh") -> float:
    """Volume of the convex hull, 0 when the points are flat or too few."""
    if len(mesh.vertices) < 4 or np.any(mesh.extents < 1e-9):
        return 0.0
    try:
        return float(mesh.convex_hull.volume)
    except QhullError:
        # coplanar along a non-axis plane
        return 0.0


def _vertex_colors(mesh: "trimesh.Trimesh") -> np.ndarray:
    visual = mesh.visual
    if visual.kind == "vertex":
        return np.asarray(visual.vertex_colors)[:, :3].astype(np.uint8)

    # Textured glTF meshes keep COLOR_0 as a vertex attribute
    attributes = getattr(visual, "vertex_attributes", None) or {}
    color = attributes.get("color")
    if color is not None and len(color):
        color = np.asarray(color)
        if color.dtype.kind == "f":
            color = np.clip(color * 255.0, 0, 255)
        return color[:, :3].astype(np.uint8)

    return np.zeros((0, 3), dtype=np.uint8)


def _material_names(mesh: "trimesh.Trimesh") -> List[str]:
    material = getattr(mesh.visual, "material", None)
    if material is None:
        return []
    # merged glTF primitives carry a MultiMaterial
    parts = getattr(material, "materials", None) or [material]
    return [getattr(m, "name", None) or "unnamed" for m in parts]


def _uv_coords(mesh: "trimesh.Trimesh") -> Optional[np.ndarray]:
    if mesh.visual.kind != "texture":
        return None
    uv = getattr(mesh.visual, "uv", None)
    if uv is None or len(uv) == 0:
        return None
    return np.asarray(uv)


def summarize_mesh(
    mesh: Union["trimesh.Trimesh", Sequence["trimesh.Trimesh"]],
    name: str,
    units: str = "meters",
    pivot: Optional[Sequence[float]] = None,
) -> MeshSummary:
    """
    Measure a single MeshPart.

    Topology is measured on a copy with vertices merged by position so that
    UV seams and split normals do not read as separate bodies. A MeshPart
    built from several primitives (one per material) is measured as a whole;
    UVs, vertex colors and materials are read from each primitive.

    Args:
        mesh: Mesh in source units, transforms already applied, or a list
            of primitive meshes that make up one MeshPart
        name: MeshPart name
        units: Units the mesh is expressed in
        pivot: Pivot position in source units (defaults to the origin)

    Returns:
        MeshSummary in studs
    """
    scale = unit_scale(units)

    primitives = list(mesh) if isinstance(mesh, (list, tuple)) else [mesh]
    if len(primitives) == 1:
        combined = primitives[0]
    else:
        combined = trimesh.util.concatenate(primitives)

    if len(combined.faces) == 0:
        return MeshSummary(name=name, vertex_count=len(combined.vertices))

    topo = combined.copy()
    topo.merge_vertices(merge_tex=True, merge_norm=True)

    components = trimesh.graph.connected_components(
        topo.face_adjacency,
        nodes=np.arange(len(topo.faces)),
        min_len=1,
    )

    sorted_faces = np.sort(topo.faces, axis=1)
    unique_faces = np.unique(sorted_faces, axis=0)

    _, edge_counts = np.unique(topo.edges_sorted, axis=0, return_counts=True)

    referenced = len(np.unique(combined.faces))

    uvs = [_uv_coords(p) for p in primitives]
    has_uv = all(uv is not None for uv in uvs)
    uv_out_of_range = 0.0
    present = [uv for uv in uvs if uv is not None]
    if present:
        uv = np.concatenate(present)
        outside = np.any((uv < -1e-6) | (uv > 1.0 + 1e-6), axis=1)
        uv_out_of_range = float(outside.mean())

    materials = []
    for p in primitives:
        for material_name in _material_names(p):
            if material_name not in materials:
                materials.append(material_name)

    colors = [c for c in (_vertex_colors(p) for p in primitives) if len(c)]
    colors = np.concatenate(colors) if colors else np.zeros((0, 3), dtype=np.uint8)

    center = combined.bounds.mean(axis=0)
    if pivot is not None:
        center = center - np.asarray(pivot, dtype=np.float64)

    return MeshSummary(
        name=name,
        triangle_count=len(combined.faces),
        vertex_count=len(combined.vertices),
        body_count=len(components),
        degenerate_faces=int((combined.area_faces <= DEGENERATE_AREA).sum()),
        duplicate_faces=len(sorted_faces) - len(unique_faces),
        unreferenced_vertices=len(combined.vertices) - referenced,
        non_manifold_edges=int((edge_counts > 2).sum()),
        is_watertight=bool(topo.is_watertight),
        winding_consistent=bool(topo.is_winding_consistent),
        extent=(combined.extents * scale).tolist(),
        center=(center * scale).tolist(),
        hull_volume=_hull_volume(combined) * scale ** 3,
        has_uv=has_uv,
        uv_out_of_range=uv_out_of_range,
        has_vertex_colors=len(colors) > 0,
        vertex_colors=colors,
        materials=materials,
    )


def load_descriptions(path: Union[str, Path]) -> List[MeshSummary]:
    """
    Read a JSON mesh description file.

    Accepted shapes: a single description object, a list of them, or
    {"units": "...", "meshes": [...]}.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}")

    units = "studs"
    if isinstance(data, dict) and "meshes" in data:
        units = data.get("units", "studs")
        entries = data["meshes"]
    elif isinstance(data, list):
        entries = data
    else:
        entries = [data]

    summaries = []
    for entry in entries:
        summary = MeshSummary.from_dict(entry, units=units)
        summary.source = str(path)
        summaries.append(summary)

    if not summaries:
        raise ValueError(f"No mesh descriptions in {path}")

    return summaries


def load_summaries(
    path: Union[str, Path],
    units: str = "meters",
) -> List[MeshSummary]:
    """
    Load a geometry file and summarize every MeshPart in it.

    Each geometry node of the scene becomes one summary, with the node's
    world transform applied and its origin taken as the pivot. Primitives
    of one glTF mesh are summarized together as a single MeshPart. Texture
    maps named after the mesh or the file are attached from the same
    directory.

    Args:
        path: Geometry file (.glb, .obj, ...) or JSON mesh description
        units: Units the geometry file is authored in

    Returns:
        List of MeshSummary, one per MeshPart

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file has an unsupported extension or no meshes
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Mesh file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in DESCRIPTION_EXTENSIONS:
        return load_descriptions(path)
    if suffix not in MESH_EXTENSIONS:
        raise ValueError(f"Unsupported file type: {path.suffix}")

    scene = trimesh.load(str(path), force="scene")
    parents = scene.graph.transforms.parents

    # glTF meshes with several primitives load as one child node per
    # primitive; regroup them under the node that holds the mesh
    parts: Dict[str, List[Any]] = {}
    for node_name in scene.graph.nodes_geometry:
        transform, geometry_name = scene.graph[node_name]
        geometry = scene.geometry[geometry_name]
        if not isinstance(geometry, trimesh.Trimesh):
            continue

        part_name = node_name
        if geometry.metadata.get("from_gltf_primitive") and node_name in parents:
            part_name = parents[node_name]

        mesh = geometry.copy()
        mesh.apply_transform(transform)
        parts.setdefault(part_name, []).append((mesh, transform[:3, 3]))

    summaries = []
    for part_name, primitives in parts.items():
        # the pivot is the node origin in world space
        pivot = primitives[0][1]
        summary = summarize_mesh(
            [mesh for mesh, _ in primitives], name=part_name, units=units, pivot=pivot,
        )
        summary.source = str(path)
        summary.textures = find_textures(path.parent, [part_name, path.stem])
        summaries.append(summary)

    if not summaries:
        raise ValueError(f"No meshes found in {path}")

    return summaries
