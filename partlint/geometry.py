"""
Geometry helpers for level layout checks.

Boxes are axis-aligned in stud space, Y up, described by their center and
size. Placements may be rotated about Y; their footprint is re-boxed.
"""

import numpy as np
from typing import Tuple, Sequence

Box = Tuple[np.ndarray, np.ndarray]

# Touching faces do not count as overlap
EPSILON = 1e-6


def yaw_extents(size: Sequence[float], yaw_degrees: float) -> np.ndarray:
    """
    Size of the axis-aligned box around a box turned about +Y.

    Only the XZ footprint changes; the height is kept.
    """
    sx, sy, sz = (float(v) for v in size)
    theta = np.radians(yaw_degrees)
    c, s = abs(np.cos(theta)), abs(np.sin(theta))
    return np.array([c * sx + s * sz, sy, s * sx + c * sz])


def placement_box(
    position: Sequence[float],
    size: Sequence[float],
    yaw_degrees: float = 0.0,
) -> Box:
    """
    Axis-aligned bounds of a box rotated about Y around its center.

    Args:
        position: [x, y, z] center in studs
        size: [x, y, z] size in studs
        yaw_degrees: Rotation about +Y

    Returns:
        Tuple of (min_corner, max_corner)
    """
    center = np.asarray(position, dtype=float)
    if yaw_degrees % 360 == 0:
        half = np.asarray(size, dtype=float) / 2.0
    else:
        half = yaw_extents(size, yaw_degrees) / 2.0
    return center - half, center + half


def boxes_overlap(a: Box, b: Box) -> bool:
    """True if two boxes share volume."""
    a_min, a_max = a
    b_min, b_max = b
    return bool(np.all(a_min < b_max - EPSILON) and np.all(b_min < a_max - EPSILON))


def box_contains_box(outer: Box, inner: Box) -> bool:
    """True if `inner` lies entirely inside `outer`."""
    return bool(np.all(inner[0] >= outer[0] - EPSILON) and np.all(inner[1] <= outer[1] + EPSILON))


def box_contains_point(box: Box, point: Sequence[float]) -> bool:
    """True if the point lies inside or on the box."""
    p = np.asarray(point, dtype=float)
    return bool(np.all(p >= box[0] - EPSILON) and np.all(p <= box[1] + EPSILON))


def is_point_in_polygon(point: Sequence[float], polygon: Sequence[Sequence[float]]) -> bool:
    """
    Even-odd test of an (x, z) point against an XZ outline.

    Counts the outline edges crossed by a ray from the point towards +X.
    """
    poly = np.asarray(polygon, dtype=float)
    if len(poly) < 3:
        return False

    x, z = float(point[0]), float(point[1])
    xi, zi = poly[:, 0], poly[:, 1]
    xj, zj = np.roll(xi, 1), np.roll(zi, 1)

    straddles = (zi > z) != (zj > z)
    # horizontal edges never straddle, so the division is only used where defined
    with np.errstate(divide="ignore", invalid="ignore"):
        x_cross = xi + (z - zi) * (xj - xi) / (zj - zi)

    return bool(np.count_nonzero(straddles & (x < x_cross)) % 2)
