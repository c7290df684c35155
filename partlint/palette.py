"""
Color palette matching for vertex-colored assets.

Stylized assets use vertex colors instead of image textures, and every color
should come from the project palette. Distances are Euclidean in 0-255 RGB.
"""

import numpy as np
from typing import List, Tuple

from partlint.profile import Palette


def parse_hex(color: str) -> Tuple[int, int, int]:
    """
    Parse '#RRGGBB' (or 'RRGGBB') into an (r, g, b) tuple.

    Raises:
        ValueError: If the string is not a 6-digit hex color
    """
    value = color.strip().lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Invalid hex color: {color!r}")
    try:
        return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
    except ValueError:
        raise ValueError(f"Invalid hex color: {color!r}")


def to_hex(rgb) -> str:
    """Format an (r, g, b) triple as '#RRGGBB'."""
    r, g, b = (int(c) for c in rgb[:3])
    return f"#{r:02X}{g:02X}{b:02X}"


def palette_array(palette: Palette) -> np.ndarray:
    """Palette colors as a Kx3 float array."""
    return np.array([parse_hex(c) for c in palette.colors], dtype=np.float64).reshape(-1, 3)


def nearest_palette_color(
    colors: np.ndarray,
    palette: Palette,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Find the closest palette entry for each color.

    Args:
        colors: Nx3 array of RGB colors (0-255)
        palette: Palette to match against

    Returns:
        Tuple of:
        - indices: Index into palette.colors for each color
        - distances: RGB distance to that entry
    """
    colors = np.asarray(colors, dtype=np.float64).reshape(-1, 3)
    reference = palette_array(palette)

    if len(reference) == 0:
        raise ValueError(f"Palette {palette.name} has no colors")

    # NxK distance matrix
    diff = colors[:, None, :] - reference[None, :, :]
    dist = np.linalg.norm(diff, axis=2)

    indices = np.argmin(dist, axis=1)
    distances = dist[np.arange(len(colors)), indices]

    return indices, distances


def palette_coverage(colors: np.ndarray, palette: Palette) -> float:
    """Fraction of colors within palette tolerance. Empty input counts as fully covered."""
    colors = np.asarray(colors).reshape(-1, 3)
    if len(colors) == 0:
        return 1.0

    _, distances = nearest_palette_color(colors, palette)
    return float(np.mean(distances <= palette.tolerance))


def off_palette_colors(
    colors: np.ndarray,
    palette: Palette,
    limit: int = 5,
) -> List[str]:
    """
    Most frequent colors that fall outside the palette, as hex strings.
    """
    colors = np.asarray(colors).reshape(-1, 3)
    if len(colors) == 0:
        return []

    _, distances = nearest_palette_color(colors, palette)
    offending = colors[distances > palette.tolerance].astype(np.uint8)
    if len(offending) == 0:
        return []

    unique, counts = np.unique(offending, axis=0, return_counts=True)
    order = np.argsort(-counts, kind="stable")

    return [to_hex(unique[i]) for i in order[:limit]]
