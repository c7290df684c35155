"""
SurfaceAppearance texture map checks.

Texture maps are found next to the mesh file by naming convention,
e.g. Prop_Crate_ColorMap.png, and inspected with OpenCV.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Union

try:
    import cv2
    HAS_CV2 = True
except ImportError:
    HAS_CV2 = False

MAP_KINDS = ("ColorMap", "NormalMap", "RoughnessMap", "MetalnessMap")
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".tga", ".bmp")


@dataclass
class TextureInfo:
    """Dimensions and channel count of one texture image."""
    path: str
    width: int
    height: int
    channels: int

    @property
    def is_power_of_two(self) -> bool:
        return _is_power_of_two(self.width) and _is_power_of_two(self.height)


def _is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def inspect_texture(path: Union[str, Path]) -> TextureInfo:
    """
    Read a texture and report its size.

    Raises:
        FileNotFoundError: If the image does not exist
        ValueError: If OpenCV cannot decode the image
    """
    if not HAS_CV2:
        raise ImportError("opencv-python is required for texture checks. Install with: pip install opencv-python")

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Texture not found: {path}")

    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ValueError(f"Could not read image: {path}")

    height, width = image.shape[:2]
    channels = 1 if image.ndim == 2 else image.shape[2]

    return TextureInfo(path=str(path), width=width, height=height, channels=channels)


def check_texture(info: TextureInfo, kind: str, max_size: int = 1024) -> Dict[str, List[str]]:
    """
    Check one texture map against the export limits.

    Returns:
        Dict with "size" problems (hard limits) and "format" problems (advice)
    """
    size_problems = []
    format_problems = []
    name = Path(info.path).name

    if info.width > max_size or info.height > max_size:
        size_problems.append(
            f"{kind} {name} is {info.width}x{info.height}, larger than {max_size}x{max_size}"
        )

    if not info.is_power_of_two:
        format_problems.append(f"{kind} {name} is {info.width}x{info.height}, not a power of two")

    if info.width != info.height:
        format_problems.append(f"{kind} {name} is not square")

    if kind == "NormalMap" and info.channels < 3:
        format_problems.append(f"NormalMap {name} has {info.channels} channel(s), expected RGB")

    return {"size": size_problems, "format": format_problems}


def find_textures(directory: Union[str, Path], stems: Iterable[str]) -> Dict[str, str]:
    """
    Find texture maps named <stem>_<MapKind>.<ext> in a directory.

    The first stem with a match wins for each map kind.

    Returns:
        Dict mapping map kind to file path
    """
    directory = Path(directory)
    found: Dict[str, str] = {}

    for stem in stems:
        for kind in MAP_KINDS:
            if kind in found:
                continue
            for ext in IMAGE_EXTENSIONS:
                candidate = directory / f"{stem}_{kind}{ext}"
                if candidate.exists():
                    found[kind] = str(candidate)
                    break

    return found
