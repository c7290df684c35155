"""Tests for textures.py - SurfaceAppearance texture checks."""

import os
import tempfile
import numpy as np
import pytest

cv2 = pytest.importorskip("cv2", reason="opencv-python required")

from partlint.textures import TextureInfo, inspect_texture, check_texture, find_textures
from partlint.mesh_summary import MeshSummary
from partlint.linter import lint_summary
from partlint.profile import make_profile


def write_image(directory, name, shape):
    path = os.path.join(directory, name)
    cv2.imwrite(path, np.zeros(shape, dtype=np.uint8))
    return path


class TestInspect:
    """Test reading texture dimensions."""
    
    def test_inspect_rgb(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_image(tmpdir, "a.png", (256, 512, 3))
            info = inspect_texture(path)
        
        assert (info.width, info.height, info.channels) == (512, 256, 3)
        assert info.is_power_of_two
    
    def test_inspect_grayscale(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_image(tmpdir, "a.png", (64, 64))
            info = inspect_texture(path)
        
        assert info.channels == 1
    
    def test_missing(self):
        with pytest.raises(FileNotFoundError):
            inspect_texture("/nonexistent/texture.png")
    
    def test_unreadable(self):
        with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
            f.write(b"not an image")
            path = f.name
        
        try:
            with pytest.raises(ValueError, match="Could not read image"):
                inspect_texture(path)
        finally:
            os.unlink(path)


class TestCheckTexture:
    """Test texture limits."""
    
    def test_within_limits(self):
        info = TextureInfo(path="ColorMap.png", width=1024, height=1024, channels=3)
        
        assert check_texture(info, "ColorMap", 1024) == {"size": [], "format": []}
    
    def test_too_large(self):
        info = TextureInfo(path="big.png", width=2048, height=2048, channels=3)
        
        problems = check_texture(info, "ColorMap", 1024)
        assert len(problems["size"]) == 1
        assert "larger than 1024x1024" in problems["size"][0]
    
    def test_format_problems(self):
        info = TextureInfo(path="odd.png", width=300, height=200, channels=1)
        
        problems = check_texture(info, "NormalMap", 1024)
        assert problems["size"] == []
        assert len(problems["format"]) == 3


class TestFindTextures:
    """Test texture discovery by name."""
    
    def test_find(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            color = write_image(tmpdir, "Prop_Crate_ColorMap.png", (8, 8, 3))
            normal = write_image(tmpdir, "crate_NormalMap.jpg", (8, 8, 3))
            write_image(tmpdir, "Prop_Crate_Diffuse.png", (8, 8, 3))
            
            found = find_textures(tmpdir, ["Prop_Crate", "crate"])
        
        assert found == {"ColorMap": color, "NormalMap": normal}
    
    def test_first_stem_wins(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            first = write_image(tmpdir, "a_ColorMap.png", (8, 8, 3))
            write_image(tmpdir, "b_ColorMap.png", (8, 8, 3))
            
            found = find_textures(tmpdir, ["a", "b"])
        
        assert found == {"ColorMap": first}


class TestTextureRules:
    """Test the texture rules through the runner."""
    
    def test_rules(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            summary = MeshSummary(
                name="Prop_Crate",
                triangle_count=12,
                body_count=1,
                extent=[4.0, 4.0, 4.0],
                hull_volume=64.0,
                has_uv=True,
                textures={
                    "ColorMap": write_image(tmpdir, "Prop_Crate_ColorMap.png", (2048, 2048, 3)),
                    "RoughnessMap": write_image(tmpdir, "Prop_Crate_RoughnessMap.png", (100, 128)),
                    "MetalnessMap": os.path.join(tmpdir, "missing.png"),
                },
            )
            
            report = lint_summary(summary, make_profile())
        
        by_rule = {f.rule_id: f for f in report.findings}
        assert set(by_rule) == {"texture.size", "texture.format"}
        assert "ColorMap" in by_rule["texture.size"].message
        assert "MetalnessMap" in by_rule["texture.size"].message
        assert "RoughnessMap" in by_rule["texture.format"].message
        assert not report.passed


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
