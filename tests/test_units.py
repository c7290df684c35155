"""Tests for units.py - stud conversions."""

import numpy as np
import pytest

from partlint.units import (
    STUD_IN_METERS, studs_to_meters, meters_to_studs, to_studs, convert, format_studs,
)


class TestConversions:
    """Test stud/meter conversions."""
    
    def test_one_stud(self):
        """One stud is 0.28 meters."""
        assert studs_to_meters(1.0) == pytest.approx(STUD_IN_METERS)
        assert meters_to_studs(0.28) == pytest.approx(1.0)
    
    def test_array_conversion(self):
        """Conversions work element-wise on arrays."""
        values = np.array([0.28, 2.8, 28.0])
        np.testing.assert_allclose(meters_to_studs(values), [1.0, 10.0, 100.0])
    
    def test_to_studs_units(self):
        """Test to_studs for each supported unit."""
        assert to_studs(5.0, "studs") == pytest.approx(5.0)
        assert to_studs(1.4, "meters") == pytest.approx(5.0)
        assert to_studs(140.0, "centimeters") == pytest.approx(5.0)
        assert to_studs(1400.0, "millimeters") == pytest.approx(5.0)
    
    def test_unknown_unit(self):
        """Unknown unit names are rejected."""
        with pytest.raises(ValueError, match="Unknown unit"):
            to_studs(1.0, "feet")
    
    def test_convert(self):
        """Test conversion between arbitrary units."""
        assert convert(10.0, "studs", "meters") == pytest.approx(2.8)
        assert convert(2.8, "meters", "studs") == pytest.approx(10.0)
        assert convert(1.0, "meters", "centimeters") == pytest.approx(100.0)
    
    def test_format_studs(self):
        """Formatted lengths show the metric equivalent."""
        assert format_studs(12.5) == "12.5 studs (3.50 m)"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
