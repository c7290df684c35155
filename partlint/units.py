"""
Unit conversion between studs and real-world lengths.

One stud is approximately 0.28 meters. Modeling applications usually work
in meters, so every length that reaches a rule is converted to studs first.
"""

import numpy as np
from typing import Union

STUD_IN_METERS = 0.28

# Length of one source unit in meters
UNIT_SCALE = {
    "studs": STUD_IN_METERS,
    "meters": 1.0,
    "centimeters": 0.01,
    "millimeters": 0.001,
}

Number = Union[float, np.ndarray]


def studs_to_meters(value: Number) -> Number:
    """Convert studs to meters."""
    return value * STUD_IN_METERS


def meters_to_studs(value: Number) -> Number:
    """Convert meters to studs."""
    return value / STUD_IN_METERS


def unit_scale(units: str) -> float:
    """
    Scale factor from the given unit to studs.
    
    Args:
        units: One of "studs", "meters", "centimeters", "millimeters"
    
    Returns:
        Number of studs in one unit
    
    Raises:
        ValueError: If the unit name is unknown
    """
    if units not in UNIT_SCALE:
        raise ValueError(f"Unknown unit: {units!r}, expected one of {sorted(UNIT_SCALE)}")
    return UNIT_SCALE[units] / STUD_IN_METERS


def to_studs(value: Number, units: str) -> Number:
    """Convert a length expressed in `units` to studs."""
    return value * unit_scale(units)


def convert(value: float, from_units: str, to_units: str) -> float:
    """Convert a length between any two supported units."""
    return float(value * unit_scale(from_units) / unit_scale(to_units))


def format_studs(value: float) -> str:
    """Format a stud length with its metric equivalent, e.g. '12.5 studs (3.50 m)'."""
    return f"{value:g} studs ({studs_to_meters(value):.2f} m)"
