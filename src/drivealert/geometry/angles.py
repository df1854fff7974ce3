from __future__ import annotations

import math
from typing import Optional


def normalize_angle(angle: float) -> float:
    a = float(angle) % 360.0
    if a >= 360.0:
        a -= 360.0
    return a


def angle_difference(a: float, b: float) -> float:
    """Smallest absolute difference between two headings, in [0, 180]."""
    diff = abs(normalize_angle(a) - normalize_angle(b))
    return float(360.0 - diff if diff > 180.0 else diff)


def bidirectional_difference(heading: float, road_heading: float) -> float:
    """Difference to a two-way road: the road may be driven either way."""
    return min(angle_difference(heading, road_heading), angle_difference(heading, road_heading + 180.0))


def is_finite_angle(angle: Optional[float]) -> bool:
    return angle is not None and math.isfinite(float(angle))
