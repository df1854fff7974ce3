from .angles import angle_difference, bidirectional_difference, normalize_angle
from .geodesy import (
    EARTH_RADIUS_M,
    bearing_deg,
    destination_point,
    ease_out_cubic,
    haversine_m,
    haversine_many_m,
    interpolate_position,
    point_to_segment_m,
    polyline_length_m,
)

__all__ = [
    "EARTH_RADIUS_M",
    "angle_difference",
    "bearing_deg",
    "bidirectional_difference",
    "destination_point",
    "ease_out_cubic",
    "haversine_m",
    "haversine_many_m",
    "interpolate_position",
    "normalize_angle",
    "point_to_segment_m",
    "polyline_length_m",
]
