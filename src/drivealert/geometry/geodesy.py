"""Great-circle helpers on a spherical Earth.

Positions are (latitude, longitude) pairs in decimal degrees and every
distance is in meters.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np

from drivealert.utils.types import LatLng

EARTH_RADIUS_M = 6371000.0


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(max(0.0, 1.0 - a)))
    return float(EARTH_RADIUS_M * c)


def haversine_many_m(lat: float, lon: float, lats: np.ndarray, lons: np.ndarray) -> np.ndarray:
    """Vectorised haversine from one point to many."""
    lats = np.asarray(lats, dtype=np.float64)
    lons = np.asarray(lons, dtype=np.float64)
    if lats.size == 0:
        return np.zeros((0,), dtype=np.float64)
    phi1 = math.radians(lat)
    phi2 = np.radians(lats)
    d_phi = phi2 - phi1
    d_lambda = np.radians(lons - lon)
    a = np.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * np.cos(phi2) * np.sin(d_lambda / 2.0) ** 2
    a = np.clip(a, 0.0, 1.0)
    return EARTH_RADIUS_M * 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))


def bearing_deg(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Initial bearing from point 1 to point 2, in [0, 360)."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lambda = math.radians(lon2 - lon1)
    x = math.sin(d_lambda) * math.cos(phi2)
    y = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)
    return float((math.degrees(math.atan2(x, y)) + 360.0) % 360.0)


def destination_point(lat: float, lon: float, bearing: float, distance_m: float) -> LatLng:
    delta = float(distance_m) / EARTH_RADIUS_M
    theta = math.radians(bearing)
    phi1 = math.radians(lat)
    lambda1 = math.radians(lon)
    phi2 = math.asin(math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta))
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )
    return (float(math.degrees(phi2)), float((math.degrees(lambda2) + 540.0) % 360.0 - 180.0))


def _to_local_xy(origin: LatLng, p: LatLng) -> Tuple[float, float]:
    # Equirectangular projection; accurate at the scale of a road segment.
    lat0 = math.radians(origin[0])
    x = math.radians(p[1] - origin[1]) * math.cos(lat0) * EARTH_RADIUS_M
    y = math.radians(p[0] - origin[0]) * EARTH_RADIUS_M
    return (x, y)


def point_to_segment_m(point: LatLng, a: LatLng, b: LatLng) -> float:
    ax, ay = _to_local_xy(point, a)
    bx, by = _to_local_xy(point, b)
    dx = bx - ax
    dy = by - ay
    seg_len2 = dx * dx + dy * dy
    if seg_len2 == 0.0:
        return float(math.hypot(ax, ay))
    t = -(ax * dx + ay * dy) / seg_len2
    t = max(0.0, min(1.0, t))
    return float(math.hypot(ax + t * dx, ay + t * dy))


def interpolate_position(start: LatLng, end: LatLng, progress: float) -> LatLng:
    p = max(0.0, min(1.0, float(progress)))
    return (
        float(start[0] + (end[0] - start[0]) * p),
        float(start[1] + (end[1] - start[1]) * p),
    )


def ease_out_cubic(progress: float) -> float:
    p = max(0.0, min(1.0, float(progress)))
    return float(1.0 - (1.0 - p) ** 3)


def polyline_length_m(points: Sequence[LatLng]) -> float:
    total = 0.0
    for i in range(len(points) - 1):
        total += haversine_m(points[i][0], points[i][1], points[i + 1][0], points[i + 1][1])
    return float(total)
