from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple

import numpy as np

from drivealert.utils.units import mps_to_kmh

LatLng = Tuple[float, float]

HazardCategory = Literal["speed-camera", "red-light-camera", "checkpoint", "ai-enforcement"]
HazardSource = Literal["official", "community", "user"]
AlertKind = Literal["speeding", "camera", "checkpoint"]
LocationErrorKind = Literal["permission_denied", "unavailable", "timeout", "unknown"]

HAZARD_CATEGORIES: Tuple[str, ...] = ("speed-camera", "red-light-camera", "checkpoint", "ai-enforcement")
HAZARD_SOURCES: Tuple[str, ...] = ("official", "community", "user")
SOURCE_PRIORITY: Dict[str, int] = {"official": 0, "community": 1, "user": 2}

CATEGORY_ALERT_KIND: Dict[str, str] = {
    "speed-camera": "camera",
    "red-light-camera": "camera",
    "ai-enforcement": "camera",
    "checkpoint": "checkpoint",
}


@dataclass(frozen=True)
class RawSample:
    latitude: float
    longitude: float
    raw_speed_kmh: Optional[float]
    heading_deg: Optional[float]
    accuracy_m: Optional[float]
    timestamp_s: float

    @property
    def position(self) -> LatLng:
        return (float(self.latitude), float(self.longitude))

    @staticmethod
    def from_fix(
        latitude: float,
        longitude: float,
        speed_mps: Optional[float],
        heading_deg: Optional[float],
        accuracy_m: Optional[float],
        timestamp_s: float,
    ) -> "RawSample":
        # Device fixes report m/s. A missing speed stays None, it is not a standstill.
        speed = None if speed_mps is None else max(0.0, mps_to_kmh(speed_mps))
        return RawSample(
            latitude=float(latitude),
            longitude=float(longitude),
            raw_speed_kmh=speed,
            heading_deg=None if heading_deg is None else float(heading_deg),
            accuracy_m=None if accuracy_m is None else float(accuracy_m),
            timestamp_s=float(timestamp_s),
        )


@dataclass(frozen=True)
class LocationError:
    kind: LocationErrorKind
    message: str

    @staticmethod
    def from_kind(kind: str) -> "LocationError":
        messages = {
            "permission_denied": "Location permission denied. Please enable GPS access.",
            "unavailable": "Location information unavailable.",
            "timeout": "Location request timed out.",
        }
        k = str(kind).lower()
        if k not in messages:
            return LocationError(kind="unknown", message="An unknown error occurred.")
        return LocationError(kind=k, message=messages[k])  # type: ignore[arg-type]


@dataclass(frozen=True)
class MotionState:
    smoothed_speed_kmh: float
    is_stationary: bool
    animated_latitude: Optional[float]
    animated_longitude: Optional[float]
    locked_heading_deg: Optional[float]
    raw_speed_kmh: float = 0.0
    accuracy_m: Optional[float] = None
    timestamp_s: Optional[float] = None
    is_animating: bool = False

    @property
    def position(self) -> Optional[LatLng]:
        if self.animated_latitude is None or self.animated_longitude is None:
            return None
        return (float(self.animated_latitude), float(self.animated_longitude))


@dataclass(frozen=True)
class RoadAttributeCandidate:
    inferred_heading_deg: Optional[float]
    road_class: Optional[str]
    inferred_speed_limit_kmh: Optional[float]
    road_name: Optional[str] = None


@dataclass(frozen=True)
class HazardEntity:
    id: str
    latitude: float
    longitude: float
    category: HazardCategory
    source: HazardSource
    speed_limit_kmh: Optional[float] = None
    direction_deg: Optional[float] = None
    name: Optional[str] = None
    city: Optional[str] = None

    @property
    def position(self) -> LatLng:
        return (float(self.latitude), float(self.longitude))

    @property
    def alert_kind(self) -> str:
        return CATEGORY_ALERT_KIND[self.category]

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "HazardEntity":
        category = str(d.get("category", "speed-camera")).lower()
        if category not in HAZARD_CATEGORIES:
            raise ValueError(f"Unknown hazard category: {category}")
        source = str(d.get("source", "official")).lower()
        if source not in HAZARD_SOURCES:
            raise ValueError(f"Unknown hazard source: {source}")
        limit = d.get("speed_limit_kmh")
        direction = d.get("direction_deg")
        return HazardEntity(
            id=str(d["id"]),
            latitude=float(d["latitude"]),
            longitude=float(d["longitude"]),
            category=category,  # type: ignore[arg-type]
            source=source,  # type: ignore[arg-type]
            speed_limit_kmh=None if limit is None else float(limit),
            direction_deg=None if direction is None else float(direction),
            name=None if d.get("name") is None else str(d["name"]),
            city=None if d.get("city") is None else str(d["city"]),
        )


def as_np_latlng(points: Sequence[LatLng]) -> np.ndarray:
    return np.asarray(points, dtype=np.float64).reshape(-1, 2)


def hazard_positions(hazards: List[HazardEntity]) -> np.ndarray:
    return as_np_latlng([h.position for h in hazards])
