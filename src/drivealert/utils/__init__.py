from .config import load_yaml, resolve_path
from .logging import setup_logging
from .types import (
    HazardEntity,
    LatLng,
    LocationError,
    MotionState,
    RawSample,
    RoadAttributeCandidate,
)
from .units import kmh_to_mps, mph_to_kmh, mps_to_kmh

__all__ = [
    "HazardEntity",
    "LatLng",
    "LocationError",
    "MotionState",
    "RawSample",
    "RoadAttributeCandidate",
    "kmh_to_mps",
    "load_yaml",
    "mps_to_kmh",
    "mph_to_kmh",
    "resolve_path",
    "setup_logging",
]
