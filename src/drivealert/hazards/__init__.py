from .loader import (
    HazardCorrection,
    apply_corrections,
    hazard_stats,
    load_hazards,
    make_correction,
    parse_official_cameras,
    parse_overpass_elements,
)
from .matcher import HazardMatch, HazardMatcher, MatcherConfig, is_facing, nearest_by_kind

__all__ = [
    "HazardCorrection",
    "HazardMatch",
    "HazardMatcher",
    "MatcherConfig",
    "apply_corrections",
    "hazard_stats",
    "is_facing",
    "load_hazards",
    "make_correction",
    "nearest_by_kind",
    "parse_official_cameras",
    "parse_overpass_elements",
]
