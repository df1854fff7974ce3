from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from drivealert.geometry.angles import angle_difference, is_finite_angle
from drivealert.geometry.geodesy import haversine_many_m
from drivealert.utils.types import SOURCE_PRIORITY, HazardEntity, LatLng, hazard_positions


logger = logging.getLogger("drivealert.hazards.matcher")


@dataclass(frozen=True)
class MatcherConfig:
    dedup_radius_m: float
    facing_max_deg: float
    search_radius_m: float

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "MatcherConfig":
        return MatcherConfig(
            dedup_radius_m=float(d.get("dedup_radius_m", 50.0)),
            facing_max_deg=float(d.get("facing_max_deg", 90.0)),
            search_radius_m=float(d.get("search_radius_m", 1000.0)),
        )


@dataclass(frozen=True)
class HazardMatch:
    hazard: HazardEntity
    distance_m: float


def is_facing(vehicle_heading: Optional[float], direction_deg: Optional[float], max_diff_deg: float = 90.0) -> bool:
    """False only when both headings are known and the hazard enforces the other carriageway."""
    if not is_finite_angle(vehicle_heading) or not is_finite_angle(direction_deg):
        return True
    return angle_difference(float(vehicle_heading), float(direction_deg)) <= max_diff_deg  # type: ignore[arg-type]


def nearest_by_kind(matches: Sequence[HazardMatch]) -> Dict[str, HazardMatch]:
    """Nearest match per alert kind; ``matches`` must already be sorted."""
    out: Dict[str, HazardMatch] = {}
    for m in matches:
        kind = m.hazard.alert_kind
        if kind not in out:
            out[kind] = m
    return out


class HazardMatcher:
    def __init__(self, cfg: Optional[MatcherConfig] = None) -> None:
        self._cfg = cfg or MatcherConfig.from_dict({})

    @property
    def config(self) -> MatcherConfig:
        return self._cfg

    def distances(self, position: LatLng, hazards: Sequence[HazardEntity]) -> np.ndarray:
        if len(hazards) == 0:
            return np.zeros((0,), dtype=np.float64)
        pts = hazard_positions(list(hazards))
        return haversine_many_m(position[0], position[1], pts[:, 0], pts[:, 1])

    def match(
        self,
        position: LatLng,
        hazards: Sequence[HazardEntity],
        radius_m: float,
        heading: Optional[float] = None,
    ) -> List[HazardMatch]:
        if len(hazards) == 0 or radius_m < 0.0:
            return []
        if not (math.isfinite(position[0]) and math.isfinite(position[1])):
            return []
        d = self.distances(position, hazards)
        keep = np.nonzero(d <= float(radius_m))[0]
        if heading is not None:
            keep = np.asarray(
                [i for i in keep if is_facing(heading, hazards[i].direction_deg, self._cfg.facing_max_deg)],
                dtype=np.int64,
            )
        if keep.size == 0:
            return []
        # Stable sort keeps input order between equal distances.
        order = keep[np.argsort(d[keep], kind="stable")]
        return [HazardMatch(hazard=hazards[int(i)], distance_m=float(d[int(i)])) for i in order]

    def dedupe(
        self,
        primary: Sequence[HazardEntity],
        secondary: Sequence[HazardEntity],
        radius_m: Optional[float] = None,
    ) -> List[HazardEntity]:
        """Primary entities always survive; secondary ones close to any primary are dropped."""
        radius = self._cfg.dedup_radius_m if radius_m is None else float(radius_m)
        out: List[HazardEntity] = list(primary)
        if len(primary) == 0:
            out.extend(secondary)
            return out
        pts = hazard_positions(list(primary))
        dropped = 0
        for h in secondary:
            d = haversine_many_m(h.latitude, h.longitude, pts[:, 0], pts[:, 1])
            if bool(np.any(d <= radius)):
                dropped += 1
                continue
            out.append(h)
        if dropped:
            logger.debug("dropped %d duplicate hazards within %.0f m of a trusted one", dropped, radius)
        return out

    def merge(self, hazards: Sequence[HazardEntity]) -> List[HazardEntity]:
        """Merges a mixed snapshot, trusting official over community over user."""
        tiers: Dict[int, List[HazardEntity]] = {}
        for h in hazards:
            tiers.setdefault(SOURCE_PRIORITY[h.source], []).append(h)
        merged: List[HazardEntity] = []
        for rank in sorted(tiers.keys()):
            merged = self.dedupe(merged, tiers[rank])
        return merged
