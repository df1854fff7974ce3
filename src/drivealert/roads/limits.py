from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from drivealert.geometry.geodesy import haversine_m
from drivealert.roads.classifier import SpeedLimitClassifier, create_classifier
from drivealert.roads.validator import RoadAttributeValidator, ValidationResult
from drivealert.utils.config import optional_float
from drivealert.utils.types import LatLng, RoadAttributeCandidate


logger = logging.getLogger("drivealert.roads.limits")


@dataclass(frozen=True)
class SpeedLimitTrackerConfig:
    min_distance_m: float
    cache_ttl_s: float
    default_limit_kmh: Optional[float]
    classifier_backend: str
    classifier_params: Dict[str, Any]

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "SpeedLimitTrackerConfig":
        classifier = d.get("classifier", {}) or {}
        return SpeedLimitTrackerConfig(
            min_distance_m=float(d.get("min_distance_m", 50.0)),
            cache_ttl_s=float(d.get("cache_ttl_s", 60.0)),
            default_limit_kmh=optional_float(d.get("default_limit_kmh")),
            classifier_backend=str(classifier.get("backend", "keywords")),
            classifier_params=dict(classifier.get("params", {}) or {}),
        )


@dataclass(frozen=True)
class AcceptedLimit:
    limit_kmh: float
    road_name: Optional[str]
    road_class: Optional[str]
    position: LatLng
    timestamp_s: float


@dataclass(frozen=True)
class LimitDecision:
    limit_kmh: Optional[float]
    road_name: Optional[str]
    validation: ValidationResult
    from_fallback: bool


class SpeedLimitTracker:
    """Keeps the speed limit the driver is held to.

    Lookups are asked for by position and answered later; each request gets a
    sequence number and only the answer to the newest request is applied.
    Rejected or failed lookups leave the last accepted limit in force, or the
    configured default when nothing was ever accepted.
    """

    def __init__(
        self,
        cfg: Optional[SpeedLimitTrackerConfig] = None,
        validator: Optional[RoadAttributeValidator] = None,
        classifier: Optional[SpeedLimitClassifier] = None,
    ) -> None:
        self._cfg = cfg or SpeedLimitTrackerConfig.from_dict({})
        self._validator = validator or RoadAttributeValidator()
        self._classifier = classifier or create_classifier(self._cfg.classifier_backend, self._cfg.classifier_params)
        self._seq = 0
        self._last_lookup_position: Optional[LatLng] = None
        self._last_accepted: Optional[AcceptedLimit] = None

    @property
    def current_limit_kmh(self) -> Optional[float]:
        if self._last_accepted is not None:
            return float(self._last_accepted.limit_kmh)
        return self._cfg.default_limit_kmh

    @property
    def current_road_name(self) -> Optional[str]:
        return None if self._last_accepted is None else self._last_accepted.road_name

    @property
    def latest_sequence(self) -> int:
        return self._seq

    def should_lookup(self, position: LatLng) -> bool:
        if self._last_lookup_position is None:
            return True
        moved = haversine_m(self._last_lookup_position[0], self._last_lookup_position[1], position[0], position[1])
        return moved >= self._cfg.min_distance_m

    def cache_valid(self, position: LatLng, now_s: float) -> bool:
        cached = self._last_accepted
        if cached is None:
            return False
        age = float(now_s) - cached.timestamp_s
        dist = haversine_m(cached.position[0], cached.position[1], position[0], position[1])
        return age < self._cfg.cache_ttl_s and dist < self._cfg.min_distance_m

    def request(self, position: LatLng, now_s: float, force: bool = False) -> Optional[int]:
        """Returns a sequence number when a lookup should be sent, else None."""
        if not force and not self.should_lookup(position):
            return None
        self._last_lookup_position = position
        if not force and self.cache_valid(position, now_s):
            return None
        self._seq += 1
        return self._seq

    def resolve(
        self,
        seq: int,
        candidate: Optional[RoadAttributeCandidate],
        position: LatLng,
        vehicle_heading: Optional[float],
        vehicle_speed: float,
        now_s: float,
    ) -> Optional[LimitDecision]:
        """Applies a lookup answer. Returns None when the answer is stale."""
        if int(seq) != self._seq:
            logger.debug("discarding stale speed limit lookup %d (latest %d)", seq, self._seq)
            return None
        if candidate is None:
            logger.info("speed limit lookup failed, keeping %s", self.current_limit_kmh)
            return self._fallback(ValidationResult.lookup_failed())

        limit = candidate.inferred_speed_limit_kmh
        if limit is None:
            limit = self._classifier.classify(candidate.road_name, candidate.road_class)
        if limit is None:
            return self._fallback(ValidationResult.reject("no speed limit for road"))

        result = self._validator.validate(vehicle_heading, vehicle_speed, candidate)
        if not result.accepted:
            return self._fallback(result)

        self._last_accepted = AcceptedLimit(
            limit_kmh=float(limit),
            road_name=candidate.road_name,
            road_class=candidate.road_class,
            position=position,
            timestamp_s=float(now_s),
        )
        logger.debug("accepted speed limit %.0f km/h on %s", float(limit), candidate.road_name)
        return LimitDecision(limit_kmh=float(limit), road_name=candidate.road_name, validation=result, from_fallback=False)

    def reset(self) -> None:
        # Bumping the sequence orphans any lookup still in flight.
        self._seq += 1
        self._last_lookup_position = None
        self._last_accepted = None

    def _fallback(self, result: ValidationResult) -> LimitDecision:
        return LimitDecision(
            limit_kmh=self.current_limit_kmh,
            road_name=self.current_road_name,
            validation=result,
            from_fallback=True,
        )
