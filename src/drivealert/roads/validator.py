from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from drivealert.geometry.angles import bidirectional_difference, is_finite_angle
from drivealert.utils.types import RoadAttributeCandidate


logger = logging.getLogger("drivealert.roads.validator")

LOW_SPEED_ROAD_CLASSES: Tuple[str, ...] = ("service", "residential", "living_street", "track", "path")


@dataclass(frozen=True)
class ValidationResult:
    accepted: bool
    reason: Optional[str] = None

    @staticmethod
    def ok() -> "ValidationResult":
        return ValidationResult(accepted=True)

    @staticmethod
    def reject(reason: str) -> "ValidationResult":
        return ValidationResult(accepted=False, reason=str(reason))

    @staticmethod
    def lookup_failed() -> "ValidationResult":
        return ValidationResult(accepted=False, reason="lookup failed")


@dataclass(frozen=True)
class ValidatorConfig:
    heading_threshold_deg: float
    high_speed_kmh: float
    low_speed_road_classes: Tuple[str, ...]

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "ValidatorConfig":
        classes = d.get("low_speed_road_classes", list(LOW_SPEED_ROAD_CLASSES))
        if not isinstance(classes, (list, tuple)):
            raise ValueError("validation.low_speed_road_classes must be a list")
        return ValidatorConfig(
            heading_threshold_deg=float(d.get("heading_threshold_deg", 25.0)),
            high_speed_kmh=float(d.get("high_speed_kmh", 70.0)),
            low_speed_road_classes=tuple(str(c).lower() for c in classes),
        )


class RoadAttributeValidator:
    """Decides whether a looked-up road attribute fits how the car is moving.

    The validator never stores anything; falling back to the last accepted
    attribute after a rejection is up to the caller.
    """

    def __init__(self, cfg: Optional[ValidatorConfig] = None) -> None:
        self._cfg = cfg or ValidatorConfig.from_dict({})

    @property
    def config(self) -> ValidatorConfig:
        return self._cfg

    def validate(
        self,
        vehicle_heading: Optional[float],
        vehicle_speed: float,
        candidate: RoadAttributeCandidate,
    ) -> ValidationResult:
        result = self.check_heading(vehicle_heading, candidate.inferred_heading_deg)
        if not result.accepted:
            logger.info("Rejected: %s", result.reason)
            return result
        result = self.check_speed_gate(vehicle_speed, candidate.road_class)
        if not result.accepted:
            logger.info("Rejected: %s", result.reason)
            return result
        return ValidationResult.ok()

    def check_heading(self, vehicle_heading: Optional[float], road_heading: Optional[float]) -> ValidationResult:
        if not is_finite_angle(vehicle_heading) or not is_finite_angle(road_heading):
            return ValidationResult.ok()
        car = float(vehicle_heading)  # type: ignore[arg-type]
        road = float(road_heading)  # type: ignore[arg-type]
        diff = bidirectional_difference(car, road)
        if diff > self._cfg.heading_threshold_deg:
            return ValidationResult.reject(
                f"Heading mismatch: car {round(car)}° vs road {round(road)}° (diff: {round(diff)}°)"
            )
        return ValidationResult.ok()

    def check_speed_gate(self, vehicle_speed: float, road_class: Optional[str]) -> ValidationResult:
        if not road_class:
            return ValidationResult.ok()
        if float(vehicle_speed) > self._cfg.high_speed_kmh and self.is_low_speed_road(road_class):
            return ValidationResult.reject(
                f'Speed gate: {round(float(vehicle_speed))} km/h on "{road_class}" - likely on main road'
            )
        return ValidationResult.ok()

    def is_low_speed_road(self, road_class: str) -> bool:
        normalized = str(road_class).lower()
        return any(c in normalized for c in self._cfg.low_speed_road_classes)
