from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from drivealert.hazards.matcher import HazardMatch
from drivealert.utils.types import HazardEntity


logger = logging.getLogger("drivealert.alerts.arbitrator")

ALERT_KINDS: Tuple[str, ...] = ("speeding", "camera", "checkpoint")

DEFAULT_TONES_HZ: Dict[str, float] = {"camera": 800.0, "checkpoint": 600.0, "speeding": 1000.0}

CAMERA_LABELS: Dict[str, str] = {
    "speed-camera": "Speed camera",
    "red-light-camera": "Red light camera",
    "ai-enforcement": "AI enforcement camera",
    "checkpoint": "Police checkpoint",
}


class ArbiterState(str, Enum):
    IDLE = "idle"
    ALERTING = "alerting"
    COOLDOWN = "cooldown"


@dataclass(frozen=True)
class AlertConfig:
    cooldown_s: float
    clear_timeout_s: float
    camera_radius_m: float
    checkpoint_radius_m: float
    priority: Tuple[str, ...]
    tones_hz: Dict[str, float]

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "AlertConfig":
        priority = d.get("priority", list(ALERT_KINDS))
        if not isinstance(priority, (list, tuple)):
            raise ValueError("alerts.priority must be a list")
        priority = tuple(str(p).lower() for p in priority)
        unknown = [p for p in priority if p not in ALERT_KINDS]
        if unknown:
            raise ValueError(f"Unknown alert kinds in alerts.priority: {unknown}")
        if len(set(priority)) != len(priority):
            raise ValueError("alerts.priority must not repeat a kind")
        tones = dict(DEFAULT_TONES_HZ)
        tones.update({str(k): float(v) for k, v in (d.get("tones_hz", {}) or {}).items()})
        return AlertConfig(
            cooldown_s=float(d.get("cooldown_s", 5.0)),
            clear_timeout_s=float(d.get("clear_timeout_s", 10.0)),
            camera_radius_m=float(d.get("camera_radius_m", 500.0)),
            checkpoint_radius_m=float(d.get("checkpoint_radius_m", 1000.0)),
            priority=priority,
            tones_hz=tones,
        )

    def radius_for(self, kind: str) -> float:
        if kind == "checkpoint":
            return float(self.checkpoint_radius_m)
        return float(self.camera_radius_m)


@dataclass(frozen=True)
class AlertInputs:
    speed_kmh: float
    speed_limit_kmh: Optional[float]
    nearest: Mapping[str, HazardMatch] = field(default_factory=dict)


@dataclass(frozen=True)
class Alert:
    id: str
    kind: str
    message: str
    tone_hz: float
    timestamp_s: float
    distance_m: Optional[float] = None
    hazard: Optional[HazardEntity] = None


@dataclass(frozen=True)
class AlertState:
    active_alert_id: Optional[str]
    active_category: Optional[str]
    cooldown_expiry_s: Optional[float]


@dataclass(frozen=True)
class AlertTransition:
    activated: Optional[Alert] = None
    cleared: bool = False


class AlertArbitrator:
    """Picks the single alert to show the driver.

    Conditions are tried in priority order and only the first that holds
    counts for a tick. A new alert id fires only outside the cooldown that
    follows the previous activation; seeing the active id again is a no-op.
    The active alert is cleared once no condition has held for longer than
    the clear timeout.
    """

    def __init__(self, cfg: Optional[AlertConfig] = None) -> None:
        self._cfg = cfg or AlertConfig.from_dict({})
        self._active: Optional[Alert] = None
        self._last_activation_s: Optional[float] = None
        self._last_trigger_s: Optional[float] = None

    @property
    def config(self) -> AlertConfig:
        return self._cfg

    @property
    def active(self) -> Optional[Alert]:
        return self._active

    @property
    def snapshot(self) -> AlertState:
        expiry = None if self._last_activation_s is None else self._last_activation_s + self._cfg.cooldown_s
        return AlertState(
            active_alert_id=None if self._active is None else self._active.id,
            active_category=None if self._active is None else self._active.kind,
            cooldown_expiry_s=expiry,
        )

    def state_at(self, now_s: float) -> ArbiterState:
        if self._active is None:
            return ArbiterState.IDLE
        if self.in_cooldown(now_s):
            return ArbiterState.COOLDOWN
        return ArbiterState.ALERTING

    def in_cooldown(self, now_s: float) -> bool:
        if self._last_activation_s is None:
            return False
        return float(now_s) - self._last_activation_s < self._cfg.cooldown_s

    def tick(self, now_s: float, inputs: AlertInputs) -> AlertTransition:
        now = float(now_s)
        candidate = self._select(now, inputs)
        if candidate is not None:
            self._last_trigger_s = now
            if self._active is not None and candidate.id == self._active.id:
                return AlertTransition()
            if self.in_cooldown(now):
                return AlertTransition()
            self._active = candidate
            self._last_activation_s = now
            logger.info("ALERT %s: %s", candidate.id, candidate.message)
            return AlertTransition(activated=candidate)

        if self._active is not None and self._last_trigger_s is not None:
            if now - self._last_trigger_s > self._cfg.clear_timeout_s:
                logger.debug("clearing alert %s", self._active.id)
                self._active = None
                return AlertTransition(cleared=True)
        return AlertTransition()

    def clear(self) -> None:
        self._active = None

    def reset(self) -> None:
        self._active = None
        self._last_activation_s = None
        self._last_trigger_s = None

    def _select(self, now: float, inputs: AlertInputs) -> Optional[Alert]:
        for kind in self._cfg.priority:
            if kind == "speeding":
                limit = inputs.speed_limit_kmh
                if limit is not None and float(inputs.speed_kmh) > float(limit):
                    return Alert(
                        id="speeding",
                        kind="speeding",
                        message=f"Slow down! Speed limit is {round(float(limit))} km/h",
                        tone_hz=self._cfg.tones_hz["speeding"],
                        timestamp_s=now,
                    )
                continue
            match = inputs.nearest.get(kind)
            if match is None or match.distance_m > self._cfg.radius_for(kind):
                continue
            label = CAMERA_LABELS.get(match.hazard.category, "Hazard")
            return Alert(
                id=f"{kind}-{match.hazard.id}",
                kind=kind,
                message=f"{label} ahead - {round(match.distance_m)}m",
                tone_hz=self._cfg.tones_hz[kind],
                timestamp_s=now,
                distance_m=float(round(match.distance_m)),
                hazard=match.hazard,
            )
        return None
