from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from drivealert.alerts.arbitrator import AlertConfig
from drivealert.hazards.matcher import MatcherConfig
from drivealert.motion.smoother import MotionSmootherConfig
from drivealert.roads.limits import SpeedLimitTrackerConfig
from drivealert.roads.validator import ValidatorConfig
from drivealert.routing.deviation import DeviationConfig
from drivealert.utils.config import load_yaml, section


@dataclass(frozen=True)
class EngineConfig:
    motion: MotionSmootherConfig
    validation: ValidatorConfig
    speed_limit: SpeedLimitTrackerConfig
    hazards: MatcherConfig
    alerts: AlertConfig
    routing: DeviationConfig
    alert_interval_s: float
    frame_interval_s: float
    facing_filter: bool
    muted: bool
    announcements: Dict[str, Any]

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "EngineConfig":
        session = section(d, "session")
        alert_interval_s = float(session.get("alert_interval_s", 1.0))
        if alert_interval_s <= 0.0:
            raise ValueError("session.alert_interval_s must be positive")
        return EngineConfig(
            motion=MotionSmootherConfig.from_dict(section(d, "motion")),
            validation=ValidatorConfig.from_dict(section(d, "validation")),
            speed_limit=SpeedLimitTrackerConfig.from_dict(section(d, "speed_limit")),
            hazards=MatcherConfig.from_dict(section(d, "hazards")),
            alerts=AlertConfig.from_dict(section(d, "alerts")),
            routing=DeviationConfig.from_dict(section(d, "routing")),
            alert_interval_s=alert_interval_s,
            frame_interval_s=float(session.get("frame_interval_s", 1.0 / 60.0)),
            facing_filter=bool(session.get("facing_filter", True)),
            muted=bool(session.get("muted", False)),
            announcements=section(d, "announcements"),
        )

    @staticmethod
    def load(path: str) -> "EngineConfig":
        return EngineConfig.from_dict(load_yaml(path))
