from .alerts import Alert, AlertArbitrator, AlertConfig, AlertInputs, AnnouncementSink
from .hazards import HazardMatch, HazardMatcher
from .motion import MotionSmoother, MotionSmootherConfig
from .roads import RoadAttributeValidator, SpeedLimitTracker, ValidationResult
from .routing import RouteDeviationDetector, check_deviation, is_off_route
from .session import EngineConfig, ManualScheduler, TelemetrySession
from .utils.types import HazardEntity, LocationError, MotionState, RawSample, RoadAttributeCandidate

__version__ = "0.1.0"

__all__ = [
    "Alert",
    "AlertArbitrator",
    "AlertConfig",
    "AlertInputs",
    "AnnouncementSink",
    "EngineConfig",
    "HazardEntity",
    "HazardMatch",
    "HazardMatcher",
    "LocationError",
    "ManualScheduler",
    "MotionSmoother",
    "MotionSmootherConfig",
    "MotionState",
    "RawSample",
    "RoadAttributeCandidate",
    "RoadAttributeValidator",
    "RouteDeviationDetector",
    "SpeedLimitTracker",
    "TelemetrySession",
    "ValidationResult",
    "check_deviation",
    "is_off_route",
]
