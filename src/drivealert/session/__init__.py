from .collaborators import AttributeLookup, RouteProvider
from .config import EngineConfig
from .scheduler import ManualScheduler, Scheduler
from .session import TelemetrySession

__all__ = [
    "AttributeLookup",
    "EngineConfig",
    "ManualScheduler",
    "RouteProvider",
    "Scheduler",
    "TelemetrySession",
]
