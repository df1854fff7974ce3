from .arbitrator import Alert, AlertArbitrator, AlertConfig, AlertInputs, AlertState, AlertTransition, ArbiterState
from .sinks import AnnouncementSink, FanOutAnnouncementSink, LogAnnouncementSink, create_sink

__all__ = [
    "Alert",
    "AlertArbitrator",
    "AlertConfig",
    "AlertInputs",
    "AlertState",
    "AlertTransition",
    "AnnouncementSink",
    "ArbiterState",
    "FanOutAnnouncementSink",
    "LogAnnouncementSink",
    "create_sink",
]
