from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol

from drivealert.alerts.arbitrator import Alert


logger = logging.getLogger("drivealert.alerts.sinks")


class AnnouncementSink(Protocol):
    """Receives each newly activated alert; playing the tone or speaking the
    message is up to the host. ``muted`` is passed through, never stored."""

    def announce(self, alert: Alert, muted: bool) -> None:
        ...


@dataclass
class LogAnnouncementSink(AnnouncementSink):
    level: str = "WARNING"

    def announce(self, alert: Alert, muted: bool) -> None:
        lvl = getattr(logging, str(self.level).upper(), logging.WARNING)
        logger.log(
            lvl,
            "ANNOUNCE kind=%s id=%s tone=%.0fHz muted=%s msg=%s",
            alert.kind,
            alert.id,
            alert.tone_hz,
            muted,
            alert.message,
        )


@dataclass
class FanOutAnnouncementSink(AnnouncementSink):
    sinks: List[AnnouncementSink] = field(default_factory=list)

    def announce(self, alert: Alert, muted: bool) -> None:
        for s in self.sinks:
            s.announce(alert, muted)


def create_sink(cfg: Dict[str, Any]) -> AnnouncementSink:
    t = str(cfg.get("type", "log")).lower()
    if t == "log":
        return LogAnnouncementSink(level=str(cfg.get("level", "WARNING")))
    if t == "multi":
        children = cfg.get("sinks", []) or []
        if not isinstance(children, list):
            raise ValueError("announcements.sinks must be a list when announcements.type=multi")
        return FanOutAnnouncementSink(sinks=[create_sink(dict(c)) for c in children])
    raise ValueError(f"Unknown announcements.type: {t}")
