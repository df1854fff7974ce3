from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Optional


@dataclass
class EmaSmoother:
    """Running km/h average: ``alpha`` weights the newest GPS reading.

    An empty smoother, or one that has not heard a fix for more than
    ``max_gap_s`` (when positive), adopts the next reading as is.
    """
    alpha: float
    max_gap_s: float = 0.0
    _value: Optional[float] = None
    _t_last_s: Optional[float] = None

    @property
    def value(self) -> Optional[float]:
        return self._value

    def update(self, value: float, t_s: float) -> float:
        reading, now = float(value), float(t_s)
        prev, last = self._value, self._t_last_s
        self._t_last_s = now
        if prev is None or last is None or self._gap_exceeded(now - last):
            self._value = reading
        else:
            self._value = prev + self.alpha * (reading - prev)
        return self._value

    def reset(self) -> None:
        self._value = None
        self._t_last_s = None

    def _gap_exceeded(self, dt_s: float) -> bool:
        return self.max_gap_s > 0.0 and dt_s > self.max_gap_s


@dataclass
class StationaryFilter:
    """Zeroes speed drift at a standstill and keeps a hysteresis flag.

    Speed is forced to zero while the smoothed value and every reading in the
    recent window are under ``min_speed``. The public flag turns on with that
    forcing and only turns off again once the smoothed speed reaches
    ``moving_speed``.
    """
    window: int
    min_speed: float
    moving_speed: float
    _recent: Deque[float] = field(default_factory=deque)
    _stationary: bool = True

    def __post_init__(self) -> None:
        self.window = max(1, int(self.window))
        self._recent = deque(maxlen=self.window)

    @property
    def is_stationary(self) -> bool:
        return self._stationary

    def push(self, raw_speed: float) -> None:
        self._recent.append(max(0.0, float(raw_speed)))

    def apply(self, smoothed: float) -> float:
        v = max(0.0, float(smoothed))
        if v < self.min_speed and all(s < self.min_speed for s in self._recent):
            self._stationary = True
            return 0.0
        if v >= self.moving_speed:
            self._stationary = False
        return v

    def reset(self) -> None:
        self._recent.clear()
        self._stationary = True
