from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Protocol, Union

from drivealert.utils.types import LocationError, RawSample

SampleCallback = Callable[[Union[RawSample, LocationError]], None]
TimeCallback = Callable[[float], object]


class Scheduler(Protocol):
    def on_sample(self, cb: SampleCallback) -> None:
        ...

    def on_tick(self, cb: TimeCallback) -> None:
        ...

    def on_frame(self, cb: TimeCallback) -> None:
        ...


@dataclass
class ManualScheduler(Scheduler):
    """Drives a session synchronously: nothing happens until it is told to."""
    _sample_cbs: List[SampleCallback] = field(default_factory=list)
    _tick_cbs: List[TimeCallback] = field(default_factory=list)
    _frame_cbs: List[TimeCallback] = field(default_factory=list)

    def on_sample(self, cb: SampleCallback) -> None:
        self._sample_cbs.append(cb)

    def on_tick(self, cb: TimeCallback) -> None:
        self._tick_cbs.append(cb)

    def on_frame(self, cb: TimeCallback) -> None:
        self._frame_cbs.append(cb)

    def push_sample(self, sample: RawSample) -> None:
        for cb in list(self._sample_cbs):
            cb(sample)

    def push_error(self, error: LocationError) -> None:
        for cb in list(self._sample_cbs):
            cb(error)

    def tick(self, now_s: float) -> None:
        for cb in list(self._tick_cbs):
            cb(float(now_s))

    def frame(self, now_s: float) -> None:
        for cb in list(self._frame_cbs):
            cb(float(now_s))

    def replay(
        self,
        samples: Iterable[RawSample],
        tick_interval_s: float = 1.0,
        frame_interval_s: Optional[float] = None,
    ) -> int:
        """Feeds samples in timestamp order, firing ticks and frames on the
        same clock between them. Returns the number of ticks fired."""
        ordered = sorted(samples, key=lambda s: float(s.timestamp_s))
        if not ordered:
            return 0
        t0 = float(ordered[0].timestamp_s)
        next_tick = t0
        next_frame = t0
        ticks = 0
        for s in ordered:
            t = float(s.timestamp_s)
            while frame_interval_s is not None and frame_interval_s > 0.0 and next_frame < t:
                self.frame(next_frame)
                next_frame += frame_interval_s
            while next_tick < t:
                self.tick(next_tick)
                ticks += 1
                next_tick += tick_interval_s
            self.push_sample(s)
        self.tick(next_tick)
        return ticks + 1
