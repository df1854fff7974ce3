from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from drivealert.motion.animation import AnimationConfig, PositionAnimator
from drivealert.motion.smoothing import EmaSmoother, StationaryFilter
from drivealert.utils.types import LatLng, MotionState, RawSample


logger = logging.getLogger("drivealert.motion.smoother")


@dataclass(frozen=True)
class MotionSmootherConfig:
    max_accuracy_m: float
    ema_alpha: float
    ema_max_gap_s: float
    history_size: int
    min_speed_kmh: float
    stationary_speed_kmh: float
    heading_reliable_speed_kmh: float
    animation: AnimationConfig

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "MotionSmootherConfig":
        speed = d.get("speed", {}) or {}
        heading = d.get("heading", {}) or {}
        anim = d.get("animation", {}) or {}
        alpha = float(speed.get("ema_alpha", 0.7))
        if not 0.0 < alpha <= 1.0:
            raise ValueError("motion.speed.ema_alpha must be in (0, 1]")
        min_speed = float(speed.get("min_speed_kmh", 3.0))
        stationary_speed = float(speed.get("stationary_speed_kmh", 5.0))
        if stationary_speed < min_speed:
            raise ValueError("motion.speed.stationary_speed_kmh must not be below min_speed_kmh")
        return MotionSmootherConfig(
            max_accuracy_m=float(speed.get("max_accuracy_m", 30.0)),
            ema_alpha=alpha,
            ema_max_gap_s=float(speed.get("max_gap_s", 0.0)),
            history_size=int(speed.get("history_size", 5)),
            min_speed_kmh=min_speed,
            stationary_speed_kmh=stationary_speed,
            heading_reliable_speed_kmh=float(heading.get("reliable_speed_kmh", 5.0)),
            animation=AnimationConfig(
                duration_s=float(anim.get("duration_s", 0.5)),
                min_movement_m=float(anim.get("min_movement_m", 1.0)),
                min_update_interval_s=float(anim.get("min_update_interval_s", 0.1)),
                freeze_when_stationary=bool(anim.get("freeze_when_stationary", True)),
            ),
        )


class MotionSmoother:
    """Turns raw GPS samples into a stable speed, heading and drawn position.

    One instance belongs to one tracking session; call :meth:`reset` when
    tracking starts or stops.
    """

    def __init__(self, cfg: Optional[MotionSmootherConfig] = None) -> None:
        self._cfg = cfg or MotionSmootherConfig.from_dict({})
        self._ema = EmaSmoother(alpha=self._cfg.ema_alpha, max_gap_s=self._cfg.ema_max_gap_s)
        self._stationary = StationaryFilter(
            window=self._cfg.history_size,
            min_speed=self._cfg.min_speed_kmh,
            moving_speed=self._cfg.stationary_speed_kmh,
        )
        self._animator = PositionAnimator(self._cfg.animation)
        self._speed_kmh = 0.0
        self._raw_speed_kmh = 0.0
        self._accuracy_m: Optional[float] = None
        self._timestamp_s: Optional[float] = None
        self._locked_heading: Optional[float] = None

    @property
    def config(self) -> MotionSmootherConfig:
        return self._cfg

    @property
    def state(self) -> MotionState:
        rendered = self._animator.rendered
        return MotionState(
            smoothed_speed_kmh=float(self._speed_kmh),
            is_stationary=self._stationary.is_stationary,
            animated_latitude=None if rendered is None else rendered[0],
            animated_longitude=None if rendered is None else rendered[1],
            locked_heading_deg=self._locked_heading,
            raw_speed_kmh=float(self._raw_speed_kmh),
            accuracy_m=self._accuracy_m,
            timestamp_s=self._timestamp_s,
            is_animating=self._animator.is_animating,
        )

    def update(self, sample: RawSample) -> MotionState:
        t = float(sample.timestamp_s)
        self._timestamp_s = t
        self._accuracy_m = sample.accuracy_m
        trusted = self._update_speed(sample, t)
        self._update_heading(sample.heading_deg)
        if math.isfinite(sample.latitude) and math.isfinite(sample.longitude):
            # Only a standstill seen in this fix's own speed may pin the marker.
            frozen = trusted and self._stationary.is_stationary
            self._animator.set_target(sample.position, t, stationary=frozen)
        return self.state

    def tick(self, now_s: float) -> Optional[LatLng]:
        return self._animator.tick(now_s)

    def reset(self) -> None:
        self._ema.reset()
        self._stationary.reset()
        self._animator.reset()
        self._speed_kmh = 0.0
        self._raw_speed_kmh = 0.0
        self._accuracy_m = None
        self._timestamp_s = None
        self._locked_heading = None

    def _update_speed(self, sample: RawSample, t: float) -> bool:
        """Returns True when the sample's speed was accepted."""
        if sample.raw_speed_kmh is None:
            return False
        raw = float(sample.raw_speed_kmh)
        if not math.isfinite(raw) or raw < 0.0:
            return False
        self._raw_speed_kmh = raw
        acc = sample.accuracy_m
        if acc is not None and float(acc) > self._cfg.max_accuracy_m:
            logger.debug("holding speed %.1f km/h, accuracy %.1f m too coarse", self._speed_kmh, float(acc))
            return False
        ema = self._ema.update(raw, t)
        self._stationary.push(raw)
        self._speed_kmh = self._stationary.apply(ema)
        return True

    def _update_heading(self, heading: Optional[float]) -> None:
        if heading is None or not math.isfinite(float(heading)):
            return
        h = float(heading) % 360.0
        if self._speed_kmh >= self._cfg.heading_reliable_speed_kmh:
            self._locked_heading = h
        elif self._locked_heading is None:
            # No reliable heading seen yet; the current one is all there is.
            self._locked_heading = h
