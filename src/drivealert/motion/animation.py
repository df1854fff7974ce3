from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from drivealert.geometry.geodesy import ease_out_cubic, haversine_m, interpolate_position
from drivealert.utils.types import LatLng


logger = logging.getLogger("drivealert.motion.animation")


@dataclass(frozen=True)
class AnimationConfig:
    duration_s: float = 0.5
    min_movement_m: float = 1.0
    min_update_interval_s: float = 0.1
    freeze_when_stationary: bool = True


class PositionAnimator:
    """Glides the rendered position toward each newly confirmed target."""

    def __init__(self, cfg: AnimationConfig) -> None:
        self._cfg = cfg
        self._start: Optional[LatLng] = None
        self._target: Optional[LatLng] = None
        self._rendered: Optional[LatLng] = None
        self._t_start_s = 0.0
        self._t_last_accept_s: Optional[float] = None
        self._animating = False

    @property
    def rendered(self) -> Optional[LatLng]:
        return self._rendered

    @property
    def target(self) -> Optional[LatLng]:
        return self._target

    @property
    def is_animating(self) -> bool:
        return self._animating

    def set_target(self, position: LatLng, t_s: float, stationary: bool = False) -> bool:
        """Returns True when the position was accepted as a new target."""
        if self._target is None:
            self._start = position
            self._target = position
            self._rendered = position
            self._t_last_accept_s = float(t_s)
            return True

        if self._t_last_accept_s is not None and float(t_s) - self._t_last_accept_s < self._cfg.min_update_interval_s:
            return False
        if stationary and self._cfg.freeze_when_stationary:
            return False
        moved = haversine_m(self._target[0], self._target[1], position[0], position[1])
        if moved < self._cfg.min_movement_m:
            return False

        # Re-anchor from wherever the marker is drawn right now.
        self._start = self._rendered if self._rendered is not None else self._target
        self._target = position
        self._t_start_s = float(t_s)
        self._t_last_accept_s = float(t_s)
        self._animating = True
        logger.debug("animating to %.6f,%.6f (moved %.1f m)", position[0], position[1], moved)
        return True

    def tick(self, now_s: float) -> Optional[LatLng]:
        if self._target is None:
            return None
        if not self._animating or self._start is None:
            return self._rendered
        duration = float(self._cfg.duration_s)
        if duration <= 0.0:
            progress = 1.0
        else:
            progress = min(1.0, max(0.0, (float(now_s) - self._t_start_s) / duration))
        if progress >= 1.0:
            self._rendered = self._target
            self._start = self._target
            self._animating = False
            return self._rendered
        self._rendered = interpolate_position(self._start, self._target, ease_out_cubic(progress))
        return self._rendered

    def reset(self) -> None:
        self._start = None
        self._target = None
        self._rendered = None
        self._t_start_s = 0.0
        self._t_last_accept_s = None
        self._animating = False
