from .animation import AnimationConfig, PositionAnimator
from .smoother import MotionSmoother, MotionSmootherConfig
from .smoothing import EmaSmoother, StationaryFilter

__all__ = [
    "AnimationConfig",
    "EmaSmoother",
    "MotionSmoother",
    "MotionSmootherConfig",
    "PositionAnimator",
    "StationaryFilter",
]
