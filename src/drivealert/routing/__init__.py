from .deviation import Deviation, DeviationConfig, RerouteRequest, RouteDeviationDetector, check_deviation, is_off_route

__all__ = [
    "Deviation",
    "DeviationConfig",
    "RerouteRequest",
    "RouteDeviationDetector",
    "check_deviation",
    "is_off_route",
]
