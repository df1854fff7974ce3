from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from drivealert.geometry.geodesy import haversine_many_m, point_to_segment_m, polyline_length_m
from drivealert.utils.types import LatLng, as_np_latlng


logger = logging.getLogger("drivealert.routing.deviation")

DEVIATION_METHODS = ("endpoints", "segment")


@dataclass(frozen=True)
class DeviationConfig:
    threshold_m: float
    method: str

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "DeviationConfig":
        method = str(d.get("method", "endpoints")).lower()
        if method not in DEVIATION_METHODS:
            raise ValueError(f"routing.method must be one of: {', '.join(DEVIATION_METHODS)}")
        return DeviationConfig(
            threshold_m=float(d.get("threshold_m", 50.0)),
            method=method,
        )


@dataclass(frozen=True)
class Deviation:
    deviating_by_m: float


@dataclass(frozen=True)
class RerouteRequest:
    seq: int
    origin: LatLng
    deviating_by_m: float


def check_deviation(position: LatLng, route: Sequence[LatLng], method: str = "endpoints") -> Deviation:
    """Minimum distance from ``position`` to the route polyline.

    ``endpoints`` measures to the vertices of each segment, ``segment``
    projects onto each segment. Routes with fewer than two points report no
    deviation.
    """
    if len(route) < 2:
        return Deviation(deviating_by_m=0.0)
    if not (math.isfinite(position[0]) and math.isfinite(position[1])):
        return Deviation(deviating_by_m=0.0)
    if method == "segment":
        best = min(point_to_segment_m(position, route[i], route[i + 1]) for i in range(len(route) - 1))
        return Deviation(deviating_by_m=float(best))
    # Every vertex is an endpoint of some consecutive pair.
    pts = as_np_latlng(route)
    d = haversine_many_m(position[0], position[1], pts[:, 0], pts[:, 1])
    d = d[np.isfinite(d)]
    if d.size == 0:
        return Deviation(deviating_by_m=0.0)
    return Deviation(deviating_by_m=float(np.min(d)))


def is_off_route(distance_m: float, threshold_m: float = 50.0) -> bool:
    return float(distance_m) > float(threshold_m)


class RouteDeviationDetector:
    """Watches the vehicle against the planned route and asks for reroutes.

    Only one reroute is in flight at a time: while ``is_rerouting`` is set,
    :meth:`update` does nothing until :meth:`resolve` is called with the
    current request's sequence number.
    """

    def __init__(self, cfg: Optional[DeviationConfig] = None) -> None:
        self._cfg = cfg or DeviationConfig.from_dict({})
        self._route: List[LatLng] = []
        self._is_rerouting = False
        self._seq = 0
        self._last_deviation: Optional[Deviation] = None

    @property
    def route(self) -> List[LatLng]:
        return list(self._route)

    @property
    def is_rerouting(self) -> bool:
        return self._is_rerouting

    @property
    def last_deviation(self) -> Optional[Deviation]:
        return self._last_deviation

    def set_route(self, route: Sequence[LatLng]) -> None:
        self._route = [(float(p[0]), float(p[1])) for p in route]
        self._last_deviation = None
        if self._route:
            logger.debug("route set: %d points, %.0f m", len(self._route), polyline_length_m(self._route))
        if self._is_rerouting:
            # A fresh plan supersedes whatever reroute was pending.
            self._seq += 1
            self._is_rerouting = False

    def clear_route(self) -> None:
        self.set_route([])

    def update(self, position: LatLng) -> Optional[RerouteRequest]:
        if self._is_rerouting:
            return None
        dev = check_deviation(position, self._route, method=self._cfg.method)
        self._last_deviation = dev
        if not is_off_route(dev.deviating_by_m, self._cfg.threshold_m):
            return None
        self._seq += 1
        self._is_rerouting = True
        logger.info("Off-route by %.0fm - rerouting (request %d)", dev.deviating_by_m, self._seq)
        return RerouteRequest(seq=self._seq, origin=position, deviating_by_m=dev.deviating_by_m)

    def resolve(self, seq: int, route: Optional[Sequence[LatLng]]) -> bool:
        """Ends the in-flight reroute. ``route`` None means the request failed.

        Returns False when the answer belongs to a superseded request.
        """
        if not self._is_rerouting or int(seq) != self._seq:
            logger.debug("ignoring stale reroute answer %d (latest %d)", seq, self._seq)
            return False
        self._is_rerouting = False
        if route is None:
            logger.warning("Reroute %d failed, keeping previous route", seq)
            return True
        self._route = [(float(p[0]), float(p[1])) for p in route]
        logger.info("Reroute %d complete (%d points)", seq, len(self._route))
        return True

    def reset(self) -> None:
        self._route = []
        self._seq += 1
        self._is_rerouting = False
        self._last_deviation = None
