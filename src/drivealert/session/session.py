from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from drivealert.alerts.arbitrator import AlertArbitrator, AlertInputs, AlertTransition
from drivealert.alerts.sinks import AnnouncementSink, create_sink
from drivealert.hazards.matcher import HazardMatch, HazardMatcher, nearest_by_kind
from drivealert.motion.smoother import MotionSmoother
from drivealert.roads.limits import LimitDecision, SpeedLimitTracker
from drivealert.roads.validator import RoadAttributeValidator
from drivealert.routing.deviation import RerouteRequest, RouteDeviationDetector
from drivealert.session.collaborators import AttributeLookup, RouteProvider
from drivealert.session.config import EngineConfig
from drivealert.session.scheduler import Scheduler
from drivealert.utils.types import HazardEntity, LatLng, LocationError, MotionState, RawSample, RoadAttributeCandidate


logger = logging.getLogger("drivealert.session")


class TelemetrySession:
    """One tracking session wired to a scheduler.

    Samples update motion state first and only then feed the speed limit
    lookup and the route check. The alert tick matches hazards against the
    drawn position and arbitrates; frames advance the position animation.
    """

    def __init__(
        self,
        cfg: EngineConfig,
        scheduler: Scheduler,
        sink: Optional[AnnouncementSink] = None,
        attribute_lookup: Optional[AttributeLookup] = None,
        route_provider: Optional[RouteProvider] = None,
    ) -> None:
        self._cfg = cfg
        self._sink = sink or create_sink(cfg.announcements)
        self._attribute_lookup = attribute_lookup
        self._route_provider = route_provider

        self.smoother = MotionSmoother(cfg.motion)
        self.speed_limits = SpeedLimitTracker(cfg.speed_limit, validator=RoadAttributeValidator(cfg.validation))
        self.matcher = HazardMatcher(cfg.hazards)
        self.arbitrator = AlertArbitrator(cfg.alerts)
        self.deviation = RouteDeviationDetector(cfg.routing)

        self._muted = bool(cfg.muted)
        self._tracking = False
        self._hazards: List[HazardEntity] = []
        self._destination: Optional[LatLng] = None
        self._last_sample: Optional[RawSample] = None
        self._last_error: Optional[LocationError] = None
        self._last_limit_decision: Optional[LimitDecision] = None

        scheduler.on_sample(self.handle_sample)
        scheduler.on_tick(self.handle_tick)
        scheduler.on_frame(self.handle_frame)

    @property
    def is_tracking(self) -> bool:
        return self._tracking

    @property
    def muted(self) -> bool:
        return self._muted

    @muted.setter
    def muted(self, value: bool) -> None:
        self._muted = bool(value)

    @property
    def motion(self) -> MotionState:
        return self.smoother.state

    @property
    def hazards(self) -> List[HazardEntity]:
        return list(self._hazards)

    @property
    def last_error(self) -> Optional[LocationError]:
        return self._last_error

    @property
    def last_limit_decision(self) -> Optional[LimitDecision]:
        return self._last_limit_decision

    @property
    def is_navigating(self) -> bool:
        return self._destination is not None

    def start(self) -> None:
        self._reset()
        self._tracking = True
        logger.info("Tracking started")

    def stop(self) -> None:
        self._tracking = False
        self._reset()
        logger.info("Tracking stopped")

    def set_hazards(self, hazards: Sequence[HazardEntity]) -> None:
        self._hazards = self.matcher.merge(hazards)
        logger.debug("hazard snapshot: %d merged from %d", len(self._hazards), len(hazards))

    def start_navigation(self, route: Sequence[LatLng], destination: LatLng) -> None:
        self._destination = (float(destination[0]), float(destination[1]))
        self.deviation.set_route(route)

    def end_navigation(self) -> None:
        self._destination = None
        self.deviation.clear_route()

    def refresh_speed_limit(self) -> None:
        if self._last_sample is not None:
            self._request_attributes(self._last_sample.position, self._last_sample.timestamp_s, force=True)

    def handle_sample(self, item: Union[RawSample, LocationError]) -> None:
        if not self._tracking:
            return
        if isinstance(item, LocationError):
            self._last_error = item
            logger.warning("Location error (%s): %s", item.kind, item.message)
            return
        self._last_error = None
        self._last_sample = item
        state = self.smoother.update(item)
        self._request_attributes(item.position, item.timestamp_s)
        if state.position is not None:
            self._check_route(state.position)

    def handle_tick(self, now_s: float) -> AlertTransition:
        if not self._tracking:
            return AlertTransition()
        state = self.smoother.state
        nearest = {}
        if state.position is not None:
            nearest = nearest_by_kind(self.match_hazards(state))
        inputs = AlertInputs(
            speed_kmh=state.smoothed_speed_kmh,
            speed_limit_kmh=self.speed_limits.current_limit_kmh,
            nearest=nearest,
        )
        transition = self.arbitrator.tick(now_s, inputs)
        if transition.activated is not None:
            self._sink.announce(transition.activated, self._muted)
        return transition

    def handle_frame(self, now_s: float) -> Optional[LatLng]:
        if not self._tracking:
            return None
        return self.smoother.tick(now_s)

    def match_hazards(self, state: MotionState) -> List[HazardMatch]:
        if state.position is None:
            return []
        radius = max(self._cfg.alerts.camera_radius_m, self._cfg.alerts.checkpoint_radius_m)
        heading = state.locked_heading_deg if self._cfg.facing_filter else None
        return self.matcher.match(state.position, self._hazards, radius, heading=heading)

    def _request_attributes(self, position: LatLng, now_s: float, force: bool = False) -> None:
        if self._attribute_lookup is None:
            return
        seq = self.speed_limits.request(position, now_s, force=force)
        if seq is None:
            return

        def done(candidate: Optional[RoadAttributeCandidate]) -> None:
            self._on_attributes(seq, position, now_s, candidate)

        try:
            self._attribute_lookup.lookup(position, done)
        except Exception:
            logger.exception("Attribute lookup raised")
            self._on_attributes(seq, position, now_s, None)

    def _on_attributes(
        self,
        seq: int,
        position: LatLng,
        requested_s: float,
        candidate: Optional[RoadAttributeCandidate],
    ) -> None:
        state = self.smoother.state
        now_s = state.timestamp_s if state.timestamp_s is not None else requested_s
        decision = self.speed_limits.resolve(
            seq,
            candidate,
            position,
            vehicle_heading=state.locked_heading_deg,
            vehicle_speed=state.smoothed_speed_kmh,
            now_s=now_s,
        )
        if decision is not None:
            self._last_limit_decision = decision

    def _check_route(self, position: LatLng) -> None:
        if self._destination is None:
            return
        request = self.deviation.update(position)
        if request is None:
            return
        if self._route_provider is None:
            self.deviation.resolve(request.seq, None)
            return
        self._request_route(request, self._destination)

    def _request_route(self, request: RerouteRequest, destination: LatLng) -> None:
        def done(route: Optional[List[LatLng]]) -> None:
            self.deviation.resolve(request.seq, route)

        try:
            self._route_provider.request_route(request.origin, destination, done)  # type: ignore[union-attr]
        except Exception:
            logger.exception("Route request raised")
            self.deviation.resolve(request.seq, None)

    def _reset(self) -> None:
        self.smoother.reset()
        self.speed_limits.reset()
        self.arbitrator.reset()
        self._last_sample = None
        self._last_error = None
        self._last_limit_decision = None
