from __future__ import annotations

from typing import Callable, List, Optional, Protocol

from drivealert.utils.types import LatLng, RoadAttributeCandidate

AttributeCallback = Callable[[Optional[RoadAttributeCandidate]], None]
RouteCallback = Callable[[Optional[List[LatLng]]], None]


class AttributeLookup(Protocol):
    """Looks up road attributes near a position and answers through ``done``.

    ``done(None)`` reports a failed lookup. The answer may arrive on a later
    turn of the host's event loop.
    """

    def lookup(self, position: LatLng, done: AttributeCallback) -> None:
        ...


class RouteProvider(Protocol):
    def request_route(self, origin: LatLng, destination: LatLng, done: RouteCallback) -> None:
        ...
