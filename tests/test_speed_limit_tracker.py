from drivealert.roads.classifier import NullSpeedLimitClassifier
from drivealert.roads.limits import SpeedLimitTracker, SpeedLimitTrackerConfig
from drivealert.utils.types import RoadAttributeCandidate

A = (0.0, 0.0)
B = (0.00054, 0.0)  # about 60 m north of A
FAR = (0.01, 0.0)


def _cand(limit=60.0, heading=None, road_class="primary", name="Ring Road") -> RoadAttributeCandidate:
    return RoadAttributeCandidate(
        inferred_heading_deg=heading,
        road_class=road_class,
        inferred_speed_limit_kmh=limit,
        road_name=name,
    )


def _accept(tracker: SpeedLimitTracker, position, limit: float, now_s: float = 0.0) -> None:
    seq = tracker.request(position, now_s, force=True)
    assert seq is not None
    d = tracker.resolve(seq, _cand(limit=limit), position, None, 40.0, now_s)
    assert d is not None and not d.from_fallback


def test_accepts_valid_lookup() -> None:
    t = SpeedLimitTracker()
    assert t.current_limit_kmh is None
    seq = t.request(A, 0.0)
    assert seq == 1
    d = t.resolve(seq, _cand(limit=60.0), A, None, 40.0, 0.0)
    assert d is not None
    assert d.limit_kmh == 60.0
    assert d.validation.accepted
    assert t.current_limit_kmh == 60.0
    assert t.current_road_name == "Ring Road"


def test_no_new_lookup_until_moved() -> None:
    t = SpeedLimitTracker()
    assert t.request(A, 0.0) == 1
    assert t.request((0.0001, 0.0), 1.0) is None
    assert t.request(FAR, 2.0) == 2
    assert t.request(FAR, 3.0, force=True) == 3


def test_stale_answer_is_discarded() -> None:
    t = SpeedLimitTracker()
    first = t.request(A, 0.0)
    second = t.request(FAR, 1.0)
    assert t.resolve(first, _cand(limit=30.0), A, None, 40.0, 1.0) is None
    assert t.current_limit_kmh is None
    d = t.resolve(second, _cand(limit=80.0), FAR, None, 40.0, 1.0)
    assert d is not None and d.limit_kmh == 80.0


def test_failed_lookup_keeps_previous_limit() -> None:
    t = SpeedLimitTracker()
    _accept(t, A, 60.0)
    seq = t.request(FAR, 5.0)
    d = t.resolve(seq, None, FAR, None, 40.0, 5.0)
    assert d is not None
    assert d.from_fallback is True
    assert d.validation.reason == "lookup failed"
    assert d.limit_kmh == 60.0
    assert t.current_limit_kmh == 60.0


def test_rejected_lookup_keeps_previous_limit() -> None:
    t = SpeedLimitTracker()
    _accept(t, A, 60.0)
    seq = t.request(FAR, 5.0)
    d = t.resolve(seq, _cand(limit=30.0, heading=90.0), FAR, 0.0, 40.0, 5.0)
    assert d is not None and d.from_fallback
    assert d.validation.accepted is False
    assert t.current_limit_kmh == 60.0


def test_missing_limit_is_classified_from_road_name() -> None:
    t = SpeedLimitTracker()
    seq = t.request(A, 0.0)
    d = t.resolve(seq, _cand(limit=None, name="NH-48", road_class="trunk"), A, None, 90.0, 0.0)
    assert d is not None and d.limit_kmh == 100.0


def test_missing_limit_without_classifier_falls_back() -> None:
    t = SpeedLimitTracker(classifier=NullSpeedLimitClassifier())
    seq = t.request(A, 0.0)
    d = t.resolve(seq, _cand(limit=None), A, None, 40.0, 0.0)
    assert d is not None and d.from_fallback
    assert d.validation.reason == "no speed limit for road"
    assert d.limit_kmh is None


def test_configured_default_applies_before_first_accept() -> None:
    t = SpeedLimitTracker(SpeedLimitTrackerConfig.from_dict({"default_limit_kmh": 50}))
    assert t.current_limit_kmh == 50.0
    _accept(t, A, 70.0)
    assert t.current_limit_kmh == 70.0


def test_recent_accepted_limit_serves_nearby_requests() -> None:
    t = SpeedLimitTracker()
    _accept(t, A, 60.0, now_s=0.0)
    seq = t.request(B, 10.0)
    assert seq is not None
    t.resolve(seq, None, B, None, 40.0, 10.0)
    assert t.request(A, 20.0) is None
    t.request(B, 30.0)
    assert t.request(A, 90.0) is not None


def test_reset_orphans_lookup_in_flight() -> None:
    t = SpeedLimitTracker()
    seq = t.request(A, 0.0)
    t.reset()
    assert t.resolve(seq, _cand(limit=60.0), A, None, 40.0, 0.0) is None
    assert t.current_limit_kmh is None
    assert t.request(A, 1.0) == t.latest_sequence
