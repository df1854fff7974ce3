from typing import Optional

from drivealert.hazards.matcher import HazardMatch, HazardMatcher, is_facing, nearest_by_kind
from drivealert.utils.types import HazardEntity


def _h(
    hid: str,
    lat: float,
    lng: float = 0.0,
    category: str = "speed-camera",
    source: str = "official",
    direction: Optional[float] = None,
) -> HazardEntity:
    return HazardEntity(
        id=hid,
        latitude=lat,
        longitude=lng,
        category=category,  # type: ignore[arg-type]
        source=source,  # type: ignore[arg-type]
        direction_deg=direction,
    )


def test_match_filters_by_radius_and_sorts_by_distance() -> None:
    hazards = [_h("far", 0.003), _h("near", 0.001), _h("out", 0.02)]
    out = HazardMatcher().match((0.0, 0.0), hazards, 500.0)
    assert [m.hazard.id for m in out] == ["near", "far"]
    assert abs(out[0].distance_m - 111.19) < 0.1
    assert out[0].distance_m <= out[1].distance_m


def test_match_radius_is_inclusive() -> None:
    m = HazardMatcher()
    h = _h("a", 0.001)
    d = float(m.distances((0.0, 0.0), [h])[0])
    assert len(m.match((0.0, 0.0), [h], d)) == 1
    assert m.match((0.0, 0.0), [h], d - 0.01) == []


def test_equal_distances_keep_input_order() -> None:
    hazards = [_h("b", 0.001), _h("a", -0.001), _h("c", 0.0, 0.001)]
    out = HazardMatcher().match((0.0, 0.0), hazards, 500.0)
    assert [m.hazard.id for m in out][:2] == ["b", "a"]


def test_match_edge_cases() -> None:
    m = HazardMatcher()
    assert m.match((0.0, 0.0), [], 500.0) == []
    assert m.match((0.0, 0.0), [_h("a", 0.0)], -1.0) == []
    assert m.match((float("nan"), 0.0), [_h("a", 0.0)], 500.0) == []


def test_facing_filter_drops_cameras_for_other_carriageway() -> None:
    hazards = [_h("north", 0.001, direction=0.0), _h("south", 0.002, direction=180.0), _h("any", 0.003)]
    out = HazardMatcher().match((0.0, 0.0), hazards, 1000.0, heading=10.0)
    assert [m.hazard.id for m in out] == ["north", "any"]


def test_is_facing() -> None:
    assert is_facing(0.0, 90.0)
    assert not is_facing(0.0, 91.0)
    assert is_facing(350.0, 60.0)
    assert is_facing(None, 180.0)
    assert is_facing(0.0, None)


def test_nearest_by_kind_groups_cameras_and_checkpoints() -> None:
    hazards = [
        _h("cam", 0.001),
        _h("red", 0.002, category="red-light-camera"),
        _h("post", 0.003, category="checkpoint"),
    ]
    out = nearest_by_kind(HazardMatcher().match((0.0, 0.0), hazards, 1000.0))
    assert set(out.keys()) == {"camera", "checkpoint"}
    assert out["camera"].hazard.id == "cam"
    assert out["checkpoint"].hazard.id == "post"
    assert nearest_by_kind([]) == {}


def test_dedupe_keeps_primary_and_drops_nearby_secondary() -> None:
    primary = [_h("o1", 0.0)]
    secondary = [_h("c1", 0.0003, source="community"), _h("c2", 0.01, source="community")]
    out = HazardMatcher().dedupe(primary, secondary)
    assert [h.id for h in out] == ["o1", "c2"]


def test_dedupe_without_primary_keeps_everything() -> None:
    secondary = [_h("c1", 0.0, source="community"), _h("c2", 0.0, source="community")]
    assert [h.id for h in HazardMatcher().dedupe([], secondary)] == ["c1", "c2"]


def test_merge_prefers_official_then_community_then_user() -> None:
    hazards = [
        _h("u1", 0.0002, source="user"),
        _h("c1", 0.0001, source="community"),
        _h("o1", 0.0, source="official"),
        _h("u2", 0.0103, source="user"),
        _h("c2", 0.01, source="community"),
        _h("u3", 0.05, source="user"),
    ]
    out = HazardMatcher().merge(hazards)
    assert [h.id for h in out] == ["o1", "c2", "u3"]


def test_hazard_match_is_plain_value() -> None:
    h = _h("a", 0.0)
    assert HazardMatch(hazard=h, distance_m=1.0) == HazardMatch(hazard=h, distance_m=1.0)


def test_community_duplicate_of_official_camera_is_dropped() -> None:
    official = _h("o", 0.0)
    community = _h("c", 0.00018, source="community")  # about 20 m away
    out = HazardMatcher().merge([community, official])
    assert [h.id for h in out] == ["o"]
