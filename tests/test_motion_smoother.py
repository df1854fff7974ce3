from typing import Optional

import pytest

from drivealert.motion.smoother import MotionSmoother, MotionSmootherConfig
from drivealert.motion.smoothing import EmaSmoother
from drivealert.utils.types import RawSample


def _s(
    t: float,
    speed: float,
    lat: float = 0.0,
    lng: float = 0.0,
    heading: Optional[float] = None,
    accuracy: Optional[float] = 5.0,
) -> RawSample:
    return RawSample(
        latitude=lat,
        longitude=lng,
        raw_speed_kmh=speed,
        heading_deg=heading,
        accuracy_m=accuracy,
        timestamp_s=t,
    )


def test_first_sample_seeds_average_without_lag() -> None:
    sm = MotionSmoother()
    st = sm.update(_s(0.0, 50.0))
    assert st.smoothed_speed_kmh == 50.0
    assert st.is_stationary is False


def test_ema_approaches_constant_input_from_above_without_overshoot() -> None:
    sm = MotionSmoother()
    prev = sm.update(_s(0.0, 100.0)).smoothed_speed_kmh
    for i in range(1, 11):
        v = sm.update(_s(float(i), 50.0)).smoothed_speed_kmh
        assert 50.0 < v < prev
        prev = v
    assert abs(prev - 50.0) < 0.01


def test_ema_approaches_constant_input_from_below_without_overshoot() -> None:
    sm = MotionSmoother()
    prev = sm.update(_s(0.0, 20.0)).smoothed_speed_kmh
    for i in range(1, 11):
        v = sm.update(_s(float(i), 60.0)).smoothed_speed_kmh
        assert prev < v < 60.0
        prev = v


def test_ema_uses_configured_alpha() -> None:
    sm = MotionSmoother()
    sm.update(_s(0.0, 100.0))
    v = sm.update(_s(1.0, 50.0)).smoothed_speed_kmh
    assert abs(v - 65.0) < 1e-9


def test_speeds_below_threshold_read_as_standstill() -> None:
    sm = MotionSmoother()
    for i, v in enumerate([2.0, 1.5, 2.5, 0.5, 1.0]):
        st = sm.update(_s(float(i), v))
        assert st.smoothed_speed_kmh == 0.0
        assert st.is_stationary is True


def test_drift_after_stopping_converges_to_zero_once_window_is_low() -> None:
    sm = MotionSmoother()
    sm.update(_s(0.0, 40.0))
    states = [sm.update(_s(float(i), 2.0)) for i in range(1, 6)]
    # The 40 km/h reading is still in the window for the first four updates.
    assert states[3].smoothed_speed_kmh > 0.0
    assert states[3].is_stationary is False
    assert states[4].smoothed_speed_kmh == 0.0
    assert states[4].is_stationary is True


def test_stationary_flag_has_hysteresis() -> None:
    sm = MotionSmoother()
    sm.update(_s(0.0, 40.0))
    for i in range(1, 6):
        sm.update(_s(float(i), 2.0))
    st = sm.update(_s(6.0, 4.0))
    assert 3.0 < st.smoothed_speed_kmh < 5.0
    assert st.is_stationary is True
    st = sm.update(_s(7.0, 10.0))
    assert st.smoothed_speed_kmh >= 5.0
    assert st.is_stationary is False


def test_inaccurate_fix_holds_previous_speed() -> None:
    sm = MotionSmoother()
    sm.update(_s(0.0, 50.0))
    st = sm.update(_s(1.0, 10.0, accuracy=80.0))
    assert st.smoothed_speed_kmh == 50.0
    assert st.raw_speed_kmh == 10.0
    st = sm.update(_s(2.0, 50.0, accuracy=None))
    assert st.smoothed_speed_kmh == 50.0


def test_heading_locked_at_low_speed() -> None:
    sm = MotionSmoother()
    st = sm.update(_s(0.0, 1.0, heading=45.0))
    assert st.locked_heading_deg == 45.0
    st = sm.update(_s(1.0, 1.0, heading=180.0))
    assert st.locked_heading_deg == 45.0
    st = sm.update(_s(2.0, 60.0, heading=270.0))
    assert st.locked_heading_deg == 270.0
    st = sm.update(_s(3.0, 60.0, heading=None))
    assert st.locked_heading_deg == 270.0


def test_first_position_applied_immediately() -> None:
    sm = MotionSmoother()
    st = sm.update(_s(0.0, 50.0, lat=12.5, lng=77.5))
    assert st.animated_latitude == 12.5
    assert st.animated_longitude == 77.5
    assert st.is_animating is False


def test_position_glides_with_ease_out() -> None:
    sm = MotionSmoother()
    sm.update(_s(0.0, 50.0, lat=0.0))
    st = sm.update(_s(1.0, 50.0, lat=0.001))
    assert st.animated_latitude == 0.0
    assert st.is_animating is True
    assert sm.tick(1.0) == (0.0, 0.0)
    lat, _ = sm.tick(1.25)
    assert abs(lat - 0.000875) < 1e-12
    assert sm.tick(1.5) == (0.001, 0.0)
    assert sm.tick(2.0) == (0.001, 0.0)
    assert sm.state.is_animating is False


def test_mid_animation_update_reanchors_without_jump() -> None:
    sm = MotionSmoother()
    sm.update(_s(0.0, 50.0, lat=0.0))
    sm.update(_s(1.0, 50.0, lat=0.001))
    lat_mid, _ = sm.tick(1.25)
    sm.update(_s(1.25, 50.0, lat=0.002))
    lat_now, _ = sm.tick(1.25)
    assert abs(lat_now - lat_mid) < 1e-12
    lat_end, _ = sm.tick(1.75)
    assert lat_end == 0.002


def test_micro_movement_is_ignored() -> None:
    sm = MotionSmoother()
    sm.update(_s(0.0, 50.0, lat=0.0))
    st = sm.update(_s(1.0, 50.0, lat=0.000005))
    assert st.is_animating is False
    assert sm.tick(2.0) == (0.0, 0.0)


def test_position_frozen_while_stationary() -> None:
    sm = MotionSmoother()
    sm.update(_s(0.0, 0.0, lat=0.0))
    st = sm.update(_s(1.0, 0.0, lat=0.001))
    assert st.is_stationary is True
    assert sm.tick(5.0) == (0.0, 0.0)


def test_tick_before_any_sample_returns_none() -> None:
    assert MotionSmoother().tick(1.0) is None


def test_reset_clears_session_state() -> None:
    sm = MotionSmoother()
    sm.update(_s(0.0, 50.0, lat=1.0, heading=90.0))
    sm.reset()
    st = sm.state
    assert st.smoothed_speed_kmh == 0.0
    assert st.is_stationary is True
    assert st.animated_latitude is None
    assert st.locked_heading_deg is None
    assert sm.update(_s(10.0, 30.0)).smoothed_speed_kmh == 30.0


def test_ema_gap_reseeds_average() -> None:
    ema = EmaSmoother(alpha=0.5, max_gap_s=5.0)
    ema.update(100.0, 0.0)
    assert ema.update(0.0, 1.0) == 50.0
    assert ema.update(20.0, 10.0) == 20.0


def test_config_from_dict_validates() -> None:
    cfg = MotionSmootherConfig.from_dict({"speed": {"ema_alpha": 0.5}, "animation": {"duration_s": 1.0}})
    assert cfg.ema_alpha == 0.5
    assert cfg.animation.duration_s == 1.0
    assert cfg.max_accuracy_m == 30.0
    with pytest.raises(ValueError):
        MotionSmootherConfig.from_dict({"speed": {"ema_alpha": 0.0}})
    with pytest.raises(ValueError):
        MotionSmootherConfig.from_dict({"speed": {"min_speed_kmh": 6.0, "stationary_speed_kmh": 5.0}})


def test_missing_speed_holds_previous_value() -> None:
    sm = MotionSmoother()
    sm.update(_s(0.0, 50.0))
    st = sm.update(RawSample.from_fix(0.0, 0.0, speed_mps=None, heading_deg=None, accuracy_m=5.0, timestamp_s=1.0))
    assert st.smoothed_speed_kmh == 50.0
    assert st.raw_speed_kmh == 50.0


def test_from_fix_keeps_missing_speed_unknown() -> None:
    s = RawSample.from_fix(1.0, 2.0, speed_mps=None, heading_deg=None, accuracy_m=None, timestamp_s=0.0)
    assert s.raw_speed_kmh is None
    assert RawSample.from_fix(1.0, 2.0, speed_mps=10.0, heading_deg=None, accuracy_m=None, timestamp_s=0.0).raw_speed_kmh == 36.0


def test_position_follows_fixes_without_speed() -> None:
    sm = MotionSmoother()
    for i in range(3):
        sm.update(RawSample.from_fix(0.001 * i, 0.0, speed_mps=None, heading_deg=0.0, accuracy_m=5.0, timestamp_s=float(i)))
        sm.tick(float(i) + 0.5)
    assert sm.state.is_stationary is True
    assert sm.state.position == (0.002, 0.0)


def test_position_follows_inaccurate_fixes() -> None:
    sm = MotionSmoother()
    for i in range(3):
        sm.update(_s(float(i), 72.0, lat=0.001 * i, accuracy=40.0))
        sm.tick(float(i) + 0.5)
    assert sm.state.smoothed_speed_kmh == 0.0
    assert sm.state.position == (0.002, 0.0)


def test_untrusted_fix_after_standstill_moves_marker() -> None:
    sm = MotionSmoother()
    sm.update(_s(0.0, 0.0, lat=0.0))
    st = sm.update(_s(1.0, 0.0, lat=0.001, accuracy=80.0))
    assert st.is_stationary is True
    assert st.is_animating is True
    assert sm.tick(1.5) == (0.001, 0.0)
