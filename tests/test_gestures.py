"""
Tests for the gesture state machine.

Tests cover:
- Tap vs. drag classification and the movement threshold
- Pinch zoom around the live midpoint
- Pinch sessions never producing taps
- Stale / unknown pointer ids and extra pointers
- Wheel zoom
"""
import pytest

from bubblemap.controller.gestures import GestureTracker, Idle, Panning, Pinching
from bubblemap.model.geometry_primitives import Vec2


@pytest.fixture
def taps() -> list:
    return []


@pytest.fixture
def tracker(transform, config, taps) -> GestureTracker:
    return GestureTracker(transform, on_tap=taps.append, config=config)


# =============================================================================
# Tap / drag
# =============================================================================

def test_down_up_without_move_is_tap(tracker, taps):
    tracker.pointer_down(1, Vec2(100.0, 100.0))
    result = tracker.pointer_up(1, Vec2(100.0, 100.0))

    assert result == Vec2(100.0, 100.0)
    assert taps == [Vec2(100.0, 100.0)]
    assert isinstance(tracker.session, Idle)


def test_small_jitter_is_still_tap_and_does_not_pan(tracker, taps, transform):
    before = transform.translate
    tracker.pointer_down(1, Vec2(100.0, 100.0))
    tracker.pointer_move(1, Vec2(103.0, 97.0))
    tracker.pointer_move(1, Vec2(104.0, 104.0))  # exactly at threshold
    tracker.pointer_up(1, Vec2(104.0, 104.0))

    assert taps == [Vec2(104.0, 104.0)]
    assert transform.translate == before


def test_move_beyond_threshold_is_drag_even_if_returning(tracker, taps, transform):
    tracker.pointer_down(1, Vec2(100.0, 100.0))
    tracker.pointer_move(1, Vec2(120.0, 100.0))
    tracker.pointer_move(1, Vec2(100.0, 100.0))
    result = tracker.pointer_up(1, Vec2(100.0, 100.0))

    assert result is None
    assert taps == []


def test_drag_pans_by_pointer_delta(tracker, transform):
    start = transform.translate
    tracker.pointer_down(1, Vec2(100.0, 100.0))
    tracker.pointer_move(1, Vec2(120.0, 100.0))
    assert transform.translate == start + Vec2(20.0, 0.0)

    tracker.pointer_move(1, Vec2(125.0, 90.0))
    assert transform.translate == start + Vec2(25.0, -10.0)
    assert transform.scale == 20.0


def test_cancel_never_taps(tracker, taps):
    tracker.pointer_down(1, Vec2(10.0, 10.0))
    tracker.pointer_cancel(1)
    assert taps == []
    assert isinstance(tracker.session, Idle)


# =============================================================================
# Pinch
# =============================================================================

def test_second_pointer_starts_pinch(tracker, transform):
    tracker.pointer_down(1, Vec2(100.0, 100.0))
    tracker.pointer_down(2, Vec2(200.0, 100.0))

    session = tracker.session
    assert isinstance(session, Pinching)
    assert session.pinch_start.distance == pytest.approx(100.0)
    assert session.pinch_start.scale == transform.scale
    assert tracker.pointer_count == 2


def test_pinch_scales_by_distance_ratio_around_live_midpoint(tracker, transform):
    tracker.pointer_down(1, Vec2(100.0, 100.0))
    tracker.pointer_down(2, Vec2(200.0, 100.0))

    midpoint = Vec2(200.0, 100.0)  # midpoint after the move below
    world_under_midpoint = transform.screen_to_world(midpoint)
    tracker.pointer_move(2, Vec2(300.0, 100.0))

    assert transform.scale == pytest.approx(40.0)
    after = transform.screen_to_world(midpoint)
    assert after.x == pytest.approx(world_under_midpoint.x)
    assert after.y == pytest.approx(world_under_midpoint.y)


def test_pinch_is_relative_to_start_not_cumulative(tracker, transform):
    tracker.pointer_down(1, Vec2(0.0, 0.0))
    tracker.pointer_down(2, Vec2(100.0, 0.0))
    tracker.pointer_move(2, Vec2(150.0, 0.0))
    tracker.pointer_move(2, Vec2(150.0, 0.0))
    assert transform.scale == pytest.approx(30.0)

    tracker.pointer_move(2, Vec2(100.0, 0.0))
    assert transform.scale == pytest.approx(20.0)


def test_pinch_clamps_scale(tracker, transform):
    tracker.pointer_down(1, Vec2(0.0, 0.0))
    tracker.pointer_down(2, Vec2(10.0, 0.0))
    tracker.pointer_move(2, Vec2(1000.0, 0.0))
    assert transform.scale == transform.max_scale

    tracker.pointer_move(2, Vec2(0.5, 0.0))
    assert transform.scale == transform.min_scale


def test_pinch_from_coincident_pointers_does_not_divide_by_zero(tracker, transform):
    tracker.pointer_down(1, Vec2(50.0, 50.0))
    tracker.pointer_down(2, Vec2(50.0, 50.0))
    tracker.pointer_move(2, Vec2(55.0, 50.0))
    assert transform.min_scale <= transform.scale <= transform.max_scale


def test_pinch_never_becomes_tap(tracker, taps):
    tracker.pointer_down(1, Vec2(100.0, 100.0))
    tracker.pointer_down(2, Vec2(150.0, 100.0))
    tracker.pointer_up(2, Vec2(150.0, 100.0))
    result = tracker.pointer_up(1, Vec2(100.0, 100.0))

    assert result is None
    assert taps == []
    assert isinstance(tracker.session, Idle)


def test_releasing_one_pinch_pointer_clears_pinch_start(tracker):
    tracker.pointer_down(1, Vec2(100.0, 100.0))
    tracker.pointer_down(2, Vec2(150.0, 100.0))
    tracker.pointer_up(1, Vec2(100.0, 100.0))

    session = tracker.session
    assert isinstance(session, Panning)
    assert session.pointer_id == 2
    assert tracker.pointer_count == 1


def test_survivor_of_pinch_pans(tracker, transform):
    tracker.pointer_down(1, Vec2(100.0, 100.0))
    tracker.pointer_down(2, Vec2(150.0, 100.0))
    tracker.pointer_up(1, Vec2(100.0, 100.0))
    before = transform.translate
    tracker.pointer_move(2, Vec2(160.0, 105.0))
    assert transform.translate == before + Vec2(10.0, 5.0)


def test_new_pinch_after_release_records_fresh_start(tracker, transform):
    tracker.pointer_down(1, Vec2(0.0, 0.0))
    tracker.pointer_down(2, Vec2(100.0, 0.0))
    tracker.pointer_move(2, Vec2(200.0, 0.0))
    tracker.pointer_up(2, Vec2(200.0, 0.0))
    scale_after_first = transform.scale

    tracker.pointer_down(3, Vec2(50.0, 0.0))
    session = tracker.session
    assert isinstance(session, Pinching)
    assert session.pinch_start.scale == scale_after_first
    assert session.pinch_start.distance == pytest.approx(50.0)


# =============================================================================
# Stale and extra pointers
# =============================================================================

def test_unknown_pointer_events_are_ignored(tracker, transform, taps):
    before = transform.snapshot()
    tracker.pointer_move(99, Vec2(5.0, 5.0))
    assert tracker.pointer_up(99, Vec2(5.0, 5.0)) is None
    tracker.pointer_cancel(99)

    assert transform.snapshot() == before
    assert taps == []
    assert isinstance(tracker.session, Idle)


def test_unknown_pointer_does_not_disturb_active_gesture(tracker, taps):
    tracker.pointer_down(1, Vec2(10.0, 10.0))
    tracker.pointer_up(7, Vec2(10.0, 10.0))
    tracker.pointer_up(1, Vec2(10.0, 10.0))
    assert taps == [Vec2(10.0, 10.0)]


def test_third_pointer_is_ignored(tracker, transform):
    tracker.pointer_down(1, Vec2(0.0, 0.0))
    tracker.pointer_down(2, Vec2(100.0, 0.0))
    tracker.pointer_down(3, Vec2(500.0, 500.0))
    assert tracker.pointer_count == 2
    assert not tracker.is_tracking(3)

    before = transform.snapshot()
    tracker.pointer_move(3, Vec2(900.0, 900.0))
    assert transform.snapshot() == before


def test_reset_drops_all_pointers(tracker, taps):
    tracker.pointer_down(1, Vec2(0.0, 0.0))
    tracker.reset()
    assert tracker.pointer_up(1, Vec2(0.0, 0.0)) is None
    assert taps == []


# =============================================================================
# Wheel
# =============================================================================

def test_wheel_up_zooms_in_around_cursor(tracker, transform):
    cursor = Vec2(240.0, 130.0)
    world_before = transform.screen_to_world(cursor)
    tracker.wheel(cursor, -100.0)

    assert transform.scale == pytest.approx(22.0)
    world_after = transform.screen_to_world(cursor)
    assert world_after.x == pytest.approx(world_before.x)
    assert world_after.y == pytest.approx(world_before.y)


def test_wheel_down_zooms_out(tracker, transform):
    tracker.wheel(Vec2(0.0, 0.0), 100.0)
    assert transform.scale == pytest.approx(18.0)


def test_wheel_saturates(tracker, transform):
    tracker.wheel(Vec2(0.0, 0.0), 1e6)
    assert transform.scale == transform.min_scale
    tracker.wheel(Vec2(0.0, 0.0), -1e6)
    assert transform.scale == transform.max_scale


def test_wheel_works_during_drag(tracker, transform, taps):
    tracker.pointer_down(1, Vec2(10.0, 10.0))
    tracker.wheel(Vec2(10.0, 10.0), -100.0)
    tracker.pointer_up(1, Vec2(10.0, 10.0))
    assert transform.scale == pytest.approx(22.0)
    assert taps == [Vec2(10.0, 10.0)]
