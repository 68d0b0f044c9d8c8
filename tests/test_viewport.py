import pytest

from habit_tracker.viewport import GestureTracker, PointerEvent, Transform, Viewport, viewport_transform_for


def test_zoom_in_then_out_returns_to_start():
    vp = Viewport(x=10.0, y=-20.0, scale=1.0)
    vp.zoom_at((300, 200), 1.7)
    vp.zoom_at((300, 200), 1 / 1.7)
    assert vp.scale == pytest.approx(1.0)
    assert vp.x == pytest.approx(10.0)
    assert vp.y == pytest.approx(-20.0)


def test_zoom_keeps_world_point_under_anchor():
    vp = Viewport(x=-120.0, y=35.0, scale=0.8)
    anchor = (420.0, 150.0)
    before = vp.transform().to_world(anchor)
    vp.zoom_at(anchor, 1.25)
    after = vp.transform().to_world(anchor)
    assert after == pytest.approx(before)
    assert vp.scale == pytest.approx(1.0)


def test_scale_is_clamped():
    vp = Viewport()
    assert vp.zoom_at((0, 0), 100) is True
    assert vp.scale == 3.0
    assert vp.zoom_at((0, 0), 2) is False
    vp.zoom_at((0, 0), 0.0001)
    assert vp.scale == 0.2
    assert Viewport(scale=10).scale == 3.0


def test_zoom_buttons_use_viewport_center():
    vp = Viewport()
    vp.zoom_in(800, 400)
    assert vp.scale == pytest.approx(1.25)
    assert vp.transform().to_world((400, 200)) == pytest.approx((400, 200))
    assert vp.zoom_percent == 125
    vp.zoom_out(800, 400)
    assert vp.scale == pytest.approx(1.0)


def test_pan_is_unbounded():
    vp = Viewport(scale=2.0)
    vp.pan_by(-50000, 30)
    assert (vp.x, vp.y, vp.scale) == (-50000, 30, 2.0)


def test_fit_to_content_centers_today():
    vp = Viewport()
    assert vp.fit_to_content(7155, 150, 5736, 1100, 420) is True
    assert vp.scale == pytest.approx(1.2)
    assert vp.x == pytest.approx(550 - 5736 * 1.2)
    assert vp.y == pytest.approx((420 - 150 * 1.2) / 2)
    assert vp.transform().to_local((5736, 0))[0] == pytest.approx(550)


def test_fit_to_tall_content_uses_min_scale():
    vp = Viewport()
    vp.fit_to_content(7155, 10000, 5736, 1100, 420)
    assert vp.scale == 0.2


def test_fit_to_empty_content_is_ignored():
    vp = Viewport(x=5, y=6, scale=1.5)
    assert vp.fit_to_content(0, 0, 0, 1100, 420) is False
    assert (vp.x, vp.y, vp.scale) == (5, 6, 1.5)


def test_transform_round_trip_and_css():
    t = Transform(x=10, y=20, scale=2)
    assert t.to_local((5, 5)) == (20, 30)
    assert t.to_world((20, 30)) == (5, 5)
    assert t.matrix() == (2, 0.0, 0.0, 2, 10, 20)
    assert t.css() == "translate(10px, 20px) scale(2)"


def test_drag_pans_from_start_position():
    tracker = GestureTracker(Viewport(x=100, y=100))
    tracker.handle(PointerEvent("down", ((10, 10),)))
    tracker.handle(PointerEvent("move", ((40, 0),)))
    t = tracker.handle(PointerEvent("move", ((60, -10),)))
    assert (t.x, t.y) == (150, 80)

    tracker.handle(PointerEvent("up"))
    t = tracker.handle(PointerEvent("move", ((500, 500),)))
    assert (t.x, t.y) == (150, 80)


def test_wheel_zooms_about_pointer():
    tracker = GestureTracker()
    t = viewport_transform_for(tracker, PointerEvent("wheel", ((200, 100),), delta_y=120))
    assert t.scale == pytest.approx(0.9)
    assert t.to_world((200, 100)) == pytest.approx((200, 100))
    t = viewport_transform_for(tracker, PointerEvent("wheel", ((200, 100),), delta_y=-120))
    assert t.scale == pytest.approx(0.99)


def test_pinch_zooms_about_midpoint_then_follows_it():
    tracker = GestureTracker()
    tracker.handle(PointerEvent("touchstart", ((0, 0), (100, 0))))
    t = tracker.handle(PointerEvent("touchmove", ((20, 0), (220, 0))))
    # zoom x2 about (120, 0) puts x at -120, then the midpoint moved 70
    assert t.scale == pytest.approx(2.0)
    assert t.x == pytest.approx(-50)
    assert t.y == pytest.approx(0)


def test_two_finger_pan_without_pinch():
    tracker = GestureTracker(Viewport(scale=1.5))
    tracker.handle(PointerEvent("touchstart", ((100, 100), (200, 100))))
    t = tracker.handle(PointerEvent("touchmove", ((110, 105), (210, 105))))
    assert t.scale == pytest.approx(1.5)
    assert (t.x, t.y) == pytest.approx((10, 5))


def test_single_finger_drag_and_touchend():
    tracker = GestureTracker()
    tracker.handle(PointerEvent("touchstart", ((50, 50),)))
    t = tracker.handle(PointerEvent("touchmove", ((80, 40),)))
    assert (t.x, t.y) == (30, -10)
    tracker.handle(PointerEvent("touchend"))
    assert tracker.panning is False


def test_unknown_event_kind():
    with pytest.raises(ValueError):
        GestureTracker().handle(PointerEvent("hover", ((0, 0),)))
