import math
import numpy as np
import pytest
from handorbit.runtime.events import GestureEvent, Point
from handorbit.viewer.controller import OrbitController, mirror_orbit, sync_radius
from handorbit.viewer.orbit import CameraOrbit
from handorbit.viewer.viewport import SimViewport

def make(orbit=None, secondary=True):
    notes = []
    main = SimViewport("main", orbit=orbit or CameraOrbit(0.0, math.pi/2, 2.0))
    axes = SimViewport("axes", orbit=orbit or CameraOrbit(0.0, math.pi/2, 2.0), size=(100,100)) if secondary else None
    return OrbitController(main, axes, notify=notes.append), notes

def ev(type, **kw):
    for k in ("delta","position"):
        if k in kw: kw[k] = Point(x=kw[k][0], y=kw[k][1])
    return GestureEvent(type=type, **kw)

def test_orbit_sensitivity():
    ctl, _ = make()
    ctl.apply_gesture(ev("orbit", delta=(0.1, 0.05)))
    o = ctl.primary_orbit
    assert o.theta == pytest.approx(0.5)
    assert o.phi == pytest.approx(math.pi/2 - 0.25)

def test_drag_sensitivity():
    ctl, _ = make()
    ctl.apply_gesture(ev("drag", delta=(0.1, -0.05)))
    o = ctl.primary_orbit
    assert o.theta == pytest.approx(1.0)
    assert o.phi == pytest.approx(math.pi/2 + 0.5)

def test_phi_clamped_on_both_viewports():
    rng = np.random.default_rng(7)
    ctl, _ = make()
    for dx, dy in rng.normal(0, 5, size=(200, 2)).tolist() + [[0, 1e9], [0, -1e9]]:
        ctl.apply_gesture(ev("orbit" if dx > 0 else "drag", delta=(dx, dy)))
        for o in (ctl.primary_orbit, ctl.secondary_orbit):
            assert 0.0 <= o.phi <= math.pi

def test_theta_phi_mirrored_after_gesture():
    ctl, _ = make()
    ctl.secondary.user_drag(1.0, 0.3)
    ctl.apply_gesture(ev("orbit", delta=(0.02, 0.01)))
    p, s = ctl.primary_orbit, ctl.secondary_orbit
    assert (p.theta, p.phi) == (s.theta, s.phi)

def test_zoom_clamps_radius_and_mirrors_it():
    ctl, _ = make()
    ctl.apply_gesture(ev("zoom", distance=1000))
    assert ctl.primary_orbit.radius == pytest.approx(0.1)
    assert ctl.secondary_orbit.radius == pytest.approx(0.1)
    ctl.apply_gesture(ev("zoom", distance=-1000))
    assert ctl.primary_orbit.radius == pytest.approx(10)

def test_zoom_step():
    ctl, _ = make()
    ctl.apply_gesture(ev("zoom", distance=0.05))
    assert ctl.primary_orbit.radius == pytest.approx(1.0)

def test_zero_zoom_is_skipped():
    ctl, _ = make()
    before = ctl.primary.camera_orbit
    ctl.apply_gesture(ev("zoom", distance=0.0))
    ctl.apply_gesture(ev("zoom"))
    assert ctl.primary.camera_orbit == before

def test_pan_moves_target_only():
    ctl, _ = make()
    before = ctl.primary.camera_orbit
    ctl.apply_gesture(ev("pan", delta=(0.1, 0.2)))
    t = ctl.primary.get_camera_target()
    assert (t.x, t.y, t.z) == (pytest.approx(-0.3), pytest.approx(0.6), 0.0)
    assert ctl.primary.camera_orbit == before

def test_point_twice_changes_nothing():
    ctl, _ = make()
    before = (ctl.primary.camera_orbit, ctl.secondary.camera_orbit)
    ctl.apply_gesture(ev("point", position=(0.4, 0.5)))
    ctl.apply_gesture(ev("point", position=(0.4, 0.5)))
    assert (ctl.primary.camera_orbit, ctl.secondary.camera_orbit) == before
    assert ctl.hover == Point(x=0.4, y=0.5)

def test_grab_drop_idle_ui_state():
    ctl, notes = make()
    ctl.apply_gesture(ev("grab", position=(0.5, 0.5)))
    assert ctl.grabbed
    ctl.apply_gesture(ev("drop", position=(0.5, 0.5)))
    assert not ctl.grabbed
    ctl.apply_gesture(ev("grab"))
    ctl.apply_gesture(ev("idle", hands=0))
    assert not ctl.grabbed
    assert notes == ["Object grabbed", "Object released", "Object grabbed"]

def test_works_without_secondary():
    ctl, _ = make(secondary=False)
    ctl.apply_gesture(ev("orbit", delta=(0.1, 0.0)))
    assert ctl.secondary_orbit is None
    assert ctl.release() is None

def test_user_drag_rotates_other_viewport_keeping_its_radius():
    ctl, _ = make()
    ctl.apply_gesture(ev("zoom", distance=0.05))
    ctl.secondary.camera_orbit = str(ctl.secondary_orbit.copy(radius=5.0))
    ctl.primary.user_drag(0.4, 0.0)
    p, s = ctl.primary_orbit, ctl.secondary_orbit
    assert p.theta == pytest.approx(0.4) and p.radius == pytest.approx(1.0)
    assert s.theta == pytest.approx(0.4) and s.radius == pytest.approx(5.0)

def test_user_zoom_persists():
    ctl, _ = make()
    ctl.primary.user_zoom(5.0)
    assert ctl.primary_orbit.radius == pytest.approx(5.0)
    assert ctl.secondary_orbit.radius == pytest.approx(2.0)
    ctl.secondary.user_drag(0.2, 0.0)
    assert ctl.primary_orbit.radius == pytest.approx(5.0)
    assert ctl.primary_orbit.theta == pytest.approx(0.2)

def test_pure_sync_helpers():
    a = CameraOrbit(1.0, 0.5, 2.0); b = CameraOrbit(0.0, 1.0, 7.0)
    assert mirror_orbit(a, b) == CameraOrbit(1.0, 0.5, 7.0)
    assert mirror_orbit(a, b, with_radius=True) == a
    assert sync_radius(a, b) == CameraOrbit(1.0, 0.5, 7.0)

def test_click_on_front_advances_to_right():
    ctl, notes = make(CameraOrbit(0.0, math.pi/2, 2.0))
    ctl.press()
    assert ctl.release() == "Right"
    for o in (ctl.primary_orbit, ctl.secondary_orbit):
        assert (o.theta, o.phi) == (pytest.approx(math.pi/2), pytest.approx(math.pi/2))
    assert ctl.primary_orbit.radius == pytest.approx(2.0)
    assert notes[-1] == "Right view"

def test_click_near_view_snaps_to_it():
    ctl, notes = make(CameraOrbit(0.3, math.pi/2, 2.0))
    ctl.press()
    assert ctl.release() == "Front"
    assert ctl.secondary_orbit.theta == 0.0
    assert notes == ["Front view"]

def test_drag_on_axes_is_not_a_click():
    ctl, notes = make(CameraOrbit(0.0, math.pi/2, 2.0))
    ctl.press()
    ctl.secondary.user_drag(0.5, 0.0)
    assert ctl.release() is None
    assert notes == []

def test_release_without_press_is_ignored():
    ctl, _ = make()
    assert ctl.release() is None
