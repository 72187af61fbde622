import math
import pytest
from handorbit.viewer.orbit import (PREDEFINED_ORBITS, CameraOrbit, CameraTarget, closest_predefined_orbit,
                                    initial_orbit, next_view, rad_dist, sphere_point)

def test_orbit_string_roundtrip_is_exact():
    o = CameraOrbit(0.1234567, math.pi/3, 2.5)
    assert CameraOrbit.parse(str(o)) == o

def test_orbit_parse_units():
    o = CameraOrbit.parse("90deg 45deg 150cm")
    assert o.theta == pytest.approx(math.pi/2)
    assert o.phi == pytest.approx(math.pi/4)
    assert o.radius == pytest.approx(1.5)

def test_orbit_parse_rejects_garbage():
    with pytest.raises(ValueError):
        CameraOrbit.parse("auto auto auto")
    with pytest.raises(ValueError):
        CameraOrbit.parse("1rad 2rad")

def test_target_string():
    t = CameraTarget.parse("1m -2.5m 300mm")
    assert (t.x, t.y, t.z) == (1.0, -2.5, pytest.approx(0.3))
    assert str(CameraTarget(1.0, 2.0, 3.0)) == "1.0m 2.0m 3.0m"

def test_initial_orbit_is_diagonal():
    o = initial_orbit()
    assert (o.theta, o.phi) == (math.pi/4, math.pi/4)

def test_sphere_point_poles():
    assert sphere_point(1.0, 0.0) == pytest.approx((0, 0, 1))
    assert sphere_point(0.0, math.pi/2) == pytest.approx((1, 0, 0))

def test_rad_dist_wraps():
    assert rad_dist(math.pi - 0.05, -math.pi + 0.05) == pytest.approx(0.1)

def test_closest_orbit():
    idx, d, rd = closest_predefined_orbit(0.02, math.pi/2 + 0.02)
    assert PREDEFINED_ORBITS[idx][0] == "Front"
    assert d < 0.05 and rd == pytest.approx(0.02)

def test_next_view_cycles_when_already_there():
    assert next_view(0.0, math.pi/2)[0] == "Right"
    assert next_view(0.0, math.pi)[0] == "Diagonal"

def test_next_view_snaps_to_closest_otherwise():
    assert next_view(0.3, math.pi/2)[0] == "Front"
    assert next_view(math.pi/2 - 0.3, math.pi/2 + 0.2)[0] == "Right"

def test_pole_needs_theta_match_to_cycle():
    # at the pole any theta lands on Top, but 2 rad of theta is outside the angle tolerance
    assert next_view(2.0, 0.0)[0] == "Top"
