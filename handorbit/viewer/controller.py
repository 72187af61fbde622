from __future__ import annotations
import math
import logging
from typing import Callable, Optional, Tuple
from ..config import CameraSettings, SnapSettings
from ..runtime.events import GestureEvent, Point
from .orbit import CameraOrbit, clamp, euclidean_dist, next_view, sphere_point
from .viewport import CAMERA_CHANGE, USER_INTERACTION, Viewport

log = logging.getLogger(__name__)

def mirror_orbit(primary: CameraOrbit, secondary: CameraOrbit, with_radius: bool = False) -> CameraOrbit:
    """Secondary orbit after a gesture moved the primary one."""
    out = secondary.copy(theta=primary.theta, phi=primary.phi)
    if with_radius: out.radius = primary.radius
    return out

def sync_radius(changed: CameraOrbit, other: CameraOrbit) -> CameraOrbit:
    """Orbit to write into `other` after the user moved `changed`: the moved rotation, other's own zoom."""
    return changed.copy(radius=other.radius)

class OrbitController:
    """
    Applies gesture events to the primary viewport and mirrors them onto the
    secondary (axes) viewport. Also owns the click-to-snap behaviour of the
    secondary viewport.
    """
    def __init__(self, primary: Viewport, secondary: Optional[Viewport] = None,
                 settings: CameraSettings | None = None, snap: SnapSettings | None = None,
                 notify: Callable[[str], None] | None = None):
        self.primary = primary
        self.secondary = secondary
        self.cfg = settings or CameraSettings()
        self.snap = snap or SnapSettings()
        self.notify = notify or (lambda msg: log.info("%s", msg))
        self.grabbed = False
        self.hover: Optional[Point] = None
        self._press_point: Optional[Tuple[float,float,float]] = None
        primary.add_listener(CAMERA_CHANGE, lambda e: self.on_camera_change(primary, e))
        if secondary is not None:
            secondary.add_listener(CAMERA_CHANGE, lambda e: self.on_camera_change(secondary, e))

    @property
    def primary_orbit(self) -> CameraOrbit:
        return self.primary.get_camera_orbit()

    @property
    def secondary_orbit(self) -> Optional[CameraOrbit]:
        return self.secondary.get_camera_orbit() if self.secondary is not None else None

    def _commit(self, orbit: CameraOrbit, with_radius: bool = False):
        self.primary.camera_orbit = str(orbit)
        if self.secondary is not None:
            # read back so the mirror sees the primary's own clamping
            mirrored = mirror_orbit(self.primary.get_camera_orbit(), self.secondary.get_camera_orbit(), with_radius)
            self.secondary.camera_orbit = str(mirrored)

    def _rotate(self, delta: Point, k: float):
        orbit = self.primary.get_camera_orbit()
        orbit.theta += delta.x * k
        orbit.phi = clamp(orbit.phi - delta.y * k, 0.0, math.pi)
        log.debug("rotate by (%.4f, %.4f)*%s -> %s", delta.x, delta.y, k, orbit)
        self._commit(orbit)

    def apply_gesture(self, ev: GestureEvent):
        t = ev.type
        if t == "drag":
            if ev.delta is not None: self._rotate(ev.delta, self.cfg.drag_sensitivity)
        elif t == "orbit":
            if ev.delta is not None: self._rotate(ev.delta, self.cfg.orbit_sensitivity)
        elif t == "pan":
            if ev.delta is not None:
                target = self.primary.get_camera_target()
                target.x -= ev.delta.x * self.cfg.pan_sensitivity
                target.y += ev.delta.y * self.cfg.pan_sensitivity
                self.primary.camera_target = str(target)
        elif t == "zoom":
            if not ev.distance:
                return
            orbit = self.primary.get_camera_orbit()
            radius = clamp(orbit.radius - ev.distance * self.cfg.zoom_sensitivity,
                           self.cfg.min_radius, self.cfg.max_radius)
            log.debug("zoom %.3f: radius %.3f -> %.3f", ev.distance, orbit.radius, radius)
            self._commit(orbit.copy(radius=radius), with_radius=True)
        elif t == "grab":
            self.grabbed = True
            self.notify("Object grabbed")
        elif t == "drop":
            self.grabbed = False
            self.notify("Object released")
        elif t == "point":
            if ev.position is not None: self.hover = ev.position
        elif t == "idle":
            self.grabbed = False

    def on_camera_change(self, viewport: Viewport, detail):
        if detail.get("source") != USER_INTERACTION:
            return
        other = self.secondary if viewport is self.primary else self.primary
        if other is None:
            return
        # programmatic writes report source "none", so this does not echo back
        other.camera_orbit = str(sync_radius(viewport.get_camera_orbit(), other.get_camera_orbit()))

    def _secondary_point(self):
        o = self.secondary.get_camera_orbit()
        return sphere_point(o.theta, o.phi)

    def press(self):
        """Mouse down on the secondary viewport."""
        if self.secondary is not None:
            self._press_point = self._secondary_point()

    def release(self) -> Optional[str]:
        """
        Mouse up on the secondary viewport. A click (no real movement since
        press) snaps both viewports to a predefined view; returns its name.
        """
        if self.secondary is None:
            return None
        pressed, self._press_point = self._press_point, None
        moved = euclidean_dist(self._secondary_point(), pressed) if pressed is not None else math.inf
        if moved > self.snap.click_eps:
            return None
        axes = self.secondary.get_camera_orbit()
        name, theta, phi = next_view(axes.theta, axes.phi, self.snap.click_eps, self.snap.angle_eps)
        orbit = self.primary.get_camera_orbit().copy(theta=theta, phi=phi)
        self.primary.camera_orbit = str(orbit)
        self.secondary.camera_orbit = str(orbit)
        log.info("snapped to %s view", name)
        self.notify(f"{name} view")
        return name
