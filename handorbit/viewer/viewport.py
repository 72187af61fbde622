from __future__ import annotations
import math
import logging
import numpy as np
from typing import Callable, Dict, List, Optional, Protocol, Any
from .orbit import CameraOrbit, CameraTarget, clamp, initial_orbit

log = logging.getLogger(__name__)

USER_INTERACTION = "user-interaction"
CAMERA_CHANGE = "camera-change"

class Viewport(Protocol):
    """What the controller needs from a 3D viewer."""
    def get_camera_orbit(self) -> CameraOrbit: ...
    @property
    def camera_orbit(self) -> str: ...
    @camera_orbit.setter
    def camera_orbit(self, value: str) -> None: ...
    def get_camera_target(self) -> CameraTarget: ...
    @property
    def camera_target(self) -> str: ...
    @camera_target.setter
    def camera_target(self, value: str) -> None: ...
    def position_and_normal_from_point(self, x: float, y: float) -> Optional[Dict[str,Any]]: ...
    def add_listener(self, name: str, fn: Callable[[Dict[str,Any]], None]) -> None: ...

class SimViewport:
    """
    In-process viewport: keeps the camera state a model viewer would, clamps
    phi to [0, pi], and fires `camera-change` events. The model is a sphere of
    `model_radius` around the camera target, viewed orthographically.
    """
    def __init__(self, name: str = "viewport", orbit: CameraOrbit | None = None,
                 size=(640,480), model_radius: float = 0.5, fov_deg: float = 45.0):
        self.name = name
        self._orbit = (orbit or initial_orbit()).copy()
        self._target = CameraTarget()
        self.size = size
        self.model_radius = model_radius
        self.fov = math.radians(fov_deg)
        self._listeners: Dict[str, List[Callable]] = {}

    def add_listener(self, name, fn):
        self._listeners.setdefault(name, []).append(fn)

    def _emit(self, name, detail):
        for fn in list(self._listeners.get(name, [])):
            fn(detail)

    def get_camera_orbit(self) -> CameraOrbit:
        return self._orbit.copy()

    @property
    def camera_orbit(self) -> str:
        return str(self._orbit)

    @camera_orbit.setter
    def camera_orbit(self, value: str):
        self._set_orbit(CameraOrbit.parse(value), source="none")

    def _set_orbit(self, orbit: CameraOrbit, source: str):
        orbit.phi = clamp(orbit.phi, 0.0, math.pi)
        self._orbit = orbit
        log.debug("%s orbit -> %s (%s)", self.name, orbit, source)
        self._emit(CAMERA_CHANGE, {"source": source})

    def get_camera_target(self) -> CameraTarget:
        t = self._target
        return CameraTarget(t.x, t.y, t.z)

    @property
    def camera_target(self) -> str:
        return str(self._target)

    @camera_target.setter
    def camera_target(self, value: str):
        self._target = CameraTarget.parse(value)
        self._emit(CAMERA_CHANGE, {"source": "none"})

    def user_drag(self, dtheta: float, dphi: float):
        """Rotate as if dragged with the mouse."""
        o = self._orbit.copy()
        self._set_orbit(o.copy(theta=o.theta + dtheta, phi=o.phi + dphi), source=USER_INTERACTION)

    def user_zoom(self, radius: float):
        self._set_orbit(self._orbit.copy(radius=radius), source=USER_INTERACTION)

    def _basis(self):
        th, ph = self._orbit.theta, self._orbit.phi
        d = np.array([math.sin(ph)*math.sin(th), math.cos(ph), math.sin(ph)*math.cos(th)])
        right = np.array([math.cos(th), 0.0, -math.sin(th)])
        up = np.cross(d, right)
        return d, right, up

    def position_and_normal_from_point(self, x: float, y: float):
        w,h = self.size
        half = self._orbit.radius * math.tan(self.fov/2)
        u = (x - w/2) / (h/2) * half
        v = -(y - h/2) / (h/2) * half
        r = self.model_radius
        if u*u + v*v > r*r:
            return None
        d, right, up = self._basis()
        t = self._target
        center = np.array([t.x, t.y, t.z])
        pos = center + u*right + v*up + math.sqrt(r*r - u*u - v*v)*d
        return {"position": pos, "normal": (pos - center)/r}
