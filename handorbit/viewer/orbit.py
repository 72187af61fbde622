from __future__ import annotations
import math, re
from dataclasses import dataclass, replace
from typing import List, Tuple

PREDEFINED_ORBITS: List[Tuple[str,float,float]] = [
    ("Diagonal", math.pi/4, math.pi/4),
    ("Front", 0.0, math.pi/2),
    ("Right", math.pi/2, math.pi/2),
    ("Back", math.pi, math.pi/2),
    ("Left", -math.pi/2, math.pi/2),
    ("Top", 0.0, 0.0),
    ("Bottom", 0.0, math.pi),
]

_ANGLE = {"rad": 1.0, "deg": math.pi/180}
_LENGTH = {"m": 1.0, "cm": 0.01, "mm": 0.001}
_TOKEN = re.compile(r"^([+-]?(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?)([a-z]*)$", re.I)

def _parse(tok: str, units: dict, default: str) -> float:
    m = _TOKEN.match(tok.strip())
    if not m:
        raise ValueError(f"bad value {tok!r}")
    unit = (m.group(2) or default).lower()
    if unit not in units:
        raise ValueError(f"unknown unit {unit!r} in {tok!r}")
    return float(m.group(1)) * units[unit]

def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))

@dataclass
class CameraOrbit:
    theta: float; phi: float; radius: float = 1.0

    def __str__(self) -> str:
        return f"{self.theta}rad {self.phi}rad {self.radius}m"

    def copy(self, **kw) -> "CameraOrbit":
        return replace(self, **kw)

    @staticmethod
    def parse(s: str) -> "CameraOrbit":
        parts = s.split()
        if len(parts) != 3:
            raise ValueError(f"orbit needs 'theta phi radius', got {s!r}")
        return CameraOrbit(_parse(parts[0], _ANGLE, "rad"), _parse(parts[1], _ANGLE, "rad"),
                           _parse(parts[2], _LENGTH, "m"))

@dataclass
class CameraTarget:
    x: float = 0.0; y: float = 0.0; z: float = 0.0

    def __str__(self) -> str:
        return f"{self.x}m {self.y}m {self.z}m"

    @staticmethod
    def parse(s: str) -> "CameraTarget":
        parts = s.split()
        if len(parts) != 3:
            raise ValueError(f"target needs 'x y z', got {s!r}")
        return CameraTarget(*(_parse(p, _LENGTH, "m") for p in parts))

def initial_orbit(radius: float = 1.0) -> CameraOrbit:
    _, theta, phi = PREDEFINED_ORBITS[0]
    return CameraOrbit(theta, phi, radius)

def sphere_point(theta: float, phi: float) -> Tuple[float,float,float]:
    return (math.cos(theta)*math.sin(phi), math.sin(theta)*math.sin(phi), math.cos(phi))

def euclidean_dist(a, b) -> float:
    return math.sqrt(sum((x-y)**2 for x,y in zip(a,b)))

def rad_dist(a: float, b: float) -> float:
    """Angular distance allowing a single 2*pi wrap."""
    return min(abs(a-b), abs(a-b+2*math.pi), abs(a-b-2*math.pi))

def closest_predefined_orbit(theta: float, phi: float) -> Tuple[int,float,float]:
    """
    Index of the nearest predefined orbit on the unit sphere, its Euclidean
    distance, and the larger of its theta/phi angular distances.
    """
    p = sphere_point(theta, phi)
    best, best_d = 0, math.inf
    for i,(_,t,ph) in enumerate(PREDEFINED_ORBITS):
        d = euclidean_dist(p, sphere_point(t, ph))
        if d < best_d: best, best_d = i, d
    _, t, ph = PREDEFINED_ORBITS[best]
    return best, best_d, max(rad_dist(theta, t), rad_dist(phi, ph))

def next_view(theta: float, phi: float, euclid_eps: float = 0.01, rad_eps: float = 0.1) -> Tuple[str,float,float]:
    """
    Snap target for a click on the orientation viewport: the closest predefined
    orbit, or the one after it (cyclic) when already sitting on it.
    """
    idx, d, rd = closest_predefined_orbit(theta, phi)
    if d < euclid_eps and rd < rad_eps:
        idx = (idx + 1) % len(PREDEFINED_ORBITS)
    return PREDEFINED_ORBITS[idx]
