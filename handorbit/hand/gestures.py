from __future__ import annotations
import numpy as np
from typing import Optional, Tuple

WRIST=0; THUMB_TIP=4
INDEX_PIP=6; INDEX_TIP=8; MIDDLE_PIP=10; MIDDLE_TIP=12
RING_PIP=14; RING_TIP=16; PINKY_PIP=18; PINKY_TIP=20
NUM_LANDMARKS = 21

FINGERS = [(INDEX_TIP,INDEX_PIP), (MIDDLE_TIP,MIDDLE_PIP), (RING_TIP,RING_PIP), (PINKY_TIP,PINKY_PIP)]

# tuned on a 640x480 frame; see scaled_threshold
FIST_THR_PX = 80.0
PINCH_THR_PX = 80.0

def as_hand(pts) -> np.ndarray:
    arr = np.asarray(pts, dtype=float)
    if arr.ndim != 2 or arr.shape[0] != NUM_LANDMARKS or arr.shape[1] < 2:
        raise ValueError(f"hand must be {NUM_LANDMARKS} landmarks of (x,y[,z]), got shape {arr.shape}")
    return arr

def scaled_threshold(fraction: float, frame_size: Tuple[float,float]) -> float:
    """Pixel threshold for the given fraction of the frame diagonal."""
    w,h = frame_size
    return fraction * float(np.hypot(w, h))

def distance(a, b) -> float:
    # z is ignored by all gesture logic
    return float(np.linalg.norm(np.asarray(a, dtype=float)[:2] - np.asarray(b, dtype=float)[:2]))

def _up(pts, tip, pip) -> bool:
    return bool(pts[tip,1] < pts[pip,1])

def index_finger_up(pts) -> bool:
    return _up(pts, INDEX_TIP, INDEX_PIP)

def other_fingers_curled(pts) -> bool:
    return all(pts[tip,1] > pts[pip,1] for tip,pip in FINGERS[1:])

def is_open_hand(pts) -> bool:
    return all(_up(pts, tip, pip) for tip,pip in FINGERS)

def is_closed_fist(pts, thr: float = FIST_THR_PX) -> bool:
    wrist = pts[WRIST]
    return all(distance(pts[tip], wrist) < thr for tip,_ in FINGERS)

def pinch_distance(pts) -> float:
    return distance(pts[THUMB_TIP], pts[INDEX_TIP])

def wrist_position(pts) -> Tuple[float,float]:
    return float(pts[WRIST,0]), float(pts[WRIST,1])

def index_tip_position(pts) -> Tuple[float,float]:
    return float(pts[INDEX_TIP,0]), float(pts[INDEX_TIP,1])

def pose(pts, pinch_thr: float = PINCH_THR_PX, fist_thr: float = FIST_THR_PX) -> Optional[str]:
    """
    Raw single-frame pose, first match wins:
    pinch > point > open > fist. None for an ambiguous hand.
    """
    if pinch_distance(pts) < pinch_thr: return "pinch"
    for fn, name in [(lambda p: index_finger_up(p) and other_fingers_curled(p), "point"),
                     (is_open_hand, "open"),
                     (lambda p: is_closed_fist(p, fist_thr), "fist")]:
        if fn(pts): return name
    return None
