from __future__ import annotations
import cv2
import numpy as np
from typing import Optional, Sequence, Tuple
from ..runtime.events import GestureEvent

CONNECTIONS = [
    (0,1),(1,2),(2,3),(3,4),
    (0,5),(5,6),(6,7),(7,8),
    (0,9),(9,10),(10,11),(11,12),
    (0,13),(13,14),(14,15),(15,16),
    (0,17),(17,18),(18,19),(19,20),
    (5,9),(9,13),(13,17),
]

# BGR
COLORS = {
    "red": (0,0,255), "yellow": (0,255,255), "cyan": (255,255,0), "blue": (255,0,0),
    "magenta": (255,0,255), "purple": (128,0,128), "green": (0,255,0), "white": (255,255,255),
}

def status_for(ev: Optional[GestureEvent], divisor: float = 50.0, fallback: bool = False) -> Tuple[str,str,bool]:
    """
    Status line, indicator colour and active flag for the event just delivered.
    `fallback` marks a point event sent for a hand that matched no gesture.
    """
    if ev is None:
        return "Pinch detected - Move fingers to zoom", "yellow", True
    t = ev.type
    if t == "idle":
        if ev.hands == 0: return "No hands detected", "red", False
        return "Hand detected - Pinch to zoom", "green", True
    if t == "grab": return "Pinch detected - Move fingers to zoom", "yellow", True
    if t == "drop": return "Released", "green", True
    if t == "zoom":
        if ev.hands == 2: return "Two hands - Zoom", "purple", True
        if not ev.distance: return "Pinch detected - Move fingers to zoom", "yellow", True
        px = abs(ev.distance) * divisor
        return f"Zoom: {'IN' if ev.distance > 0 else 'OUT'} ({px:.0f}px)", "yellow", True
    if t == "pan": return "Open hand - Pan view", "blue", True
    if t == "orbit": return "Fist - Orbit camera", "magenta", True
    if t == "drag": return "Drag - Rotate model", "magenta", True
    if fallback: return "Hand detected - Pinch to zoom", "green", True
    return "Point - Hover mode", "cyan", True

def draw_hand(img: np.ndarray, pts: np.ndarray):
    p = [(int(round(x)), int(round(y))) for x,y in np.asarray(pts)[:,:2]]
    for a,b in CONNECTIONS:
        cv2.line(img, p[a], p[b], COLORS["green"], 4, cv2.LINE_AA)
    for c in p:
        cv2.circle(img, c, 6, COLORS["red"], -1, cv2.LINE_AA)
        cv2.circle(img, c, 6, COLORS["white"], 2, cv2.LINE_AA)

def render(frame: np.ndarray, hands: Sequence[np.ndarray], status: str, color: str, active: bool,
           error: Optional[str] = None) -> np.ndarray:
    """Debug view: skeletons over a mirrored copy of the frame plus a status bar."""
    img = frame.copy()
    for pts in hands:
        draw_hand(img, pts)
    img = cv2.flip(img, 1)
    cv2.rectangle(img, (0,0), (img.shape[1], 32), (0,0,0), -1)
    cv2.circle(img, (16,16), 6, COLORS.get(color, COLORS["white"]), -1)
    cv2.putText(img, error or status, (32,22), cv2.FONT_HERSHEY_SIMPLEX, 0.55, COLORS["white"], 1, cv2.LINE_AA)
    label = "ACTIVE" if active else "INACTIVE"
    cv2.putText(img, label, (img.shape[1]-100,22), cv2.FONT_HERSHEY_SIMPLEX, 0.55,
                COLORS["green"] if active else COLORS["red"], 1, cv2.LINE_AA)
    return img
