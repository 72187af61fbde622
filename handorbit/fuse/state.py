from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple
import numpy as np
from ..config import ThresholdSettings
from ..hand import gestures as g
from ..runtime.events import GestureEvent, Point, idle

log = logging.getLogger(__name__)

@dataclass
class StabilizerState:
    """
    Cross-frame memory of the stabilizer. Owned by the detection loop and passed
    in by reference each frame; reset when tracking is torn down.
    """
    is_pinching: bool = False
    previous_wrist: Optional[Tuple[float,float]] = None
    previous_pinch_distance: Optional[float] = None
    previous_hands_distance: Optional[float] = None

    def reset(self):
        self.is_pinching = False
        self.previous_wrist = None
        self.previous_pinch_distance = None
        self.previous_hands_distance = None

class GestureStabilizer:
    """
    Turns one frame of hands into at most one GestureEvent.

    Single hand, first match wins: pinch > point > open hand > fist > fallback.
    Exactly two hands: hand 0 is still evaluated (its state changes stick) but the
    delivered event is a two-hand zoom. Leaving a pinch always delivers `drop`
    before anything else; losing all hands does not (it goes straight to idle).
    """
    def __init__(self, settings: ThresholdSettings | None = None):
        self.cfg = settings or ThresholdSettings()
        # pose of hand 0 in the last frame; None for an ambiguous hand
        self.last_pose: Optional[str] = None

    def thresholds(self, frame_size: Tuple[float,float]) -> Tuple[float,float]:
        return (g.scaled_threshold(self.cfg.pinch_fraction, frame_size),
                g.scaled_threshold(self.cfg.fist_fraction, frame_size))

    def update(self, hands: Sequence[np.ndarray], state: StabilizerState,
               frame_size: Tuple[float,float]) -> Optional[GestureEvent]:
        if not hands:
            # no drop here even if a pinch was active
            self.last_pose = None
            state.reset()
            return idle(0)
        ev = self._single(g.as_hand(hands[0]), state, frame_size)
        if len(hands) == 2:
            return self._two_hand(g.as_hand(hands[0]), g.as_hand(hands[1]), state, frame_size)
        state.previous_hands_distance = None
        return ev

    def _at(self, xy, frame_size) -> Point:
        w,h = frame_size
        return Point(x=xy[0]/w, y=xy[1]/h)

    def _wrist_delta(self, pts, state: StabilizerState, frame_size) -> Optional[Point]:
        w,h = frame_size
        wrist = g.wrist_position(pts)
        prev = state.previous_wrist
        state.previous_wrist = wrist
        if prev is None: return None
        return Point(x=(wrist[0]-prev[0])/w, y=(wrist[1]-prev[1])/h)

    def _release(self, pts, state: StabilizerState, frame_size, clear_pinch: bool = False) -> GestureEvent:
        log.debug("pinch released")
        state.is_pinching = False
        state.previous_wrist = None
        if clear_pinch: state.previous_pinch_distance = None
        return GestureEvent(type="drop", position=self._at(g.index_tip_position(pts), frame_size))

    def _single(self, pts, state: StabilizerState, frame_size) -> Optional[GestureEvent]:
        pinch_thr, fist_thr = self.thresholds(frame_size)
        kind = g.pose(pts, pinch_thr, fist_thr)
        self.last_pose = kind
        tip = self._at(g.index_tip_position(pts), frame_size)

        if kind == "pinch":
            d = g.pinch_distance(pts)
            if not state.is_pinching or state.previous_pinch_distance is None:
                log.debug("pinch started at %.1fpx", d)
                state.is_pinching = True
                state.previous_pinch_distance = d
                return GestureEvent(type="grab", position=tip)
            change = d - state.previous_pinch_distance
            if abs(change) > self.cfg.zoom_min_change_px:
                log.debug("pinch zoom %.1fpx (now %.1f)", change, d)
                state.previous_pinch_distance = d
                return GestureEvent(type="zoom", distance=change/self.cfg.zoom_divisor)
            if self.cfg.emit_pinch_hold:
                return GestureEvent(type="zoom", distance=0.0)
            return None

        if kind == "point":
            if state.is_pinching:
                return self._release(pts, state, frame_size)
            return GestureEvent(type="point", position=tip)

        if kind == "open":
            if state.is_pinching:
                ev = self._release(pts, state, frame_size)
                state.previous_wrist = g.wrist_position(pts)
                return ev
            delta = self._wrist_delta(pts, state, frame_size)
            if delta is None: return idle(1)
            return GestureEvent(type="pan", delta=delta)

        if kind == "fist":
            if state.is_pinching:
                ev = self._release(pts, state, frame_size)
                state.previous_wrist = g.wrist_position(pts)
                return ev
            delta = self._wrist_delta(pts, state, frame_size)
            if delta is None: return idle(1)
            return GestureEvent(type="orbit", delta=delta)

        if state.is_pinching:
            return self._release(pts, state, frame_size, clear_pinch=True)
        return GestureEvent(type="point", position=tip)

    def _two_hand(self, a, b, state: StabilizerState, frame_size) -> GestureEvent:
        w,_ = frame_size
        d = g.distance(a[g.WRIST], b[g.WRIST])
        prev = state.previous_hands_distance
        state.previous_hands_distance = d
        change = 0.0 if prev is None else (d - prev)/w
        return GestureEvent(type="zoom", distance=change, hands=2)
