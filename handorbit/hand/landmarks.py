from __future__ import annotations
import asyncio, logging, threading
import mediapipe as mp
import numpy as np
import cv2
from typing import List
from ..errors import DetectorInitFailure

log = logging.getLogger(__name__)

class HandLandmarks:
    """
    MediaPipe Hands. Landmarks come back in pixel space of the frame, each hand
    a (21,3) array.

    process() runs on a worker thread, so dispose() may arrive mid-call; the
    graph is then closed by that call once it returns.
    """
    def __init__(self, max_hands=2, model_complexity=0, min_detection_confidence=0.5, min_tracking_confidence=0.5):
        self.opts = dict(max_num_hands=max_hands, model_complexity=model_complexity,
                         min_detection_confidence=min_detection_confidence,
                         min_tracking_confidence=min_tracking_confidence)
        self.hands = None
        self._lock = threading.Lock()
        self._busy = False
        self._disposed = False
        self._close_after = None

    def _build(self):
        return mp.solutions.hands.Hands(static_image_mode=False, **self.opts)

    def _create(self):
        hands = self._build()
        with self._lock:
            if self._disposed:
                hands.close()
                raise DetectorInitFailure("detector disposed while loading")
            self.hands = hands

    async def load(self):
        self._disposed = False
        try:
            await asyncio.to_thread(self._create)
        except DetectorInitFailure:
            raise
        except Exception as e:
            raise DetectorInitFailure(f"could not load MediaPipe Hands: {e}") from e
        log.info("hand detector ready (%s)", self.opts)

    def __call__(self, frame_bgr) -> List[np.ndarray]:
        with self._lock:
            hands = self.hands
            if hands is None:
                raise RuntimeError("detector disposed")
            self._busy = True
        try:
            h,w = frame_bgr.shape[:2]
            rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
            res = hands.process(rgb)
        finally:
            with self._lock:
                self._busy = False
                pending, self._close_after = self._close_after, None
            if pending is not None:
                pending.close()
                log.info("hand detector closed after in-flight frame")
        if not res.multi_hand_landmarks: return []
        return [np.array([(p.x*w, p.y*h, p.z*w) for p in lm.landmark], dtype=float)
                for lm in res.multi_hand_landmarks]

    async def estimate_hands(self, frame_bgr) -> List[np.ndarray]:
        if self.hands is None:
            raise RuntimeError("detector not loaded")
        return await asyncio.to_thread(self, frame_bgr)

    def dispose(self):
        with self._lock:
            self._disposed = True
            hands, self.hands = self.hands, None
            if hands is not None and self._busy:
                self._close_after = hands
                return
        if hands is not None:
            hands.close()
