from __future__ import annotations
import asyncio, logging, threading
import cv2
import numpy as np
from typing import Optional, Tuple
from ..errors import CameraAcquisitionFailure

log = logging.getLogger(__name__)

class CameraStream:
    """
    OpenCV webcam: open() acquires the device, wait_ready() blocks until the
    first frame arrives (frame size known), read() pulls the next frame and
    stop() releases the device. Blocking calls run off the event loop.
    """
    def __init__(self, camera: int|str = 0, width: int = 640, height: int = 480):
        self.camera = camera; self.width = width; self.height = height
        self.cap = None
        self.frame_size: Optional[Tuple[int,int]] = None
        self._first: Optional[np.ndarray] = None
        self._stopped = False
        self._lock = threading.Lock()

    def _open_capture(self):
        cap = cv2.VideoCapture(self.camera)
        if self.width:  cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        if self.height: cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        if not cap.isOpened():
            cap.release()
            raise CameraAcquisitionFailure(f"Cannot open camera {self.camera}")
        with self._lock:
            # stop() may run while the device is still opening, even after the
            # awaiting task was cancelled
            if self._stopped:
                cap.release()
                raise CameraAcquisitionFailure(f"camera {self.camera} stopped while opening")
            self.cap = cap

    async def open(self):
        self._stopped = False
        await asyncio.to_thread(self._open_capture)
        log.info("camera %s opened", self.camera)

    def _grab(self) -> np.ndarray:
        if self.cap is None:
            raise CameraAcquisitionFailure("camera is not open")
        ok, frame = self.cap.read()
        if not ok:
            raise CameraAcquisitionFailure(f"camera {self.camera} returned no frame")
        return frame

    async def wait_ready(self) -> Tuple[int,int]:
        frame = await asyncio.to_thread(self._grab)
        h,w = frame.shape[:2]
        self.frame_size = (w,h); self._first = frame
        return self.frame_size

    async def read(self) -> np.ndarray:
        if self._first is not None:
            frame, self._first = self._first, None
            return frame
        return await asyncio.to_thread(self._grab)

    def stop(self):
        with self._lock:
            self._stopped = True
            cap, self.cap = self.cap, None
        if cap is not None:
            cap.release()
            log.info("camera %s released", self.camera)


class StillCamera:
    """Blank frames of a fixed size; stands in for a webcam when replaying landmarks."""
    def __init__(self, width: int = 640, height: int = 480, fail_open: bool = False):
        self.frame_size = (width, height)
        self.fail_open = fail_open
        self.opened = False; self.stopped = False

    async def open(self):
        if self.fail_open:
            raise CameraAcquisitionFailure("Permission denied")
        self.opened = True

    async def wait_ready(self) -> Tuple[int,int]:
        return self.frame_size

    async def read(self) -> np.ndarray:
        w,h = self.frame_size
        return np.zeros((h,w,3), np.uint8)

    def stop(self):
        self.stopped = True
