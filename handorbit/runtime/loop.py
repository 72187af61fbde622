from __future__ import annotations
import asyncio, logging, time
from contextlib import suppress
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple
import numpy as np
from ..errors import CameraAcquisitionFailure, DetectorInitFailure, PerFrameDetectionError
from ..fuse.state import GestureStabilizer, StabilizerState
from ..hand.gestures import as_hand
from ..hand.overlay import status_for
from .events import GestureEvent, idle

log = logging.getLogger(__name__)

class Detector(Protocol):
    async def load(self) -> None: ...
    async def estimate_hands(self, frame: Any) -> List[np.ndarray]: ...
    def dispose(self) -> None: ...

class Camera(Protocol):
    async def open(self) -> None: ...
    async def wait_ready(self) -> Tuple[int,int]: ...
    async def read(self) -> Any: ...
    def stop(self) -> None: ...

class CancelToken:
    def __init__(self): self._cancelled = False
    @property
    def cancelled(self) -> bool: return self._cancelled
    def cancel(self): self._cancelled = True

class FrameClock:
    """
    Stand-in for a display refresh callback: tick() resumes on the next
    1/fps boundary. A slow cycle just skips ahead rather than bursting.
    fps <= 0 yields to the event loop without waiting.
    """
    def __init__(self, fps: float = 30.0):
        self.period = 1.0/fps if fps > 0 else 0.0
        self._next: Optional[float] = None

    async def tick(self):
        if not self.period:
            await asyncio.sleep(0); return
        now = time.monotonic()
        if self._next is None or self._next < now: self._next = now
        self._next += self.period
        await asyncio.sleep(self._next - now)

class DetectionLoop:
    """
    Camera -> detector -> stabilizer -> on_gesture, one cycle at a time.

    show() acquires the camera, waits for the first frame, loads the detector
    and starts cycling; hide() cancels the pending cycle, stops the camera and
    disposes the detector, each step regardless of how far startup got.
    """
    def __init__(self, on_gesture: Callable[[GestureEvent], None],
                 camera_factory: Callable[[], Camera], detector_factory: Callable[[], Detector],
                 stabilizer: GestureStabilizer | None = None, clock: FrameClock | None = None,
                 overlay: Callable[[Any, Sequence[np.ndarray], "DetectionLoop"], None] | None = None):
        self.on_gesture = on_gesture
        self.camera_factory = camera_factory
        self.detector_factory = detector_factory
        self.stabilizer = stabilizer or GestureStabilizer()
        self.clock = clock or FrameClock()
        self.overlay = overlay
        self.state = StabilizerState()
        self.status = "Initializing..."; self.color = "red"; self.active = False
        self.error: Optional[str] = None
        self.frames = 0
        self._token: Optional[CancelToken] = None
        self._task: Optional[asyncio.Task] = None
        self._camera: Optional[Camera] = None
        self._detector: Optional[Detector] = None

    @property
    def visible(self) -> bool:
        return self._token is not None and not self._token.cancelled

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def show(self) -> asyncio.Task:
        """Start tracking. Must be called from a running event loop."""
        if self.visible and self.running:
            return self._task
        self.error = None
        token = CancelToken(); self._token = token
        self._task = asyncio.get_running_loop().create_task(self._lifecycle(token))
        return self._task

    def hide(self):
        """Tear down synchronously: pending cycle, camera, detector, in that order."""
        if self._token is not None:
            self._token.cancel()
            self._token = None
        try:
            if self._task is not None and not self._task.done():
                self._task.cancel()
        except Exception:
            log.exception("cancelling detection cycle failed")
        self._release_camera()
        self._release_detector()
        self.state.reset()
        self.active = False

    def set_visible(self, visible: bool) -> Optional[asyncio.Task]:
        if visible: return self.show()
        self.hide()
        return None

    async def wait(self):
        """Wait for the current lifecycle task to finish (or be cancelled)."""
        if self._task is not None:
            with suppress(asyncio.CancelledError):
                await self._task

    def _fail(self, err: Exception):
        log.error("hand tracking failed to start: %s", err)
        self.error = f"Error: {err}"
        self.status = "Failed to load hand tracking"; self.color = "red"; self.active = False
        self._release_camera()
        self._release_detector()

    def _release_camera(self):
        try:
            if self._camera is not None: self._camera.stop()
        except Exception:
            log.exception("stopping camera failed")
        finally:
            self._camera = None

    def _release_detector(self):
        try:
            if self._detector is not None: self._detector.dispose()
        except Exception:
            log.exception("disposing detector failed")
        finally:
            self._detector = None

    async def _lifecycle(self, token: CancelToken):
        try:
            await self._start_and_run(token)
        except Exception as e:
            log.exception("detection loop crashed")
            token.cancel()
            self._fail(e)
            self.status = "Hand tracking stopped"

    async def _start_and_run(self, token: CancelToken):
        self.status = "Starting camera..."
        try:
            self._camera = self.camera_factory()
            await self._camera.open()
            size = await self._camera.wait_ready()
        except CameraAcquisitionFailure as e:
            self._fail(e); return
        except Exception as e:
            self._fail(CameraAcquisitionFailure(str(e))); return
        if token.cancelled: return
        log.info("camera ready %sx%s", *size)

        self.status = "Loading hand tracking..."
        try:
            self._detector = self.detector_factory()
            await self._detector.load()
        except DetectorInitFailure as e:
            self._fail(e); return
        except Exception as e:
            self._fail(DetectorInitFailure(str(e))); return
        if token.cancelled: return

        self.status = "Ready - Show your hands"
        log.info("hand tracking ready")
        await self._run(token)

    async def _run(self, token: CancelToken):
        while not token.cancelled:
            await self.step()
            if token.cancelled: break
            await self.clock.tick()
        log.info("detection loop stopped after %d frames", self.frames)

    async def step(self) -> Optional[GestureEvent]:
        """One cycle. Returns the delivered event, if any."""
        camera, detector = self._camera, self._detector
        if camera is None or detector is None:
            return None
        self.frames += 1
        try:
            frame = await camera.read()
            hands = [as_hand(h) for h in await detector.estimate_hands(frame)]
        except Exception as e:
            err = PerFrameDetectionError(str(e))
            log.warning("detection error on frame %d: %s", self.frames, err)
            ev = idle(0)
            self.on_gesture(ev)
            return ev
        h,w = frame.shape[:2]
        ev = self.stabilizer.update(hands, self.state, (w,h))
        if ev is not None:
            self.on_gesture(ev)
        # hand 0 matched no pose: the point event came from the fallthrough branch
        fallback = ev is not None and ev.type == "point" and self.stabilizer.last_pose is None
        self.status, self.color, self.active = status_for(ev, self.stabilizer.cfg.zoom_divisor, fallback)
        if self.overlay is not None:
            self.overlay(frame, hands, self)
        return ev
