from __future__ import annotations
import yaml
import numpy as np
from pathlib import Path
from typing import Any, List, Sequence, Tuple
from .gestures import as_hand

class ScriptedDetector:
    """
    Replays fixed landmark sequences, one entry per estimate_hands() call. Frames
    listed in `fail_on` raise instead, like a flaky estimator would. After the
    script runs out it reports no hands and sets `exhausted`.
    """
    def __init__(self, frames: Sequence[Sequence[Any]], fail_on: Sequence[int] = (), fail_load: bool = False):
        self.frames = [[as_hand(h) for h in hands] for hands in frames]
        self.fail_on = set(fail_on)
        self.fail_load = fail_load
        self.calls = 0
        self.loaded = False
        self.disposed = False

    @property
    def exhausted(self) -> bool:
        return self.calls >= len(self.frames)

    async def load(self):
        if self.fail_load:
            raise RuntimeError("scripted load failure")
        self.loaded = True

    async def estimate_hands(self, frame) -> List[np.ndarray]:
        i = self.calls; self.calls += 1
        if i in self.fail_on:
            raise RuntimeError(f"scripted failure at frame {i}")
        if i >= len(self.frames): return []
        return [h.copy() for h in self.frames[i]]

    def dispose(self):
        self.disposed = True

def load_script(path: str | Path) -> Tuple[List[Any], Tuple[int,int]]:
    """
    Read a YAML (or JSON) landmark script. Either a bare list of frames or a
    mapping with `frames` and optional `frame_size: [w, h]`.
    """
    with open(path, "r") as f: data = yaml.safe_load(f)
    size: Tuple[int,int] = (640, 480)
    if isinstance(data, dict):
        if "frame_size" in data:
            size = tuple(int(v) for v in data["frame_size"])
        data = data.get("frames", [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of frames")
    return data, size
