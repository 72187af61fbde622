from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Optional, Literal
import time

GestureType = Literal["point","grab","drag","drop","orbit","pan","zoom","idle"]

class Point(BaseModel):
    x: float; y: float

class GestureEvent(BaseModel):
    """
    One per processed frame. position is normalised to [0,1]x[0,1] of the capture
    frame, delta is a normalised per-frame displacement, distance a signed
    normalised pinch (or two-hand) distance change.
    """
    ts: float = Field(default_factory=lambda: time.time())
    type: GestureType
    position: Optional[Point] = None
    delta: Optional[Point] = None
    distance: Optional[float] = None
    hands: int = 1

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)

def idle(hands: int = 0) -> GestureEvent:
    return GestureEvent(type="idle", hands=hands)
