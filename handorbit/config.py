from __future__ import annotations
import yaml
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from .errors import ConfigError

class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")

class CaptureSettings(_Section):
    camera: int = 0
    width: int = 640
    height: int = 480
    fps: float = 30.0

class ThresholdSettings(_Section):
    # fractions of the frame diagonal; 0.1 == 80px on 640x480
    pinch_fraction: float = 0.1
    fist_fraction: float = 0.1
    zoom_min_change_px: float = 1.0
    zoom_divisor: float = 50.0
    emit_pinch_hold: bool = True

class CameraSettings(_Section):
    drag_sensitivity: float = 10.0
    orbit_sensitivity: float = 5.0
    pan_sensitivity: float = 3.0
    zoom_sensitivity: float = 20.0
    min_radius: float = 0.1
    max_radius: float = 10.0

class SnapSettings(_Section):
    click_eps: float = 0.01
    angle_eps: float = 0.1

class Settings(_Section):
    capture: CaptureSettings = Field(default_factory=CaptureSettings)
    thresholds: ThresholdSettings = Field(default_factory=ThresholdSettings)
    camera: CameraSettings = Field(default_factory=CameraSettings)
    snap: SnapSettings = Field(default_factory=SnapSettings)

def load_settings(path: Optional[str | Path] = None) -> Settings:
    """
    Read a YAML settings file. A missing path gives the defaults, which reproduce
    the tuned 640x480 behaviour.
    """
    if path is None or not Path(path).exists():
        return Settings()
    with open(path, "r") as f: cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ConfigError(f"{path}: expected a mapping at top level")
    try:
        return Settings(**cfg)
    except ValidationError as e:
        raise ConfigError(f"{path}: {e}") from e
