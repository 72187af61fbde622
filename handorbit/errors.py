from __future__ import annotations

class HandOrbitError(Exception):
    """Base for everything raised by handorbit."""

class CameraAcquisitionFailure(HandOrbitError):
    """Permission denied, no device, or the stream never produced a frame."""

class DetectorInitFailure(HandOrbitError):
    """The hand landmark model could not be loaded."""

class PerFrameDetectionError(HandOrbitError):
    """Transient estimator failure for a single frame. Never fatal."""

class ConfigError(HandOrbitError):
    pass
