"""Score smoothing and debounced wake-word decision logic."""

from wakeword_frontend.detection.config import DetectionConfig
from wakeword_frontend.detection.policy import DetectionEvent, DetectionPolicy, DetectionState
from wakeword_frontend.detection.smoother import ConfidenceSmoother

__all__ = [
    "ConfidenceSmoother",
    "DetectionConfig",
    "DetectionEvent",
    "DetectionPolicy",
    "DetectionState",
]
