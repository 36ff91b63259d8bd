"""Wake-word front end - streaming windows, MFCC features, smoothing, debounced detection."""

from wakeword_frontend.audio import AudioConfig, MfccFeatureExtractor, StreamBuffer
from wakeword_frontend.detection import (
    ConfidenceSmoother,
    DetectionConfig,
    DetectionEvent,
    DetectionPolicy,
)
from wakeword_frontend.pipeline import CaptureConfig, CaptureLoop

__all__ = [
    "AudioConfig",
    "CaptureConfig",
    "CaptureLoop",
    "ConfidenceSmoother",
    "DetectionConfig",
    "DetectionEvent",
    "DetectionPolicy",
    "MfccFeatureExtractor",
    "StreamBuffer",
]
