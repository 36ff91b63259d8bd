"""Audio capture, windowing and MFCC feature extraction modules."""

from wakeword_frontend.audio.config import AudioConfig
from wakeword_frontend.audio.collector import (
    ArraySource,
    AudioSource,
    SoundDeviceSource,
    WavFileSource,
)
from wakeword_frontend.audio.features import MfccFeatureExtractor, normalize_peak
from wakeword_frontend.audio.stream_buffer import StreamBuffer

__all__ = [
    "AudioConfig",
    "AudioSource",
    "ArraySource",
    "SoundDeviceSource",
    "WavFileSource",
    "MfccFeatureExtractor",
    "StreamBuffer",
    "normalize_peak",
]
