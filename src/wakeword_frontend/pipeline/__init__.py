"""End-to-end wake-word capture pipeline."""

from wakeword_frontend.pipeline.capture_loop import CaptureConfig, CaptureLoop, WindowResult
from wakeword_frontend.pipeline.dispatch import EventDispatcher

__all__ = ["CaptureConfig", "CaptureLoop", "EventDispatcher", "WindowResult"]
