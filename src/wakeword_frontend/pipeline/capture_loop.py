"""Capture loop: audio -> windows -> MFCC -> classifier -> smoother -> policy -> consumer.

One worker owns the whole pipeline so windows, scores and detections are
produced in strict temporal order. Only results leave the worker, through
an EventDispatcher that never blocks it.

Windows are stamped on the injected clock. Without one, live sources use
monotonic wall-clock time and file or array sources use stream position
(window index * hop), so cooldowns hold when a file is read faster than
real time.

Cancellation is cooperative: stop() sets a flag that is checked at the top
of every read iteration and again before each window is scored. Source
release and state reset happen in a finally block on every exit path.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from wakeword_frontend.audio.collector import AudioSource, SoundDeviceSource
from wakeword_frontend.audio.config import AudioConfig
from wakeword_frontend.audio.features import MfccFeatureExtractor
from wakeword_frontend.audio.stream_buffer import StreamBuffer
from wakeword_frontend.detection.config import DetectionConfig
from wakeword_frontend.detection.policy import DetectionEvent, DetectionPolicy
from wakeword_frontend.detection.smoother import ConfidenceSmoother
from wakeword_frontend.errors import (
    AudioSourceError,
    ClassifierError,
    ConfigurationError,
    FeatureError,
)
from wakeword_frontend.models.classifier import BaseClassifier
from wakeword_frontend.pipeline.dispatch import EventDispatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptureConfig:
    """Capture loop parameters."""

    read_size: int = 1024  # samples per blocking read (64 ms @ 16 kHz)
    max_pending_events: int = 64
    drain_timeout_sec: float = 1.0
    device: Optional[int] = None

    def __post_init__(self) -> None:
        if self.read_size < 1:
            raise ConfigurationError(f"read_size must be >= 1, got {self.read_size}")
        if self.max_pending_events < 1:
            raise ConfigurationError(
                f"max_pending_events must be >= 1, got {self.max_pending_events}"
            )


@dataclass(frozen=True)
class WindowResult:
    """Per-window diagnostics for consumers that want raw scores."""

    features: np.ndarray
    raw_score: float
    smoothed_score: float
    timestamp: float


DetectionCallback = Callable[[DetectionEvent], None]
WindowCallback = Callable[[WindowResult], None]
ErrorCallback = Callable[[Exception], None]
Clock = Callable[[], float]


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class CaptureLoop:
    """Drives one listening session from an audio source to detection events.

    Components are injected so you can use real or in-memory audio and any
    classifier.

    Interface:
      loop = CaptureLoop(
          classifier=CallableClassifier(my_model_fn),
          audio_config=AudioConfig(),
          detection_config=DetectionConfig(threshold=0.6),
          on_detection=print,
      )
      loop.start()   # background worker
      ...
      loop.stop()    # from any other thread

    or loop.run() to block the calling thread until the source is exhausted
    or stop() is called.
    """

    def __init__(
        self,
        classifier: BaseClassifier,
        source: Optional[AudioSource] = None,
        audio_config: Optional[AudioConfig] = None,
        detection_config: Optional[DetectionConfig] = None,
        capture_config: Optional[CaptureConfig] = None,
        extractor: Optional[MfccFeatureExtractor] = None,
        on_detection: Optional[DetectionCallback] = None,
        on_window: Optional[WindowCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        clock: Optional[Clock] = None,
    ):
        self.audio_config = audio_config or AudioConfig()
        self.detection_config = detection_config or DetectionConfig()
        self.capture_config = capture_config or CaptureConfig()
        self.classifier = classifier
        self.source = source or SoundDeviceSource(self.audio_config, device=self.capture_config.device)
        self.extractor = extractor or MfccFeatureExtractor(self.audio_config)
        self.on_detection = on_detection
        self.on_window = on_window
        self.on_error = on_error
        if clock is None:
            clock = monotonic_ms if self.source.live else self._stream_position_ms
        self._clock = clock
        self._windows_seen = 0

        self.buffer = StreamBuffer(self.audio_config)
        self.smoother = ConfidenceSmoother(self.detection_config.smooth_window)
        self.policy = DetectionPolicy.from_config(self.detection_config)

        self._dispatcher = EventDispatcher(self.capture_config.max_pending_events)
        self._stop_event = threading.Event()
        self._worker: Optional[threading.Thread] = None
        self.last_error: Optional[Exception] = None

    def start(self) -> None:
        """Run the session on a dedicated worker thread."""
        if self.running:
            logger.warning("Capture loop already running")
            return
        self._stop_event.clear()
        self._worker = threading.Thread(target=self._run_session, name="wakeword-capture", daemon=True)
        self._worker.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the loop to exit and wait for the worker (if any) to finish cleanup."""
        self._stop_event.set()
        worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout)

    def run(self) -> None:
        """Run the session on the calling thread until stopped or the source is exhausted."""
        self._stop_event.clear()
        self._run_session()

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def _run_session(self) -> None:
        self.last_error = None
        read_size = self.capture_config.read_size
        logger.info(
            "Listening: window=%d hop=%d threshold=%.2f hits=%d cooldown=%.0fms",
            self.audio_config.window_len,
            self.audio_config.hop_len,
            self.detection_config.threshold,
            self.detection_config.required_hits,
            self.detection_config.cooldown_ms,
        )
        try:
            self.source.open()
            while not self._stop_event.is_set():
                samples = self.source.read(read_size)
                if samples is None:
                    logger.info("Audio source exhausted")
                    break
                if self._stop_event.is_set():
                    break
                self.process_samples(samples)
        except AudioSourceError as exc:
            logger.exception("Audio source failed, ending session: %s", exc)
            self._fail(exc)
        except Exception as exc:
            logger.exception("Capture session failed: %s", exc)
            self._fail(exc)
        finally:
            self._release()

    def _release(self) -> None:
        try:
            self.source.close()
        except Exception as exc:
            logger.exception("Failed to close audio source: %s", exc)
            self._fail(exc)
        self.buffer.reset()
        self.smoother.reset()
        self.policy.reset()
        self._windows_seen = 0
        self._dispatcher.close(self.capture_config.drain_timeout_sec)
        logger.info("Capture session ended")

    def _fail(self, exc: Exception) -> None:
        if self.last_error is None:
            self.last_error = exc
        self._report(exc)

    def _stream_position_ms(self) -> float:
        """Start time of the current window, in audio time since the session began."""
        return self._windows_seen * self.audio_config.hop_len * 1000.0 / self.audio_config.sample_rate

    def process_samples(self, samples: np.ndarray, now: Optional[float] = None) -> List[DetectionEvent]:
        """Buffer samples and score every window that becomes available.

        Returns:
            Detection events accepted for these samples, in order.
        """
        self.buffer.push(samples)
        events: List[DetectionEvent] = []
        while not self._stop_event.is_set():
            window = self.buffer.try_take_window()
            if window is None:
                break
            event = self.process_window(window, now)
            if event is not None:
                events.append(event)
        return events

    def process_window(self, window: np.ndarray, now: Optional[float] = None) -> Optional[DetectionEvent]:
        """Features -> classifier -> smoother -> policy for one analysis window."""
        now = self._clock() if now is None else now
        self._windows_seen += 1

        try:
            features = self.extractor.extract(window, self.audio_config.sample_rate)
        except FeatureError as exc:
            logger.warning("Skipping window: %s", exc)
            self._report(exc)
            return None

        try:
            raw = self.classifier.predict(features)
        except ClassifierError as exc:
            logger.warning("No score for window: %s", exc)
            self.policy.record_miss()
            self._report(exc)
            return None
        except Exception as exc:
            logger.exception("Classifier raised unexpectedly")
            self.policy.record_miss()
            error = ClassifierError(f"classifier raised {exc!r}")
            error.__cause__ = exc
            self._report(error)
            return None

        if self._stop_event.is_set():
            return None
        smoothed = self.smoother.add(raw)
        logger.debug("raw=%.3f smoothed=%.3f hits=%d", raw, smoothed, self.policy.consecutive_hits)
        if self.on_window is not None:
            self._dispatcher.submit(self.on_window, WindowResult(features, raw, smoothed, now))

        event = self.policy.evaluate(smoothed, now)
        if event is None:
            return None

        self.smoother.reset()
        logger.info("Wake word detected (confidence=%.3f)", event.confidence)
        if self.on_detection is not None:
            self._dispatcher.submit(self.on_detection, event)
        return event

    def _report(self, exc: Exception) -> None:
        if self.on_error is not None:
            self._dispatcher.submit(self.on_error, exc)
