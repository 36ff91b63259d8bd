"""Detection policy: consecutive-hit hysteresis plus a trigger cooldown.

Turns a stream of smoothed scores into rate-limited detection events.
There is no separate cooldown state: hits keep accumulating during the
cooldown and only the final trigger is gated by elapsed time.

On each evaluate(score, now):
  1. score > threshold  -> consecutive_hits += 1, else consecutive_hits = 0
  2. consecutive_hits >= required_hits and now - last_trigger_time > cooldown_ms
     (last_trigger_time starts at -inf)
       -> emit DetectionEvent(score, now), last_trigger_time = now,
          consecutive_hits = 0; the caller resets its smoother
  3. otherwise nothing
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from wakeword_frontend.detection.config import DetectionConfig


@dataclass(frozen=True)
class DetectionEvent:
    """A debounced wake-word detection."""

    confidence: float
    timestamp: float  # ms, on the caller's clock


@dataclass(frozen=True)
class DetectionState:
    """Snapshot of the policy's mutable state."""

    consecutive_hits: int = 0
    last_trigger_time: Optional[float] = None


class DetectionPolicy:
    """Consecutive-hit + cooldown state machine.

    Interface:
      policy = DetectionPolicy(threshold=0.45, required_hits=3, cooldown_ms=2000)
      event = policy.evaluate(smoothed_score, now_ms)
      if event is not None:
          smoother.reset()
    """

    def __init__(
        self,
        threshold: float = 0.6,
        required_hits: int = 1,
        cooldown_ms: float = 2000.0,
    ):
        self.threshold = threshold
        self.required_hits = required_hits
        self.cooldown_ms = cooldown_ms
        self._consecutive_hits = 0
        self._last_trigger_time: Optional[float] = None

    @classmethod
    def from_config(cls, config: DetectionConfig) -> "DetectionPolicy":
        return cls(
            threshold=config.threshold,
            required_hits=config.required_hits,
            cooldown_ms=config.cooldown_ms,
        )

    def evaluate(
        self,
        smoothed_score: float,
        now: float,
        threshold: Optional[float] = None,
        required_hits: Optional[int] = None,
        cooldown_ms: Optional[float] = None,
    ) -> Optional[DetectionEvent]:
        """Advance the machine by one smoothed score.

        Args:
            smoothed_score: Output of the confidence smoother.
            now: Current time in milliseconds.
            threshold, required_hits, cooldown_ms: Per-call overrides of
                the values given at construction.

        Returns:
            DetectionEvent when a detection is accepted, else None. On an
            event the caller must reset its confidence smoother.
        """
        threshold = self.threshold if threshold is None else threshold
        required_hits = self.required_hits if required_hits is None else required_hits
        cooldown_ms = self.cooldown_ms if cooldown_ms is None else cooldown_ms

        if smoothed_score > threshold:
            self._consecutive_hits += 1
        else:
            self._consecutive_hits = 0

        if self._consecutive_hits >= required_hits and self._cooled_down(now, cooldown_ms):
            self._last_trigger_time = now
            self._consecutive_hits = 0
            return DetectionEvent(confidence=float(smoothed_score), timestamp=now)
        return None

    def record_miss(self) -> None:
        """A window produced no score; no hit is recorded."""
        self._consecutive_hits = 0

    def reset(self) -> None:
        """Back to the initial state (no hits, never triggered)."""
        self._consecutive_hits = 0
        self._last_trigger_time = None

    def _cooled_down(self, now: float, cooldown_ms: float) -> bool:
        if self._last_trigger_time is None:
            return True
        return (now - self._last_trigger_time) > cooldown_ms

    @property
    def consecutive_hits(self) -> int:
        return self._consecutive_hits

    @property
    def last_trigger_time(self) -> Optional[float]:
        return self._last_trigger_time

    @property
    def state(self) -> DetectionState:
        return DetectionState(self._consecutive_hits, self._last_trigger_time)
