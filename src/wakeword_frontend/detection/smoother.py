"""Confidence smoother: bounded moving average over recent classifier scores.

Pipeline: classifier -> smoother -> detection policy

Minimal deps: none (stdlib only).
"""

from __future__ import annotations

from collections import deque


class ConfidenceSmoother:
    """Moving average over the last `window_size` raw scores.

    Interface:
      smoother = ConfidenceSmoother(window_size=5)
      smoothed = smoother.add(raw_score)
      smoother.reset()   # after a detection or at session stop
    """

    def __init__(self, window_size: int = 5):
        """
        Args:
            window_size: Maximum number of recent scores averaged (default 5).
        """
        if window_size < 1:
            raise ValueError("window_size must be >= 1")
        self.window_size = window_size
        self._values: deque[float] = deque(maxlen=window_size)

    def add(self, raw_score: float) -> float:
        """Push a raw score (oldest evicted when full) and return the mean of held scores."""
        self._values.append(float(raw_score))
        return sum(self._values) / len(self._values)

    def reset(self) -> None:
        """Forget all history; the next add() returns its own value."""
        self._values.clear()

    @property
    def values(self) -> tuple[float, ...]:
        """Currently held scores, oldest first."""
        return tuple(self._values)

    def __len__(self) -> int:
        return len(self._values)
