"""Smoothing and trigger policy configuration."""

from dataclasses import dataclass

from wakeword_frontend.errors import ConfigurationError


@dataclass(frozen=True)
class DetectionConfig:
    """Score smoothing, hysteresis and cooldown parameters.

    Observed deployments used thresholds between 0.45 and 0.7 and 1-3
    required hits.
    """

    smooth_window: int = 5
    threshold: float = 0.6
    required_hits: int = 1
    cooldown_ms: float = 2000.0

    def __post_init__(self) -> None:
        if self.smooth_window < 1:
            raise ConfigurationError(f"smooth_window must be >= 1, got {self.smooth_window}")
        if not 0.0 <= self.threshold <= 1.0:
            raise ConfigurationError(f"threshold must be in [0, 1], got {self.threshold}")
        if self.required_hits < 1:
            raise ConfigurationError(f"required_hits must be >= 1, got {self.required_hits}")
        if self.cooldown_ms < 0:
            raise ConfigurationError(f"cooldown_ms must be >= 0, got {self.cooldown_ms}")
