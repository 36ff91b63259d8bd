"""Centralized audio and feature extraction configuration.

Encoding standards:
- Audio: mono 16 kHz, signed 16-bit PCM
- Analysis window: 1 s (16000 samples), hop = window (disjoint) or < window (sliding)
- Sub-frames: 25 ms / 10 ms step (400 / 160 samples)
- Features: 13 MFCCs from 26 mel filters, averaged over the window
"""

from dataclasses import dataclass, replace

from wakeword_frontend.errors import ConfigurationError


@dataclass(frozen=True)
class AudioConfig:
    """Audio capture, windowing and MFCC configuration."""

    # Recording
    sample_rate: int = 16_000
    channels: int = 1  # mono

    # Analysis windows
    window_len: int = 16_000
    hop_len: int = 16_000

    # Sub-frames
    frame_len: int = 400
    frame_step: int = 160
    pre_emphasis: float = 0.97

    # Cepstrum
    n_mfcc: int = 13
    n_mel_filters: int = 26

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ConfigurationError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.channels != 1:
            raise ConfigurationError(f"only mono capture is supported, got {self.channels} channels")
        if self.frame_step <= 0:
            raise ConfigurationError(f"frame_step must be positive, got {self.frame_step}")
        if self.frame_step > self.frame_len:
            raise ConfigurationError(
                f"frame_step ({self.frame_step}) must not exceed frame_len ({self.frame_len})"
            )
        if self.frame_len > self.window_len:
            raise ConfigurationError(
                f"frame_len ({self.frame_len}) must not exceed window_len ({self.window_len})"
            )
        if not 0 < self.hop_len <= self.window_len:
            raise ConfigurationError(
                f"hop_len must be in (0, window_len={self.window_len}], got {self.hop_len}"
            )
        if not 1 <= self.n_mfcc <= self.n_mel_filters:
            raise ConfigurationError(
                f"n_mfcc must be in [1, n_mel_filters={self.n_mel_filters}], got {self.n_mfcc}"
            )
        if not 0.0 <= self.pre_emphasis < 1.0:
            raise ConfigurationError(f"pre_emphasis must be in [0, 1), got {self.pre_emphasis}")

    @property
    def overlapping(self) -> bool:
        """True when consecutive analysis windows share samples."""
        return self.hop_len < self.window_len

    @property
    def overlap_len(self) -> int:
        """Samples carried over from one window into the next."""
        return self.window_len - self.hop_len

    @property
    def n_subframes(self) -> int:
        """Number of sub-frames cut from one analysis window."""
        return 1 + (self.window_len - self.frame_len) // self.frame_step

    @property
    def spectrum_bins(self) -> int:
        """Magnitude spectrum length per sub-frame."""
        return self.frame_len // 2

    @property
    def window_ms(self) -> float:
        return 1000.0 * self.window_len / self.sample_rate

    def with_overlap(self, hop_len: int) -> "AudioConfig":
        """Copy of this config using a sliding window with the given hop."""
        return replace(self, hop_len=hop_len)
