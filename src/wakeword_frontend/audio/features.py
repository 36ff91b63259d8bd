"""Feature extraction: one averaged 13-coefficient MFCC vector per analysis window."""

from typing import Optional

import numpy as np

from wakeword_frontend.audio import spectral
from wakeword_frontend.audio.config import AudioConfig
from wakeword_frontend.errors import FeatureError

# Normalization divisor for int16 PCM: 32767, not 2^15
INT16_MAX = 32767.0


def pcm_to_float(samples: np.ndarray) -> np.ndarray:
    """Convert int16 PCM to float32 amplitude in [-1, 1]."""
    return (np.asarray(samples, dtype=np.float32) / INT16_MAX).astype(np.float32)


def normalize_peak(audio: np.ndarray) -> np.ndarray:
    """Scale audio so its largest absolute sample is 1. Silence is returned as-is."""
    audio = np.asarray(audio, dtype=np.float32)
    if audio.size == 0:
        return audio
    peak = float(np.max(np.abs(audio)))
    if peak > 0.0:
        return audio / peak
    return audio


class MfccFeatureExtractor:
    """Extract a fixed-length MFCC template vector from one analysis window.

    Per window:
      pre-emphasis -> 25 ms / 10 ms sub-frames -> Hamming -> |FFT|
      -> mel filterbank -> ln(. + 1e-9) -> DCT-II -> mean over sub-frames

    The mean intentionally collapses temporal structure: the classifier
    sees one static vector per ~1 s of audio, not a sequence.

    Interface:
      extractor = MfccFeatureExtractor(AudioConfig())
      features = extractor.extract(window)          # float window in [-1, 1]
      features = extractor.extract_from_pcm(int16)  # raw PCM, any length >= frame_len
    """

    def __init__(self, config: Optional[AudioConfig] = None):
        self.config = config or AudioConfig()
        self._window = spectral.hamming_window(self.config.frame_len)
        self._mel_filters = spectral.mel_filter_bank(
            self.config.frame_len,
            self.config.sample_rate,
            self.config.n_mel_filters,
        )

    def filter_bank(self, sample_rate: Optional[int] = None) -> np.ndarray:
        """Mel filterbank for the configured frame length at sample_rate."""
        if sample_rate is None or sample_rate == self.config.sample_rate:
            return self._mel_filters
        return spectral.mel_filter_bank(
            self.config.frame_len,
            int(sample_rate),
            self.config.n_mel_filters,
        )

    def cepstra(self, window: np.ndarray, sample_rate: Optional[int] = None) -> np.ndarray:
        """Per-sub-frame cepstral coefficients, shape (n_frames, n_mfcc)."""
        audio = np.asarray(window)
        if audio.ndim != 1:
            raise FeatureError(f"expected a 1-D window, got shape {audio.shape}")
        if audio.shape[0] < self.config.frame_len:
            raise FeatureError(
                f"window has {audio.shape[0]} samples, need at least {self.config.frame_len}"
            )

        emphasized = spectral.pre_emphasize(audio, self.config.pre_emphasis)
        frames = spectral.frame(emphasized, self.config.frame_len, self.config.frame_step)
        frames *= self._window
        spectrum = spectral.magnitude_spectrum(frames)
        log_mel = spectral.log_mel_energies(spectrum, self.filter_bank(sample_rate))
        return spectral.dct2(log_mel, self.config.n_mfcc)

    def extract(self, window: np.ndarray, sample_rate: Optional[int] = None) -> np.ndarray:
        """Compute the averaged MFCC vector for one analysis window.

        Args:
            window: Float samples in [-1, 1], at least frame_len long.
            sample_rate: Rate the window was captured at (default: config rate).

        Returns:
            float32 array of shape (n_mfcc,).

        Raises:
            FeatureError: malformed window or non-finite result.
        """
        features = self.cepstra(window, sample_rate).mean(axis=0).astype(np.float32)
        if not np.all(np.isfinite(features)):
            raise FeatureError("feature vector contains non-finite values")
        return features

    def extract_from_pcm(self, samples: np.ndarray, sample_rate: Optional[int] = None) -> np.ndarray:
        """Normalize int16 PCM by 32767 and extract (e.g. audio loaded from a file)."""
        return self.extract(pcm_to_float(samples), sample_rate)
