"""Spectral building blocks for MFCC extraction.

Pure functions over fixed-size arrays: pre-emphasis, Hamming window,
framing, FFT magnitude, mel filterbank, log-mel energies, DCT-II.

The magnitude spectrum uses scipy.fft, which is exact for any length,
so 400-sample (25 ms @ 16 kHz) frames are transformed without padding.
Bin k is therefore k * sample_rate / frame_len Hz and the filterbank
maps Hz to bins with fft_len = frame_len.
"""

from __future__ import annotations

from functools import lru_cache

import numpy as np
import scipy.fft

# Floor added to mel energies before the log so silent frames stay finite.
LOG_FLOOR = 1e-9


def pre_emphasize(signal: np.ndarray, alpha: float = 0.97) -> np.ndarray:
    """First-order high-pass: y[0] = x[0], y[i] = x[i] - alpha * x[i-1]."""
    x = np.asarray(signal, dtype=np.float64)
    if x.size == 0:
        return x.copy()
    out = np.empty_like(x)
    out[0] = x[0]
    out[1:] = x[1:] - alpha * x[:-1]
    return out


def hamming_window(n: int) -> np.ndarray:
    """Hamming coefficients 0.54 - 0.46 * cos(2 pi i / (n - 1)), i in [0, n)."""
    if n < 1:
        return np.zeros(0)
    if n == 1:
        return np.ones(1)
    i = np.arange(n)
    return 0.54 - 0.46 * np.cos(2.0 * np.pi * i / (n - 1))


def frame(signal: np.ndarray, frame_len: int, frame_step: int) -> np.ndarray:
    """Cut signal into overlapping frames; the partial tail is dropped.

    Returns:
        Array of shape (1 + (len - frame_len) // frame_step, frame_len),
        or (0, frame_len) if the signal is shorter than one frame.
    """
    x = np.asarray(signal, dtype=np.float64)
    if frame_len <= 0 or frame_step <= 0:
        raise ValueError("frame_len and frame_step must be positive")
    if x.shape[0] < frame_len:
        return np.zeros((0, frame_len))
    n_frames = 1 + (x.shape[0] - frame_len) // frame_step
    views = np.lib.stride_tricks.sliding_window_view(x, frame_len)[::frame_step]
    return views[:n_frames].copy()


def magnitude_spectrum(frames: np.ndarray) -> np.ndarray:
    """|DFT| bins 0 .. n//2 - 1 of a frame (or of each row of a frame stack)."""
    x = np.asarray(frames, dtype=np.float64)
    n = x.shape[-1]
    spectrum = scipy.fft.rfft(x, n=n, axis=-1)
    return np.abs(spectrum[..., : n // 2])


def hz_to_mel(hz):
    return 2595.0 * np.log10(1.0 + np.asarray(hz, dtype=np.float64) / 700.0)


def mel_to_hz(mel):
    return 700.0 * (10.0 ** (np.asarray(mel, dtype=np.float64) / 2595.0) - 1.0)


@lru_cache(maxsize=8)
def mel_filter_bank(fft_len: int, sample_rate: int, num_filters: int) -> np.ndarray:
    """Build triangular mel filters over fft_len // 2 spectrum bins.

    Edges are evenly spaced in mel between 0 Hz and Nyquist and mapped to
    bins with floor((fft_len + 1) * hz / sample_rate). Each filter rises
    from 0 at its left edge to 1 at its centre bin and falls back to 0 at
    its right edge. Bins past the spectrum end are truncated.

    Returns:
        Read-only array of shape (num_filters, fft_len // 2). Cached per
        (fft_len, sample_rate, num_filters).
    """
    n_bins = fft_len // 2
    mel_points = np.linspace(
        hz_to_mel(0.0),
        hz_to_mel(sample_rate / 2.0),
        num_filters + 2,
    )
    bin_points = np.floor((fft_len + 1) * mel_to_hz(mel_points) / sample_rate).astype(int)

    filters = np.zeros((num_filters, n_bins))
    for i in range(num_filters):
        left, center, right = bin_points[i], bin_points[i + 1], bin_points[i + 2]
        if center > left:
            rising = np.arange(left, center + 1)
            rising = rising[rising < n_bins]
            filters[i, rising] = (rising - left) / (center - left)
        elif center < n_bins:
            filters[i, center] = 1.0
        if right > center:
            falling = np.arange(center + 1, right + 1)
            falling = falling[falling < n_bins]
            filters[i, falling] = (right - falling) / (right - center)
    filters.setflags(write=False)
    return filters


def log_mel_energies(spectrum: np.ndarray, filter_bank: np.ndarray) -> np.ndarray:
    """ln(weighted filter sums + LOG_FLOOR), one value per filter (per frame)."""
    energies = np.dot(spectrum, filter_bank.T)
    return np.log(energies + LOG_FLOOR)


def dct2(log_mel: np.ndarray, num_coeffs: int) -> np.ndarray:
    """Unnormalized DCT-II: c[k] = sum_n x[n] * cos(pi * k * (n + 0.5) / N).

    scipy's type-II DCT without normalization is exactly twice this sum.
    Works on the last axis, so a (n_frames, N) stack gives (n_frames, num_coeffs).
    """
    x = np.asarray(log_mel, dtype=np.float64)
    if not 0 < num_coeffs <= x.shape[-1]:
        raise ValueError(f"num_coeffs must be in [1, {x.shape[-1]}], got {num_coeffs}")
    return scipy.fft.dct(x, type=2, axis=-1)[..., :num_coeffs] / 2.0
