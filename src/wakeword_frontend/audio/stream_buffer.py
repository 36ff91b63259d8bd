"""Streaming sample buffer that yields fixed-size analysis windows."""

import threading
from typing import List, Optional, Sequence, Union

import numpy as np

from wakeword_frontend.audio.config import AudioConfig
from wakeword_frontend.audio.features import pcm_to_float


class StreamBuffer:
    """Accumulate int16 PCM and hand out window_len-sample analysis windows.

    hop_len == window_len: windows are disjoint; each take consumes window_len.
    hop_len < window_len: sliding windows; each take consumes hop_len and the
        last window_len - hop_len samples start the next window.

    Samples are stored as int16 and normalized only when a window is taken.
    All operations are serialized by one lock, so a capture thread may push
    while a controller thread resets.
    """

    def __init__(self, config: Optional[AudioConfig] = None):
        self.config = config or AudioConfig()
        self.window_len = self.config.window_len
        self.hop_len = self.config.hop_len
        self._chunks: List[np.ndarray] = []
        self._count = 0
        self._lock = threading.Lock()

    def push(self, samples: Union[np.ndarray, Sequence[int]]) -> None:
        """Append samples; multi-channel shapes are flattened."""
        chunk = np.asarray(samples, dtype=np.int16).reshape(-1)
        if chunk.size == 0:
            return
        with self._lock:
            self._chunks.append(chunk.copy())
            self._count += chunk.size

    def try_take_window(self) -> Optional[np.ndarray]:
        """Return the next float32 window, or None if fewer than window_len samples are buffered."""
        with self._lock:
            if self._count < self.window_len:
                return None
            data = self._consolidate()
            window = pcm_to_float(data[: self.window_len])
            rest = data[self.hop_len :]
            self._chunks = [rest] if rest.size else []
            self._count = rest.size
            return window

    def reset(self) -> None:
        """Drop all buffered samples."""
        with self._lock:
            self._chunks = []
            self._count = 0

    def _consolidate(self) -> np.ndarray:
        if len(self._chunks) != 1:
            self._chunks = [np.concatenate(self._chunks)]
        return self._chunks[0]

    @property
    def overlapping(self) -> bool:
        return self.hop_len < self.window_len

    def __len__(self) -> int:
        with self._lock:
            return self._count
