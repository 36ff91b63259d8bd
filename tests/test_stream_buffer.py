"""Unit tests for StreamBuffer windowing (disjoint and sliding)."""

from __future__ import annotations

import threading
import unittest
from typing import List

import numpy as np

from wakeword_frontend.audio import AudioConfig, StreamBuffer


def _pcm(n: int, seed: int = 3) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(-32767, 32768, size=n, dtype=np.int16)


def _drain(buffer: StreamBuffer) -> List[np.ndarray]:
    windows = []
    while True:
        window = buffer.try_take_window()
        if window is None:
            return windows
        windows.append(window)


class TestStreamBuffer(unittest.TestCase):
    def test_overlapping_windows(self) -> None:
        """window 16000, hop 4000: 28000 samples -> 4 windows sharing 12000 samples."""
        buffer = StreamBuffer(AudioConfig().with_overlap(4_000))
        buffer.push(_pcm(28_000))
        windows = _drain(buffer)
        self.assertEqual(len(windows), 4)
        for prev, nxt in zip(windows, windows[1:]):
            self.assertEqual(prev.shape, (16_000,))
            np.testing.assert_array_equal(prev[-12_000:], nxt[:12_000])
        self.assertEqual(len(buffer), 12_000)

    def test_non_overlapping_windows(self) -> None:
        """window 16000, hop 16000: 32000 samples -> 2 disjoint windows."""
        data = _pcm(32_000)
        buffer = StreamBuffer(AudioConfig())
        buffer.push(data)
        windows = _drain(buffer)
        self.assertEqual(len(windows), 2)
        np.testing.assert_allclose(windows[0], data[:16_000] / 32767.0, rtol=1e-6)
        np.testing.assert_allclose(windows[1], data[16_000:] / 32767.0, rtol=1e-6)
        self.assertEqual(len(buffer), 0)

    def test_non_overlapping_keeps_excess(self) -> None:
        buffer = StreamBuffer(AudioConfig())
        buffer.push(_pcm(20_000))
        self.assertIsNotNone(buffer.try_take_window())
        self.assertEqual(len(buffer), 4_000)

    def test_not_enough_samples(self) -> None:
        buffer = StreamBuffer(AudioConfig())
        buffer.push(_pcm(15_999))
        self.assertIsNone(buffer.try_take_window())
        self.assertEqual(len(buffer), 15_999)
        buffer.push(_pcm(1))
        self.assertIsNotNone(buffer.try_take_window())

    def test_normalized_at_take_time(self) -> None:
        config = AudioConfig(window_len=400, hop_len=400)
        buffer = StreamBuffer(config)
        buffer.push(np.array([32767, -32767, 0] * 133 + [0], dtype=np.int16))
        window = buffer.try_take_window()
        self.assertEqual(window.dtype, np.float32)
        np.testing.assert_allclose(window[:3], [1.0, -1.0, 0.0])

    def test_chunked_pushes_equal_single_push(self) -> None:
        data = _pcm(20_000)
        config = AudioConfig().with_overlap(4_000)
        whole, chunked = StreamBuffer(config), StreamBuffer(config)
        whole.push(data)
        for start in range(0, len(data), 1_024):
            chunked.push(data[start : start + 1_024])
        for a, b in zip(_drain(whole), _drain(chunked)):
            np.testing.assert_array_equal(a, b)

    def test_accepts_sequences_and_multichannel(self) -> None:
        buffer = StreamBuffer(AudioConfig())
        buffer.push([1, 2, 3])
        buffer.push(np.zeros((10, 1), dtype=np.int16))
        buffer.push([])
        self.assertEqual(len(buffer), 13)

    def test_reset(self) -> None:
        buffer = StreamBuffer(AudioConfig())
        buffer.push(_pcm(30_000))
        buffer.reset()
        self.assertEqual(len(buffer), 0)
        self.assertIsNone(buffer.try_take_window())

    def test_concurrent_pushes(self) -> None:
        buffer = StreamBuffer(AudioConfig())

        def producer() -> None:
            for _ in range(200):
                buffer.push(np.ones(100, dtype=np.int16))

        threads = [threading.Thread(target=producer) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(len(buffer), 80_000)
        self.assertEqual(len(_drain(buffer)), 5)


if __name__ == "__main__":
    unittest.main(verbosity=2)
