"""Unit tests for configuration validation."""

from __future__ import annotations

import unittest

from wakeword_frontend.audio import AudioConfig
from wakeword_frontend.detection import DetectionConfig
from wakeword_frontend.errors import ConfigurationError
from wakeword_frontend.pipeline import CaptureConfig


class TestAudioConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        c = AudioConfig()
        self.assertEqual((c.sample_rate, c.window_len, c.hop_len), (16_000, 16_000, 16_000))
        self.assertEqual((c.frame_len, c.frame_step, c.n_mfcc, c.n_mel_filters), (400, 160, 13, 26))
        self.assertFalse(c.overlapping)
        self.assertEqual(c.n_subframes, 98)
        self.assertEqual(c.spectrum_bins, 200)
        self.assertEqual(c.window_ms, 1000.0)

    def test_with_overlap(self) -> None:
        c = AudioConfig().with_overlap(4_000)
        self.assertTrue(c.overlapping)
        self.assertEqual(c.overlap_len, 12_000)

    def test_invalid_relationships(self) -> None:
        bad = [
            dict(frame_step=500),  # step > frame
            dict(frame_len=20_000),  # frame > window
            dict(hop_len=0),
            dict(hop_len=16_001),
            dict(n_mfcc=0),
            dict(n_mfcc=27),
            dict(channels=2),
            dict(sample_rate=0),
            dict(pre_emphasis=1.0),
        ]
        for kwargs in bad:
            with self.subTest(**kwargs):
                with self.assertRaises(ConfigurationError):
                    AudioConfig(**kwargs)

    def test_configuration_error_is_value_error(self) -> None:
        with self.assertRaises(ValueError):
            AudioConfig(frame_step=0)


class TestDetectionConfig(unittest.TestCase):
    def test_invalid_values(self) -> None:
        for kwargs in (
            dict(smooth_window=0),
            dict(threshold=1.5),
            dict(threshold=-0.1),
            dict(required_hits=0),
            dict(cooldown_ms=-1),
        ):
            with self.subTest(**kwargs):
                with self.assertRaises(ConfigurationError):
                    DetectionConfig(**kwargs)


class TestCaptureConfig(unittest.TestCase):
    def test_invalid_values(self) -> None:
        with self.assertRaises(ConfigurationError):
            CaptureConfig(read_size=0)
        with self.assertRaises(ConfigurationError):
            CaptureConfig(max_pending_events=0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
