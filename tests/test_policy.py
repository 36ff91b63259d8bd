"""Unit tests and toy example for the consecutive-hit + cooldown detection policy."""

from __future__ import annotations

import unittest

from wakeword_frontend.detection import DetectionConfig, DetectionEvent, DetectionPolicy


class TestDetectionPolicy(unittest.TestCase):
    def setUp(self) -> None:
        self.policy = DetectionPolicy(threshold=0.45, required_hits=3, cooldown_ms=2000)

    def _feed(self, times, score: float = 0.5):
        return [self.policy.evaluate(score, t) for t in times]

    def test_triggers_on_third_consecutive_hit(self) -> None:
        results = self._feed([0, 100, 200])
        self.assertIsNone(results[0])
        self.assertIsNone(results[1])
        self.assertEqual(results[2], DetectionEvent(confidence=0.5, timestamp=200))
        self.assertEqual(self.policy.consecutive_hits, 0)
        self.assertEqual(self.policy.last_trigger_time, 200)

    def test_cooldown_blocks_second_event(self) -> None:
        self._feed([0, 100, 200])
        self.assertEqual(self._feed([300, 400, 500]), [None, None, None])
        # hits keep accumulating during cooldown
        self.assertEqual(self.policy.consecutive_hits, 3)

    def test_event_after_cooldown(self) -> None:
        self._feed([0, 100, 200])
        self._feed([300, 400, 500])
        events = [e for e in self._feed([2500, 2600, 2700]) if e is not None]
        self.assertEqual(len(events), 1)
        self.assertGreater(events[0].timestamp - 200, 2000)

    def test_fresh_triple_after_cooldown(self) -> None:
        self._feed([0, 100, 200])
        results = self._feed([2500, 2600, 2700])
        self.assertEqual([r is not None for r in results], [False, False, True])

    def test_score_at_threshold_resets_hits(self) -> None:
        self._feed([0, 100])
        self.assertIsNone(self.policy.evaluate(0.45, 200))
        self.assertEqual(self.policy.consecutive_hits, 0)
        self.assertEqual(self._feed([300, 400, 500])[-1].timestamp, 500)

    def test_cooldown_boundary_is_exclusive(self) -> None:
        policy = DetectionPolicy(threshold=0.5, required_hits=1, cooldown_ms=2000)
        self.assertIsNotNone(policy.evaluate(0.9, 0))
        self.assertIsNone(policy.evaluate(0.9, 2000))
        self.assertIsNotNone(policy.evaluate(0.9, 2001))

    def test_record_miss(self) -> None:
        self._feed([0, 100])
        self.policy.record_miss()
        self.assertEqual(self.policy.consecutive_hits, 0)
        self.assertIsNone(self.policy.evaluate(0.5, 200))

    def test_reset(self) -> None:
        self._feed([0, 100, 200])
        self.policy.reset()
        state = self.policy.state
        self.assertEqual(state.consecutive_hits, 0)
        self.assertIsNone(state.last_trigger_time)
        self.assertIsNotNone(self._feed([300, 400, 500])[-1])

    def test_per_call_overrides(self) -> None:
        event = self.policy.evaluate(0.3, 0, threshold=0.2, required_hits=1, cooldown_ms=0)
        self.assertIsNotNone(event)
        self.assertEqual(self.policy.threshold, 0.45)

    def test_from_config(self) -> None:
        policy = DetectionPolicy.from_config(DetectionConfig(threshold=0.7, required_hits=2, cooldown_ms=500))
        self.assertEqual((policy.threshold, policy.required_hits, policy.cooldown_ms), (0.7, 2, 500))


def run_toy_example() -> None:
    """Feed a noisy score sequence and show when detections fire."""
    print("=== Toy example: detection policy (threshold=0.45, hits=3, cooldown=2000ms) ===\n")
    policy = DetectionPolicy(threshold=0.45, required_hits=3, cooldown_ms=2000)
    scores = [0.1, 0.5, 0.6, 0.3, 0.5, 0.55, 0.7, 0.8, 0.8, 0.8, 0.2, 0.6, 0.6, 0.6]
    for i, score in enumerate(scores):
        now = i * 250
        event = policy.evaluate(score, now)
        mark = f"  <- DETECTED ({event.confidence:.2f})" if event else ""
        print(f"  t={now:5d}ms score={score:.2f} hits={policy.consecutive_hits}{mark}")
    print("\nDone.")


if __name__ == "__main__":
    run_toy_example()
    print("\n--- Running unit tests ---")
    unittest.main(argv=[""], exit=False, verbosity=2)
