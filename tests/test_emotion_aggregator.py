"""
tests/test_emotion_aggregator.py
=================================
Emotion Sample Aggregator Tests

Test categories:
    1. Weighted score around the neutral baseline
    2. Half-up rounding and clamping
    3. Label distribution and tie ordering
    4. Dominant emotion
    5. Sample validation

All tests are offline.
"""

import os
import sys
import unittest

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from vetscreen.emotion.aggregator import (
    EMOTION_WEIGHTS,
    EmotionLabel,
    calculate_emotion_score,
    dominant_emotion,
    summarize_emotions,
    validate_sample,
)


def _sample(emotion: str, confidence: float = 1.0, elapsed: float = 0.0) -> dict:
    return {"emotion": emotion, "confidence": confidence, "elapsed": elapsed}


class TestCalculateEmotionScore(unittest.TestCase):

    def test_no_samples_returns_baseline(self):
        self.assertEqual(calculate_emotion_score([]), 75)

    def test_weights_are_immutable(self):
        with self.assertRaises(TypeError):
            EMOTION_WEIGHTS["angry"] = 0.0
        self.assertEqual(calculate_emotion_score([_sample("angry")]), 60)

    def test_single_happy_sample(self):
        self.assertEqual(calculate_emotion_score([_sample("happy")]), 85)

    def test_confidence_scales_weight(self):
        self.assertEqual(calculate_emotion_score([_sample("fear", 0.5)]), 70)

    def test_neutral_samples_keep_baseline(self):
        samples = [_sample("neutral", 0.9, t) for t in range(5)]
        self.assertEqual(calculate_emotion_score(samples), 75)

    def test_mean_rounds_half_up(self):
        # (10 - 15) / 2 = -2.5 -> 72.5
        samples = [_sample("happy"), _sample("angry")]
        self.assertEqual(calculate_emotion_score(samples), 73)

    def test_all_angry(self):
        samples = [_sample("angry", 1.0, t) for t in range(10)]
        self.assertEqual(calculate_emotion_score(samples), 60)

    def test_custom_weights_and_clamp(self):
        samples = [_sample("happy")]
        self.assertEqual(calculate_emotion_score(samples, weights={"happy": 50.0}), 100)
        self.assertEqual(calculate_emotion_score(samples, weights={"happy": -90.0}), 0)

    def test_invalid_label_raises(self):
        with self.assertRaises(ValueError):
            calculate_emotion_score([_sample("contempt")])

    def test_confidence_out_of_range_raises(self):
        with self.assertRaises(ValueError):
            calculate_emotion_score([_sample("happy", 1.5)])
        with self.assertRaises(ValueError):
            calculate_emotion_score([_sample("happy", -0.1)])


class TestSummarizeEmotions(unittest.TestCase):

    def test_counts_and_percentages(self):
        samples = [_sample("happy"), _sample("sad"), _sample("happy")]
        summary = summarize_emotions(samples)

        self.assertEqual(len(summary), len(EmotionLabel))
        self.assertEqual(summary[0], {"emotion": "happy", "count": 2, "percentage": 67})
        self.assertEqual(summary[1], {"emotion": "sad", "count": 1, "percentage": 33})

    def test_zero_counts_keep_enumeration_order(self):
        summary = summarize_emotions([_sample("disgust")])
        self.assertEqual(
            [entry["emotion"] for entry in summary],
            ["disgust", "neutral", "happy", "sad", "angry", "fear", "surprise"],
        )

    def test_empty_samples(self):
        summary = summarize_emotions([])
        self.assertEqual([entry["emotion"] for entry in summary], [label.value for label in EmotionLabel])
        self.assertTrue(all(entry["percentage"] == 0 for entry in summary))


class TestDominantEmotion(unittest.TestCase):

    def test_none_without_samples(self):
        self.assertEqual(dominant_emotion([]), "none")

    def test_most_frequent_label(self):
        samples = [_sample("fear"), _sample("fear"), _sample("happy")]
        self.assertEqual(dominant_emotion(samples), "fear")

    def test_tie_goes_to_earlier_label(self):
        samples = [_sample("sad"), _sample("happy")]
        self.assertEqual(dominant_emotion(samples), "happy")


class TestValidateSample(unittest.TestCase):

    def test_returns_label_and_float_confidence(self):
        self.assertEqual(validate_sample({"emotion": "surprise", "confidence": 1}), ("surprise", 1.0))

    def test_rejects_non_numeric_confidence(self):
        with self.assertRaises(ValueError):
            validate_sample({"emotion": "happy", "confidence": "high"})
        with self.assertRaises(ValueError):
            validate_sample({"emotion": "happy", "confidence": True})


if __name__ == "__main__":
    unittest.main()
