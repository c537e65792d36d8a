"""
vetscreen/emotion/aggregator.py
================================
Emotion Sample Aggregator — VetScreen

Responsibility:
    - Reduce the timestamped emotion samples of one interview into a single
      emotion score (0–100)
    - Summarize the label distribution (count + percentage per label)
    - Report the dominant emotion

Each sample contributes ``weight(label) * confidence``; the score is the
neutral baseline (75) shifted by the mean contribution. An interview with no
samples scores the baseline: absence of signal is not penalized.

This module does NOT:
    - Capture video or detect emotions (samples arrive already produced)
    - Read or write the store
    - Combine component scores
"""

import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from vetscreen.numeric import clamp, round_half_up

logger = logging.getLogger("vetscreen.emotion.aggregator")


# ---------------------------------------------------------------------------
# Emotion label enum — enumeration order breaks distribution ties
# ---------------------------------------------------------------------------


class EmotionLabel(str, Enum):
    """Facial emotion labels produced by the sampler."""

    NEUTRAL = "neutral"
    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    FEAR = "fear"
    SURPRISE = "surprise"
    DISGUST = "disgust"


_VALID_LABELS: tuple[str, ...] = tuple(member.value for member in EmotionLabel)

EMOTION_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "happy":    10.0,
    "surprise":  5.0,
    "neutral":   0.0,
    "sad":      -5.0,
    "disgust":  -8.0,
    "fear":    -10.0,
    "angry":   -15.0,
})

NEUTRAL_BASELINE: float = 75.0


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_sample(sample: dict[str, Any]) -> tuple[str, float]:
    """
    Validate one sample and return its (label, confidence).

    Raises:
        ValueError: If the label is unknown or confidence is outside [0, 1].
    """
    label = sample.get("emotion")
    if label not in _VALID_LABELS:
        raise ValueError(
            f"Invalid emotion label: {label!r}. "
            f"Must be one of {list(_VALID_LABELS)}"
        )

    confidence = sample.get("confidence")
    if not isinstance(confidence, (int, float)) or isinstance(confidence, bool):
        raise ValueError(
            f"Emotion confidence must be a number, got {type(confidence).__name__}"
        )
    if confidence < 0.0 or confidence > 1.0:
        raise ValueError(f"Emotion confidence out of range: {confidence}")

    return label, float(confidence)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def calculate_emotion_score(
    samples: list[dict[str, Any]],
    weights: dict[str, float] | None = None,
    baseline: float = NEUTRAL_BASELINE,
) -> int:
    """
    Compute the emotion component score.

    Args:
        samples:
            Emotion samples ordered by elapsed time — each
            {"emotion": str, "confidence": float, "elapsed": float}.
        weights:
            Optional per-label weight override. Defaults to EMOTION_WEIGHTS.
        baseline:
            Score returned for an empty sample list and the centre of the
            scale.

    Returns:
        Integer score in [0, 100].

    Raises:
        ValueError: If any sample is invalid.
    """
    active_weights = weights or EMOTION_WEIGHTS

    if not samples:
        logger.info("No emotion samples — returning neutral baseline %.0f.", baseline)
        return round_half_up(clamp(baseline))

    total = 0.0
    for sample in samples:
        label, confidence = validate_sample(sample)
        total += active_weights.get(label, 0.0) * confidence

    score = round_half_up(clamp(baseline + total / len(samples)))
    logger.info("Emotion score: %d from %d sample(s).", score, len(samples))
    return score


def summarize_emotions(samples: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Distribution of emotion labels across the samples.

    Returns:
        One entry per label — {"emotion", "count", "percentage"} — sorted by
        count descending; ties keep label enumeration order. Percentages are
        0 for an empty sample list.
    """
    counts: dict[str, int] = {label: 0 for label in _VALID_LABELS}
    for sample in samples:
        label, _ = validate_sample(sample)
        counts[label] += 1

    total = len(samples)
    summary = [
        {
            "emotion": label,
            "count": count,
            "percentage": round_half_up(count / total * 100) if total > 0 else 0,
        }
        for label, count in counts.items()
    ]
    # sorted() is stable, so equal counts stay in enumeration order
    return sorted(summary, key=lambda entry: entry["count"], reverse=True)


def dominant_emotion(samples: list[dict[str, Any]]) -> str:
    """Most frequent label, or "none" when there are no samples."""
    if not samples:
        return "none"
    return summarize_emotions(samples)[0]["emotion"]
