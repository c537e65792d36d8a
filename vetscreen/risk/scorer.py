"""
vetscreen/risk/scorer.py
=========================
Deterministic Risk Scorer — VetScreen

Responsibility:
    - Derive the document (OCR) and background component scores from
      stored evidence, applying the documented defaults for missing evidence
    - Combine the four component scores (interview, emotion, ocr,
      background) with fixed, validated weights into a final score (0–100)
    - Classify the risk tier (LOW | MEDIUM | HIGH) from fixed thresholds

Scoring philosophy:
    - Each component is scored independently on [0, 100]; higher is safer
    - Final score = weighted sum, rounded half-up
    - Weights are immutable defaults that may be overridden per call but must
      name exactly the four components and sum to 1.0

Missing evidence never fails a run: no documents / no OCR results -> 50,
no background check or no score yet -> 50. A FAILED background check is
not missing evidence and is refused rather than scored.

This module does NOT:
    - Analyze transcripts, emotion samples, or document text
    - Read or write the store
    - Build the narrative report (report.py)
"""

import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from vetscreen.errors import BackgroundCheckFailedError
from vetscreen.numeric import clamp, round_half_up

logger = logging.getLogger("vetscreen.risk.scorer")


class RiskTier(str, Enum):
    """Risk tier derived from the final score band."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# ---------------------------------------------------------------------------
# Weights — must sum to 1.0
# ---------------------------------------------------------------------------

DEFAULT_WEIGHTS: Mapping[str, float] = MappingProxyType({
    "interview":  0.30,
    "emotion":    0.20,
    "ocr":        0.25,
    "background": 0.25,
})

# Tier thresholds (inclusive lower bounds on the final score)
LOW_RISK_THRESHOLD: int = 70
MEDIUM_RISK_THRESHOLD: int = 40

# Defaults substituted for missing evidence
DEFAULT_OCR_SCORE: int = 50
DEFAULT_BACKGROUND_SCORE: int = 50
MISSING_MATCH_SCORE: int = 50

# Per-document penalties subtracted from the average match score
TAMPERING_PENALTY: int = 30
SUSPICIOUS_PENALTY: int = 20
INVALID_PENALTY: int = 15


# ---------------------------------------------------------------------------
# Component scores derived from stored evidence
# ---------------------------------------------------------------------------


def calculate_ocr_score(documents: list[dict[str, Any]]) -> int:
    """
    Document verification component score.

    Averages the match score of every document that has an OCR result
    (a result without a match score counts as 50), then subtracts the summed
    penalties of all results: 30 per tampering flag, 20 per "suspicious",
    15 per "invalid". Floors at 0.

    Args:
        documents: Document snapshots, each with an "ocr_result" dict or None.

    Returns:
        Integer score in [0, 100]; 50 with no documents or no OCR results.
    """
    results = [doc["ocr_result"] for doc in documents or [] if doc.get("ocr_result")]
    if not results:
        return DEFAULT_OCR_SCORE

    total = 0.0
    penalties = 0
    for result in results:
        if result.get("tampering_detected"):
            penalties += TAMPERING_PENALTY
        status = result.get("validation_status")
        if status == "suspicious":
            penalties += SUSPICIOUS_PENALTY
        elif status == "invalid":
            penalties += INVALID_PENALTY

        match_score = result.get("match_score")
        total += MISSING_MATCH_SCORE if match_score is None else match_score

    average = total / len(results)
    return round_half_up(clamp(average - penalties))


def background_component_score(check: dict[str, Any] | None) -> int:
    """
    Background component score.

    Returns:
        The stored score, or 50 when there is no check or no score yet
        (pending).

    Raises:
        BackgroundCheckFailedError: The check failed; its absence of a score
            must not be coerced into a number.
    """
    if not check:
        return DEFAULT_BACKGROUND_SCORE
    if check.get("status") == "failed":
        raise BackgroundCheckFailedError(check["application_id"])
    score = check.get("score")
    if score is None:
        return DEFAULT_BACKGROUND_SCORE
    return int(clamp(score))


# ---------------------------------------------------------------------------
# Public API — aggregation
# ---------------------------------------------------------------------------


def validate_weights(weights: Mapping[str, float]) -> Mapping[str, float]:
    """
    Validate that weights name exactly the four components and sum to 1.0.

    Raises:
        ValueError: If keys are wrong, a weight is negative, or the weights
            do not sum to ~1.0.
    """
    expected_keys = set(DEFAULT_WEIGHTS)
    actual_keys = set(weights)

    if actual_keys != expected_keys:
        missing = expected_keys - actual_keys
        extra = actual_keys - expected_keys
        raise ValueError(f"Invalid weight keys. Missing: {missing}, Extra: {extra}")

    if any(value < 0 for value in weights.values()):
        raise ValueError(f"Weights must be non-negative, got {dict(weights)}")

    total = sum(weights.values())
    if abs(total - 1.0) > 0.001:
        raise ValueError(f"Weights must sum to 1.0, got {total:.4f}")

    return weights


def compute_final_score(
    scores: Mapping[str, int],
    weights: Mapping[str, float] | None = None,
) -> int:
    """
    Weighted combination of the four component scores.

    Args:
        scores: {"interview", "emotion", "ocr", "background"} -> 0–100.
        weights: Optional override of DEFAULT_WEIGHTS.

    Returns:
        Final score, rounded half-up and clamped to [0, 100].
    """
    active_weights = validate_weights(weights or DEFAULT_WEIGHTS)
    raw = sum(scores[component] * active_weights[component] for component in active_weights)
    # Absorb float noise such as 0.2 * 75 + 0.25 * 50 + 0.25 * 50 = 39.99999
    final = round_half_up(clamp(round(raw, 6)))

    logger.info("Component scores: %s -> final=%d", dict(scores), final)
    return final


def determine_risk_tier(
    final_score: int,
    low_threshold: int = LOW_RISK_THRESHOLD,
    medium_threshold: int = MEDIUM_RISK_THRESHOLD,
) -> str:
    """LOW at or above 70, MEDIUM at or above 40, otherwise HIGH."""
    if final_score >= low_threshold:
        return RiskTier.LOW.value
    if final_score >= medium_threshold:
        return RiskTier.MEDIUM.value
    return RiskTier.HIGH.value
