"""
vetscreen/output_validator.py
==============================
Assessment Output Validator — VetScreen

Responsibility:
    - Validate the four component scores before they are combined
    - Validate the assembled assessment before it is persisted
    - FAIL FAST with clear errors if an output is out of contract
    - NO auto-correction: an invalid value raises, it is never clamped here

This module does NOT:
    - Compute any score
    - Read or write the store
    - Infer missing values
"""

import logging
from typing import Any, Mapping

from vetscreen.errors import ComponentVerificationError
from vetscreen.risk.scorer import DEFAULT_WEIGHTS, RiskTier

logger = logging.getLogger("vetscreen.output_validator")

_REPORT_SECTIONS: tuple[str, ...] = (
    "summary",
    "interview_analysis",
    "emotion_analysis",
    "document_verification",
    "background_check",
    "risk_factors",
    "strengths",
)


def _verify_bounded_int(component: str, name: str, value: Any) -> None:
    # bool is an int subclass but never a score
    if not isinstance(value, int) or isinstance(value, bool):
        raise ComponentVerificationError(
            component, f"{name} must be int, got {type(value).__name__}"
        )
    if value < 0 or value > 100:
        raise ComponentVerificationError(
            component, f"{name} out of range [0, 100]: {value}"
        )


# =====================================================================
# Component scores
# =====================================================================


def verify_component_scores(scores: Mapping[str, Any]) -> None:
    """
    Verify the component scores handed to the aggregation step.

    Checks:
        - Exactly the four components are present
        - Each score is an int in [0, 100]

    Raises:
        ComponentVerificationError: If any check fails.
    """
    if not isinstance(scores, Mapping):
        raise ComponentVerificationError(
            "scores", f"Expected mapping, got {type(scores).__name__}"
        )

    missing = set(DEFAULT_WEIGHTS) - set(scores)
    extra = set(scores) - set(DEFAULT_WEIGHTS)
    if missing or extra:
        raise ComponentVerificationError(
            "scores", f"Missing: {sorted(missing)}, Extra: {sorted(extra)}"
        )

    for component, value in scores.items():
        _verify_bounded_int(component, f"{component} score", value)

    logger.info("Component score verification passed: %s", dict(scores))


# =====================================================================
# Assembled assessment
# =====================================================================


def verify_assessment(
    final_score: Any,
    risk_level: Any,
    report: Any,
) -> None:
    """
    Verify the final score, tier and report before persistence.

    Checks:
        - final_score is an int in [0, 100]
        - risk_level is LOW, MEDIUM or HIGH
        - report carries every section and agrees with score and tier
        - risk_factors and strengths are lists of strings

    Raises:
        ComponentVerificationError: If any check fails.
    """
    _verify_bounded_int("assessment", "final_score", final_score)

    valid_tiers = {tier.value for tier in RiskTier}
    if risk_level not in valid_tiers:
        raise ComponentVerificationError(
            "assessment", f"Invalid risk_level: {risk_level!r}"
        )

    if not isinstance(report, dict):
        raise ComponentVerificationError(
            "report", f"Expected dict, got {type(report).__name__}"
        )

    for section in _REPORT_SECTIONS:
        if section not in report:
            raise ComponentVerificationError(
                "report", f"Report missing required section '{section}'"
            )

    summary = report["summary"]
    if summary.get("final_score") != final_score or summary.get("risk_level") != risk_level:
        raise ComponentVerificationError(
            "report", "Report summary disagrees with the computed score or tier"
        )

    for checklist in ("risk_factors", "strengths"):
        items = report[checklist]
        if not isinstance(items, list) or not all(isinstance(item, str) for item in items):
            raise ComponentVerificationError(
                "report", f"{checklist} must be a list of strings"
            )

    logger.info(
        "Assessment verification passed: final_score=%d, risk_level=%s",
        final_score, risk_level,
    )
