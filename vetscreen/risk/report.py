"""
vetscreen/risk/report.py
=========================
Explainable Assessment Report — VetScreen

Responsibility:
    - Assemble the structured, human-readable report stored with every risk
      assessment: summary + recommendation, per-signal sub-reports,
      risk factors and strengths

Report rules:
    - The recommendation depends on the risk tier only
    - risk_factors and strengths are independent checklists: the same
      component may appear in neither, and each list keeps the fixed check
      order below
    - Risk factor thresholds are strict ("< 60"); strength thresholds are
      inclusive ("≥ 80")

This module does NOT:
    - Compute any component or final score
    - Read or write the store
"""

import logging
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping

from vetscreen.emotion.aggregator import dominant_emotion, summarize_emotions

logger = logging.getLogger("vetscreen.risk.report")


RECOMMENDATIONS: Mapping[str, str] = MappingProxyType({
    "LOW": (
        "Candidate shows strong verification results across all areas. "
        "Recommended for approval."
    ),
    "MEDIUM": (
        "Candidate shows some concerns. Additional verification or interview "
        "recommended before final decision."
    ),
    "HIGH": (
        "Candidate shows significant risk indicators. Not recommended for "
        "approval without thorough additional investigation."
    ),
})

# (component, score strictly below which it is a risk factor, message)
_SCORE_RISK_FACTORS: tuple[tuple[str, int, str], ...] = (
    ("interview", 60, "Low interview credibility and sentiment scores"),
    ("emotion", 50, "Concerning emotional patterns detected during interview"),
    ("ocr", 60, "Document verification issues or discrepancies found"),
    ("background", 60, "Background check revealed potential concerns"),
)

# (component, score at or above which it is a strength, message)
_SCORE_STRENGTHS: tuple[tuple[str, int, str], ...] = (
    ("interview", 75, "Strong interview performance with high credibility"),
    ("emotion", 70, "Positive emotional indicators throughout interview"),
    ("ocr", 80, "All documents verified successfully with no discrepancies"),
    ("background", 85, "Clean background check with no red flags"),
)

MAX_RISK_INDICATORS: int = 3
MAX_REPORTED_DISCREPANCIES: int = 10


# ---------------------------------------------------------------------------
# Checklists
# ---------------------------------------------------------------------------


def _any_tampering(documents: list[dict[str, Any]]) -> bool:
    return any(
        (doc.get("ocr_result") or {}).get("tampering_detected") for doc in documents
    )


def identify_risk_factors(
    scores: dict[str, int],
    documents: list[dict[str, Any]],
    background_check: dict[str, Any] | None,
) -> list[str]:
    """Risk-factor checklist in fixed order: scores, watchlist, tampering, indicators."""
    factors = [
        message
        for component, threshold, message in _SCORE_RISK_FACTORS
        if scores[component] < threshold
    ]

    check = background_check or {}
    if check.get("watchlist_matches"):
        factors.append("Watchlist matches detected")
    if _any_tampering(documents):
        factors.append("Possible document tampering detected")
    if len(check.get("risk_indicators") or []) > MAX_RISK_INDICATORS:
        factors.append("Multiple risk indicators in background check")

    return factors


def identify_strengths(
    scores: dict[str, int],
    interview_analysis: dict[str, Any] | None,
) -> list[str]:
    """Strength checklist in fixed order: scores, then full interview completion."""
    strengths = [
        message
        for component, threshold, message in _SCORE_STRENGTHS
        if scores[component] >= threshold
    ]
    if interview_analysis and interview_analysis.get("completion_rate") == 100:
        strengths.append("Completed all interview questions thoroughly")
    return strengths


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_report(
    interview: dict[str, Any] | None,
    interview_analysis: dict[str, Any] | None,
    emotions: list[dict[str, Any]],
    documents: list[dict[str, Any]],
    background_check: dict[str, Any] | None,
    scores: dict[str, int],
    final_score: int,
    risk_level: str,
    assessed_at: datetime | None = None,
) -> dict[str, Any]:
    """
    Build the detailed report for one assessment.

    Args:
        interview: Interview snapshot or None.
        interview_analysis: Analyzer output "analysis" for a completed
            interview, None otherwise.
        emotions: Emotion sample snapshots.
        documents: Document snapshots with nested "ocr_result".
        background_check: Background check snapshot or None.
        scores: The four component scores.
        final_score: Weighted final score.
        risk_level: LOW | MEDIUM | HIGH.
        assessed_at: Report timestamp; defaults to now (UTC).

    Returns:
        JSON-serializable report dict.
    """
    assessed_at = assessed_at or datetime.now(timezone.utc)
    interview = interview or {}
    check = background_check or {}
    ocr_results = [doc["ocr_result"] for doc in documents if doc.get("ocr_result")]

    report: dict[str, Any] = {
        "summary": {
            "final_score": final_score,
            "risk_level": risk_level,
            "assessment_date": assessed_at.isoformat(),
            "recommendation": RECOMMENDATIONS[risk_level],
        },
        "interview_analysis": {
            "score": scores["interview"],
            "completed": bool(interview.get("completed_at")),
            "credibility": interview.get("credibility_score") or 0,
            "sentiment": interview.get("sentiment_score") or 0,
            "duration": interview.get("duration") or 0,
            "questions_answered": len(interview.get("answers") or []),
            "key_findings": interview_analysis or {},
        },
        "emotion_analysis": {
            "score": scores["emotion"],
            "total_detections": len(emotions),
            "summary": summarize_emotions(emotions),
            "dominant_emotion": dominant_emotion(emotions),
        },
        "document_verification": {
            "score": scores["ocr"],
            "documents_submitted": len(documents),
            "documents_verified": sum(
                1 for result in ocr_results if result.get("validation_status") == "valid"
            ),
            "tampering_detected": _any_tampering(documents),
            "discrepancies": [
                discrepancy
                for result in ocr_results
                for discrepancy in result.get("discrepancies") or []
            ][:MAX_REPORTED_DISCREPANCIES],
        },
        "background_check": {
            "score": scores["background"],
            "status": check.get("status", "not_completed"),
            "watchlist_matches": len(check.get("watchlist_matches") or []),
            "risk_indicators": len(check.get("risk_indicators") or []),
            "identity_validated": bool((check.get("identity_validation") or {}).get("validated")),
        },
        "risk_factors": identify_risk_factors(scores, documents, background_check),
        "strengths": identify_strengths(scores, interview_analysis),
    }

    logger.info(
        "Report built: %d risk factor(s), %d strength(s).",
        len(report["risk_factors"]), len(report["strengths"]),
    )
    return report
