"""
vetscreen/interview/analyzer.py
================================
Interview Transcript Analyzer — VetScreen

Responsibility:
    - Score credibility and sentiment of a completed interview from its
      transcript and answer list using lexical indicator counting
    - Produce an analysis summary (word count, average answer length,
      indicator counts, completion rate)
    - Derive the interview component score used by the risk scorer

Scoring is fully deterministic: case-insensitive substring counting against
three fixed indicator sets. Each indicator counts at most once, however many
times it appears.

This module does NOT:
    - Read or write the store (see interview/service.py)
    - Analyze emotion samples or documents
    - Combine component scores
"""

import logging
from typing import Any

from vetscreen.numeric import clamp, round_half_up

logger = logging.getLogger("vetscreen.interview.analyzer")


# ---------------------------------------------------------------------------
# Fixed interview question set
# ---------------------------------------------------------------------------

INTERVIEW_QUESTIONS: tuple[str, ...] = (
    "Can you tell me about yourself and your background?",
    "Why are you interested in this position?",
    "What are your key strengths and how do they relate to this role?",
    "Describe a challenging situation you faced and how you handled it.",
    "Where do you see yourself in five years?",
    "Why should we consider you for this position?",
)


# ---------------------------------------------------------------------------
# Lexical indicator sets
# ---------------------------------------------------------------------------

POSITIVE_INDICATORS: tuple[str, ...] = (
    "excellent", "great", "good", "passionate", "dedicated", "skilled", "experienced",
)

NEGATIVE_INDICATORS: tuple[str, ...] = (
    "difficult", "problem", "issue", "challenge", "struggle",
)

UNCERTAINTY_INDICATORS: tuple[str, ...] = (
    "maybe", "perhaps", "might", "unsure", "don't know",
)

# Credibility formula constants
CREDIBILITY_BASE: int = 70
LONG_ANSWER_THRESHOLD: int = 50   # characters
LONG_ANSWER_BONUS: int = 10
POSITIVE_CREDIBILITY: int = 3
UNCERTAIN_CREDIBILITY: int = 5
INCOMPLETE_PENALTY: int = 10

# Sentiment formula constants
SENTIMENT_BASE: int = 50
POSITIVE_SENTIMENT: int = 8
NEGATIVE_SENTIMENT: int = 5
UNCERTAIN_SENTIMENT: int = 3


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _count_indicators(text_lower: str, indicators: tuple[str, ...]) -> int:
    """Number of distinct indicators that occur as substrings of the text."""
    return sum(1 for word in indicators if word in text_lower)


def _average_answer_length(answers: list[dict[str, Any]]) -> float:
    """Mean character length of answer texts; 0 when there are no answers."""
    if not answers:
        return 0.0
    total = sum(len(a.get("answer") or "") for a in answers)
    return total / len(answers)


def _total_questions(interview: dict[str, Any]) -> int:
    questions = interview.get("questions")
    return len(questions) if questions else len(INTERVIEW_QUESTIONS)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def analyze_interview(
    transcript: str,
    answers: list[dict[str, Any]],
    total_questions: int = len(INTERVIEW_QUESTIONS),
) -> dict[str, Any]:
    """
    Score a completed interview.

    Args:
        transcript:
            Concatenated transcript text (may be empty).
        answers:
            Ordered answer dicts — {"question_index": int, "answer": str,
            "elapsed": float}. Only "answer" is read.
        total_questions:
            Number of questions asked. An interview with fewer answers than
            questions loses the completion bonus.

    Returns:
        {
            "credibility_score": int (0–100),
            "sentiment_score": int (0–100),
            "analysis": {
                "word_count", "avg_answer_length", "positive_indicators",
                "negative_indicators", "uncertainty_indicators",
                "questions_answered", "total_questions", "completion_rate"
            }
        }
    """
    transcript = transcript or ""
    answers = answers or []

    lower = transcript.lower()
    positive = _count_indicators(lower, POSITIVE_INDICATORS)
    negative = _count_indicators(lower, NEGATIVE_INDICATORS)
    uncertain = _count_indicators(lower, UNCERTAINTY_INDICATORS)

    avg_length = _average_answer_length(answers)
    answered = len(answers)

    credibility = (
        CREDIBILITY_BASE
        + (LONG_ANSWER_BONUS if avg_length > LONG_ANSWER_THRESHOLD else 0)
        + positive * POSITIVE_CREDIBILITY
        - uncertain * UNCERTAIN_CREDIBILITY
        - (INCOMPLETE_PENALTY if answered < total_questions else 0)
    )
    sentiment = (
        SENTIMENT_BASE
        + positive * POSITIVE_SENTIMENT
        - negative * NEGATIVE_SENTIMENT
        - uncertain * UNCERTAIN_SENTIMENT
    )

    completion_rate = (
        round_half_up(answered / total_questions * 100) if total_questions > 0 else 0
    )

    result: dict[str, Any] = {
        "credibility_score": int(clamp(credibility)),
        "sentiment_score": int(clamp(sentiment)),
        "analysis": {
            "word_count": len(transcript.split()),
            "avg_answer_length": round_half_up(avg_length),
            "positive_indicators": positive,
            "negative_indicators": negative,
            "uncertainty_indicators": uncertain,
            "questions_answered": answered,
            "total_questions": total_questions,
            "completion_rate": completion_rate,
        },
    }

    logger.info(
        "Interview analyzed: credibility=%d, sentiment=%d, answered=%d/%d",
        result["credibility_score"],
        result["sentiment_score"],
        answered,
        total_questions,
    )
    return result


def interview_component_score(interview: dict[str, Any] | None) -> int:
    """
    Interview component score for the risk scorer.

    An interview that is missing or has no completion timestamp scores 0;
    partial interviews do not contribute. A completed interview is
    re-analyzed and scores ``round((credibility + sentiment) / 2)``.

    Args:
        interview: Interview snapshot with keys transcript, answers,
            questions, completed_at — or None.
    """
    if not interview or not interview.get("completed_at"):
        return 0

    scored = analyze_interview(
        interview.get("transcript") or "",
        interview.get("answers") or [],
        total_questions=_total_questions(interview),
    )
    return round_half_up(
        (scored["credibility_score"] + scored["sentiment_score"]) / 2
    )
