"""
vetscreen/interview/service.py
===============================
Interview lifecycle service — VetScreen

Store-backed operations around one application's interview: creation with
the fixed question set, answer and emotion-sample recording, and
completion. Credibility and sentiment are computed exactly once, when the
interview is completed.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from vetscreen.db.models import Application, EmotionSample, Interview
from vetscreen.emotion.aggregator import validate_sample
from vetscreen.errors import NotFoundError
from vetscreen.interview.analyzer import INTERVIEW_QUESTIONS, analyze_interview

logger = logging.getLogger("vetscreen.interview.service")


def _get_interview(session: Session, interview_id: int) -> Interview:
    interview = session.get(Interview, interview_id)
    if interview is None:
        raise NotFoundError("Interview", interview_id)
    return interview


def _commit(session: Session) -> None:
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise


def create_interview(session: Session, application_id: int) -> Interview:
    """
    Create the interview of an application and move it to "in_progress".

    Returns the existing interview when one was already created.
    """
    application = session.get(Application, application_id)
    if application is None:
        raise NotFoundError("Application", application_id)
    if application.interview is not None:
        return application.interview

    interview = Interview(
        application_id=application_id,
        questions=[{"id": idx, "question": q} for idx, q in enumerate(INTERVIEW_QUESTIONS)],
        answers=[],
        transcript="",
        duration=0,
    )
    session.add(interview)
    if application.status == "pending":
        application.status = "in_progress"
    _commit(session)
    session.refresh(interview)

    logger.info("Interview %d created for application %d.", interview.id, application_id)
    return interview


def record_answer(
    session: Session,
    interview_id: int,
    question_index: int,
    answer: str,
    elapsed: float,
) -> Interview:
    """Append one answer and extend the transcript."""
    interview = _get_interview(session, interview_id)
    if interview.completed_at is not None:
        raise ValueError(f"Interview {interview_id} is already completed")
    if not 0 <= question_index < len(interview.questions or []):
        raise ValueError(f"Question index out of range: {question_index}")

    # JSON columns track reassignment, not in-place mutation
    interview.answers = [
        *(interview.answers or []),
        {"question_index": question_index, "answer": answer, "elapsed": elapsed},
    ]
    interview.transcript = " ".join(part for part in (interview.transcript, answer) if part)
    _commit(session)
    return interview


def record_emotion_sample(
    session: Session,
    interview_id: int,
    emotion: str,
    confidence: float,
    elapsed: float,
) -> EmotionSample:
    """Store one periodic emotion observation."""
    _get_interview(session, interview_id)
    validate_sample({"emotion": emotion, "confidence": confidence})

    sample = EmotionSample(
        interview_id=interview_id,
        emotion=emotion,
        confidence=float(confidence),
        elapsed=float(elapsed),
    )
    session.add(sample)
    _commit(session)
    return sample


def complete_interview(session: Session, interview_id: int, duration: int) -> Interview:
    """
    Mark the interview completed and store its credibility and sentiment.

    Raises:
        NotFoundError: Unknown interview id.
        ValueError: The interview is already completed.
    """
    interview = _get_interview(session, interview_id)
    if interview.completed_at is not None:
        raise ValueError(f"Interview {interview_id} is already completed")

    scored = analyze_interview(
        interview.transcript or "",
        interview.answers or [],
        total_questions=len(interview.questions or []) or len(INTERVIEW_QUESTIONS),
    )

    interview.duration = duration
    interview.credibility_score = scored["credibility_score"]
    interview.sentiment_score = scored["sentiment_score"]
    interview.analysis = scored["analysis"]
    interview.completed_at = datetime.now(timezone.utc)
    _commit(session)
    session.refresh(interview)

    logger.info(
        "Interview %d completed: credibility=%d, sentiment=%d",
        interview_id, interview.credibility_score, interview.sentiment_score,
    )
    return interview
