"""
vetscreen/pipeline.py
======================
Risk Scoring Orchestrator — VetScreen Integration Layer

Responsibility:
    1. Load and snapshot every piece of evidence for one application
    2. Compute the four component scores concurrently (barrier before
       aggregation)
    3. Combine them into the final score and risk tier
    4. Build the explainable report and verify the assembled output
    5. Persist the assessment and transition the application, in ONE commit

Step order:
    Step 1: Snapshot     → interview, emotion samples, documents, background
    Step 2: Components   → interview | emotion | ocr | background (parallel)
    Step 3: Aggregation  → final_score + risk_level
    Step 4: Report       → detailed_report
    Step 5: Persistence  → RiskAssessment row + Application update

Runs for the same application are serialized; runs for different
applications proceed independently. Every run appends a new assessment
row, so earlier results remain as the audit trail.

This layer MUST NOT:
    - Score any signal itself (each component owns its formula)
    - Hand ORM objects to worker threads (workers get plain-dict snapshots)
    - Coerce a failed background check into a number
"""

import logging
import threading
import weakref
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vetscreen import config
from vetscreen.db.models import Application, RiskAssessment
from vetscreen.emotion.aggregator import calculate_emotion_score
from vetscreen.errors import BackgroundCheckFailedError, NotFoundError
from vetscreen.interview.analyzer import (
    INTERVIEW_QUESTIONS,
    analyze_interview,
    interview_component_score,
)
from vetscreen.output_validator import verify_assessment, verify_component_scores
from vetscreen.risk.report import build_report
from vetscreen.risk.scorer import (
    DEFAULT_WEIGHTS,
    background_component_score,
    calculate_ocr_score,
    compute_final_score,
    determine_risk_tier,
    validate_weights,
)

logger = logging.getLogger("vetscreen.pipeline")


# =====================================================================
# Per-application serialization
# =====================================================================

_locks_guard = threading.Lock()
# Entries vanish once no run holds the lock
_application_locks: weakref.WeakValueDictionary = weakref.WeakValueDictionary()


def _application_lock(application_id: int) -> threading.Lock:
    with _locks_guard:
        lock = _application_locks.get(application_id)
        if lock is None:
            lock = threading.Lock()
            _application_locks[application_id] = lock
        return lock


# =====================================================================
# Evidence snapshots — plain dicts, safe to hand to worker threads
# =====================================================================


def _snapshot_interview(application: Application) -> dict[str, Any] | None:
    interview = application.interview
    if interview is None:
        return None
    return {
        "id": interview.id,
        "questions": list(interview.questions or []),
        "answers": list(interview.answers or []),
        "transcript": interview.transcript or "",
        "duration": interview.duration or 0,
        "credibility_score": interview.credibility_score,
        "sentiment_score": interview.sentiment_score,
        "completed_at": interview.completed_at.isoformat() if interview.completed_at else None,
    }


def _snapshot_emotions(application: Application) -> list[dict[str, Any]]:
    if application.interview is None:
        return []
    return [
        {"emotion": s.emotion, "confidence": s.confidence, "elapsed": s.elapsed}
        for s in application.interview.emotion_samples
    ]


def _snapshot_documents(application: Application) -> list[dict[str, Any]]:
    snapshots = []
    for document in application.documents:
        result = document.ocr_result
        snapshots.append({
            "id": document.id,
            "document_type": document.document_type,
            "file_name": document.file_name,
            "ocr_result": None if result is None else {
                "extracted_fields": dict(result.extracted_fields or {}),
                "recognition_confidence": result.recognition_confidence,
                "validation_status": result.validation_status,
                "match_score": result.match_score,
                "discrepancies": list(result.discrepancies or []),
                "tampering_detected": bool(result.tampering_detected),
            },
        })
    return snapshots


def _snapshot_background(application: Application) -> dict[str, Any] | None:
    check = application.background_check
    if check is None:
        return None
    return {
        "application_id": application.id,
        "status": check.status,
        "score": check.score,
        "watchlist_matches": list(check.watchlist_matches or []),
        "identity_validation": check.identity_validation,
        "duplicate_checks": list(check.duplicate_checks or []),
        "risk_indicators": list(check.risk_indicators or []),
    }


def _interview_analysis(interview: dict[str, Any] | None) -> dict[str, Any] | None:
    """Analyzer findings for a completed interview, None otherwise."""
    if not interview or not interview.get("completed_at"):
        return None
    scored = analyze_interview(
        interview["transcript"],
        interview["answers"],
        total_questions=len(interview["questions"]) or len(INTERVIEW_QUESTIONS),
    )
    return scored["analysis"]


# =====================================================================
# Component scoring — concurrent, barrier before aggregation
# =====================================================================


def _compute_component_scores(
    interview: dict[str, Any] | None,
    emotions: list[dict[str, Any]],
    documents: list[dict[str, Any]],
    background: dict[str, Any] | None,
    max_workers: int,
) -> dict[str, int]:
    """
    Run the four component scorers in parallel and wait for all of them.

    Raises:
        BackgroundCheckFailedError: The background check failed.
        ValueError: Invalid evidence (e.g. malformed emotion sample).
    """
    jobs = {
        "interview": (interview_component_score, interview),
        "emotion": (calculate_emotion_score, emotions),
        "ocr": (calculate_ocr_score, documents),
        "background": (background_component_score, background),
    }

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(jobs)))) as executor:
        futures = {
            component: executor.submit(fn, evidence)
            for component, (fn, evidence) in jobs.items()
        }
        # result() re-raises the first worker exception in component order
        return {component: future.result() for component, future in futures.items()}


# =====================================================================
# Main orchestration
# =====================================================================


def run_assessment(
    application_id: int,
    session: Session,
    weights: Mapping[str, float] | None = None,
    max_workers: int | None = None,
) -> RiskAssessment:
    """
    Assess one application end to end and persist the result.

    Args:
        application_id: Application to assess.
        session: SQLAlchemy session owned by the caller.
        weights: Optional override of DEFAULT_WEIGHTS (validated).
        max_workers: Parallel component scorers. Defaults to
            ASSESSMENT_MAX_WORKERS.

    Returns:
        The newly inserted RiskAssessment.

    Raises:
        NotFoundError: Unknown application id.
        BackgroundCheckFailedError: The background check failed; nothing
            is written.
        ComponentVerificationError: A component or the assembled output is
            out of contract; nothing is written.
        ValueError: Invalid weights or evidence.
        sqlalchemy.exc.SQLAlchemyError: Store failure; the session is rolled
            back and the application is unchanged.
    """
    active_weights = dict(validate_weights(weights or DEFAULT_WEIGHTS))
    max_workers = config.ASSESSMENT_MAX_WORKERS if max_workers is None else max_workers

    with _application_lock(application_id):
        application = session.get(Application, application_id)
        if application is None:
            raise NotFoundError("Application", application_id)

        # ==============================================================
        # STEP 1 — Snapshot evidence
        # ==============================================================
        interview = _snapshot_interview(application)
        emotions = _snapshot_emotions(application)
        documents = _snapshot_documents(application)
        background = _snapshot_background(application)

        if background is not None and background["status"] == "failed":
            logger.error("Application %d: background check failed, refusing to score.", application_id)
            raise BackgroundCheckFailedError(application_id)

        logger.info(
            "Application %d: interview=%s, emotion samples=%d, documents=%d, background=%s",
            application_id,
            "completed" if interview and interview["completed_at"] else ("incomplete" if interview else "none"),
            len(emotions),
            len(documents),
            background["status"] if background else "none",
        )

        # ==============================================================
        # STEP 2 — Component scores
        # ==============================================================
        scores = _compute_component_scores(
            interview, emotions, documents, background, max_workers
        )
        verify_component_scores(scores)

        # ==============================================================
        # STEP 3 — Aggregation
        # ==============================================================
        final_score = compute_final_score(scores, active_weights)
        risk_level = determine_risk_tier(final_score)

        # ==============================================================
        # STEP 4 — Report
        # ==============================================================
        report = build_report(
            interview=interview,
            interview_analysis=_interview_analysis(interview),
            emotions=emotions,
            documents=documents,
            background_check=background,
            scores=scores,
            final_score=final_score,
            risk_level=risk_level,
        )
        verify_assessment(final_score, risk_level, report)

        # ==============================================================
        # STEP 5 — Persistence (single commit)
        # ==============================================================
        assessment = RiskAssessment(
            application_id=application_id,
            interview_score=scores["interview"],
            emotion_score=scores["emotion"],
            ocr_score=scores["ocr"],
            background_score=scores["background"],
            final_score=final_score,
            risk_level=risk_level,
            weights=active_weights,
            detailed_report=report,
        )
        try:
            session.add(assessment)
            application.risk_score = final_score
            application.risk_level = risk_level
            application.status = "completed"
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.error("Application %d: store failure, assessment rolled back.", application_id)
            raise
        session.refresh(assessment)

    logger.info(
        "Application %d assessed: final_score=%d, risk_level=%s (assessment %d)",
        application_id, final_score, risk_level, assessment.id,
    )
    return assessment
