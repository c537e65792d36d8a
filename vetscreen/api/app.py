"""
vetscreen/api/app.py
=====================
HTTP API — VetScreen

Responsibility:
    - Expose POST  /api/v1/applications (registration)
    - Expose PATCH /api/v1/applications/{id}/status (reviewer decision)
    - Expose POST  /api/v1/applications/{id}/documents (multipart file)
    - Expose POST  /api/v1/applications/{id}/interview (start)
    - Expose POST  /api/v1/interviews/{id}/answers and /emotions
    - Expose POST  /api/v1/applications/{id}/assessment
    - Expose GET   /api/v1/applications/{id}/assessments (audit trail)
    - Expose POST  /api/v1/applications/{id}/background-check
    - Expose POST  /api/v1/documents/{id}/ocr (multipart image upload)
    - Expose POST  /api/v1/interviews/{id}/complete
    - Run the blocking pipeline work off the event loop
    - POST every new assessment to WEBHOOK_URL when configured

Error mapping:
    - Unknown ids                         → 404
    - OCR result already exists           → 409
    - Failed background check             → 409
    - Background sub-check failure        → 502
    - Text recognition failure            → 502
    - Invalid input                       → 422
    - Store failure                       → 500
"""

import asyncio
import logging
from typing import Any

import aiohttp
from fastapi import Body, Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vetscreen import config
from vetscreen.api.schemas import (
    AnswerCreate,
    ApplicationCreate,
    ApplicationDecision,
    EmotionSampleCreate,
)
from vetscreen.applications.service import create_application, update_application_status
from vetscreen.background.engine import perform_background_check
from vetscreen.db.models import Application, Document, EmotionSample, Interview, RiskAssessment
from vetscreen.db.session import get_db
from vetscreen.documents.service import process_document, register_document
from vetscreen.errors import (
    BackgroundCheckFailedError,
    ComponentVerificationError,
    NotFoundError,
    OCRResultExistsError,
    RecognitionError,
    SubCheckFailureError,
)
from vetscreen.interview.service import (
    complete_interview,
    create_interview,
    record_answer,
    record_emotion_sample,
)
from vetscreen.pipeline import run_assessment

logger = logging.getLogger("vetscreen.api")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="VetScreen",
    description="Applicant risk assessment & verification pipeline.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _http_error(exc: Exception) -> HTTPException:
    """Translate a domain exception into its HTTP status."""
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (BackgroundCheckFailedError, OCRResultExistsError)):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, (SubCheckFailureError, RecognitionError)):
        return HTTPException(status_code=502, detail=str(exc))
    if isinstance(exc, ValueError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, SQLAlchemyError):
        return HTTPException(status_code=500, detail="Store failure")
    if isinstance(exc, ComponentVerificationError):
        return HTTPException(
            status_code=500,
            detail=f"Assessment verification error in {exc.component}: {exc.message}",
        )
    return HTTPException(status_code=500, detail=f"Request failed: {exc}")


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def _application_payload(application: Application) -> dict[str, Any]:
    applicant = application.applicant
    return {
        "id": application.id,
        "applicant_id": applicant.id,
        "email": applicant.email,
        "full_name": applicant.full_name,
        "position": application.position,
        "status": application.status,
        "risk_score": application.risk_score,
        "risk_level": application.risk_level,
        "admin_notes": application.admin_notes,
        "created_at": _iso(application.created_at),
    }


def _document_payload(document: Document) -> dict[str, Any]:
    return {
        "id": document.id,
        "application_id": document.application_id,
        "document_type": document.document_type,
        "file_url": document.file_url,
        "file_name": document.file_name,
        "file_size": document.file_size,
        "uploaded_at": _iso(document.uploaded_at),
    }


def _interview_payload(interview: Interview) -> dict[str, Any]:
    return {
        "id": interview.id,
        "application_id": interview.application_id,
        "questions": interview.questions,
        "answers": interview.answers,
        "transcript": interview.transcript,
        "completed_at": _iso(interview.completed_at),
    }


def _emotion_payload(sample: EmotionSample) -> dict[str, Any]:
    return {
        "id": sample.id,
        "interview_id": sample.interview_id,
        "emotion": sample.emotion,
        "confidence": sample.confidence,
        "elapsed": sample.elapsed,
    }


async def _post_webhook(payload: dict[str, Any]) -> None:
    """POST the assessment to the configured webhook; failures are logged only."""
    webhook_url = config.WEBHOOK_URL
    if not webhook_url:
        logger.debug("WEBHOOK_URL not configured — skipping POST.")
        return

    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                webhook_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=aiohttp.ClientTimeout(total=30),
            ) as resp:
                logger.info("Webhook POST to %s — status %d", webhook_url, resp.status)
    except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
        logger.error("Webhook POST failed: %s", exc)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.post("/api/v1/applications", status_code=201)
def register_application(body: ApplicationCreate, db: Session = Depends(get_db)):
    """Register a pending application; a known email reuses its applicant."""
    try:
        application = create_application(
            db,
            body.email,
            body.full_name,
            body.position,
            date_of_birth=body.date_of_birth,
            nationality=body.nationality,
        )
    except Exception as exc:
        raise _http_error(exc)
    return _application_payload(application)


@app.patch("/api/v1/applications/{application_id}/status")
def decide_application(
    application_id: int,
    body: ApplicationDecision,
    db: Session = Depends(get_db),
):
    """Approve or reject a completed application."""
    try:
        application = update_application_status(
            db, application_id, body.status, admin_notes=body.admin_notes
        )
    except Exception as exc:
        raise _http_error(exc)
    return _application_payload(application)


@app.post("/api/v1/applications/{application_id}/documents", status_code=201)
async def upload_document(
    application_id: int,
    document_type: str = Form(...),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    """Store an identity document file; OCR runs separately."""
    try:
        content = await file.read()
    except Exception:
        raise HTTPException(status_code=400, detail="Failed to read uploaded file.")

    try:
        document = await asyncio.to_thread(
            register_document, db, application_id, document_type, file.filename or "", content
        )
    except Exception as exc:
        logger.error("Document upload for application %d failed: %s", application_id, exc)
        raise _http_error(exc)
    return _document_payload(document)


@app.post("/api/v1/applications/{application_id}/interview", status_code=201)
def start_interview(application_id: int, db: Session = Depends(get_db)):
    """Create the interview (idempotent) and return its question set."""
    try:
        interview = create_interview(db, application_id)
    except Exception as exc:
        raise _http_error(exc)
    return _interview_payload(interview)


@app.post("/api/v1/interviews/{interview_id}/answers")
def add_answer(interview_id: int, body: AnswerCreate, db: Session = Depends(get_db)):
    try:
        interview = record_answer(
            db, interview_id, body.question_index, body.answer, body.elapsed
        )
    except Exception as exc:
        raise _http_error(exc)
    return _interview_payload(interview)


@app.post("/api/v1/interviews/{interview_id}/emotions", status_code=201)
def add_emotion_sample(
    interview_id: int,
    body: EmotionSampleCreate,
    db: Session = Depends(get_db),
):
    try:
        sample = record_emotion_sample(
            db, interview_id, body.emotion, body.confidence, body.elapsed
        )
    except Exception as exc:
        raise _http_error(exc)
    return _emotion_payload(sample)


@app.post("/api/v1/applications/{application_id}/assessment")
async def assess_application(application_id: int, db: Session = Depends(get_db)):
    """
    Run the risk assessment of one application.

    Returns the new assessment (scores, tier, weights and detailed report).
    Every call appends a new assessment to the audit trail.
    """
    logger.info("Assessment requested for application %d", application_id)

    try:
        assessment = await asyncio.to_thread(run_assessment, application_id, db)
    except Exception as exc:
        logger.error("Assessment of application %d failed: %s", application_id, exc)
        raise _http_error(exc)

    result = assessment.to_dict()
    await _post_webhook(result)
    return JSONResponse(status_code=200, content=result)


@app.get("/api/v1/applications/{application_id}/assessments")
def list_assessments(application_id: int, db: Session = Depends(get_db)):
    """Every assessment of the application, oldest first."""
    if db.get(Application, application_id) is None:
        raise HTTPException(status_code=404, detail=f"Application {application_id} not found")

    rows = (
        db.query(RiskAssessment)
        .filter(RiskAssessment.application_id == application_id)
        .order_by(RiskAssessment.id)
        .all()
    )
    return [row.to_dict() for row in rows]


@app.post("/api/v1/applications/{application_id}/background-check")
async def run_background_check(application_id: int, db: Session = Depends(get_db)):
    try:
        check = await asyncio.to_thread(perform_background_check, db, application_id)
    except Exception as exc:
        logger.error("Background check of application %d failed: %s", application_id, exc)
        raise _http_error(exc)

    return {
        "application_id": check.application_id,
        "status": check.status,
        "score": check.score,
        "watchlist_matches": check.watchlist_matches,
        "identity_validation": check.identity_validation,
        "duplicate_checks": check.duplicate_checks,
        "risk_indicators": check.risk_indicators,
        "completed_at": check.completed_at.isoformat() if check.completed_at else None,
    }


@app.post("/api/v1/documents/{document_id}/ocr")
async def process_document_upload(
    document_id: int,
    image: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    """Recognize the uploaded document image and store its OCR result."""
    try:
        image_bytes = await image.read()
    except Exception:
        raise HTTPException(status_code=400, detail="Failed to read uploaded file.")

    logger.info("Document %d image received: %.2f KB", document_id, len(image_bytes) / 1024)

    try:
        result = await asyncio.to_thread(
            process_document,
            db,
            document_id,
            image_bytes,
            image.content_type or "image/png",
        )
    except Exception as exc:
        logger.error("Document %d processing failed: %s", document_id, exc)
        raise _http_error(exc)

    return {
        "document_id": result.document_id,
        "extracted_fields": result.extracted_fields,
        "recognition_confidence": result.recognition_confidence,
        "validation_status": result.validation_status,
        "match_score": result.match_score,
        "discrepancies": result.discrepancies,
        "tampering_detected": result.tampering_detected,
    }


@app.post("/api/v1/interviews/{interview_id}/complete")
def finish_interview(
    interview_id: int,
    duration: int = Body(..., embed=True, ge=0),
    db: Session = Depends(get_db),
):
    try:
        interview = complete_interview(db, interview_id, duration)
    except Exception as exc:
        raise _http_error(exc)

    return {
        "interview_id": interview.id,
        "credibility_score": interview.credibility_score,
        "sentiment_score": interview.sentiment_score,
        "analysis": interview.analysis,
        "completed_at": interview.completed_at.isoformat() if interview.completed_at else None,
    }
