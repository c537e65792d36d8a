"""
vetscreen/documents/service.py
===============================
Document processing service — VetScreen

Registers uploaded document files on an application, then runs a document
through recognition, extraction and validation and persists the resulting
OCR record. The recognizer is invoked exactly once per document; an
existing OCR result is never overwritten.
"""

import logging
import os
import time
from typing import Any, Callable

from sqlalchemy.orm import Session

from vetscreen import config
from vetscreen.db.models import Application, Document, OCRResult
from vetscreen.documents.recognizer import recognize_text
from vetscreen.documents.validator import build_ocr_result
from vetscreen.errors import NotFoundError, OCRResultExistsError

logger = logging.getLogger("vetscreen.documents.service")

Recognizer = Callable[[bytes, str], dict[str, Any]]

DOCUMENT_TYPES: tuple[str, ...] = ("passport", "id_card", "visa", "other")


def register_document(
    session: Session,
    application_id: int,
    document_type: str,
    file_name: str,
    content: bytes,
    upload_dir: str | None = None,
) -> Document:
    """
    Store an uploaded document file and register it on the application.

    The file is written to ``<upload_dir>/<application_id>/<ms>_<name>``;
    the path becomes the document's file_url.

    Raises:
        NotFoundError: Unknown application id.
        ValueError: Unknown document type, blank file name or empty file.
    """
    if document_type not in DOCUMENT_TYPES:
        raise ValueError(
            f"Invalid document type: {document_type!r}. Must be one of {list(DOCUMENT_TYPES)}"
        )
    base_name = os.path.basename(file_name or "").strip()
    if not base_name:
        raise ValueError("File name must not be blank")
    if not content:
        raise ValueError("Uploaded file is empty")

    if session.get(Application, application_id) is None:
        raise NotFoundError("Application", application_id)

    target_dir = os.path.join(upload_dir or config.UPLOAD_DIR, str(application_id))
    os.makedirs(target_dir, exist_ok=True)
    file_path = os.path.join(target_dir, f"{int(time.time() * 1000)}_{base_name}")
    with open(file_path, "wb") as fh:
        fh.write(content)

    document = Document(
        application_id=application_id,
        document_type=document_type,
        file_url=file_path,
        file_name=base_name,
        file_size=len(content),
    )
    session.add(document)
    try:
        session.commit()
    except Exception:
        session.rollback()
        os.remove(file_path)
        raise
    session.refresh(document)

    logger.info(
        "Document %d registered for application %d: %s (%d bytes)",
        document.id, application_id, base_name, len(content),
    )
    return document


def declared_identity(document: Document) -> dict[str, Any]:
    """Applicant-declared values the document is validated against."""
    applicant = document.application.applicant
    return {
        "name": applicant.full_name,
        "dateOfBirth": applicant.date_of_birth,
        "nationality": applicant.nationality,
    }


def process_document(
    session: Session,
    document_id: int,
    image_bytes: bytes,
    mime_type: str = "image/png",
    recognizer: Recognizer = recognize_text,
) -> OCRResult:
    """
    Recognize, validate and persist the OCR result of one document.

    Raises:
        NotFoundError: Unknown document id.
        OCRResultExistsError: The document was already processed.
        RecognitionError / ValueError: From the recognizer.
        sqlalchemy.exc.SQLAlchemyError: Store failure (session rolled back).
    """
    document = session.get(Document, document_id)
    if document is None:
        raise NotFoundError("Document", document_id)
    if document.ocr_result is not None:
        raise OCRResultExistsError(document_id)

    recognized = recognizer(image_bytes, mime_type)
    payload = build_ocr_result(
        recognized["text"],
        recognized["confidence"],
        declared_identity(document),
    )

    ocr_result = OCRResult(document_id=document.id, **payload)
    session.add(ocr_result)
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise
    session.refresh(ocr_result)

    logger.info(
        "Document %d processed: status=%s, match_score=%d",
        document_id, ocr_result.validation_status, ocr_result.match_score,
    )
    return ocr_result
