"""
vetscreen/applications/service.py
==================================
Application lifecycle service — VetScreen

Responsibility:
    - Register an application for a (new or returning) applicant
    - Record the reviewer decision on an assessed application:
      completed -> approved | rejected, with optional reviewer notes

Status lifecycle:
    pending -> in_progress   (interview started, interview/service.py)
    any     -> completed     (risk assessment stored, pipeline.py)
    completed -> approved | rejected   (this module)

This module does NOT:
    - Score anything
    - Run background checks or document processing
"""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from vetscreen.db.models import Applicant, Application
from vetscreen.errors import NotFoundError

logger = logging.getLogger("vetscreen.applications.service")

DECISION_STATUSES: tuple[str, ...] = ("approved", "rejected")


def _commit(session: Session) -> None:
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise


def create_application(
    session: Session,
    email: str,
    full_name: str,
    position: str,
    date_of_birth: str | None = None,
    nationality: str | None = None,
) -> Application:
    """
    Register a pending application.

    An applicant with the same email (case-insensitive) is reused, so a
    re-application links to the same person; declared date of birth and
    nationality are filled in when they were unknown.

    Raises:
        ValueError: Blank email, name or position, or an email without "@".
    """
    email = (email or "").strip()
    full_name = (full_name or "").strip()
    position = (position or "").strip()
    if "@" not in email:
        raise ValueError(f"Invalid email address: {email!r}")
    if not full_name:
        raise ValueError("Applicant name must not be blank")
    if not position:
        raise ValueError("Position must not be blank")

    applicant = (
        session.query(Applicant)
        .filter(func.lower(Applicant.email) == email.lower())
        .first()
    )
    if applicant is None:
        applicant = Applicant(
            email=email,
            full_name=full_name,
            date_of_birth=date_of_birth,
            nationality=nationality,
        )
        session.add(applicant)
    else:
        applicant.date_of_birth = applicant.date_of_birth or date_of_birth
        applicant.nationality = applicant.nationality or nationality

    application = Application(applicant=applicant, position=position, status="pending")
    session.add(application)
    _commit(session)
    session.refresh(application)

    logger.info(
        "Application %d registered for applicant %d (%s).",
        application.id, applicant.id, position,
    )
    return application


def update_application_status(
    session: Session,
    application_id: int,
    status: str,
    admin_notes: str | None = None,
) -> Application:
    """
    Record the reviewer decision on an assessed application.

    Only ``completed -> approved | rejected`` is allowed. Notes replace any
    earlier notes when given.

    Raises:
        NotFoundError: Unknown application id.
        ValueError: Unknown decision, or the application is not completed.
    """
    if status not in DECISION_STATUSES:
        raise ValueError(
            f"Invalid decision: {status!r}. Must be one of {list(DECISION_STATUSES)}"
        )

    application = session.get(Application, application_id)
    if application is None:
        raise NotFoundError("Application", application_id)
    if application.status != "completed":
        raise ValueError(
            f"Application {application_id} is {application.status!r}; "
            "only a completed application can be approved or rejected"
        )

    application.status = status
    if admin_notes:
        application.admin_notes = admin_notes
    _commit(session)

    logger.info("Application %d %s.", application_id, status)
    return application
