"""
vetscreen/background/engine.py
===============================
Background Check Engine — VetScreen

Responsibility:
    - Run the three background sub-checks concurrently, each behind a
      simulated external-call delay and a shared deadline
    - Wait for all three (barrier) before computing the aggregate score
    - Persist the check lifecycle: pending -> completed | failed

Failure contract:
    - Any sub-check exception or timeout raises SubCheckFailureError,
      including a failure to gather the duplicate-detection pool
    - The stored check is then marked "failed" with NO score and the error
      text; the exception is re-raised to the caller
    - Nothing is retried

This module does NOT:
    - Implement the checks themselves (checks.py)
    - Combine the background score with other components
"""

import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vetscreen import config
from vetscreen.background.checks import (
    DEFAULT_FAKE_PATTERNS,
    DEFAULT_WATCHLIST,
    FakeIdentityPattern,
    WatchlistEntry,
    assemble_background_result,
    check_duplicates,
    check_watchlist,
    validate_identity,
)
from vetscreen.db.models import Applicant, Application, BackgroundCheck
from vetscreen.errors import NotFoundError, SubCheckFailureError

logger = logging.getLogger("vetscreen.background.engine")


# ---------------------------------------------------------------------------
# Concurrent execution
# ---------------------------------------------------------------------------


def _simulate_api_delay(delay_range: tuple[float, float]) -> None:
    """Stand-in for the latency of an external screening service."""
    low, high = delay_range
    if high <= 0:
        return
    time.sleep(random.uniform(max(low, 0.0), high))


def run_background_checks(
    application_id: int | None,
    name: str,
    email: str,
    other_applications: list[dict[str, Any]],
    timeout: float | None = None,
    delay_range: tuple[float, float] | None = None,
    watchlist: tuple[WatchlistEntry, ...] = DEFAULT_WATCHLIST,
    fake_patterns: tuple[FakeIdentityPattern, ...] = DEFAULT_FAKE_PATTERNS,
) -> dict[str, Any]:
    """
    Run watchlist, identity and duplicate checks in parallel.

    Args:
        application_id: Candidate application (excluded from duplicates).
        name: Declared applicant name.
        email: Declared applicant email.
        other_applications: Duplicate-detection pool.
        timeout: Seconds before an unfinished check counts as failed.
            Defaults to BACKGROUND_CHECK_TIMEOUT.
        delay_range: (min, max) simulated latency per check in seconds.
            Defaults to (BACKGROUND_DELAY_MIN, BACKGROUND_DELAY_MAX).
        watchlist: Watchlist configuration.
        fake_patterns: Fake-identity pattern configuration.

    Returns:
        Aggregated background result (see checks.assemble_background_result).

    Raises:
        SubCheckFailureError: If any sub-check raises or times out.
    """
    timeout = config.BACKGROUND_CHECK_TIMEOUT if timeout is None else timeout
    if delay_range is None:
        delay_range = (config.BACKGROUND_DELAY_MIN, config.BACKGROUND_DELAY_MAX)

    def _delayed(check: Callable[..., dict[str, Any]], *args: Any) -> dict[str, Any]:
        _simulate_api_delay(delay_range)
        return check(*args)

    sub_checks: dict[str, tuple[Callable[..., dict[str, Any]], tuple[Any, ...]]] = {
        "watchlist": (check_watchlist, (name, watchlist)),
        "identity": (validate_identity, (name, email, fake_patterns)),
        "duplicates": (check_duplicates, (application_id, email, other_applications)),
    }

    executor = ThreadPoolExecutor(max_workers=len(sub_checks))
    try:
        futures = {
            check_name: executor.submit(_delayed, fn, *args)
            for check_name, (fn, args) in sub_checks.items()
        }

        deadline = time.monotonic() + timeout
        outputs: dict[str, dict[str, Any]] = {}
        for check_name, future in futures.items():
            remaining = max(0.0, deadline - time.monotonic())
            try:
                outputs[check_name] = future.result(timeout=remaining)
            except FutureTimeoutError as exc:
                raise SubCheckFailureError(
                    check_name, f"timed out after {timeout:.1f}s"
                ) from exc
            except Exception as exc:
                raise SubCheckFailureError(check_name, str(exc)) from exc
    finally:
        # Never block on a hung check
        executor.shutdown(wait=False, cancel_futures=True)

    return assemble_background_result(
        outputs["watchlist"], outputs["identity"], outputs["duplicates"]
    )


# ---------------------------------------------------------------------------
# Store-backed lifecycle
# ---------------------------------------------------------------------------


def _duplicate_pool(session: Session, application_id: int) -> list[dict[str, Any]]:
    """Every other application with its declared email."""
    rows = (
        session.query(Application.id, Application.created_at, Applicant.email)
        .join(Applicant, Application.applicant_id == Applicant.id)
        .filter(Application.id != application_id)
        .all()
    )
    return [
        {
            "application_id": row.id,
            "email": row.email,
            "created_at": row.created_at.isoformat() if row.created_at else None,
        }
        for row in rows
    ]


def _mark_failed(session: Session, check_id: int, exc: Exception) -> None:
    """Record a failed run: no score, the error text, status "failed"."""
    logger.error("Background check %d failed: %s", check_id, exc)
    session.rollback()
    check = session.get(BackgroundCheck, check_id)
    check.status = "failed"
    check.score = None
    check.error = str(exc)
    check.completed_at = None
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Could not mark background check %d as failed", check_id)
        raise


def perform_background_check(
    session: Session,
    application_id: int,
    timeout: float | None = None,
    delay_range: tuple[float, float] | None = None,
) -> BackgroundCheck:
    """
    Run and persist the background check of one application.

    A previous check record for the application is reset to "pending" and
    re-run, so a failed check can be retried explicitly.

    Raises:
        NotFoundError: Unknown application id.
        SubCheckFailureError: A sub-check failed, or the duplicate pool
            could not be read (record marked "failed").
        sqlalchemy.exc.SQLAlchemyError: Store failure (record marked
            "failed" when the store still accepts the write).
    """
    application = session.get(Application, application_id)
    if application is None:
        raise NotFoundError("Application", application_id)
    applicant = application.applicant

    check = application.background_check
    if check is None:
        check = BackgroundCheck(application_id=application_id)
        session.add(check)
    check.status = "pending"
    check.score = None
    check.error = None
    check.completed_at = None
    session.commit()

    logger.info("Background check %d started for application %d.", check.id, application_id)

    check_id = check.id
    try:
        try:
            pool = _duplicate_pool(session, application_id)
        except Exception as exc:
            raise SubCheckFailureError("duplicates", str(exc)) from exc

        result = run_background_checks(
            application_id,
            applicant.full_name,
            applicant.email,
            pool,
            timeout=timeout,
            delay_range=delay_range,
        )

        check.status = "completed"
        check.watchlist_matches = result["watchlist"]["matches"]
        check.identity_validation = result["identity"]
        check.duplicate_checks = result["duplicates"]["duplicates"]
        check.risk_indicators = result["risk_indicators"]
        check.score = result["score"]
        check.completed_at = datetime.now(timezone.utc)
        session.commit()
    except Exception as exc:
        _mark_failed(session, check_id, exc)
        raise

    session.refresh(check)

    logger.info("Background check %d completed: score=%d", check.id, check.score)
    return check
