"""
vetscreen/background/checks.py
===============================
Background Sub-Checks — VetScreen

Responsibility:
    - Watchlist screening of the applicant name
    - Identity validation (fake-identity name shapes, disposable emails,
      implausibly short names)
    - Duplicate-application detection by email similarity
    - Aggregate background score (0–100) and the unioned risk-indicator list

The watchlist and fake-identity patterns are immutable configuration data
passed into the checks; the defaults below can be replaced per call.

Duplicate detection excludes the candidate's own application and any
application declared with the candidate's exact email (same applicant
re-applying). Only *different* emails that normalize to the same string or
share the local part are reported.

This module does NOT:
    - Run checks concurrently or apply timeouts (engine.py)
    - Read or write the store
"""

import logging
import re
from dataclasses import dataclass
from typing import Any

from vetscreen.numeric import clamp

logger = logging.getLogger("vetscreen.background.checks")


# ---------------------------------------------------------------------------
# Immutable configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WatchlistEntry:
    name: str
    reason: str
    severity: str  # "high" | "medium"


@dataclass(frozen=True)
class FakeIdentityPattern:
    pattern: re.Pattern[str]
    reason: str


DEFAULT_WATCHLIST: tuple[WatchlistEntry, ...] = (
    WatchlistEntry("john doe", "fraud", "high"),
    WatchlistEntry("jane smith", "identity theft", "medium"),
    WatchlistEntry("robert johnson", "document forgery", "high"),
)

DEFAULT_FAKE_PATTERNS: tuple[FakeIdentityPattern, ...] = (
    FakeIdentityPattern(re.compile(r"test\s*user", re.IGNORECASE), "Test account pattern"),
    FakeIdentityPattern(re.compile(r"fake\s*name", re.IGNORECASE), "Fake name pattern"),
    FakeIdentityPattern(re.compile(r"^[a-z]{1,3}[0-9]{3,}$", re.IGNORECASE), "Generated name pattern"),
)

DISPOSABLE_EMAIL_PATTERN: re.Pattern[str] = re.compile(r"temp|disposable|fake|test", re.IGNORECASE)

DATABASES_SEARCHED: tuple[str, ...] = ("INTERPOL", "FBI", "OFAC", "EU Sanctions")

MIN_NAME_LENGTH: int = 3

# Score deductions
WATCHLIST_PENALTY: int = 30
HIGH_ISSUE_PENALTY: int = 20
MEDIUM_ISSUE_PENALTY: int = 10
DUPLICATE_PENALTY: int = 15
IDENTITY_ISSUE_CONFIDENCE_PENALTY: int = 25

_EMAIL_PUNCTUATION: re.Pattern[str] = re.compile(r"[.\-_]")


# ---------------------------------------------------------------------------
# Watchlist
# ---------------------------------------------------------------------------


def check_watchlist(
    name: str,
    watchlist: tuple[WatchlistEntry, ...] = DEFAULT_WATCHLIST,
) -> dict[str, Any]:
    """
    Screen a name against the watchlist.

    A match is case-insensitive containment in either direction
    ("John Doe Smith" matches "john doe"). Blank names match nothing.
    """
    normalized = (name or "").lower().strip()

    matches: list[dict[str, str]] = []
    if normalized:
        for entry in watchlist:
            entry_name = entry.name.lower()
            if entry_name in normalized or normalized in entry_name:
                matches.append({
                    "name": entry.name,
                    "reason": entry.reason,
                    "severity": entry.severity,
                    "database": "Global Watchlist",
                })

    if matches:
        logger.warning("Watchlist: %d match(es) for screened name.", len(matches))

    return {
        "checked": True,
        "databases_searched": list(DATABASES_SEARCHED),
        "matches": matches,
        "clean": not matches,
    }


# ---------------------------------------------------------------------------
# Identity validation
# ---------------------------------------------------------------------------


def validate_identity(
    name: str,
    email: str,
    fake_patterns: tuple[FakeIdentityPattern, ...] = DEFAULT_FAKE_PATTERNS,
) -> dict[str, Any]:
    """
    Look for signs of a fabricated identity.

    Returns:
        {"validated": bool, "issues": [{"type", "description", "severity"}],
         "confidence": int}  — confidence = max(0, 100 - 25 * issues)
    """
    name = name or ""
    issues: list[dict[str, str]] = []

    for fake in fake_patterns:
        if fake.pattern.search(name):
            issues.append({
                "type": "fake_identity",
                "description": fake.reason,
                "severity": "high",
            })

    if email and DISPOSABLE_EMAIL_PATTERN.search(email):
        issues.append({
            "type": "suspicious_email",
            "description": "Disposable or temporary email pattern detected",
            "severity": "medium",
        })

    if len(name) < MIN_NAME_LENGTH:
        issues.append({
            "type": "invalid_name",
            "description": "Name too short to be valid",
            "severity": "high",
        })

    return {
        "validated": not issues,
        "issues": issues,
        "confidence": max(0, 100 - len(issues) * IDENTITY_ISSUE_CONFIDENCE_PENALTY),
    }


# ---------------------------------------------------------------------------
# Duplicate detection
# ---------------------------------------------------------------------------


def _normalize_email(email: str) -> str:
    return _EMAIL_PUNCTUATION.sub("", email.lower())


def is_similar_email(email1: str, email2: str) -> bool:
    """
    True when two emails normalize equal or share the same local part.

    Normalization lowercases and strips ".", "-" and "_", so
    "j.doe@mail.com" ~ "jdoe@mail.com"; "jdoe@mail.com" ~ "jdoe@other.com"
    by local part.
    """
    if not email1 or not email2:
        return False
    if _normalize_email(email1) == _normalize_email(email2):
        return True
    return email1.split("@")[0].lower() == email2.split("@")[0].lower()


def check_duplicates(
    application_id: int | None,
    email: str,
    other_applications: list[dict[str, Any]],
) -> dict[str, Any]:
    """
    Find other applications declared with a similar email.

    Args:
        application_id: The candidate's application (excluded).
        email: The candidate's email.
        other_applications: Candidate pool — each
            {"application_id": int, "email": str, "created_at": str | None}.

    Returns:
        {"checked": True, "duplicates": [...], "has_duplicates": bool}
    """
    own = (email or "").lower().strip()
    duplicates: list[dict[str, Any]] = []

    for other in other_applications:
        other_email = other.get("email") or ""
        if other.get("application_id") == application_id:
            continue
        if other_email.lower().strip() == own:
            continue
        if is_similar_email(email, other_email):
            duplicates.append({
                "type": "similar_email",
                "email": other_email,
                "application_id": other.get("application_id"),
                "created_at": other.get("created_at"),
                "similarity": "high",
            })

    if duplicates:
        logger.warning("Duplicate check: %d similar application(s).", len(duplicates))

    return {
        "checked": True,
        "duplicates": duplicates,
        "has_duplicates": bool(duplicates),
    }


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def calculate_background_score(
    watchlist: dict[str, Any],
    identity: dict[str, Any],
    duplicates: dict[str, Any],
) -> int:
    """100 minus per-finding deductions, clamped to [0, 100]."""
    issues = identity["issues"]
    score = (
        100
        - len(watchlist["matches"]) * WATCHLIST_PENALTY
        - sum(1 for i in issues if i["severity"] == "high") * HIGH_ISSUE_PENALTY
        - sum(1 for i in issues if i["severity"] == "medium") * MEDIUM_ISSUE_PENALTY
        - len(duplicates["duplicates"]) * DUPLICATE_PENALTY
    )
    return int(clamp(score))


def collect_risk_indicators(
    watchlist: dict[str, Any],
    identity: dict[str, Any],
    duplicates: dict[str, Any],
) -> list[dict[str, Any]]:
    """Union of watchlist matches, identity issues and duplicates."""
    return [
        *({"type": "watchlist", **match} for match in watchlist["matches"]),
        *identity["issues"],
        *duplicates["duplicates"],
    ]


def assemble_background_result(
    watchlist: dict[str, Any],
    identity: dict[str, Any],
    duplicates: dict[str, Any],
) -> dict[str, Any]:
    """Combine the three sub-check outputs into the background result."""
    result = {
        "watchlist": watchlist,
        "identity": identity,
        "duplicates": duplicates,
        "risk_indicators": collect_risk_indicators(watchlist, identity, duplicates),
        "score": calculate_background_score(watchlist, identity, duplicates),
    }
    logger.info(
        "Background result: score=%d, indicators=%d",
        result["score"], len(result["risk_indicators"]),
    )
    return result


def evaluate_background(
    application_id: int | None,
    name: str,
    email: str,
    other_applications: list[dict[str, Any]],
    watchlist: tuple[WatchlistEntry, ...] = DEFAULT_WATCHLIST,
    fake_patterns: tuple[FakeIdentityPattern, ...] = DEFAULT_FAKE_PATTERNS,
) -> dict[str, Any]:
    """
    Run all three sub-checks sequentially and aggregate them.

    Pure scoring entry point; the engine runs the same checks concurrently.
    """
    return assemble_background_result(
        check_watchlist(name, watchlist),
        validate_identity(name, email, fake_patterns),
        check_duplicates(application_id, email, other_applications),
    )
