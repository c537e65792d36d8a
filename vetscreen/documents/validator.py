"""
vetscreen/documents/validator.py
=================================
Document Validator — VetScreen

Responsibility:
    - Compare extracted identity fields with applicant-declared values and
      compute a match score (0–100) with a discrepancy list
    - Detect signs of tampering in the recognized text
    - Derive the validation status (valid | invalid | suspicious)
    - Assemble the immutable OCR result payload for one document

Compared fields: name, dateOfBirth, nationality. A field is compared only
when both the declared value and the extracted value exist; absence on
either side is neither a match nor a mismatch.

Tampering is independent of the match score and overrides it: a tampered
document is always "suspicious".

This module does NOT:
    - Extract fields (extractor.py)
    - Call the text-recognition collaborator (recognizer.py)
    - Read or write the store (service.py)
"""

import logging
import re
from enum import Enum
from typing import Any

from vetscreen.documents.extractor import extract_fields
from vetscreen.numeric import round_half_up

logger = logging.getLogger("vetscreen.documents.validator")


class ValidationStatus(str, Enum):
    """Outcome of validating one document."""

    VALID = "valid"
    INVALID = "invalid"
    SUSPICIOUS = "suspicious"


# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------

VALID_THRESHOLD: int = 80
INVALID_THRESHOLD: int = 60

# Recognition confidence (0–100) below which the text is untrustworthy
MIN_RECOGNITION_CONFIDENCE: float = 60.0

# Share of 1–2 character tokens above which text is considered garbled
SHORT_TOKEN_RATIO: float = 0.4

SUSPICIOUS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"X{3,}"),
    re.compile(r"\*{3,}"),
    re.compile(r"#{3,}"),
    re.compile(r"\[REDACTED\]", re.IGNORECASE),
    re.compile(r"\[REMOVED\]", re.IGNORECASE),
)

_DATE_SEPARATORS: re.Pattern[str] = re.compile(r"[/\-.]")

# (field, comparison kind, discrepancy reason)
_COMPARED_FIELDS: tuple[tuple[str, str, str], ...] = (
    ("name", "text", "Name mismatch"),
    ("dateOfBirth", "date", "Date of birth mismatch"),
    ("nationality", "text", "Nationality mismatch"),
)


# ---------------------------------------------------------------------------
# Field comparison
# ---------------------------------------------------------------------------


def _contains_either_way(a: str, b: str) -> bool:
    a_lower = a.lower().strip()
    b_lower = b.lower().strip()
    return a_lower in b_lower or b_lower in a_lower


def compare_dates(date1: str, date2: str) -> bool:
    """True when both dates are the same digit string once separators are removed."""
    return _DATE_SEPARATORS.sub("", date1.strip()) == _DATE_SEPARATORS.sub("", date2.strip())


def validate_fields(
    extracted: dict[str, str],
    expected: dict[str, Any],
) -> tuple[int, list[dict[str, str]]]:
    """
    Compare extracted fields with declared applicant data.

    Args:
        extracted: Output of extract_fields().
        expected: Declared values — any of "name", "dateOfBirth",
            "nationality". Missing or empty values are skipped.

    Returns:
        (match_score, discrepancies) where match_score is
        round(100 * matched / compared), or 0 when no field was comparable,
        and each discrepancy is {"field", "expected", "extracted", "reason"}.
    """
    discrepancies: list[dict[str, str]] = []
    matched = 0
    compared = 0

    for field, kind, reason in _COMPARED_FIELDS:
        expected_value = expected.get(field)
        extracted_value = extracted.get(field)
        if not expected_value or not extracted_value:
            continue

        compared += 1
        if kind == "date":
            is_match = compare_dates(extracted_value, str(expected_value))
        else:
            is_match = _contains_either_way(extracted_value, str(expected_value))

        if is_match:
            matched += 1
        else:
            discrepancies.append({
                "field": field,
                "expected": str(expected_value),
                "extracted": extracted_value,
                "reason": reason,
            })

    match_score = round_half_up(matched / compared * 100) if compared > 0 else 0

    logger.info(
        "Field validation: %d/%d matched, match_score=%d, discrepancies=%d",
        matched, compared, match_score, len(discrepancies),
    )
    return match_score, discrepancies


# ---------------------------------------------------------------------------
# Tampering detection
# ---------------------------------------------------------------------------


def detect_tampering(text: str, confidence: float) -> bool:
    """
    Flag text that shows signs of alteration or unreliable recognition.

    Flags when any of:
        - recognition confidence is below MIN_RECOGNITION_CONFIDENCE
        - a suspicious literal pattern occurs (XXX, ***, ###, [REDACTED],
          [REMOVED])
        - more than SHORT_TOKEN_RATIO of whitespace tokens are 1–2 chars long

    Args:
        text: Recognized document text.
        confidence: Recognition confidence on a 0–100 scale.
    """
    if confidence < MIN_RECOGNITION_CONFIDENCE:
        logger.warning("Tampering: recognition confidence %.1f below threshold.", confidence)
        return True

    for pattern in SUSPICIOUS_PATTERNS:
        if pattern.search(text):
            logger.warning("Tampering: suspicious pattern %r found.", pattern.pattern)
            return True

    tokens = text.split()
    short_tokens = sum(1 for token in tokens if 1 <= len(token) <= 2)
    if tokens and short_tokens > len(tokens) * SHORT_TOKEN_RATIO:
        logger.warning(
            "Tampering: %d/%d tokens are 1–2 characters long.",
            short_tokens, len(tokens),
        )
        return True

    return False


def determine_validation_status(match_score: int, tampering_detected: bool) -> str:
    """Map match score and tampering flag to valid | invalid | suspicious."""
    if tampering_detected:
        return ValidationStatus.SUSPICIOUS.value
    if match_score >= VALID_THRESHOLD:
        return ValidationStatus.VALID.value
    if match_score >= INVALID_THRESHOLD:
        return ValidationStatus.INVALID.value
    return ValidationStatus.SUSPICIOUS.value


# ---------------------------------------------------------------------------
# Public API — full pure pipeline for one document
# ---------------------------------------------------------------------------


def build_ocr_result(
    text: str,
    confidence: float,
    expected: dict[str, Any],
) -> dict[str, Any]:
    """
    Extract, compare and flag one document's recognized text.

    Args:
        text: Recognized text.
        confidence: Recognition confidence (0–100).
        expected: Declared applicant values (name, dateOfBirth, nationality).

    Returns:
        {
            "extracted_text": str,
            "extracted_fields": dict,
            "recognition_confidence": float,
            "validation_status": "valid" | "invalid" | "suspicious",
            "match_score": int,
            "discrepancies": list[dict],
            "tampering_detected": bool
        }
    """
    text = text or ""
    fields = extract_fields(text)
    match_score, discrepancies = validate_fields(fields, expected)
    tampering = detect_tampering(text, confidence)
    status = determine_validation_status(match_score, tampering)

    logger.info(
        "OCR result: status=%s, match_score=%d, tampering=%s",
        status, match_score, tampering,
    )
    return {
        "extracted_text": text,
        "extracted_fields": fields,
        "recognition_confidence": float(confidence),
        "validation_status": status,
        "match_score": match_score,
        "discrepancies": discrepancies,
        "tampering_detected": tampering,
    }
