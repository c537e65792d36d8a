"""
vetscreen/documents/extractor.py
=================================
Identity Field Extractor — VetScreen

Responsibility:
    - Extract structured identity fields from raw recognized document text
    - Each field is located by a labeled-field pattern: a label in English,
      Spanish or French followed by a value of the expected shape

Extracted keys (a key is present only when its pattern matched):
    name, dateOfBirth, passportNumber, idNumber, nationality, country,
    expiryDate

Patterns are case-insensitive and independent of each other. A miss is not
an error: the field is simply omitted.

This module does NOT:
    - Compare extracted values with declared applicant data (validator.py)
    - Detect tampering
    - Call the text-recognition collaborator
"""

import logging
import re

logger = logging.getLogger("vetscreen.documents.extractor")


# ---------------------------------------------------------------------------
# Value shapes
# ---------------------------------------------------------------------------

# Capitalized words on one line ("John Doe", "United Kingdom").
_WORD = r"[A-Z][a-z]+"
_WORDS_TWO_PLUS = rf"{_WORD}(?:[ \t]+{_WORD})+"
_WORDS_ONE_PLUS = rf"{_WORD}(?:[ \t]+{_WORD})*"

# D/M/Y with "/", "-" or "." separators.
_DATE = r"\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}"

# Optional "No", "No.", "Number" or "#" after an identifier label.
_NUMBER_SUFFIX = r"(?:[ \t]*(?:no\.?|number|num|n°|#))?"

# Label and value share a line
_SEP = r"[: \t]+"

# Identifier values carry at least one digit, so a label word is never taken
_HAS_DIGIT = r"(?=[A-Z]*\d)"


# ---------------------------------------------------------------------------
# Labeled field patterns
# ---------------------------------------------------------------------------

FIELD_PATTERNS: dict[str, re.Pattern[str]] = {
    "name": re.compile(
        rf"\b(?:full[ \t]+name|surname|name|nombre|nom)\b{_SEP}({_WORDS_TWO_PLUS})",
        re.IGNORECASE,
    ),
    "dateOfBirth": re.compile(
        rf"(?:date[ \t]+of[ \t]+birth|fecha[ \t]+de[ \t]+nacimiento|"
        rf"date[ \t]+de[ \t]+naissance|birth|born|dob)\b(?:[ \t]+date)?{_SEP}({_DATE})",
        re.IGNORECASE,
    ),
    "passportNumber": re.compile(
        rf"\b(?:passport|pasaporte|passeport)\b{_NUMBER_SUFFIX}[: \t]*({_HAS_DIGIT}[A-Z0-9]{{6,9}})\b",
        re.IGNORECASE,
    ),
    "idNumber": re.compile(
        rf"\b(?:identification|identity|id)\b{_NUMBER_SUFFIX}[: \t]*({_HAS_DIGIT}[A-Z0-9]{{5,15}})\b",
        re.IGNORECASE,
    ),
    "nationality": re.compile(
        rf"\b(?:nationality|nacionalidad|ciudadan[ií]a|nationalit[ée])\b{_SEP}({_WORD})",
        re.IGNORECASE,
    ),
    "country": re.compile(
        rf"\b(?:country|pa[ií]s|pays)\b{_SEP}({_WORDS_ONE_PLUS})",
        re.IGNORECASE,
    ),
    "expiryDate": re.compile(
        rf"(?:expiry|expiration|v[aá]lido[ \t]+hasta|expire|vencimiento)\w*(?:[ \t]+date)?{_SEP}({_DATE})",
        re.IGNORECASE,
    ),
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_fields(text: str) -> dict[str, str]:
    """
    Extract identity fields from recognized document text.

    Args:
        text: Raw text returned by the text-recognition collaborator.

    Returns:
        Mapping of field name to extracted value, containing only the fields
        that were found. Empty for empty input.
    """
    if not text or not text.strip():
        return {}

    fields: dict[str, str] = {}
    for field, pattern in FIELD_PATTERNS.items():
        match = pattern.search(text)
        if match:
            fields[field] = match.group(1).strip()

    logger.info(
        "Extracted %d/%d field(s): %s",
        len(fields), len(FIELD_PATTERNS), sorted(fields),
    )
    return fields
