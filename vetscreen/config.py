"""
vetscreen/config.py
====================
Runtime configuration — VetScreen

All values are read from the environment once, at import time. ``main.py``
loads ``.env`` before any module imports this one.

Scoring constants (weights, thresholds, watchlists) are NOT configured here:
they live beside the scorers that use them as immutable module-level data and
are passed as overridable parameters.
"""

import os


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


# Database
DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite:///./vetscreen.db")

# OpenAI (text recognition collaborator)
OPENAI_API_KEY: str | None = os.environ.get("OPENAI_API_KEY")
OCR_MODEL: str = os.environ.get("OCR_MODEL", "gpt-4o-mini")

# Assessment result webhook (optional)
WEBHOOK_URL: str | None = os.environ.get("WEBHOOK_URL")

# Background check — simulated external call delay and per-check timeout
BACKGROUND_CHECK_TIMEOUT: float = _float_env("BACKGROUND_CHECK_TIMEOUT", 10.0)
BACKGROUND_DELAY_MIN: float = _float_env("BACKGROUND_DELAY_MIN", 0.5)
BACKGROUND_DELAY_MAX: float = _float_env("BACKGROUND_DELAY_MAX", 1.5)

# Parallel workers for component scoring
ASSESSMENT_MAX_WORKERS: int = int(_float_env("ASSESSMENT_MAX_WORKERS", 4))

# Uploaded document files
UPLOAD_DIR: str = os.environ.get("UPLOAD_DIR", "./uploads")
