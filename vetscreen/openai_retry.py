"""
vetscreen/openai_retry.py
==========================
OpenAI call retry helper — VetScreen

Wraps ``client.chat.completions.create`` with exponential back-off on
transient failures (rate limits, timeouts, connection errors and 5xx
responses). Used only by the text-recognition collaborator; the assessment
pipeline itself never retries.
"""

import logging
import time
from typing import Any

import openai

logger = logging.getLogger("vetscreen.openai_retry")

MAX_RETRIES: int = 3          # attempts after the first one
BASE_DELAY: float = 1.0       # seconds
MAX_DELAY: float = 20.0
BACKOFF_FACTOR: float = 2.0

_RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


def is_retryable(exc: Exception) -> bool:
    """True for OpenAI errors worth another attempt."""
    if isinstance(exc, (openai.RateLimitError, openai.APITimeoutError, openai.APIConnectionError)):
        return True
    if isinstance(exc, openai.APIStatusError):
        return exc.status_code in _RETRYABLE_STATUS_CODES
    return False


def chat_completions_with_retry(
    client: Any,
    max_retries: int = MAX_RETRIES,
    **kwargs: Any,
) -> Any:
    """
    Call ``client.chat.completions.create(**kwargs)``, retrying transient errors.

    Args:
        client: An ``openai.OpenAI`` client.
        max_retries: Retries after the first attempt.
        **kwargs: Passed through to ``chat.completions.create``.

    Returns:
        The ChatCompletion response.

    Raises:
        The original exception when it is not retryable or retries run out.
    """
    delay = BASE_DELAY
    attempt = 0

    while True:
        try:
            return client.chat.completions.create(**kwargs)
        except Exception as exc:
            if not is_retryable(exc):
                logger.warning("OpenAI call failed (not retryable): %s", exc)
                raise
            if attempt >= max_retries:
                logger.error("OpenAI call failed after %d attempt(s): %s", attempt + 1, exc)
                raise

            attempt += 1
            logger.warning(
                "OpenAI call failed (attempt %d/%d): %s — retrying in %.1fs",
                attempt, max_retries + 1, exc, delay,
            )
            time.sleep(delay)
            delay = min(delay * BACKOFF_FACTOR, MAX_DELAY)
