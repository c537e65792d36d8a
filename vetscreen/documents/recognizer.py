"""
vetscreen/documents/recognizer.py
==================================
Text Recognition Collaborator — VetScreen

Responsibility:
    - Turn an uploaded identity-document image into recognized text plus a
      recognition confidence (0–100)
    - Validate the model response before it reaches the validator

Backed by the OpenAI vision API (gpt-4o-mini by default, temperature 0). The
model is asked for a strict JSON object {"text": str, "confidence": number}.

This module does NOT:
    - Extract or compare identity fields
    - Detect tampering
    - Store the image or the result
"""

import base64
import json
import logging
from typing import Any

from openai import OpenAI

from vetscreen import config
from vetscreen.errors import RecognitionError
from vetscreen.openai_retry import chat_completions_with_retry

logger = logging.getLogger("vetscreen.documents.recognizer")


_SUPPORTED_MIME_TYPES: set[str] = {"image/png", "image/jpeg", "image/webp", "image/gif"}

_SYSTEM_PROMPT: str = (
    "You are an OCR engine for identity documents (passports, ID cards, visas). "
    "Transcribe ALL printed text in the image exactly as it appears, preserving "
    "line breaks and field labels. Do not correct, translate, or complete text. "
    "If a region is unreadable, blacked out or obscured, transcribe what you see "
    "literally.\n\n"
    "RULES:\n"
    "- You MUST return ONLY a valid JSON object with exactly two keys: "
    '"text" and "confidence".\n'
    '- "text" is the transcription as a single string.\n'
    '- "confidence" is a number between 0 and 100 describing how legible '
    "the document is overall.\n"
    "- Do NOT include any other keys, explanations, or text.\n\n"
    "EXAMPLE OUTPUT:\n"
    '{"text": "PASSPORT\\nName: Jane Roe\\nNationality: Canadian", "confidence": 91}\n'
)


def _parse_recognition_response(raw: str) -> dict[str, Any]:
    """
    Parse and validate the model response.

    Raises:
        RecognitionError: If the response is not the expected JSON object.
    """
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise RecognitionError(f"Recognition response is not valid JSON: {raw!r}") from exc

    if not isinstance(parsed, dict):
        raise RecognitionError(f"Expected JSON object, got {type(parsed).__name__}")

    text = parsed.get("text")
    confidence = parsed.get("confidence")

    if not isinstance(text, str):
        raise RecognitionError(f"Recognized text must be a string, got {type(text).__name__}")

    if not isinstance(confidence, (int, float)) or isinstance(confidence, bool):
        raise RecognitionError(
            f"Recognition confidence must be a number, got {type(confidence).__name__}"
        )
    confidence = float(confidence)
    if confidence < 0.0 or confidence > 100.0:
        raise RecognitionError(f"Recognition confidence out of range: {confidence}")

    return {"text": text, "confidence": round(confidence, 1)}


def recognize_text(image_bytes: bytes, mime_type: str = "image/png") -> dict[str, Any]:
    """
    Recognize the text of one document image.

    Args:
        image_bytes: Raw image bytes.
        mime_type: Image MIME type (png, jpeg, webp or gif).

    Returns:
        {"text": str, "confidence": float (0–100)}

    Raises:
        ValueError: If the image is empty or the MIME type is unsupported.
        RecognitionError: If the model response is unusable.
        openai.OpenAIError: If the API call fails after retries.
    """
    if not image_bytes:
        raise ValueError("Document image is empty.")
    if mime_type not in _SUPPORTED_MIME_TYPES:
        raise ValueError(
            f"Unsupported image type: {mime_type!r}. "
            f"Must be one of {sorted(_SUPPORTED_MIME_TYPES)}"
        )

    encoded = base64.b64encode(image_bytes).decode("ascii")
    logger.info("Recognizing document image (%.1f KB).", len(image_bytes) / 1024)

    client = OpenAI(api_key=config.OPENAI_API_KEY)
    response = chat_completions_with_retry(
        client,
        model=config.OCR_MODEL,
        messages=[
            {"role": "system", "content": _SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{mime_type};base64,{encoded}"},
                    },
                ],
            },
        ],
        temperature=0.0,
        max_tokens=1200,
    )

    raw_content = response.choices[0].message.content or ""
    logger.debug("Raw recognition response: %s", raw_content)

    result = _parse_recognition_response(raw_content)
    logger.info(
        "Recognition complete: %d characters, confidence=%.1f",
        len(result["text"]), result["confidence"],
    )
    return result
