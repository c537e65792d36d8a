# vetscreen/documents/__init__.py
# ================================
# Document Extraction & Validator — VetScreen
#
# Public API:
#   - extract_fields()    — labeled identity fields from recognized text
#   - build_ocr_result()  — extraction + comparison + tampering + status
#   - recognize_text()    — text-recognition collaborator (OpenAI vision)

from vetscreen.documents.extractor import extract_fields  # noqa: F401
from vetscreen.documents.validator import (  # noqa: F401
    ValidationStatus,
    build_ocr_result,
    detect_tampering,
    validate_fields,
)
