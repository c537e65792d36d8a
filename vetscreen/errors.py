"""
vetscreen/errors.py
====================
Domain exceptions — VetScreen

Missing evidence is never an exception (documented defaults apply) and an
extraction miss is simply an absent field. Store failures are raised by
SQLAlchemy and propagate unmodified.
"""


class NotFoundError(Exception):
    """Raised when an application, interview or document id is unknown."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class SubCheckFailureError(Exception):
    """Raised when a background sub-check throws or exceeds its timeout."""

    def __init__(self, check: str, message: str):
        self.check = check
        self.message = message
        super().__init__(f"Background sub-check '{check}' failed: {message}")


class BackgroundCheckFailedError(Exception):
    """Raised when an assessment is requested for a failed background check."""

    def __init__(self, application_id: int):
        self.application_id = application_id
        super().__init__(
            f"Background check for application {application_id} failed; "
            "re-run it before assessing the application"
        )


class RecognitionError(Exception):
    """Raised when the text-recognition collaborator returns unusable output."""


class OCRResultExistsError(Exception):
    """Raised when a document already carries its (immutable) OCR result."""

    def __init__(self, document_id: int):
        self.document_id = document_id
        super().__init__(f"Document {document_id} already has an OCR result")


class ComponentVerificationError(Exception):
    """Raised when a component output fails verification."""

    def __init__(self, component: str, message: str):
        self.component = component
        self.message = message
        super().__init__(f"{component} verification failed: {message}")
