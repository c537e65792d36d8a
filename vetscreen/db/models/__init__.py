from vetscreen.db.models.application import Applicant, Application
from vetscreen.db.models.interview import Interview, EmotionSample
from vetscreen.db.models.document import Document, OCRResult
from vetscreen.db.models.background_check import BackgroundCheck
from vetscreen.db.models.risk_assessment import RiskAssessment

__all__ = [
    "Applicant",
    "Application",
    "Interview",
    "EmotionSample",
    "Document",
    "OCRResult",
    "BackgroundCheck",
    "RiskAssessment",
]
