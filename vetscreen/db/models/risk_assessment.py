from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from vetscreen.db.base import Base


class RiskAssessment(Base):
    """
    Immutable result of one assessment run.

    Every run inserts a new row; earlier rows are kept as the audit trail.
    """
    __tablename__ = "risk_assessments"

    id = Column(Integer, primary_key=True, index=True)
    application_id = Column(Integer, ForeignKey("applications.id"), nullable=False, index=True)

    interview_score = Column(Integer, nullable=False)
    emotion_score = Column(Integer, nullable=False)
    ocr_score = Column(Integer, nullable=False)
    background_score = Column(Integer, nullable=False)
    final_score = Column(Integer, nullable=False)
    risk_level = Column(String, nullable=False)

    weights = Column(JSON, nullable=False)
    detailed_report = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="risk_assessments")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "application_id": self.application_id,
            "interview_score": self.interview_score,
            "emotion_score": self.emotion_score,
            "ocr_score": self.ocr_score,
            "background_score": self.background_score,
            "final_score": self.final_score,
            "risk_level": self.risk_level,
            "weights": self.weights,
            "detailed_report": self.detailed_report,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<RiskAssessment(id={self.id}, final_score={self.final_score}, risk_level='{self.risk_level}')>"
