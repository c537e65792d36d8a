from sqlalchemy import Column, Integer, String, Text, DateTime, Float, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from vetscreen.db.base import Base


class Interview(Base):
    """
    One recorded interview per application.

    ``credibility_score``, ``sentiment_score`` and ``analysis`` stay empty
    until ``completed_at`` is set.
    """
    __tablename__ = "interviews"

    id = Column(Integer, primary_key=True, index=True)
    application_id = Column(Integer, ForeignKey("applications.id"), nullable=False, unique=True, index=True)

    questions = Column(JSON, nullable=False, default=list)  # [{"id", "question"}]
    answers = Column(JSON, nullable=False, default=list)  # [{"question_index", "answer", "elapsed"}]
    transcript = Column(Text, nullable=False, default="")
    duration = Column(Integer, nullable=False, default=0)  # seconds

    credibility_score = Column(Integer, nullable=True)
    sentiment_score = Column(Integer, nullable=True)
    analysis = Column(JSON, nullable=True)

    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="interview")
    emotion_samples = relationship(
        "EmotionSample", back_populates="interview", order_by="EmotionSample.elapsed"
    )

    def __repr__(self):
        return f"<Interview(id={self.id}, application_id={self.application_id}, completed={self.completed_at is not None})>"


class EmotionSample(Base):
    __tablename__ = "emotion_samples"

    id = Column(Integer, primary_key=True, index=True)
    interview_id = Column(Integer, ForeignKey("interviews.id"), nullable=False, index=True)
    elapsed = Column(Float, nullable=False)  # seconds since interview start
    emotion = Column(String, nullable=False)
    confidence = Column(Float, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    interview = relationship("Interview", back_populates="emotion_samples")
