from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from vetscreen.db.base import Base


class Applicant(Base):
    """
    Person behind one or more applications.

    Declared date of birth and nationality are the expected values for
    document validation; name and email feed the background check.
    """
    __tablename__ = "applicants"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, index=True)
    full_name = Column(String, nullable=False)
    date_of_birth = Column(String, nullable=True)
    nationality = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    applications = relationship("Application", back_populates="applicant")

    def __repr__(self):
        return f"<Applicant(id={self.id}, email='{self.email}')>"


class Application(Base):
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)
    applicant_id = Column(Integer, ForeignKey("applicants.id"), nullable=False, index=True)
    position = Column(String, nullable=False)

    # pending -> in_progress -> completed -> approved | rejected
    status = Column(String, nullable=False, default="pending")
    risk_score = Column(Integer, nullable=True)
    risk_level = Column(String, nullable=True)  # "LOW", "MEDIUM", "HIGH"
    admin_notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    applicant = relationship("Applicant", back_populates="applications")
    interview = relationship("Interview", back_populates="application", uselist=False)
    documents = relationship("Document", back_populates="application", order_by="Document.id")
    background_check = relationship("BackgroundCheck", back_populates="application", uselist=False)
    risk_assessments = relationship("RiskAssessment", back_populates="application", order_by="RiskAssessment.id")

    def __repr__(self):
        return f"<Application(id={self.id}, status='{self.status}', risk_level={self.risk_level!r})>"
