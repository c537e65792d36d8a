from sqlalchemy import Column, Integer, String, Text, DateTime, Float, Boolean, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from vetscreen.db.base import Base


class Document(Base):
    """Identity artifact uploaded for an application."""
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    application_id = Column(Integer, ForeignKey("applications.id"), nullable=False, index=True)

    document_type = Column(String, nullable=False)  # "passport", "id_card", "visa", "other"
    file_url = Column(String, nullable=False)
    file_name = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False, default=0)

    uploaded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="documents")
    ocr_result = relationship("OCRResult", back_populates="document", uselist=False)

    def __repr__(self):
        return f"<Document(id={self.id}, type='{self.document_type}', file='{self.file_name}')>"


class OCRResult(Base):
    __tablename__ = "ocr_results"

    id = Column(Integer, primary_key=True, index=True)
    document_id = Column(Integer, ForeignKey("documents.id"), nullable=False, unique=True, index=True)

    extracted_text = Column(Text, nullable=False, default="")
    extracted_fields = Column(JSON, nullable=False, default=dict)
    recognition_confidence = Column(Float, nullable=False)
    validation_status = Column(String, nullable=False)  # "valid", "invalid", "suspicious"
    match_score = Column(Integer, nullable=True)
    discrepancies = Column(JSON, nullable=False, default=list)
    tampering_detected = Column(Boolean, nullable=False, default=False)

    processed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    document = relationship("Document", back_populates="ocr_result")
