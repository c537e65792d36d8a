from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from vetscreen.db.base import Base


class BackgroundCheck(Base):
    """
    Watchlist, identity and duplicate-application checks for one application.

    ``score`` is NULL while the check is pending or after it failed.
    """
    __tablename__ = "background_checks"

    id = Column(Integer, primary_key=True, index=True)
    application_id = Column(Integer, ForeignKey("applications.id"), nullable=False, unique=True, index=True)

    check_type = Column(String, nullable=False, default="comprehensive")
    status = Column(String, nullable=False, default="pending")  # "pending", "completed", "failed"

    watchlist_matches = Column(JSON, nullable=False, default=list)
    identity_validation = Column(JSON, nullable=True)
    duplicate_checks = Column(JSON, nullable=False, default=list)
    risk_indicators = Column(JSON, nullable=False, default=list)
    score = Column(Integer, nullable=True)
    error = Column(Text, nullable=True)

    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="background_check")

    def __repr__(self):
        return f"<BackgroundCheck(id={self.id}, status='{self.status}', score={self.score})>"
