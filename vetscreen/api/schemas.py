"""
Pydantic request bodies for the VetScreen API.
"""
from typing import Literal, Optional

from pydantic import BaseModel, Field


class ApplicationCreate(BaseModel):
    """Applicant identity as declared on the application form."""
    email: str = Field(..., min_length=3, max_length=255)
    full_name: str = Field(..., min_length=1, max_length=255)
    position: str = Field(..., min_length=1, max_length=255)
    date_of_birth: Optional[str] = Field(None, description="Declared date of birth, D/M/Y")
    nationality: Optional[str] = None


class ApplicationDecision(BaseModel):
    status: Literal["approved", "rejected"]
    admin_notes: Optional[str] = Field(None, max_length=5000)


class AnswerCreate(BaseModel):
    question_index: int = Field(..., ge=0)
    answer: str
    elapsed: float = Field(0.0, ge=0, description="Seconds since the interview started")


class EmotionSampleCreate(BaseModel):
    emotion: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    elapsed: float = Field(0.0, ge=0)
