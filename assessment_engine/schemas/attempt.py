"""
Pydantic schemas for answering a quiz
"""
from pydantic import BaseModel, Field
from typing import Dict, Optional
from datetime import datetime


class AnswerSubmission(BaseModel):
    """Schema for submitting one answer"""
    question_id: int
    letter: str = Field(..., min_length=1, max_length=1, description="Chosen option letter")


class AttemptStateResponse(BaseModel):
    """Where the respondent stands in a quiz"""
    quiz_id: int
    respondent_id: int
    status: str  # answering | completed
    current_index: int
    current_question_id: Optional[int] = None
    total_questions: int
    answers: Dict[int, str]


class CompletionStatus(BaseModel):
    """Completion ledger entry"""
    quiz_id: int
    respondent_id: int
    completed: bool
    completed_at: Optional[datetime] = None
