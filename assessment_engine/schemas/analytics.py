"""
Pydantic schemas for quiz result analytics
"""
from pydantic import BaseModel, Field
from typing import List, Dict


class BucketStats(BaseModel):
    """Correct answers within one difficulty tier or subject"""
    total: int
    correct: int
    percentage: int = Field(..., ge=0, le=100)


class QuestionResult(BaseModel):
    """Outcome of a single question"""
    question_id: int
    number: int
    chosen: str
    correct_letter: str
    is_correct: bool
    subject: str
    difficulty: str


class QuizResult(BaseModel):
    """Complete result of one respondent on one quiz"""
    quiz_id: int
    respondent_id: int
    total: int
    correct: int
    incorrect: int
    percentage: int = Field(..., ge=0, le=100)
    by_difficulty: Dict[str, BucketStats]
    by_subject: Dict[str, BucketStats]
    questions: List[QuestionResult]
