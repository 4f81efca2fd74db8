"""
Pydantic schemas for quiz authoring and retrieval
"""
from pydantic import BaseModel, Field
from typing import List, Dict, Optional
from datetime import datetime


class AnswerOptionCreate(BaseModel):
    """Answer option as supplied by the author"""
    letter: Optional[str] = Field(None, description="Single letter, assigned by position when omitted")
    text: Optional[str] = None
    image_url: Optional[str] = None
    is_correct: bool = False


class QuestionCreate(BaseModel):
    """Question as supplied by the author"""
    prompt: str
    image_url: Optional[str] = None
    subject: str
    difficulty: str = Field(..., description="easy, medium or hard")
    options: List[AnswerOptionCreate]


class QuizCreate(BaseModel):
    """Request schema for quiz creation"""
    period: str = Field(..., max_length=50, description="Month label, e.g. 'March'")
    year: int = Field(..., ge=1900, le=9999)
    folder_id: Optional[int] = None
    questions: List[QuestionCreate]


class AnswerOptionPublic(BaseModel):
    """Answer option shown to respondents (no correctness flag)"""
    letter: str
    text: Optional[str] = None
    image_url: Optional[str] = None

    class Config:
        from_attributes = True


class QuestionPublic(BaseModel):
    """Question shown to respondents"""
    id: int
    number: int
    prompt: str
    image_url: Optional[str] = None
    subject: Optional[str] = None
    difficulty: Optional[str] = None
    options: List[AnswerOptionPublic]

    class Config:
        from_attributes = True


class QuizResponse(BaseModel):
    """Quiz with its ordered questions"""
    id: int
    period: str
    year: int
    folder_id: Optional[int] = None
    total_questions: int
    questions: List[QuestionPublic]


class QuizSummary(BaseModel):
    """Quiz listing entry"""
    id: int
    period: str
    year: int
    folder_id: Optional[int] = None
    total_questions: int
    created_at: Optional[datetime] = None


class CorrectOptionResponse(BaseModel):
    """Correct option of a single question"""
    question_id: int
    letter: str
    text: Optional[str] = None
    image_url: Optional[str] = None


class AnswerKeyResponse(BaseModel):
    """Correct letter per question id"""
    quiz_id: int
    answers: Dict[int, str]
