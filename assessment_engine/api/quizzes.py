"""
Quiz authoring and catalog API endpoints
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from assessment_engine.database import get_db
from assessment_engine.errors import (
    QuestionNotFoundError,
    QuizNotFoundError,
    QuizPersistenceError,
    QuizValidationError,
)
from assessment_engine.models import Quiz
from assessment_engine.schemas.quiz import (
    AnswerKeyResponse,
    CorrectOptionResponse,
    QuestionPublic,
    QuizCreate,
    QuizResponse,
    QuizSummary,
)
from assessment_engine.services.quiz_service import quiz_service


router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
logger = logging.getLogger(__name__)


def _quiz_response(quiz: Quiz) -> QuizResponse:
    return QuizResponse(
        id=quiz.id,
        period=quiz.period,
        year=quiz.year,
        folder_id=quiz.folder_id,
        total_questions=len(quiz.questions),
        questions=[QuestionPublic.model_validate(q) for q in quiz.questions],
    )


@router.post("", response_model=QuizResponse, status_code=201)
async def create_quiz(request: QuizCreate, db: Session = Depends(get_db)):
    """
    Create a quiz with its questions and options

    - Rejects the whole payload when any question is invalid
    - Numbers questions from 1 in the order given
    - Stores everything in one transaction
    """
    try:
        quiz = quiz_service.create_quiz(
            db,
            period=request.period,
            year=request.year,
            questions=request.questions,
            folder_id=request.folder_id,
        )
    except QuizValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except QuizPersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return _quiz_response(quiz)


@router.get("", response_model=List[QuizSummary])
async def list_quizzes(folder_id: Optional[int] = None, db: Session = Depends(get_db)):
    """List quizzes, newest first, optionally restricted to one folder"""
    return quiz_service.list_quizzes(db, folder_id=folder_id)


@router.get("/questions/{question_id}/correct-option", response_model=CorrectOptionResponse)
async def get_correct_option(question_id: int, db: Session = Depends(get_db)):
    """Correct option of a question"""
    try:
        option = quiz_service.resolve_correct_option(db, question_id)
    except QuestionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if option is None:
        raise HTTPException(
            status_code=404,
            detail=f"Question {question_id} has no correct option"
        )

    return CorrectOptionResponse(
        question_id=question_id,
        letter=option.letter,
        text=option.text,
        image_url=option.image_url,
    )


@router.get("/{quiz_id}", response_model=QuizResponse)
async def get_quiz(quiz_id: int, db: Session = Depends(get_db)):
    """Quiz with ordered questions, without revealing correct options"""
    try:
        quiz = quiz_service.get_quiz(db, quiz_id)
    except QuizNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return _quiz_response(quiz)


@router.get("/{quiz_id}/answer-key", response_model=AnswerKeyResponse)
async def get_answer_key(quiz_id: int, db: Session = Depends(get_db)):
    """Correct letter for every question of a quiz"""
    try:
        quiz_service.get_quiz(db, quiz_id)
    except QuizNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    question_ids = [q.id for q in quiz_service.get_questions(db, quiz_id)]

    return AnswerKeyResponse(
        quiz_id=quiz_id,
        answers=quiz_service.resolve_answer_key(db, question_ids),
    )
