"""
Quiz result analytics API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from assessment_engine.database import get_db
from assessment_engine.errors import AttemptNotCompletedError, QuizNotFoundError
from assessment_engine.schemas.analytics import QuizResult
from assessment_engine.services.analytics_service import analytics_service

router = APIRouter(prefix="/api", tags=["analytics"])
logger = logging.getLogger(__name__)


@router.get("/quizzes/{quiz_id}/results/{respondent_id}", response_model=QuizResult)
async def get_quiz_result(
    quiz_id: int,
    respondent_id: int,
    db: Session = Depends(get_db)
):
    """
    Result of a respondent on a completed quiz

    Returns:
    - Correct / incorrect totals and overall percentage
    - Breakdown by difficulty tier (easy, medium, hard)
    - Breakdown by subject
    - Per-question chosen and correct letters

    Responds 409 when no completion record exists, so the client goes back
    to answering.
    """

    logger.info(f"Fetching result of quiz {quiz_id} for respondent {respondent_id}")

    try:
        result = analytics_service.get_result(db, quiz_id, respondent_id)
    except QuizNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AttemptNotCompletedError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return QuizResult(**result)
