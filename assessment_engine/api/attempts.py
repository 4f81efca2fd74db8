"""
Quiz answering API endpoints
"""
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from assessment_engine.database import get_db
from assessment_engine.errors import (
    AttemptClosedError,
    AttemptValidationError,
    NotFoundError,
)
from assessment_engine.schemas.attempt import (
    AnswerSubmission,
    AttemptStateResponse,
    CompletionStatus,
)
from assessment_engine.services.analytics_service import analytics_service
from assessment_engine.services.completion_service import completion_service
from assessment_engine.services.quiz_service import quiz_service
from assessment_engine.services.response_service import AttemptState, response_service

router = APIRouter(prefix="/api/quizzes/{quiz_id}/attempts", tags=["attempts"])
logger = logging.getLogger(__name__)


def _state_response(state: AttemptState) -> AttemptStateResponse:
    return AttemptStateResponse(
        quiz_id=state.quiz_id,
        respondent_id=state.respondent_id,
        status=state.status.value,
        current_index=state.index,
        current_question_id=state.current_question_id,
        total_questions=state.total,
        answers=state.answers,
    )


@router.get("/{respondent_id}", response_model=AttemptStateResponse)
async def open_attempt(quiz_id: int, respondent_id: int, db: Session = Depends(get_db)):
    """
    Start or resume answering a quiz

    Returns status "completed" when the respondent already finished it,
    in which case the client shows the results instead.
    """
    try:
        state = response_service.open_attempt(db, quiz_id, respondent_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return _state_response(state)


@router.post("/{respondent_id}/responses", response_model=AttemptStateResponse)
async def submit_response(
    quiz_id: int,
    respondent_id: int,
    submission: AnswerSubmission,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db)
):
    """
    Store the respondent's answer to one question

    Answering the last question completes the quiz. The completion webhook
    runs after the response is sent.
    """
    try:
        state = response_service.submit_answer(
            db,
            quiz_id=quiz_id,
            respondent_id=respondent_id,
            question_id=submission.question_id,
            letter=submission.letter,
            schedule=background_tasks.add_task,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AttemptValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AttemptClosedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Failed to save response: {str(e)}")

    return _state_response(state)


@router.get("/{respondent_id}/completion", response_model=CompletionStatus)
async def get_completion(quiz_id: int, respondent_id: int, db: Session = Depends(get_db)):
    """Completion ledger entry of the respondent"""
    try:
        quiz_service.get_quiz(db, quiz_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    record = completion_service.get(db, respondent_id, quiz_id)

    return CompletionStatus(
        quiz_id=quiz_id,
        respondent_id=respondent_id,
        completed=record is not None,
        completed_at=record.completed_at if record else None,
    )


@router.delete("/{respondent_id}/completion", status_code=204)
async def clear_completion(quiz_id: int, respondent_id: int, db: Session = Depends(get_db)):
    """Administrative reset: the respondent may answer the quiz again"""
    if not completion_service.clear(db, respondent_id, quiz_id):
        raise HTTPException(
            status_code=404,
            detail=f"Respondent {respondent_id} has not completed quiz {quiz_id}"
        )

    analytics_service.invalidate(quiz_id, respondent_id)
    return Response(status_code=204)
