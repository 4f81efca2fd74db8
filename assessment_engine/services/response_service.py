"""
Response collector service
Answer-by-answer state machine for one respondent on one quiz
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from assessment_engine.errors import (
    AttemptClosedError,
    AttemptValidationError,
    QuestionNotFoundError,
)
from assessment_engine.models import ResponseRecord
from assessment_engine.services.analytics_service import analytics_service, first_responses
from assessment_engine.services.completion_service import completion_service
from assessment_engine.services.notification_service import notification_service
from assessment_engine.services.quiz_service import quiz_service

logger = logging.getLogger(__name__)


class AttemptStatus(str, Enum):
    ANSWERING = "answering"
    COMPLETED = "completed"


@dataclass
class AttemptState:
    """
    Caller-held state of an attempt

    `answers` is the working map; nothing in it is stored until
    ResponseService.submit_current runs for that question.
    """
    quiz_id: int
    respondent_id: int
    question_ids: List[int]
    letters: Dict[int, List[str]]
    answers: Dict[int, str] = field(default_factory=dict)
    index: int = 0
    status: AttemptStatus = AttemptStatus.ANSWERING

    @property
    def total(self) -> int:
        return len(self.question_ids)

    @property
    def current_question_id(self) -> Optional[int]:
        if not self.question_ids:
            return None
        return self.question_ids[self.index]

    @property
    def is_last(self) -> bool:
        return self.index == self.total - 1

    def select(self, letter: str) -> None:
        """Set the working answer for the current question"""
        if self.status is AttemptStatus.COMPLETED:
            raise AttemptClosedError(f"Quiz {self.quiz_id} is already completed")

        question_id = self.current_question_id
        if question_id is None:
            raise AttemptValidationError(f"Quiz {self.quiz_id} has no questions")

        wanted = (letter or "").strip().lower()
        for option in self.letters.get(question_id, []):
            if option.lower() == wanted:
                self.answers[question_id] = option
                return

        raise AttemptValidationError(
            f"'{letter}' is not an option of question {self.index + 1}"
        )

    def next(self) -> None:
        self.index = min(self.index + 1, max(self.total - 1, 0))

    def previous(self) -> None:
        self.index = max(self.index - 1, 0)

    def go_to(self, question_id: int) -> None:
        try:
            self.index = self.question_ids.index(question_id)
        except ValueError:
            raise QuestionNotFoundError(
                f"Question {question_id} does not belong to quiz {self.quiz_id}"
            )


class ResponseService:
    """Service for collecting answers and closing attempts"""

    def open_attempt(self, db: Session, quiz_id: int, respondent_id: int) -> AttemptState:
        """
        Start or resume an attempt

        A completion record sends the respondent straight to the completed
        state. Without one the attempt is answerable again, pre-filled with
        whatever responses are already stored.
        """
        quiz = quiz_service.get_quiz(db, quiz_id)

        question_ids = [q.id for q in quiz.questions]
        letters = {q.id: [o.letter for o in q.options] for q in quiz.questions}

        state = AttemptState(
            quiz_id=quiz_id,
            respondent_id=respondent_id,
            question_ids=question_ids,
            letters=letters
        )

        if completion_service.is_completed(db, respondent_id, quiz_id):
            state.status = AttemptStatus.COMPLETED
            logger.info(f"Attempt reopened as completed: respondent={respondent_id}, quiz={quiz_id}")
        elif question_ids:
            stored = db.query(ResponseRecord.question_id, ResponseRecord.letter).filter(
                ResponseRecord.respondent_id == respondent_id,
                ResponseRecord.question_id.in_(question_ids)
            ).order_by(ResponseRecord.id).all()
            state.answers = first_responses(stored)

        return state

    def submit_current(
        self,
        db: Session,
        state: AttemptState,
        schedule: Optional[Callable[..., Any]] = None
    ) -> AttemptState:
        """
        Store the working answer of the current question

        Upserts on (respondent, question). Submitting the last question also
        writes the completion record and fires the completion webhook.

        Args:
            db: Database session
            state: Attempt being answered
            schedule: Runs the webhook call, e.g. BackgroundTasks.add_task.
                Without one the webhook is called inline.
        """
        if state.status is AttemptStatus.COMPLETED:
            raise AttemptClosedError(f"Quiz {state.quiz_id} is already completed")

        question_id = state.current_question_id
        if question_id is None:
            raise AttemptValidationError(f"Quiz {state.quiz_id} has no questions")

        letter = state.answers.get(question_id)
        if not letter:
            raise AttemptValidationError("Select an option before submitting")

        completes = state.is_last

        try:
            self._upsert_response(db, state.respondent_id, question_id, letter)
            if completes:
                completion_service.mark_completed(db, state.respondent_id, state.quiz_id)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.error(
                f"Failed to store response: respondent={state.respondent_id}, question={question_id}",
                exc_info=True
            )
            raise

        logger.info(
            f"Response stored: respondent={state.respondent_id}, question={question_id}, letter={letter}"
        )

        if completes:
            state.status = AttemptStatus.COMPLETED
            analytics_service.invalidate(state.quiz_id, state.respondent_id)
            self._notify(db, state, schedule)
        else:
            state.next()

        return state

    def submit_answer(
        self,
        db: Session,
        quiz_id: int,
        respondent_id: int,
        question_id: int,
        letter: str,
        schedule: Optional[Callable[..., Any]] = None
    ) -> AttemptState:
        """Open the attempt, select the letter on question_id and submit it"""

        state = self.open_attempt(db, quiz_id, respondent_id)
        if state.status is AttemptStatus.COMPLETED:
            raise AttemptClosedError(f"Quiz {quiz_id} is already completed")

        state.go_to(question_id)
        state.select(letter)

        return self.submit_current(db, state, schedule)

    def _upsert_response(self, db: Session, respondent_id: int, question_id: int, letter: str) -> ResponseRecord:
        record = db.query(ResponseRecord).filter(
            ResponseRecord.respondent_id == respondent_id,
            ResponseRecord.question_id == question_id
        ).order_by(ResponseRecord.id).first()

        if record:
            record.letter = letter
        else:
            record = ResponseRecord(
                respondent_id=respondent_id,
                question_id=question_id,
                letter=letter
            )
            db.add(record)

        db.flush()
        return record

    def _notify(
        self,
        db: Session,
        state: AttemptState,
        schedule: Optional[Callable[..., Any]] = None
    ) -> None:
        if not notification_service.webhook_url:
            return

        try:
            result = analytics_service.compute_for(db, state.quiz_id, state.respondent_id)
        except SQLAlchemyError as e:
            logger.warning(f"Could not score quiz {state.quiz_id} for notification: {str(e)}")
            return

        if schedule is None:
            notification_service.notify_completion(state.respondent_id, state.quiz_id, result)
        else:
            schedule(notification_service.notify_completion, state.respondent_id, state.quiz_id, result)


# Global instance
response_service = ResponseService()
