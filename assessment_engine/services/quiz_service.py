"""
Quiz catalog service - authoring, retrieval and answer key resolution
"""
import logging
import string
from typing import Dict, List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from assessment_engine.config import settings
from assessment_engine.errors import (
    QuestionNotFoundError,
    QuizNotFoundError,
    QuizPersistenceError,
    QuizValidationError,
)
from assessment_engine.models import AnswerOption, Folder, Question, Quiz
from assessment_engine.schemas.quiz import QuestionCreate

logger = logging.getLogger(__name__)

DIFFICULTY_TIERS = ("easy", "medium", "hard")


class QuizService:
    """
    Service for creating quizzes and reading them back

    Authoring validates the whole payload before touching the database and
    then writes quiz, questions and options in a single transaction.
    """

    def __init__(self, max_options: int = 10):
        self.max_options = max_options

    def create_quiz(
        self,
        db: Session,
        period: str,
        year: int,
        questions: List[QuestionCreate],
        folder_id: Optional[int] = None
    ) -> Quiz:
        """
        Validate and persist a quiz

        Args:
            db: Database session
            period: Month label
            year: Quiz year
            questions: Questions in presentation order
            folder_id: Optional quiz folder

        Returns:
            The stored quiz with questions numbered from 1

        Raises:
            QuizValidationError: payload rejected, nothing written
            QuizPersistenceError: a write failed, everything rolled back
        """
        prepared = self._validate(db, period, folder_id, questions)

        quiz = Quiz(period=period.strip(), year=year, folder_id=folder_id)
        number = 0

        try:
            db.add(quiz)
            db.flush()

            for number, (question, options) in enumerate(prepared, start=1):
                row = Question(
                    quiz_id=quiz.id,
                    number=number,
                    prompt=question.prompt.strip(),
                    image_url=question.image_url,
                    subject=question.subject.strip(),
                    difficulty=question.difficulty.strip().lower()
                )
                db.add(row)
                db.flush()

                for letter, option in options:
                    db.add(AnswerOption(
                        question_id=row.id,
                        letter=letter,
                        text=option.text,
                        image_url=option.image_url,
                        is_correct=option.is_correct
                    ))
                db.flush()

            # commit failures belong to the quiz, not the last question
            number = 0
            db.commit()

        except SQLAlchemyError as e:
            db.rollback()
            if number:
                message = f"Failed to store question {number}: {str(e)}"
            else:
                message = f"Failed to store quiz: {str(e)}"
            logger.error(message)
            raise QuizPersistenceError(message, question_number=number or None)

        db.refresh(quiz)
        logger.info(f"Quiz created: {quiz.id} ({quiz.period}/{quiz.year}) with {len(prepared)} questions")

        return quiz

    def _validate(
        self,
        db: Session,
        period: str,
        folder_id: Optional[int],
        questions: List[QuestionCreate]
    ) -> List[Tuple[QuestionCreate, List[Tuple[str, object]]]]:
        """Check the payload and assign option letters"""

        if not period or not period.strip():
            raise QuizValidationError("Select the quiz period")

        if not questions:
            raise QuizValidationError("Add at least one question to the quiz")

        if folder_id is not None:
            folder = db.query(Folder).filter(Folder.id == folder_id).first()
            if not folder or folder.namespace != "quiz":
                raise QuizValidationError(f"Quiz folder {folder_id} not found")

        prepared = []
        for number, question in enumerate(questions, start=1):
            prepared.append((question, self._validate_question(number, question)))

        return prepared

    def _validate_question(self, number: int, question: QuestionCreate) -> List[Tuple[str, object]]:
        if not question.prompt or not question.prompt.strip():
            raise QuizValidationError(f"Question {number}: prompt is required")

        if not question.subject or not question.subject.strip():
            raise QuizValidationError(f"Question {number}: subject is required")

        difficulty = (question.difficulty or "").strip().lower()
        if difficulty not in DIFFICULTY_TIERS:
            raise QuizValidationError(
                f"Question {number}: difficulty must be one of {', '.join(DIFFICULTY_TIERS)}"
            )

        if not question.options:
            raise QuizValidationError(f"Question {number}: at least one option is required")

        if len(question.options) > self.max_options:
            raise QuizValidationError(
                f"Question {number}: at most {self.max_options} options are allowed"
            )

        lettered = []
        seen = set()
        for position, option in enumerate(question.options):
            letter = option.letter if option.letter is not None else string.ascii_lowercase[position]
            letter = letter.strip().lower()

            if len(letter) != 1 or letter not in string.ascii_lowercase:
                raise QuizValidationError(
                    f"Question {number}: option letter '{option.letter}' must be a single letter"
                )
            if letter in seen:
                raise QuizValidationError(f"Question {number}: option {letter} is duplicated")
            seen.add(letter)

            has_text = bool(option.text and option.text.strip())
            if not has_text and not option.image_url:
                raise QuizValidationError(
                    f"Question {number}: option {letter} needs text or an image"
                )

            lettered.append((letter, option))

        correct_count = sum(1 for _, option in lettered if option.is_correct)
        if correct_count == 0:
            raise QuizValidationError(f"Question {number}: mark the correct option")
        if correct_count > 1:
            raise QuizValidationError(
                f"Question {number}: only one option can be correct, {correct_count} are marked"
            )

        return lettered

    def get_quiz(self, db: Session, quiz_id: int) -> Quiz:
        """Load a quiz with ordered questions and options"""

        quiz = db.query(Quiz).options(
            selectinload(Quiz.questions).selectinload(Question.options)
        ).filter(Quiz.id == quiz_id).first()

        if not quiz:
            raise QuizNotFoundError(f"Quiz {quiz_id} not found")

        return quiz

    def get_questions(self, db: Session, quiz_id: int) -> List[Question]:
        return db.query(Question).filter(
            Question.quiz_id == quiz_id
        ).order_by(Question.number, Question.id).all()

    def list_quizzes(self, db: Session, folder_id: Optional[int] = None) -> List[Dict]:
        """List quiz summaries, newest first"""

        query = db.query(Quiz, func.count(Question.id)).outerjoin(
            Question, Question.quiz_id == Quiz.id
        )
        if folder_id is not None:
            query = query.filter(Quiz.folder_id == folder_id)

        rows = query.group_by(Quiz.id).order_by(Quiz.year.desc(), Quiz.id.desc()).all()

        return [
            {
                "id": quiz.id,
                "period": quiz.period,
                "year": quiz.year,
                "folder_id": quiz.folder_id,
                "total_questions": count,
                "created_at": quiz.created_at
            }
            for quiz, count in rows
        ]

    def resolve_correct_option(self, db: Session, question_id: int) -> Optional[AnswerOption]:
        """
        Return the correct option of a question, or None if none was set

        Legacy questions with several correct options resolve to the
        lowest letter.
        """
        exists = db.query(Question.id).filter(Question.id == question_id).first()
        if not exists:
            raise QuestionNotFoundError(f"Question {question_id} not found")

        return db.query(AnswerOption).filter(
            AnswerOption.question_id == question_id,
            AnswerOption.is_correct.is_(True)
        ).order_by(AnswerOption.letter, AnswerOption.id).first()

    def resolve_answer_key(self, db: Session, question_ids: List[int]) -> Dict[int, str]:
        """Batch lookup of the correct letter per question"""

        if not question_ids:
            return {}

        rows = db.query(AnswerOption.question_id, AnswerOption.letter).filter(
            AnswerOption.question_id.in_(question_ids),
            AnswerOption.is_correct.is_(True)
        ).order_by(AnswerOption.question_id, AnswerOption.letter, AnswerOption.id).all()

        answer_key: Dict[int, str] = {}
        for question_id, letter in rows:
            answer_key.setdefault(question_id, letter)

        return answer_key


# Global instance
quiz_service = QuizService(max_options=settings.MAX_OPTIONS_PER_QUESTION)
