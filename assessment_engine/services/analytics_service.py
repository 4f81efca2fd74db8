"""
Scoring and analytics service for completed quizzes
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from sqlalchemy.orm import Session

from assessment_engine.errors import AttemptNotCompletedError, QuizNotFoundError
from assessment_engine.models import Quiz, ResponseRecord
from assessment_engine.services.completion_service import completion_service
from assessment_engine.services.quiz_service import DIFFICULTY_TIERS, quiz_service
from assessment_engine.utils.cache import cache_service

logger = logging.getLogger(__name__)

UNANSWERED = "-"
FALLBACK_TIER = "medium"
UNSPECIFIED_SUBJECT = "Not specified"


def percentage(correct: int, total: int) -> int:
    """Whole percentage rounded half up, 0 for an empty bucket"""
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


def normalize_tier(difficulty: Optional[str]) -> str:
    """Map a stored difficulty onto a bucket; anything unrecognised is medium"""
    tier = (difficulty or "").lower()
    return tier if tier in DIFFICULTY_TIERS else FALLBACK_TIER


def first_responses(responses: Iterable[Tuple[int, str]]) -> Dict[int, str]:
    """Build question_id -> letter keeping the first record seen per question"""
    chosen: Dict[int, str] = {}
    for question_id, letter in responses:
        if question_id not in chosen and letter:
            chosen[question_id] = letter
    return chosen


def _bucket() -> Dict[str, int]:
    return {"total": 0, "correct": 0, "percentage": 0}


def compute_result(
    questions: Sequence[Any],
    responses: Iterable[Tuple[int, str]],
    answer_key: Mapping[int, str]
) -> Dict[str, Any]:
    """
    Score one respondent against the answer key

    Pure function of its inputs, safe to call any number of times.

    Args:
        questions: Objects with id, number, subject and difficulty
        responses: (question_id, letter) pairs in fetch order
        answer_key: Correct letter per question id

    Returns:
        Dictionary with totals, difficulty and subject buckets, and the
        per-question breakdown ordered by number
    """
    ordered = sorted(questions, key=lambda q: (q.number, q.id))
    chosen_by_question = first_responses(responses)

    by_difficulty = {tier: _bucket() for tier in DIFFICULTY_TIERS}
    by_subject: Dict[str, Dict[str, int]] = {}
    breakdown: List[Dict[str, Any]] = []
    correct = 0

    for question in ordered:
        chosen = chosen_by_question.get(question.id)
        expected = answer_key.get(question.id)
        is_correct = bool(chosen and expected and chosen.lower() == expected.lower())

        tier = normalize_tier(question.difficulty)
        subject = question.subject or UNSPECIFIED_SUBJECT

        by_difficulty[tier]["total"] += 1
        subject_stats = by_subject.setdefault(subject, _bucket())
        subject_stats["total"] += 1

        if is_correct:
            correct += 1
            by_difficulty[tier]["correct"] += 1
            subject_stats["correct"] += 1

        breakdown.append({
            "question_id": question.id,
            "number": question.number,
            "chosen": chosen or UNANSWERED,
            "correct_letter": expected or UNANSWERED,
            "is_correct": is_correct,
            "subject": subject,
            "difficulty": question.difficulty or FALLBACK_TIER
        })

    for stats in list(by_difficulty.values()) + list(by_subject.values()):
        stats["percentage"] = percentage(stats["correct"], stats["total"])

    total = len(ordered)

    return {
        "total": total,
        "correct": correct,
        "incorrect": total - correct,
        "percentage": percentage(correct, total),
        "by_difficulty": by_difficulty,
        "by_subject": by_subject,
        "questions": breakdown
    }


class AnalyticsService:
    """Service for computing quiz results from stored data"""

    def cache_key(self, quiz_id: int, respondent_id: int) -> str:
        return f"result:{quiz_id}:{respondent_id}"

    def get_result(self, db: Session, quiz_id: int, respondent_id: int) -> Dict[str, Any]:
        """
        Result of a respondent who completed the quiz

        Raises:
            QuizNotFoundError: unknown quiz
            AttemptNotCompletedError: no completion record, answering resumes
        """
        quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if not quiz:
            raise QuizNotFoundError(f"Quiz {quiz_id} not found")

        if not completion_service.is_completed(db, respondent_id, quiz_id):
            raise AttemptNotCompletedError(
                f"Respondent {respondent_id} has not completed quiz {quiz_id}"
            )

        key = self.cache_key(quiz_id, respondent_id)
        cached = cache_service.get(key)
        if cached:
            return cached

        result = self.compute_for(db, quiz_id, respondent_id)
        cache_service.set(key, result)

        return result

    def compute_for(self, db: Session, quiz_id: int, respondent_id: int) -> Dict[str, Any]:
        """Fetch questions, responses and answer key and score them"""

        questions = quiz_service.get_questions(db, quiz_id)
        question_ids = [q.id for q in questions]

        responses = []
        if question_ids:
            responses = db.query(ResponseRecord.question_id, ResponseRecord.letter).filter(
                ResponseRecord.respondent_id == respondent_id,
                ResponseRecord.question_id.in_(question_ids)
            ).order_by(ResponseRecord.id).all()

        answer_key = quiz_service.resolve_answer_key(db, question_ids)

        result = compute_result(questions, responses, answer_key)
        result["quiz_id"] = quiz_id
        result["respondent_id"] = respondent_id

        logger.info(
            f"Result computed: quiz={quiz_id}, respondent={respondent_id}, "
            f"{result['correct']}/{result['total']} ({result['percentage']}%)"
        )

        return result

    def invalidate(self, quiz_id: int, respondent_id: int) -> None:
        cache_service.delete(self.cache_key(quiz_id, respondent_id))


# Global instance
analytics_service = AnalyticsService()
