# tests/test_analytics_service.py
"""
Tests for analytics_service.py - scoring and result aggregation
"""
import json
from collections import namedtuple

import pytest

from assessment_engine.errors import AttemptNotCompletedError, QuizNotFoundError
from assessment_engine.models import Question, Quiz, ResponseRecord
from assessment_engine.services.analytics_service import (
    analytics_service,
    compute_result,
    normalize_tier,
    percentage,
)
from assessment_engine.services.completion_service import completion_service

Q = namedtuple("Q", "id number subject difficulty")


class TestPercentage:
    """Whole-number percentages"""

    def test_zero_total_is_zero(self):
        assert percentage(0, 0) == 0

    def test_rounds_to_nearest(self):
        assert percentage(2, 3) == 67
        assert percentage(1, 3) == 33

    def test_half_rounds_up(self):
        assert percentage(1, 8) == 13
        assert percentage(1, 200) == 1

    def test_bounds(self):
        assert percentage(0, 7) == 0
        assert percentage(7, 7) == 100


class TestNormalizeTier:

    @pytest.mark.parametrize("stored,expected", [
        ("easy", "easy"),
        ("HARD", "hard"),
        ("Medium", "medium"),
        ("hard!", "medium"),
        ("", "medium"),
        (None, "medium"),
        ("difficult", "medium"),
    ])
    def test_unrecognised_tiers_become_medium(self, stored, expected):
        assert normalize_tier(stored) == expected


class TestComputeResult:
    """Pure scoring function"""

    def test_mixed_tiers(self):
        """Two right out of three, one per tier"""
        questions = [
            Q(1, 1, "Math", "easy"),
            Q(2, 2, "Math", "medium"),
            Q(3, 3, "Physics", "hard"),
        ]
        responses = [(1, "a"), (2, "b"), (3, "c")]
        answer_key = {1: "a", 2: "x", 3: "c"}

        result = compute_result(questions, responses, answer_key)

        assert result["correct"] == 2
        assert result["incorrect"] == 1
        assert result["percentage"] == 67
        assert result["by_difficulty"]["easy"]["percentage"] == 100
        assert result["by_difficulty"]["medium"]["percentage"] == 0
        assert result["by_difficulty"]["hard"]["percentage"] == 100

    def test_empty_quiz(self):
        """No questions means 0% and no division error"""
        result = compute_result([], [], {})

        assert result["total"] == 0
        assert result["correct"] == 0
        assert result["incorrect"] == 0
        assert result["percentage"] == 0
        assert result["questions"] == []
        for stats in result["by_difficulty"].values():
            assert stats == {"total": 0, "correct": 0, "percentage": 0}

    def test_letters_compare_case_insensitively(self):
        result = compute_result([Q(1, 1, "Math", "easy")], [(1, "B")], {1: "b"})

        assert result["correct"] == 1
        assert result["questions"][0]["is_correct"] is True
        assert result["questions"][0]["chosen"] == "B"

    def test_duplicate_responses_first_one_wins(self):
        """Earliest fetched record decides, later duplicates are ignored"""
        questions = [Q(1, 1, "Math", "easy")]

        first_right = compute_result(questions, [(1, "a"), (1, "b")], {1: "a"})
        first_wrong = compute_result(questions, [(1, "b"), (1, "a")], {1: "a"})

        assert first_right["correct"] == 1
        assert first_wrong["correct"] == 0
        assert first_wrong["questions"][0]["chosen"] == "b"

    def test_missing_response_and_key_use_dash(self):
        questions = [Q(1, 1, "Math", "easy"), Q(2, 2, "Math", "easy")]

        result = compute_result(questions, [(2, "c")], {1: "a"})

        unanswered, no_key = result["questions"]
        assert unanswered["chosen"] == "-"
        assert unanswered["is_correct"] is False
        assert no_key["correct_letter"] == "-"
        assert no_key["is_correct"] is False
        assert result["incorrect"] == 2

    def test_unrecognised_difficulty_counts_as_medium(self):
        questions = [
            Q(1, 1, "Math", "hard!"),
            Q(2, 2, "Math", ""),
            Q(3, 3, "Math", None),
        ]
        result = compute_result(questions, [(1, "a"), (2, "a"), (3, "a")], {1: "a", 2: "a", 3: "b"})

        assert result["by_difficulty"]["medium"] == {"total": 3, "correct": 2, "percentage": 67}
        assert result["by_difficulty"]["easy"]["total"] == 0
        assert result["questions"][0]["difficulty"] == "hard!"
        assert result["questions"][2]["difficulty"] == "medium"

    def test_subject_keys_are_not_normalised(self):
        """'Math', 'math' and 'Math ' stay separate buckets"""
        questions = [
            Q(1, 1, "Math", "easy"),
            Q(2, 2, "math", "easy"),
            Q(3, 3, "Math ", "easy"),
            Q(4, 4, None, "easy"),
            Q(5, 5, "", "easy"),
        ]
        result = compute_result(questions, [], {})

        assert list(result["by_subject"]) == ["Math", "math", "Math ", "Not specified"]
        assert [stats["total"] for stats in result["by_subject"].values()] == [1, 1, 1, 2]
        assert result["questions"][4]["subject"] == "Not specified"

    def test_questions_sorted_by_number(self):
        questions = [Q(10, 3, "A", "easy"), Q(11, 1, "A", "easy"), Q(12, 2, "A", "easy")]

        result = compute_result(questions, [], {})

        assert [q["number"] for q in result["questions"]] == [1, 2, 3]
        assert [q["question_id"] for q in result["questions"]] == [11, 12, 10]

    def test_tier_buckets_add_up_to_total(self):
        questions = [Q(i, i, "S", tier) for i, tier in enumerate(
            ["easy", "medium", "hard", "HARD", "weird", None, "easy"], start=1)]
        responses = [(i, "a") for i in range(1, 8)]
        answer_key = {i: ("a" if i % 2 else "b") for i in range(1, 8)}

        result = compute_result(questions, responses, answer_key)

        buckets = result["by_difficulty"].values()
        assert sum(b["total"] for b in buckets) == result["total"] == 7
        assert sum(b["correct"] for b in buckets) == result["correct"]
        assert sum(b["total"] - b["correct"] for b in buckets) == result["incorrect"]

    def test_repeated_calls_are_identical(self):
        questions = [Q(1, 1, "Math", "easy"), Q(2, 2, "Bio", "weird")]
        responses = [(1, "a"), (2, "d")]
        answer_key = {1: "A", 2: "c"}

        first = json.dumps(compute_result(questions, responses, answer_key))
        second = json.dumps(compute_result(questions, responses, answer_key))

        assert first == second


class TestGetResult:
    """Stored-data path of the analytics service"""

    def test_unknown_quiz(self, db):
        with pytest.raises(QuizNotFoundError):
            analytics_service.get_result(db, 999, 1)

    def test_requires_completion(self, db, make_quiz):
        quiz = make_quiz()

        with pytest.raises(AttemptNotCompletedError):
            analytics_service.get_result(db, quiz.id, 7)

    def test_scores_stored_responses(self, db, make_quiz):
        quiz = make_quiz()
        first, second, third = quiz.questions

        db.add_all([
            ResponseRecord(respondent_id=7, question_id=first.id, letter="A"),
            ResponseRecord(respondent_id=7, question_id=second.id, letter="c"),
            ResponseRecord(respondent_id=7, question_id=third.id, letter="c"),
            ResponseRecord(respondent_id=8, question_id=second.id, letter="b"),
        ])
        completion_service.mark_completed(db, 7, quiz.id)
        db.commit()

        result = analytics_service.get_result(db, quiz.id, 7)

        assert result["quiz_id"] == quiz.id
        assert result["respondent_id"] == 7
        assert result["correct"] == 2
        assert result["percentage"] == 67
        assert result["by_subject"]["Math"] == {"total": 2, "correct": 2, "percentage": 100}
        assert result["by_subject"]["Physics"] == {"total": 1, "correct": 0, "percentage": 0}

    def test_legacy_duplicates_use_earliest_record(self, db):
        quiz = Quiz(period="May", year=2023)
        db.add(quiz)
        db.flush()
        legacy = Question(quiz_id=quiz.id, number=1, prompt="?", subject="Chem", difficulty="média")
        db.add(legacy)
        db.flush()
        db.add(ResponseRecord(respondent_id=3, question_id=legacy.id, letter="d"))
        db.flush()
        db.add(ResponseRecord(respondent_id=3, question_id=legacy.id, letter="a"))
        completion_service.mark_completed(db, 3, quiz.id)
        db.commit()

        result = analytics_service.compute_for(db, quiz.id, 3)

        assert result["questions"][0]["chosen"] == "d"
        assert result["questions"][0]["correct_letter"] == "-"
        assert result["by_difficulty"]["medium"]["total"] == 1
