"""Tests for Pydantic models."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from vocab_trainer.models.progress import LearningAction, LearningEvent, UserProgress
from vocab_trainer.models.quiz import QuestionKind, TestQuestion, TestResult, TestStatus
from vocab_trainer.models.word import WordEntry


class TestWordEntry:
    def test_defaults(self):
        word = WordEntry(id="1", text="hello")
        assert word.primary_meaning == ""
        assert word.first_example is None
        assert word.difficulty == 1

    def test_difficulty_bounds(self):
        with pytest.raises(ValidationError):
            WordEntry(id="1", text="hello", difficulty=0)
        with pytest.raises(ValidationError):
            WordEntry(id="1", text="hello", difficulty=6)

    def test_frozen(self):
        word = WordEntry(id="1", text="hello")
        with pytest.raises(ValidationError):
            word.text = "bye"


class TestLearningEvent:
    def test_ids_are_unique(self):
        a = LearningEvent(word_id="1", user_id="u", action=LearningAction.TESTED, correct=True)
        b = LearningEvent(word_id="1", user_id="u", action=LearningAction.TESTED, correct=True)
        assert a.id != b.id

    def test_negative_time_rejected(self):
        with pytest.raises(ValidationError):
            LearningEvent(word_id="1", user_id="u", action=LearningAction.LEARNED,
                          correct=True, time_spent=-1)

    def test_json_round_trip(self):
        event = LearningEvent(word_id="1", user_id="u", action=LearningAction.MASTERED,
                              correct=True, timestamp=datetime(2024, 1, 1, 8))
        data = event.model_dump(mode="json")
        assert data["action"] == "mastered"
        assert LearningEvent.model_validate(data) == event


class TestTestResult:
    def test_defaults(self):
        result = TestResult(user_id="u")
        assert result.status == TestStatus.NOT_STARTED
        assert not result.is_final

    @pytest.mark.parametrize(
        "status, final",
        [
            (TestStatus.NOT_STARTED, False),
            (TestStatus.IN_PROGRESS, False),
            (TestStatus.COMPLETED, True),
            (TestStatus.ABANDONED, True),
        ],
    )
    def test_is_final(self, status, final):
        assert TestResult(user_id="u", status=status).is_final is final

    def test_question_kind_wire_values(self):
        question = TestQuestion(id="q", word_id="1", kind=QuestionKind.FILL_BLANK,
                                prompt="p", correct_answer="a")
        assert question.model_dump(mode="json")["kind"] == "fill-blank"

    def test_status_not_collected_and_members_intact(self):
        assert TestStatus.__test__ is False
        assert [s.value for s in TestStatus] == [
            "not_started", "in_progress", "completed", "abandoned",
        ]


def test_user_progress_defaults():
    progress = UserProgress(user_id="u")
    assert progress.current_level == 1
    assert progress.daily_goal == 20
    assert progress.weekly_goal == 140
    assert progress.last_study_date is None
