"""Tests for statistics derived from the event log."""

from datetime import datetime, timedelta

import pytest
from conftest import make_event

from vocab_trainer.learning.stats import (
    average_accuracy,
    build_stats,
    format_duration,
    format_relative_date,
    strong_words,
    summarize_progress,
    weak_words,
    weekly_progress,
    weekly_study_time,
)
from vocab_trainer.models.progress import UserProgress
from vocab_trainer.models.quiz import TestResult, TestStatus

NOW = datetime(2024, 6, 10, 12, 0, 0)


@pytest.fixture
def history():
    # w1: 3/5, w2: 2/2, w3: 0/1, w4: 4/5
    outcomes = {
        "w1": [False, False, True, True, True],
        "w2": [True, True],
        "w3": [False],
        "w4": [True, True, True, False, True],
    }
    return [
        make_event(word_id, correct)
        for word_id, results in outcomes.items()
        for correct in results
    ]


class TestWeakStrong:
    def test_weak_words(self, history):
        assert weak_words(history) == ["w3"]

    def test_strong_words_need_three_attempts(self, history):
        assert strong_words(history) == ["w4"]

    def test_thresholds_are_configurable(self, history):
        assert weak_words(history, threshold=0.7) == ["w1", "w3"]
        assert strong_words(history, threshold=0.6) == ["w1", "w4"]

    def test_empty_history(self):
        assert weak_words([]) == []
        assert strong_words([]) == []


class TestAccuracy:
    def test_average_over_completed_tests(self):
        results = [
            TestResult(user_id="u", status=TestStatus.COMPLETED, correct_count=3,
                       total_questions=4),
            TestResult(user_id="u", status=TestStatus.COMPLETED, correct_count=1,
                       total_questions=4),
            TestResult(user_id="u", status=TestStatus.ABANDONED, correct_count=0,
                       total_questions=10),
        ]
        assert average_accuracy(results) == pytest.approx(0.5)

    def test_no_tests(self):
        assert average_accuracy([]) == 0.0


class TestWeekly:
    def test_only_last_seven_days_count(self):
        history = [
            make_event("a", True, NOW - timedelta(days=1), time_spent=30),
            make_event("b", True, NOW - timedelta(days=6), time_spent=20),
            make_event("c", True, NOW - timedelta(days=8), time_spent=100),
        ]
        assert weekly_study_time(history, now=NOW) == 50
        # 2 events / (1 per day * 7 days)
        assert weekly_progress(history, 1, now=NOW) == pytest.approx(200 / 7)

    def test_capped_at_one_hundred(self):
        history = [make_event("a", True, NOW) for _ in range(20)]
        assert weekly_progress(history, 1, now=NOW) == 100.0

    def test_zero_goal(self):
        assert weekly_progress([make_event("a", True, NOW)], 0, now=NOW) == 0.0


def test_build_stats(history):
    progress = UserProgress(user_id="tester", learned_words=["w1", "w2"], streak=3)
    stats = build_stats(progress, history, [], now=NOW)
    assert stats.user_id == "tester"
    assert stats.total_words_learned == 2
    assert stats.streak == 3
    assert stats.total_study_time == pytest.approx(130.0)
    assert stats.weak_words == ["w3"]
    assert stats.strong_words == ["w4"]
    assert stats.last_updated == NOW


def test_summarize_progress():
    summary = summarize_progress(UserProgress(user_id="u", total_exp=75, learned_words=["a"]))
    assert summary["level"] == 2
    assert summary["exp_to_next_level"] == 75
    assert summary["level_progress"] == 25.0
    assert summary["learned"] == 1


class TestFormatting:
    @pytest.mark.parametrize(
        "seconds, text",
        [(5, "5s"), (65, "1m 5s"), (3600, "1h 0m"), (3725, "1h 2m"), (0, "0s")],
    )
    def test_format_duration(self, seconds, text):
        assert format_duration(seconds) == text

    @pytest.mark.parametrize(
        "days, text",
        [(0, "今天"), (1, "昨天"), (3, "3天前"), (14, "2周前"), (60, "2个月前"), (800, "2年前")],
    )
    def test_format_relative_date(self, days, text):
        assert format_relative_date(NOW - timedelta(days=days), now=NOW) == text
