"""Tests for the review scheduler."""

from datetime import datetime, timedelta

from conftest import make_event, make_word

from vocab_trainer.learning.scheduler import (
    REVIEW_INTERVALS,
    consecutive_correct_streak,
    due_words,
    is_due,
    next_review_date,
    review_interval_days,
)

JAN_1 = datetime(2024, 1, 1, 9, 0, 0)


class TestNextReviewDate:
    def test_base_interval_unscaled_at_difficulty_three(self):
        assert next_review_date(3, 2, JAN_1) == JAN_1 + timedelta(days=4)

    def test_first_review_is_one_day(self):
        assert next_review_date(3, 0, JAN_1) == JAN_1 + timedelta(days=1)

    def test_easy_words_scale_down_to_half(self):
        # difficulty 1 -> max(0.5, 1/3) = 0.5; 7 * 0.5 = 3.5 -> 3
        assert review_interval_days(1, 3) == 3

    def test_hard_words_scale_up(self):
        # difficulty 5 -> 5/3; 15 * 5/3 = 25
        assert review_interval_days(5, 4) == 25

    def test_interval_is_truncated(self):
        # difficulty 4 -> 4/3; 2 * 4/3 = 2.67 -> 2
        assert review_interval_days(4, 1) == 2

    def test_streak_beyond_table_clamps_to_longest(self):
        longest = REVIEW_INTERVALS[-1]
        assert review_interval_days(3, 6) == longest
        assert review_interval_days(3, 100) == longest

    def test_negative_streak_treated_as_zero(self):
        assert review_interval_days(3, -2) == 1

    def test_defaults_to_now(self):
        now = datetime(2024, 3, 1)
        assert next_review_date(3, 0, now=now) == datetime(2024, 3, 2)


class TestIsDue:
    def test_due_once_interval_has_passed(self):
        assert is_due(JAN_1, 3, 2, now=JAN_1 + timedelta(days=4))

    def test_not_due_before_interval(self):
        assert not is_due(JAN_1, 3, 2, now=JAN_1 + timedelta(days=3, hours=23))


class TestEventLogHelpers:
    def test_trailing_correct_run(self):
        events = [
            make_event("a", True, JAN_1),
            make_event("a", False, JAN_1 + timedelta(days=1)),
            make_event("a", True, JAN_1 + timedelta(days=2)),
            make_event("a", True, JAN_1 + timedelta(days=3)),
            make_event("b", False, JAN_1 + timedelta(days=4)),
        ]
        assert consecutive_correct_streak(events, "a") == 2
        assert consecutive_correct_streak(events, "b") == 0
        assert consecutive_correct_streak(events, "missing") == 0

    def test_due_words_skips_unseen_and_keeps_catalog_order(self):
        words = [make_word("1"), make_word("2"), make_word("3")]
        events = [
            make_event("3", False, JAN_1),
            make_event("1", True, JAN_1),
        ]
        # "1": streak 1 -> 2 days; "3": streak 0 -> 1 day
        assert due_words(words, events, now=JAN_1 + timedelta(days=1)) == ["3"]
        assert due_words(words, events, now=JAN_1 + timedelta(days=2)) == ["1", "3"]
