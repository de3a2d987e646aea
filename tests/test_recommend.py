"""Tests for the recommendation ranker and session word selection."""

from datetime import datetime, timedelta

import pytest
from conftest import make_event, make_word

from vocab_trainer.learning.recommend import (
    SessionMode,
    composite_score,
    error_rate,
    rank,
    recency_score,
    select_session_words,
)
from vocab_trainer.models.progress import UserProgress

NOW = datetime(2024, 6, 1, 12, 0, 0)


class TestColdStart:
    def test_unseen_word_has_maximal_error_and_recency(self):
        assert error_rate([]) == 1.0
        assert recency_score([], now=NOW) == 1.0

    def test_error_rate_counts_incorrect_fraction(self):
        history = [make_event("a", False), make_event("a", True), make_event("a", True),
                   make_event("a", False)]
        assert error_rate(history) == pytest.approx(0.5)

    def test_recency_normalized_over_thirty_days(self):
        history = [make_event("a", True, NOW - timedelta(days=15))]
        assert recency_score(history, now=NOW) == pytest.approx(0.5)

    def test_recency_clamped_to_one(self):
        history = [make_event("a", True, NOW - timedelta(days=90))]
        assert recency_score(history, now=NOW) == 1.0

    def test_recency_uses_latest_event(self):
        history = [
            make_event("a", True, NOW - timedelta(days=29)),
            make_event("a", True, NOW - timedelta(days=3)),
        ]
        assert recency_score(history, now=NOW) == pytest.approx(0.1)

    def test_composite_score_weights(self):
        word = make_word("a", difficulty=2)
        # 0.4 * 1 + 0.3 * 1 + 0.3 * (2 * 0.3)
        assert composite_score(word, [], now=NOW) == pytest.approx(0.88)


class TestRank:
    def test_length_is_min_of_count_and_words(self):
        words = [make_word(str(i)) for i in range(5)]
        assert len(rank(words, [], 3, now=NOW)) == 3
        assert len(rank(words, [], 10, now=NOW)) == 5

    def test_scores_are_non_increasing(self):
        words = [make_word(str(i), difficulty=(i % 5) + 1) for i in range(8)]
        history = [
            make_event("0", True, NOW - timedelta(days=1)),
            make_event("3", False, NOW - timedelta(days=2)),
            make_event("5", True, NOW - timedelta(days=20)),
        ]
        ranked = rank(words, history, 8, now=NOW)
        by_word = {}
        for e in history:
            by_word.setdefault(e.word_id, []).append(e)
        scores = [composite_score(w, by_word.get(w.id, []), now=NOW) for w in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_unseen_words_rank_above_well_known_ones(self):
        known = make_word("known", difficulty=3)
        fresh = make_word("fresh", difficulty=3)
        history = [make_event("known", True, NOW) for _ in range(3)]
        assert [w.id for w in rank([known, fresh], history, 2, now=NOW)] == ["fresh", "known"]

    def test_ties_keep_input_order(self):
        words = [make_word("c"), make_word("a"), make_word("b")]
        assert [w.id for w in rank(words, [], 3, now=NOW)] == ["c", "a", "b"]

    def test_input_not_mutated(self):
        words = [make_word("1", difficulty=1), make_word("2", difficulty=5)]
        rank(words, [], 2, now=NOW)
        assert [w.id for w in words] == ["1", "2"]


class TestSelectSessionWords:
    @pytest.fixture
    def catalog(self):
        return [make_word(str(i)) for i in range(1, 21)]

    def test_new_mode_skips_learned_and_caps_at_ten(self, catalog):
        progress = UserProgress(user_id="u", learned_words=["1", "3"])
        selected = select_session_words(catalog, progress, SessionMode.NEW)
        assert len(selected) == 10
        assert selected[:3] == ["2", "4", "5"]
        assert "1" not in selected and "3" not in selected

    def test_review_mode_takes_learned_not_mastered(self, catalog):
        progress = UserProgress(
            user_id="u",
            learned_words=["5", "2", "9"],
            mastered_words=["9"],
        )
        assert select_session_words(catalog, progress, SessionMode.REVIEW) == ["2", "5"]

    def test_review_mode_caps_at_fifteen(self, catalog):
        progress = UserProgress(user_id="u", learned_words=[w.id for w in catalog])
        assert len(select_session_words(catalog, progress, SessionMode.REVIEW)) == 15

    def test_no_progress(self, catalog):
        assert select_session_words(catalog, None, SessionMode.NEW) == [str(i) for i in range(1, 11)]
        assert select_session_words(catalog, None, SessionMode.REVIEW) == []

    def test_custom_limits(self, catalog):
        assert len(select_session_words(catalog, None, SessionMode.NEW, new_limit=3)) == 3
