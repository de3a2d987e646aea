"""Review-priority ranking and session word selection."""

import datetime
from enum import StrEnum

import structlog

from vocab_trainer.models.progress import LearningEvent, UserProgress
from vocab_trainer.models.word import WordEntry

logger = structlog.get_logger()

ERROR_WEIGHT = 0.4
RECENCY_WEIGHT = 0.3
DIFFICULTY_WEIGHT = 0.3
DIFFICULTY_BONUS_FACTOR = 0.3
RECENCY_HORIZON_DAYS = 30

NEW_SESSION_LIMIT = 10
REVIEW_SESSION_LIMIT = 15


class SessionMode(StrEnum):
    """Learning session flavours."""

    NEW = "new"
    REVIEW = "review"


def error_rate(history: list[LearningEvent]) -> float:
    """Fraction of incorrect events. Unseen words score 1.0."""
    if not history:
        return 1.0
    incorrect = sum(1 for e in history if not e.correct)
    return incorrect / len(history)


def recency_score(
    history: list[LearningEvent],
    now: datetime.datetime | None = None,
) -> float:
    """Days since the last event over a 30-day horizon, clamped to [0, 1].

    Unseen words score 1.0.
    """
    if not history:
        return 1.0
    now = now or datetime.datetime.now()
    last = max(e.timestamp for e in history)
    days = (now - last).total_seconds() / 86400
    return min(max(days / RECENCY_HORIZON_DAYS, 0.0), 1.0)


def composite_score(
    word: WordEntry,
    history: list[LearningEvent],
    now: datetime.datetime | None = None,
) -> float:
    """Weighted review priority of a single word."""
    difficulty_bonus = word.difficulty * DIFFICULTY_BONUS_FACTOR
    return (
        error_rate(history) * ERROR_WEIGHT
        + recency_score(history, now) * RECENCY_WEIGHT
        + difficulty_bonus * DIFFICULTY_WEIGHT
    )


def rank(
    words: list[WordEntry],
    history: list[LearningEvent],
    count: int = 10,
    now: datetime.datetime | None = None,
) -> list[WordEntry]:
    """Order words by review priority, highest first.

    Equal scores keep their input order. The input list is not modified.

    Args:
        words: Candidate words.
        history: Learning event log.
        count: Maximum number of words to return.
        now: Current time, injectable for tests.

    Returns:
        At most ``count`` words.
    """
    now = now or datetime.datetime.now()
    by_word: dict[str, list[LearningEvent]] = {}
    for event in history:
        by_word.setdefault(event.word_id, []).append(event)

    scores = {w.id: composite_score(w, by_word.get(w.id, []), now) for w in words}
    ranked = sorted(words, key=lambda w: scores[w.id], reverse=True)
    return ranked[:max(count, 0)]


def select_session_words(
    words: list[WordEntry],
    progress: UserProgress | None,
    mode: SessionMode,
    new_limit: int = NEW_SESSION_LIMIT,
    review_limit: int = REVIEW_SESSION_LIMIT,
) -> list[str]:
    """Pick word ids for a learning session, in catalog order.

    ``new`` takes words not yet learned; ``review`` takes learned words
    that are not mastered.
    """
    learned = set(progress.learned_words) if progress else set()
    mastered = set(progress.mastered_words) if progress else set()

    if mode == SessionMode.NEW:
        selected = [w.id for w in words if w.id not in learned][:new_limit]
    elif mode == SessionMode.REVIEW:
        selected = [
            w.id for w in words if w.id in learned and w.id not in mastered
        ][:review_limit]
    else:
        raise ValueError(f"Unknown session mode: {mode!r}")

    logger.debug("session_words_selected", mode=str(mode), count=len(selected))
    return selected
