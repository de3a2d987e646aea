"""Review scheduling on a fixed forgetting-curve interval table."""

import datetime
import math

from vocab_trainer.models.progress import LearningEvent
from vocab_trainer.models.word import WordEntry

# Review intervals in days, indexed by consecutive correct answers.
REVIEW_INTERVALS: tuple[int, ...] = (1, 2, 4, 7, 15, 30)


def review_interval_days(difficulty: int, consecutive_correct: int) -> int:
    """Whole days until the next review.

    The base interval is clamped to the last table entry, then scaled by
    ``max(0.5, difficulty / 3)`` and truncated.
    """
    index = min(max(consecutive_correct, 0), len(REVIEW_INTERVALS) - 1)
    base = REVIEW_INTERVALS[index]
    return math.floor(base * max(0.5, difficulty / 3))


def next_review_date(
    difficulty: int,
    consecutive_correct: int,
    last_reviewed: datetime.datetime | None = None,
    now: datetime.datetime | None = None,
) -> datetime.datetime:
    """
    Compute when a word should next be reviewed.

    Args:
        difficulty: Word difficulty (1-5).
        consecutive_correct: Current run of correct answers for the word.
        last_reviewed: Time of the last review. Defaults to ``now``.
        now: Current time, injectable for tests.

    Returns:
        The next review datetime.
    """
    start = last_reviewed or now or datetime.datetime.now()
    return start + datetime.timedelta(days=review_interval_days(difficulty, consecutive_correct))


def is_due(
    last_reviewed: datetime.datetime,
    difficulty: int,
    consecutive_correct: int,
    now: datetime.datetime | None = None,
) -> bool:
    """True iff the current time has reached the next review date."""
    now = now or datetime.datetime.now()
    return now >= next_review_date(difficulty, consecutive_correct, last_reviewed)


def consecutive_correct_streak(events: list[LearningEvent], word_id: str) -> int:
    """Length of the trailing run of correct answers for one word."""
    history = sorted(
        (e for e in events if e.word_id == word_id),
        key=lambda e: e.timestamp,
    )
    count = 0
    for event in reversed(history):
        if not event.correct:
            break
        count += 1
    return count


def due_words(
    words: list[WordEntry],
    events: list[LearningEvent],
    now: datetime.datetime | None = None,
) -> list[str]:
    """Ids of words with history whose next review has come, in catalog order."""
    now = now or datetime.datetime.now()
    last_seen: dict[str, datetime.datetime] = {}
    for event in events:
        previous = last_seen.get(event.word_id)
        if previous is None or event.timestamp > previous:
            last_seen[event.word_id] = event.timestamp

    due = []
    for word in words:
        last = last_seen.get(word.id)
        if last is None:
            continue
        streak = consecutive_correct_streak(events, word.id)
        if is_due(last, word.difficulty, streak, now=now):
            due.append(word.id)
    return due
