"""Statistics derived from the learning event log and test results."""

import datetime
import math

from vocab_trainer.learning.ledger import exp_to_next_level, level_from_exp, level_progress
from vocab_trainer.models.progress import LearningEvent, LearningStats, UserProgress
from vocab_trainer.models.quiz import TestResult, TestStatus

MIN_STRONG_ATTEMPTS = 3


def _word_tallies(history: list[LearningEvent]) -> dict[str, tuple[int, int]]:
    """Map word id to (correct, total), in first-seen order."""
    tallies: dict[str, tuple[int, int]] = {}
    for event in history:
        correct, total = tallies.get(event.word_id, (0, 0))
        tallies[event.word_id] = (correct + int(event.correct), total + 1)
    return tallies


def weak_words(history: list[LearningEvent], threshold: float = 0.5) -> list[str]:
    """Words whose correct ratio is strictly below ``threshold``."""
    return [
        word_id for word_id, (correct, total) in _word_tallies(history).items()
        if correct / total < threshold
    ]


def strong_words(history: list[LearningEvent], threshold: float = 0.8) -> list[str]:
    """Words with a correct ratio of at least ``threshold`` over 3+ attempts."""
    return [
        word_id for word_id, (correct, total) in _word_tallies(history).items()
        if correct / total >= threshold and total >= MIN_STRONG_ATTEMPTS
    ]


def average_accuracy(results: list[TestResult]) -> float:
    """Overall fraction of correctly answered questions across completed tests."""
    completed = [r for r in results if r.status == TestStatus.COMPLETED]
    total_questions = sum(r.total_questions for r in completed)
    if total_questions == 0:
        return 0.0
    total_correct = sum(r.correct_count for r in completed)
    return total_correct / total_questions


def total_study_time(history: list[LearningEvent]) -> float:
    return sum(e.time_spent for e in history)


def events_since(history: list[LearningEvent], since: datetime.datetime) -> list[LearningEvent]:
    return [e for e in history if e.timestamp >= since]


def weekly_study_time(
    history: list[LearningEvent],
    now: datetime.datetime | None = None,
) -> float:
    """Seconds studied over the last 7 days."""
    now = now or datetime.datetime.now()
    return total_study_time(events_since(history, now - datetime.timedelta(days=7)))


def weekly_progress(
    history: list[LearningEvent],
    daily_goal: int,
    now: datetime.datetime | None = None,
) -> float:
    """Events in the last 7 days as a percentage of a week of daily goals, capped at 100."""
    if daily_goal <= 0:
        return 0.0
    now = now or datetime.datetime.now()
    recent = events_since(history, now - datetime.timedelta(days=7))
    return min(len(recent) / daily_goal / 7 * 100, 100.0)


def build_stats(
    progress: UserProgress,
    history: list[LearningEvent],
    results: list[TestResult],
    weak_threshold: float = 0.5,
    strong_threshold: float = 0.8,
    now: datetime.datetime | None = None,
) -> LearningStats:
    """Assemble a LearningStats snapshot. Nothing is cached."""
    now = now or datetime.datetime.now()
    return LearningStats(
        user_id=progress.user_id,
        total_words_learned=len(progress.learned_words),
        average_accuracy=average_accuracy(results),
        total_study_time=total_study_time(history),
        streak=progress.streak,
        weekly_progress=weekly_progress(history, progress.daily_goal, now),
        weak_words=weak_words(history, weak_threshold),
        strong_words=strong_words(history, strong_threshold),
        last_updated=now,
    )


def summarize_progress(progress: UserProgress) -> dict:
    """Flat view of level/experience numbers for display."""
    return {
        "level": level_from_exp(progress.total_exp),
        "total_exp": progress.total_exp,
        "exp_to_next_level": exp_to_next_level(progress.total_exp),
        "level_progress": round(level_progress(progress.total_exp), 1),
        "learned": len(progress.learned_words),
        "mastered": len(progress.mastered_words),
        "streak": progress.streak,
    }


def format_duration(seconds: float) -> str:
    """Render a study time as ``1h 2m``, ``3m 4s`` or ``5s``."""
    seconds = int(seconds)
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    elif minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_relative_date(
    when: datetime.datetime,
    now: datetime.datetime | None = None,
) -> str:
    """Chinese relative date label (今天, 昨天, 3天前, ...)."""
    now = now or datetime.datetime.now()
    days = math.ceil(abs((now - when).total_seconds()) / 86400)
    if days == 0:
        return "今天"
    if days == 1:
        return "昨天"
    if days < 7:
        return f"{days}天前"
    if days < 30:
        return f"{days // 7}周前"
    if days < 365:
        return f"{days // 30}个月前"
    return f"{days // 365}年前"
