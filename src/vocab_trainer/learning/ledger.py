"""Progress ledger: experience, levels, streaks and mastery sets."""

import datetime

import structlog

from vocab_trainer.models.progress import LearningEvent, UserProgress

logger = structlog.get_logger()

LEVEL_THRESHOLDS: tuple[int, ...] = (0, 50, 150, 300, 500, 750, 1050, 1400, 1800, 2250)
LEARNED_EXP = 5
MASTERED_EXP = 10


def level_from_exp(exp: int) -> int:
    """1-based index of the highest threshold not above ``exp``."""
    for i in range(len(LEVEL_THRESHOLDS) - 1, -1, -1):
        if exp >= LEVEL_THRESHOLDS[i]:
            return i + 1
    return 1


def exp_to_next_level(exp: int) -> int:
    """Experience still needed for the next level, 0 at the level cap."""
    level = level_from_exp(exp)
    if level >= len(LEVEL_THRESHOLDS):
        return 0
    return LEVEL_THRESHOLDS[level] - exp


def level_progress(exp: int) -> float:
    """Percentage of the way through the current level (100 at the cap)."""
    level = level_from_exp(exp)
    if level >= len(LEVEL_THRESHOLDS):
        return 100.0
    floor = LEVEL_THRESHOLDS[level - 1]
    ceiling = LEVEL_THRESHOLDS[level]
    return (max(exp, 0) - floor) / (ceiling - floor) * 100


def next_streak(
    streak: int,
    last_study_date: datetime.date | None,
    study_date: datetime.date,
) -> int:
    """Streak after studying on ``study_date``."""
    if last_study_date is None:
        return 1
    gap = (study_date - last_study_date).days
    if gap <= 0:
        return max(streak, 1)
    if gap == 1:
        return streak + 1
    return 1


class ProgressLedger:
    """Single writer of a user's progress and event log.

    Args:
        progress: The user's live progress aggregate.
        events: Existing event log, appended to in place.
    """

    def __init__(self, progress: UserProgress, events: list[LearningEvent] | None = None):
        self.progress = progress
        self.events: list[LearningEvent] = events if events is not None else []

    def record_event(self, event: LearningEvent) -> None:
        """Append an event to the log and update the study streak."""
        self.events.append(event)
        self.touch_study_date(event.timestamp.date())
        logger.debug(
            "learning_event_recorded",
            user_id=event.user_id,
            word_id=event.word_id,
            action=str(event.action),
            correct=event.correct,
        )

    def touch_study_date(self, study_date: datetime.date) -> None:
        last = self.progress.last_study_date
        if last is not None and study_date < last:
            return
        self.progress.streak = next_streak(self.progress.streak, last, study_date)
        self.progress.last_study_date = study_date

    def mark_learned(self, word_id: str) -> bool:
        """Add a word to the learned set. Returns False if it was already there."""
        if word_id in self.progress.learned_words:
            return False
        self.progress.learned_words.append(word_id)
        self.progress.total_words = len(self.progress.learned_words)
        self.grant_exp(LEARNED_EXP)
        logger.info("word_learned", user_id=self.progress.user_id, word_id=word_id)
        return True

    def mark_mastered(self, word_id: str) -> bool:
        """Add a word to the mastered set. Returns False if it was already there."""
        if word_id in self.progress.mastered_words:
            return False
        self.progress.mastered_words.append(word_id)
        self.grant_exp(MASTERED_EXP)
        logger.info("word_mastered", user_id=self.progress.user_id, word_id=word_id)
        return True

    def grant_exp(self, amount: int) -> None:
        old_level = self.progress.current_level
        self.progress.total_exp += amount
        self.progress.current_level = level_from_exp(self.progress.total_exp)
        if self.progress.current_level > old_level:
            logger.info(
                "level_up",
                user_id=self.progress.user_id,
                old_level=old_level,
                new_level=self.progress.current_level,
            )
