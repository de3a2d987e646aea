"""Achievement unlocking."""

from datetime import datetime

import structlog

from vocab_trainer.models.achievement import (
    DEFAULT_ACHIEVEMENTS,
    Achievement,
    AchievementSnapshot,
    UserAchievement,
)

logger = structlog.get_logger()


class AchievementBook:
    """A user's unlocked achievements, at most one record per achievement.

    Args:
        user_id: Owner of the records.
        unlocked: Previously persisted unlock records.
        definitions: Achievement catalog.
    """

    def __init__(
        self,
        user_id: str,
        unlocked: list[UserAchievement] | None = None,
        definitions: list[Achievement] | None = None,
    ):
        self.user_id = user_id
        self.definitions = definitions if definitions is not None else DEFAULT_ACHIEVEMENTS
        self._records: dict[str, UserAchievement] = {}
        for record in unlocked or []:
            self._records.setdefault(record.achievement_id, record)

    @property
    def records(self) -> list[UserAchievement]:
        return list(self._records.values())

    def is_unlocked(self, achievement_id: str) -> bool:
        return achievement_id in self._records

    def unlock(self, achievement_id: str, now: datetime | None = None) -> bool:
        """Unlock by id. Unlocking twice is a no-op that returns False."""
        if achievement_id in self._records:
            return False
        self._records[achievement_id] = UserAchievement(
            user_id=self.user_id,
            achievement_id=achievement_id,
            unlocked_at=now or datetime.now(),
            progress=100,
        )
        logger.info("achievement_unlocked", user_id=self.user_id, achievement_id=achievement_id)
        return True

    def update_progress(self, achievement_id: str, progress: int) -> None:
        """Set progress on an existing record, clamped to 0-100."""
        record = self._records.get(achievement_id)
        if record is None:
            return
        record.progress = min(max(progress, 0), 100)

    def evaluate(self, snapshot: AchievementSnapshot) -> list[Achievement]:
        """Unlock every satisfied achievement and return the newly unlocked ones."""
        newly = []
        for achievement in self.definitions:
            if self.is_unlocked(achievement.id):
                continue
            if achievement.is_met(snapshot) and self.unlock(achievement.id):
                newly.append(achievement)
        return newly
