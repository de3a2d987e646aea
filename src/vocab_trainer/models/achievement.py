"""Achievement definitions and per-user unlock records."""

from collections.abc import Callable
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AchievementSnapshot(BaseModel):
    """The facts an achievement condition is evaluated against."""

    learned_count: int = 0
    mastered_count: int = 0
    streak: int = 0
    last_test_score: int | None = None


class Achievement(BaseModel):
    """Static achievement definition."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    icon: str = ""
    exp: int = 0
    condition: Callable[[AchievementSnapshot], bool] = Field(exclude=True)

    def is_met(self, snapshot: AchievementSnapshot) -> bool:
        return bool(self.condition(snapshot))


class UserAchievement(BaseModel):
    """A user's unlock record. At most one per (user, achievement)."""

    user_id: str
    achievement_id: str
    unlocked_at: datetime = Field(default_factory=datetime.now)
    progress: int = Field(default=100, ge=0, le=100)


DEFAULT_ACHIEVEMENTS: list[Achievement] = [
    Achievement(
        id="first_word",
        name="初来乍到",
        description="学习第一个单词",
        icon="🎯",
        exp=10,
        condition=lambda s: s.learned_count >= 1,
    ),
    Achievement(
        id="week_streak",
        name="坚持不懈",
        description="连续学习7天",
        icon="🔥",
        exp=50,
        condition=lambda s: s.streak >= 7,
    ),
    Achievement(
        id="word_master",
        name="词汇大师",
        description="掌握100个单词",
        icon="👑",
        exp=100,
        condition=lambda s: s.mastered_count >= 100,
    ),
    Achievement(
        id="perfect_score",
        name="完美表现",
        description="测试获得满分",
        icon="⭐",
        exp=30,
        condition=lambda s: s.last_test_score == 100,
    ),
]
