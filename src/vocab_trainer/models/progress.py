"""Learning event log and per-user progress models."""

import uuid
from datetime import date, datetime
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class LearningAction(StrEnum):
    """What a learning event represents."""

    LEARNED = "learned"
    REVIEWED = "reviewed"
    TESTED = "tested"
    MASTERED = "mastered"


class LearningEvent(BaseModel):
    """A single append-only entry in the learning history."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    word_id: str
    user_id: str
    action: LearningAction
    correct: bool
    time_spent: float = Field(default=0.0, ge=0)  # seconds
    difficulty: int = Field(default=3, ge=1, le=5)  # perceived
    timestamp: datetime = Field(default_factory=datetime.now)


class UserProgress(BaseModel):
    """Aggregate progress for one user. Written only by the ProgressLedger."""

    user_id: str
    total_words: int = 0
    learned_words: list[str] = Field(default_factory=list)
    mastered_words: list[str] = Field(default_factory=list)
    current_level: int = 1
    total_exp: int = 0
    streak: int = 0  # consecutive study days
    last_study_date: date | None = None
    daily_goal: int = 20
    weekly_goal: int = 140


class UserSettings(BaseModel):
    user_id: str
    daily_goal: int = 20
    study_reminders: bool = True
    reminder_time: str = "20:00"
    sound_enabled: bool = True
    theme: Literal["light", "dark"] = "light"
    difficulty: Literal["beginner", "intermediate", "advanced"] = "beginner"
    auto_play_audio: bool = True


class LearningStats(BaseModel):
    """Derived statistics snapshot, recomputed from the event log on demand."""

    user_id: str
    total_words_learned: int = 0
    average_accuracy: float = 0.0  # 0-1
    total_study_time: float = 0.0  # seconds
    streak: int = 0
    weekly_progress: float = 0.0  # 0-100
    weak_words: list[str] = Field(default_factory=list)
    strong_words: list[str] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=datetime.now)
