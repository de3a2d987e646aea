"""Per-user JSON persistence (fcntl.flock + atomic write)."""

import fcntl
import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel

from vocab_trainer.models.achievement import UserAchievement
from vocab_trainer.models.progress import LearningEvent, UserProgress, UserSettings
from vocab_trainer.models.quiz import TestResult

logger = structlog.get_logger()

_USER_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

PROGRESS_FILENAME = "progress.json"
SETTINGS_FILENAME = "settings.json"
EVENTS_FILENAME = "events.json"
ACHIEVEMENTS_FILENAME = "achievements.json"
TESTS_FILENAME = "tests.json"


def validate_user_id(user_id: str) -> str:
    if not _USER_ID_RE.match(user_id):
        raise ValueError(f"Invalid user id: {user_id!r}")
    return user_id


class JsonStore:
    """Key-value store of user data, one directory per user.

    Args:
        users_dir: Root directory holding one sub-directory per user id.
    """

    def __init__(self, users_dir: Path):
        self.users_dir = users_dir

    def user_dir(self, user_id: str) -> Path:
        d = self.users_dir / validate_user_id(user_id)
        d.mkdir(parents=True, exist_ok=True)
        return d

    def _read(self, path: Path) -> Any:
        with open(path, encoding="utf-8") as f:
            fcntl.flock(f, fcntl.LOCK_SH)
            try:
                return json.load(f)
            except json.JSONDecodeError:
                logger.error("store_read_failed", path=str(path))
                raise
            finally:
                fcntl.flock(f, fcntl.LOCK_UN)

    def _write(self, path: Path, data: Any) -> None:
        with tempfile.NamedTemporaryFile(
            "w", dir=path.parent, delete=False, suffix=".json", encoding="utf-8"
        ) as tmp:
            json.dump(data, tmp, indent=2, ensure_ascii=False, default=str)
        os.replace(tmp.name, path)

    def _load_model(self, path: Path, model: type[BaseModel]) -> BaseModel | None:
        if not path.exists():
            return None
        return model.model_validate(self._read(path))

    def _load_list(self, path: Path, model: type[BaseModel]) -> list:
        if not path.exists():
            return []
        return [model.model_validate(item) for item in self._read(path)]

    def _append_list(self, path: Path, items: list[BaseModel]) -> None:
        lock_path = path.with_name(path.name + ".lock")
        with open(lock_path, "w") as lock_file:
            fcntl.flock(lock_file, fcntl.LOCK_EX)
            data = self._read(path) if path.exists() else []
            data.extend(item.model_dump(mode="json") for item in items)
            self._write(path, data)

    # Progress

    def load_progress(self, user_id: str, **defaults) -> UserProgress:
        """Load progress, or a fresh record built with ``defaults`` for new users."""
        path = self.user_dir(user_id) / PROGRESS_FILENAME
        progress = self._load_model(path, UserProgress)
        return progress if progress is not None else UserProgress(user_id=user_id, **defaults)

    def save_progress(self, progress: UserProgress) -> None:
        path = self.user_dir(progress.user_id) / PROGRESS_FILENAME
        self._write(path, progress.model_dump(mode="json"))

    # Settings

    def load_settings(self, user_id: str) -> UserSettings:
        path = self.user_dir(user_id) / SETTINGS_FILENAME
        settings = self._load_model(path, UserSettings)
        return settings if settings is not None else UserSettings(user_id=user_id)

    def save_settings(self, settings: UserSettings) -> None:
        path = self.user_dir(settings.user_id) / SETTINGS_FILENAME
        self._write(path, settings.model_dump(mode="json"))

    # Event log

    def load_events(self, user_id: str) -> list[LearningEvent]:
        return self._load_list(self.user_dir(user_id) / EVENTS_FILENAME, LearningEvent)

    def append_events(self, user_id: str, events: list[LearningEvent]) -> None:
        """Append events to the user's log. The log is never rewritten."""
        if not events:
            return
        self._append_list(self.user_dir(user_id) / EVENTS_FILENAME, events)

    # Achievements

    def load_achievements(self, user_id: str) -> list[UserAchievement]:
        return self._load_list(self.user_dir(user_id) / ACHIEVEMENTS_FILENAME, UserAchievement)

    def save_achievements(self, user_id: str, records: list[UserAchievement]) -> None:
        path = self.user_dir(user_id) / ACHIEVEMENTS_FILENAME
        self._write(path, [r.model_dump(mode="json") for r in records])

    # Test results

    def load_test_results(self, user_id: str) -> list[TestResult]:
        return self._load_list(self.user_dir(user_id) / TESTS_FILENAME, TestResult)

    def append_test_result(self, result: TestResult) -> None:
        self._append_list(self.user_dir(result.user_id) / TESTS_FILENAME, [result])
