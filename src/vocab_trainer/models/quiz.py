"""Test question and test result models."""

import uuid
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class QuestionKind(StrEnum):
    """Kinds of generated test questions."""

    CHOICE = "choice"
    FILL_BLANK = "fill-blank"
    SPELLING = "spelling"


class TestStatus(StrEnum):
    """Test lifecycle states."""

    __test__ = False

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


class TestQuestion(BaseModel):
    """A generated question. Immutable once generated."""

    __test__ = False
    model_config = ConfigDict(frozen=True)

    id: str
    word_id: str
    kind: QuestionKind
    prompt: str
    options: tuple[str, ...] | None = None  # choice questions only
    correct_answer: str
    explanation: str = ""


class TestResult(BaseModel):
    """One test attempt.

    ``answers`` is parallel to ``questions`` and is filled in place while
    the test is running. The score is computed exactly once, on completion.
    """

    __test__ = False

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    user_id: str
    test_kind: str = "mixed"  # "choice" or "mixed"
    questions: list[TestQuestion] = Field(default_factory=list)
    answers: list[str] = Field(default_factory=list)
    score: int = 0
    correct_count: int = 0
    total_questions: int = 0
    time_spent: float = 0.0  # seconds
    timestamp: datetime = Field(default_factory=datetime.now)
    status: TestStatus = TestStatus.NOT_STARTED

    @property
    def is_final(self) -> bool:
        return self.status in (TestStatus.COMPLETED, TestStatus.ABANDONED)
