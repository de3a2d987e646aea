"""Shared fixtures and factories."""

from datetime import datetime

import pytest

from vocab_trainer.models.progress import LearningAction, LearningEvent
from vocab_trainer.models.word import Definition, Example, WordEntry


def make_word(
    word_id: str,
    text: str | None = None,
    meaning: str | None = None,
    difficulty: int = 3,
    example: str | None = None,
    phonetic: str = "/x/",
) -> WordEntry:
    text = text or f"word{word_id}"
    return WordEntry(
        id=word_id,
        text=text,
        phonetic=phonetic,
        definitions=(
            Definition(
                part_of_speech="n.",
                meaning=f"meaning of {text}",
                native_meaning=meaning if meaning is not None else f"意思{word_id}",
            ),
        ),
        examples=(Example(sentence=example, translation=""),) if example else (),
        difficulty=difficulty,
        frequency=3,
        tags=frozenset({"test"}),
        created_at=datetime(2024, 1, 1),
        updated_at=datetime(2024, 1, 1),
    )


def make_event(
    word_id: str,
    correct: bool,
    timestamp: datetime | None = None,
    action: LearningAction = LearningAction.REVIEWED,
    time_spent: float = 10.0,
    user_id: str = "tester",
) -> LearningEvent:
    return LearningEvent(
        word_id=word_id,
        user_id=user_id,
        action=action,
        correct=correct,
        time_spent=time_spent,
        difficulty=3,
        timestamp=timestamp or datetime(2024, 1, 1, 12, 0, 0),
    )


@pytest.fixture
def words() -> list[WordEntry]:
    return [
        make_word("1", "abandon", "抛弃", 2, "The captain gave orders to abandon the ship."),
        make_word("2", "ability", "能力", 1, "She has the ability to make people feel at ease."),
        make_word("3", "academic", "学术的", 3, "Academic standards are high."),
        make_word("4", "accept", "接受", 1),
        make_word("5", "achieve", "实现", 2, "She worked hard to achieve her goals."),
        make_word("6", "across", "穿过", 1, "He walked across the street."),
    ]
