"""Vocabulary entry models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Definition(BaseModel):
    """One sense of a word."""

    model_config = ConfigDict(frozen=True)

    part_of_speech: str
    meaning: str  # source-language (English) meaning
    native_meaning: str  # native-language (Chinese) meaning


class Example(BaseModel):
    """An example sentence with its translation."""

    model_config = ConfigDict(frozen=True)

    sentence: str
    translation: str = ""


class WordEntry(BaseModel):
    """A catalog word. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    phonetic: str = ""
    definitions: tuple[Definition, ...] = ()
    examples: tuple[Example, ...] = ()
    difficulty: int = Field(default=1, ge=1, le=5)
    frequency: int = 0
    tags: frozenset[str] = frozenset()
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def primary_meaning(self) -> str:
        """Native meaning of the first definition, or empty string."""
        if not self.definitions:
            return ""
        return self.definitions[0].native_meaning

    @property
    def first_example(self) -> str | None:
        if not self.examples:
            return None
        return self.examples[0].sentence
