"""Test question generation from the word catalog."""

import random
import re
from collections.abc import Sequence

import structlog

from vocab_trainer.models.quiz import QuestionKind, TestQuestion
from vocab_trainer.models.word import WordEntry

logger = structlog.get_logger()

BLANK = "____"
CHOICE_DISTRACTORS = 3
MIXED_KINDS: tuple[QuestionKind, ...] = (
    QuestionKind.CHOICE,
    QuestionKind.FILL_BLANK,
    QuestionKind.SPELLING,
)


class QuestionGenerator:
    """Builds choice, fill-blank and spelling questions.

    All randomness comes from the injected ``rng`` so a seeded
    ``random.Random`` gives reproducible tests.

    Args:
        rng: Random source. Defaults to a fresh unseeded ``random.Random``.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def generate_test(
        self,
        words: Sequence[WordEntry],
        question_count: int = 10,
        kinds: Sequence[QuestionKind] = (QuestionKind.CHOICE,),
    ) -> list[TestQuestion]:
        """Generate ``min(question_count, len(words))`` questions.

        Args:
            words: Catalog to draw from. Also the distractor pool.
            question_count: Number of questions wanted.
            kinds: Allowed question kinds, picked uniformly per question.

        Returns:
            Generated questions; empty when ``words`` is empty.
        """
        if not kinds:
            raise ValueError("At least one question kind is required")
        if not words:
            return []

        shuffled = list(words)
        self.rng.shuffle(shuffled)
        selected = shuffled[:max(min(question_count, len(words)), 0)]

        questions = []
        for word in selected:
            kind = QuestionKind(self.rng.choice(list(kinds)))
            questions.append(self.build_question(word, kind, words))

        logger.debug(
            "test_generated",
            question_count=len(questions),
            kinds=[str(k) for k in kinds],
        )
        return questions

    def build_question(
        self,
        word: WordEntry,
        kind: QuestionKind,
        all_words: Sequence[WordEntry],
    ) -> TestQuestion:
        if kind == QuestionKind.CHOICE:
            return self.choice_question(word, all_words)
        elif kind == QuestionKind.FILL_BLANK:
            return fill_blank_question(word)
        elif kind == QuestionKind.SPELLING:
            return spelling_question(word)
        raise ValueError(f"Unknown question kind: {kind!r}")

    def choice_question(self, word: WordEntry, all_words: Sequence[WordEntry]) -> TestQuestion:
        """Ask for the native meaning among the correct answer and up to 3 distractors.

        When the catalog holds fewer than 3 other distinct meanings the
        question carries fewer options instead of padding.
        """
        correct = word.primary_meaning

        distractors: list[str] = []
        for other in all_words:
            if other.id == word.id:
                continue
            meaning = other.primary_meaning
            if meaning and meaning != correct and meaning not in distractors:
                distractors.append(meaning)
        self.rng.shuffle(distractors)
        distractors = distractors[:CHOICE_DISTRACTORS]

        if len(distractors) < CHOICE_DISTRACTORS:
            logger.warning(
                "choice_options_short",
                word_id=word.id,
                option_count=len(distractors) + 1,
            )

        options = [correct, *distractors]
        self.rng.shuffle(options)

        return TestQuestion(
            id=f"{QuestionKind.CHOICE}-{word.id}",
            word_id=word.id,
            kind=QuestionKind.CHOICE,
            prompt=f'"{word.text}" 的中文意思是？',
            options=tuple(options),
            correct_answer=correct,
            explanation=explanation_for(word),
        )


def explanation_for(word: WordEntry) -> str:
    return f"{word.text} - {word.phonetic} - {word.primary_meaning}"


def blank_out(sentence: str, text: str) -> str:
    """Replace every case-insensitive occurrence of ``text`` with the blank marker."""
    if not text:
        return sentence
    return re.sub(re.escape(text), BLANK, sentence, flags=re.IGNORECASE)


def fill_blank_question(word: WordEntry) -> TestQuestion:
    """Blank the word out of its first example.

    Falls back to ``This is a {text}.`` when there is no example or the
    example does not contain the word verbatim (e.g. an inflected form).
    """
    blanked = blank_out(word.first_example or "", word.text)
    if BLANK not in blanked:
        blanked = blank_out(f"This is a {word.text}.", word.text)
    return TestQuestion(
        id=f"{QuestionKind.FILL_BLANK}-{word.id}",
        word_id=word.id,
        kind=QuestionKind.FILL_BLANK,
        prompt=f"填空：{blanked}",
        correct_answer=word.text,
        explanation=explanation_for(word),
    )


def spelling_question(word: WordEntry) -> TestQuestion:
    return TestQuestion(
        id=f"{QuestionKind.SPELLING}-{word.id}",
        word_id=word.id,
        kind=QuestionKind.SPELLING,
        prompt=f"请拼写：{word.primary_meaning}",
        correct_answer=word.text.lower(),
        explanation=explanation_for(word),
    )
