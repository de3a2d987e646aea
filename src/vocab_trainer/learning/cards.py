"""Flashcard learning session over a fixed list of word ids."""

import structlog

from vocab_trainer.learning.recommend import SessionMode
from vocab_trainer.models.progress import LearningAction, LearningEvent
from vocab_trainer.models.word import WordEntry

logger = structlog.get_logger()


class CardSession:
    """Walks the user through session words one card at a time.

    Args:
        user_id: Learner id stamped on produced events.
        words_by_id: Catalog lookup.
        word_ids: Session word ids, in presentation order.
        mode: Whether this is a new-word or review session.
    """

    def __init__(
        self,
        user_id: str,
        words_by_id: dict[str, WordEntry],
        word_ids: list[str],
        mode: SessionMode,
    ):
        self.user_id = user_id
        self.mode = mode
        # Ids missing from the catalog are dropped up front.
        self.word_ids = [wid for wid in word_ids if wid in words_by_id]
        self._words_by_id = words_by_id
        self.index = 0
        self.known_count = 0
        self.unknown_count = 0

    @property
    def total(self) -> int:
        return len(self.word_ids)

    @property
    def is_finished(self) -> bool:
        return self.index >= len(self.word_ids)

    @property
    def current_word(self) -> WordEntry | None:
        if self.is_finished:
            return None
        return self._words_by_id[self.word_ids[self.index]]

    @property
    def progress(self) -> float:
        """Percentage of cards already answered."""
        if not self.word_ids:
            return 0.0
        return min(self.index, self.total) / self.total * 100

    def mark(self, known: bool, time_spent: float = 0.0) -> LearningEvent | None:
        """Answer the current card and move on.

        Returns:
            The event to record, or None when there is no current card.
        """
        word = self.current_word
        if word is None:
            return None

        if known:
            self.known_count += 1
        else:
            self.unknown_count += 1

        event = LearningEvent(
            word_id=word.id,
            user_id=self.user_id,
            action=LearningAction.LEARNED if known else LearningAction.REVIEWED,
            correct=known,
            time_spent=max(time_spent, 0.0),
            difficulty=word.difficulty,
        )
        self.index += 1
        if self.is_finished:
            logger.info(
                "card_session_finished",
                user_id=self.user_id,
                mode=str(self.mode),
                known=self.known_count,
                unknown=self.unknown_count,
            )
        return event
