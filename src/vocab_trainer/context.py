"""Explicit per-user study context wiring the learning components together."""

import datetime
import random

import structlog

from vocab_trainer.catalog import index_by_id
from vocab_trainer.config import Settings
from vocab_trainer.errors import InvalidTransitionError
from vocab_trainer.learning.achievements import AchievementBook
from vocab_trainer.learning.cards import CardSession
from vocab_trainer.learning.generator import MIXED_KINDS, QuestionGenerator
from vocab_trainer.learning.ledger import ProgressLedger
from vocab_trainer.learning.recommend import SessionMode, rank, select_session_words
from vocab_trainer.learning.runner import TestRunner
from vocab_trainer.learning.scheduler import due_words
from vocab_trainer.learning.stats import build_stats, strong_words
from vocab_trainer.models.achievement import Achievement, AchievementSnapshot
from vocab_trainer.models.progress import (
    LearningAction,
    LearningEvent,
    LearningStats,
    UserProgress,
    UserSettings,
)
from vocab_trainer.models.quiz import QuestionKind, TestResult, TestStatus
from vocab_trainer.models.word import WordEntry
from vocab_trainer.storage.store import JsonStore

logger = structlog.get_logger()


class StudyContext:
    """Everything one user's study session needs, passed around explicitly.

    Owns the user's progress ledger, achievement book, the live card
    session and the live test runner. When a store is given, state is
    loaded from it on creation and written back by ``persist``.

    Args:
        user_id: Learner id.
        words: Word catalog, in catalog order.
        settings: Application settings.
        store: Optional persistence collaborator.
        rng: Random source for question generation.
    """

    def __init__(
        self,
        user_id: str,
        words: list[WordEntry],
        settings: Settings,
        store: JsonStore | None = None,
        rng: random.Random | None = None,
    ):
        self.user_id = user_id
        self.words = words
        self.words_by_id = index_by_id(words)
        self.settings = settings
        self.store = store
        self.rng = rng or random.Random(settings.random_seed)

        goals = {"daily_goal": settings.daily_goal, "weekly_goal": settings.weekly_goal}
        if store is not None:
            progress = store.load_progress(user_id, **goals)
            self.user_settings = store.load_settings(user_id)
            events = store.load_events(user_id)
            unlocked = store.load_achievements(user_id)
            self.test_results = store.load_test_results(user_id)
        else:
            progress = UserProgress(user_id=user_id, **goals)
            self.user_settings = UserSettings(user_id=user_id)
            events = []
            unlocked = []
            self.test_results = []

        self.ledger = ProgressLedger(progress, events)
        self.achievements = AchievementBook(user_id, unlocked)
        self.card_session: CardSession | None = None
        self.runner: TestRunner | None = None
        self._pending_events: list[LearningEvent] = []
        self._pending_results: list[TestResult] = []

    @property
    def progress(self) -> UserProgress:
        return self.ledger.progress

    @property
    def events(self) -> list[LearningEvent]:
        return self.ledger.events

    # Recording

    def record(self, event: LearningEvent) -> None:
        self.ledger.record_event(event)
        self._pending_events.append(event)

    def check_achievements(self, last_test_score: int | None = None) -> list[Achievement]:
        """Unlock satisfied achievements and grant their experience."""
        snapshot = AchievementSnapshot(
            learned_count=len(self.progress.learned_words),
            mastered_count=len(self.progress.mastered_words),
            streak=self.progress.streak,
            last_test_score=last_test_score,
        )
        unlocked = self.achievements.evaluate(snapshot)
        for achievement in unlocked:
            self.ledger.grant_exp(achievement.exp)
        return unlocked

    # Card sessions

    def start_learning(self, mode: SessionMode) -> CardSession:
        word_ids = select_session_words(
            self.words,
            self.progress,
            mode,
            new_limit=self.settings.new_session_limit,
            review_limit=self.settings.review_session_limit,
        )
        self.card_session = CardSession(self.user_id, self.words_by_id, word_ids, mode)
        logger.info(
            "card_session_started",
            user_id=self.user_id,
            mode=str(mode),
            word_count=len(word_ids),
        )
        return self.card_session

    def mark_card(self, known: bool, time_spent: float = 0.0) -> LearningEvent | None:
        """Answer the current card.

        A known card in a new-word session marks the word learned. A known
        card in a review session masters the word once its record is strong.
        """
        session = self.card_session
        if session is None:
            return None
        event = session.mark(known, time_spent)
        if event is None:
            return None

        self.record(event)
        if known:
            if session.mode == SessionMode.NEW:
                self.ledger.mark_learned(event.word_id)
            elif session.mode == SessionMode.REVIEW:
                history = [e for e in self.events if e.word_id == event.word_id]
                if event.word_id in strong_words(history, self.settings.strong_threshold):
                    self.ledger.mark_mastered(event.word_id)
        self.check_achievements()
        return event

    # Tests

    def start_test(self, question_count: int | None = None, test_kind: str = "mixed") -> TestRunner:
        """Create a fresh runner and start it.

        An unfinished runner is abandoned once the request has been validated.
        """
        if test_kind == "choice":
            kinds: tuple[QuestionKind, ...] = (QuestionKind.CHOICE,)
        elif test_kind == "mixed":
            kinds = MIXED_KINDS
        else:
            raise ValueError(f"Unknown test kind: {test_kind!r}")

        if self.runner is not None and self.runner.status == TestStatus.IN_PROGRESS:
            self.runner.abandon()

        runner = TestRunner(
            self.user_id,
            generator=QuestionGenerator(self.rng),
            seconds_per_question=self.settings.seconds_per_question,
            test_kind=test_kind,
        )
        runner.on_complete(self._on_test_complete)
        if question_count is None:
            question_count = self.settings.default_question_count
        runner.start(self.words, question_count, kinds)
        self.runner = runner
        return runner

    def active_runner(self) -> TestRunner:
        if self.runner is None:
            raise InvalidTransitionError("No test has been started")
        return self.runner

    def _on_test_complete(self, result: TestResult) -> None:
        now = datetime.datetime.now()
        per_question = result.time_spent / max(result.total_questions, 1)
        for question, answer in zip(result.questions, result.answers):
            word = self.words_by_id.get(question.word_id)
            self.record(LearningEvent(
                word_id=question.word_id,
                user_id=self.user_id,
                action=LearningAction.TESTED,
                correct=answer == question.correct_answer,
                time_spent=per_question,
                difficulty=word.difficulty if word else 3,
                timestamp=now,
            ))
        self.test_results.append(result)
        self._pending_results.append(result)
        self.check_achievements(last_test_score=result.score)
        self.persist()

    # User settings

    def update_settings(self, **changes) -> UserSettings:
        """Validate and apply settings changes, then save them.

        The daily goal also becomes the progress daily goal used for
        weekly progress.
        """
        data = self.user_settings.model_dump()
        data.update(changes)
        data["user_id"] = self.user_id
        self.user_settings = UserSettings.model_validate(data)
        self.progress.daily_goal = self.user_settings.daily_goal
        if self.store is not None:
            self.store.save_settings(self.user_settings)
            self.store.save_progress(self.progress)
        logger.info("user_settings_updated", user_id=self.user_id, fields=sorted(changes))
        return self.user_settings

    # Queries

    def recommendations(self, count: int | None = None) -> list[WordEntry]:
        if count is None:
            count = self.settings.recommendation_count
        return rank(self.words, self.events, count)

    def due(self, now: datetime.datetime | None = None) -> list[str]:
        return due_words(self.words, self.events, now)

    def stats(self, now: datetime.datetime | None = None) -> LearningStats:
        return build_stats(
            self.progress,
            self.events,
            self.test_results,
            weak_threshold=self.settings.weak_threshold,
            strong_threshold=self.settings.strong_threshold,
            now=now,
        )

    # Persistence

    def persist(self) -> None:
        """Write progress, new events, achievements and new test results."""
        if self.store is None:
            self._pending_events.clear()
            self._pending_results.clear()
            return
        self.store.save_progress(self.progress)
        self.store.append_events(self.user_id, self._pending_events)
        self._pending_events.clear()
        for result in self._pending_results:
            self.store.append_test_result(result)
        self._pending_results.clear()
        self.store.save_achievements(self.user_id, self.achievements.records)
        logger.debug("context_persisted", user_id=self.user_id)
