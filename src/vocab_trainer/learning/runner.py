"""Test session state machine with a cooperative countdown timer."""

import asyncio
import time
from collections.abc import Callable, Sequence

import structlog

from vocab_trainer.errors import AnswerIndexError, InvalidTransitionError
from vocab_trainer.learning.generator import QuestionGenerator
from vocab_trainer.models.quiz import QuestionKind, TestQuestion, TestResult, TestStatus
from vocab_trainer.models.word import WordEntry

logger = structlog.get_logger()

SECONDS_PER_QUESTION = 60


def score_answers(questions: Sequence[TestQuestion], answers: Sequence[str]) -> tuple[int, int]:
    """Return (correct_count, score 0-100) using exact string equality."""
    if not questions:
        return 0, 0
    correct = sum(
        1 for question, answer in zip(questions, answers)
        if answer == question.correct_answer
    )
    return correct, round(100 * correct / len(questions))


class TestRunner:
    """Drives one test from start to completion or abandonment.

    States: NOT_STARTED -> IN_PROGRESS -> COMPLETED (or ABANDONED).
    A finished runner is never restarted; create a new one instead.

    Args:
        user_id: Owner of the test result.
        generator: Question generator (carries the random source).
        seconds_per_question: Time budget per question.
        test_kind: Label stored on the result ("choice" or "mixed").
        clock: Monotonic clock used to measure elapsed time.
    """

    __test__ = False

    def __init__(
        self,
        user_id: str,
        generator: QuestionGenerator | None = None,
        seconds_per_question: int = SECONDS_PER_QUESTION,
        test_kind: str = "mixed",
        clock: Callable[[], float] = time.monotonic,
    ):
        self.generator = generator or QuestionGenerator()
        self.seconds_per_question = seconds_per_question
        self.result = TestResult(user_id=user_id, test_kind=test_kind)
        self.current_index = 0
        self.time_left = 0
        self._clock = clock
        self._started_at: float | None = None
        self._timer_task: asyncio.Task | None = None
        self._completion_callbacks: list[Callable[[TestResult], None]] = []

    @property
    def status(self) -> TestStatus:
        return self.result.status

    @property
    def current_question(self) -> TestQuestion | None:
        if self.status != TestStatus.IN_PROGRESS:
            return None
        return self.result.questions[self.current_index]

    def on_complete(self, callback: Callable[[TestResult], None]) -> None:
        """Register a callback invoked once when the test completes.

        Args:
            callback: Callable(result).
        """
        self._completion_callbacks.append(callback)

    def start(
        self,
        words: Sequence[WordEntry],
        question_count: int,
        kinds: Sequence[QuestionKind] = (QuestionKind.CHOICE,),
    ) -> TestResult:
        """Generate questions and begin the test.

        With no words to ask about the runner stays NOT_STARTED and the
        returned result has no questions.
        """
        self._require(TestStatus.NOT_STARTED, "start")

        questions = self.generator.generate_test(words, question_count, kinds)
        if not questions:
            logger.info("test_not_started", reason="no_questions", user_id=self.result.user_id)
            return self.result

        self.result.questions = questions
        self.result.answers = [""] * len(questions)
        self.result.total_questions = len(questions)
        self.result.status = TestStatus.IN_PROGRESS
        self.current_index = 0
        self.time_left = self.seconds_per_question * len(questions)
        self._started_at = self._clock()

        logger.info(
            "test_started",
            test_id=self.result.id,
            user_id=self.result.user_id,
            question_count=len(questions),
            time_budget=self.time_left,
        )
        return self.result

    def answer(self, index: int, value: str) -> None:
        """Record an answer in place. Does not change state."""
        self._require(TestStatus.IN_PROGRESS, "answer")
        if not 0 <= index < len(self.result.answers):
            raise AnswerIndexError(
                f"Answer index {index} out of range for {len(self.result.answers)} questions"
            )
        self.result.answers[index] = value

    def advance(self) -> TestStatus:
        """Move to the next question, finishing after the last one."""
        self._require(TestStatus.IN_PROGRESS, "advance")
        if self.current_index < len(self.result.questions) - 1:
            self.current_index += 1
        else:
            self._complete(reason="last_question")
        return self.status

    def time_expire(self) -> TestResult:
        """Force completion when the time budget runs out."""
        self._require(TestStatus.IN_PROGRESS, "time_expire")
        return self._complete(reason="time_expired")

    def finish(self) -> TestResult:
        """Complete the test and compute the score.

        Finishing an already completed test returns the final result
        unchanged.
        """
        if self.status == TestStatus.COMPLETED:
            return self.result
        self._require(TestStatus.IN_PROGRESS, "finish")
        return self._complete(reason="finished")

    def abandon(self) -> TestResult:
        """Stop the test without scoring it. No completion callbacks fire."""
        if self.result.is_final:
            raise InvalidTransitionError(f"Cannot abandon a {self.status} test")
        self.cancel_timer()
        if self._started_at is not None:
            self.result.time_spent = round(self._clock() - self._started_at, 1)
        self.result.status = TestStatus.ABANDONED
        logger.info(
            "test_abandoned",
            test_id=self.result.id,
            answered=sum(1 for a in self.result.answers if a),
        )
        return self.result

    def tick(self) -> None:
        """Advance the countdown by one second."""
        if self.status != TestStatus.IN_PROGRESS:
            return
        self.time_left = max(self.time_left - 1, 0)
        if self.time_left == 0:
            self.time_expire()

    async def run_countdown(self) -> None:
        """Tick once per second until the test leaves IN_PROGRESS."""
        try:
            while self.status == TestStatus.IN_PROGRESS:
                await asyncio.sleep(1)
                self.tick()
        except asyncio.CancelledError:
            pass

    def start_timer(self) -> asyncio.Task:
        """Schedule the countdown on the running event loop."""
        self._require(TestStatus.IN_PROGRESS, "start_timer")
        self.cancel_timer()
        self._timer_task = asyncio.create_task(self.run_countdown())
        return self._timer_task

    def cancel_timer(self) -> None:
        task = self._timer_task
        self._timer_task = None
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        # The countdown completing the test itself simply returns.
        if task is not current:
            task.cancel()

    def _complete(self, reason: str) -> TestResult:
        self.cancel_timer()
        correct, score = score_answers(self.result.questions, self.result.answers)
        self.result.correct_count = correct
        self.result.score = score
        if self._started_at is not None:
            self.result.time_spent = round(self._clock() - self._started_at, 1)
        self.result.status = TestStatus.COMPLETED

        logger.info(
            "test_finished",
            test_id=self.result.id,
            reason=reason,
            score=score,
            correct=correct,
            total=self.result.total_questions,
        )
        for callback in self._completion_callbacks:
            callback(self.result)
        return self.result

    def _require(self, expected: TestStatus, operation: str) -> None:
        if self.status != expected:
            raise InvalidTransitionError(
                f"Cannot {operation} a test that is {self.status}"
            )
