"""REST API routes for words, learning sessions, tests and progress."""

import functools
from typing import Literal

import structlog
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from vocab_trainer.catalog import default_catalog, load_catalog
from vocab_trainer.config import get_settings
from vocab_trainer.context import StudyContext
from vocab_trainer.errors import AnswerIndexError, InvalidTransitionError
from vocab_trainer.learning.recommend import SessionMode
from vocab_trainer.learning.runner import TestRunner
from vocab_trainer.learning.stats import format_duration, summarize_progress
from vocab_trainer.models.quiz import TestStatus
from vocab_trainer.models.word import WordEntry
from vocab_trainer.storage.store import JsonStore, validate_user_id

logger = structlog.get_logger()
router = APIRouter(prefix="/api")

# One live study context per user id
_contexts: dict[str, StudyContext] = {}


class LearnRequest(BaseModel):
    mode: SessionMode = SessionMode.NEW


class MarkRequest(BaseModel):
    known: bool
    time_spent: float = Field(default=0.0, ge=0)


class StartTestRequest(BaseModel):
    question_count: int | None = Field(default=None, ge=1)
    test_kind: str = Field(default="mixed", pattern="^(choice|mixed)$")


class AnswerRequest(BaseModel):
    index: int
    value: str


class SettingsUpdate(BaseModel):
    daily_goal: int | None = Field(default=None, ge=1)
    study_reminders: bool | None = None
    reminder_time: str | None = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    sound_enabled: bool | None = None
    theme: Literal["light", "dark"] | None = None
    difficulty: Literal["beginner", "intermediate", "advanced"] | None = None
    auto_play_audio: bool | None = None


@functools.lru_cache
def get_catalog() -> list[WordEntry]:
    """Load the configured catalog once per process."""
    settings = get_settings()
    if settings.catalog_path is not None:
        return load_catalog(settings.catalog_path)
    return default_catalog()


def get_context(user_id: str) -> StudyContext:
    try:
        validate_user_id(user_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid user ID format")
    context = _contexts.get(user_id)
    if context is None:
        settings = get_settings()
        context = StudyContext(
            user_id,
            get_catalog(),
            settings,
            store=JsonStore(settings.users_dir),
        )
        _contexts[user_id] = context
    return context


def reset_contexts() -> None:
    """Drop every live context, cancelling running test timers."""
    for context in _contexts.values():
        if context.runner is not None and context.runner.status == TestStatus.IN_PROGRESS:
            context.runner.abandon()
    _contexts.clear()


def _runner_or_409(context: StudyContext) -> TestRunner:
    try:
        return context.active_runner()
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))


def _test_view(runner: TestRunner, reveal: bool = False) -> dict:
    """Serialize a test for the client. Answers are only revealed when final."""
    result = runner.result
    show = reveal or result.is_final
    questions = []
    for q in result.questions:
        item = {
            "id": q.id,
            "word_id": q.word_id,
            "kind": q.kind.value,
            "prompt": q.prompt,
            "options": list(q.options) if q.options is not None else None,
        }
        if show:
            item["correct_answer"] = q.correct_answer
            item["explanation"] = q.explanation
        questions.append(item)
    return {
        "test_id": result.id,
        "status": result.status.value,
        "test_kind": result.test_kind,
        "current_index": runner.current_index,
        "time_left": runner.time_left,
        "questions": questions,
        "answers": result.answers,
        "score": result.score,
        "correct_count": result.correct_count,
        "total_questions": result.total_questions,
        "time_spent": result.time_spent,
    }


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/words")
async def list_words() -> list[dict]:
    """List the whole catalog in catalog order."""
    return [w.model_dump(mode="json") for w in get_catalog()]


@router.get("/words/{word_id}")
async def get_word(word_id: str) -> dict:
    for word in get_catalog():
        if word.id == word_id:
            return word.model_dump(mode="json")
    raise HTTPException(status_code=404, detail="Word not found")


@router.get("/users/{user_id}/progress")
async def get_progress(user_id: str) -> dict:
    context = get_context(user_id)
    return {
        "progress": context.progress.model_dump(mode="json"),
        "summary": summarize_progress(context.progress),
        "achievements": [a.model_dump(mode="json") for a in context.achievements.records],
    }


@router.get("/users/{user_id}/settings")
async def get_user_settings(user_id: str) -> dict:
    return get_context(user_id).user_settings.model_dump(mode="json")


@router.put("/users/{user_id}/settings")
async def update_user_settings(user_id: str, request: SettingsUpdate) -> dict:
    context = get_context(user_id)
    updated = context.update_settings(**request.model_dump(exclude_none=True))
    return updated.model_dump(mode="json")


@router.get("/users/{user_id}/stats")
async def get_stats(user_id: str) -> dict:
    context = get_context(user_id)
    stats = context.stats()
    data = stats.model_dump(mode="json")
    data["total_study_time_label"] = format_duration(stats.total_study_time)
    return data


@router.get("/users/{user_id}/recommendations")
async def get_recommendations(user_id: str, count: int | None = None) -> list[dict]:
    context = get_context(user_id)
    return [w.model_dump(mode="json") for w in context.recommendations(count)]


@router.get("/users/{user_id}/due")
async def get_due_words(user_id: str) -> list[str]:
    return get_context(user_id).due()


@router.post("/users/{user_id}/learn")
async def start_learning(user_id: str, request: LearnRequest) -> dict:
    context = get_context(user_id)
    session = context.start_learning(request.mode)
    current = session.current_word
    return {
        "mode": session.mode.value,
        "word_ids": session.word_ids,
        "current_word": current.model_dump(mode="json") if current else None,
    }


@router.post("/users/{user_id}/learn/mark")
async def mark_card(user_id: str, request: MarkRequest) -> dict:
    context = get_context(user_id)
    if context.card_session is None:
        raise HTTPException(status_code=409, detail="No learning session in progress")
    event = context.mark_card(request.known, request.time_spent)
    if event is None:
        raise HTTPException(status_code=409, detail="Learning session already finished")
    context.persist()
    session = context.card_session
    current = session.current_word
    return {
        "event": event.model_dump(mode="json"),
        "finished": session.is_finished,
        "progress": session.progress,
        "current_word": current.model_dump(mode="json") if current else None,
        "total_exp": context.progress.total_exp,
    }


@router.post("/users/{user_id}/tests")
async def start_test(user_id: str, request: StartTestRequest) -> dict:
    context = get_context(user_id)
    runner = context.start_test(request.question_count, request.test_kind)
    if runner.status != TestStatus.IN_PROGRESS:
        raise HTTPException(status_code=409, detail="No words available for a test")
    runner.start_timer()
    return _test_view(runner)


@router.get("/users/{user_id}/tests/current")
async def current_test(user_id: str) -> dict:
    return _test_view(_runner_or_409(get_context(user_id)))


@router.post("/users/{user_id}/tests/answer")
async def answer_question(user_id: str, request: AnswerRequest) -> dict:
    runner = _runner_or_409(get_context(user_id))
    try:
        runner.answer(request.index, request.value)
    except AnswerIndexError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _test_view(runner)


@router.post("/users/{user_id}/tests/advance")
async def advance_question(user_id: str) -> dict:
    runner = _runner_or_409(get_context(user_id))
    try:
        runner.advance()
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _test_view(runner)


@router.post("/users/{user_id}/tests/finish")
async def finish_test(user_id: str) -> dict:
    runner = _runner_or_409(get_context(user_id))
    try:
        runner.finish()
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _test_view(runner)


@router.post("/users/{user_id}/tests/abandon")
async def abandon_test(user_id: str) -> dict:
    runner = _runner_or_409(get_context(user_id))
    try:
        runner.abandon()
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    logger.info("test_abandoned_by_client", user_id=user_id)
    return _test_view(runner)
