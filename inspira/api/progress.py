"""Learner progress: cached summary, lesson toggles, and quiz submissions.

    GET  /v1/progress/{course_id}
      -> read-through cache (hit -> return, miss -> compute -> store -> return)

    POST /v1/progress/{course_id}/lessons/{lesson_id}/toggle
    POST /v1/progress/{course_id}/lessons/{lesson_id}/quiz
      -> invalidate -> mutate the enrollment -> invalidate again (best effort)
      -> include the completion event when the course is now 100% complete
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter
from pydantic import BaseModel

from inspira.api.dependencies import RepoDep, UserDep, http_error
from inspira.core.metrics import CACHE_OPERATIONS
from inspira.repos.registry import Repos
from inspira.services import progress_service
from inspira.services.cache import cache_service, invalidating, progress_key
from inspira.services.checkout import certificate_request_link
from inspira.services.completion import CourseCompleted
from inspira.services.errors import DomainError
from inspira.services.progress_service import ProgressSnapshot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/progress", tags=["progress"])

_PROGRESS_CACHE_TTL = 300


class CompletionOut(BaseModel):
    course_id: str
    course_title: str
    performance: float
    occurred_at: int
    certificate_url: str


class ProgressOut(BaseModel):
    student_id: str
    course_id: str
    completed_lesson_ids: list[str]
    total_lessons: int
    progress: float
    performance: float
    is_complete: bool
    completion: CompletionOut | None = None


class QuizIn(BaseModel):
    answers: dict[str, int]  # question id -> chosen option index


class QuizResultOut(BaseModel):
    score: float
    passed: bool
    correct_answers: dict[str, int]
    progress: ProgressOut


async def _completion_out(repos: Repos, event: CourseCompleted) -> CompletionOut:
    student = await repos.users.get_by_id(event.student_id)
    name = student.name if student is not None else event.student_id
    return CompletionOut(
        course_id=event.course_id,
        course_title=event.course_title,
        performance=event.performance,
        occurred_at=event.occurred_at,
        certificate_url=certificate_request_link(event.course_title, name),
    )


async def _progress_out(repos: Repos, snapshot: ProgressSnapshot) -> ProgressOut:
    return ProgressOut(
        student_id=snapshot.student_id,
        course_id=snapshot.course_id,
        completed_lesson_ids=sorted(snapshot.completed_lesson_ids),
        total_lessons=snapshot.total_lessons,
        progress=snapshot.progress,
        performance=snapshot.performance,
        is_complete=snapshot.is_complete,
        completion=(
            await _completion_out(repos, snapshot.completion)
            if snapshot.completion is not None
            else None
        ),
    )


# ---------------------------------------------------------------------------
# GET /v1/progress/{course_id}  (read-through cached)
# ---------------------------------------------------------------------------


@router.get("/{course_id}", response_model=ProgressOut)
async def get_progress(
    course_id: str, principal: UserDep, repos: RepoDep
) -> ProgressOut:
    cache_key = progress_key(principal.user_id, course_id)

    cached = await cache_service.get(cache_key)
    if cached is not None:
        CACHE_OPERATIONS.labels(operation="hit").inc()
        return ProgressOut(**json.loads(cached))
    CACHE_OPERATIONS.labels(operation="miss").inc()

    try:
        snapshot = await progress_service.get_progress(
            repos.courses,
            repos.enrollments,
            student_id=principal.user_id,
            course_id=course_id,
        )
    except DomainError as e:
        raise http_error(e) from e

    out = await _progress_out(repos, snapshot)
    await cache_service.set(cache_key, out.model_dump_json(), _PROGRESS_CACHE_TTL)
    return out


# ---------------------------------------------------------------------------
# POST /v1/progress/{course_id}/lessons/{lesson_id}/toggle
# ---------------------------------------------------------------------------


@router.post("/{course_id}/lessons/{lesson_id}/toggle", response_model=ProgressOut)
async def toggle_lesson(
    course_id: str, lesson_id: str, principal: UserDep, repos: RepoDep
) -> ProgressOut:
    cache_key = progress_key(principal.user_id, course_id)
    try:
        async with invalidating(cache_service, cache_key):
            snapshot = await progress_service.toggle_completion(
                repos.courses,
                repos.enrollments,
                student_id=principal.user_id,
                course_id=course_id,
                lesson_id=lesson_id,
            )
    except DomainError as e:
        raise http_error(e) from e
    return await _progress_out(repos, snapshot)


# ---------------------------------------------------------------------------
# POST /v1/progress/{course_id}/lessons/{lesson_id}/quiz
# ---------------------------------------------------------------------------


@router.post("/{course_id}/lessons/{lesson_id}/quiz", response_model=QuizResultOut)
async def submit_quiz(
    course_id: str,
    lesson_id: str,
    payload: QuizIn,
    principal: UserDep,
    repos: RepoDep,
) -> QuizResultOut:
    cache_key = progress_key(principal.user_id, course_id)
    try:
        async with invalidating(cache_service, cache_key):
            outcome = await progress_service.submit_quiz(
                repos.courses,
                repos.enrollments,
                student_id=principal.user_id,
                course_id=course_id,
                lesson_id=lesson_id,
                answers=payload.answers,
            )
    except DomainError as e:
        raise http_error(e) from e
    return QuizResultOut(
        score=outcome.score,
        passed=outcome.passed,
        correct_answers=outcome.correct_answers,
        progress=await _progress_out(repos, outcome.snapshot),
    )
