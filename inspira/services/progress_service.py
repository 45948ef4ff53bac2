"""Lesson completion tracking and quiz submission for one enrollment.

Both operations follow the same shape:

    load course + enrollment  ->  apply the rule  ->  persist
    -> re-read  ->  evaluate the completion trigger  ->  return a snapshot

Writes to the completed-lesson set use optimistic concurrency: the repo
refuses a write whose ``expected_version`` is stale, and the change is
re-applied to the fresh state up to ``MAX_UPDATE_ATTEMPTS`` times.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from inspira.core.metrics import (
    LESSON_TOGGLES,
    OPTIMISTIC_RETRIES,
    QUIZ_SCORES,
    QUIZ_SUBMISSIONS,
)
from inspira.models.course import Course, Lesson
from inspira.models.enrollment import Enrollment, QuizAttempt
from inspira.repos.course_repo import CourseRepo
from inspira.repos.enrollment_repo import EnrollmentRepo
from inspira.services.completion import (
    CompletionTrigger,
    CourseCompleted,
    completion_trigger,
)
from inspira.services.errors import (
    ConcurrentUpdateError,
    InvalidOperationError,
    NotFoundError,
)
from inspira.services.grading import compute_performance, compute_progress, grade_quiz

logger = logging.getLogger(__name__)

MAX_UPDATE_ATTEMPTS = 3


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    student_id: str
    course_id: str
    completed_lesson_ids: frozenset[str]
    total_lessons: int
    progress: float
    performance: float
    completion: CourseCompleted | None = None

    @property
    def is_complete(self) -> bool:
        return self.total_lessons > 0 and self.progress >= 100


@dataclass(frozen=True, slots=True)
class QuizOutcome:
    score: float
    passed: bool
    correct_answers: dict[str, int]
    snapshot: ProgressSnapshot


def _now() -> int:
    return int(datetime.datetime.now(datetime.UTC).timestamp())


def build_snapshot(
    course: Course,
    enrollment: Enrollment,
    completion: CourseCompleted | None = None,
) -> ProgressSnapshot:
    return ProgressSnapshot(
        student_id=enrollment.student_id,
        course_id=course.id,
        completed_lesson_ids=enrollment.completed_lesson_ids,
        total_lessons=len(course.lesson_ids()),
        progress=compute_progress(course, enrollment.completed_lesson_ids),
        performance=compute_performance(enrollment.quiz_attempts),
        completion=completion,
    )


async def _load(
    courses: CourseRepo,
    enrollments: EnrollmentRepo,
    student_id: str,
    course_id: str,
) -> tuple[Course, Enrollment]:
    course = await courses.get(course_id)
    if course is None:
        raise NotFoundError(f"course {course_id!r} not found")
    enrollment = await enrollments.get(student_id, course_id)
    if enrollment is None:
        raise NotFoundError(f"student is not enrolled in course {course_id!r}")
    return course, enrollment


def _find_lesson(course: Course, lesson_id: str) -> Lesson:
    lesson = course.find_lesson(lesson_id)
    if lesson is None:
        raise NotFoundError(f"lesson {lesson_id!r} not found in course {course.id!r}")
    return lesson


async def _update_completed(
    enrollments: EnrollmentRepo,
    student_id: str,
    course_id: str,
    change: Callable[[frozenset[str]], frozenset[str]],
) -> Enrollment:
    """Apply ``change`` to the completed set with compare-and-set retries."""
    for attempt in range(1, MAX_UPDATE_ATTEMPTS + 1):
        current = await enrollments.get(student_id, course_id)
        if current is None:
            raise NotFoundError("enrollment not found")
        try:
            return await enrollments.set_completed_lesson_ids(
                student_id,
                course_id,
                change(current.completed_lesson_ids),
                expected_version=current.version,
            )
        except ConcurrentUpdateError:
            OPTIMISTIC_RETRIES.inc()
            logger.warning(
                "Version conflict on enrollment  student=%s course=%s attempt=%d",
                student_id,
                course_id,
                attempt,
            )
    raise ConcurrentUpdateError(
        f"gave up after {MAX_UPDATE_ATTEMPTS} conflicting writes"
    )


async def get_progress(
    courses: CourseRepo,
    enrollments: EnrollmentRepo,
    *,
    student_id: str,
    course_id: str,
) -> ProgressSnapshot:
    course, enrollment = await _load(courses, enrollments, student_id, course_id)
    return build_snapshot(course, enrollment)


async def revoke_unearned_completions(
    enrollments: EnrollmentRepo, course_id: str, lesson_id: str
) -> int:
    """Un-complete ``lesson_id`` for learners with no passing attempt on it.

    Called once a quiz is attached to a lesson: from then on the lesson
    only counts as complete through a passed quiz.  Returns how many
    enrollments were changed.
    """
    revoked = 0
    for enrollment in await enrollments.list_for_course(course_id):
        if lesson_id not in enrollment.completed_lesson_ids:
            continue
        if enrollment.has_passed(lesson_id):
            continue
        await _update_completed(
            enrollments,
            enrollment.student_id,
            course_id,
            lambda done: done - {lesson_id},
        )
        revoked += 1
    return revoked


async def toggle_completion(
    courses: CourseRepo,
    enrollments: EnrollmentRepo,
    *,
    student_id: str,
    course_id: str,
    lesson_id: str,
    trigger: CompletionTrigger = completion_trigger,
) -> ProgressSnapshot:
    """Flip a plain lesson between complete and not complete.

    Quiz-bearing lessons are rejected: they complete only through a
    passing ``submit_quiz``.
    """
    course, _ = await _load(courses, enrollments, student_id, course_id)
    lesson = _find_lesson(course, lesson_id)
    if lesson.is_graded:
        logger.warning(
            "Rejected manual toggle of graded lesson  student=%s lesson=%s",
            student_id,
            lesson_id,
        )
        raise InvalidOperationError(
            "lessons with a quiz are completed by passing the quiz"
        )

    updated = await _update_completed(
        enrollments,
        student_id,
        course_id,
        lambda ids: ids ^ {lesson_id},
    )

    action = "completed" if lesson_id in updated.completed_lesson_ids else "uncompleted"
    LESSON_TOGGLES.labels(action=action).inc()
    logger.info(
        "Lesson %s  student=%s course=%s lesson=%s",
        action,
        student_id,
        course_id,
        lesson_id,
        extra={"student_id": student_id, "course_id": course_id, "lesson_id": lesson_id},
    )

    completion = trigger.evaluate(course, updated)
    return build_snapshot(course, updated, completion)


async def submit_quiz(
    courses: CourseRepo,
    enrollments: EnrollmentRepo,
    *,
    student_id: str,
    course_id: str,
    lesson_id: str,
    answers: Mapping[str, int],
    now: int | None = None,
    trigger: CompletionTrigger = completion_trigger,
) -> QuizOutcome:
    """Grade a quiz, record the attempt, and complete the lesson on a pass.

    The attempt is recorded whether or not it passes; performance is the
    mean over every attempt.
    """
    course, _ = await _load(courses, enrollments, student_id, course_id)
    lesson = _find_lesson(course, lesson_id)
    if lesson.quiz is None:
        raise InvalidOperationError(f"lesson {lesson_id!r} has no quiz")

    result = grade_quiz(lesson.quiz, answers)
    attempt = QuizAttempt.record(
        lesson_id=lesson_id,
        score=result.score,
        submitted_at=now if now is not None else _now(),
    )
    updated = await enrollments.append_quiz_attempt(student_id, course_id, attempt)

    QUIZ_SUBMISSIONS.labels(result="passed" if result.passed else "failed").inc()
    QUIZ_SCORES.observe(result.score)
    logger.info(
        "Quiz graded  student=%s lesson=%s score=%.1f passed=%s",
        student_id,
        lesson_id,
        result.score,
        result.passed,
        extra={"student_id": student_id, "course_id": course_id, "lesson_id": lesson_id},
    )

    if result.passed and lesson_id not in updated.completed_lesson_ids:
        updated = await _update_completed(
            enrollments,
            student_id,
            course_id,
            lambda ids: ids | {lesson_id},
        )

    completion = trigger.evaluate(course, updated, now=now)
    return QuizOutcome(
        score=result.score,
        passed=result.passed,
        correct_answers=result.correct_answers,
        snapshot=build_snapshot(course, updated, completion),
    )
