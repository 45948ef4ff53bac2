"""Pure scoring rules: quiz grading, course progress, performance.

Nothing here touches a repository.  The progress service loads state,
calls these functions, and persists the outcome.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from inspira.models.course import Course, Quiz
from inspira.models.enrollment import PASS_THRESHOLD, QuizAttempt
from inspira.services.errors import InvalidOperationError


@dataclass(frozen=True, slots=True)
class GradeResult:
    score: float
    passed: bool
    correct_answers: dict[str, int]


def grade_quiz(quiz: Quiz, answers: Mapping[str, int]) -> GradeResult:
    """Score a submission: 100 * correct / total, no partial credit.

    Every question must be answered; answers for unknown question ids are
    ignored.  The answer key is returned only alongside the grade.
    """
    missing = [q.id for q in quiz.questions if q.id not in answers]
    if missing:
        raise InvalidOperationError(
            f"incomplete submission: {len(missing)} question(s) unanswered"
        )

    correct = sum(
        1 for q in quiz.questions if answers[q.id] == q.correct_option_index
    )
    score = 100 * correct / len(quiz.questions)
    return GradeResult(
        score=score,
        passed=score >= PASS_THRESHOLD,
        correct_answers=quiz.answer_key(),
    )


def compute_progress(course: Course, completed_lesson_ids: Iterable[str]) -> float:
    """Percentage of the course's lessons that are complete, in [0, 100].

    Ids that no longer belong to the course (deleted lessons) are ignored.
    A course without lessons is 0% complete.
    """
    all_ids = course.lesson_ids()
    if not all_ids:
        return 0.0
    done = all_ids.intersection(completed_lesson_ids)
    return 100 * len(done) / len(all_ids)


def compute_performance(attempts: Iterable[QuizAttempt]) -> float:
    """Mean score over every recorded attempt, retries included; 0 if none."""
    scores = [a.score for a in attempts]
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def is_course_complete(course: Course, completed_lesson_ids: Iterable[str]) -> bool:
    if not course.lesson_ids():
        return False
    return compute_progress(course, completed_lesson_ids) >= 100
