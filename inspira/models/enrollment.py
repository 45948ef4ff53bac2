from __future__ import annotations

from dataclasses import dataclass

# Fixed policy: a quiz attempt passes at 70% or above.
PASS_THRESHOLD = 70.0


@dataclass(frozen=True, slots=True)
class QuizAttempt:
    """One graded submission. Append-only; never edited after recording."""

    lesson_id: str
    score: float
    passed: bool
    submitted_at: int

    def __post_init__(self) -> None:
        if not 0 <= self.score <= 100:
            raise ValueError("score must be within 0..100")
        if self.passed != (self.score >= PASS_THRESHOLD):
            raise ValueError("passed flag disagrees with the pass threshold")

    @staticmethod
    def record(*, lesson_id: str, score: float, submitted_at: int) -> QuizAttempt:
        return QuizAttempt(
            lesson_id=lesson_id,
            score=score,
            passed=score >= PASS_THRESHOLD,
            submitted_at=submitted_at,
        )


@dataclass(frozen=True, slots=True)
class Enrollment:
    """A student's access grant to one course, with its learning state.

    ``version`` increments on every write to ``completed_lesson_ids`` and
    is the token for optimistic concurrency in the repos.
    """

    student_id: str
    course_id: str
    completed_lesson_ids: frozenset[str] = frozenset()
    quiz_attempts: tuple[QuizAttempt, ...] = ()
    enrolled_at: int = 0
    version: int = 0

    @staticmethod
    def new(*, student_id: str, course_id: str, enrolled_at: int) -> Enrollment:
        return Enrollment(
            student_id=student_id, course_id=course_id, enrolled_at=enrolled_at
        )

    def has_passed(self, lesson_id: str) -> bool:
        return any(a.passed and a.lesson_id == lesson_id for a in self.quiz_attempts)
