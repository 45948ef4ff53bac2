from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from inspira.models.enrollment import Enrollment, QuizAttempt
from inspira.services.errors import (
    ConcurrentUpdateError,
    ConflictError,
    NotFoundError,
)


class EnrollmentRepo(Protocol):
    async def get(self, student_id: str, course_id: str) -> Enrollment | None: ...
    async def create(self, enrollment: Enrollment) -> None: ...
    async def set_completed_lesson_ids(
        self,
        student_id: str,
        course_id: str,
        lesson_ids: frozenset[str],
        *,
        expected_version: int,
    ) -> Enrollment: ...
    async def append_quiz_attempt(
        self, student_id: str, course_id: str, attempt: QuizAttempt
    ) -> Enrollment: ...
    async def list_for_student(self, student_id: str) -> list[Enrollment]: ...
    async def list_for_course(self, course_id: str) -> list[Enrollment]: ...
    async def delete_for_student(self, student_id: str) -> int: ...
    async def delete_for_course(self, course_id: str) -> int: ...


class InMemoryEnrollmentRepo:
    """Dict-backed enrollments keyed by (student_id, course_id).

    Each method completes without awaiting, so a compare-and-set in
    ``set_completed_lesson_ids`` cannot interleave with another coroutine.
    """

    def __init__(self) -> None:
        self._store: dict[tuple[str, str], Enrollment] = {}

    async def get(self, student_id: str, course_id: str) -> Enrollment | None:
        return self._store.get((student_id, course_id))

    async def create(self, enrollment: Enrollment) -> None:
        key = (enrollment.student_id, enrollment.course_id)
        if key in self._store:
            raise ConflictError("student already enrolled in this course")
        self._store[key] = enrollment

    async def set_completed_lesson_ids(
        self,
        student_id: str,
        course_id: str,
        lesson_ids: frozenset[str],
        *,
        expected_version: int,
    ) -> Enrollment:
        current = self._store.get((student_id, course_id))
        if current is None:
            raise NotFoundError("enrollment not found")
        if current.version != expected_version:
            raise ConcurrentUpdateError(
                f"enrollment version is {current.version}, expected {expected_version}"
            )
        updated = replace(
            current,
            completed_lesson_ids=frozenset(lesson_ids),
            version=current.version + 1,
        )
        self._store[(student_id, course_id)] = updated
        return updated

    async def append_quiz_attempt(
        self, student_id: str, course_id: str, attempt: QuizAttempt
    ) -> Enrollment:
        current = self._store.get((student_id, course_id))
        if current is None:
            raise NotFoundError("enrollment not found")
        updated = replace(current, quiz_attempts=(*current.quiz_attempts, attempt))
        self._store[(student_id, course_id)] = updated
        return updated

    async def list_for_student(self, student_id: str) -> list[Enrollment]:
        return [e for (sid, _), e in self._store.items() if sid == student_id]

    async def list_for_course(self, course_id: str) -> list[Enrollment]:
        return [e for (_, cid), e in self._store.items() if cid == course_id]

    async def delete_for_student(self, student_id: str) -> int:
        keys = [k for k in self._store if k[0] == student_id]
        for k in keys:
            del self._store[k]
        return len(keys)

    async def delete_for_course(self, course_id: str) -> int:
        keys = [k for k in self._store if k[1] == course_id]
        for k in keys:
            del self._store[k]
        return len(keys)
