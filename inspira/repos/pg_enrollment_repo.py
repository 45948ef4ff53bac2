"""PostgreSQL implementation of EnrollmentRepo.

The completed-lesson set is written with a version-guarded UPDATE:
``... WHERE version = :expected``.  Zero affected rows means either the
enrollment is gone or another writer got there first; a follow-up read
tells the two apart.
"""

from __future__ import annotations

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from inspira.db.engine import translate_db_errors
from inspira.db.tables import EnrollmentRow, QuizAttemptRow
from inspira.models.enrollment import Enrollment, QuizAttempt
from inspira.services.errors import ConcurrentUpdateError, NotFoundError


class PgEnrollmentRepo:
    """Satisfies the EnrollmentRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, student_id: str, course_id: str) -> Enrollment | None:
        stmt = select(EnrollmentRow).where(
            EnrollmentRow.student_id == student_id,
            EnrollmentRow.course_id == course_id,
        )
        with translate_db_errors("get enrollment"):
            row = (await self._session.execute(stmt)).scalar_one_or_none()
            if row is None:
                return None
            attempts = await self._attempts_for(student_id, course_id)
        return _row_to_enrollment(row, attempts)

    async def create(self, enrollment: Enrollment) -> None:
        row = EnrollmentRow(
            student_id=enrollment.student_id,
            course_id=enrollment.course_id,
            completed_lesson_ids=sorted(enrollment.completed_lesson_ids),
            enrolled_at=enrollment.enrolled_at,
            version=enrollment.version,
        )
        # Primary key (student_id, course_id) turns a duplicate into
        # IntegrityError -> ConflictError.
        with translate_db_errors("create enrollment"):
            self._session.add(row)
            await self._session.flush()

    async def set_completed_lesson_ids(
        self,
        student_id: str,
        course_id: str,
        lesson_ids: frozenset[str],
        *,
        expected_version: int,
    ) -> Enrollment:
        stmt = (
            update(EnrollmentRow)
            .where(EnrollmentRow.student_id == student_id)
            .where(EnrollmentRow.course_id == course_id)
            .where(EnrollmentRow.version == expected_version)
            .values(
                completed_lesson_ids=sorted(lesson_ids),
                version=EnrollmentRow.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        with translate_db_errors("set completed lessons"):
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            if await self.get(student_id, course_id) is None:
                raise NotFoundError("enrollment not found")
            raise ConcurrentUpdateError("enrollment was modified concurrently")
        return await self._reload(student_id, course_id)

    async def append_quiz_attempt(
        self, student_id: str, course_id: str, attempt: QuizAttempt
    ) -> Enrollment:
        if await self.get(student_id, course_id) is None:
            raise NotFoundError("enrollment not found")
        row = QuizAttemptRow(
            student_id=student_id,
            course_id=course_id,
            lesson_id=attempt.lesson_id,
            score=attempt.score,
            passed=attempt.passed,
            submitted_at=attempt.submitted_at,
        )
        with translate_db_errors("append quiz attempt"):
            self._session.add(row)
            await self._session.flush()
        return await self._reload(student_id, course_id)

    async def list_for_student(self, student_id: str) -> list[Enrollment]:
        stmt = select(EnrollmentRow).where(EnrollmentRow.student_id == student_id)
        return await self._list(stmt)

    async def list_for_course(self, course_id: str) -> list[Enrollment]:
        stmt = select(EnrollmentRow).where(EnrollmentRow.course_id == course_id)
        return await self._list(stmt)

    async def delete_for_student(self, student_id: str) -> int:
        stmt = delete(EnrollmentRow).where(EnrollmentRow.student_id == student_id)
        with translate_db_errors("delete student enrollments"):
            result = await self._session.execute(stmt)
        return result.rowcount

    async def delete_for_course(self, course_id: str) -> int:
        stmt = delete(EnrollmentRow).where(EnrollmentRow.course_id == course_id)
        with translate_db_errors("delete course enrollments"):
            result = await self._session.execute(stmt)
        return result.rowcount

    async def _list(self, stmt) -> list[Enrollment]:
        with translate_db_errors("list enrollments"):
            rows = (await self._session.execute(stmt)).scalars().all()
            out = []
            for row in rows:
                attempts = await self._attempts_for(row.student_id, row.course_id)
                out.append(_row_to_enrollment(row, attempts))
        return out

    async def _reload(self, student_id: str, course_id: str) -> Enrollment:
        # The UPDATE bypassed the identity map; drop cached rows first.
        self._session.expire_all()
        enrollment = await self.get(student_id, course_id)
        if enrollment is None:
            raise NotFoundError("enrollment not found")
        return enrollment

    async def _attempts_for(
        self, student_id: str, course_id: str
    ) -> list[QuizAttemptRow]:
        stmt = (
            select(QuizAttemptRow)
            .where(QuizAttemptRow.student_id == student_id)
            .where(QuizAttemptRow.course_id == course_id)
            .order_by(QuizAttemptRow.seq)
        )
        return list((await self._session.execute(stmt)).scalars().all())


def _row_to_enrollment(
    row: EnrollmentRow, attempts: list[QuizAttemptRow]
) -> Enrollment:
    return Enrollment(
        student_id=row.student_id,
        course_id=row.course_id,
        completed_lesson_ids=frozenset(row.completed_lesson_ids or ()),
        quiz_attempts=tuple(
            QuizAttempt(
                lesson_id=a.lesson_id,
                score=a.score,
                passed=a.passed,
                submitted_at=a.submitted_at,
            )
            for a in attempts
        ),
        enrolled_at=row.enrolled_at,
        version=row.version,
    )
