"""PostgreSQL implementation of CourseRepo."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from inspira.db.engine import translate_db_errors
from inspira.db.tables import CourseRow
from inspira.models.course import Attachment, Course, Lesson, Module, Question, Quiz


class PgCourseRepo:
    """Satisfies the CourseRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, course_id: str) -> Course | None:
        with translate_db_errors("get course"):
            row = await self._session.get(CourseRow, course_id)
        if row is None:
            return None
        return _row_to_course(row)

    async def list_all(self) -> list[Course]:
        stmt = select(CourseRow).order_by(CourseRow.seq)
        with translate_db_errors("list courses"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def add(self, course: Course) -> None:
        row = CourseRow(
            id=course.id,
            title=course.title,
            description=course.description,
            price=course.price,
            image_url=course.image_url,
            modules=[_module_to_doc(m) for m in course.modules],
        )
        with translate_db_errors("add course"):
            self._session.add(row)
            await self._session.flush()

    async def save(self, course: Course) -> None:
        with translate_db_errors("save course"):
            row = await self._session.get(CourseRow, course.id)
            if row is None:
                raise KeyError("course not found")
            row.title = course.title
            row.description = course.description
            row.price = course.price
            row.image_url = course.image_url
            row.modules = [_module_to_doc(m) for m in course.modules]
            await self._session.flush()

    async def delete(self, course_id: str) -> bool:
        stmt = delete(CourseRow).where(CourseRow.id == course_id)
        with translate_db_errors("delete course"):
            result = await self._session.execute(stmt)
        return result.rowcount > 0


# --- JSON document <-> dataclass tree ---


def _module_to_doc(module: Module) -> dict:
    return {
        "id": module.id,
        "title": module.title,
        "lessons": [_lesson_to_doc(lesson) for lesson in module.lessons],
    }


def _lesson_to_doc(lesson: Lesson) -> dict:
    doc: dict = {
        "id": lesson.id,
        "title": lesson.title,
        "content": lesson.content,
        "video_url": lesson.video_url,
        "attachments": [{"name": a.name, "url": a.url} for a in lesson.attachments],
        "quiz": None,
    }
    if lesson.quiz is not None:
        doc["quiz"] = [
            {
                "id": q.id,
                "text": q.text,
                "options": list(q.options),
                "correct_option_index": q.correct_option_index,
            }
            for q in lesson.quiz.questions
        ]
    return doc


def _doc_to_module(doc: dict) -> Module:
    return Module(
        id=doc["id"],
        title=doc["title"],
        lessons=tuple(_doc_to_lesson(d) for d in doc.get("lessons", [])),
    )


def _doc_to_lesson(doc: dict) -> Lesson:
    quiz_doc = doc.get("quiz")
    quiz = None
    if quiz_doc:
        quiz = Quiz(
            questions=tuple(
                Question(
                    id=q["id"],
                    text=q["text"],
                    options=tuple(q["options"]),
                    correct_option_index=q["correct_option_index"],
                )
                for q in quiz_doc
            )
        )
    return Lesson(
        id=doc["id"],
        title=doc["title"],
        content=doc.get("content", ""),
        video_url=doc.get("video_url"),
        attachments=tuple(
            Attachment(name=a["name"], url=a["url"]) for a in doc.get("attachments", [])
        ),
        quiz=quiz,
    )


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        title=row.title,
        description=row.description or "",
        price=row.price,
        image_url=row.image_url or "",
        modules=tuple(_doc_to_module(d) for d in row.modules or []),
    )
