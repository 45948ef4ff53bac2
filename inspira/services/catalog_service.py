"""Course catalog management: courses, modules and lessons.

Courses are immutable trees; every edit rebuilds the affected branch with
``dataclasses.replace`` and saves the whole course.  Modules and lessons
keep creation order: new ones are appended, edits keep their position.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from urllib.parse import parse_qs, urlparse

from inspira.models.course import Attachment, Course, Lesson, Module, Quiz
from inspira.repos.course_repo import CourseRepo
from inspira.repos.enrollment_repo import EnrollmentRepo
from inspira.services import progress_service
from inspira.services.errors import NotFoundError

logger = logging.getLogger(__name__)


async def list_courses(repo: CourseRepo) -> list[Course]:
    return await repo.list_all()


async def get_course(repo: CourseRepo, course_id: str) -> Course:
    course = await repo.get(course_id)
    if course is None:
        raise NotFoundError(f"course {course_id!r} not found")
    return course


async def create_course(
    repo: CourseRepo,
    *,
    title: str,
    description: str = "",
    price: Decimal = Decimal("0"),
    image_url: str = "",
) -> Course:
    course = Course.new(
        title=title, description=description, price=price, image_url=image_url
    )
    await repo.add(course)
    logger.info("Course created  id=%s title=%s", course.id, course.title)
    return course


async def update_course(
    repo: CourseRepo,
    course_id: str,
    *,
    title: str | None = None,
    description: str | None = None,
    price: Decimal | None = None,
    image_url: str | None = None,
) -> Course:
    course = await get_course(repo, course_id)
    changes = {
        k: v
        for k, v in {
            "title": title,
            "description": description,
            "price": price,
            "image_url": image_url,
        }.items()
        if v is not None
    }
    updated = replace(course, **changes)
    await repo.save(updated)
    logger.info("Course updated  id=%s fields=%s", course_id, sorted(changes))
    return updated


async def delete_course(
    repo: CourseRepo, enrollments: EnrollmentRepo, course_id: str
) -> None:
    """Remove a course and every enrollment in it."""
    if await repo.get(course_id) is None:
        raise NotFoundError(f"course {course_id!r} not found")
    dropped = await enrollments.delete_for_course(course_id)
    await repo.delete(course_id)
    logger.info("Course deleted  id=%s enrollments_removed=%d", course_id, dropped)


# --- Modules ---


def _module_or_404(course: Course, module_id: str) -> Module:
    module = course.find_module(module_id)
    if module is None:
        raise NotFoundError(f"module {module_id!r} not found in course {course.id!r}")
    return module


def _replace_module(course: Course, module: Module) -> Course:
    return replace(
        course,
        modules=tuple(module if m.id == module.id else m for m in course.modules),
    )


async def add_module(repo: CourseRepo, course_id: str, *, title: str) -> Module:
    course = await get_course(repo, course_id)
    module = Module.new(title=title)
    await repo.save(replace(course, modules=(*course.modules, module)))
    logger.info("Module added  course=%s module=%s", course_id, module.id)
    return module


async def rename_module(
    repo: CourseRepo, course_id: str, module_id: str, *, title: str
) -> Module:
    course = await get_course(repo, course_id)
    module = replace(_module_or_404(course, module_id), title=title)
    await repo.save(_replace_module(course, module))
    logger.info("Module renamed  course=%s module=%s", course_id, module_id)
    return module


async def delete_module(repo: CourseRepo, course_id: str, module_id: str) -> None:
    course = await get_course(repo, course_id)
    _module_or_404(course, module_id)
    await repo.save(
        replace(course, modules=tuple(m for m in course.modules if m.id != module_id))
    )
    logger.info("Module deleted  course=%s module=%s", course_id, module_id)


# --- Lessons ---


async def add_lesson(
    repo: CourseRepo,
    course_id: str,
    module_id: str,
    *,
    title: str,
    content: str = "",
    video_url: str | None = None,
    attachments: tuple[Attachment, ...] = (),
    quiz: Quiz | None = None,
) -> Lesson:
    course = await get_course(repo, course_id)
    module = _module_or_404(course, module_id)
    lesson = Lesson.new(
        title=title,
        content=content,
        video_url=video_url,
        attachments=attachments,
        quiz=quiz,
    )
    module = replace(module, lessons=(*module.lessons, lesson))
    await repo.save(_replace_module(course, module))
    logger.info(
        "Lesson added  course=%s module=%s lesson=%s graded=%s",
        course_id,
        module_id,
        lesson.id,
        lesson.is_graded,
    )
    return lesson


_KEEP = object()


async def update_lesson(
    repo: CourseRepo,
    enrollments: EnrollmentRepo,
    course_id: str,
    module_id: str,
    lesson_id: str,
    *,
    title: str | None = None,
    content: str | None = None,
    video_url: str | None | object = _KEEP,
    attachments: tuple[Attachment, ...] | None = None,
    quiz: Quiz | None | object = _KEEP,
) -> Lesson:
    """Patch a lesson.  ``video_url`` and ``quiz`` accept None to clear them.

    Attaching a quiz to a plain lesson un-completes it for every learner
    who has not passed that quiz.
    """
    course = await get_course(repo, course_id)
    module = _module_or_404(course, module_id)
    current = next((les for les in module.lessons if les.id == lesson_id), None)
    if current is None:
        raise NotFoundError(f"lesson {lesson_id!r} not found in module {module_id!r}")

    changes: dict[str, object] = {}
    if title is not None:
        changes["title"] = title
    if content is not None:
        changes["content"] = content
    if attachments is not None:
        changes["attachments"] = attachments
    if video_url is not _KEEP:
        changes["video_url"] = video_url
    if quiz is not _KEEP:
        changes["quiz"] = quiz

    lesson = replace(current, **changes)
    module = replace(
        module,
        lessons=tuple(lesson if les.id == lesson_id else les for les in module.lessons),
    )
    await repo.save(_replace_module(course, module))

    revoked = 0
    if lesson.is_graded and not current.is_graded:
        revoked = await progress_service.revoke_unearned_completions(
            enrollments, course_id, lesson_id
        )
    logger.info(
        "Lesson updated  course=%s lesson=%s fields=%s graded=%s revoked=%d",
        course_id,
        lesson_id,
        sorted(changes),
        lesson.is_graded,
        revoked,
    )
    return lesson


async def delete_lesson(
    repo: CourseRepo, course_id: str, module_id: str, lesson_id: str
) -> None:
    course = await get_course(repo, course_id)
    module = _module_or_404(course, module_id)
    if not any(les.id == lesson_id for les in module.lessons):
        raise NotFoundError(f"lesson {lesson_id!r} not found in module {module_id!r}")
    module = replace(
        module, lessons=tuple(les for les in module.lessons if les.id != lesson_id)
    )
    await repo.save(_replace_module(course, module))
    logger.info("Lesson deleted  course=%s lesson=%s", course_id, lesson_id)


# --- Presentation helpers ---


def video_embed_url(url: str) -> str:
    """Turn YouTube watch / short links into embed URLs; pass others through."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return url

    host = (parsed.hostname or "").lower()
    video_id: str | None = None
    if host in ("youtu.be", "www.youtu.be"):
        video_id = parsed.path.lstrip("/").split("/")[0] or None
    elif host.endswith("youtube.com") and parsed.path == "/watch":
        video_id = parse_qs(parsed.query).get("v", [None])[0]

    if video_id:
        return f"https://www.youtube.com/embed/{video_id}"
    return url
