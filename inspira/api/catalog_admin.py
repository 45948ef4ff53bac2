from __future__ import annotations

import logging
from decimal import Decimal

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, Field

from inspira.api.courses import AttachmentOut, CourseDetailOut, LessonOut
from inspira.api.dependencies import AdminDep, RepoDep, http_error
from inspira.models.course import Attachment, Course, Lesson, Question, Quiz
from inspira.services import catalog_service
from inspira.services.cache import (
    cache_service,
    course_progress_pattern,
    invalidating,
)
from inspira.services.errors import DomainError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin/courses", tags=["admin"])


class CourseIn(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    price: Decimal = Field(default=Decimal("0"), ge=0)
    image_url: str = ""


class CoursePatch(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    image_url: str | None = None


class ModuleIn(BaseModel):
    title: str = Field(min_length=1)


class ModuleOut(BaseModel):
    id: str
    title: str


class QuestionIn(BaseModel):
    text: str
    options: list[str]
    correct_option_index: int


class LessonIn(BaseModel):
    title: str = Field(min_length=1)
    content: str = ""
    video_url: str | None = None
    attachments: list[AttachmentOut] = []
    questions: list[QuestionIn] | None = None


class LessonPatch(BaseModel):
    """Only fields present in the body are changed.

    Send ``"video_url": null`` or ``"questions": null`` to remove them.
    """

    title: str | None = Field(default=None, min_length=1)
    content: str | None = None
    video_url: str | None = None
    attachments: list[AttachmentOut] | None = None
    questions: list[QuestionIn] | None = None


class QuestionAdminOut(BaseModel):
    id: str
    text: str
    options: list[str]
    correct_option_index: int


class LessonAdminOut(LessonOut):
    answer_key: list[QuestionAdminOut] | None = None

    @classmethod
    def of(cls, lesson: Lesson) -> LessonAdminOut:
        return cls(
            **LessonOut.of(lesson).model_dump(),
            answer_key=(
                [
                    QuestionAdminOut(
                        id=q.id,
                        text=q.text,
                        options=list(q.options),
                        correct_option_index=q.correct_option_index,
                    )
                    for q in lesson.quiz.questions
                ]
                if lesson.quiz is not None
                else None
            ),
        )


class ModuleAdminOut(BaseModel):
    id: str
    title: str
    lessons: list[LessonAdminOut]


class CourseAdminOut(BaseModel):
    id: str
    title: str
    description: str
    price: Decimal
    image_url: str
    modules: list[ModuleAdminOut]

    @classmethod
    def of(cls, course: Course) -> CourseAdminOut:
        return cls(
            id=course.id,
            title=course.title,
            description=course.description,
            price=course.price,
            image_url=course.image_url,
            modules=[
                ModuleAdminOut(
                    id=m.id,
                    title=m.title,
                    lessons=[LessonAdminOut.of(les) for les in m.lessons],
                )
                for m in course.modules
            ],
        )


def _quiz(questions: list[QuestionIn] | None) -> Quiz | None:
    if questions is None:
        return None
    try:
        return Quiz(
            questions=tuple(
                Question.new(
                    text=q.text,
                    options=tuple(q.options),
                    correct_option_index=q.correct_option_index,
                )
                for q in questions
            )
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(e)
        ) from None


def _attachments(items: list[AttachmentOut]) -> tuple[Attachment, ...]:
    return tuple(Attachment(name=a.name, url=a.url) for a in items)


def _invalidating_course(course_id: str):
    # Structural edits change every enrolled learner's totals.
    return invalidating(cache_service, course_progress_pattern(course_id), pattern=True)


# --- Courses ---------------------------------------------------------------


@router.get("/{course_id}", response_model=CourseAdminOut)
async def admin_get_course(
    course_id: str, principal: AdminDep, repos: RepoDep
) -> CourseAdminOut:
    try:
        course = await catalog_service.get_course(repos.courses, course_id)
    except DomainError as e:
        raise http_error(e) from e
    return CourseAdminOut.of(course)


@router.post("", response_model=CourseDetailOut, status_code=status.HTTP_201_CREATED)
async def admin_create_course(
    payload: CourseIn, principal: AdminDep, repos: RepoDep
) -> CourseDetailOut:
    course = await catalog_service.create_course(
        repos.courses,
        title=payload.title,
        description=payload.description,
        price=payload.price,
        image_url=payload.image_url,
    )
    logger.info("Course created by admin=%s course=%s", principal.user_id, course.id)
    return CourseDetailOut.of(course)


@router.patch("/{course_id}", response_model=CourseDetailOut)
async def admin_update_course(
    course_id: str, payload: CoursePatch, principal: AdminDep, repos: RepoDep
) -> CourseDetailOut:
    try:
        course = await catalog_service.update_course(
            repos.courses,
            course_id,
            title=payload.title,
            description=payload.description,
            price=payload.price,
            image_url=payload.image_url,
        )
    except DomainError as e:
        raise http_error(e) from e
    return CourseDetailOut.of(course)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def admin_delete_course(
    course_id: str, principal: AdminDep, repos: RepoDep
) -> Response:
    try:
        async with _invalidating_course(course_id):
            await catalog_service.delete_course(
                repos.courses, repos.enrollments, course_id
            )
    except DomainError as e:
        raise http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Modules ---------------------------------------------------------------


@router.post(
    "/{course_id}/modules",
    response_model=ModuleOut,
    status_code=status.HTTP_201_CREATED,
)
async def admin_add_module(
    course_id: str, payload: ModuleIn, principal: AdminDep, repos: RepoDep
) -> ModuleOut:
    try:
        module = await catalog_service.add_module(
            repos.courses, course_id, title=payload.title
        )
    except DomainError as e:
        raise http_error(e) from e
    return ModuleOut(id=module.id, title=module.title)


@router.patch("/{course_id}/modules/{module_id}", response_model=ModuleOut)
async def admin_rename_module(
    course_id: str,
    module_id: str,
    payload: ModuleIn,
    principal: AdminDep,
    repos: RepoDep,
) -> ModuleOut:
    try:
        module = await catalog_service.rename_module(
            repos.courses, course_id, module_id, title=payload.title
        )
    except DomainError as e:
        raise http_error(e) from e
    return ModuleOut(id=module.id, title=module.title)


@router.delete(
    "/{course_id}/modules/{module_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def admin_delete_module(
    course_id: str, module_id: str, principal: AdminDep, repos: RepoDep
) -> Response:
    try:
        async with _invalidating_course(course_id):
            await catalog_service.delete_module(repos.courses, course_id, module_id)
    except DomainError as e:
        raise http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Lessons ---------------------------------------------------------------


@router.post(
    "/{course_id}/modules/{module_id}/lessons",
    response_model=LessonAdminOut,
    status_code=status.HTTP_201_CREATED,
)
async def admin_add_lesson(
    course_id: str,
    module_id: str,
    payload: LessonIn,
    principal: AdminDep,
    repos: RepoDep,
) -> LessonAdminOut:
    try:
        async with _invalidating_course(course_id):
            lesson = await catalog_service.add_lesson(
                repos.courses,
                course_id,
                module_id,
                title=payload.title,
                content=payload.content,
                video_url=payload.video_url,
                attachments=_attachments(payload.attachments),
                quiz=_quiz(payload.questions),
            )
    except DomainError as e:
        raise http_error(e) from e
    return LessonAdminOut.of(lesson)


@router.patch(
    "/{course_id}/modules/{module_id}/lessons/{lesson_id}",
    response_model=LessonAdminOut,
)
async def admin_update_lesson(
    course_id: str,
    module_id: str,
    lesson_id: str,
    payload: LessonPatch,
    principal: AdminDep,
    repos: RepoDep,
) -> LessonAdminOut:
    # Fields absent from the body stay as they are; explicit nulls clear.
    sent = payload.model_fields_set
    changes: dict[str, object] = {
        "title": payload.title,
        "content": payload.content,
        "attachments": (
            _attachments(payload.attachments)
            if payload.attachments is not None
            else None
        ),
    }
    if "video_url" in sent:
        changes["video_url"] = payload.video_url
    if "questions" in sent:
        changes["quiz"] = _quiz(payload.questions)

    try:
        async with _invalidating_course(course_id):
            lesson = await catalog_service.update_lesson(
                repos.courses,
                repos.enrollments,
                course_id,
                module_id,
                lesson_id,
                **changes,
            )
    except DomainError as e:
        raise http_error(e) from e
    return LessonAdminOut.of(lesson)


@router.delete(
    "/{course_id}/modules/{module_id}/lessons/{lesson_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def admin_delete_lesson(
    course_id: str,
    module_id: str,
    lesson_id: str,
    principal: AdminDep,
    repos: RepoDep,
) -> Response:
    try:
        async with _invalidating_course(course_id):
            await catalog_service.delete_lesson(
                repos.courses, course_id, module_id, lesson_id
            )
    except DomainError as e:
        raise http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
