"""Public catalog, the learner's own courses, and checkout quotes.

Quiz answer keys never leave the server through these endpoints; the
admin catalog router has its own full view.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from fastapi import APIRouter, Query
from pydantic import BaseModel

from inspira.api.dependencies import RepoDep, UserDep, http_error
from inspira.models.course import Course, Lesson
from inspira.services import accounts_service, catalog_service, coupon_service
from inspira.services.checkout import build_quote
from inspira.services.errors import DomainError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/courses", tags=["courses"])


class AttachmentOut(BaseModel):
    name: str
    url: str


class QuestionOut(BaseModel):
    id: str
    text: str
    options: list[str]


class LessonOut(BaseModel):
    id: str
    title: str
    content: str
    video_url: str | None
    embed_url: str | None
    attachments: list[AttachmentOut]
    is_graded: bool
    questions: list[QuestionOut] | None = None

    @classmethod
    def of(cls, lesson: Lesson) -> LessonOut:
        return cls(
            id=lesson.id,
            title=lesson.title,
            content=lesson.content,
            video_url=lesson.video_url,
            embed_url=(
                catalog_service.video_embed_url(lesson.video_url)
                if lesson.video_url
                else None
            ),
            attachments=[AttachmentOut(name=a.name, url=a.url) for a in lesson.attachments],
            is_graded=lesson.is_graded,
            questions=(
                [
                    QuestionOut(id=q.id, text=q.text, options=list(q.options))
                    for q in lesson.quiz.questions
                ]
                if lesson.quiz is not None
                else None
            ),
        )


class ModuleOut(BaseModel):
    id: str
    title: str
    lessons: list[LessonOut]


class CourseSummaryOut(BaseModel):
    id: str
    title: str
    description: str
    price: Decimal
    image_url: str
    total_lessons: int

    @classmethod
    def of(cls, course: Course) -> CourseSummaryOut:
        return cls(
            id=course.id,
            title=course.title,
            description=course.description,
            price=course.price,
            image_url=course.image_url,
            total_lessons=len(course.lesson_ids()),
        )


class CourseDetailOut(CourseSummaryOut):
    modules: list[ModuleOut]

    @classmethod
    def of(cls, course: Course) -> CourseDetailOut:
        summary = CourseSummaryOut.of(course)
        return cls(
            **summary.model_dump(),
            modules=[
                ModuleOut(
                    id=m.id,
                    title=m.title,
                    lessons=[LessonOut.of(les) for les in m.lessons],
                )
                for m in course.modules
            ],
        )


class MyCourseOut(BaseModel):
    course: CourseSummaryOut
    enrolled_at: int
    progress: float
    performance: float


class CheckoutOut(BaseModel):
    course_id: str
    price: Decimal
    discount_percentage: int
    discount_amount: Decimal
    final_price: Decimal
    whatsapp_url: str


@router.get("", response_model=list[CourseSummaryOut])
async def list_courses(repos: RepoDep) -> list[CourseSummaryOut]:
    return [CourseSummaryOut.of(c) for c in await catalog_service.list_courses(repos.courses)]


# Declared before /{course_id} so "mine" is not read as a course id.
@router.get("/mine", response_model=list[MyCourseOut])
async def my_courses(principal: UserDep, repos: RepoDep) -> list[MyCourseOut]:
    standings = await accounts_service.course_standings(
        repos.courses, repos.enrollments, principal.user_id
    )
    return [
        MyCourseOut(
            course=CourseSummaryOut.of(s.course),
            enrolled_at=s.enrollment.enrolled_at,
            progress=s.progress,
            performance=s.performance,
        )
        for s in standings
    ]


@router.get("/{course_id}", response_model=CourseDetailOut)
async def get_course(course_id: str, repos: RepoDep) -> CourseDetailOut:
    try:
        course = await catalog_service.get_course(repos.courses, course_id)
    except DomainError as e:
        raise http_error(e) from e
    return CourseDetailOut.of(course)


@router.get("/{course_id}/checkout", response_model=CheckoutOut)
async def checkout_quote(
    course_id: str,
    repos: RepoDep,
    coupon: str | None = Query(None, description="Coupon code to apply"),
) -> CheckoutOut:
    """Price the course, optionally with a coupon, and build the WhatsApp link."""
    try:
        course = await catalog_service.get_course(repos.courses, course_id)
        discount = 0
        if coupon:
            discount = await coupon_service.validate_coupon(
                repos.coupons, coupon, course_id
            )
    except DomainError as e:
        raise http_error(e) from e

    quote = build_quote(course, discount)
    return CheckoutOut(
        course_id=quote.course_id,
        price=quote.price,
        discount_percentage=quote.discount_percentage,
        discount_amount=quote.discount_amount,
        final_price=quote.final_price,
        whatsapp_url=quote.whatsapp_url,
    )
