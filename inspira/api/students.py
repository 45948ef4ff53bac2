"""Admin management of student accounts, enrollments and administrators."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from inspira.api.auth import UserOut
from inspira.api.dependencies import AdminDep, RepoDep, http_error
from inspira.models.user import User
from inspira.services import accounts_service
from inspira.services.cache import cache_service, invalidating, progress_key
from inspira.services.errors import DomainError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin", tags=["admin"])


class StudentIn(BaseModel):
    name: str
    email: str
    password: str
    phone: str | None = None


class StudentPatch(BaseModel):
    name: str | None = None
    phone: str | None = None
    password: str | None = None


class AdminIn(BaseModel):
    name: str
    email: str
    password: str


class EnrollIn(BaseModel):
    course_id: str


class EnrollmentOut(BaseModel):
    student_id: str
    course_id: str
    enrolled_at: int


class StandingOut(BaseModel):
    course_id: str
    course_title: str
    enrolled_at: int
    completed_lessons: int
    total_lessons: int
    progress: float
    performance: float


class StudentDetailOut(BaseModel):
    student: UserOut
    courses: list[StandingOut]


def _out(user: User) -> UserOut:
    return UserOut.of(user)


@router.get("/students", response_model=list[UserOut])
async def admin_list_students(principal: AdminDep, repos: RepoDep) -> list[UserOut]:
    logger.info("Admin student list requested by user=%s", principal.user_id)
    return [_out(u) for u in await accounts_service.list_students(repos.users)]


@router.post(
    "/students", response_model=UserOut, status_code=status.HTTP_201_CREATED
)
async def admin_create_student(
    payload: StudentIn, principal: AdminDep, repos: RepoDep
) -> UserOut:
    try:
        user = await accounts_service.register_student(
            repos.users,
            name=payload.name,
            email=payload.email,
            password=payload.password,
            phone=payload.phone,
        )
    except DomainError as e:
        raise http_error(e) from e
    return _out(user)


@router.get("/students/{student_id}", response_model=StudentDetailOut)
async def admin_get_student(
    student_id: str, principal: AdminDep, repos: RepoDep
) -> StudentDetailOut:
    try:
        user = await accounts_service.get_student(repos.users, student_id)
    except DomainError as e:
        raise http_error(e) from e
    standings = await accounts_service.course_standings(
        repos.courses, repos.enrollments, student_id
    )
    return StudentDetailOut(
        student=_out(user),
        courses=[
            StandingOut(
                course_id=s.course.id,
                course_title=s.course.title,
                enrolled_at=s.enrollment.enrolled_at,
                completed_lessons=len(
                    s.enrollment.completed_lesson_ids & s.course.lesson_ids()
                ),
                total_lessons=len(s.course.lesson_ids()),
                progress=s.progress,
                performance=s.performance,
            )
            for s in standings
        ],
    )


@router.patch("/students/{student_id}", response_model=UserOut)
async def admin_update_student(
    student_id: str, payload: StudentPatch, principal: AdminDep, repos: RepoDep
) -> UserOut:
    try:
        user = await accounts_service.update_student(
            repos.users,
            student_id,
            name=payload.name,
            phone=payload.phone,
            password=payload.password,
        )
    except DomainError as e:
        raise http_error(e) from e
    return _out(user)


@router.delete("/students/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def admin_delete_student(
    student_id: str, principal: AdminDep, repos: RepoDep
) -> Response:
    try:
        async with invalidating(
            cache_service, progress_key(student_id, "*"), pattern=True
        ):
            await accounts_service.delete_student(
                repos.users, repos.enrollments, repos.notes, student_id
            )
    except DomainError as e:
        raise http_error(e) from e
    logger.info("Student removed by admin=%s student=%s", principal.user_id, student_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/students/{student_id}/enrollments",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
)
async def admin_enroll_student(
    student_id: str, payload: EnrollIn, principal: AdminDep, repos: RepoDep
) -> EnrollmentOut:
    try:
        enrollment = await accounts_service.enroll_student(
            repos.users,
            repos.courses,
            repos.enrollments,
            student_id=student_id,
            course_id=payload.course_id,
        )
    except DomainError as e:
        raise http_error(e) from e
    return EnrollmentOut(
        student_id=enrollment.student_id,
        course_id=enrollment.course_id,
        enrolled_at=enrollment.enrolled_at,
    )


@router.post("/admins", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def admin_create_admin(
    payload: AdminIn, principal: AdminDep, repos: RepoDep
) -> UserOut:
    try:
        user = await accounts_service.create_admin(
            repos.users,
            name=payload.name,
            email=payload.email,
            password=payload.password,
        )
    except DomainError as e:
        raise http_error(e) from e
    logger.info("Administrator created by admin=%s new=%s", principal.user_id, user.id)
    return _out(user)
