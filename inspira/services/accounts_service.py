"""Student and administrator accounts, enrollment grants, dashboards.

Passwords are hashed here and never leave this module in plain text.
Emails are normalized (trimmed, lower-cased) before any lookup.
"""

from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass, replace

from inspira.models.course import Course
from inspira.models.enrollment import Enrollment
from inspira.models.user import ROLE_ADMIN, ROLE_STUDENT, User
from inspira.repos.access_code_repo import AccessCodeRepo
from inspira.repos.course_repo import CourseRepo
from inspira.repos.enrollment_repo import EnrollmentRepo
from inspira.repos.note_repo import NoteFolderRepo
from inspira.repos.user_repo import UserRepo
from inspira.services import auth_service
from inspira.services.errors import ConflictError, InvalidInputError, NotFoundError
from inspira.services.grading import compute_performance, compute_progress

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True, slots=True)
class CourseStanding:
    """A course as seen from one student's dashboard."""

    course: Course
    enrollment: Enrollment
    progress: float
    performance: float


def _normalize_email(email: str) -> str:
    email = email.strip().lower()
    if not _EMAIL_RE.match(email):
        raise InvalidInputError("invalid email address")
    return email


def _check_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise InvalidInputError("name is required")
    return name


def _check_password(password: str) -> str:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInputError(
            f"password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    return password


async def _create_user(
    users: UserRepo,
    *,
    name: str,
    email: str,
    password: str,
    roles: tuple[str, ...],
    phone: str | None = None,
    is_ct_student: bool = False,
) -> User:
    email = _normalize_email(email)
    name = _check_name(name)
    _check_password(password)

    if await users.get_by_email(email) is not None:
        logger.warning("Rejected duplicate email=%s", email)
        raise ConflictError("this email is already in use")

    user = User.new(
        email=email,
        password_hash=auth_service.hash_password(password),
        name=name,
        roles=roles,
        phone=phone or None,
        is_ct_student=is_ct_student,
    )
    await users.add(user)
    logger.info("User created  id=%s roles=%s ct=%s", user.id, roles, is_ct_student)
    return user


async def register_student(
    users: UserRepo,
    *,
    name: str,
    email: str,
    password: str,
    phone: str | None = None,
) -> User:
    return await _create_user(
        users,
        name=name,
        email=email,
        password=password,
        roles=(ROLE_STUDENT,),
        phone=phone,
    )


async def create_admin(
    users: UserRepo, *, name: str, email: str, password: str
) -> User:
    return await _create_user(
        users, name=name, email=email, password=password, roles=(ROLE_ADMIN,)
    )


async def register_ct_student(
    users: UserRepo,
    access_codes: AccessCodeRepo,
    *,
    name: str,
    email: str,
    password: str,
    access_code: str,
    phone: str | None = None,
) -> User:
    """Self-registration for CT partner students, gated by a one-time code.

    The code is checked before the account is created and marked used by
    the new account afterwards.
    """
    record = await access_codes.get_by_code(access_code.strip())
    if record is None or record.is_used:
        logger.warning("Rejected CT registration  code=%s", access_code)
        raise InvalidInputError("access code is invalid or already used")

    user = await _create_user(
        users,
        name=name,
        email=email,
        password=password,
        roles=(ROLE_STUDENT,),
        phone=phone,
        is_ct_student=True,
    )
    await access_codes.save(replace(record, is_used=True, used_by_user_id=user.id))
    logger.info("Access code redeemed  code_id=%s user=%s", record.id, user.id)
    return user


async def list_students(users: UserRepo) -> list[User]:
    return await users.list_by_role(ROLE_STUDENT)


async def get_student(users: UserRepo, student_id: str) -> User:
    user = await users.get_by_id(student_id)
    if user is None or ROLE_STUDENT not in user.roles:
        raise NotFoundError(f"student {student_id!r} not found")
    return user


async def update_student(
    users: UserRepo,
    student_id: str,
    *,
    name: str | None = None,
    phone: str | None = None,
    password: str | None = None,
) -> User:
    """Email and role are fixed; name, phone and password can change."""
    user = await get_student(users, student_id)
    changes: dict[str, object] = {}
    if name is not None:
        changes["name"] = _check_name(name)
    if phone is not None:
        changes["phone"] = phone.strip() or None
    if password:
        changes["password_hash"] = auth_service.hash_password(_check_password(password))
    updated = replace(user, **changes)
    await users.save(updated)
    logger.info("Student updated  id=%s fields=%s", student_id, sorted(changes))
    return updated


async def delete_student(
    users: UserRepo,
    enrollments: EnrollmentRepo,
    notes: NoteFolderRepo,
    student_id: str,
) -> None:
    """Remove a student together with their enrollments and note folders."""
    await get_student(users, student_id)
    dropped = await enrollments.delete_for_student(student_id)
    folders = await notes.delete_for_owner(student_id)
    await users.delete(student_id)
    logger.info(
        "Student deleted  id=%s enrollments_removed=%d folders_removed=%d",
        student_id,
        dropped,
        folders,
    )


async def enroll_student(
    users: UserRepo,
    courses: CourseRepo,
    enrollments: EnrollmentRepo,
    *,
    student_id: str,
    course_id: str,
    now: int | None = None,
) -> Enrollment:
    """Grant a student access to a course (after an off-platform purchase)."""
    await get_student(users, student_id)
    if await courses.get(course_id) is None:
        raise NotFoundError(f"course {course_id!r} not found")
    if await enrollments.get(student_id, course_id) is not None:
        raise ConflictError("student is already enrolled in this course")

    enrollment = Enrollment.new(
        student_id=student_id,
        course_id=course_id,
        enrolled_at=(
            now
            if now is not None
            else int(datetime.datetime.now(datetime.UTC).timestamp())
        ),
    )
    await enrollments.create(enrollment)
    logger.info("Student enrolled  student=%s course=%s", student_id, course_id)
    return enrollment


async def course_standings(
    courses: CourseRepo, enrollments: EnrollmentRepo, student_id: str
) -> list[CourseStanding]:
    """Every course the student is enrolled in, with progress and performance.

    Enrollments whose course has since been deleted are skipped.
    """
    standings = []
    for enrollment in await enrollments.list_for_student(student_id):
        course = await courses.get(enrollment.course_id)
        if course is None:
            continue
        standings.append(
            CourseStanding(
                course=course,
                enrollment=enrollment,
                progress=compute_progress(course, enrollment.completed_lesson_ids),
                performance=compute_performance(enrollment.quiz_attempts),
            )
        )
    return standings
