"""One bundle of repositories per request.

Without DATABASE_URL every request shares the module-level in-memory
bundle.  With it, each request gets Postgres repos bound to its own
session, so a request's writes commit or roll back together.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from inspira.repos.access_code_repo import AccessCodeRepo, InMemoryAccessCodeRepo
from inspira.repos.coupon_repo import CouponRepo, InMemoryCouponRepo
from inspira.repos.course_repo import CourseRepo, InMemoryCourseRepo
from inspira.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from inspira.repos.note_repo import InMemoryNoteFolderRepo, NoteFolderRepo
from inspira.repos.pg_access_code_repo import PgAccessCodeRepo
from inspira.repos.pg_coupon_repo import PgCouponRepo
from inspira.repos.pg_course_repo import PgCourseRepo
from inspira.repos.pg_enrollment_repo import PgEnrollmentRepo
from inspira.repos.pg_note_repo import PgNoteFolderRepo
from inspira.repos.pg_user_repo import PgUserRepo
from inspira.repos.user_repo import InMemoryUserRepo, UserRepo


@dataclass(frozen=True, slots=True)
class Repos:
    courses: CourseRepo
    enrollments: EnrollmentRepo
    coupons: CouponRepo
    users: UserRepo
    access_codes: AccessCodeRepo
    notes: NoteFolderRepo


def pg_repos(session: AsyncSession) -> Repos:
    return Repos(
        courses=PgCourseRepo(session),
        enrollments=PgEnrollmentRepo(session),
        coupons=PgCouponRepo(session),
        users=PgUserRepo(session),
        access_codes=PgAccessCodeRepo(session),
        notes=PgNoteFolderRepo(session),
    )


def new_in_memory_repos() -> Repos:
    return Repos(
        courses=InMemoryCourseRepo(),
        enrollments=InMemoryEnrollmentRepo(),
        coupons=InMemoryCouponRepo(),
        users=InMemoryUserRepo(),
        access_codes=InMemoryAccessCodeRepo(),
        notes=InMemoryNoteFolderRepo(),
    )


# Module-level singleton (same pattern as the cache service)
in_memory_repos = new_in_memory_repos()
