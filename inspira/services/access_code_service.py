"""CT access codes: six-digit, single-use registration codes."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, replace

from inspira.models.access_code import AccessCode
from inspira.repos.access_code_repo import AccessCodeRepo
from inspira.repos.user_repo import UserRepo
from inspira.services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

MAX_GENERATION_ATTEMPTS = 20


@dataclass(frozen=True, slots=True)
class AccessCodeView:
    code: AccessCode
    used_by_name: str | None


def _random_code() -> str:
    return str(100000 + secrets.randbelow(900000))


async def generate_access_code(repo: AccessCodeRepo, *, draw=_random_code) -> AccessCode:
    """Create a fresh code that does not collide with an existing one."""
    for _ in range(MAX_GENERATION_ATTEMPTS):
        candidate = draw()
        if await repo.get_by_code(candidate) is None:
            record = AccessCode.new(code=candidate)
            await repo.add(record)
            logger.info("Access code generated  id=%s", record.id)
            return record
    raise ConflictError("could not generate a unique access code")


async def list_access_codes(
    repo: AccessCodeRepo, users: UserRepo
) -> list[AccessCodeView]:
    views = []
    for record in await repo.list_all():
        name = None
        if record.is_used and record.used_by_user_id:
            user = await users.get_by_id(record.used_by_user_id)
            name = user.name if user is not None else None
        views.append(AccessCodeView(code=record, used_by_name=name))
    return views


async def set_access_code_used(
    repo: AccessCodeRepo, code_id: str, *, is_used: bool
) -> AccessCode:
    """Manually flip a code.  Marking it unused also forgets who used it."""
    record = await repo.get(code_id)
    if record is None:
        raise NotFoundError(f"access code {code_id!r} not found")
    updated = replace(
        record,
        is_used=is_used,
        used_by_user_id=record.used_by_user_id if is_used else None,
    )
    await repo.save(updated)
    logger.info("Access code %s  id=%s", "used" if is_used else "reset", code_id)
    return updated


async def delete_access_code(repo: AccessCodeRepo, code_id: str) -> None:
    if not await repo.delete(code_id):
        raise NotFoundError(f"access code {code_id!r} not found")
    logger.info("Access code deleted  id=%s", code_id)
