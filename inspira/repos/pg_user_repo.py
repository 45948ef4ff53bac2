"""Accounts in Postgres.  Emails are stored lower-cased and unique."""

from __future__ import annotations

from dataclasses import asdict

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from inspira.db.engine import translate_db_errors
from inspira.db.tables import UserRow
from inspira.models.user import User


def _columns(user: User) -> dict[str, object]:
    values = asdict(user)
    values["roles"] = list(user.roles)
    return values


def _to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        name=row.name or "",
        roles=tuple(row.roles or ()),
        phone=row.phone,
        is_ct_student=row.is_ct_student,
        is_active=row.is_active,
    )


class PgUserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: str) -> User | None:
        with translate_db_errors("get user"):
            row = await self._session.get(UserRow, user_id)
        return _to_user(row) if row is not None else None

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(UserRow).where(UserRow.email == email.strip().lower())
        with translate_db_errors("get user by email"):
            row = await self._session.scalar(stmt)
        return _to_user(row) if row is not None else None

    async def list_by_role(self, role: str) -> list[User]:
        stmt = select(UserRow).where(UserRow.roles.any(role)).order_by(UserRow.name)
        with translate_db_errors("list users"):
            rows = await self._session.scalars(stmt)
        return [_to_user(r) for r in rows]

    async def add(self, user: User) -> None:
        with translate_db_errors("add user"):
            self._session.add(UserRow(**_columns(user)))
            await self._session.flush()

    async def save(self, user: User) -> None:
        values = _columns(user)
        user_id = values.pop("id")
        stmt = update(UserRow).where(UserRow.id == user_id).values(**values)
        with translate_db_errors("save user"):
            result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise KeyError("user not found")

    async def delete(self, user_id: str) -> bool:
        stmt = delete(UserRow).where(UserRow.id == user_id)
        with translate_db_errors("delete user"):
            result = await self._session.execute(stmt)
        return result.rowcount > 0
