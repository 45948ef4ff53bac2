"""PostgreSQL implementation of AccessCodeRepo."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from inspira.db.engine import translate_db_errors
from inspira.db.tables import AccessCodeRow
from inspira.models.access_code import AccessCode


class PgAccessCodeRepo:
    """Satisfies the AccessCodeRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, code_id: str) -> AccessCode | None:
        with translate_db_errors("get access code"):
            row = await self._session.get(AccessCodeRow, code_id)
        return None if row is None else _row_to_code(row)

    async def get_by_code(self, code: str) -> AccessCode | None:
        stmt = select(AccessCodeRow).where(AccessCodeRow.code == code)
        with translate_db_errors("get access code by value"):
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return None if row is None else _row_to_code(row)

    async def list_all(self) -> list[AccessCode]:
        stmt = select(AccessCodeRow).order_by(AccessCodeRow.code)
        with translate_db_errors("list access codes"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_code(r) for r in rows]

    async def add(self, record: AccessCode) -> None:
        row = AccessCodeRow(
            id=record.id,
            code=record.code,
            is_used=record.is_used,
            used_by_user_id=record.used_by_user_id,
        )
        with translate_db_errors("add access code"):
            self._session.add(row)
            await self._session.flush()

    async def save(self, record: AccessCode) -> None:
        with translate_db_errors("save access code"):
            row = await self._session.get(AccessCodeRow, record.id)
            if row is None:
                raise KeyError("access code not found")
            row.is_used = record.is_used
            row.used_by_user_id = record.used_by_user_id
            await self._session.flush()

    async def delete(self, code_id: str) -> bool:
        stmt = delete(AccessCodeRow).where(AccessCodeRow.id == code_id)
        with translate_db_errors("delete access code"):
            result = await self._session.execute(stmt)
        return result.rowcount > 0


def _row_to_code(row: AccessCodeRow) -> AccessCode:
    return AccessCode(
        id=row.id,
        code=row.code,
        is_used=row.is_used,
        used_by_user_id=row.used_by_user_id,
    )
