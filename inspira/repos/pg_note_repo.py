"""PostgreSQL implementation of NoteFolderRepo."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from inspira.db.engine import translate_db_errors
from inspira.db.tables import NoteFolderRow
from inspira.models.note import Note, NoteFolder


class PgNoteFolderRepo:
    """Satisfies the NoteFolderRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, folder_id: str) -> NoteFolder | None:
        with translate_db_errors("get note folder"):
            row = await self._session.get(NoteFolderRow, folder_id)
        return None if row is None else _row_to_folder(row)

    async def list_for_owner(self, owner_id: str) -> list[NoteFolder]:
        stmt = (
            select(NoteFolderRow)
            .where(NoteFolderRow.owner_id == owner_id)
            .order_by(NoteFolderRow.seq)
        )
        with translate_db_errors("list note folders"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_folder(r) for r in rows]

    async def add(self, folder: NoteFolder) -> None:
        row = NoteFolderRow(
            id=folder.id,
            owner_id=folder.owner_id,
            name=folder.name,
            notes=[_note_to_doc(n) for n in folder.notes],
        )
        with translate_db_errors("add note folder"):
            self._session.add(row)
            await self._session.flush()

    async def save(self, folder: NoteFolder) -> None:
        with translate_db_errors("save note folder"):
            row = await self._session.get(NoteFolderRow, folder.id)
            if row is None:
                raise KeyError("folder not found")
            row.name = folder.name
            row.notes = [_note_to_doc(n) for n in folder.notes]
            await self._session.flush()

    async def delete(self, folder_id: str) -> bool:
        stmt = delete(NoteFolderRow).where(NoteFolderRow.id == folder_id)
        with translate_db_errors("delete note folder"):
            result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def delete_for_owner(self, owner_id: str) -> int:
        stmt = delete(NoteFolderRow).where(NoteFolderRow.owner_id == owner_id)
        with translate_db_errors("delete note folders"):
            result = await self._session.execute(stmt)
        return result.rowcount


def _note_to_doc(note: Note) -> dict:
    return {
        "id": note.id,
        "title": note.title,
        "content": note.content,
        "last_saved": note.last_saved,
    }


def _row_to_folder(row: NoteFolderRow) -> NoteFolder:
    return NoteFolder(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        notes=tuple(
            Note(
                id=d["id"],
                title=d["title"],
                content=d.get("content", ""),
                last_saved=d.get("last_saved", 0),
            )
            for d in row.notes or []
        ),
    )
