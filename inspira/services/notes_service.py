"""A learner's private notebook: folders holding titled notes.

Folders belong to one learner.  Asking for somebody else's folder is
answered exactly like asking for a folder that does not exist.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import replace

from inspira.models.note import Note, NoteFolder
from inspira.repos.note_repo import NoteFolderRepo
from inspira.services.errors import InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)


def _now() -> int:
    return int(datetime.datetime.now(datetime.UTC).timestamp())


def _required(value: str, field: str) -> str:
    value = value.strip()
    if not value:
        raise InvalidInputError(f"{field} must not be blank")
    return value


async def _owned_folder(
    repo: NoteFolderRepo, owner_id: str, folder_id: str
) -> NoteFolder:
    folder = await repo.get(folder_id)
    if folder is None or folder.owner_id != owner_id:
        raise NotFoundError(f"folder {folder_id!r} not found")
    return folder


def _note_or_404(folder: NoteFolder, note_id: str) -> Note:
    note = folder.find_note(note_id)
    if note is None:
        raise NotFoundError(f"note {note_id!r} not found in folder {folder.id!r}")
    return note


async def list_folders(repo: NoteFolderRepo, owner_id: str) -> list[NoteFolder]:
    return await repo.list_for_owner(owner_id)


async def create_folder(repo: NoteFolderRepo, owner_id: str, *, name: str) -> NoteFolder:
    folder = NoteFolder.new(owner_id=owner_id, name=_required(name, "name"))
    await repo.add(folder)
    logger.info("Note folder created  owner=%s folder=%s", owner_id, folder.id)
    return folder


async def delete_folder(repo: NoteFolderRepo, owner_id: str, folder_id: str) -> None:
    """Delete a folder and every note in it."""
    folder = await _owned_folder(repo, owner_id, folder_id)
    await repo.delete(folder.id)
    logger.info(
        "Note folder deleted  owner=%s folder=%s notes=%d",
        owner_id,
        folder_id,
        len(folder.notes),
    )


async def add_note(
    repo: NoteFolderRepo,
    owner_id: str,
    folder_id: str,
    *,
    title: str,
    now: int | None = None,
) -> Note:
    folder = await _owned_folder(repo, owner_id, folder_id)
    note = Note.new(
        title=_required(title, "title"), now=now if now is not None else _now()
    )
    await repo.save(replace(folder, notes=(*folder.notes, note)))
    return note


async def save_note(
    repo: NoteFolderRepo,
    owner_id: str,
    folder_id: str,
    note_id: str,
    *,
    content: str,
    now: int | None = None,
) -> Note:
    """Replace a note's body and stamp ``last_saved``."""
    folder = await _owned_folder(repo, owner_id, folder_id)
    note = replace(
        _note_or_404(folder, note_id),
        content=content,
        last_saved=now if now is not None else _now(),
    )
    await repo.save(
        replace(
            folder,
            notes=tuple(note if n.id == note_id else n for n in folder.notes),
        )
    )
    return note


async def delete_note(
    repo: NoteFolderRepo, owner_id: str, folder_id: str, note_id: str
) -> None:
    folder = await _owned_folder(repo, owner_id, folder_id)
    _note_or_404(folder, note_id)
    await repo.save(
        replace(folder, notes=tuple(n for n in folder.notes if n.id != note_id))
    )
