from __future__ import annotations

import asyncio

import pytest

from inspira.repos.registry import Repos
from inspira.services import notes_service
from inspira.services.errors import InvalidInputError, NotFoundError


def test_folder_keeps_notes_in_creation_order(fresh_repos: Repos) -> None:
    repo = fresh_repos.notes

    async def _fill():
        folder = await notes_service.create_folder(repo, "user-2", name="  React  ")
        first = await notes_service.add_note(repo, "user-2", folder.id, title="Hooks", now=10)
        second = await notes_service.add_note(repo, "user-2", folder.id, title="JSX", now=11)
        return folder, first, second

    folder, first, second = asyncio.run(_fill())
    [stored] = asyncio.run(notes_service.list_folders(repo, "user-2"))
    assert stored.name == "React"
    assert [n.id for n in stored.notes] == [first.id, second.id]
    assert first.content == ""
    assert first.last_saved == 10


def test_save_note_replaces_content_and_stamps_time(fresh_repos: Repos) -> None:
    repo = fresh_repos.notes
    folder = asyncio.run(notes_service.create_folder(repo, "user-2", name="CSS"))
    note = asyncio.run(notes_service.add_note(repo, "user-2", folder.id, title="Flex", now=1))

    saved = asyncio.run(
        notes_service.save_note(
            repo, "user-2", folder.id, note.id, content="justify-content", now=99
        )
    )
    assert saved.content == "justify-content"
    assert saved.last_saved == 99
    stored = asyncio.run(repo.get(folder.id))
    assert stored.find_note(note.id) == saved


def test_other_learners_folder_is_not_found(fresh_repos: Repos) -> None:
    repo = fresh_repos.notes
    folder = asyncio.run(notes_service.create_folder(repo, "user-2", name="Privado"))

    assert asyncio.run(notes_service.list_folders(repo, "user-4")) == []
    with pytest.raises(NotFoundError):
        asyncio.run(notes_service.add_note(repo, "user-4", folder.id, title="x"))
    with pytest.raises(NotFoundError):
        asyncio.run(notes_service.delete_folder(repo, "user-4", folder.id))
    assert asyncio.run(repo.get(folder.id)) is not None


def test_blank_names_are_rejected(fresh_repos: Repos) -> None:
    repo = fresh_repos.notes
    with pytest.raises(InvalidInputError):
        asyncio.run(notes_service.create_folder(repo, "user-2", name="   "))
    folder = asyncio.run(notes_service.create_folder(repo, "user-2", name="JS"))
    with pytest.raises(InvalidInputError):
        asyncio.run(notes_service.add_note(repo, "user-2", folder.id, title=""))


def test_delete_note_then_folder(fresh_repos: Repos) -> None:
    repo = fresh_repos.notes
    folder = asyncio.run(notes_service.create_folder(repo, "user-2", name="JS"))
    note = asyncio.run(notes_service.add_note(repo, "user-2", folder.id, title="Closures"))

    asyncio.run(notes_service.delete_note(repo, "user-2", folder.id, note.id))
    assert asyncio.run(repo.get(folder.id)).notes == ()
    with pytest.raises(NotFoundError):
        asyncio.run(notes_service.delete_note(repo, "user-2", folder.id, note.id))

    asyncio.run(notes_service.delete_folder(repo, "user-2", folder.id))
    assert asyncio.run(notes_service.list_folders(repo, "user-2")) == []
