from __future__ import annotations

from typing import Protocol

from inspira.models.note import NoteFolder


class NoteFolderRepo(Protocol):
    async def get(self, folder_id: str) -> NoteFolder | None: ...
    async def list_for_owner(self, owner_id: str) -> list[NoteFolder]: ...
    async def add(self, folder: NoteFolder) -> None: ...
    async def save(self, folder: NoteFolder) -> None: ...
    async def delete(self, folder_id: str) -> bool: ...
    async def delete_for_owner(self, owner_id: str) -> int: ...


class InMemoryNoteFolderRepo:
    def __init__(self) -> None:
        self._by_id: dict[str, NoteFolder] = {}

    async def get(self, folder_id: str) -> NoteFolder | None:
        return self._by_id.get(folder_id)

    async def list_for_owner(self, owner_id: str) -> list[NoteFolder]:
        return [f for f in self._by_id.values() if f.owner_id == owner_id]

    async def add(self, folder: NoteFolder) -> None:
        if folder.id in self._by_id:
            raise ValueError("folder id already exists")
        self._by_id[folder.id] = folder

    async def save(self, folder: NoteFolder) -> None:
        if folder.id not in self._by_id:
            raise KeyError("folder not found")
        self._by_id[folder.id] = folder

    async def delete(self, folder_id: str) -> bool:
        return self._by_id.pop(folder_id, None) is not None

    async def delete_for_owner(self, owner_id: str) -> int:
        doomed = [fid for fid, f in self._by_id.items() if f.owner_id == owner_id]
        for fid in doomed:
            del self._by_id[fid]
        return len(doomed)
