from __future__ import annotations

from typing import Protocol

from inspira.models.access_code import AccessCode
from inspira.services.errors import ConflictError


class AccessCodeRepo(Protocol):
    async def get(self, code_id: str) -> AccessCode | None: ...
    async def get_by_code(self, code: str) -> AccessCode | None: ...
    async def list_all(self) -> list[AccessCode]: ...
    async def add(self, record: AccessCode) -> None: ...
    async def save(self, record: AccessCode) -> None: ...
    async def delete(self, code_id: str) -> bool: ...


class InMemoryAccessCodeRepo:
    def __init__(self) -> None:
        self._by_id: dict[str, AccessCode] = {}

    async def get(self, code_id: str) -> AccessCode | None:
        return self._by_id.get(code_id)

    async def get_by_code(self, code: str) -> AccessCode | None:
        for record in self._by_id.values():
            if record.code == code:
                return record
        return None

    async def list_all(self) -> list[AccessCode]:
        return list(self._by_id.values())

    async def add(self, record: AccessCode) -> None:
        if await self.get_by_code(record.code) is not None:
            raise ConflictError("access code already exists")
        self._by_id[record.id] = record

    async def save(self, record: AccessCode) -> None:
        if record.id not in self._by_id:
            raise KeyError("access code not found")
        self._by_id[record.id] = record

    async def delete(self, code_id: str) -> bool:
        return self._by_id.pop(code_id, None) is not None
