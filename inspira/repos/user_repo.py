from __future__ import annotations

from typing import Protocol

from inspira.models.user import User
from inspira.services.errors import ConflictError


class UserRepo(Protocol):
    async def get_by_id(self, user_id: str) -> User | None: ...
    async def get_by_email(self, email: str) -> User | None: ...
    async def list_by_role(self, role: str) -> list[User]: ...
    async def add(self, user: User) -> None: ...
    async def save(self, user: User) -> None: ...
    async def delete(self, user_id: str) -> bool: ...


class InMemoryUserRepo:
    def __init__(self) -> None:
        self._by_email: dict[str, User] = {}
        self._by_id: dict[str, User] = {}

    async def get_by_id(self, user_id: str) -> User | None:
        return self._by_id.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        return self._by_email.get(email.strip().lower())

    async def list_by_role(self, role: str) -> list[User]:
        return [u for u in self._by_id.values() if role in u.roles]

    async def add(self, user: User) -> None:
        if user.email in self._by_email:
            raise ConflictError("email already exists")
        self._by_email[user.email] = user
        self._by_id[user.id] = user

    async def save(self, user: User) -> None:
        previous = self._by_id.get(user.id)
        if previous is None:
            raise KeyError("user not found")
        if previous.email != user.email:
            if user.email in self._by_email:
                raise ConflictError("email already exists")
            del self._by_email[previous.email]
        self._by_id[user.id] = user
        self._by_email[user.email] = user

    async def delete(self, user_id: str) -> bool:
        user = self._by_id.pop(user_id, None)
        if user is None:
            return False
        self._by_email.pop(user.email, None)
        return True
