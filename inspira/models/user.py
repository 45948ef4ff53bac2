from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

ROLE_STUDENT = "student"
ROLE_ADMIN = "admin"


@dataclass(frozen=True, slots=True)
class User:
    id: str
    email: str
    password_hash: str
    name: str = ""
    roles: tuple[str, ...] = (ROLE_STUDENT,)
    phone: str | None = None
    is_ct_student: bool = False
    is_active: bool = True

    @property
    def is_admin(self) -> bool:
        return ROLE_ADMIN in self.roles

    @staticmethod
    def new(
        *,
        email: str,
        password_hash: str,
        name: str = "",
        roles: tuple[str, ...] = (ROLE_STUDENT,),
        phone: str | None = None,
        is_ct_student: bool = False,
    ) -> User:
        return User(
            id=f"user-{uuid4().hex[:12]}",
            email=email.strip().lower(),
            password_hash=password_hash,
            name=name,
            roles=roles,
            phone=phone,
            is_ct_student=is_ct_student,
        )
