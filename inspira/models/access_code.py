from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True, slots=True)
class AccessCode:
    """Single-use code that lets a CT partner student self-register."""

    id: str
    code: str  # six digits
    is_used: bool = False
    used_by_user_id: str | None = None

    @staticmethod
    def new(*, code: str) -> AccessCode:
        return AccessCode(id=f"code-{uuid4().hex[:12]}", code=code)
