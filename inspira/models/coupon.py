from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


def normalize_code(code: str) -> str:
    """Coupon codes are case-insensitive; they are stored upper-cased."""
    return code.strip().upper()


@dataclass(frozen=True, slots=True)
class Coupon:
    id: str
    code: str
    discount_percentage: int  # 1..100
    expires_at: int  # epoch seconds
    is_active: bool = True
    course_id: str | None = None  # None = valid for every course

    def __post_init__(self) -> None:
        if not self.code:
            raise ValueError("coupon code must be non-empty")
        if not 1 <= self.discount_percentage <= 100:
            raise ValueError("discount_percentage must be within 1..100")

    @staticmethod
    def new(
        *,
        code: str,
        discount_percentage: int,
        expires_at: int,
        is_active: bool = True,
        course_id: str | None = None,
    ) -> Coupon:
        return Coupon(
            id=f"coupon-{uuid4().hex[:12]}",
            code=normalize_code(code),
            discount_percentage=discount_percentage,
            expires_at=expires_at,
            is_active=is_active,
            course_id=course_id,
        )
