from __future__ import annotations

from typing import Protocol

from inspira.models.coupon import Coupon, normalize_code
from inspira.services.errors import ConflictError


class CouponRepo(Protocol):
    async def get(self, coupon_id: str) -> Coupon | None: ...
    async def get_by_code(self, code: str) -> Coupon | None: ...
    async def list_all(self) -> list[Coupon]: ...
    async def add(self, coupon: Coupon) -> None: ...
    async def save(self, coupon: Coupon) -> None: ...
    async def delete(self, coupon_id: str) -> bool: ...


class InMemoryCouponRepo:
    def __init__(self) -> None:
        self._by_id: dict[str, Coupon] = {}

    async def get(self, coupon_id: str) -> Coupon | None:
        return self._by_id.get(coupon_id)

    async def get_by_code(self, code: str) -> Coupon | None:
        wanted = normalize_code(code)
        for coupon in self._by_id.values():
            if coupon.code == wanted:
                return coupon
        return None

    async def list_all(self) -> list[Coupon]:
        return list(self._by_id.values())

    async def add(self, coupon: Coupon) -> None:
        if await self.get_by_code(coupon.code) is not None:
            raise ConflictError("coupon code already exists")
        self._by_id[coupon.id] = coupon

    async def save(self, coupon: Coupon) -> None:
        if coupon.id not in self._by_id:
            raise KeyError("coupon not found")
        clash = await self.get_by_code(coupon.code)
        if clash is not None and clash.id != coupon.id:
            raise ConflictError("coupon code already exists")
        self._by_id[coupon.id] = coupon

    async def delete(self, coupon_id: str) -> bool:
        return self._by_id.pop(coupon_id, None) is not None
