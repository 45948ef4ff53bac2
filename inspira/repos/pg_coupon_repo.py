"""PostgreSQL implementation of CouponRepo."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from inspira.db.engine import translate_db_errors
from inspira.db.tables import CouponRow
from inspira.models.coupon import Coupon, normalize_code


class PgCouponRepo:
    """Satisfies the CouponRepo Protocol using PostgreSQL.

    Codes are stored upper-cased, so the unique index on ``code`` enforces
    case-insensitive uniqueness.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, coupon_id: str) -> Coupon | None:
        with translate_db_errors("get coupon"):
            row = await self._session.get(CouponRow, coupon_id)
        return None if row is None else _row_to_coupon(row)

    async def get_by_code(self, code: str) -> Coupon | None:
        stmt = select(CouponRow).where(CouponRow.code == normalize_code(code))
        with translate_db_errors("get coupon by code"):
            row = (await self._session.execute(stmt)).scalar_one_or_none()
        return None if row is None else _row_to_coupon(row)

    async def list_all(self) -> list[Coupon]:
        stmt = select(CouponRow).order_by(CouponRow.code)
        with translate_db_errors("list coupons"):
            rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_coupon(r) for r in rows]

    async def add(self, coupon: Coupon) -> None:
        row = CouponRow(
            id=coupon.id,
            code=coupon.code,
            discount_percentage=coupon.discount_percentage,
            expires_at=coupon.expires_at,
            is_active=coupon.is_active,
            course_id=coupon.course_id,
        )
        with translate_db_errors("add coupon"):
            self._session.add(row)
            await self._session.flush()

    async def save(self, coupon: Coupon) -> None:
        with translate_db_errors("save coupon"):
            row = await self._session.get(CouponRow, coupon.id)
            if row is None:
                raise KeyError("coupon not found")
            row.code = coupon.code
            row.discount_percentage = coupon.discount_percentage
            row.expires_at = coupon.expires_at
            row.is_active = coupon.is_active
            row.course_id = coupon.course_id
            await self._session.flush()

    async def delete(self, coupon_id: str) -> bool:
        stmt = delete(CouponRow).where(CouponRow.id == coupon_id)
        with translate_db_errors("delete coupon"):
            result = await self._session.execute(stmt)
        return result.rowcount > 0


def _row_to_coupon(row: CouponRow) -> Coupon:
    return Coupon(
        id=row.id,
        code=row.code,
        discount_percentage=row.discount_percentage,
        expires_at=row.expires_at,
        is_active=row.is_active,
        course_id=row.course_id,
    )
