"""Coupon validation and administration.

Validation checks run in a fixed order and stop at the first failure:

    not found -> inactive -> expired -> wrong course

so an inactive coupon reports "inactive" even when it has also expired.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal

from inspira.core.metrics import COUPON_VALIDATIONS
from inspira.models.coupon import Coupon, normalize_code
from inspira.repos.coupon_repo import CouponRepo
from inspira.services.errors import (
    CouponError,
    CouponExpiredError,
    CouponInactiveError,
    CouponNotFoundError,
    CouponWrongScopeError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


def _now() -> int:
    return int(datetime.datetime.now(datetime.UTC).timestamp())


def check_coupon(coupon: Coupon | None, course_id: str, *, now: int) -> int:
    """Apply the validation rules to an already-looked-up coupon."""
    if coupon is None:
        raise CouponNotFoundError("coupon not found")
    if not coupon.is_active:
        raise CouponInactiveError("coupon is no longer active")
    if now >= coupon.expires_at:
        raise CouponExpiredError("coupon has expired")
    if coupon.course_id is not None and coupon.course_id != course_id:
        raise CouponWrongScopeError("coupon is not valid for this course")
    return coupon.discount_percentage


async def validate_coupon(
    repo: CouponRepo, code: str, course_id: str, *, now: int | None = None
) -> int:
    """Return the discount percentage for ``code`` on ``course_id``.

    Raises a CouponError subclass describing the first rule that failed.
    """
    coupon = await repo.get_by_code(code)
    try:
        discount = check_coupon(
            coupon, course_id, now=now if now is not None else _now()
        )
    except CouponError as e:
        COUPON_VALIDATIONS.labels(outcome=e.reason).inc()
        logger.warning(
            "Coupon rejected  code=%s course=%s reason=%s",
            normalize_code(code),
            course_id,
            e.reason,
            extra={"course_id": course_id},
        )
        raise
    COUPON_VALIDATIONS.labels(outcome="valid").inc()
    return discount


def final_price(price: Decimal, discount_percentage: int) -> Decimal:
    """``price * (1 - pct/100)`` rounded to cents."""
    discounted = price * (Decimal(100) - Decimal(discount_percentage)) / Decimal(100)
    return discounted.quantize(_CENTS, rounding=ROUND_HALF_UP)


# --- Administration ---


async def list_coupons(repo: CouponRepo) -> list[Coupon]:
    return await repo.list_all()


async def create_coupon(
    repo: CouponRepo,
    *,
    code: str,
    discount_percentage: int,
    expires_at: int,
    is_active: bool = True,
    course_id: str | None = None,
) -> Coupon:
    coupon = Coupon.new(
        code=code,
        discount_percentage=discount_percentage,
        expires_at=expires_at,
        is_active=is_active,
        course_id=course_id,
    )
    await repo.add(coupon)
    logger.info("Coupon created  id=%s code=%s", coupon.id, coupon.code)
    return coupon


_UNSET = object()


async def update_coupon(
    repo: CouponRepo,
    coupon_id: str,
    *,
    code: str | None = None,
    discount_percentage: int | None = None,
    expires_at: int | None = None,
    is_active: bool | None = None,
    course_id: str | None | object = _UNSET,
) -> Coupon:
    """Patch a coupon.  ``course_id=None`` widens it to every course."""
    coupon = await repo.get(coupon_id)
    if coupon is None:
        raise NotFoundError(f"coupon {coupon_id!r} not found")

    changes: dict[str, object] = {}
    if code is not None:
        changes["code"] = normalize_code(code)
    if discount_percentage is not None:
        changes["discount_percentage"] = discount_percentage
    if expires_at is not None:
        changes["expires_at"] = expires_at
    if is_active is not None:
        changes["is_active"] = is_active
    if course_id is not _UNSET:
        changes["course_id"] = course_id

    updated = replace(coupon, **changes)
    await repo.save(updated)
    logger.info("Coupon updated  id=%s fields=%s", coupon_id, sorted(changes))
    return updated


async def delete_coupon(repo: CouponRepo, coupon_id: str) -> None:
    if not await repo.delete(coupon_id):
        raise NotFoundError(f"coupon {coupon_id!r} not found")
    logger.info("Coupon deleted  id=%s", coupon_id)
