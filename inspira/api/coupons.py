from __future__ import annotations

import logging
from decimal import Decimal

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from inspira.api.dependencies import AdminDep, RepoDep, http_error
from inspira.models.coupon import Coupon, normalize_code
from inspira.services import catalog_service, coupon_service
from inspira.services.errors import DomainError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["coupons"])


class ValidateIn(BaseModel):
    code: str
    course_id: str


class ValidateOut(BaseModel):
    code: str
    course_id: str
    discount_percentage: int
    price: Decimal
    final_price: Decimal


class CouponIn(BaseModel):
    code: str = Field(min_length=1)
    discount_percentage: int = Field(ge=1, le=100)
    expires_at: int
    is_active: bool = True
    course_id: str | None = None


class CouponPatch(BaseModel):
    code: str | None = Field(default=None, min_length=1)
    discount_percentage: int | None = Field(default=None, ge=1, le=100)
    expires_at: int | None = None
    is_active: bool | None = None
    course_id: str | None = None


class CouponOut(BaseModel):
    id: str
    code: str
    discount_percentage: int
    expires_at: int
    is_active: bool
    course_id: str | None

    @classmethod
    def of(cls, coupon: Coupon) -> CouponOut:
        return cls(
            id=coupon.id,
            code=coupon.code,
            discount_percentage=coupon.discount_percentage,
            expires_at=coupon.expires_at,
            is_active=coupon.is_active,
            course_id=coupon.course_id,
        )


# --- POST /v1/coupons/validate --------------------------------------------


@router.post("/v1/coupons/validate", response_model=ValidateOut)
async def validate_coupon(payload: ValidateIn, repos: RepoDep) -> ValidateOut:
    """Check a code against a course and return the discounted price.

    Rejections answer 400 with ``detail.reason`` set to one of
    inactive / expired / wrong_scope, or 404 for an unknown code.
    """
    try:
        course = await catalog_service.get_course(repos.courses, payload.course_id)
        discount = await coupon_service.validate_coupon(
            repos.coupons, payload.code, course.id
        )
    except DomainError as e:
        raise http_error(e) from e
    return ValidateOut(
        code=normalize_code(payload.code),
        course_id=course.id,
        discount_percentage=discount,
        price=course.price,
        final_price=coupon_service.final_price(course.price, discount),
    )


# --- Admin ------------------------------------------------------------------


@router.get("/v1/admin/coupons", response_model=list[CouponOut])
async def admin_list_coupons(principal: AdminDep, repos: RepoDep) -> list[CouponOut]:
    return [CouponOut.of(c) for c in await coupon_service.list_coupons(repos.coupons)]


@router.post(
    "/v1/admin/coupons",
    response_model=CouponOut,
    status_code=status.HTTP_201_CREATED,
)
async def admin_create_coupon(
    payload: CouponIn, principal: AdminDep, repos: RepoDep
) -> CouponOut:
    try:
        coupon = await coupon_service.create_coupon(
            repos.coupons,
            code=payload.code,
            discount_percentage=payload.discount_percentage,
            expires_at=payload.expires_at,
            is_active=payload.is_active,
            course_id=payload.course_id,
        )
    except DomainError as e:
        raise http_error(e) from e
    return CouponOut.of(coupon)


@router.patch("/v1/admin/coupons/{coupon_id}", response_model=CouponOut)
async def admin_update_coupon(
    coupon_id: str, payload: CouponPatch, principal: AdminDep, repos: RepoDep
) -> CouponOut:
    changes: dict[str, object] = {
        "code": payload.code,
        "discount_percentage": payload.discount_percentage,
        "expires_at": payload.expires_at,
        "is_active": payload.is_active,
    }
    # An explicit null widens the coupon to every course.
    if "course_id" in payload.model_fields_set:
        changes["course_id"] = payload.course_id
    try:
        coupon = await coupon_service.update_coupon(repos.coupons, coupon_id, **changes)
    except DomainError as e:
        raise http_error(e) from e
    return CouponOut.of(coupon)


@router.delete(
    "/v1/admin/coupons/{coupon_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def admin_delete_coupon(
    coupon_id: str, principal: AdminDep, repos: RepoDep
) -> Response:
    try:
        await coupon_service.delete_coupon(repos.coupons, coupon_id)
    except DomainError as e:
        raise http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
