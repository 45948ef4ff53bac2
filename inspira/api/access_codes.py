from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from inspira.api.dependencies import AdminDep, RepoDep, http_error
from inspira.models.access_code import AccessCode
from inspira.services import access_code_service
from inspira.services.errors import DomainError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/admin/access-codes", tags=["admin"])


class AccessCodeOut(BaseModel):
    id: str
    code: str
    is_used: bool
    used_by_user_id: str | None
    used_by_name: str | None = None

    @classmethod
    def of(cls, record: AccessCode, used_by_name: str | None = None) -> AccessCodeOut:
        return cls(
            id=record.id,
            code=record.code,
            is_used=record.is_used,
            used_by_user_id=record.used_by_user_id,
            used_by_name=used_by_name,
        )


class AccessCodePatch(BaseModel):
    is_used: bool


@router.get("", response_model=list[AccessCodeOut])
async def admin_list_access_codes(
    principal: AdminDep, repos: RepoDep
) -> list[AccessCodeOut]:
    views = await access_code_service.list_access_codes(repos.access_codes, repos.users)
    return [AccessCodeOut.of(v.code, v.used_by_name) for v in views]


@router.post("", response_model=AccessCodeOut, status_code=status.HTTP_201_CREATED)
async def admin_generate_access_code(
    principal: AdminDep, repos: RepoDep
) -> AccessCodeOut:
    try:
        record = await access_code_service.generate_access_code(repos.access_codes)
    except DomainError as e:
        raise http_error(e) from e
    return AccessCodeOut.of(record)


@router.patch("/{code_id}", response_model=AccessCodeOut)
async def admin_set_access_code_used(
    code_id: str, payload: AccessCodePatch, principal: AdminDep, repos: RepoDep
) -> AccessCodeOut:
    try:
        record = await access_code_service.set_access_code_used(
            repos.access_codes, code_id, is_used=payload.is_used
        )
    except DomainError as e:
        raise http_error(e) from e
    return AccessCodeOut.of(record)


@router.delete("/{code_id}", status_code=status.HTTP_204_NO_CONTENT)
async def admin_delete_access_code(
    code_id: str, principal: AdminDep, repos: RepoDep
) -> Response:
    try:
        await access_code_service.delete_access_code(repos.access_codes, code_id)
    except DomainError as e:
        raise http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
