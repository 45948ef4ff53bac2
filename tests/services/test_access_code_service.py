from __future__ import annotations

import asyncio

import pytest

from inspira.repos.registry import Repos
from inspira.services import access_code_service
from inspira.services.errors import ConflictError, NotFoundError


def test_generated_code_is_six_digits(fresh_repos: Repos) -> None:
    record = asyncio.run(access_code_service.generate_access_code(fresh_repos.access_codes))
    assert len(record.code) == 6
    assert record.code.isdigit()
    assert not record.is_used


def test_generation_skips_existing_codes(fresh_repos: Repos) -> None:
    draws = iter(["123456", "654321", "777777"])
    record = asyncio.run(
        access_code_service.generate_access_code(
            fresh_repos.access_codes, draw=lambda: next(draws)
        )
    )
    assert record.code == "777777"


def test_generation_gives_up_when_every_draw_collides(fresh_repos: Repos) -> None:
    with pytest.raises(ConflictError):
        asyncio.run(
            access_code_service.generate_access_code(
                fresh_repos.access_codes, draw=lambda: "123456"
            )
        )


def test_list_includes_redeeming_user_name(fresh_repos: Repos) -> None:
    views = asyncio.run(
        access_code_service.list_access_codes(fresh_repos.access_codes, fresh_repos.users)
    )
    by_code = {v.code.code: v for v in views}
    assert by_code["654321"].used_by_name == "Maria Silva"
    assert by_code["123456"].used_by_name is None


def test_reset_clears_redeeming_user(fresh_repos: Repos) -> None:
    record = asyncio.run(
        access_code_service.set_access_code_used(
            fresh_repos.access_codes, "code-2", is_used=False
        )
    )
    assert not record.is_used
    assert record.used_by_user_id is None


def test_delete_unknown_code_is_not_found(fresh_repos: Repos) -> None:
    with pytest.raises(NotFoundError):
        asyncio.run(access_code_service.delete_access_code(fresh_repos.access_codes, "nope"))
