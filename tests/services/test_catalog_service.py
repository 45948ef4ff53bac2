from __future__ import annotations

import asyncio
import logging
from decimal import Decimal

import pytest

from inspira.models.course import Question, Quiz
from inspira.repos.registry import Repos
from inspira.services import catalog_service, progress_service
from inspira.services.errors import NotFoundError


def test_create_then_build_course_tree(fresh_repos: Repos) -> None:
    repo = fresh_repos.courses

    async def _build():
        course = await catalog_service.create_course(
            repo, title="Python", price=Decimal("99.90")
        )
        first = await catalog_service.add_module(repo, course.id, title="Basics")
        second = await catalog_service.add_module(repo, course.id, title="Advanced")
        a = await catalog_service.add_lesson(repo, course.id, first.id, title="Hello")
        b = await catalog_service.add_lesson(repo, course.id, first.id, title="Loops")
        return await catalog_service.get_course(repo, course.id), first, second, a, b

    course, first, second, a, b = asyncio.run(_build())
    assert [m.id for m in course.modules] == [first.id, second.id]
    assert [les.id for les in course.modules[0].lessons] == [a.id, b.id]
    assert course.lesson_ids() == {a.id, b.id}


def test_update_course_keeps_unset_fields(fresh_repos: Repos) -> None:
    updated = asyncio.run(
        catalog_service.update_course(fresh_repos.courses, "course-1", price=Decimal("10"))
    )
    assert updated.price == Decimal("10")
    assert updated.title == "Desenvolvimento Web Completo 2024"
    assert len(updated.modules) == 2


def test_delete_course_drops_its_enrollments(fresh_repos: Repos) -> None:
    asyncio.run(
        catalog_service.delete_course(fresh_repos.courses, fresh_repos.enrollments, "course-1")
    )
    assert asyncio.run(fresh_repos.courses.get("course-1")) is None
    assert asyncio.run(fresh_repos.enrollments.get("user-2", "course-1")) is None


def test_delete_missing_course_is_not_found(fresh_repos: Repos) -> None:
    with pytest.raises(NotFoundError):
        asyncio.run(
            catalog_service.delete_course(
                fresh_repos.courses, fresh_repos.enrollments, "course-404"
            )
        )


def test_lesson_in_unknown_module_is_not_found(fresh_repos: Repos) -> None:
    with pytest.raises(NotFoundError):
        asyncio.run(
            catalog_service.add_lesson(fresh_repos.courses, "course-1", "mod-404", title="x")
        )


def _update(repos: Repos, module_id: str, lesson_id: str, **changes):
    return asyncio.run(
        catalog_service.update_lesson(
            repos.courses, repos.enrollments, "course-1", module_id, lesson_id, **changes
        )
    )


def test_update_lesson_can_attach_and_clear_quiz(fresh_repos: Repos) -> None:
    quiz = Quiz(questions=(Question.new(text="?", options=("a", "b"), correct_option_index=0),))

    graded = _update(fresh_repos, "mod-1-2", "les-1-2-1", quiz=quiz)
    assert graded.is_graded

    plain = _update(fresh_repos, "mod-1-2", "les-1-2-1", title="Renamed", quiz=None)
    assert not plain.is_graded
    assert plain.title == "Renamed"
    assert plain.content.startswith("<h1>JavaScript")


def test_attaching_quiz_uncompletes_lesson_without_a_pass(fresh_repos: Repos) -> None:
    enrollments = fresh_repos.enrollments
    asyncio.run(
        progress_service.toggle_completion(
            fresh_repos.courses,
            enrollments,
            student_id="user-2",
            course_id="course-1",
            lesson_id="les-1-2-1",
        )
    )
    quiz = Quiz(questions=(Question(id="q1", text="?", options=("a", "b"), correct_option_index=0),))

    _update(fresh_repos, "mod-1-2", "les-1-2-1", quiz=quiz)

    enrollment = asyncio.run(enrollments.get("user-2", "course-1"))
    assert "les-1-2-1" not in enrollment.completed_lesson_ids
    assert not enrollment.has_passed("les-1-2-1")
    snapshot = asyncio.run(
        progress_service.get_progress(
            fresh_repos.courses, enrollments, student_id="user-2", course_id="course-1"
        )
    )
    assert snapshot.progress == 0.0

    # The quiz is now the only way back to complete.
    outcome = asyncio.run(
        progress_service.submit_quiz(
            fresh_repos.courses,
            enrollments,
            student_id="user-2",
            course_id="course-1",
            lesson_id="les-1-2-1",
            answers={"q1": 0},
        )
    )
    assert outcome.passed
    assert "les-1-2-1" in outcome.snapshot.completed_lesson_ids


def test_editing_a_graded_lesson_keeps_completions(fresh_repos: Repos) -> None:
    course = asyncio.run(fresh_repos.courses.get("course-1"))
    quiz = course.find_lesson("les-1-1-3").quiz
    answers = {q.id: q.correct_option_index for q in quiz.questions}
    asyncio.run(
        progress_service.submit_quiz(
            fresh_repos.courses,
            fresh_repos.enrollments,
            student_id="user-2",
            course_id="course-1",
            lesson_id="les-1-1-3",
            answers=answers,
        )
    )

    _update(fresh_repos, "mod-1-1", "les-1-1-3", title="Quiz final")

    enrollment = asyncio.run(fresh_repos.enrollments.get("user-2", "course-1"))
    assert "les-1-1-3" in enrollment.completed_lesson_ids


def test_update_lesson_leaves_video_unless_given(fresh_repos: Repos) -> None:
    kept = _update(fresh_repos, "mod-1-1", "les-1-1-2", title="CSS")
    assert kept.video_url is not None
    cleared = _update(fresh_repos, "mod-1-1", "les-1-1-2", video_url=None)
    assert cleared.video_url is None


def test_delete_module_and_lesson(fresh_repos: Repos) -> None:
    repo = fresh_repos.courses
    asyncio.run(catalog_service.delete_lesson(repo, "course-1", "mod-1-1", "les-1-1-1"))
    asyncio.run(catalog_service.delete_module(repo, "course-1", "mod-1-2"))
    course = asyncio.run(repo.get("course-1"))
    assert [m.id for m in course.modules] == ["mod-1-1"]
    assert "les-1-1-1" not in course.lesson_ids()


def test_rename_module(fresh_repos: Repos) -> None:
    module = asyncio.run(
        catalog_service.rename_module(fresh_repos.courses, "course-2", "mod-2-1", title="Intro")
    )
    assert module.title == "Intro"
    assert len(module.lessons) == 2


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        (
            "https://www.youtube.com/watch?v=O_9u1P5YjVc",
            "https://www.youtube.com/embed/O_9u1P5YjVc",
        ),
        ("https://youtu.be/abc123", "https://www.youtube.com/embed/abc123"),
        ("https://vimeo.com/12345", "https://vimeo.com/12345"),
        ("https://www.youtube.com/embed/xyz", "https://www.youtube.com/embed/xyz"),
    ],
)
def test_video_embed_url(url: str, expected: str) -> None:
    assert catalog_service.video_embed_url(url) == expected


def test_lesson_and_module_edits_are_logged(
    fresh_repos: Repos, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger="inspira.services.catalog_service")
    _update(fresh_repos, "mod-1-1", "les-1-1-2", title="CSS")
    asyncio.run(
        catalog_service.rename_module(
            fresh_repos.courses, "course-1", "mod-1-1", title="HTML"
        )
    )

    messages = [r.getMessage() for r in caplog.records]
    assert any(
        m.startswith("Lesson updated") and "lesson=les-1-1-2" in m and "fields=['title']" in m
        for m in messages
    )
    assert any(m.startswith("Module renamed") for m in messages)
