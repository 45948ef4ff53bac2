from __future__ import annotations

import logging

import pytest

from inspira.models.course import Course, Lesson, Module
from inspira.models.enrollment import Enrollment
from inspira.services.completion import CompletionTrigger, CourseCompleted

_COURSE = Course(
    id="c1",
    title="Course",
    modules=(Module(id="m", title="M", lessons=(Lesson(id="a", title="A"),)),),
)


def _enrollment(*done: str) -> Enrollment:
    return Enrollment(student_id="s1", course_id="c1", completed_lesson_ids=frozenset(done))


def test_no_event_below_100_percent() -> None:
    assert CompletionTrigger().evaluate(_COURSE, _enrollment()) is None


def test_no_event_for_course_without_lessons() -> None:
    empty = Course(id="c1", title="Empty")
    assert CompletionTrigger().evaluate(empty, _enrollment("a")) is None


def test_event_delivered_to_subscribers() -> None:
    trigger = CompletionTrigger()
    seen: list[CourseCompleted] = []
    trigger.subscribe(seen.append)

    event = trigger.evaluate(_COURSE, _enrollment("a"), now=123)
    assert event is not None
    assert seen == [event]
    assert event.occurred_at == 123
    assert event.performance == 0.0


def test_unsubscribed_listener_is_not_called() -> None:
    trigger = CompletionTrigger()
    seen: list[CourseCompleted] = []
    trigger.subscribe(seen.append)
    trigger.unsubscribe(seen.append)
    trigger.evaluate(_COURSE, _enrollment("a"))
    assert seen == []


def test_failing_listener_does_not_stop_the_others(
    caplog: pytest.LogCaptureFixture,
) -> None:
    trigger = CompletionTrigger()
    seen: list[CourseCompleted] = []

    def _broken(_event: CourseCompleted) -> None:
        raise RuntimeError("mailer down")

    trigger.subscribe(_broken)
    trigger.subscribe(seen.append)

    with caplog.at_level(logging.ERROR, logger="inspira.services.completion"):
        event = trigger.evaluate(_COURSE, _enrollment("a"))

    assert event is not None
    assert seen == [event]
    assert "Completion listener" in caplog.text
