"""Course completion trigger.

After every mutation of an enrollment (a lesson toggle or a graded quiz),
the progress service hands the fresh state to ``CompletionTrigger.evaluate``.
When the course has lessons and every one of them is complete, a
``CourseCompleted`` event is built and delivered to the subscribers.

The check is level-triggered and nothing is persisted about past events:
a learner who un-completes a lesson and completes it again gets a second
event.  Subscribers that need "only once" semantics must dedupe on
(student_id, course_id) themselves.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable
from dataclasses import dataclass

from inspira.core.metrics import COURSE_COMPLETIONS
from inspira.models.course import Course
from inspira.models.enrollment import Enrollment
from inspira.services.grading import compute_performance, is_course_complete

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CourseCompleted:
    student_id: str
    course_id: str
    course_title: str
    performance: float
    occurred_at: int


CompletionListener = Callable[[CourseCompleted], None]


class CompletionTrigger:
    def __init__(self) -> None:
        self._listeners: list[CompletionListener] = []

    def subscribe(self, listener: CompletionListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: CompletionListener) -> None:
        self._listeners.remove(listener)

    def evaluate(
        self, course: Course, enrollment: Enrollment, *, now: int | None = None
    ) -> CourseCompleted | None:
        if not is_course_complete(course, enrollment.completed_lesson_ids):
            return None

        event = CourseCompleted(
            student_id=enrollment.student_id,
            course_id=course.id,
            course_title=course.title,
            performance=compute_performance(enrollment.quiz_attempts),
            occurred_at=(
                now
                if now is not None
                else int(datetime.datetime.now(datetime.UTC).timestamp())
            ),
        )
        COURSE_COMPLETIONS.inc()
        logger.info(
            "Course completed  student=%s course=%s performance=%.1f",
            event.student_id,
            event.course_id,
            event.performance,
            extra={"student_id": event.student_id, "course_id": event.course_id},
        )

        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # Listener failures are logged, never propagated.
                logger.exception("Completion listener %r failed", listener)
        return event


completion_trigger = CompletionTrigger()
