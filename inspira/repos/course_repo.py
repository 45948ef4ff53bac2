from __future__ import annotations

from typing import Protocol

from inspira.models.course import Course


class CourseRepo(Protocol):
    async def get(self, course_id: str) -> Course | None: ...
    async def list_all(self) -> list[Course]: ...
    async def add(self, course: Course) -> None: ...
    async def save(self, course: Course) -> None: ...
    async def delete(self, course_id: str) -> bool: ...


class InMemoryCourseRepo:
    def __init__(self) -> None:
        # dict preserves insertion order = catalog creation order
        self._by_id: dict[str, Course] = {}

    async def get(self, course_id: str) -> Course | None:
        return self._by_id.get(course_id)

    async def list_all(self) -> list[Course]:
        return list(self._by_id.values())

    async def add(self, course: Course) -> None:
        if course.id in self._by_id:
            raise ValueError("course id already exists")
        self._by_id[course.id] = course

    async def save(self, course: Course) -> None:
        if course.id not in self._by_id:
            raise KeyError("course not found")
        self._by_id[course.id] = course

    async def delete(self, course_id: str) -> bool:
        return self._by_id.pop(course_id, None) is not None
