from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from decimal import Decimal
from uuid import uuid4


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:12]}"


@dataclass(frozen=True, slots=True)
class Question:
    id: str
    text: str
    options: tuple[str, ...]
    correct_option_index: int

    def __post_init__(self) -> None:
        if len(self.options) < 2:
            raise ValueError("a question needs at least two options")
        if not 0 <= self.correct_option_index < len(self.options):
            raise ValueError("correct_option_index is out of range")

    @staticmethod
    def new(*, text: str, options: tuple[str, ...], correct_option_index: int) -> Question:
        return Question(
            id=new_id("q"),
            text=text,
            options=options,
            correct_option_index=correct_option_index,
        )


@dataclass(frozen=True, slots=True)
class Quiz:
    questions: tuple[Question, ...]

    def __post_init__(self) -> None:
        if not self.questions:
            raise ValueError("a quiz needs at least one question")
        ids = [q.id for q in self.questions]
        if len(set(ids)) != len(ids):
            raise ValueError("question ids must be unique within a quiz")

    def answer_key(self) -> dict[str, int]:
        return {q.id: q.correct_option_index for q in self.questions}


@dataclass(frozen=True, slots=True)
class Attachment:
    name: str
    url: str


@dataclass(frozen=True, slots=True)
class Lesson:
    id: str
    title: str
    content: str = ""
    video_url: str | None = None
    attachments: tuple[Attachment, ...] = ()
    quiz: Quiz | None = None

    @property
    def is_graded(self) -> bool:
        """Graded lessons complete only through a passing quiz attempt."""
        return self.quiz is not None

    @staticmethod
    def new(
        *,
        title: str,
        content: str = "",
        video_url: str | None = None,
        attachments: tuple[Attachment, ...] = (),
        quiz: Quiz | None = None,
    ) -> Lesson:
        return Lesson(
            id=new_id("les"),
            title=title,
            content=content,
            video_url=video_url,
            attachments=attachments,
            quiz=quiz,
        )


@dataclass(frozen=True, slots=True)
class Module:
    id: str
    title: str
    lessons: tuple[Lesson, ...] = ()  # creation order

    @staticmethod
    def new(*, title: str) -> Module:
        return Module(id=new_id("mod"), title=title)


@dataclass(frozen=True, slots=True)
class Course:
    id: str
    title: str
    description: str = ""
    price: Decimal = Decimal("0")
    image_url: str = ""
    modules: tuple[Module, ...] = ()  # creation order

    def __post_init__(self) -> None:
        if self.price < 0:
            raise ValueError("price must be non-negative")

    @staticmethod
    def new(
        *,
        title: str,
        description: str = "",
        price: Decimal = Decimal("0"),
        image_url: str = "",
    ) -> Course:
        return Course(
            id=new_id("course"),
            title=title,
            description=description,
            price=price,
            image_url=image_url,
        )

    def iter_lessons(self) -> Iterator[Lesson]:
        for module in self.modules:
            yield from module.lessons

    def lesson_ids(self) -> frozenset[str]:
        return frozenset(lesson.id for lesson in self.iter_lessons())

    def find_lesson(self, lesson_id: str) -> Lesson | None:
        for lesson in self.iter_lessons():
            if lesson.id == lesson_id:
                return lesson
        return None

    def find_module(self, module_id: str) -> Module | None:
        for module in self.modules:
            if module.id == module_id:
                return module
        return None
