from __future__ import annotations

from dataclasses import dataclass

from inspira.models.course import new_id


@dataclass(frozen=True, slots=True)
class Note:
    id: str
    title: str
    content: str = ""
    last_saved: int = 0

    @staticmethod
    def new(*, title: str, now: int) -> Note:
        return Note(id=new_id("note"), title=title, last_saved=now)


@dataclass(frozen=True, slots=True)
class NoteFolder:
    """A learner's private folder; notes keep creation order."""

    id: str
    owner_id: str
    name: str
    notes: tuple[Note, ...] = ()

    @staticmethod
    def new(*, owner_id: str, name: str) -> NoteFolder:
        return NoteFolder(id=new_id("folder"), owner_id=owner_id, name=name)

    def find_note(self, note_id: str) -> Note | None:
        return next((n for n in self.notes if n.id == note_id), None)
