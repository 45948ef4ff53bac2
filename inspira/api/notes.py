"""The signed-in learner's notebook.

    GET    /v1/notes/folders
    POST   /v1/notes/folders
    DELETE /v1/notes/folders/{folder_id}
    POST   /v1/notes/folders/{folder_id}/notes
    PUT    /v1/notes/folders/{folder_id}/notes/{note_id}
    DELETE /v1/notes/folders/{folder_id}/notes/{note_id}
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from inspira.api.dependencies import RepoDep, UserDep, http_error
from inspira.models.note import Note, NoteFolder
from inspira.services import notes_service
from inspira.services.errors import DomainError

router = APIRouter(prefix="/v1/notes/folders", tags=["notes"])


class NoteOut(BaseModel):
    id: str
    title: str
    content: str
    last_saved: int

    @classmethod
    def of(cls, note: Note) -> NoteOut:
        return cls(
            id=note.id, title=note.title, content=note.content, last_saved=note.last_saved
        )


class FolderOut(BaseModel):
    id: str
    name: str
    notes: list[NoteOut]

    @classmethod
    def of(cls, folder: NoteFolder) -> FolderOut:
        return cls(
            id=folder.id, name=folder.name, notes=[NoteOut.of(n) for n in folder.notes]
        )


class FolderIn(BaseModel):
    name: str = Field(max_length=255)


class NoteIn(BaseModel):
    title: str = Field(max_length=255)


class NoteBody(BaseModel):
    content: str


@router.get("", response_model=list[FolderOut])
async def list_folders(principal: UserDep, repos: RepoDep) -> list[FolderOut]:
    folders = await notes_service.list_folders(repos.notes, principal.user_id)
    return [FolderOut.of(f) for f in folders]


@router.post("", response_model=FolderOut, status_code=status.HTTP_201_CREATED)
async def create_folder(
    payload: FolderIn, principal: UserDep, repos: RepoDep
) -> FolderOut:
    try:
        folder = await notes_service.create_folder(
            repos.notes, principal.user_id, name=payload.name
        )
    except DomainError as e:
        raise http_error(e) from e
    return FolderOut.of(folder)


@router.delete("/{folder_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_folder(
    folder_id: str, principal: UserDep, repos: RepoDep
) -> Response:
    try:
        await notes_service.delete_folder(repos.notes, principal.user_id, folder_id)
    except DomainError as e:
        raise http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{folder_id}/notes", response_model=NoteOut, status_code=status.HTTP_201_CREATED
)
async def add_note(
    folder_id: str, payload: NoteIn, principal: UserDep, repos: RepoDep
) -> NoteOut:
    try:
        note = await notes_service.add_note(
            repos.notes, principal.user_id, folder_id, title=payload.title
        )
    except DomainError as e:
        raise http_error(e) from e
    return NoteOut.of(note)


@router.put("/{folder_id}/notes/{note_id}", response_model=NoteOut)
async def save_note(
    folder_id: str,
    note_id: str,
    payload: NoteBody,
    principal: UserDep,
    repos: RepoDep,
) -> NoteOut:
    try:
        note = await notes_service.save_note(
            repos.notes, principal.user_id, folder_id, note_id, content=payload.content
        )
    except DomainError as e:
        raise http_error(e) from e
    return NoteOut.of(note)


@router.delete(
    "/{folder_id}/notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_note(
    folder_id: str, note_id: str, principal: UserDep, repos: RepoDep
) -> Response:
    try:
        await notes_service.delete_note(repos.notes, principal.user_id, folder_id, note_id)
    except DomainError as e:
        raise http_error(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
