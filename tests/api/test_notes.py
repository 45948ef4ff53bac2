from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import OTHER_STUDENT_ID, auth, mint_token


def _folder(client: TestClient, token: str, name: str = "React") -> str:
    resp = client.post("/v1/notes/folders", json={"name": name}, headers=auth(token))
    assert resp.status_code == 201
    return resp.json()["id"]


def test_write_and_read_back_a_note(client: TestClient, token: str) -> None:
    folder_id = _folder(client, token)
    note = client.post(
        f"/v1/notes/folders/{folder_id}/notes",
        json={"title": "useEffect"},
        headers=auth(token),
    )
    assert note.status_code == 201
    note_id = note.json()["id"]

    saved = client.put(
        f"/v1/notes/folders/{folder_id}/notes/{note_id}",
        json={"content": "roda depois do render"},
        headers=auth(token),
    )
    assert saved.status_code == 200
    assert saved.json()["last_saved"] > 0

    [folder] = client.get("/v1/notes/folders", headers=auth(token)).json()
    assert folder["name"] == "React"
    assert folder["notes"] == [saved.json()]


def test_notes_are_private(client: TestClient, token: str) -> None:
    folder_id = _folder(client, token)
    other = auth(mint_token(OTHER_STUDENT_ID))

    assert client.get("/v1/notes/folders", headers=other).json() == []
    resp = client.delete(f"/v1/notes/folders/{folder_id}", headers=other)
    assert resp.status_code == 404
    assert len(client.get("/v1/notes/folders", headers=auth(token)).json()) == 1


def test_blank_folder_name_is_422(client: TestClient, token: str) -> None:
    resp = client.post("/v1/notes/folders", json={"name": " "}, headers=auth(token))
    assert resp.status_code == 422


def test_delete_folder_takes_its_notes(client: TestClient, token: str) -> None:
    folder_id = _folder(client, token)
    client.post(
        f"/v1/notes/folders/{folder_id}/notes", json={"title": "a"}, headers=auth(token)
    )
    resp = client.delete(f"/v1/notes/folders/{folder_id}", headers=auth(token))
    assert resp.status_code == 204
    assert client.get("/v1/notes/folders", headers=auth(token)).json() == []
    missing = client.put(
        f"/v1/notes/folders/{folder_id}/notes/note-x",
        json={"content": ""},
        headers=auth(token),
    )
    assert missing.status_code == 404
