from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import auth

_QUESTIONS = [
    {"text": "2 + 2?", "options": ["3", "4"], "correct_option_index": 1},
    {"text": "HTML é?", "options": ["marcação", "estilo", "lógica"], "correct_option_index": 0},
]


def _build_course(client: TestClient, headers: dict[str, str]) -> tuple[str, str]:
    course = client.post(
        "/v1/admin/courses",
        json={"title": "Python do Zero", "price": "199.90"},
        headers=headers,
    )
    assert course.status_code == 201
    course_id = course.json()["id"]
    module = client.post(
        f"/v1/admin/courses/{course_id}/modules",
        json={"title": "Fundamentos"},
        headers=headers,
    )
    assert module.status_code == 201
    return course_id, module.json()["id"]


def test_create_course_with_quiz_lesson(client: TestClient, admin_token: str) -> None:
    headers = auth(admin_token)
    course_id, module_id = _build_course(client, headers)

    lesson = client.post(
        f"/v1/admin/courses/{course_id}/modules/{module_id}/lessons",
        json={
            "title": "Revisão",
            "video_url": "https://youtu.be/abc123XYZ00",
            "questions": _QUESTIONS,
        },
        headers=headers,
    )
    assert lesson.status_code == 201
    body = lesson.json()
    assert body["is_graded"] is True
    assert [q["correct_option_index"] for q in body["answer_key"]] == [1, 0]
    assert body["embed_url"] == "https://www.youtube.com/embed/abc123XYZ00"

    public = client.get(f"/v1/courses/{course_id}").json()
    [public_lesson] = public["modules"][0]["lessons"]
    assert "answer_key" not in public_lesson
    assert public["price"] == "199.90"

    admin_view = client.get(f"/v1/admin/courses/{course_id}", headers=headers).json()
    assert admin_view["modules"][0]["lessons"][0]["answer_key"] is not None


def test_invalid_quiz_is_422(client: TestClient, admin_token: str) -> None:
    headers = auth(admin_token)
    course_id, module_id = _build_course(client, headers)
    url = f"/v1/admin/courses/{course_id}/modules/{module_id}/lessons"

    one_option = [{"text": "?", "options": ["a"], "correct_option_index": 0}]
    assert client.post(
        url, json={"title": "X", "questions": one_option}, headers=headers
    ).status_code == 422

    out_of_range = [{"text": "?", "options": ["a", "b"], "correct_option_index": 2}]
    assert client.post(
        url, json={"title": "X", "questions": out_of_range}, headers=headers
    ).status_code == 422

    assert client.post(
        url, json={"title": "X", "questions": []}, headers=headers
    ).status_code == 422


def test_patch_lesson_clears_quiz_and_video(client: TestClient, admin_token: str) -> None:
    headers = auth(admin_token)
    url = "/v1/admin/courses/course-1/modules/mod-1-1/lessons/les-1-1-3"

    resp = client.patch(url, json={"title": "Quiz revisado"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["title"] == "Quiz revisado"
    assert resp.json()["is_graded"] is True

    resp = client.patch(url, json={"questions": None}, headers=headers)
    assert resp.json()["is_graded"] is False
    assert resp.json()["answer_key"] is None

    video_url = "/v1/admin/courses/course-1/modules/mod-1-1/lessons/les-1-1-2"
    resp = client.patch(video_url, json={"video_url": None}, headers=headers)
    assert resp.json()["video_url"] is None
    assert resp.json()["embed_url"] is None


def test_update_course_fields(client: TestClient, admin_token: str) -> None:
    resp = client.patch(
        "/v1/admin/courses/course-3",
        json={"price": "299.90", "description": "Nova descrição"},
        headers=auth(admin_token),
    )
    assert resp.status_code == 200
    assert resp.json()["price"] == "299.90"
    assert resp.json()["description"] == "Nova descrição"
    assert resp.json()["title"] == client.get("/v1/courses/course-3").json()["title"]


def test_negative_price_is_422(client: TestClient, admin_token: str) -> None:
    resp = client.post(
        "/v1/admin/courses",
        json={"title": "Grátis?", "price": "-1"},
        headers=auth(admin_token),
    )
    assert resp.status_code == 422


def test_rename_and_delete_module(client: TestClient, admin_token: str) -> None:
    headers = auth(admin_token)
    renamed = client.patch(
        "/v1/admin/courses/course-1/modules/mod-1-2",
        json={"title": "JavaScript Avançado"},
        headers=headers,
    )
    assert renamed.json() == {"id": "mod-1-2", "title": "JavaScript Avançado"}

    assert client.delete(
        "/v1/admin/courses/course-1/modules/mod-1-2", headers=headers
    ).status_code == 204
    assert client.get("/v1/courses/course-1").json()["total_lessons"] == 3


def test_deleting_lesson_refreshes_cached_progress(
    client: TestClient, admin_token: str, token: str
) -> None:
    client.post("/v1/progress/course-1/lessons/les-1-1-1/toggle", headers=auth(token))
    assert client.get("/v1/progress/course-1", headers=auth(token)).json()["progress"] == 25.0

    resp = client.delete(
        "/v1/admin/courses/course-1/modules/mod-1-2/lessons/les-1-2-1",
        headers=auth(admin_token),
    )
    assert resp.status_code == 204

    progress = client.get("/v1/progress/course-1", headers=auth(token)).json()
    assert progress["total_lessons"] == 3
    assert round(progress["progress"], 2) == 33.33


def test_adding_quiz_to_toggled_lesson_uncompletes_it(
    client: TestClient, admin_token: str, token: str
) -> None:
    toggle = "/v1/progress/course-1/lessons/les-1-2-1/toggle"
    client.post(toggle, headers=auth(token))
    assert client.get("/v1/progress/course-1", headers=auth(token)).json()["progress"] == 25.0

    resp = client.patch(
        "/v1/admin/courses/course-1/modules/mod-1-2/lessons/les-1-2-1",
        json={"questions": _QUESTIONS},
        headers=auth(admin_token),
    )
    assert resp.status_code == 200

    progress = client.get("/v1/progress/course-1", headers=auth(token)).json()
    assert progress["progress"] == 0.0
    assert "les-1-2-1" not in progress["completed_lesson_ids"]
    assert client.post(toggle, headers=auth(token)).status_code == 422


def test_delete_course(client: TestClient, admin_token: str, token: str) -> None:
    headers = auth(admin_token)
    assert client.delete("/v1/admin/courses/course-1", headers=headers).status_code == 204
    assert client.get("/v1/courses/course-1").status_code == 404
    assert client.get("/v1/courses/mine", headers=auth(token)).json() == []
    assert client.delete("/v1/admin/courses/course-1", headers=headers).status_code == 404


def test_unknown_module_is_404(client: TestClient, admin_token: str) -> None:
    resp = client.post(
        "/v1/admin/courses/course-1/modules/mod-404/lessons",
        json={"title": "Perdida"},
        headers=auth(admin_token),
    )
    assert resp.status_code == 404
