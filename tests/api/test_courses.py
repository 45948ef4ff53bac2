from __future__ import annotations

from urllib.parse import parse_qs, urlparse

from fastapi.testclient import TestClient

from tests.conftest import auth


def test_list_courses_is_public(client: TestClient) -> None:
    resp = client.get("/v1/courses")
    assert resp.status_code == 200
    by_id = {c["id"]: c for c in resp.json()}
    assert set(by_id) == {"course-1", "course-2", "course-3"}
    assert by_id["course-1"]["price"] == "499.90"
    assert by_id["course-1"]["total_lessons"] == 4
    assert by_id["course-3"]["total_lessons"] == 0


def test_course_detail_hides_answer_keys(client: TestClient) -> None:
    resp = client.get("/v1/courses/course-1")
    assert resp.status_code == 200
    lessons = {
        les["id"]: les for m in resp.json()["modules"] for les in m["lessons"]
    }
    quiz = lessons["les-1-1-3"]
    assert quiz["is_graded"] is True
    assert len(quiz["questions"]) == 2
    assert "correct_option_index" not in quiz["questions"][0]
    assert "correct_option_index" not in resp.text


def test_course_detail_embeds_youtube(client: TestClient) -> None:
    lessons = {
        les["id"]: les
        for m in client.get("/v1/courses/course-1").json()["modules"]
        for les in m["lessons"]
    }
    assert lessons["les-1-1-2"]["embed_url"] == "https://www.youtube.com/embed/O_9u1P5YjVc"
    assert lessons["les-1-1-1"]["embed_url"] is None
    assert lessons["les-1-1-1"]["attachments"][0]["name"] == "Código Fonte da Aula.zip"


def test_unknown_course_is_404(client: TestClient) -> None:
    assert client.get("/v1/courses/course-404").status_code == 404


def test_my_courses(client: TestClient, token: str) -> None:
    resp = client.get("/v1/courses/mine", headers=auth(token))
    assert resp.status_code == 200
    mine = resp.json()
    assert [m["course"]["id"] for m in mine] == ["course-1"]
    assert mine[0]["progress"] == 0.0


def test_checkout_without_coupon(client: TestClient) -> None:
    resp = client.get("/v1/courses/course-1/checkout")
    assert resp.status_code == 200
    body = resp.json()
    assert body["final_price"] == "499.90"
    assert body["discount_percentage"] == 0
    assert body["whatsapp_url"].startswith("https://wa.me/")


def test_checkout_with_coupon(client: TestClient) -> None:
    resp = client.get("/v1/courses/course-2/checkout", params={"coupon": "react20"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["discount_percentage"] == 20
    assert body["final_price"] == "479.92"
    text = parse_qs(urlparse(body["whatsapp_url"]).query)["text"][0]
    assert "R$ 479,92" in text


def test_checkout_with_wrong_scope_coupon(client: TestClient) -> None:
    resp = client.get("/v1/courses/course-1/checkout", params={"coupon": "REACT20"})
    assert resp.status_code == 400
    assert resp.json()["detail"]["reason"] == "wrong_scope"
