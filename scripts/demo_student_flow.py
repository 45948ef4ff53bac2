"""Demo: a learner works through the sample web-development course.

Run with:
    python scripts/demo_student_flow.py

Uses FastAPI TestClient against the in-memory repositories, so no
database or Redis is needed.  ``with TestClient(app)`` runs the app
lifespan, which loads the sample catalog.
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from inspira.main import app
from inspira.repos.seed import STUDENT_EMAIL, STUDENT_PASSWORD

COURSE_ID = "course-1"
QUIZ_LESSON_ID = "les-1-1-3"


def main() -> None:
    with TestClient(app) as client:
        # ── Step 1: log in ──────────────────────────────────────────────
        r = client.post(
            "/v1/auth/login",
            json={"email": STUDENT_EMAIL, "password": STUDENT_PASSWORD},
        )
        print(f"1. POST /v1/auth/login          → {r.status_code}")
        headers = {"Authorization": f"Bearer {r.json()['accessToken']}"}

        # ── Step 2: open the course ─────────────────────────────────────
        r = client.get(f"/v1/courses/{COURSE_ID}")
        course = r.json()
        lessons = [les for m in course["modules"] for les in m["lessons"]]
        print(f"2. GET  /v1/courses/{COURSE_ID}     → {len(lessons)} lessons")

        # ── Step 3: complete every plain lesson ─────────────────────────
        for lesson in lessons:
            if lesson["is_graded"]:
                continue
            r = client.post(
                f"/v1/progress/{COURSE_ID}/lessons/{lesson['id']}/toggle",
                headers=headers,
            )
            print(
                f"3. toggle {lesson['id']:<10}          → "
                f"progress={r.json()['progress']:.0f}%"
            )

        # ── Step 4: fail the quiz once, then pass it ────────────────────
        quiz = next(les for les in lessons if les["id"] == QUIZ_LESSON_ID)
        wrong = {q["id"]: 0 for q in quiz["questions"]}
        r = client.post(
            f"/v1/progress/{COURSE_ID}/lessons/{QUIZ_LESSON_ID}/quiz",
            json={"answers": wrong},
            headers=headers,
        )
        print(f"4. quiz (guessing)              → score={r.json()['score']:.0f}")

        key = r.json()["correct_answers"]
        r = client.post(
            f"/v1/progress/{COURSE_ID}/lessons/{QUIZ_LESSON_ID}/quiz",
            json={"answers": key},
            headers=headers,
        )
        body = r.json()
        print(f"5. quiz (correct)               → score={body['score']:.0f}")

        completion = body["progress"]["completion"]
        assert completion is not None, "course should be complete"
        print(f"6. course complete, performance → {completion['performance']:.0f}")
        print(f"   certificate link             → {completion['certificate_url']}")

        # ── Step 7: price another course with a coupon ──────────────────
        r = client.get("/v1/courses/course-2/checkout", params={"coupon": "react20"})
        print(f"7. checkout course-2 (REACT20)  → R$ {r.json()['final_price']}")


if __name__ == "__main__":
    main()
