#!/usr/bin/env python3
"""Load test script: concurrent lesson toggles against one enrollment.

RUN:  python scripts/load_test_toggles.py

Fires TOTAL_REQUESTS toggles of the same lesson at once and prints how
many were applied (200) and how many gave up after the optimistic-write
retries (409).  An even number of applied toggles leaves the lesson in
its starting state; an odd number flips it.

Prerequisites:
  - The API must be running: uvicorn inspira.main:app --port 8000
  - The sample catalog is loaded (default when DATABASE_URL is unset)
"""

from __future__ import annotations

import asyncio
import sys
import time

import httpx

BASE_URL = "http://localhost:8000"
TOTAL_REQUESTS = 50
COURSE_ID = "course-1"
LESSON_ID = "les-1-1-1"


async def main() -> None:
    print("Concurrent Toggle Load Test")
    print("=" * 50)
    print(f"Target: {BASE_URL}/v1/progress/{COURSE_ID}/lessons/{LESSON_ID}/toggle")
    print(f"Total requests: {TOTAL_REQUESTS}")
    print()

    async with httpx.AsyncClient(base_url=BASE_URL, timeout=10) as client:
        resp = await client.post(
            "/v1/auth/login",
            json={"email": "aluno@inspira.com", "password": "aluno123"},
        )
        if resp.status_code != 200:
            print(f"Login failed: {resp.status_code}")
            sys.exit(1)
        headers = {"Authorization": f"Bearer {resp.json()['accessToken']}"}

        before = (await client.get(f"/v1/progress/{COURSE_ID}", headers=headers)).json()
        was_done = LESSON_ID in before["completed_lesson_ids"]

        start = time.monotonic()
        responses = await asyncio.gather(
            *(
                client.post(
                    f"/v1/progress/{COURSE_ID}/lessons/{LESSON_ID}/toggle",
                    headers=headers,
                )
                for _ in range(TOTAL_REQUESTS)
            )
        )
        elapsed = time.monotonic() - start

        results: dict[int, int] = {}
        for r in responses:
            results[r.status_code] = results.get(r.status_code, 0) + 1

        after = (await client.get(f"/v1/progress/{COURSE_ID}", headers=headers)).json()
        is_done = LESSON_ID in after["completed_lesson_ids"]

    applied = results.get(200, 0)
    print(f"Results after {TOTAL_REQUESTS} requests ({elapsed:.2f}s):")
    print("─" * 40)
    print(f"  Applied  (200): {applied:>4}")
    print(f"  Conflict (409): {results.get(409, 0):>4}")
    other = sum(v for k, v in results.items() if k not in (200, 409))
    if other:
        print(f"  Other:          {other:>4}")
    print()

    expected = was_done if applied % 2 == 0 else not was_done
    if is_done == expected:
        print("Final state matches the number of applied toggles.")
    else:
        print("WARNING: final state does not match the applied toggles (lost update).")


if __name__ == "__main__":
    asyncio.run(main())
