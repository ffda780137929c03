from __future__ import annotations

import os
import uuid
from typing import Any

from fastapi.testclient import TestClient

from main import app


def _count_json(value: Any) -> int:
    if isinstance(value, list):
        return len(value)
    if isinstance(value, dict):
        # common shape: { seats: [...] } / { runs: [...] }
        for key in ("seats", "runs", "issues"):
            if key in value and isinstance(value[key], list):
                return len(value[key])
        return len(value)
    return 1


def _check(resp, label: str) -> Any:
    try:
        payload = resp.json()
    except Exception:
        payload = resp.text
    if resp.status_code >= 400:
        raise SystemExit(f"FAIL {label}: {resp.status_code} {payload}")
    return payload


def main() -> None:
    """Exercise the seating API end to end against the configured DATABASE_URL.

    Everything is written under a throwaway school id (SMOKE_SCHOOL_ID, default: a fresh
    "smoke-<hex>") and the session is deleted afterwards. Rooms and students are left behind.
    """

    client = TestClient(app)
    school_id = os.environ.get("SMOKE_SCHOOL_ID") or f"smoke-{uuid.uuid4().hex[:8]}"
    headers = {"X-School-Id": school_id}
    major = "Smoke"

    print(f"OK /health: {_check(client.get('/health'), '/health')}")

    room = _check(
        client.post("/api/exam-rooms/", json={"name": "Smoke Hall", "rows": 4, "columns": 5}, headers=headers),
        "create room",
    )
    for grade, count in (("Grade 9", 10), ("Grade 10", 8), ("Grade 11", 4)):
        for n in range(count):
            _check(
                client.post(
                    "/api/students/",
                    json={"name": f"{grade} #{n + 1}", "grade": grade, "section": "A", "major": major},
                    headers=headers,
                ),
                "create student",
            )
    session = _check(
        client.post(
            "/api/exam-sessions/",
            json={"name": "Smoke exam", "date": "2030-01-01", "major": major},
            headers=headers,
        ),
        "create session",
    )

    scope = {"room_ids": [room["id"]], "major": major}
    analysis = _check(client.post("/api/seating/analyze", json=scope, headers=headers), "analyze")
    print(f"OK /api/seating/analyze: issues={_count_json(analysis)} summary={analysis.get('summary')}")

    gen = _check(
        client.post("/api/seating/generate", json={**scope, "session_id": session["id"], "seed": 1}, headers=headers),
        "generate",
    )
    print(
        f"OK /api/seating/generate: status={gen.get('status')} placed={gen.get('placed_count')} "
        f"unseated={gen.get('unseated_count')} run_id={gen.get('run_id')}"
    )
    print(f"   {gen.get('message')}")

    for path in (f"/api/seating/sessions/{session['id']}", "/api/seating/runs"):
        payload = _check(client.get(path, headers=headers), path)
        print(f"OK {path}: count={_count_json(payload)}")

    cleared = _check(client.delete(f"/api/exam-sessions/{session['id']}", headers=headers), "delete session")
    print(f"OK cleanup: seats_cleared={cleared.get('seats_cleared')} school_id={school_id}")


if __name__ == "__main__":
    main()
