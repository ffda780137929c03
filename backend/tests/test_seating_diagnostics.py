from __future__ import annotations

import pytest

from solver.seating_diagnostics import (
    analyze_seating_capacity,
    find_adjacency_violations,
    summarize_seating,
)
from solver.seating_generator import SeatingResult, SeatingRoom, SeatingStudent


def _students(grade: str, n: int) -> list[SeatingStudent]:
    return [SeatingStudent(f"{grade}{i}", grade) for i in range(n)]


def _types(cap: dict) -> set[str]:
    return {i["type"] for i in cap["issues"]}


def test_capacity_shortage_is_reported():
    cap = analyze_seating_capacity(_students("A", 2) + _students("B", 1), [SeatingRoom("R1", 1, 1)])

    assert cap["summary"]["seats"] == 1
    assert cap["summary"]["students"] == 3
    shortage = next(i for i in cap["issues"] if i["type"] == "ROOM_CAPACITY_SHORTAGE")
    assert shortage["shortage"] == 2


def test_single_dominant_grade_exceeds_checkerboard():
    cap = analyze_seating_capacity(_students("A", 4), [SeatingRoom("R1", 2, 2)])

    assert cap["summary"]["checkerboard_ceiling"] == 2
    assert _types(cap) == {"GRADE_SEPARATION_SHORTAGE"}
    issue = cap["issues"][0]
    assert issue["grade"] == "A"
    assert issue["shortage"] == 2


def test_balanced_roster_has_no_issues():
    cap = analyze_seating_capacity(
        _students("A", 3) + _students("B", 2),
        [SeatingRoom("R1", 2, 2), SeatingRoom("R2", 1, 1)],
    )

    assert cap["issues"] == []
    assert cap["summary"]["grades"] == {"A": 3, "B": 2}
    assert cap["summary"]["checkerboard_ceiling"] == 3


def test_empty_inputs_are_flagged():
    assert _types(analyze_seating_capacity(_students("A", 1), [])) == {
        "NO_ROOMS_SELECTED",
        "ROOM_CAPACITY_SHORTAGE",
    }
    assert _types(analyze_seating_capacity([], [SeatingRoom("R1", 2, 2)])) == {"NO_STUDENTS_SELECTED"}


def test_adjacency_violations_by_direction():
    a1, a2, b1 = SeatingStudent("a1", "A"), SeatingStudent("a2", "A"), SeatingStudent("b1", "B")
    placements = {
        ("R1", 1, 1): a1,
        ("R1", 1, 2): a2,
        ("R1", 2, 1): b1,
        ("R2", 1, 1): a2,
    }

    left_front = find_adjacency_violations(placements)
    assert left_front == [
        {"type": "SAME_GRADE_ADJACENT", "room_id": "R1", "row": 1, "column": 2, "neighbor": "left", "grade": "A"}
    ]
    assert len(find_adjacency_violations(placements, ("left", "right"))) == 2


def test_unknown_direction_is_rejected():
    with pytest.raises(ValueError):
        find_adjacency_violations({}, ("diagonal",))


def test_summary_message_mentions_unseated_students():
    seated = SeatingStudent("a", "A")
    done = SeatingResult(placements={("R1", 1, 1): seated}, unseated=[])
    partial = SeatingResult(placements={("R1", 1, 1): seated}, unseated=_students("B", 2))

    assert summarize_seating(done) == "Seating generated for 1 students."
    message = summarize_seating(partial)
    assert message.startswith("Seating generated for 1 students.")
    assert "2 students could NOT be seated" in message
    assert "add more rooms or sessions" in message
