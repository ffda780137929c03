from __future__ import annotations

from collections import Counter
from enum import Enum
from math import ceil
from typing import Any, Iterable

from solver.seating_generator import SeatKey, SeatingResult, SeatingRoom, SeatingStudent


class SeatingIssueType(str, Enum):
    NO_ROOMS_SELECTED = "NO_ROOMS_SELECTED"
    NO_STUDENTS_SELECTED = "NO_STUDENTS_SELECTED"
    ROOM_CAPACITY_SHORTAGE = "ROOM_CAPACITY_SHORTAGE"
    GRADE_SEPARATION_SHORTAGE = "GRADE_SEPARATION_SHORTAGE"


_OFFSETS: dict[str, tuple[int, int]] = {
    "left": (0, -1),
    "front": (-1, 0),
    "right": (0, 1),
    "back": (1, 0),
}


def _issue(*, itype: SeatingIssueType, explanation: str, **payload: Any) -> dict[str, Any]:
    return {"type": itype.value, **payload, "explanation": explanation}


def analyze_seating_capacity(
    students: Iterable[SeatingStudent],
    rooms: Iterable[SeatingRoom],
) -> dict[str, Any]:
    """Pre-generation capacity check.

    Advisory only: the generator still runs and reports leftovers. The checkerboard
    ceiling is the most students of a single grade a grid can hold with no two of them
    side by side or front to back.
    """

    students = list(students)
    rooms = list(rooms)

    grade_counts = Counter(s.grade for s in students)
    seats_total = sum(r.capacity for r in rooms)
    checkerboard_ceiling = sum(ceil(r.capacity / 2) for r in rooms)

    issues: list[dict[str, Any]] = []
    if not rooms:
        issues.append(
            _issue(
                itype=SeatingIssueType.NO_ROOMS_SELECTED,
                explanation="No rooms were selected; every student will be reported unseated.",
            )
        )
    if not students:
        issues.append(
            _issue(
                itype=SeatingIssueType.NO_STUDENTS_SELECTED,
                explanation="No students match the selected scope.",
            )
        )
    if seats_total < len(students):
        issues.append(
            _issue(
                itype=SeatingIssueType.ROOM_CAPACITY_SHORTAGE,
                required=len(students),
                available=seats_total,
                shortage=len(students) - seats_total,
                explanation=(
                    f"{len(students)} students but only {seats_total} seats in the selected rooms. "
                    "Add rooms or split into another session."
                ),
            )
        )

    if grade_counts:
        grade, largest = grade_counts.most_common(1)[0]
        if rooms and largest > checkerboard_ceiling:
            issues.append(
                _issue(
                    itype=SeatingIssueType.GRADE_SEPARATION_SHORTAGE,
                    grade=grade,
                    required=largest,
                    available=checkerboard_ceiling,
                    shortage=largest - checkerboard_ceiling,
                    explanation=(
                        f"Grade {grade!r} has {largest} students; at most {checkerboard_ceiling} can be "
                        "seated without two of them next to each other."
                    ),
                )
            )

    return {
        "summary": {
            "students": len(students),
            "seats": seats_total,
            "rooms": len(rooms),
            "grades": dict(grade_counts),
            "checkerboard_ceiling": checkerboard_ceiling,
        },
        "issues": issues,
    }


def find_adjacency_violations(
    placements: dict[SeatKey, SeatingStudent],
    directions: Iterable[str] = ("left", "front"),
) -> list[dict[str, Any]]:
    directions = list(directions)
    unknown = [d for d in directions if d not in _OFFSETS]
    if unknown:
        raise ValueError(f"Unknown directions: {unknown}")

    violations: list[dict[str, Any]] = []
    for (room_id, row, column), student in sorted(placements.items(), key=lambda kv: kv[0]):
        for d in directions:
            dr, dc = _OFFSETS[d]
            other = placements.get((room_id, row + dr, column + dc))
            if other is not None and other.grade == student.grade:
                violations.append(
                    {
                        "type": "SAME_GRADE_ADJACENT",
                        "room_id": room_id,
                        "row": row,
                        "column": column,
                        "neighbor": d,
                        "grade": student.grade,
                    }
                )
    return violations


def summarize_seating(result: SeatingResult) -> str:
    message = f"Seating generated for {result.placed_count} students."
    n = len(result.unseated)
    if n > 0:
        noun = "student" if n == 1 else "students"
        message += (
            f" WARNING: {n} {noun} could NOT be seated due to strict separation rules. "
            "Please add more rooms or sessions."
        )
    return message
