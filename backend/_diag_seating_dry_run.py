from __future__ import annotations

"""
Seating dry run (no database).

Builds a synthetic roster and room list, runs the seating generator and prints each
room as a grid of grade labels ("." marks a buffer/empty seat), followed by the
capacity analysis and any left/front adjacency violations.

Example:
    python _diag_seating_dry_run.py --rooms 5x6,4x4 --grades "Grade 9:30,Grade 10:22" --seed 7
"""

import argparse
import logging
import sys
from pathlib import Path

# Allow running this script from any working directory.
BACKEND_DIR = Path(__file__).resolve().parents[0]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from solver.seating_diagnostics import analyze_seating_capacity, find_adjacency_violations, summarize_seating
from solver.seating_generator import SeatingRoom, SeatingStudent, generate_seating


def _parse_rooms(value: str) -> list[SeatingRoom]:
    rooms: list[SeatingRoom] = []
    for i, part in enumerate(p.strip() for p in value.split(",") if p.strip()):
        try:
            rows_s, cols_s = part.lower().split("x", 1)
            rows, cols = int(rows_s), int(cols_s)
        except ValueError:
            raise SystemExit(f"Invalid room {part!r}; expected ROWSxCOLUMNS, e.g. 5x6")
        rooms.append(SeatingRoom(id=f"R{i + 1}", rows=rows, columns=cols))
    return rooms


def _parse_grades(value: str) -> list[SeatingStudent]:
    students: list[SeatingStudent] = []
    for part in (p.strip() for p in value.split(",") if p.strip()):
        grade, _, count_s = part.rpartition(":")
        if not grade or not count_s.isdigit():
            raise SystemExit(f"Invalid grade {part!r}; expected NAME:COUNT, e.g. 'Grade 9:30'")
        for n in range(int(count_s)):
            students.append(SeatingStudent(id=f"{grade}#{n + 1}", grade=grade.strip(), name=f"{grade} student {n + 1}"))
    return students


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the seating generator on a synthetic roster.")
    parser.add_argument("--rooms", default="5x5", help="Comma-separated ROWSxCOLUMNS (default: 5x5)")
    parser.add_argument("--grades", default="A:13,B:12", help="Comma-separated NAME:COUNT (default: A:13,B:12)")
    parser.add_argument("--seed", type=int, default=None, help="Shuffle seed (default: random)")
    parser.add_argument("--verbose", action="store_true", help="Log buffer seats and swaps")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(message)s")

    rooms = _parse_rooms(args.rooms)
    students = _parse_grades(args.grades)

    cap = analyze_seating_capacity(students, rooms)
    print({"summary": cap["summary"]})
    for issue in cap["issues"]:
        print(f"[{issue['type']}] {issue['explanation']}")

    result = generate_seating(students, rooms, seed=args.seed)

    labels = {g: chr(ord("A") + i) for i, g in enumerate(result.stats.get("grade_sequence", []))}
    for room in rooms:
        print(f"\nRoom {room.id} ({room.rows}x{room.columns})")
        for row in range(1, room.rows + 1):
            cells = []
            for col in range(1, room.columns + 1):
                s = result.placements.get((room.id, row, col))
                cells.append(labels.get(s.grade, "?") if s is not None else ".")
            print("  " + " ".join(cells))

    print()
    print({"legend": labels, "stats": result.stats})
    print(summarize_seating(result))

    violations = find_adjacency_violations(result.placements)
    if violations:
        print(f"{len(violations)} left/front adjacency violations:")
        for v in violations:
            print(f"  {v['room_id']} R{v['row']}C{v['column']} {v['neighbor']} grade={v['grade']}")


if __name__ == "__main__":
    main()
