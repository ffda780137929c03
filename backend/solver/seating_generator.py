from __future__ import annotations

import logging
import random
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Iterable, NamedTuple


logger = logging.getLogger(__name__)


SeatKey = tuple[str, int, int]


class SeatingInputError(ValueError):
    """Raised when generation inputs violate a precondition (not an expected edge case)."""

    def __init__(self, code: str, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}


@dataclass(frozen=True)
class SeatingRoom:
    id: str
    rows: int
    columns: int

    @property
    def capacity(self) -> int:
        return max(self.rows, 0) * max(self.columns, 0)


@dataclass(frozen=True)
class SeatingStudent:
    id: str
    grade: str
    name: str = ""
    section: str = ""
    major: str = ""
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class Seat:
    room_id: str
    row: int
    column: int

    @property
    def key(self) -> SeatKey:
        return (self.room_id, self.row, self.column)


class Neighbors(NamedTuple):
    left: SeatingStudent | None
    front: SeatingStudent | None
    right: SeatingStudent | None
    back: SeatingStudent | None


class SeatingResult:
    def __init__(
        self,
        *,
        placements: dict[SeatKey, SeatingStudent],
        unseated: list[SeatingStudent],
        seat_order: list[Seat] | None = None,
        stats: dict[str, Any] | None = None,
    ):
        self.placements = placements
        self.unseated = unseated
        self.seat_order = seat_order or []
        self.stats = stats or {}

    @property
    def placed_count(self) -> int:
        return len(self.placements)

    @property
    def unseated_student_ids(self) -> list[str]:
        return [s.id for s in self.unseated]

    def placement_rows(self) -> list[dict[str, Any]]:
        """Flatten placements into one record per occupied seat, in seat-pool order."""

        rows: list[dict[str, Any]] = []
        for seat in self.seat_order:
            student = self.placements.get(seat.key)
            if student is None:
                continue
            rows.append(
                {
                    **student.extra,
                    "room_id": seat.room_id,
                    "row": seat.row,
                    "column": seat.column,
                    "student_id": student.id,
                    "student_name": student.name,
                    "student_grade": student.grade,
                    "student_section": student.section,
                    "student_major": student.major,
                }
            )
        return rows


class GradeQueues:
    """Per-grade queues of not-yet-seated students plus the flattened remaining pool.

    The pool is the authoritative "anyone left" check; `remove()` keeps both views in sync.
    """

    def __init__(self, grade_sequence: list[str], queues: dict[str, list[SeatingStudent]]):
        self.grade_sequence = grade_sequence
        self.queues = queues
        self.pool: list[SeatingStudent] = [s for g in grade_sequence for s in queues[g]]

    def has(self, grade: str) -> bool:
        return bool(self.queues.get(grade))

    def head(self, grade: str) -> SeatingStudent:
        return self.queues[grade][0]

    def pool_head(self) -> SeatingStudent | None:
        return self.pool[0] if self.pool else None

    def remove(self, student: SeatingStudent) -> None:
        queue = self.queues.get(student.grade, [])
        for i, s in enumerate(queue):
            if s.id == student.id:
                del queue[i]
                break
        for i, s in enumerate(self.pool):
            if s.id == student.id:
                del self.pool[i]
                break

    def __len__(self) -> int:
        return len(self.pool)


def build_seat_pool(rooms: Iterable[SeatingRoom]) -> list[Seat]:
    seats: list[Seat] = []
    for room in rooms:
        for row in range(1, room.rows + 1):
            for column in range(1, room.columns + 1):
                seats.append(Seat(room_id=room.id, row=row, column=column))
    return seats


def partition_students(students: Iterable[SeatingStudent], rng: random.Random) -> GradeQueues:
    by_grade: dict[str, list[SeatingStudent]] = defaultdict(list)
    for s in students:
        by_grade[s.grade].append(s)

    # sorted() is stable: equal populations keep first-appearance order.
    grade_sequence = sorted(by_grade.keys(), key=lambda g: len(by_grade[g]), reverse=True)

    queues: dict[str, list[SeatingStudent]] = {}
    for grade in grade_sequence:
        queue = list(by_grade[grade])
        rng.shuffle(queue)
        queues[grade] = queue
    return GradeQueues(grade_sequence, queues)


def find_neighbors(placements: dict[SeatKey, SeatingStudent], seat: Seat, room: SeatingRoom) -> Neighbors:
    def _at(row: int, column: int) -> SeatingStudent | None:
        if row < 1 or column < 1 or row > room.rows or column > room.columns:
            return None
        return placements.get((seat.room_id, row, column))

    return Neighbors(
        left=_at(seat.row, seat.column - 1),
        front=_at(seat.row - 1, seat.column),
        right=_at(seat.row, seat.column + 1),
        back=_at(seat.row + 1, seat.column),
    )


def ideal_grade_index(row: int, column: int, grade_count: int) -> int:
    r0 = row - 1
    c0 = column - 1
    return (c0 + r0 * (grade_count - 1)) % grade_count


def _conflicts(grade: str, *neighbors: SeatingStudent | None) -> bool:
    return any(n is not None and n.grade == grade for n in neighbors)


def _validate_inputs(students: list[SeatingStudent], rooms: list[SeatingRoom]) -> None:
    bad_rooms = [r.id for r in rooms if int(r.rows) < 0 or int(r.columns) < 0]
    if bad_rooms:
        raise SeatingInputError(
            "INVALID_ROOM_DIMENSIONS",
            "Room rows and columns must not be negative.",
            details={"room_ids": bad_rooms},
        )

    seen_rooms: set[str] = set()
    dup_rooms: list[str] = []
    for r in rooms:
        if r.id in seen_rooms:
            dup_rooms.append(r.id)
        seen_rooms.add(r.id)
    if dup_rooms:
        raise SeatingInputError(
            "DUPLICATE_ROOM_ID",
            "Each room may be selected only once per run.",
            details={"room_ids": dup_rooms},
        )

    seen_students: set[str] = set()
    dup_students: list[str] = []
    for s in students:
        if s.id in seen_students:
            dup_students.append(s.id)
        seen_students.add(s.id)
    if dup_students:
        raise SeatingInputError(
            "DUPLICATE_STUDENT_ID",
            "Student ids must be unique within a run.",
            details={"student_ids": dup_students},
        )


def _try_swap(
    *,
    problem: SeatingStudent,
    seat: Seat,
    seat_index: int,
    seats: list[Seat],
    placements: dict[SeatKey, SeatingStudent],
    room_by_id: dict[str, SeatingRoom],
) -> Seat | None:
    """Find an already-placed student who can move into `seat` so `problem` takes their place.

    The current seat is checked against left/front only; the vacated seat against all four sides.
    """

    current = find_neighbors(placements, seat, room_by_id[seat.room_id])
    for other in seats[:seat_index]:
        placed = placements.get(other.key)
        if placed is None or placed.grade == problem.grade:
            continue
        if _conflicts(placed.grade, current.left, current.front):
            continue
        old = find_neighbors(placements, other, room_by_id[other.room_id])
        if _conflicts(problem.grade, old.left, old.front, old.right, old.back):
            continue
        placements[seat.key] = placed
        placements[other.key] = problem
        return other
    return None


def generate_seating(
    students: Iterable[SeatingStudent],
    rooms: Iterable[SeatingRoom],
    *,
    rng: random.Random | None = None,
    seed: int | None = None,
) -> SeatingResult:
    """Assign students to seats so that same-grade students are not seated side by side.

    Seats are visited room by room, row by row, column by column. Each seat tries the
    grade picked by the diagonal interleave, then the other grades by population, then a
    swap with an earlier seat, and finally stays empty as a buffer. Students left over
    when seats run out are returned in `unseated`; that is a normal outcome, not an error.

    Per-grade queues are shuffled with `rng` (or `random.Random(seed)`). With neither
    given the shuffle is non-deterministic, so repeated calls may differ.
    """

    students = list(students)
    rooms = list(rooms)
    _validate_inputs(students, rooms)

    if rng is None:
        rng = random.Random(seed)

    seats = build_seat_pool(rooms)
    stats: dict[str, Any] = {
        "seats_total": len(seats),
        "students_total": len(students),
        "buffer_seats": 0,
        "swaps": 0,
        "grade_sequence": [],
    }
    if seed is not None:
        stats["seed"] = seed

    if not seats or not students:
        logger.info(
            "Seating short-circuit: seats=%d students=%d (nothing to place)",
            len(seats),
            len(students),
        )
        stats.update({"placed": 0, "unseated": len(students)})
        return SeatingResult(placements={}, unseated=list(students), seat_order=seats, stats=stats)

    room_by_id = {r.id: r for r in rooms}
    queues = partition_students(students, rng)
    grade_sequence = queues.grade_sequence
    grade_count = len(grade_sequence)
    stats["grade_sequence"] = list(grade_sequence)

    placements: dict[SeatKey, SeatingStudent] = {}
    seat_index = 0

    while len(queues) > 0 and seat_index < len(seats):
        seat = seats[seat_index]
        near = find_neighbors(placements, seat, room_by_id[seat.room_id])
        ideal = grade_sequence[ideal_grade_index(seat.row, seat.column, grade_count)]

        chosen: SeatingStudent | None = None
        if queues.has(ideal) and not _conflicts(ideal, near.left, near.front):
            chosen = queues.head(ideal)

        if chosen is None:
            for grade in grade_sequence:
                if grade == ideal or not queues.has(grade):
                    continue
                if not _conflicts(grade, near.left, near.front):
                    chosen = queues.head(grade)
                    break

        if chosen is not None:
            placements[seat.key] = chosen
            queues.remove(chosen)
            seat_index += 1
            continue

        problem = queues.pool_head()
        swapped_with = None
        if problem is not None:
            swapped_with = _try_swap(
                problem=problem,
                seat=seat,
                seat_index=seat_index,
                seats=seats,
                placements=placements,
                room_by_id=room_by_id,
            )
        if swapped_with is not None:
            queues.remove(problem)
            stats["swaps"] += 1
            logger.debug(
                "Swap recovery: %s -> %s R%dC%d, displaced student moved to %s R%dC%d",
                problem.id,
                swapped_with.room_id,
                swapped_with.row,
                swapped_with.column,
                seat.room_id,
                seat.row,
                seat.column,
            )
            seat_index += 1
            continue

        logger.debug("Buffer seat left empty at %s R%dC%d", seat.room_id, seat.row, seat.column)
        stats["buffer_seats"] += 1
        seat_index += 1

    unseated = list(queues.pool)
    stats.update({"placed": len(placements), "unseated": len(unseated)})
    logger.info(
        "Seating generated: placed=%d unseated=%d seats=%d buffers=%d swaps=%d grades=%d",
        len(placements),
        len(unseated),
        len(seats),
        stats["buffer_seats"],
        stats["swaps"],
        grade_count,
    )
    return SeatingResult(placements=placements, unseated=unseated, seat_order=seats, stats=stats)
