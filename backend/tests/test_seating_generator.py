from __future__ import annotations

import random

import pytest

from solver.seating_diagnostics import find_adjacency_violations
from solver.seating_generator import (
    Seat,
    SeatingInputError,
    SeatingRoom,
    SeatingStudent,
    _try_swap,
    build_seat_pool,
    find_neighbors,
    generate_seating,
    ideal_grade_index,
    partition_students,
)


def _roster(*groups: tuple[str, int]) -> list[SeatingStudent]:
    out: list[SeatingStudent] = []
    for grade, count in groups:
        for n in range(1, count + 1):
            out.append(SeatingStudent(id=f"{grade}{n}", grade=grade, name=f"Student {grade}{n}"))
    return out


def _assert_conserved(result, students) -> None:
    placed_ids = [s.id for s in result.placements.values()]
    unseated_ids = result.unseated_student_ids
    assert len(placed_ids) + len(unseated_ids) == len(students)
    assert len(set(placed_ids) | set(unseated_ids)) == len(students)
    assert set(placed_ids) | set(unseated_ids) == {s.id for s in students}


def test_seat_pool_walks_rooms_then_rows_then_columns():
    rooms = [SeatingRoom("R1", 2, 2), SeatingRoom("R2", 1, 3)]

    seats = build_seat_pool(rooms)

    assert [s.key for s in seats] == [
        ("R1", 1, 1),
        ("R1", 1, 2),
        ("R1", 2, 1),
        ("R1", 2, 2),
        ("R2", 1, 1),
        ("R2", 1, 2),
        ("R2", 1, 3),
    ]
    assert len(seats) == sum(r.capacity for r in rooms)


def test_grade_sequence_sorted_by_population_ties_keep_input_order(identity_rng):
    students = [
        SeatingStudent("s1", "B"),
        SeatingStudent("s2", "A"),
        SeatingStudent("s3", "A"),
        SeatingStudent("s4", "C"),
        SeatingStudent("s5", "B"),
    ]

    queues = partition_students(students, identity_rng)

    assert queues.grade_sequence == ["B", "A", "C"]
    assert [s.id for s in queues.pool] == ["s1", "s5", "s2", "s3", "s4"]


def test_removing_a_student_updates_queue_and_pool(identity_rng):
    queues = partition_students(_roster(("A", 2), ("B", 1)), identity_rng)

    queues.remove(SeatingStudent("A1", "A"))

    assert [s.id for s in queues.queues["A"]] == ["A2"]
    assert [s.id for s in queues.pool] == ["A2", "B1"]
    assert len(queues) == 2
    assert queues.pool_head().id == "A2"


def test_each_grade_queue_is_shuffled_independently():
    students = _roster(("A", 20), ("B", 20))

    queues = partition_students(students, random.Random(3))

    assert sorted(s.id for s in queues.queues["A"]) == sorted(s.id for s in students if s.grade == "A")
    assert all(s.grade == "B" for s in queues.queues["B"])
    assert [s.id for s in queues.pool] == [s.id for g in queues.grade_sequence for s in queues.queues[g]]


def test_neighbors_stay_inside_the_room_grid():
    room = SeatingRoom("R1", 2, 2)
    a = SeatingStudent("a", "A")
    b = SeatingStudent("b", "B")
    stray = SeatingStudent("x", "X")
    placements = {
        ("R1", 2, 1): a,
        ("R1", 1, 2): b,
        ("R1", 2, 3): stray,  # outside a 2x2 grid
        ("R2", 2, 2): stray,  # other room
    }

    near = find_neighbors(placements, Seat("R1", 2, 2), room)

    assert near.left is a
    assert near.front is b
    assert near.right is None
    assert near.back is None
    assert find_neighbors(placements, Seat("R1", 1, 1), room) == (None, None, b, a)


def test_ideal_grade_index_stripes_diagonally():
    assert [ideal_grade_index(r, c, 2) for r in (1, 2) for c in (1, 2)] == [0, 1, 1, 0]
    assert [ideal_grade_index(r, c, 3) for r in (1, 2) for c in (1, 2, 3)] == [0, 1, 2, 2, 0, 1]
    assert {ideal_grade_index(r, c, 1) for r in range(1, 4) for c in range(1, 4)} == {0}


def test_two_by_two_with_two_grades_interleaves(identity_rng):
    students = _roster(("A", 2), ("B", 2))

    result = generate_seating(students, [SeatingRoom("R1", 2, 2)], rng=identity_rng)

    grid = {k: s.grade for k, s in result.placements.items()}
    assert grid == {
        ("R1", 1, 1): "A",
        ("R1", 1, 2): "B",
        ("R1", 2, 1): "B",
        ("R1", 2, 2): "A",
    }
    assert result.unseated == []
    _assert_conserved(result, students)


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4, 5])
def test_two_by_two_with_two_grades_any_shuffle(seed):
    students = _roster(("A", 2), ("B", 2))

    result = generate_seating(students, [SeatingRoom("R1", 2, 2)], seed=seed)

    assert result.placed_count == 4
    assert result.unseated_student_ids == []
    assert find_adjacency_violations(result.placements) == []


def test_single_grade_fills_only_the_diagonal(identity_rng):
    students = _roster(("A", 4))

    result = generate_seating(students, [SeatingRoom("R1", 2, 2)], rng=identity_rng)

    assert set(result.placements) == {("R1", 1, 1), ("R1", 2, 2)}
    assert len(result.unseated) == 2
    assert result.stats["buffer_seats"] == 2
    assert result.stats["swaps"] == 0
    _assert_conserved(result, students)


def test_more_students_than_seats_reports_leftovers():
    students = _roster(("A", 1), ("B", 1), ("C", 1))

    result = generate_seating(students, [SeatingRoom("R1", 1, 1)], seed=11)

    assert result.placed_count == 1
    assert len(result.unseated) == 2
    _assert_conserved(result, students)


def test_swap_recovery_moves_a_seated_student_to_free_a_seat(identity_rng):
    students = _roster(("A", 3), ("B", 1), ("C", 1))
    rooms = [SeatingRoom("R1", 1, 3), SeatingRoom("R2", 1, 2)]

    result = generate_seating(students, rooms, rng=identity_rng)

    assert result.stats["swaps"] == 1
    assert result.placements[("R1", 1, 3)].id == "A3"
    assert result.placements[("R2", 1, 2)].id == "C1"
    assert result.unseated == []
    assert find_adjacency_violations(result.placements, ("left", "front", "right", "back")) == []
    _assert_conserved(result, students)


def test_swap_checks_all_four_sides_of_the_vacated_seat():
    rooms = [SeatingRoom("R1", 2, 2), SeatingRoom("R2", 1, 2)]
    seats = build_seat_pool(rooms)
    b1, a1, c1, b2, a2 = (
        SeatingStudent("B1", "B"),
        SeatingStudent("A1", "A"),
        SeatingStudent("C1", "C"),
        SeatingStudent("B2", "B"),
        SeatingStudent("A2", "A"),
    )
    placements = {
        ("R1", 1, 1): b1,
        ("R1", 1, 2): a1,
        ("R1", 2, 1): c1,
        ("R1", 2, 2): b2,
        ("R2", 1, 1): a2,
    }
    problem = SeatingStudent("A3", "A")
    seat = Seat("R2", 1, 2)

    moved = _try_swap(
        problem=problem,
        seat=seat,
        seat_index=seats.index(seat),
        seats=seats,
        placements=placements,
        room_by_id={r.id: r for r in rooms},
    )

    # R1(1,1) clears its left and front but has A1 to its right, so it is skipped.
    assert moved == Seat("R1", 2, 1)
    assert placements[("R1", 2, 1)] is problem
    assert placements[("R2", 1, 2)] is c1
    assert placements[("R1", 1, 1)] is b1


def test_full_checkerboard_has_no_adjacent_same_grade():
    students = _roster(("A", 8), ("B", 8))

    for seed in range(10):
        result = generate_seating(students, [SeatingRoom("R1", 4, 4)], seed=seed)
        assert result.placed_count == 16
        assert find_adjacency_violations(result.placements) == []


def test_random_rosters_keep_conservation_capacity_and_separation():
    rng = random.Random(2024)
    for _ in range(40):
        rooms = [
            SeatingRoom(f"R{i}", rng.randint(0, 5), rng.randint(0, 6))
            for i in range(rng.randint(1, 3))
        ]
        grades = [(g, rng.randint(0, 12)) for g in "ABCD"[: rng.randint(1, 4)]]
        students = _roster(*grades)

        result = generate_seating(students, rooms, seed=rng.randint(0, 10_000))

        _assert_conserved(result, students)
        assert result.placed_count <= sum(r.capacity for r in rooms)
        assert len(set(result.placements)) == result.placed_count
        assert find_adjacency_violations(result.placements) == []


def test_identity_shuffle_is_deterministic(identity_rng):
    students = _roster(("A", 7), ("B", 5), ("C", 4))
    rooms = [SeatingRoom("R1", 3, 4), SeatingRoom("R2", 2, 3)]

    first = generate_seating(students, rooms, rng=identity_rng)
    second = generate_seating(students, rooms, rng=identity_rng)

    assert first.placement_rows() == second.placement_rows()
    assert first.unseated_student_ids == second.unseated_student_ids


def test_same_seed_same_plan():
    students = _roster(("A", 9), ("B", 9), ("C", 3))
    rooms = [SeatingRoom("R1", 4, 5)]

    assert (
        generate_seating(students, rooms, seed=42).placement_rows()
        == generate_seating(students, rooms, seed=42).placement_rows()
    )


def test_placement_rows_carry_descriptive_fields(identity_rng):
    student = SeatingStudent("s1", "Grade 9", name="Lina", section="B", major="Science", extra={"roll_no": "17"})

    rows = generate_seating([student], [SeatingRoom("R1", 1, 2)], rng=identity_rng).placement_rows()

    assert rows == [
        {
            "roll_no": "17",
            "room_id": "R1",
            "row": 1,
            "column": 1,
            "student_id": "s1",
            "student_name": "Lina",
            "student_grade": "Grade 9",
            "student_section": "B",
            "student_major": "Science",
        }
    ]


@pytest.mark.parametrize(
    "rooms",
    [[], [SeatingRoom("R1", 0, 5)], [SeatingRoom("R1", 3, 0), SeatingRoom("R2", 0, 0)]],
)
def test_no_seats_short_circuits_with_everyone_unseated(rooms):
    students = _roster(("A", 2), ("B", 1))

    result = generate_seating(students, rooms, seed=1)

    assert result.placements == {}
    assert [s.id for s in result.unseated] == ["A1", "A2", "B1"]


def test_empty_roster_places_nobody():
    result = generate_seating([], [SeatingRoom("R1", 2, 2)], seed=1)

    assert result.placements == {}
    assert result.unseated == []
    assert result.stats["seats_total"] == 4


def test_negative_dimensions_fail_fast():
    with pytest.raises(SeatingInputError) as exc_info:
        generate_seating(_roster(("A", 1)), [SeatingRoom("R1", -1, 3)])

    assert exc_info.value.code == "INVALID_ROOM_DIMENSIONS"
    assert exc_info.value.details == {"room_ids": ["R1"]}


def test_duplicate_student_ids_fail_fast():
    students = [SeatingStudent("s1", "A"), SeatingStudent("s1", "B")]

    with pytest.raises(SeatingInputError) as exc_info:
        generate_seating(students, [SeatingRoom("R1", 2, 2)])

    assert exc_info.value.code == "DUPLICATE_STUDENT_ID"


def test_duplicate_room_ids_fail_fast():
    with pytest.raises(SeatingInputError) as exc_info:
        generate_seating(_roster(("A", 1)), [SeatingRoom("R1", 2, 2), SeatingRoom("R1", 1, 1)])

    assert exc_info.value.code == "DUPLICATE_ROOM_ID"
