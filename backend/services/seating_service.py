from __future__ import annotations

import logging
import uuid
from typing import Iterable

from fastapi import HTTPException
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from api.scope import where_school
from models.exam_room import ExamRoom
from models.exam_seating import ExamSeating
from models.student import Student
from solver.seating_generator import SeatingResult, SeatingRoom, SeatingStudent


logger = logging.getLogger(__name__)


def _chunks(items: list, size: int) -> Iterable[list]:
    for i in range(0, len(items), size):
        yield items[i : i + size]


def to_seating_student(student: Student) -> SeatingStudent:
    return SeatingStudent(
        id=str(student.id),
        grade=str(student.grade),
        name=str(student.name or ""),
        section=str(student.section or ""),
        major=str(student.major or ""),
    )


def to_seating_room(room: ExamRoom) -> SeatingRoom:
    return SeatingRoom(id=str(room.id), rows=int(room.rows), columns=int(room.columns))


def select_students(
    db: Session,
    *,
    school_id: str,
    major: str | None,
    class_keys: Iterable[str] = (),
    grades: Iterable[str] = (),
) -> list[Student]:
    """Active students of the school, narrowed to a major and/or "<grade>-<section>" classes.

    `grades` only applies when no class keys are given; explicit classes win.
    """

    q = where_school(select(Student), Student, school_id).where(Student.is_active.is_(True))
    if major:
        q = q.where(Student.major == major)
    students = list(db.execute(q.order_by(Student.name.asc(), Student.id.asc())).scalars().all())

    keys = {k.strip() for k in class_keys if k and k.strip()}
    if keys:
        students = [s for s in students if f"{s.grade}-{s.section}" in keys]
    else:
        grade_set = {g.strip() for g in grades if g and g.strip()}
        if grade_set:
            students = [s for s in students if s.grade in grade_set]
    return students


def select_rooms(db: Session, *, school_id: str, room_ids: list[uuid.UUID]) -> list[ExamRoom]:
    """Rooms in the caller's selection order. Repeated ids are kept (the generator rejects them)."""

    if not room_ids:
        return []
    q = where_school(select(ExamRoom).where(ExamRoom.id.in_(list(dict.fromkeys(room_ids)))), ExamRoom, school_id)
    by_id = {r.id: r for r in db.execute(q).scalars().all()}

    missing = [str(rid) for rid in room_ids if rid not in by_id]
    if missing:
        raise HTTPException(status_code=404, detail={"code": "ROOM_NOT_FOUND", "room_ids": missing})
    return [by_id[rid] for rid in room_ids]


def clear_session_seating(db: Session, *, school_id: str, session_id: uuid.UUID, batch_size: int) -> int:
    """Delete previously stored seats of a session, `batch_size` rows per statement.

    Does not commit; the caller owns the transaction.
    """

    q = where_school(select(ExamSeating.id).where(ExamSeating.session_id == session_id), ExamSeating, school_id)
    ids = list(db.execute(q).scalars().all())
    if not ids:
        return 0

    logger.info("Clearing %d existing seats for session %s", len(ids), str(session_id))
    for chunk in _chunks(ids, batch_size):
        db.execute(delete(ExamSeating).where(ExamSeating.id.in_(chunk)))
        logger.debug("Deleted batch of %d seats", len(chunk))
    return len(ids)


def persist_placements(
    db: Session,
    *,
    school_id: str,
    session_id: uuid.UUID,
    run_id: uuid.UUID | None,
    result: SeatingResult,
    batch_size: int,
) -> int:
    """Write one ExamSeating row per placement, flushing every `batch_size` rows.

    Does not commit; the caller owns the transaction.
    """

    rows = result.placement_rows()
    for chunk in _chunks(rows, batch_size):
        db.add_all(
            [
                ExamSeating(
                    school_id=school_id,
                    session_id=session_id,
                    run_id=run_id,
                    room_id=uuid.UUID(r["room_id"]),
                    student_id=uuid.UUID(r["student_id"]),
                    student_name=r["student_name"],
                    student_grade=r["student_grade"],
                    student_section=r["student_section"],
                    student_major=r["student_major"],
                    seat_row=int(r["row"]),
                    seat_col=int(r["column"]),
                )
                for r in chunk
            ]
        )
        db.flush()
        logger.debug("Wrote batch of %d seats", len(chunk))
    return len(rows)


def list_session_seating(
    db: Session,
    *,
    school_id: str,
    session_id: uuid.UUID,
    major: str | None = None,
) -> list[ExamSeating]:
    q = where_school(select(ExamSeating).where(ExamSeating.session_id == session_id), ExamSeating, school_id)
    if major:
        q = q.where(ExamSeating.student_major == major)
    q = q.order_by(ExamSeating.room_id.asc(), ExamSeating.seat_row.asc(), ExamSeating.seat_col.asc())
    return list(db.execute(q).scalars().all())
