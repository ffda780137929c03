from __future__ import annotations

import logging
import random
import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.exc import OperationalError as SAOperationalError
from sqlalchemy.orm import Session

from api.deps import get_school_id
from api.scope import get_by_id, where_school
from core.config import settings
from core.database import (
    DatabaseUnavailableError,
    get_db,
    is_transient_db_connectivity_error,
    validate_db_connection,
)
from models.exam_session import ExamSession
from models.seating_run import SeatingRun
from schemas.seating import (
    AnalyzeSeatingResponse,
    ExamSeatingOut,
    GenerateSeatingRequest,
    GenerateSeatingResponse,
    ListSeatingRunsResponse,
    ListSessionSeatingResponse,
    SeatingIssue,
    SeatingRunOut,
    SeatingScopeRequest,
)
from services.seating_service import (
    clear_session_seating,
    list_session_seating,
    persist_placements,
    select_rooms,
    select_students,
    to_seating_room,
    to_seating_student,
)
from solver.seating_diagnostics import analyze_seating_capacity, summarize_seating
from solver.seating_generator import SeatingInputError, generate_seating


router = APIRouter()

logger = logging.getLogger(__name__)


def _issues_out(issues: list[dict[str, Any]]) -> list[SeatingIssue]:
    return [
        SeatingIssue(
            type=str(i.get("type")),
            explanation=str(i.get("explanation") or ""),
            details={k: v for k, v in i.items() if k not in {"type", "explanation"}},
        )
        for i in issues
    ]


def _get_session(db: Session, session_id: uuid.UUID, *, school_id: str) -> ExamSession:
    session = get_by_id(db, ExamSession, session_id, school_id)
    if session is None:
        raise HTTPException(status_code=404, detail="SESSION_NOT_FOUND")
    return session


@router.post("/analyze", response_model=AnalyzeSeatingResponse)
def analyze_seating(
    payload: SeatingScopeRequest,
    db: Session = Depends(get_db),
    school_id: str = Depends(get_school_id),
) -> AnalyzeSeatingResponse:
    students = select_students(
        db,
        school_id=school_id,
        major=payload.major,
        class_keys=payload.class_keys,
        grades=payload.grades,
    )
    rooms = select_rooms(db, school_id=school_id, room_ids=payload.room_ids)
    cap = analyze_seating_capacity(
        [to_seating_student(s) for s in students],
        [to_seating_room(r) for r in rooms],
    )
    return AnalyzeSeatingResponse(summary=cap["summary"], issues=_issues_out(cap["issues"]))


@router.post("/generate", response_model=GenerateSeatingResponse)
def generate_session_seating(
    payload: GenerateSeatingRequest,
    db: Session = Depends(get_db),
    school_id: str = Depends(get_school_id),
) -> GenerateSeatingResponse:
    validate_db_connection(db)

    session = _get_session(db, payload.session_id, school_id=school_id)
    major = payload.major if payload.major is not None else session.major
    grades = list(payload.grades or session.grades or [])
    students = select_students(db, school_id=school_id, major=major, class_keys=payload.class_keys, grades=grades)
    rooms = select_rooms(db, school_id=school_id, room_ids=payload.room_ids)

    seed = payload.seed if payload.seed is not None else random.SystemRandom().randrange(2**31)

    run = SeatingRun(
        school_id=school_id,
        session_id=session.id,
        status="CREATED",
        seed=seed,
        parameters={
            "room_ids": [str(r) for r in payload.room_ids],
            "major": major,
            "class_keys": list(payload.class_keys),
            "grades": grades,
            "students_selected": len(students),
        },
    )
    db.add(run)
    db.flush()
    # Keep the run id even if generation crashes later.
    db.commit()
    run_id = run.id

    try:
        seating_students = [to_seating_student(s) for s in students]
        seating_rooms = [to_seating_room(r) for r in rooms]
        cap = analyze_seating_capacity(seating_students, seating_rooms)

        result = generate_seating(seating_students, seating_rooms, rng=random.Random(seed), seed=seed)

        batch_size = settings.seating_write_batch_size
        cleared = clear_session_seating(db, school_id=school_id, session_id=session.id, batch_size=batch_size)
        written = persist_placements(
            db,
            school_id=school_id,
            session_id=session.id,
            run_id=run_id,
            result=result,
            batch_size=batch_size,
        )

        if written == 0:
            status = "EMPTY"
        elif result.unseated:
            status = "PARTIAL"
        else:
            status = "COMPLETE"

        message = summarize_seating(result)
        run.status = status
        run.placed_count = written
        run.unseated_count = len(result.unseated)
        run.notes = message[:500]
        db.commit()

        if result.unseated:
            logger.warning(
                "Session %s: %d students could not be seated (run %s)",
                str(session.id),
                len(result.unseated),
                str(run_id),
            )

        return GenerateSeatingResponse(
            run_id=run_id,
            session_id=session.id,
            status=status,
            seed=seed,
            cleared_count=cleared,
            placed_count=written,
            unseated_count=len(result.unseated),
            unseated_student_ids=[uuid.UUID(sid) for sid in result.unseated_student_ids],
            message=message,
            warnings=_issues_out(cap["issues"]),
            stats=result.stats,
        )

    except SeatingInputError as exc:
        db.rollback()
        _mark_run_failed(db, run_id, notes=f"SeatingInputError({exc.code}): {exc}")
        raise HTTPException(
            status_code=400,
            detail={"code": exc.code, "message": str(exc), "details": exc.details, "run_id": str(run_id)},
        )
    except DatabaseUnavailableError:
        db.rollback()
        raise
    except SAOperationalError as exc:
        db.rollback()
        if is_transient_db_connectivity_error(exc):
            raise DatabaseUnavailableError("Database temporarily unavailable") from exc
        raise
    except IntegrityError as exc:
        db.rollback()
        _mark_run_failed(db, run_id, notes=f"IntegrityError: {exc.orig if getattr(exc, 'orig', None) else exc}")
        raise HTTPException(
            status_code=500,
            detail={
                "code": "SEATING_DB_INTEGRITY_ERROR",
                "message": "Database integrity constraint violated while saving seating results.",
                "run_id": str(run_id),
            },
        )
    except Exception as exc:
        db.rollback()
        _mark_run_failed(db, run_id, notes=f"{type(exc).__name__}: {exc}")
        logger.exception("/api/seating/generate crashed")
        raise HTTPException(
            status_code=500,
            detail={
                "code": "INTERNAL_ERROR",
                "message": "Internal error while generating seating. Check server logs for details.",
                "run_id": str(run_id),
            },
        )


def _mark_run_failed(db: Session, run_id: uuid.UUID, *, notes: str) -> None:
    run = db.get(SeatingRun, run_id)
    if run is None:
        return
    run.status = "ERROR"
    run.notes = notes[:500]
    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Could not mark seating run %s as failed", str(run_id))


@router.get("/sessions/{session_id}", response_model=ListSessionSeatingResponse)
def get_session_seating(
    session_id: uuid.UUID,
    major: str | None = Query(default=None),
    db: Session = Depends(get_db),
    school_id: str = Depends(get_school_id),
) -> ListSessionSeatingResponse:
    _get_session(db, session_id, school_id=school_id)
    seats = list_session_seating(db, school_id=school_id, session_id=session_id, major=major)
    return ListSessionSeatingResponse(
        session_id=session_id,
        seats=[ExamSeatingOut.model_validate(s) for s in seats],
    )


@router.delete("/sessions/{session_id}")
def clear_session(
    session_id: uuid.UUID,
    db: Session = Depends(get_db),
    school_id: str = Depends(get_school_id),
) -> dict:
    _get_session(db, session_id, school_id=school_id)
    cleared = clear_session_seating(
        db,
        school_id=school_id,
        session_id=session_id,
        batch_size=settings.seating_write_batch_size,
    )
    db.commit()
    return {"ok": True, "seats_cleared": cleared}


@router.get("/runs", response_model=ListSeatingRunsResponse)
def list_seating_runs(
    session_id: uuid.UUID | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
    school_id: str = Depends(get_school_id),
) -> ListSeatingRunsResponse:
    q = where_school(select(SeatingRun), SeatingRun, school_id)
    if session_id is not None:
        q = q.where(SeatingRun.session_id == session_id)
    rows = db.execute(q.order_by(SeatingRun.created_at.desc()).limit(limit)).scalars().all()
    return ListSeatingRunsResponse(runs=[SeatingRunOut.model_validate(r) for r in rows])
